"""Scenario data models.

Defines the step descriptors a scenario group is made of, the raw and
derived response shapes, and the static validation result types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union


Variables = dict[str, Any]
VariableUpdates = Optional[Mapping[str, Any]]

# A static mapping, or a callable producing one (sync or async).
DynamicInput = Union[
    Mapping[str, Any],
    Callable[..., Union[VariableUpdates, Awaitable[VariableUpdates]]],
]
Handler = Callable[["StepResult"], Union[VariableUpdates, Awaitable[VariableUpdates]]]


class StepType(str, Enum):
    """Supported step types."""
    QUERY = "query"
    ACTION = "action"


@dataclass
class Session:
    """Authentication credential stored under the ``session`` variable."""
    item_id: str
    data: Any = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["Session"]:
        """Coerce a ``session`` variable into a Session (None stays None)."""
        if value is None or isinstance(value, Session):
            return value
        if isinstance(value, Mapping):
            item_id = value.get("itemId", value.get("item_id"))
            if item_id is None:
                raise ValueError("Session mapping requires 'itemId'.")
            return cls(item_id=str(item_id), data=value.get("data"))
        raise TypeError(f"Unsupported session value: {type(value).__name__}")


@dataclass
class QueryStep:
    """A step that dispatches one query and validates its outcome.

    ``before_request`` is called as ``before_request(variables, context)``
    and ``payload`` as ``payload(variables)``; both may also be static
    mappings. The three handlers receive a StepResult and may return
    variable updates.
    """
    name: str
    query: str
    before_request: Optional[DynamicInput] = None
    payload: Optional[DynamicInput] = None
    test_response: Optional[Handler] = None
    test_error: Optional[Handler] = None
    test_falsy: Optional[Handler] = None
    with_auth: bool = False

    @property
    def type(self) -> StepType:
        return StepType.QUERY


@dataclass
class ActionStep:
    """A step that runs an arbitrary function against the toolkit."""
    name: str
    test: Callable[["Toolkit"], Union[VariableUpdates, Awaitable[VariableUpdates]]]

    @property
    def type(self) -> StepType:
        return StepType.ACTION


Step = Union[QueryStep, ActionStep]


def query(name: str, descriptor: Optional[Mapping[str, Any]] = None, **fields: Any) -> QueryStep:
    """Tag a query descriptor with a display name.

    Fields may be passed as a mapping, as keyword arguments, or both. The
    ``name`` argument overrides a name given in the mapping.
    """
    values = dict(descriptor or {})
    values.update(fields)
    values.pop("name", None)
    return QueryStep(name=name, **values)


def action(name: str, fn: Callable[["Toolkit"], Any]) -> ActionStep:
    """Tag an arbitrary function as a named step."""
    return ActionStep(name=name, test=fn)


custom = action


@dataclass
class RawResponse:
    """Structured response returned by the execution context."""
    data: Any = None
    errors: Any = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @classmethod
    def from_dict(cls, body: Mapping[str, Any]) -> "RawResponse":
        return cls(data=body.get("data"), errors=body.get("errors"))


@dataclass
class StepResult:
    """View of one dispatched query handed to the outcome handlers."""
    json: Any
    variables: Variables
    context: Any
    data: Any = None
    errors: Any = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class Toolkit:
    """Handle passed to action steps."""
    context: Any
    environment: Any
    config: Any
    variables: Variables


@dataclass
class ScenarioGroup:
    """A named, ordered list of steps loaded from a scenario file."""
    name: str
    steps: list[Step] = field(default_factory=list)
    variables: Variables = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def total_steps(self) -> int:
        return len(self.steps)


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of scenario validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
