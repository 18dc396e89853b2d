"""Scenario validator.

Validates step descriptors before a group is registered.
"""

from collections.abc import Mapping

from ..config import FalsyGating, parse_gating
from .schema import (
    ActionStep,
    QueryStep,
    ScenarioGroup,
    Step,
    ValidationError,
    ValidationResult,
)


def validate_steps(
    steps: list[Step],
    falsy_gating: FalsyGating = FalsyGating.ERRORS,
) -> ValidationResult:
    """Validate a list of step descriptors.

    Checks:
    - Step type, non-empty unique names
    - Query text, dynamic input and handler types
    - Handlers that can never run under the given falsy gating

    Args:
        steps: Steps in run order.
        falsy_gating: Gating the group will run with.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []
    seen: set[str] = set()

    for i, step in enumerate(steps):
        path = f"steps[{i}]"

        if not isinstance(step, (QueryStep, ActionStep)):
            errors.append(ValidationError(
                path=path,
                message=f"Unsupported step type '{type(step).__name__}'.",
            ))
            continue

        if not isinstance(step.name, str) or not step.name.strip():
            errors.append(ValidationError(
                path=f"{path}.name",
                message="Step 'name' is required and must not be empty.",
            ))
        elif step.name in seen:
            warnings.append(ValidationError(
                path=f"{path}.name",
                message=f"Duplicate step name '{step.name}'.",
                severity="warning",
            ))
        else:
            seen.add(step.name)

        if isinstance(step, ActionStep):
            if not callable(step.test):
                errors.append(ValidationError(
                    path=f"{path}.test",
                    message="Action step 'test' must be callable.",
                ))
            continue

        _validate_query(step, path, falsy_gating, errors, warnings)

    if not steps:
        warnings.append(ValidationError(
            path="steps",
            message="No steps defined.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def validate_group(group: ScenarioGroup) -> ValidationResult:
    """Validate a parsed ScenarioGroup, honoring its configured gating."""
    gating = group.config.get("falsy_gating", FalsyGating.ERRORS)
    try:
        gating = parse_gating(gating)
    except ValueError as e:
        return ValidationResult(valid=False, errors=[ValidationError(
            path="config.falsy_gating",
            message=str(e),
        )])
    return validate_steps(group.steps, gating)


def _validate_query(
    step: QueryStep,
    path: str,
    falsy_gating: FalsyGating,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate a query step's fields."""
    if not isinstance(step.query, str) or not step.query.strip():
        errors.append(ValidationError(
            path=f"{path}.query",
            message="'query' must be a non-empty string.",
        ))

    for field_name in ("before_request", "payload"):
        value = getattr(step, field_name)
        if value is not None and not isinstance(value, Mapping) and not callable(value):
            errors.append(ValidationError(
                path=f"{path}.{field_name}",
                message=f"'{field_name}' must be a mapping or a callable.",
            ))

    for field_name in ("test_response", "test_error", "test_falsy"):
        value = getattr(step, field_name)
        if value is not None and not callable(value):
            errors.append(ValidationError(
                path=f"{path}.{field_name}",
                message=f"'{field_name}' must be callable.",
            ))

    if not isinstance(step.with_auth, bool):
        errors.append(ValidationError(
            path=f"{path}.with_auth",
            message="'with_auth' must be a boolean.",
        ))

    if (
        falsy_gating is FalsyGating.ERRORS
        and step.test_falsy is not None
        and step.test_error is None
    ):
        warnings.append(ValidationError(
            path=f"{path}.test_falsy",
            message=(
                "'test_falsy' is only called when the response has errors, which "
                "fail this step since it has no 'test_error'; it will only disable "
                "the falsy check. Add 'test_error' or use falsy_gating 'json'."
            ),
            severity="warning",
        ))
