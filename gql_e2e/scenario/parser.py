"""YAML scenario parser.

Parses YAML scenario files into a ScenarioGroup of QueryStep / ActionStep
descriptors. Static values in the file become callables that substitute
``${expr}`` placeholders from the variable store at run time.
"""

import re
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from ..errors import StepAssertionError
from ..utils import is_falsy, lookup_path
from .schema import ActionStep, QueryStep, ScenarioGroup, StepResult


EXPECT_SUCCESS = "success"
EXPECT_ERROR = "error"
EXPECT_FALSY = "falsy"
VALID_EXPECTS = {EXPECT_SUCCESS, EXPECT_ERROR, EXPECT_FALSY}

QUERY_FIELDS = {
    "name", "query", "payload", "before_request", "with_auth",
    "expect", "error_contains", "save",
}
ACTION_FIELDS = {"name", "set"}
GROUP_FIELDS = {"name", "config", "variables", "steps"}

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def parse_scenario(file_path: Union[str, Path]) -> ScenarioGroup:
    """Parse a YAML scenario file into a ScenarioGroup.

    Args:
        file_path: Path to the YAML scenario file.

    Returns:
        Parsed ScenarioGroup.

    Raises:
        FileNotFoundError: If the scenario file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty scenario file: {file_path}")

    return parse_scenario_data(data, source=str(file_path))


def parse_scenario_data(data: Any, source: str = "<inline>") -> ScenarioGroup:
    """Parse a scenario group from already loaded YAML.

    Args:
        data: Mapping with ``name``, ``steps`` and optional ``config`` and
            ``variables``.
        source: Source identifier for error messages.

    Returns:
        Parsed ScenarioGroup.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Scenario must be a YAML mapping, got {type(data).__name__}")

    _reject_unknown(data, GROUP_FIELDS, "scenario", source)
    _require_fields(data, ["name", "steps"], "scenario", source)

    config = data.get("config") or {}
    if not isinstance(config, dict):
        raise ValueError(f"'config' must be a mapping in {source}")

    variables = data.get("variables") or {}
    if not isinstance(variables, dict):
        raise ValueError(f"'variables' must be a mapping in {source}")

    steps_data = data["steps"]
    if not isinstance(steps_data, list):
        raise ValueError(f"'steps' must be a list in {source}")

    steps = []
    for i, step_data in enumerate(steps_data):
        context = f"steps[{i}]"
        if not isinstance(step_data, dict):
            raise ValueError(f"Step {i} must be a mapping in {source}")
        _require_fields(step_data, ["name"], context, source)

        if "set" in step_data and "query" not in step_data:
            steps.append(_parse_action(step_data, context, source))
        else:
            steps.append(_parse_query(step_data, context, source))

    return ScenarioGroup(
        name=str(data["name"]),
        steps=steps,
        variables=variables,
        config=config,
    )


def substitute(value: Any, variables: Mapping[str, Any]) -> Any:
    """Replace ``${expr}`` placeholders with values from ``variables``.

    A string that is exactly one placeholder takes the variable's value
    (keeping its type); placeholders embedded in longer strings are
    rendered with ``str``. Missing variables render as None / "".
    """
    if isinstance(value, str):
        whole = _PLACEHOLDER.fullmatch(value)
        if whole:
            return lookup_path(variables, whole.group(1))

        def replace(match):
            resolved = lookup_path(variables, match.group(1))
            return "" if resolved is None else str(resolved)

        return _PLACEHOLDER.sub(replace, value)
    if isinstance(value, dict):
        return {k: substitute(v, variables) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute(item, variables) for item in value]
    return value


def evaluate_saves(save: Any, result: StepResult) -> Any:
    """Resolve ``save`` expressions against a step result.

    Expressions are paths rooted at ``json``, ``data``, ``errors`` or
    ``variables``; nested mappings produce nested values.
    """
    if isinstance(save, dict):
        return {k: evaluate_saves(v, result) for k, v in save.items()}
    if isinstance(save, str):
        root = {
            "json": result.json,
            "data": result.data,
            "errors": result.errors,
            "variables": result.variables,
        }
        return lookup_path(root, save)
    return save


def _parse_action(step_data: dict, context: str, source: str) -> ActionStep:
    _reject_unknown(step_data, ACTION_FIELDS, context, source)
    values = step_data["set"]
    if not isinstance(values, dict):
        raise ValueError(f"'set' must be a mapping in {context} ({source})")

    def set_variables(toolkit):
        return substitute(values, toolkit.variables)

    return ActionStep(name=str(step_data["name"]), test=set_variables)


def _parse_query(step_data: dict, context: str, source: str) -> QueryStep:
    _reject_unknown(step_data, QUERY_FIELDS, context, source)
    _require_fields(step_data, ["query"], context, source)

    name = str(step_data["name"])
    query = step_data["query"]
    if not isinstance(query, str) or not query.strip():
        raise ValueError(f"'query' must be a non-empty string in {context} ({source})")

    for key in ("payload", "before_request", "save"):
        if key in step_data and not isinstance(step_data[key], dict):
            raise ValueError(f"'{key}' must be a mapping in {context} ({source})")

    expect = str(step_data.get("expect", EXPECT_SUCCESS)).lower()
    if expect not in VALID_EXPECTS:
        raise ValueError(
            f"Invalid expect '{expect}' in {context} ({source}). "
            f"Must be one of: {', '.join(sorted(VALID_EXPECTS))}"
        )

    error_contains = step_data.get("error_contains")
    if error_contains is not None and expect != EXPECT_ERROR:
        raise ValueError(
            f"'error_contains' requires 'expect: error' in {context} ({source})"
        )

    with_auth = step_data.get("with_auth", False)
    if not isinstance(with_auth, bool):
        raise ValueError(f"'with_auth' must be a boolean in {context} ({source})")

    step = QueryStep(name=name, query=query, with_auth=with_auth)

    if "payload" in step_data:
        payload = step_data["payload"]
        step.payload = lambda variables: substitute(payload, variables)

    if "before_request" in step_data:
        before = step_data["before_request"]
        step.before_request = lambda variables, ctx: substitute(before, variables)

    if expect == EXPECT_ERROR:
        step.test_error = _error_check(name, error_contains)
        step.test_falsy = _ignore
    elif expect == EXPECT_FALSY:
        step.test_falsy = _ignore

    step.test_response = _response_check(name, expect, step_data.get("save"))
    return step


def _error_check(name: str, error_contains: Any):
    def test_error(result: StepResult) -> None:
        if error_contains is None:
            return None
        messages = [_error_message(e) for e in _as_list(result.errors)]
        if not any(str(error_contains) in m for m in messages):
            raise StepAssertionError(
                name, f"No error message contains {error_contains!r}: {messages}"
            )
        return None

    return test_error


def _response_check(name: str, expect: str, save: Any):
    def test_response(result: StepResult) -> Any:
        if expect == EXPECT_ERROR and not result.has_errors:
            raise StepAssertionError(name, "Expected errors but the response had none.")
        if expect == EXPECT_FALSY and not is_falsy(result.json):
            raise StepAssertionError(name, f"Expected a falsy result, got {result.json!r}.")
        if save:
            return evaluate_saves(save, result)
        return None

    return test_response


def _ignore(result: StepResult) -> None:
    return None


def _error_message(error: Any) -> str:
    if isinstance(error, Mapping):
        return str(error.get("message", error))
    return str(error)


def _as_list(errors: Any) -> list:
    if errors is None:
        return []
    if isinstance(errors, list):
        return errors
    return [errors]


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )


def _reject_unknown(data: dict, allowed: set[str], context: str, source: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(
            f"Unknown field(s) {', '.join(unknown)} in {context} ({source})"
        )
