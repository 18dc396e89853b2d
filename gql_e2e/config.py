"""Run configuration for scenario groups.

Values come from (in increasing priority) the dataclass defaults, an
optional YAML config file, and ``GQL_E2E_*`` environment variables.
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

import yaml


DEFAULT_ENDPOINT = "http://localhost:3000/api/graphql"


class FalsyGating(str, Enum):
    """When a step's ``test_falsy`` handler is invoked."""
    ERRORS = "errors"  # only when the response has errors
    JSON = "json"  # only when the extracted result is falsy


@dataclass
class RunConfig:
    """Configuration for one scenario group run."""
    endpoint: str = DEFAULT_ENDPOINT
    headers: dict[str, str] = field(default_factory=dict)
    request_timeout: float = 30.0
    max_retries: int = 0
    falsy_gating: FalsyGating = FalsyGating.ERRORS
    verbose: bool = False
    check_on_connect: bool = False
    session_header: str = "Authorization"
    session_scheme: str = "Bearer"
    session_item_header: str = "X-Session-Item-Id"
    initial_variables: dict[str, Any] = field(default_factory=dict)
    environment_factory: Optional[Callable[["RunConfig"], Any]] = None

    def __post_init__(self):
        if not isinstance(self.falsy_gating, FalsyGating):
            self.falsy_gating = parse_gating(self.falsy_gating)
        self.request_timeout = _as_number(self.request_timeout, float, "request_timeout")
        self.max_retries = _as_number(self.max_retries, int, "max_retries")
        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be positive, got {self.request_timeout}."
            )
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}.")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        """Build a config from a mapping of field names.

        Raises:
            ValueError: If the mapping contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def coerce(cls, value: Union["RunConfig", Mapping[str, Any], None]) -> "RunConfig":
        """Accept a RunConfig, a mapping of fields, or None (defaults + env)."""
        if isinstance(value, RunConfig):
            return value
        if value is None:
            return load_config()
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        raise TypeError(
            f"config must be a RunConfig or a mapping, got {type(value).__name__}"
        )


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    defaults: Optional[Mapping[str, Any]] = None,
    **overrides: Any,
) -> RunConfig:
    """Load run configuration from a YAML file and environment variables.

    Priority, lowest first: ``defaults``, the file, the environment,
    ``overrides``.

    Args:
        path: Optional YAML file holding a mapping of RunConfig fields.
        env: Environment mapping (defaults to ``os.environ``).
        defaults: Field values applied before the file (e.g. from a scenario).
        **overrides: Field values applied last.

    Returns:
        The resolved RunConfig.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        ValueError: If the file or an environment variable is malformed.
    """
    env = os.environ if env is None else env
    data: dict[str, Any] = dict(defaults or {})

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file must hold a mapping: {path}")
            data.update(loaded)

    env_data = _from_env(env)
    if "headers" in env_data:
        env_data["headers"] = {**(data.get("headers") or {}), **env_data["headers"]}
    data.update(env_data)
    data.update(overrides)
    return RunConfig.from_dict(data)


def _from_env(env: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}

    if env.get("GQL_E2E_ENDPOINT"):
        data["endpoint"] = env["GQL_E2E_ENDPOINT"].strip()

    if env.get("GQL_E2E_TIMEOUT"):
        try:
            data["request_timeout"] = float(env["GQL_E2E_TIMEOUT"])
        except ValueError:
            raise ValueError(
                f"GQL_E2E_TIMEOUT must be a number, got {env['GQL_E2E_TIMEOUT']!r}"
            ) from None

    if env.get("GQL_E2E_RETRIES"):
        try:
            data["max_retries"] = int(env["GQL_E2E_RETRIES"])
        except ValueError:
            raise ValueError(
                f"GQL_E2E_RETRIES must be an integer, got {env['GQL_E2E_RETRIES']!r}"
            ) from None

    if env.get("GQL_E2E_FALSY_GATING"):
        data["falsy_gating"] = parse_gating(env["GQL_E2E_FALSY_GATING"])

    if env.get("GQL_E2E_VERBOSE"):
        data["verbose"] = env["GQL_E2E_VERBOSE"].strip().lower() in ("1", "true", "yes", "on")

    if env.get("GQL_E2E_TOKEN"):
        data["headers"] = {"Authorization": f"Bearer {env['GQL_E2E_TOKEN'].strip()}"}

    return data


def parse_gating(value: Any) -> FalsyGating:
    """Parse a gating name, case-insensitively."""
    if isinstance(value, FalsyGating):
        return value
    try:
        return FalsyGating(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(g.value for g in FalsyGating)
        raise ValueError(
            f"Invalid falsy gating '{value}'. Must be one of: {valid}"
        ) from None


def _as_number(value: Any, kind: type, name: str) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        number = kind(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if isinstance(value, float) and number != value:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return number
