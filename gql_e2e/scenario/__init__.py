"""Scenario module - step descriptors, variable store and YAML scenarios."""

from .schema import (
    ActionStep,
    QueryStep,
    RawResponse,
    ScenarioGroup,
    Session,
    StepResult,
    StepType,
    Toolkit,
    ValidationError,
    ValidationResult,
    action,
    custom,
    query,
)
from .parser import parse_scenario, parse_scenario_data, substitute
from .validator import validate_group, validate_steps
from .variables import MergeRecord, VariableStore

__all__ = [
    "ActionStep",
    "MergeRecord",
    "QueryStep",
    "RawResponse",
    "ScenarioGroup",
    "Session",
    "StepResult",
    "StepType",
    "Toolkit",
    "ValidationError",
    "ValidationResult",
    "VariableStore",
    "action",
    "custom",
    "parse_scenario",
    "parse_scenario_data",
    "query",
    "substitute",
    "validate_group",
    "validate_steps",
]
