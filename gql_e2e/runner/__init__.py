"""Runner module - scenario group orchestration."""

from .dispatcher import RequestDispatcher, extract_json
from .executor import GroupRunner, GroupState
from .registration import PytestRegistrar, Registrar, SequentialRegistrar, run
from .resolver import InputResolver, resolve_input
from .result_collector import GroupResult, StepOutcome

__all__ = [
    "GroupResult",
    "GroupRunner",
    "GroupState",
    "InputResolver",
    "PytestRegistrar",
    "Registrar",
    "RequestDispatcher",
    "SequentialRegistrar",
    "StepOutcome",
    "extract_json",
    "resolve_input",
    "run",
]
