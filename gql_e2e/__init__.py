"""gql-e2e - declarative end-to-end scenarios for GraphQL APIs.

    from gql_e2e import query, action, run

    run("Users", {"endpoint": "http://localhost:3000/api/graphql"}, [
        query("create", query=CREATE_USER, test_response=lambda r: {"id": r.json["id"]}),
        query("read", query=READ_USER, payload=lambda v: {"id": v["id"]}),
    ])
"""

from .config import FalsyGating, RunConfig, load_config
from .errors import (
    GroupStateError,
    StepAssertionError,
    UnexpectedErrorsError,
    UnexpectedFalsyError,
)
from .runner import (
    GroupResult,
    GroupRunner,
    GroupState,
    PytestRegistrar,
    SequentialRegistrar,
    run,
)
from .scenario import (
    ActionStep,
    QueryStep,
    RawResponse,
    Session,
    StepResult,
    Toolkit,
    VariableStore,
    action,
    custom,
    parse_scenario,
    query,
)

__version__ = "0.1.0"

__all__ = [
    "ActionStep",
    "FalsyGating",
    "GroupResult",
    "GroupRunner",
    "GroupState",
    "GroupStateError",
    "PytestRegistrar",
    "QueryStep",
    "RawResponse",
    "RunConfig",
    "SequentialRegistrar",
    "Session",
    "StepAssertionError",
    "StepResult",
    "Toolkit",
    "UnexpectedErrorsError",
    "UnexpectedFalsyError",
    "VariableStore",
    "action",
    "custom",
    "load_config",
    "parse_scenario",
    "query",
    "run",
]
