"""Fake execution context and environment used across the tests."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from gql_e2e.config import RunConfig


@dataclass
class DispatchCall:
    query: str
    variables: dict
    credential: Any


class FakeScope:
    def __init__(self, context: "FakeContext", credential: Any):
        self.context = context
        self.credential = credential

    def dispatch(self, query, variables):
        self.context.calls.append(DispatchCall(query, dict(variables), self.credential))
        response = self.context.next_response(query, variables, self.credential)
        if self.context.async_dispatch:
            async def _later():
                return response
            return _later()
        return response


class FakeContext:
    """Execution context returning canned responses and recording calls."""

    def __init__(
        self,
        responses: Optional[list] = None,
        responder: Optional[Callable[..., Any]] = None,
        async_dispatch: bool = False,
    ):
        self.responses = list(responses or [])
        self.responder = responder
        self.async_dispatch = async_dispatch
        self.calls: list[DispatchCall] = []
        self.sessions: list[Any] = []

    def with_session(self, credential):
        self.sessions.append(credential)
        return FakeScope(self, credential)

    def next_response(self, query, variables, credential):
        if self.responder is not None:
            return self.responder(query, variables, credential)
        if self.responses:
            return self.responses.pop(0)
        return {"data": {"ok": True}}


class FakeEnvironment:
    """Execution environment recording its lifecycle calls."""

    def __init__(self, context: Optional[FakeContext] = None, fail_on: Optional[str] = None):
        self.context = context or FakeContext()
        self.fail_on = fail_on
        self.events: list[str] = []

    def _record(self, event: str) -> None:
        self.events.append(event)
        if self.fail_on == event:
            raise ConnectionError(f"{event} failed")

    def setup(self):
        self._record("setup")
        return self.context

    async def connect(self):
        self._record("connect")

    def disconnect(self):
        self._record("disconnect")


def config_for(environment: FakeEnvironment, **kwargs) -> RunConfig:
    """RunConfig wired to a fake environment."""
    return RunConfig(environment_factory=lambda config: environment, **kwargs)
