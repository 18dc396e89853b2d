"""Request dispatch through the execution context."""

from typing import Any, Mapping, Optional

from ..scenario.schema import RawResponse, StepResult, Variables
from ..utils import maybe_await


def extract_json(data: Any) -> Any:
    """Return the first top-level value of ``data``, or None.

    ``data = {"widget": {"id": 7}}`` gives ``{"id": 7}``. Order is whatever
    the response mapping enumerates, conventionally the single root field
    of the query.
    """
    if not data or not isinstance(data, Mapping):
        return None
    return next(iter(data.values()))


def to_raw_response(value: Any) -> RawResponse:
    """Coerce a dispatch result into a RawResponse."""
    if isinstance(value, RawResponse):
        return value
    if isinstance(value, Mapping):
        return RawResponse.from_dict(value)
    raise TypeError(
        f"Execution context returned {type(value).__name__}, expected a response mapping"
    )


class RequestDispatcher:
    """Issues exactly one request per query step.

    There is no retry or timeout handling here; faults raised by the
    context propagate to the caller.
    """

    def __init__(self, context: Any):
        self.context = context

    async def dispatch(
        self,
        query: str,
        payload: Variables,
        credential: Optional[Any],
        variables: Variables,
    ) -> StepResult:
        """Send ``query`` with ``payload`` and build the step result.

        Args:
            query: Query document, forwarded verbatim.
            payload: Resolved request variables.
            credential: Session credential, or None for an anonymous call.
            variables: Live store mapping exposed to the handlers.

        Returns:
            StepResult for the outcome handlers.
        """
        scoped = self.context.with_session(credential)
        raw = to_raw_response(
            await maybe_await(scoped.dispatch(query=query, variables=payload))
        )

        return StepResult(
            json=extract_json(raw.data),
            variables=variables,
            context=self.context,
            data=raw.data,
            errors=raw.errors,
        )
