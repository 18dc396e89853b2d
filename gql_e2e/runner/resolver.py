"""Resolution of a query step's dynamic inputs.

``before_request`` and ``payload`` may each be absent, a static mapping, or
a callable (sync or async) of the current variables. Both forms go through
``resolve_input`` so the rest of the runner only sees plain mappings.
"""

from typing import Any, Optional

from ..scenario.schema import QueryStep, Variables
from ..scenario.variables import VariableStore
from ..utils import maybe_await


async def resolve_input(value: Any, *args: Any) -> Any:
    """Normalize a static-or-computed input to its value.

    Args:
        value: None, a static value, or a callable.
        *args: Arguments passed when ``value`` is callable.

    Returns:
        The static value, or the (awaited) return value of the callable.
    """
    if value is None:
        return None
    if callable(value):
        value = value(*args)
    return await maybe_await(value)


class InputResolver:
    """Resolves before_request, payload and credential for a query step."""

    def __init__(self, store: VariableStore, context: Any):
        self.store = store
        self.context = context

    async def before_request(self, step: QueryStep) -> None:
        """Run the pre-request hook and merge its result into the store."""
        updates = await resolve_input(
            step.before_request, self.store.get_all(), self.context
        )
        self.store.merge(updates, step=step.name, source="before_request")

    async def payload(self, step: QueryStep) -> Variables:
        """Resolve the request variables; absent or None yields ``{}``."""
        payload = await resolve_input(step.payload, self.store.get_all())
        if payload is None:
            return {}
        return payload

    def credential(self, step: QueryStep) -> Optional[Any]:
        """Return the session credential when the step opts into auth."""
        if not step.with_auth:
            return None
        return self.store.session or None
