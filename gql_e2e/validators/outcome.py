"""Outcome validation for query steps.

After dispatch, three channels are checked in a fixed order:

1. errors   - fail unless ``test_error`` is given; it runs only on errors.
2. falsy    - fail on a falsy result unless ``test_falsy`` is given; when
              it runs depends on the configured FalsyGating.
3. response - ``test_response`` always runs when given.

Updates returned by each handler are merged into the store before the next
handler is invoked.
"""

import json
import sys

from ..config import FalsyGating
from ..errors import UnexpectedErrorsError, UnexpectedFalsyError
from ..scenario.schema import Handler, QueryStep, StepResult
from ..scenario.variables import VariableStore
from ..utils import is_falsy, maybe_await


class OutcomeValidator:
    """Applies the error / falsy / response contract to a step result."""

    def __init__(self, store: VariableStore, falsy_gating: FalsyGating = FalsyGating.ERRORS):
        self.store = store
        self.falsy_gating = falsy_gating

    async def validate(self, step: QueryStep, result: StepResult) -> None:
        """Check ``result`` against the step's handlers.

        Raises:
            UnexpectedErrorsError: Errors present and no ``test_error``.
            UnexpectedFalsyError: Falsy result and no ``test_falsy``.
        """
        if step.test_error is None:
            if result.has_errors:
                print(
                    json.dumps(result.errors, indent=4, ensure_ascii=False, default=str),
                    file=sys.stderr,
                )
                raise UnexpectedErrorsError(step.name, result.errors)
        elif result.has_errors:
            await self._run_handler(step, "test_error", step.test_error, result)

        if step.test_falsy is None:
            if is_falsy(result.json):
                raise UnexpectedFalsyError(step.name, result.json)
        elif self._falsy_handler_applies(result):
            await self._run_handler(step, "test_falsy", step.test_falsy, result)

        if step.test_response is not None:
            await self._run_handler(step, "test_response", step.test_response, result)

    def _falsy_handler_applies(self, result: StepResult) -> bool:
        if self.falsy_gating is FalsyGating.JSON:
            return is_falsy(result.json)
        return result.has_errors

    async def _run_handler(
        self,
        step: QueryStep,
        source: str,
        handler: Handler,
        result: StepResult,
    ) -> None:
        updates = await maybe_await(handler(result))
        self.store.merge(updates, step=step.name, source=source)
