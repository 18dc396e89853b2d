"""Exceptions raised by the scenario runner."""

from typing import Any


class StepAssertionError(AssertionError):
    """A query step's outcome did not satisfy its contract."""

    def __init__(self, step_name: str, message: str):
        self.step_name = step_name
        super().__init__(f"[{step_name}] {message}")


class UnexpectedErrorsError(StepAssertionError):
    """The response carried errors but the step declared no error handler."""

    def __init__(self, step_name: str, errors: Any):
        self.errors = errors
        super().__init__(
            step_name,
            "Response contains errors and no test_error handler was given.",
        )


class UnexpectedFalsyError(StepAssertionError):
    """The response result was falsy but the step declared no falsy handler."""

    def __init__(self, step_name: str, json: Any):
        self.json = json
        super().__init__(
            step_name,
            f"Response result is falsy ({json!r}) and no test_falsy handler was given.",
        )


class GroupStateError(RuntimeError):
    """A group runner lifecycle method was called in the wrong state."""
