"""Scenario group runner - executes the steps of one group.

Lifecycle:
1. Set up the execution environment and connect (once)
2. Run each step to completion, in declaration order
3. Disconnect (once, whenever setup completed)

Query steps go through resolve -> dispatch -> validate; action steps call
their function with a Toolkit. Both may write to the group's VariableStore.
"""

import sys
from enum import Enum
from typing import Any, Optional

from ..config import RunConfig
from ..errors import GroupStateError
from ..scenario.schema import ActionStep, QueryStep, Step, Toolkit
from ..scenario.variables import VariableStore
from ..utils import maybe_await
from ..validators.outcome import OutcomeValidator
from .dispatcher import RequestDispatcher
from .resolver import InputResolver


class GroupState(str, Enum):
    """Lifecycle states of a group run."""
    IDLE = "idle"
    SETTING_UP = "setting_up"
    RUNNING = "running"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


def default_environment(config: RunConfig) -> Any:
    """Build the GraphQL-over-HTTP environment."""
    from ..transport.http_client import HttpEnvironment

    return HttpEnvironment(config)


class GroupRunner:
    """Runs the steps of one scenario group against one execution context.

    The runner owns the group's VariableStore. Steps must be run one at a
    time; the registrar awaits each ``run_step`` before starting the next.
    """

    def __init__(self, config: Optional[RunConfig] = None, name: str = ""):
        """Initialize the runner.

        Args:
            config: Run configuration (environment factory, gating, verbosity).
            name: Group name used in progress output.
        """
        self.config = config or RunConfig()
        self.name = name
        self.state = GroupState.IDLE
        self.current_step = 0
        self.environment: Any = None
        self.context: Any = None
        self.store = VariableStore(self.config.initial_variables, verbose=self.config.verbose)

    async def setup(self) -> None:
        """Create the environment, obtain the context and connect."""
        if self.state is not GroupState.IDLE:
            raise GroupStateError(f"Cannot set up group in state '{self.state.value}'")

        self.state = GroupState.SETTING_UP
        factory = self.config.environment_factory or default_environment
        self.environment = factory(self.config)
        self.context = await maybe_await(self.environment.setup())
        await maybe_await(self.environment.connect())
        self.state = GroupState.RUNNING
        self._log(f"Group started: {self.name}")

    async def run_step(self, step: Step) -> None:
        """Execute one step to completion.

        Raises:
            GroupStateError: If the group is not set up.
            StepAssertionError: If a query outcome breaks its contract.
        """
        if self.state is not GroupState.RUNNING:
            raise GroupStateError(
                f"Cannot run step '{step.name}' in state '{self.state.value}'"
            )

        self.current_step += 1
        self._log(f"  Step {self.current_step}: {step.name}")

        if isinstance(step, ActionStep):
            await self._run_action(step)
        elif isinstance(step, QueryStep):
            await self._run_query(step)
        else:
            raise TypeError(f"Unsupported step: {type(step).__name__}")

    async def teardown(self) -> None:
        """Disconnect if setup completed and move to DONE."""
        if self.state is GroupState.DONE:
            raise GroupStateError("Group already torn down")

        connected = self.state is GroupState.RUNNING
        self.state = GroupState.TEARING_DOWN
        try:
            if connected:
                await maybe_await(self.environment.disconnect())
        finally:
            self.state = GroupState.DONE
            self._log(f"Group finished: {self.name}")

    @property
    def toolkit(self) -> Toolkit:
        return Toolkit(
            context=self.context,
            environment=self.environment,
            config=self.config,
            variables=self.store.get_all(),
        )

    async def _run_action(self, step: ActionStep) -> None:
        updates = await maybe_await(step.test(self.toolkit))
        self.store.merge(updates, step=step.name, source="test")

    async def _run_query(self, step: QueryStep) -> None:
        resolver = InputResolver(self.store, self.context)
        await resolver.before_request(step)
        payload = await resolver.payload(step)
        credential = resolver.credential(step)

        result = await RequestDispatcher(self.context).dispatch(
            step.query, payload, credential, self.store.get_all()
        )

        validator = OutcomeValidator(self.store, self.config.falsy_gating)
        await validator.validate(step, result)

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(message, file=sys.stderr)
