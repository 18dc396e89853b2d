"""Registration of scenario groups with a test framework.

``run()`` hands a group to a registrar: one describe per group, one case
per step, plus setup/teardown hooks. Two registrars are provided:

- PytestRegistrar builds a pytest test class in a module namespace.
- SequentialRegistrar executes the group in-process and collects results.
"""

import asyncio
import functools
import re
import sys
import time
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Protocol, Union

from ..config import RunConfig
from ..scenario.schema import Step
from .executor import GroupRunner
from .result_collector import GroupResult


AsyncFn = Callable[[], Awaitable[Any]]


class Registrar(Protocol):
    """Named registration surface of a test framework."""

    def describe_group(self, name: str, fn: Callable[[], None]) -> None: ...

    def register_case(self, name: str, fn: AsyncFn) -> None: ...

    def before_all(self, fn: AsyncFn) -> None: ...

    def after_all(self, fn: AsyncFn) -> None: ...


class _CollectingRegistrar:
    """Collects hooks and cases while a describe body runs."""

    def __init__(self):
        self._before: list[AsyncFn] = []
        self._after: list[AsyncFn] = []
        self._cases: list[tuple[str, AsyncFn]] = []

    def register_case(self, name: str, fn: AsyncFn) -> None:
        self._cases.append((name, fn))

    def before_all(self, fn: AsyncFn) -> None:
        self._before.append(fn)

    def after_all(self, fn: AsyncFn) -> None:
        self._after.append(fn)

    def _collect(self, fn: Callable[[], None]):
        self._before, self._after, self._cases = [], [], []
        fn()
        return self._before, self._after, self._cases


class SequentialRegistrar(_CollectingRegistrar):
    """Runs each described group immediately on its own event loop.

    A failing case is recorded and the following cases still run. Teardown
    hooks always run. If setup fails, every case is skipped.
    """

    def __init__(self):
        super().__init__()
        self.results: list[GroupResult] = []

    @property
    def result(self) -> Optional[GroupResult]:
        """Result of the most recently described group."""
        return self.results[-1] if self.results else None

    def describe_group(self, name: str, fn: Callable[[], None]) -> None:
        before, after, cases = self._collect(fn)
        self.results.append(asyncio.run(self._execute(name, before, after, cases)))

    async def _execute(self, name, before, after, cases) -> GroupResult:
        result = GroupResult(group_name=name)
        start_time = time.time()

        try:
            try:
                for hook in before:
                    await hook()
            except Exception as e:
                result.error = f"Setup failed: {type(e).__name__}: {e}"
                for case_name, _ in cases:
                    result.add_skipped(case_name, "setup failed")
                return result

            for case_name, body in cases:
                case_start = time.time()
                try:
                    await body()
                except Exception as e:
                    result.add_failed(case_name, e, _elapsed_ms(case_start))
                else:
                    result.add_passed(case_name, _elapsed_ms(case_start))
        finally:
            for hook in after:
                try:
                    await hook()
                except Exception as e:
                    if result.error is None:
                        result.error = f"Teardown failed: {type(e).__name__}: {e}"
            result.duration_ms = _elapsed_ms(start_time)

        return result


class PytestRegistrar(_CollectingRegistrar):
    """Exposes each described group as an xunit-style pytest class.

    The class is written into ``namespace`` (a test module's globals) so
    pytest collects it. Cases become ``test_NNN_<slug>`` methods, which
    pytest runs in definition order. Setup and teardown hooks run in
    ``setup_class`` / ``teardown_class`` on an event loop owned by the class;
    teardown hooks also run when setup fails.
    """

    def __init__(self, namespace: dict[str, Any]):
        super().__init__()
        self.namespace = namespace

    def describe_group(self, name: str, fn: Callable[[], None]) -> None:
        before, after, cases = self._collect(fn)
        cls = build_test_class(name, before, after, cases)
        class_name = cls.__name__
        suffix = 2
        while class_name in self.namespace:
            class_name = f"{cls.__name__}{suffix}"
            suffix += 1
        cls.__name__ = cls.__qualname__ = class_name
        cls.__module__ = self.namespace.get("__name__", cls.__module__)
        self.namespace[class_name] = cls


def build_test_class(name: str, before, after, cases) -> type:
    """Build the pytest class for one group."""

    def setup_class(cls):
        cls._loop = asyncio.new_event_loop()
        try:
            for hook in before:
                cls._loop.run_until_complete(hook())
        except BaseException:
            try:
                for hook in after:
                    cls._loop.run_until_complete(hook())
            finally:
                cls._loop.close()
            raise

    def teardown_class(cls):
        try:
            for hook in after:
                cls._loop.run_until_complete(hook())
        finally:
            cls._loop.close()

    attrs: dict[str, Any] = {
        "__doc__": name,
        "group_name": name,
        "setup_class": classmethod(setup_class),
        "teardown_class": classmethod(teardown_class),
    }

    for index, (case_name, body) in enumerate(cases, start=1):
        method_name = f"test_{index:03d}_{_slugify(case_name)}"
        attrs[method_name] = _make_case(case_name, body)

    return type(f"Test{_camel_case(name)}", (), attrs)


def _make_case(case_name: str, body: AsyncFn):
    def case(self):
        type(self)._loop.run_until_complete(body())

    case.__doc__ = case_name
    return case


def run(
    group_name: str,
    config: Union[RunConfig, Mapping[str, Any], None],
    steps: Iterable[Step],
    registrar: Optional[Registrar] = None,
    namespace: Optional[dict[str, Any]] = None,
) -> GroupRunner:
    """Register a scenario group and its steps.

    Args:
        group_name: Display name of the group.
        config: RunConfig, mapping of RunConfig fields, or None.
        steps: Query and action steps, run in this order.
        registrar: Target framework. Defaults to a PytestRegistrar writing
            into ``namespace`` (the caller's module globals if omitted).
        namespace: Module namespace for the default registrar.

    Returns:
        The GroupRunner, whose ``store`` holds the group's variables.
    """
    steps = list(steps)
    runner = GroupRunner(RunConfig.coerce(config), name=group_name)

    if registrar is None:
        if namespace is None:
            namespace = sys._getframe(1).f_globals
        registrar = PytestRegistrar(namespace)

    def body() -> None:
        registrar.before_all(runner.setup)
        registrar.after_all(runner.teardown)
        for step in steps:
            registrar.register_case(step.name, functools.partial(runner.run_step, step))

    registrar.describe_group(group_name, body)
    return runner


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def _slugify(text: str) -> str:
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", text).strip("_").lower()
    return slug or "step"


def _camel_case(text: str) -> str:
    words = re.findall(r"[0-9a-zA-Z]+", text)
    return "".join(w[:1].upper() + w[1:] for w in words) or "Group"
