"""Variable store shared by the steps of one scenario group."""

import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .schema import Variables


SESSION_KEY = "session"


@dataclass
class MergeRecord:
    """One merge into the store, kept for debugging propagation."""
    step: Optional[str]
    source: Optional[str]
    keys: list[str]


class VariableStore:
    """Mutable key-value mapping threaded across the steps of a group.

    Merges are shallow and last write wins. There is no removal. Steps run
    one at a time, so no locking is done.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None, verbose: bool = False):
        self._values: Variables = dict(initial or {})
        self.history: list[MergeRecord] = []
        self.verbose = verbose

    def get_all(self) -> Variables:
        """Return the live mapping (not a copy)."""
        return self._values

    def merge(
        self,
        updates: Any,
        step: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        """Merge ``updates`` into the store.

        Empty or None updates are ignored. Non-mapping values are ignored
        with a warning.

        Args:
            updates: Mapping of variables to write.
            step: Name of the step producing the updates.
            source: Handler that produced them (e.g. "test_response").
        """
        if not updates:
            return

        if not isinstance(updates, Mapping):
            print(
                f"Warning: [{step}] {source or 'step'} returned "
                f"{type(updates).__name__}, expected a mapping; ignored.",
                file=sys.stderr,
            )
            return

        self._values.update(updates)
        keys = [str(k) for k in updates]
        self.history.append(MergeRecord(step=step, source=source, keys=keys))

        if self.verbose:
            print(f"  variables <- {', '.join(keys)} ({source or 'step'})", file=sys.stderr)

    @property
    def session(self) -> Any:
        """The stored credential, or None."""
        return self._values.get(SESSION_KEY)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableStore({sorted(self._values)})"
