"""Small helpers shared across the runner and the scenario parser."""

import inspect
import math
import re
from typing import Any, Mapping


_PATH_SPLIT = re.compile(r"[.\[\]]+")


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def lookup_path(root: Any, expr: str) -> Any:
    """Resolve a dotted/indexed path such as ``json.items[0].id``.

    Returns None as soon as a segment is missing.
    """
    parts = [p for p in _PATH_SPLIT.split(expr.strip()) if p]
    value = root

    for part in parts:
        if isinstance(value, Mapping):
            value = value.get(part)
        elif isinstance(value, (list, tuple)) and part.lstrip("-").isdigit():
            idx = int(part)
            if -len(value) <= idx < len(value):
                value = value[idx]
            else:
                return None
        elif hasattr(value, part):
            value = getattr(value, part)
        else:
            return None

        if value is None:
            return None

    return value


def is_falsy(value: Any) -> bool:
    """Falsiness as the query API's JSON sees it.

    None, False, 0, NaN and "" are falsy. Empty objects and lists are not.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value == ""
    return False
