"""Path and value formatting used in error messages.
"""

from __future__ import annotations

import json
import re
from typing import Any, Hashable, Sequence

from .state import MISSING

SIMPLE_KEY_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def compute_key(path: str | None, key: Any) -> str:
    """Compute the path of a child value.

    Args:
        path: Path of the parent value (``None`` at the root)
        key: List index, mapping key, or any other hashable map key

    Returns:
        ``.foo`` for identifier keys, ``[0]`` for indices, ``["foo bar"]``
        for any other string, all appended to the parent path
    """
    if isinstance(key, int) and not isinstance(key, bool):
        return f"{path if path is not None else '.'}[{key}]"
    elif isinstance(key, str):
        if SIMPLE_KEY_RE.match(key):
            return f"{path if path is not None else ''}.{key}"
        return f"{path if path is not None else '.'}[{json.dumps(key, ensure_ascii=False)}]"
    return f"{path if path is not None else '.'}[{key!r}]"


def get_printable(value: Any) -> str:
    """Render a value for inclusion in an error message."""
    if value is None:
        return "null"
    if value is MISSING:
        return "undefined"
    if isinstance(value, str) and value == "":
        return "an empty string"
    if isinstance(value, (list, tuple)):
        return "an array"

    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return f"<{value!r}>"


def get_printable_array(values: Sequence[Any], conjunction: str) -> str:
    """Render a list of values as ``"a", "b", or "c"``."""
    if len(values) == 0:
        return "nothing"

    if len(values) == 1:
        return get_printable(values[0])

    rest = values[:-1]
    trailing = values[-1]

    separator = f", {conjunction} " if len(values) > 2 else f" {conjunction} "

    return ", ".join(get_printable(value) for value in rest) + separator + get_printable(trailing)


def plural(n: int, singular: str, plural: str) -> str:
    return singular if n == 1 else plural


def strict_equals(a: Any, b: Any) -> bool:
    """Compare two values without Python's implicit cross-type equality.

    Booleans only equal booleans, numbers compare numerically, strings by
    value, and everything else (containers included) by identity.
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return False


def member_key(value: Any) -> Hashable:
    """Hashable key under which ``strict_equals`` values collide."""
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("string", value)
    if value is None:
        return ("null", None)
    return ("identity", id(value))
