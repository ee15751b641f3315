"""Traversal state threaded through every validator call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .coercion import Coercion, SlotBinder


class _Missing:
    """Marker for an absent value (a key missing from a mapping)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self


MISSING: Any = _Missing()


@dataclass(frozen=True)
class ValidationState:
    """Per-call context handed down to sub-validators.

    Composite validators never modify the state they receive; they call
    ``derive`` to get a copy with a new path and binder for each child.
    Only the two lists are shared (and appended to) across the call tree.

    Attributes:
        path: Address of the examined sub-value, ``None`` at the root
        errors: Error sink; when ``None`` validators stop at the first failure
        coercion: Binder for the slot holding the current value
        coercions: Proposed coercions; when ``None`` coercion is disabled
    """

    path: str | None = None
    errors: list[str] | None = None
    coercion: SlotBinder | None = None
    coercions: list[Coercion] | None = None

    @property
    def collecting(self) -> bool:
        """Whether errors are being collected (as opposed to fast-fail)."""
        return self.errors is not None

    @property
    def coercing(self) -> bool:
        """Whether coercion mode is enabled."""
        return self.coercions is not None

    @property
    def location(self) -> str:
        """The path as rendered in messages."""
        return self.path if self.path is not None else "."

    def derive(self, **changes: Any) -> ValidationState:
        """Return a copy of this state with the given fields replaced."""
        return replace(self, **changes)


EMPTY_STATE = ValidationState()
