"""Reversible coercions.

Validators never mutate their input directly. When a value can be coerced,
the validator appends a ``Coercion(path, apply)`` entry to
``state.coercions``; nothing happens until the caller invokes ``apply``.

``apply`` is a toggle: calling it writes the coerced value and returns the
inverse toggle, whose call restores the previous value and returns a toggle
that applies it again, and so on:

    ```python
    commit = SlotBinder(data, "foo").bind(True)
    revert = commit()   # data["foo"] is True
    commit = revert()   # data["foo"] is back to its original value
    ```
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from enum import Enum
from typing import Any, Callable, NamedTuple, Union

from .exceptions import CoercionError
from .state import MISSING, ValidationState

logger = logging.getLogger(__name__)


class Direction(Enum):
    """Which way a toggle moves its slot when called."""

    COMMIT = "commit"
    REVERT = "revert"

    def flipped(self) -> Direction:
        return Direction.REVERT if self is Direction.COMMIT else Direction.COMMIT


def read_slot(container: Any, key: Any) -> Any:
    """Read ``container[key]``, or ``MISSING`` if the slot doesn't exist."""
    try:
        return container[key]
    except (KeyError, IndexError):
        return MISSING


def write_slot(container: Any, key: Any, value: Any) -> None:
    """Write ``value`` into ``container[key]``; ``MISSING`` removes the key."""
    try:
        if value is MISSING and isinstance(container, MutableMapping):
            container.pop(key, None)
        else:
            container[key] = value
    except TypeError as e:
        raise CoercionError(
            f"Cannot write into {type(container).__name__}: {e}",
            context={"key": key},
        ) from e


class SlotToggle:
    """A pending write of ``value`` into the binder's slot."""

    __slots__ = ("binder", "value", "direction")

    def __init__(self, binder: SlotBinder, value: Any, direction: Direction = Direction.COMMIT):
        self.binder = binder
        self.value = value
        self.direction = direction

    def __call__(self) -> SlotToggle:
        container, key = self.binder.container, self.binder.key
        previous = read_slot(container, key)
        write_slot(container, key, self.value)
        return SlotToggle(self.binder, previous, self.direction.flipped())

    def __repr__(self) -> str:
        return f"SlotToggle({self.direction.value}, key={self.binder.key!r}, value={self.value!r})"


class LazyToggle:
    """A toggle whose committed value is only computed when it's applied.

    Used when the new value must be assembled from sub-values that other,
    earlier coercions may still modify (e.g. rebuilding a set from its
    coerced elements).
    """

    __slots__ = ("binder", "original", "generator", "direction")

    def __init__(
        self,
        binder: SlotBinder,
        original: Any,
        generator: Callable[[], Any],
        direction: Direction = Direction.COMMIT,
    ):
        self.binder = binder
        self.original = original
        self.generator = generator
        self.direction = direction

    def __call__(self) -> LazyToggle:
        if self.direction is Direction.COMMIT:
            write_slot(self.binder.container, self.binder.key, self.generator())
        else:
            write_slot(self.binder.container, self.binder.key, self.original)

        return LazyToggle(self.binder, self.original, self.generator, self.direction.flipped())


Toggle = Union[SlotToggle, LazyToggle]


class SlotBinder:
    """Binds coercions to one ``(container, key)`` slot of the input."""

    __slots__ = ("container", "key")

    def __init__(self, container: Any, key: Any):
        self.container = container
        self.key = key

    def __call__(self, value: Any) -> SlotToggle:
        """Write ``value`` right away and return the toggle that reverts it."""
        return self.bind(value)()

    def bind(self, value: Any) -> SlotToggle:
        """Return an unapplied toggle that writes ``value`` when called."""
        return SlotToggle(self, value)

    def lazy(self, original: Any, generator: Callable[[], Any]) -> LazyToggle:
        return LazyToggle(self, original, generator)

    def __repr__(self) -> str:
        return f"SlotBinder({type(self.container).__name__}, {self.key!r})"


class Coercion(NamedTuple):
    """A proposed coercion: where it applies, and how to apply it."""

    path: str
    apply: Callable[[], Any]


def box(value: Any) -> tuple[dict[str, Any], SlotBinder]:
    """Wrap a value in a throwaway single-slot container and bind it."""
    store = {"value": value}
    return store, SlotBinder(store, "value")


def propose(state: ValidationState, value: Any) -> None:
    """Record a coercion of the current slot to ``value``.

    The caller must have checked that ``state`` is coercing and bound.
    """
    state.coercions.append(Coercion(state.location, state.coercion.bind(value)))


def propose_lazy(state: ValidationState, original: Any, generator: Callable[[], Any]) -> None:
    state.coercions.append(Coercion(state.location, state.coercion.lazy(original, generator)))


def apply_all(coercions: list[Coercion]) -> list[Callable[[], Any]]:
    """Apply coercions in order, returning their inverses."""
    return [apply() for _, apply in coercions]


def revert_all(reverts: list[Callable[[], Any]]) -> None:
    """Undo what ``apply_all`` did, most recent first."""
    for revert in reversed(reverts):
        revert()
    if reverts:
        logger.debug("Reverted %d provisional coercion(s)", len(reverts))
