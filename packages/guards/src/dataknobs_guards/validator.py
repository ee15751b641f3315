"""The validator contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from .state import EMPTY_STATE, ValidationState

if TYPE_CHECKING:
    from .combinators import OneOf


class Validator(ABC):
    """Base class for all validators.

    A validator is a callable ``(value, state=None) -> bool``. It returns
    ``True`` when the value conforms (in which case the value can be treated
    as the validator's target type), and ``False`` otherwise, pushing a
    message into ``state.errors`` when a sink is provided. Validators never
    raise on bad input and never mutate it: coercions are only proposed,
    through ``state.coercions``.

    Validators hold no per-call state, so one instance can be reused freely.
    """

    def __call__(self, value: Any, state: ValidationState | None = None) -> bool:
        """Validate a value.

        Args:
            value: Value to validate
            state: Optional traversal state (error sink, coercion context)

        Returns:
            True if the value matches
        """
        return self.test(value, EMPTY_STATE if state is None else state)

    @abstractmethod
    def test(self, value: Any, state: ValidationState) -> bool:
        """Validate a value against an explicit state."""
        pass

    def __or__(self, other: Validator) -> OneOf:
        """Combine with OR: the first matching validator wins."""
        from .combinators import OneOf

        left = self.specs if isinstance(self, OneOf) and not self.exclusive else [self]
        right = other.specs if isinstance(other, OneOf) and not other.exclusive else [other]
        return OneOf(left + right)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FunctionValidator(Validator):
    """Adapts a plain ``test(value, state) -> bool`` function."""

    def __init__(self, test: Callable[[Any, ValidationState], bool], name: str | None = None):
        self._test = test
        self.name = name or getattr(test, "__name__", "validator")

    def test(self, value: Any, state: ValidationState) -> bool:
        return self._test(value, state)

    def __repr__(self) -> str:
        return f"{self.name}()"


def make_validator(
    test: Callable[[Any, ValidationState], bool],
    name: str | None = None,
) -> Validator:
    """Turn a test function into a validator.

    The function receives the value and a (never ``None``) state, and should
    report failures with ``push_error``:

        ```python
        def is_even(value, state):
            if value % 2:
                return push_error(state, f"Expected an even number (got {value})")
            return True

        validator = make_validator(is_even)
        ```
    """
    return FunctionValidator(test, name)
