"""Result type returned by ``as_``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union


@dataclass
class ValidationResult:
    """Outcome of ``as_`` when it isn't asked to raise.

    On success, ``value`` holds the (possibly coerced) value and ``errors``
    is None. On failure, ``value`` is None and ``errors`` is either the list
    of collected messages or ``True`` when no details were requested.

    Results unpack as ``value, errors = as_(...)`` and are truthy when valid.
    """

    value: Any
    errors: Union[list[str], bool, None] = None

    @property
    def valid(self) -> bool:
        return self.errors is None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    def __iter__(self) -> Iterator[Any]:
        yield self.value
        yield self.errors

    @classmethod
    def success(cls, value: Any) -> ValidationResult:
        """Create a successful result."""
        return cls(value=value, errors=None)

    @classmethod
    def failure(cls, errors: Union[list[str], bool] = True) -> ValidationResult:
        """Create a failed result.

        Args:
            errors: Collected messages, or True when none were collected
        """
        return cls(value=None, errors=errors)
