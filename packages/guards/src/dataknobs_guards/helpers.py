"""Refinement predicates, meant to be used as ``cascade`` followups.

They check a property of a value whose type has already been established
(a length, a range, a format...). Values of the wrong type are reported as
such rather than raising.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Iterable, Union

from .format import get_printable, get_printable_array, member_key, plural
from .patterns import BASE64_RE, COLOR_STRING_ALPHA_RE, COLOR_STRING_RE, ISO8601_RE, UUID4_RE
from .reporting import push_error
from .state import MISSING, ValidationState
from .types import Unknown, is_number_value, is_safe_integer
from .validator import Validator, make_validator


def _sized(value: Any, state: ValidationState) -> bool:
    if not hasattr(value, "__len__"):
        return push_error(state, f"Expected a value with a length (got {get_printable(value)})")
    return True


def _numeric(value: Any, state: ValidationState) -> bool:
    if not is_number_value(value):
        return push_error(state, f"Expected a number (got {get_printable(value)})")
    return True


def _textual(value: Any, state: ValidationState) -> bool:
    if not isinstance(value, str):
        return push_error(state, f"Expected a string (got {get_printable(value)})")
    return True


def _mapping(value: Any, state: ValidationState) -> bool:
    if not isinstance(value, Mapping):
        return push_error(state, f"Expected an object (got {get_printable(value)})")
    return True


# Lengths

def has_min_length(length: int) -> Validator:
    """Check that a list or string has at least ``length`` elements."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _sized(value, state):
            return False
        if not len(value) >= length:
            return push_error(state, f"Expected to have a length of at least {length} elements (got {len(value)})")
        return True

    return make_validator(test, "has_min_length")


def has_max_length(length: int) -> Validator:
    """Check that a list or string has at most ``length`` elements."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _sized(value, state):
            return False
        if not len(value) <= length:
            return push_error(state, f"Expected to have a length of at most {length} elements (got {len(value)})")
        return True

    return make_validator(test, "has_max_length")


def has_exact_length(length: int) -> Validator:
    """Check that a list or string has exactly ``length`` elements."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _sized(value, state):
            return False
        if len(value) != length:
            return push_error(state, f"Expected to have a length of exactly {length} elements (got {len(value)})")
        return True

    return make_validator(test, "has_exact_length")


def has_unique_items(map: Callable[[Any], Any] | None = None) -> Validator:
    """Check that a list contains no duplicates.

    Args:
        map: Optional transform applied to each item before comparing them
            (e.g. to compare records by id)
    """

    def test(value: Any, state: ValidationState) -> bool:
        if not _sized(value, state):
            return False

        seen: set[Any] = set()
        duplicates: set[Any] = set()

        for item in value:
            key = member_key(map(item) if map is not None else item)

            if key in seen:
                if key in duplicates:
                    continue

                push_error(state, f"Expected to contain unique elements; got a duplicate with {get_printable(item)}")
                duplicates.add(key)
            else:
                seen.add(key)

        return len(duplicates) == 0

    return make_validator(test, "has_unique_items")


# Numbers

def is_negative() -> Validator:
    """Check that a number is lower than or equal to 0."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not value <= 0:
            return push_error(state, f"Expected to be negative (got {value})")
        return True

    return make_validator(test, "is_negative")


def is_positive() -> Validator:
    """Check that a number is greater than or equal to 0."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not value >= 0:
            return push_error(state, f"Expected to be positive (got {value})")
        return True

    return make_validator(test, "is_positive")


def is_at_least(n: float) -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not value >= n:
            return push_error(state, f"Expected to be at least {n} (got {value})")
        return True

    return make_validator(test, "is_at_least")


def is_at_most(n: float) -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not value <= n:
            return push_error(state, f"Expected to be at most {n} (got {value})")
        return True

    return make_validator(test, "is_at_most")


def is_in_inclusive_range(a: float, b: float) -> Validator:
    """Check that ``a <= value <= b``."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not (a <= value <= b):
            return push_error(state, f"Expected to be in the [{a}; {b}] range (got {value})")
        return True

    return make_validator(test, "is_in_inclusive_range")


def is_in_exclusive_range(a: float, b: float) -> Validator:
    """Check that ``a <= value < b``."""

    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if not (a <= value < b):
            return push_error(state, f"Expected to be in the [{a}; {b}[ range (got {value})")
        return True

    return make_validator(test, "is_in_exclusive_range")


def is_integer(unsafe: bool = False) -> Validator:
    """Check that a number is an integer.

    By default the integer must also be *safe*, i.e. exactly representable
    as a double (2**53 isn't, since 2**53 + 1 rounds to it). Set ``unsafe``
    to accept any integer.
    """

    def test(value: Any, state: ValidationState) -> bool:
        if not _numeric(value, state):
            return False
        if isinstance(value, float) and not value.is_integer():
            return push_error(state, f"Expected to be an integer (got {value})")
        if not unsafe and not is_safe_integer(value):
            return push_error(state, f"Expected to be a safe integer (got {value})")
        return True

    return make_validator(test, "is_integer")


# Strings

def matches_regexp(pattern: Union[str, re.Pattern[str]]) -> Validator:
    """Check that a string contains a match for ``pattern``."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if not compiled.search(value):
            return push_error(
                state,
                f"Expected to match the pattern /{compiled.pattern}/ (got {get_printable(value)})",
            )
        return True

    return make_validator(test, "matches_regexp")


def is_lower_case() -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if value != value.lower():
            return push_error(state, f"Expected to be all-lowercase (got {value})")
        return True

    return make_validator(test, "is_lower_case")


def is_upper_case() -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if value != value.upper():
            return push_error(state, f"Expected to be all-uppercase (got {value})")
        return True

    return make_validator(test, "is_upper_case")


def is_uuid4() -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if not UUID4_RE.fullmatch(value):
            return push_error(state, f"Expected to be a valid UUID v4 (got {get_printable(value)})")
        return True

    return make_validator(test, "is_uuid4")


def is_iso8601() -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if not ISO8601_RE.fullmatch(value):
            return push_error(state, f"Expected to be a valid ISO 8601 date string (got {get_printable(value)})")
        return True

    return make_validator(test, "is_iso8601")


def is_hex_color(alpha: bool = False) -> Validator:
    """Check that a string is a ``#rrggbb`` colour.

    Args:
        alpha: Also accept an alpha channel (``#rrggbbaa``)
    """
    pattern = COLOR_STRING_ALPHA_RE if alpha else COLOR_STRING_RE

    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if not pattern.fullmatch(value):
            return push_error(state, f"Expected to be a valid hexadecimal color string (got {get_printable(value)})")
        return True

    return make_validator(test, "is_hex_color")


def is_base64() -> Validator:
    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        if not BASE64_RE.fullmatch(value):
            return push_error(state, f"Expected to be a valid base 64 string (got {get_printable(value)})")
        return True

    return make_validator(test, "is_base64")


def is_json(spec: Validator | None = None) -> Validator:
    """Check that a string is valid JSON.

    When ``spec`` is given, the decoded data must also match it. Coercion is
    disabled for that check, and the value stays a string either way.
    """
    inner = spec if spec is not None else Unknown()

    def test(value: Any, state: ValidationState) -> bool:
        if not _textual(value, state):
            return False
        try:
            data = json.loads(value)
        except (ValueError, RecursionError):
            return push_error(state, f"Expected to be a valid JSON string (got {get_printable(value)})")
        return inner(data, state.derive(coercion=None, coercions=None))

    return make_validator(test, "is_json")


# Keys

class MissingType(str, Enum):
    """When a key counts as missing."""

    MISSING = "missing"
    UNDEFINED = "undefined"
    NIL = "nil"
    FALSY = "falsy"


_CHECKS: dict[str, Callable[[Any, Any, Mapping[Any, Any]], bool]] = {
    "missing": lambda keys, key, value: key in keys,
    "undefined": lambda keys, key, value: key in keys and value[key] is not MISSING,
    "nil": lambda keys, key, value: key in keys and value[key] is not None and value[key] is not MISSING,
    "falsy": lambda keys, key, value: key in keys and bool(value[key]),
}


def _check(missing_if: Union[str, MissingType]) -> Callable[[Any, Any, Mapping[Any, Any]], bool]:
    return _CHECKS[MissingType(missing_if).value]


def has_required_keys(required_keys: Iterable[str], missing_if: Union[str, MissingType] = "missing") -> Validator:
    """Check that a mapping contains all of ``required_keys``."""
    required = list(dict.fromkeys(required_keys))
    check = _check(missing_if)

    def test(value: Any, state: ValidationState) -> bool:
        if not _mapping(value, state):
            return False

        keys = set(value.keys())
        problems = [key for key in required if not check(keys, key, value)]

        if problems:
            return push_error(
                state,
                f"Missing required {plural(len(problems), 'property', 'properties')} "
                f"{get_printable_array(problems, 'and')}",
            )
        return True

    return make_validator(test, "has_required_keys")


def has_at_least_one_key(required_keys: Iterable[str], missing_if: Union[str, MissingType] = "missing") -> Validator:
    """Check that a mapping contains at least one of ``required_keys``."""
    required = list(dict.fromkeys(required_keys))
    required_set = set(required)
    check = _check(missing_if)

    def test(value: Any, state: ValidationState) -> bool:
        if not _mapping(value, state):
            return False

        if not any(check(required_set, key, value) for key in value.keys()):
            return push_error(state, f"Missing at least one property from {get_printable_array(required, 'or')}")
        return True

    return make_validator(test, "has_at_least_one_key")


def has_forbidden_keys(forbidden_keys: Iterable[str], missing_if: Union[str, MissingType] = "missing") -> Validator:
    """Check that a mapping contains none of ``forbidden_keys``."""
    forbidden = list(dict.fromkeys(forbidden_keys))
    check = _check(missing_if)

    def test(value: Any, state: ValidationState) -> bool:
        if not _mapping(value, state):
            return False

        keys = set(value.keys())
        problems = [key for key in forbidden if check(keys, key, value)]

        if problems:
            return push_error(
                state,
                f"Forbidden {plural(len(problems), 'property', 'properties')} {get_printable_array(problems, 'and')}",
            )
        return True

    return make_validator(test, "has_forbidden_keys")


def has_mutually_exclusive_keys(
    exclusive_keys: Iterable[str],
    missing_if: Union[str, MissingType] = "missing",
) -> Validator:
    """Check that a mapping contains at most one of ``exclusive_keys``."""
    exclusive = list(dict.fromkeys(exclusive_keys))
    check = _check(missing_if)

    def test(value: Any, state: ValidationState) -> bool:
        if not _mapping(value, state):
            return False

        keys = set(value.keys())
        used = [key for key in exclusive if check(keys, key, value)]

        if len(used) > 1:
            return push_error(state, f"Mutually exclusive properties {get_printable_array(used, 'and')}")
        return True

    return make_validator(test, "has_mutually_exclusive_keys")


class KeyRelationship(str, Enum):
    FORBIDS = "Forbids"
    REQUIRES = "Requires"


_RELATIONSHIPS = {
    KeyRelationship.FORBIDS: (False, "forbids using", "or"),
    KeyRelationship.REQUIRES: (True, "requires using", "and"),
}


def has_key_relationship(
    subject: str,
    relationship: KeyRelationship,
    others: Iterable[str],
    ignore: Iterable[Any] | None = None,
    missing_if: Union[str, MissingType] = "missing",
) -> Validator:
    """Check that, when ``subject`` is set, the other keys are (or aren't).

    Args:
        subject: Key triggering the check
        relationship: Whether ``subject`` requires or forbids the other keys
        others: The related keys
        ignore: Values for which a key counts as unset
        missing_if: When a key counts as missing
    """
    skipped = {member_key(item) for item in (ignore or [])}
    check = _check(missing_if)
    other_keys = list(dict.fromkeys(others))
    expect, message, conjunction = _RELATIONSHIPS[KeyRelationship(relationship)]

    def test(value: Any, state: ValidationState) -> bool:
        if not _mapping(value, state):
            return False

        keys = set(value.keys())
        if not check(keys, subject, value) or member_key(value[subject]) in skipped:
            return True

        problems = [
            key
            for key in other_keys
            if (check(keys, key, value) and member_key(value[key]) not in skipped) != expect
        ]

        if problems:
            return push_error(
                state,
                f'Property "{subject}" {message} {plural(len(problems), "property", "properties")} '
                f"{get_printable_array(problems, conjunction)}",
            )
        return True

    return make_validator(test, "has_key_relationship")
