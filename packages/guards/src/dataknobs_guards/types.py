"""Leaf type validators.

Three of them (``is_boolean``, ``is_number``, ``is_date``) support coercion:
when the raw type check fails and the state is in coercion mode, they look
for a legal source representation and propose the converted value for their
slot instead of failing.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from .coercion import box, propose, propose_lazy
from .format import get_printable, get_printable_array, member_key, strict_equals
from .patterns import ISO8601_RE, parse_iso8601
from .reporting import push_error, unbound_coercion
from .state import ValidationState
from .validator import Validator

MAX_SAFE_INTEGER = 2**53 - 1

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

BOOLEAN_COERCIONS: dict[Any, bool] = {
    "true": True,
    "True": True,
    "1": True,
    1: True,
    "false": False,
    "False": False,
    "0": False,
    0: False,
}


def is_number_value(value: Any) -> bool:
    """True for ints and floats, but not for booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_safe_integer(value: Any) -> bool:
    """True for integral numbers that a double can represent exactly."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return abs(value) <= MAX_SAFE_INTEGER
    if isinstance(value, float):
        return value.is_integer() and abs(value) <= MAX_SAFE_INTEGER
    return False


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected constant {name}")


def parse_json_number(text: str) -> int | float | None:
    """Parse ``text`` with the JSON grammar, returning it only if it's a number."""
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None

    return parsed if is_number_value(parsed) else None


def _renders_exactly(number: int | float, text: str) -> bool:
    # Integral floats render without a fraction, so "1.0" doesn't round-trip.
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    if isinstance(number, int):
        return is_safe_integer(number) and str(number) == text
    return json.dumps(number) == text


class Unknown(Validator):
    """Accepts anything, refines nothing."""

    def test(self, value: Any, state: ValidationState) -> bool:
        return True


class Literal(Validator):
    """Accepts values strictly equal to ``expected`` (see ``strict_equals``)."""

    def __init__(self, expected: Any):
        self.expected = expected

    def test(self, value: Any, state: ValidationState) -> bool:
        if not strict_equals(value, self.expected):
            return push_error(state, f"Expected {get_printable(self.expected)} (got {get_printable(value)})")

        return True

    def __repr__(self) -> str:
        return f"Literal({self.expected!r})"


class String(Validator):
    """Accepts ``str`` values."""

    def test(self, value: Any, state: ValidationState) -> bool:
        if not isinstance(value, str):
            return push_error(state, f"Expected a string (got {get_printable(value)})")

        return True


class EnumOf(Validator):
    """Accepts members of a fixed set of values.

    Membership follows ``strict_equals``: ``True`` isn't a member of
    ``[1, 2]``, and objects without value semantics match by identity.
    """

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)
        self._keys = {member_key(value) for value in self.values}
        self._alphanumeric = all(isinstance(value, str) or is_number_value(value) for value in self.values)

    def test(self, value: Any, state: ValidationState) -> bool:
        if member_key(value) not in self._keys:
            if self._alphanumeric:
                return push_error(
                    state,
                    f"Expected one of {get_printable_array(self.values, 'or')} (got {get_printable(value)})",
                )
            return push_error(state, f"Expected a valid enumeration value (got {get_printable(value)})")

        return True

    def __repr__(self) -> str:
        return f"EnumOf({self.values!r})"


class Boolean(Validator):
    """Accepts ``bool`` values.

    Coerces ``"true"``, ``"True"``, ``"1"`` and ``1`` to ``True``, and
    ``"false"``, ``"False"``, ``"0"`` and ``0`` to ``False``. Nothing else.
    """

    def test(self, value: Any, state: ValidationState) -> bool:
        if not isinstance(value, bool):
            if state.coercing:
                if state.coercion is None:
                    return unbound_coercion(state)

                if isinstance(value, str) or is_number_value(value):
                    coercion = BOOLEAN_COERCIONS.get(value)
                    if coercion is not None:
                        propose(state, coercion)
                        return True

            return push_error(state, f"Expected a boolean (got {get_printable(value)})")

        return True


class Number(Validator):
    """Accepts ``int`` and ``float`` values (booleans excluded).

    Coerces strings following the JSON number grammar, as long as the parsed
    number renders back to the exact same text: ``"42"`` and ``"-4.2"`` are
    fine, but ``"1e3"``, ``"1.0"`` or a string of 45 digits are reported as numbers the
    runtime can't safely represent. Integers must fit in a double.
    """

    def test(self, value: Any, state: ValidationState) -> bool:
        if not is_number_value(value):
            if state.coercing:
                if state.coercion is None:
                    return unbound_coercion(state)

                if isinstance(value, str):
                    parsed = parse_json_number(value)
                    if parsed is not None:
                        if not _renders_exactly(parsed, value):
                            return push_error(
                                state,
                                f"Received a number that can't be safely represented by the runtime ({value})",
                            )

                        propose(state, parsed)
                        return True

            return push_error(state, f"Expected a number (got {get_printable(value)})")

        return True


class Date(Validator):
    """Accepts ``datetime`` values.

    Coerces ISO 8601 strings, and (numeric strings of) Unix timestamps in
    seconds. Coerced dates are timezone-aware.
    """

    def test(self, value: Any, state: ValidationState) -> bool:
        if not isinstance(value, datetime):
            if state.coercing:
                if state.coercion is None:
                    return unbound_coercion(state)

                coercion: datetime | None = None

                if isinstance(value, str) and ISO8601_RE.fullmatch(value):
                    coercion = parse_iso8601(value)
                else:
                    timestamp: int | float | None = None
                    if isinstance(value, str):
                        timestamp = parse_json_number(value)
                    elif is_number_value(value):
                        timestamp = value

                    if timestamp is not None:
                        if not (is_safe_integer(timestamp) and is_safe_integer(timestamp * 1000)):
                            return self._unsafe(value, state)
                        try:
                            coercion = EPOCH + timedelta(seconds=int(timestamp))
                        except OverflowError:
                            return self._unsafe(value, state)

                if coercion is not None:
                    propose(state, coercion)
                    return True

            return push_error(state, f"Expected a date (got {get_printable(value)})")

        return True

    def _unsafe(self, value: Any, state: ValidationState) -> bool:
        return push_error(state, f"Received a timestamp that can't be safely represented by the runtime ({value})")


class InstanceOf(Validator):
    """Accepts instances of a class (or of its subclasses)."""

    def __init__(self, cls: type):
        self.cls = cls

    def test(self, value: Any, state: ValidationState) -> bool:
        if not isinstance(value, self.cls):
            return push_error(state, f"Expected an instance of {self.cls.__name__} (got {get_printable(value)})")

        return True

    def __repr__(self) -> str:
        return f"InstanceOf({self.cls.__name__})"


class Payload(Validator):
    """Accepts JSON strings whose decoded content matches ``spec``.

    Only meaningful in coercion mode, where the string is replaced by its
    decoded (and possibly coerced) content. Always fails otherwise.
    """

    def __init__(self, spec: Validator):
        self.spec = spec

    def test(self, value: Any, state: ValidationState) -> bool:
        if not state.coercing:
            return push_error(state, "The is_payload predicate can only be used with coercion enabled")

        if state.coercion is None:
            return unbound_coercion(state)

        if not isinstance(value, str):
            return push_error(state, f"Expected a string (got {get_printable(value)})")

        try:
            inner = json.loads(value)
        except (ValueError, RecursionError):
            return push_error(state, f"Expected a JSON string (got {get_printable(value)})")

        store, binder = box(inner)
        if not self.spec(inner, state.derive(coercion=binder)):
            return False

        propose_lazy(state, value, lambda: store["value"])
        return True


def is_unknown() -> Unknown:
    """Create a validator that always returns True."""
    return Unknown()


def is_literal(expected: Any) -> Literal:
    """Create a validator that only accepts values strictly equal to ``expected``."""
    return Literal(expected)


def is_string() -> String:
    """Create a validator that only accepts strings."""
    return String()


def is_enum_values(values: Iterable[Any]) -> Validator:
    """Create a validator accepting any of the given values.

    A single distinct value degrades to ``is_literal``.
    """
    values = list(values)

    distinct = {member_key(value): value for value in values}
    if len(distinct) == 1:
        return Literal(next(iter(distinct.values())))

    return EnumOf(values)


def is_enum_mapping(mapping: Mapping[Any, Any]) -> Validator:
    """Create a validator accepting any value of ``mapping``.

    Only the values define membership, never the keys. Python enumerations
    can be passed through their ``__members__`` mapping, in which case the
    members themselves are accepted.
    """
    return is_enum_values(mapping.values())


def is_boolean() -> Boolean:
    """Create a validator that only accepts booleans (supports coercion)."""
    return Boolean()


def is_number() -> Number:
    """Create a validator that only accepts numbers (supports coercion).

    Use ``cascade`` with ``is_integer`` or the range predicates to restrict
    the accepted values further.
    """
    return Number()


def is_date() -> Date:
    """Create a validator that only accepts datetimes (supports coercion)."""
    return Date()


def is_instance_of(cls: type) -> InstanceOf:
    """Create a validator that only accepts instances of ``cls``."""
    return InstanceOf(cls)


def is_payload(spec: Validator) -> Payload:
    """Create a validator for JSON-encoded strings (coercion only)."""
    return Payload(spec)
