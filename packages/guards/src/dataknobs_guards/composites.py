"""Structural validators recursing into sub-validators.

Each child is validated against a state derived from the parent one, with
the child's path and, in coercion mode, a binder on the child's slot in the
input. In fast-fail mode (no error sink) the first failing child stops the
walk; otherwise every child is visited so that all errors get reported.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, MutableMapping, Sequence
from collections.abc import Set as AbstractSet
from typing import Any, Union

from .coercion import SlotBinder, box, propose, propose_lazy
from .format import compute_key, get_printable, strict_equals
from .helpers import has_exact_length
from .reporting import push_error, unbound_coercion
from .state import MISSING, ValidationState
from .types import String, Unknown
from .validator import Validator

UNSAFE_KEYS = frozenset({"__proto__", "constructor"})

Delimiter = Union[str, "re.Pattern[str]"]


def split(text: str, delimiter: Delimiter) -> list[str]:
    if isinstance(delimiter, re.Pattern):
        return delimiter.split(text)
    return text.split(delimiter)


def _child_state(state: ValidationState, container: Any, key: Any) -> ValidationState:
    return state.derive(
        path=compute_key(state.path, key),
        coercion=SlotBinder(container, key) if state.coercing else None,
    )


class Array(Validator):
    """Accepts lists whose items all match ``spec``.

    With a ``delimiter`` and coercion enabled, strings are split first.
    """

    def __init__(self, spec: Validator, delimiter: Delimiter | None = None):
        self.spec = spec
        self.delimiter = delimiter

    def test(self, value: Any, state: ValidationState) -> bool:
        original = value

        if isinstance(value, str) and self.delimiter is not None and state.coercing:
            if state.coercion is None:
                return unbound_coercion(state)

            value = split(value, self.delimiter)

        if not isinstance(value, list):
            return push_error(state, f"Expected an array (got {get_printable(value)})")

        valid = True

        for index, item in enumerate(value):
            valid = self.spec(item, _child_state(state, value, index)) and valid

            if not valid and not state.collecting:
                break

        if valid and value is not original:
            propose(state, value)

        return valid

    def __repr__(self) -> str:
        return f"Array({self.spec!r})"


class Tuple(Validator):
    """Accepts lists of exactly ``len(specs)`` items, each matching its spec."""

    def __init__(self, specs: Sequence[Validator], delimiter: Delimiter | None = None):
        self.specs = list(specs)
        self.delimiter = delimiter
        self._length = has_exact_length(len(self.specs))

    def test(self, value: Any, state: ValidationState) -> bool:
        original = value

        if isinstance(value, str) and self.delimiter is not None and state.coercing:
            if state.coercion is None:
                return unbound_coercion(state)

            value = split(value, self.delimiter)

        if not isinstance(value, list):
            return push_error(state, f"Expected a tuple (got {get_printable(value)})")

        valid = self._length(value, state)
        if not valid and not state.collecting:
            return False

        for index in range(min(len(value), len(self.specs))):
            valid = self.specs[index](value[index], _child_state(state, value, index)) and valid

            if not valid and not state.collecting:
                break

        if valid and value is not original:
            propose(state, value)

        return valid

    def __repr__(self) -> str:
        return f"Tuple({self.specs!r})"


class Record(Validator):
    """Accepts mappings whose values all match ``spec``.

    Keys go through ``keys`` (``is_string()`` by default). In coercion mode, a
    list of ``[key, value]`` pairs is accepted and turned into a dict.
    Unsafe key names are rejected in both forms.
    """

    def __init__(self, spec: Validator, keys: Validator | None = None):
        self.spec = spec
        self.keys = keys if keys is not None else String()
        self._pairs = Array(Tuple([self.keys, spec]))

    def test(self, value: Any, state: ValidationState) -> bool:
        if isinstance(value, list) and state.coercing:
            if state.coercion is None:
                return unbound_coercion(state)

            valid = self._pairs(value, state.derive(coercion=None))
            if not valid and not state.collecting:
                return False

            for pair in value:
                key = pair[0] if isinstance(pair, list) and pair else None

                if isinstance(key, str) and key in UNSAFE_KEYS:
                    valid = push_error(state.derive(path=compute_key(state.path, key)), "Unsafe property name")

                    if not state.collecting:
                        break

            if not valid:
                return False

            propose_lazy(state, value, lambda: {key: sub for key, sub in value})
            return True

        if not isinstance(value, Mapping):
            return push_error(state, f"Expected an object (got {get_printable(value)})")

        valid = True

        for key in list(value.keys()):
            if not valid and not state.collecting:
                break

            path = compute_key(state.path, key)

            if key in UNSAFE_KEYS:
                valid = push_error(state.derive(path=path), "Unsafe property name")
                continue

            # Keys are never coerced.
            if not self.keys(key, state.derive(path=path, coercion=None, coercions=None)):
                valid = False
                continue

            if not self.spec(value[key], _child_state(state, value, key)):
                valid = False

        return valid

    def __repr__(self) -> str:
        return f"Record({self.spec!r})"


class ExtraProperties(MutableMapping):
    """Live view over the undeclared properties of a mapping.

    Reads and writes go straight to the underlying mapping, so that
    coercions proposed by the ``extra`` validator land on the real input.
    """

    def __init__(self, target: Any):
        self._target = target
        self._keys: dict[Any, None] = {}

    def include(self, key: Any) -> None:
        self._keys[key] = None

    def __getitem__(self, key: Any) -> Any:
        if key not in self._keys:
            raise KeyError(key)
        return self._target[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._target[key] = value
        self._keys[key] = None

    def __delitem__(self, key: Any) -> None:
        del self._keys[key]
        del self._target[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"ExtraProperties({dict(self)!r})"


class Object(Validator):
    """Accepts mappings matching a set of declared properties.

    Undeclared properties are rejected, unless an ``extra`` validator is
    given; it then receives a mapping of all the undeclared properties.
    Missing declared properties are validated as ``MISSING``.
    """

    def __init__(self, properties: Mapping[str, Validator], extra: Validator | None = None):
        self.properties = dict(properties)
        self.extra = extra

    def test(self, value: Any, state: ValidationState) -> bool:
        if not isinstance(value, Mapping):
            return push_error(state, f"Expected an object (got {get_printable(value)})")

        keys = dict.fromkeys([*self.properties, *value])
        extra = ExtraProperties(value) if self.extra is not None else None

        valid = True

        for key in keys:
            if key in UNSAFE_KEYS:
                valid = push_error(state.derive(path=compute_key(state.path, key)), "Unsafe property name")
            else:
                spec = self.properties.get(key)

                if spec is not None:
                    sub = value.get(key, MISSING)
                    valid = spec(sub, _child_state(state, value, key)) and valid
                elif extra is None:
                    valid = push_error(
                        state.derive(path=compute_key(state.path, key)),
                        f"Extraneous property (got {get_printable(value[key])})",
                    )
                else:
                    extra.include(key)

            if not valid and not state.collecting:
                break

        if extra is not None and (valid or state.collecting):
            valid = self.extra(extra, state) and valid

        return valid

    def __repr__(self) -> str:
        return f"Object({sorted(self.properties)!r})"


class SetOf(Validator):
    """Accepts sets whose items all match ``spec``.

    In coercion mode, anything ``is_array(spec, delimiter)`` accepts is
    turned into a set. Native sets are only rebuilt if one of their items
    actually got coerced.
    """

    def __init__(self, spec: Validator, delimiter: Delimiter | None = None):
        self.spec = spec
        self._array = Array(spec, delimiter)

    def test(self, value: Any, state: ValidationState) -> bool:
        if isinstance(value, AbstractSet):
            if state.coercing:
                if state.coercion is None:
                    return unbound_coercion(state)

                original = list(value)
                staged = list(value)

                if not self._array(staged, state.derive(coercion=None)):
                    return False

                def rebuild() -> Any:
                    if any(not strict_equals(a, b) for a, b in zip(staged, original)):
                        return frozenset(staged) if isinstance(value, frozenset) else set(staged)
                    return value

                propose_lazy(state, value, rebuild)
                return True

            valid = True

            for item in value:
                valid = self.spec(item, state) and valid

                if not valid and not state.collecting:
                    break

            return valid

        if state.coercing:
            if state.coercion is None:
                return unbound_coercion(state)

            store, binder = box(value)
            if not self._array(value, state.derive(coercion=binder)):
                return False

            propose_lazy(state, value, lambda: set(store["value"]))
            return True

        return push_error(state, f"Expected a set (got {get_printable(value)})")

    def __repr__(self) -> str:
        return f"SetOf({self.spec!r})"


class MapOf(Validator):
    """Accepts mappings whose keys match ``key_spec`` and values ``value_spec``.

    Unlike ``Record``, keys can be any hashable value. In coercion mode a
    list of ``[key, value]`` pairs is turned into a dict, and native mappings
    are only rebuilt if one of their pairs actually got coerced.
    """

    def __init__(self, key_spec: Validator, value_spec: Validator):
        self.key_spec = key_spec
        self.value_spec = value_spec
        self._pairs = Array(Tuple([key_spec, value_spec]))

    def test(self, value: Any, state: ValidationState) -> bool:
        if isinstance(value, Mapping):
            if state.coercing:
                if state.coercion is None:
                    return unbound_coercion(state)

                original = [[key, sub] for key, sub in value.items()]
                staged = [[key, sub] for key, sub in value.items()]

                if not self._pairs(staged, state.derive(coercion=None)):
                    return False

                def rebuild() -> Any:
                    changed = any(
                        not strict_equals(a[0], b[0]) or not strict_equals(a[1], b[1])
                        for a, b in zip(staged, original)
                    )
                    return {key: sub for key, sub in staged} if changed else value

                propose_lazy(state, value, rebuild)
                return True

            valid = True

            for key, sub in value.items():
                valid = self.key_spec(key, state) and valid
                if not valid and not state.collecting:
                    break

                valid = self.value_spec(sub, state.derive(path=compute_key(state.path, key))) and valid
                if not valid and not state.collecting:
                    break

            return valid

        if state.coercing:
            if state.coercion is None:
                return unbound_coercion(state)

            if isinstance(value, list):
                if not self._pairs(value, state.derive(coercion=None)):
                    return False

                propose_lazy(state, value, lambda: {key: sub for key, sub in value})
                return True

        return push_error(state, f"Expected a map (got {get_printable(value)})")

    def __repr__(self) -> str:
        return f"MapOf({self.key_spec!r}, {self.value_spec!r})"


def is_array(spec: Validator, delimiter: Delimiter | None = None) -> Array:
    """Create a validator for lists of ``spec`` (``list[T]``)."""
    return Array(spec, delimiter)


def is_tuple(specs: Sequence[Validator], delimiter: Delimiter | None = None) -> Tuple:
    """Create a validator for fixed-length lists, one spec per position."""
    return Tuple(specs, delimiter)


def is_record(spec: Validator, keys: Validator | None = None) -> Record:
    """Create a validator for ``dict[str, T]``-like mappings.

    Args:
        spec: Validator applied to every value
        keys: Optional validator applied to every key (``is_string()`` by default)
    """
    return Record(spec, keys)


def is_dict(spec: Validator, keys: Validator | None = None) -> Record:
    """Alias of ``is_record``."""
    return Record(spec, keys)


def is_object(properties: Mapping[str, Validator], extra: Validator | None = None) -> Object:
    """Create a validator for mappings with declared properties.

    Args:
        properties: Validator for each declared property
        extra: Validator receiving the undeclared properties; when omitted,
            undeclared properties are reported as extraneous

    Returns:
        The validator; its ``properties`` attribute holds the declared specs
    """
    return Object(properties, extra)


def is_partial(properties: Mapping[str, Validator]) -> Object:
    """Like ``is_object``, but undeclared properties are allowed."""
    return Object(properties, extra=Record(Unknown()))


def is_set(spec: Validator, delimiter: Delimiter | None = None) -> SetOf:
    """Create a validator for sets of ``spec`` (supports coercion from lists)."""
    return SetOf(spec, delimiter)


def is_map(key_spec: Validator, value_spec: Validator) -> MapOf:
    """Create a validator for mappings with validated keys and values."""
    return MapOf(key_spec, value_spec)
