"""Tests for structural validators."""

import re

import pytest

from dataknobs_guards import (
    MISSING,
    ValidationState,
    is_array,
    is_boolean,
    is_dict,
    is_map,
    is_number,
    is_object,
    is_optional,
    is_partial,
    is_record,
    is_set,
    is_string,
    is_tuple,
)
from dataknobs_guards.coercion import SlotBinder, apply_all


class TestArray:
    """Test list validation."""

    def test_valid(self):
        """Test that every item is checked."""
        assert is_array(is_string())(["a", "b"]) is True
        assert is_array(is_string())([]) is True

    def test_collects_every_item_error(self, check):
        """Test that all failing items are reported with their index."""
        assert check(is_array(is_string()), ["a", 1, 2]) == (
            False,
            [".[1]: Expected a string (got 1)", ".[2]: Expected a string (got 2)"],
        )

    def test_not_a_list(self, check):
        """Test the container type check."""
        assert check(is_array(is_string()), "a,b") == (False, ['.: Expected an array (got "a,b")'])

    def test_coerces_items(self, coerce):
        """Test coercion of each item, in place."""
        items = ["true"]
        valid, result, _, _ = coerce(is_array(is_boolean()), items)
        assert valid is True
        assert result == [True]
        assert result is items

    def test_delimiter_split(self, coerce):
        """Test that strings are split, then items coerced."""
        valid, result, _, _ = coerce(is_array(is_number(), delimiter=","), "1,2,3")
        assert valid is True
        assert result == [1, 2, 3]

    def test_regex_delimiter(self, coerce):
        """Test splitting on a compiled pattern."""
        valid, result, _, _ = coerce(is_array(is_string(), delimiter=re.compile(r"\s*;\s*")), "a ; b;c")
        assert valid is True
        assert result == ["a", "b", "c"]

    def test_failed_split_leaves_input(self, coerce):
        """Test that nothing is proposed when split items fail."""
        valid, result, errors, coercions = coerce(is_array(is_number(), delimiter=","), "1,x")
        assert valid is False
        assert result == "1,x"
        assert errors == ['.[1]: Expected a number (got "x")']


class TestTuple:
    """Test fixed-length list validation."""

    def test_valid(self):
        """Test positional validation."""
        validator = is_tuple([is_string(), is_number(), is_boolean()])
        assert validator(["foo", 42, True]) is True

    def test_length_mismatch(self, check):
        """Test that extra items fail even when the others validate."""
        validator = is_tuple([is_string(), is_number(), is_boolean()])
        assert check(validator, ["foo", 42, True, False]) == (
            False,
            [".: Expected to have a length of exactly 3 elements (got 4)"],
        )
        assert validator(["foo", 42, True, False]) is False

    def test_collects_item_errors(self, check):
        """Test that positional errors are reported with the length error."""
        valid, errors = check(is_tuple([is_string(), is_number()]), [1])
        assert valid is False
        assert errors == [
            ".: Expected to have a length of exactly 2 elements (got 1)",
            ".[0]: Expected a string (got 1)",
        ]

    def test_delimiter_split(self, coerce):
        """Test that strings are split before checking positions."""
        valid, result, _, _ = coerce(is_tuple([is_string(), is_number()], delimiter=":"), "port:8080")
        assert valid is True
        assert result == ["port", 8080]


class TestRecord:
    """Test string-keyed mapping validation."""

    def test_valid(self):
        """Test that every value is checked."""
        assert is_record(is_number())({"a": 1, "b": 2}) is True
        assert is_dict(is_number())({}) is True

    def test_errors(self, check):
        """Test value errors and the container check."""
        assert check(is_record(is_number()), {"a": 1, "b": "x"}) == (
            False,
            ['.b: Expected a number (got "x")'],
        )
        assert check(is_record(is_number()), [1]) == (False, [".: Expected an object (got an array)"])

    def test_key_validation(self, check):
        """Test that keys go through the key validator at their path."""
        validator = is_record(is_number(), keys=is_string())
        assert check(validator, {1: 1}) == (False, [".[1]: Expected a string (got 1)"])

    def test_unsafe_keys(self, check):
        """Test that prototype-pollution keys are always rejected."""
        assert check(is_record(is_string()), {"__proto__": "x"}) == (False, [".__proto__: Unsafe property name"])
        assert is_record(is_string())({"constructor": "x"}) is False

    @pytest.mark.parametrize(
        "value,key",
        [
            ({"__proto__": "x"}, "__proto__"),
            ({"constructor": "x"}, "constructor"),
            ([["__proto__", "x"]], "__proto__"),
            ([["a", "b"], ["constructor", "y"]], "constructor"),
        ],
    )
    def test_unsafe_keys_with_coercion(self, coerce, value, key):
        """Test that unsafe keys are rejected for mappings and pair lists alike."""
        snapshot = repr(value)
        valid, result, errors, _ = coerce(is_record(is_string()), value)
        assert valid is False
        assert result is value
        assert repr(value) == snapshot
        assert errors == [f".{key}: Unsafe property name"]

    def test_unsafe_pairs_all_reported(self, coerce):
        """Test that every unsafe pair is reported when collecting errors."""
        valid, _, errors, _ = coerce(is_record(is_string()), [["__proto__", "x"], ["constructor", "y"]])
        assert valid is False
        assert errors == [".__proto__: Unsafe property name", ".constructor: Unsafe property name"]

    def test_unsafe_pairs_fast_fail(self):
        """Test that unsafe pairs fail without an error sink too."""
        coercions = []
        store = {"value": [["__proto__", "x"]]}
        state = ValidationState(coercion=SlotBinder(store, "value"), coercions=coercions)
        assert is_record(is_string())(store["value"], state) is False
        assert coercions == []

    def test_coerces_values(self, coerce):
        """Test value coercion in place."""
        valid, result, _, _ = coerce(is_record(is_boolean()), {"a": "1", "b": "false"})
        assert valid is True
        assert result == {"a": True, "b": False}

    def test_coerces_pairs(self, coerce):
        """Test that lists of pairs become dicts, values coerced."""
        valid, result, _, _ = coerce(is_record(is_boolean()), [["a", "true"], ["b", False]])
        assert valid is True
        assert result == {"a": True, "b": False}

    def test_invalid_pairs(self, coerce):
        """Test that bad pairs leave the input untouched."""
        pairs = [["a", "maybe"]]
        valid, result, errors, _ = coerce(is_record(is_boolean()), pairs)
        assert valid is False
        assert result is pairs
        assert pairs == [["a", "maybe"]]
        assert errors == ['.[0][1]: Expected a boolean (got "maybe")']


class TestObject:
    """Test mappings with declared properties."""

    def test_valid(self):
        """Test declared properties."""
        validator = is_object({"foo": is_string(), "bar": is_optional(is_number())})
        assert validator({"foo": "x", "bar": 1}) is True
        assert validator({"foo": "x"}) is True

    def test_extraneous_property(self, check):
        """Test that undeclared properties are rejected."""
        assert check(is_object({"foo": is_string()}), {"foo": "hello", "bar": "test"}) == (
            False,
            ['.bar: Extraneous property (got "test")'],
        )

    def test_extraneous_property_quoted_path(self, check):
        """Test that non-identifier keys are quoted in paths."""
        assert check(is_object({}), {"foo bar": 1}) == (False, ['.["foo bar"]: Extraneous property (got 1)'])

    def test_missing_property(self, check):
        """Test that missing properties validate as MISSING."""
        assert check(is_object({"foo": is_string()}), {}) == (False, [".foo: Expected a string (got undefined)"])

    def test_nested_paths(self, check):
        """Test paths through nested containers."""
        validator = is_object({"users": is_array(is_object({"name": is_string()}))})
        assert check(validator, {"users": [{"name": "a"}, {"name": None}]}) == (
            False,
            [".users[1].name: Expected a string (got null)"],
        )

    @pytest.mark.parametrize("key", ["__proto__", "constructor"])
    def test_unsafe_keys(self, check, coerce, key):
        """Test that unsafe keys are rejected, with or without coercion."""
        assert check(is_object({}), {key: "x"}) == (False, [f".{key}: Unsafe property name"])

        valid, _, errors, _ = coerce(is_object({}), {key: "x"})
        assert valid is False
        assert errors == [f".{key}: Unsafe property name"]

    def test_fast_fail_stops_early(self):
        """Test that fast-fail mode returns False on the first failure."""
        assert is_object({"a": is_string(), "b": is_string()})({"a": 1, "b": 2}) is False

    def test_coercion(self, coerce):
        """Test that coercions apply to the real input."""
        data = {"foo": "true"}
        valid, result, _, coercions = coerce(is_object({"foo": is_boolean()}), data)
        assert valid is True
        assert result is data
        assert data == {"foo": True}
        assert [path for path, _ in coercions] == [".foo"]

    def test_coercion_not_applied_until_asked(self):
        """Test that validating never mutates the input by itself."""
        data = {"foo": "true"}
        coercions = []
        assert is_object({"foo": is_boolean()})(data, ValidationState(coercions=coercions)) is True
        assert len(coercions) == 1
        assert data == {"foo": "true"}

    def test_failed_coercion_proposes_nothing_useful(self, coerce):
        """Test that a failing object leaves the input unmodified."""
        data = {"a": "true", "b": "nope"}
        valid, _, errors, coercions = coerce(is_object({"a": is_boolean(), "b": is_boolean()}), data)
        assert valid is False
        assert data == {"a": "true", "b": "nope"}
        assert errors == ['.b: Expected a boolean (got "nope")']

    def test_extra_properties(self, check):
        """Test that undeclared properties go through the extra validator."""
        validator = is_object({"name": is_string()}, extra=is_record(is_number()))
        assert validator({"name": "x", "a": 1, "b": 2}) is True
        assert check(validator, {"name": "x", "a": "1"}) == (False, ['.a: Expected a number (got "1")'])

    def test_extra_coercion_reaches_input(self, coerce):
        """Test that coercions on extra properties land on the real input."""
        data = {"name": "x", "flag": "true"}
        valid, _, _, _ = coerce(is_object({"name": is_string()}, extra=is_record(is_boolean())), data)
        assert valid is True
        assert data == {"name": "x", "flag": True}

    def test_partial(self):
        """Test that partial objects allow anything extra."""
        validator = is_partial({"name": is_string()})
        assert validator({"name": "x", "whatever": [1, 2]}) is True
        assert validator({"name": 1}) is False

    def test_properties_are_exposed(self):
        """Test that the declared specs can be introspected."""
        name = is_string()
        assert is_object({"name": name}).properties == {"name": name}


class TestSet:
    """Test set validation."""

    def test_valid(self, check):
        """Test native sets."""
        assert is_set(is_number())({1, 2}) is True
        assert check(is_set(is_number()), {"a"}) == (False, ['.: Expected a number (got "a")'])
        assert check(is_set(is_number()), [1]) == (False, [".: Expected a set (got an array)"])

    def test_coerces_list(self, coerce):
        """Test that lists become sets, items coerced."""
        valid, result, _, _ = coerce(is_set(is_number()), ["1", "2", "2"])
        assert valid is True
        assert result == {1, 2}

    def test_coerces_delimited_string(self, coerce):
        """Test that delimited strings become sets."""
        valid, result, _, _ = coerce(is_set(is_string(), delimiter=","), "a,b,a")
        assert valid is True
        assert result == {"a", "b"}

    def test_native_set_kept_when_unchanged(self, coerce):
        """Test that native sets are only rebuilt when items change."""
        original = {1, 2}
        valid, result, _, _ = coerce(is_set(is_number()), original)
        assert valid is True
        assert result is original

    def test_native_set_rebuilt(self, coerce):
        """Test that coerced items produce a new set."""
        valid, result, _, _ = coerce(is_set(is_number()), {"1", "2"})
        assert valid is True
        assert result == {1, 2}


class TestMap:
    """Test mappings with arbitrary keys."""

    def test_valid(self, check):
        """Test native mappings with non-string keys."""
        validator = is_map(is_number(), is_string())
        assert validator({1: "a", 2: "b"}) is True
        assert check(validator, {1: 2}) == (False, [".[1]: Expected a string (got 2)"])
        assert check(validator, "x") == (False, ['.: Expected a map (got "x")'])

    def test_coerces_pairs(self, coerce):
        """Test that lists of pairs become dicts."""
        valid, result, _, _ = coerce(is_map(is_number(), is_boolean()), [["1", "true"], [2, 0]])
        assert valid is True
        assert result == {1: True, 2: False}

    def test_native_map_kept_when_unchanged(self, coerce):
        """Test that native mappings are only rebuilt when pairs change."""
        original = {1: True}
        valid, result, _, _ = coerce(is_map(is_number(), is_boolean()), original)
        assert valid is True
        assert result is original

    def test_native_map_rebuilt(self, coerce):
        """Test that coerced keys produce a new mapping."""
        original = {"1": "true"}
        valid, result, _, _ = coerce(is_map(is_number(), is_boolean()), original)
        assert valid is True
        assert result == {1: True}
        assert original == {"1": "true"}


class TestNonMutation:
    """Test that coercion mode never touches the input by itself."""

    @pytest.mark.parametrize(
        "validator,value",
        [
            (is_array(is_boolean()), ["true", "0"]),
            (is_record(is_number()), {"a": "1"}),
            (is_object({"a": is_array(is_number())}), {"a": ["1", "x"]}),
            (is_set(is_number()), {"1"}),
        ],
    )
    def test_input_unchanged(self, coerce, validator, value):
        """Test that validating leaves the value equal to a snapshot."""
        snapshot = repr(value)
        coerce(validator, value, apply=False)
        assert repr(value) == snapshot

    def test_apply_then_revert(self, coerce):
        """Test that reverting every coercion restores the input."""
        data = {"a": ["1", "2"], "b": "true"}
        validator = is_object({"a": is_array(is_number()), "b": is_boolean()})
        valid, _, _, coercions = coerce(validator, data, apply=False)
        assert valid is True

        reverts = apply_all(coercions)
        assert data == {"a": [1, 2], "b": True}

        for revert in reversed(reverts):
            revert()
        assert data == {"a": ["1", "2"], "b": "true"}

    def test_missing_value(self):
        """Test that MISSING is not an object."""
        assert is_object({})(MISSING) is False
