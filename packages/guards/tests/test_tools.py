"""Tests for the entry helpers."""

import logging

import pytest

from dataknobs_guards import (
    TypeAssertionError,
    ValidationResult,
    as_,
    assert_,
    assert_with_errors,
    configure,
    fn,
    is_boolean,
    is_number,
    is_object,
    is_string,
)


class TestAssert:
    """Test assertion helpers."""

    def test_assert_passes(self):
        """Test that valid values pass silently."""
        assert assert_("foo", is_string()) is None

    def test_assert_raises(self):
        """Test the bare assertion message."""
        with pytest.raises(TypeAssertionError) as exc_info:
            assert_(42, is_string())
        assert str(exc_info.value) == "Type mismatch"
        assert exc_info.value.errors == []

    def test_assert_with_errors(self):
        """Test that collected errors are itemized in the message."""
        with pytest.raises(TypeAssertionError) as exc_info:
            assert_with_errors({"a": 1, "b": 2}, is_object({"a": is_string(), "b": is_string()}))
        assert str(exc_info.value) == (
            "Type mismatch\n\n- .a: Expected a string (got 1)\n- .b: Expected a string (got 2)"
        )
        assert exc_info.value.errors == [".a: Expected a string (got 1)", ".b: Expected a string (got 2)"]
        assert exc_info.value.context == {"errors": exc_info.value.errors}


class TestAs:
    """Test validation with results."""

    def test_success(self):
        """Test the default result on success."""
        result = as_(42, is_number())
        assert isinstance(result, ValidationResult)
        assert result.valid is True
        assert bool(result) is True
        assert tuple(result) == (42, None)

    def test_failure_without_details(self):
        """Test that errors default to True."""
        value, errors = as_("x", is_number())
        assert value is None
        assert errors is True

    def test_failure_with_details(self):
        """Test that detailed errors are returned when asked."""
        result = as_("x", is_number(), errors=True)
        assert not result
        assert result.errors == ['.: Expected a number (got "x")']

    def test_coerce_leaf(self):
        """Test coercing a root value."""
        assert as_("true", is_boolean(), coerce=True).value is True
        assert as_("42", is_number(), coerce=True).value == 42

    def test_coerce_object(self):
        """Test that coercions apply to the input."""
        data = {"foo": "true"}
        value, errors = as_(data, is_object({"foo": is_boolean()}), coerce=True)
        assert errors is None
        assert value is data
        assert data == {"foo": True}

    def test_failed_coercion_leaves_input(self):
        """Test that nothing is applied on failure."""
        data = {"a": "true", "b": "x"}
        value, errors = as_(data, is_object({"a": is_boolean(), "b": is_boolean()}), coerce=True, errors=True)
        assert value is None
        assert errors == ['.b: Expected a boolean (got "x")']
        assert data == {"a": "true", "b": "x"}

    def test_unsafe_number(self):
        """Test that unsafe numbers are rejected untouched."""
        text = "123456789123456789123456789123456789123456789"
        value, errors = as_(text, is_number(), coerce=True, errors=True)
        assert value is None
        assert errors == [f".: Received a number that can't be safely represented by the runtime ({text})"]

    def test_throw(self):
        """Test that throw returns bare values and raises on failure."""
        assert as_("1", is_number(), coerce=True, throw=True) == 1

        with pytest.raises(TypeAssertionError) as exc_info:
            as_("x", is_number(), throw=True, errors=True)
        assert exc_info.value.errors == ['.: Expected a number (got "x")']

    def test_settings_defaults(self):
        """Test that omitted options come from the active settings."""
        configure(coerce=True, throw=True)
        assert as_("true", is_boolean()) is True
        assert as_("true", is_boolean(), coerce=False, throw=False).valid is False

    def test_logs_applied_coercions(self, caplog):
        """Test the debug log of applied coercions."""
        with caplog.at_level(logging.DEBUG, logger="dataknobs_guards.tools"):
            as_({"foo": "1"}, is_object({"foo": is_boolean()}), coerce=True)
        assert "Applied 1 coercion(s)" in caplog.text


class TestFn:
    """Test argument-checking wrappers."""

    def test_valid_call(self):
        """Test that valid arguments reach the implementation."""

        def add(a, b):
            """Add two numbers."""
            return a + b

        checked = fn([is_number(), is_number()], add)
        assert checked(1, 2) == 3
        assert checked.__name__ == "add"
        assert checked.__doc__ == "Add two numbers."

    def test_invalid_arguments(self):
        """Test that mismatching arguments raise."""
        checked = fn([is_number(), is_number()], lambda a, b: a + b)

        with pytest.raises(TypeAssertionError):
            checked(1, "2")

    def test_wrong_arity(self):
        """Test that the argument count must match."""
        checked = fn([is_number()], lambda *args: len(args))

        with pytest.raises(TypeAssertionError):
            checked(1, 2)
        with pytest.raises(TypeAssertionError):
            checked()
