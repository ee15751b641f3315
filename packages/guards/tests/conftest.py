"""Pytest configuration and fixtures for guards package tests."""

import pytest

from dataknobs_guards import ValidationState
from dataknobs_guards.coercion import apply_all, box
from dataknobs_guards.settings import reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings, without env overrides."""
    for name in ("COERCE", "ERRORS", "THROW"):
        monkeypatch.delenv(f"DATAKNOBS_GUARDS__{name}", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def check():
    """Validate a value while collecting errors.

    Returns a function returning ``(valid, errors)``.
    """

    def _check(validator, value):
        errors = []
        valid = validator(value, ValidationState(errors=errors))
        return valid, errors

    return _check


@pytest.fixture
def coerce():
    """Validate a boxed value in coercion mode, applying coercions on success.

    Returns a function returning ``(valid, value, errors, coercions)``; the
    value is the content of the box after applying (or not) the coercions.
    """

    def _coerce(validator, value, apply=True):
        errors = []
        coercions = []
        store, binder = box(value)
        valid = validator(value, ValidationState(errors=errors, coercion=binder, coercions=coercions))
        if valid and apply:
            apply_all(coercions)
        return valid, store["value"], errors, coercions

    return _coerce
