"""Custom exceptions for the dataknobs_guards package.

This module defines exception types for the guards package,
built on the common exception framework from dataknobs_common.

Validators themselves never raise on bad input: a failed check is a
``False`` return plus an optional message pushed to the error sink. The
exceptions below are raised exclusively by the outer helpers (``assert_``,
``as_``, ``fn``), by the settings layer, and by low-level misuse of the
coercion primitives.

Example:
    ```python
    from dataknobs_guards import TypeAssertionError, assert_with_errors, is_string

    try:
        assert_with_errors(42, is_string())
    except TypeAssertionError as e:
        print(e.errors)
        # ['.: Expected a string (got 42)']
    ```
"""

from __future__ import annotations

from dataknobs_common import ConfigurationError, DataknobsError


class GuardError(DataknobsError):
    """Base exception for the errors specific to the guards package."""

    pass


class TypeAssertionError(GuardError):
    """Raised when an asserted value doesn't match its validator.

    The message is always ``Type mismatch``. When detailed errors were
    collected, they're appended after a blank line, one ``- <error>`` per
    line, and also exposed through ``errors``.
    """

    def __init__(self, errors: list[str] | None = None):
        message = "Type mismatch"

        if errors:
            message += "\n"
            for error in errors:
                message += f"\n- {error}"

        super().__init__(message, context={"errors": list(errors or [])})
        self.errors = list(errors or [])


class CoercionError(GuardError):
    """Raised when a coercion can't be written into its container.

    This only happens through direct use of the coercion primitives on an
    immutable container; the built-in validators never bind such slots.
    """

    pass


__all__ = [
    "GuardError",
    "TypeAssertionError",
    "ConfigurationError",
    "CoercionError",
]
