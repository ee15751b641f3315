"""Composable runtime validation for JSON-like data.

This package provides small predicate objects that compose into schemas:

- **Type validators**: is_string, is_number, is_boolean, is_date, is_literal...
- **Composites**: is_array, is_tuple, is_record, is_object, is_set, is_map
- **Combinators**: is_one_of, cascade, is_optional, is_nullable
- **Refinements**: lengths, ranges, formats and key relationships for cascade
- **Entry helpers**: assert_, assert_with_errors, as_, fn

Example:
    ```python
    from dataknobs_guards import ValidationState, as_, is_boolean, is_object, is_string

    schema = is_object({"name": is_string(), "enabled": is_boolean()})

    # Plain check
    schema({"name": "foo", "enabled": True})  # True

    # Detailed errors
    errors = []
    schema({"name": 42}, ValidationState(errors=errors))
    # ['.name: Expected a string (got 42)', '.enabled: Expected a boolean (got undefined)']

    # Coercion
    value, errors = as_({"name": "foo", "enabled": "true"}, schema, coerce=True)
    # value == {"name": "foo", "enabled": True}
    ```
"""

from dataknobs_guards.coercion import (
    Coercion,
    Direction,
    LazyToggle,
    SlotBinder,
    SlotToggle,
)
from dataknobs_guards.combinators import (
    Cascade,
    Nullable,
    OneOf,
    Optional,
    apply_cascade,
    cascade,
    is_nullable,
    is_one_of,
    is_optional,
)
from dataknobs_guards.composites import (
    Array,
    MapOf,
    Object,
    Record,
    SetOf,
    Tuple,
    is_array,
    is_dict,
    is_map,
    is_object,
    is_partial,
    is_record,
    is_set,
    is_tuple,
)
from dataknobs_guards.exceptions import (
    CoercionError,
    ConfigurationError,
    GuardError,
    TypeAssertionError,
)
from dataknobs_guards.format import compute_key, get_printable
from dataknobs_guards.helpers import (
    KeyRelationship,
    MissingType,
    has_at_least_one_key,
    has_exact_length,
    has_forbidden_keys,
    has_key_relationship,
    has_max_length,
    has_min_length,
    has_mutually_exclusive_keys,
    has_required_keys,
    has_unique_items,
    is_at_least,
    is_at_most,
    is_base64,
    is_hex_color,
    is_in_exclusive_range,
    is_in_inclusive_range,
    is_integer,
    is_iso8601,
    is_json,
    is_lower_case,
    is_negative,
    is_positive,
    is_upper_case,
    is_uuid4,
    matches_regexp,
)
from dataknobs_guards.reporting import push_error
from dataknobs_guards.result import ValidationResult
from dataknobs_guards.settings import (
    GuardSettings,
    configure,
    get_settings,
    load_settings,
    reset_settings,
)
from dataknobs_guards.state import MISSING, ValidationState
from dataknobs_guards.tools import as_, assert_, assert_with_errors, fn
from dataknobs_guards.types import (
    is_boolean,
    is_date,
    is_enum_mapping,
    is_enum_values,
    is_instance_of,
    is_literal,
    is_number,
    is_payload,
    is_string,
    is_unknown,
)
from dataknobs_guards.validator import Validator, make_validator

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Contract
    "Validator",
    "ValidationState",
    "MISSING",
    "make_validator",
    "push_error",
    "compute_key",
    "get_printable",
    # Coercion
    "Coercion",
    "Direction",
    "SlotBinder",
    "SlotToggle",
    "LazyToggle",
    # Types
    "is_unknown",
    "is_literal",
    "is_string",
    "is_number",
    "is_boolean",
    "is_date",
    "is_enum_values",
    "is_enum_mapping",
    "is_instance_of",
    "is_payload",
    # Composites
    "Array",
    "Tuple",
    "Record",
    "Object",
    "SetOf",
    "MapOf",
    "is_array",
    "is_tuple",
    "is_record",
    "is_dict",
    "is_object",
    "is_partial",
    "is_set",
    "is_map",
    # Combinators
    "OneOf",
    "Cascade",
    "Optional",
    "Nullable",
    "is_one_of",
    "cascade",
    "apply_cascade",
    "is_optional",
    "is_nullable",
    # Refinements
    "has_min_length",
    "has_max_length",
    "has_exact_length",
    "has_unique_items",
    "is_negative",
    "is_positive",
    "is_at_least",
    "is_at_most",
    "is_in_inclusive_range",
    "is_in_exclusive_range",
    "is_integer",
    "matches_regexp",
    "is_lower_case",
    "is_upper_case",
    "is_uuid4",
    "is_iso8601",
    "is_hex_color",
    "is_base64",
    "is_json",
    "MissingType",
    "KeyRelationship",
    "has_required_keys",
    "has_at_least_one_key",
    "has_forbidden_keys",
    "has_mutually_exclusive_keys",
    "has_key_relationship",
    # Entry helpers
    "ValidationResult",
    "assert_",
    "assert_with_errors",
    "as_",
    "fn",
    # Settings
    "GuardSettings",
    "configure",
    "get_settings",
    "load_settings",
    "reset_settings",
    # Exceptions
    "GuardError",
    "TypeAssertionError",
    "ConfigurationError",
    "CoercionError",
]
