"""Entry helpers: validation with exceptions, results, and coercion.

These are the only functions of the package that raise on invalid values;
validators themselves just return False.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Sequence, TypeVar

from .coercion import Coercion, apply_all, box
from .composites import Tuple
from .exceptions import TypeAssertionError
from .result import ValidationResult
from .settings import get_settings
from .state import ValidationState
from .validator import Validator

logger = logging.getLogger(__name__)

R = TypeVar("R")


def assert_(value: Any, validator: Validator) -> None:
    """Raise ``TypeAssertionError`` if ``value`` doesn't match ``validator``."""
    if not validator(value):
        raise TypeAssertionError()


def assert_with_errors(value: Any, validator: Validator) -> None:
    """Like ``assert_``, but the exception lists what exactly is invalid."""
    errors: list[str] = []
    if not validator(value, ValidationState(errors=errors)):
        raise TypeAssertionError(errors)


def as_(
    value: Any,
    validator: Validator,
    *,
    coerce: bool | None = None,
    errors: bool | None = None,
    throw: bool | None = None,
) -> Any:
    """Validate a value, optionally coercing it.

    Args:
        value: Value to validate
        validator: Validator to apply
        coerce: Apply the coercions proposed by the validator; the input is
            only modified if the whole validation succeeds
        errors: Collect detailed error messages
        throw: Raise ``TypeAssertionError`` on failure and return the bare
            value on success

    Options left to None use the active settings (see ``configure``).

    Returns:
        The (coerced) value when ``throw`` is set, a ``ValidationResult``
        otherwise

    Raises:
        TypeAssertionError: If ``throw`` is set and the value is invalid
    """
    settings = get_settings()
    coerce = settings.coerce if coerce is None else coerce
    errors = settings.errors if errors is None else errors
    throw = settings.throw if throw is None else throw

    error_list: list[str] | None = [] if errors else None

    if not coerce:
        if not validator(value, ValidationState(errors=error_list)):
            return _fail(error_list, throw)

        return value if throw else ValidationResult.success(value)

    store, binder = box(value)
    coercions: list[Coercion] = []

    if not validator(value, ValidationState(errors=error_list, coercion=binder, coercions=coercions)):
        return _fail(error_list, throw)

    apply_all(coercions)
    if coercions:
        logger.debug("Applied %d coercion(s) at %s", len(coercions), [path for path, _ in coercions])

    coerced = store["value"]
    return coerced if throw else ValidationResult.success(coerced)


def _fail(errors: list[str] | None, throw: bool) -> ValidationResult:
    if throw:
        raise TypeAssertionError(errors)

    return ValidationResult.failure(errors if errors is not None else True)


def fn(validators: Sequence[Validator], impl: Callable[..., R]) -> Callable[..., R]:
    """Wrap ``impl`` so that its positional arguments get validated first.

    The argument list is checked as a fixed-length tuple: passing too many or
    too few arguments is a mismatch too.

        ```python
        add = fn([is_number(), is_number()], lambda a, b: a + b)
        add(1, 2)    # 3
        add(1, "2")  # raises TypeAssertionError
        ```
    """
    check = Tuple(validators)

    @functools.wraps(impl)
    def wrapper(*args: Any) -> R:
        if not check(list(args)):
            logger.debug("Rejected arguments for %s", getattr(impl, "__name__", impl))
            raise TypeAssertionError()

        return impl(*args)

    return wrapper
