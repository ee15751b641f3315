"""Validators combining other validators.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Union

from .coercion import Coercion, apply_all, box, propose, revert_all
from .reporting import push_error, unbound_coercion
from .state import MISSING, ValidationState
from .validator import Validator

Followup = Callable[[Any, ValidationState], bool]


class OneOf(Validator):
    """Accepts values matching any of ``specs``.

    Every branch runs with its own error and coercion lists, under the path
    ``<path>#<n>``, so that a failing branch leaks nothing. Only the
    coercions of the accepted branch are forwarded.

    When ``exclusive`` is set, all branches are evaluated and the value must
    match exactly one of them.
    """

    def __init__(self, specs: Sequence[Validator], exclusive: bool = False):
        self.specs = list(specs)
        self.exclusive = exclusive

    def test(self, value: Any, state: ValidationState) -> bool:
        matches: list[tuple[str, list[Coercion] | None]] = []
        error_buffer: list[str] | None = [] if state.collecting else None

        for index, spec in enumerate(self.specs, start=1):
            sub_errors: list[str] | None = [] if state.collecting else None
            sub_coercions: list[Coercion] | None = [] if state.coercing else None

            branch = state.derive(
                path=f"{state.location}#{index}",
                errors=sub_errors,
                coercions=sub_coercions,
            )

            if spec(value, branch):
                matches.append((f"#{index}", sub_coercions))
                if not self.exclusive:
                    break
            elif error_buffer is not None and sub_errors:
                error_buffer.append(sub_errors[0])

        if len(matches) == 1:
            _, sub_coercions = matches[0]
            if sub_coercions is not None:
                state.coercions.extend(sub_coercions)
            return True

        if len(matches) > 1:
            labels = ", ".join(label for label, _ in matches)
            push_error(state, f"Expected to match exactly a single predicate (matched {labels})")
        elif state.errors is not None:
            state.errors.extend(error_buffer)

        return False

    def __repr__(self) -> str:
        return f"OneOf({self.specs!r}, exclusive={self.exclusive})"


class Cascade(Validator):
    """Runs ``spec``, then refinement checks on the refined value.

    In coercion mode the followups see the coerced value: the coercions
    proposed by ``spec`` are applied for the duration of the followups, then
    reverted. They're forwarded to the parent only if every followup passed.
    Followups run with coercion disabled.
    """

    def __init__(self, spec: Validator, followups: Sequence[Followup]):
        self.spec = spec
        self.followups = list(followups)

    def test(self, value: Any, state: ValidationState) -> bool:
        store: dict[str, Any] | None = None
        sub_coercions: list[Coercion] | None = None
        sub_state = state

        if state.coercing:
            store, binder = box(value)
            sub_coercions = []
            sub_state = state.derive(coercion=binder, coercions=sub_coercions)

        if not self.spec(value, sub_state):
            return False

        reverts = apply_all(sub_coercions) if sub_coercions else []

        try:
            refined = store["value"] if store is not None else value
            followup_state = state.derive(coercion=None, coercions=None)

            valid = True
            for followup in self.followups:
                valid = followup(refined, followup_state) and valid

                if not valid and not state.collecting:
                    break

            if not valid:
                return False

            if sub_coercions is not None:
                if refined is not value:
                    if state.coercion is None:
                        return unbound_coercion(state)

                    propose(state, refined)

                state.coercions.extend(sub_coercions)

            return True
        finally:
            revert_all(reverts)

    def __repr__(self) -> str:
        return f"Cascade({self.spec!r}, {self.followups!r})"


class Optional(Validator):
    """Accepts ``MISSING``, or whatever ``spec`` accepts."""

    def __init__(self, spec: Validator):
        self.spec = spec

    def test(self, value: Any, state: ValidationState) -> bool:
        if value is MISSING:
            return True

        return self.spec(value, state)

    def __repr__(self) -> str:
        return f"Optional({self.spec!r})"


class Nullable(Validator):
    """Accepts ``None``, or whatever ``spec`` accepts."""

    def __init__(self, spec: Validator):
        self.spec = spec

    def test(self, value: Any, state: ValidationState) -> bool:
        if value is None:
            return True

        return self.spec(value, state)

    def __repr__(self) -> str:
        return f"Nullable({self.spec!r})"


def is_one_of(specs: Sequence[Validator], exclusive: bool = False) -> OneOf:
    """Create a validator accepting values that match one of ``specs``.

    Args:
        specs: Candidate validators, tried in order
        exclusive: Require exactly one candidate to match

    Returns:
        The union validator
    """
    return OneOf(specs, exclusive)


def _resolve_followups(followups: tuple[Union[Followup, Sequence[Followup]], ...]) -> list[Followup]:
    if len(followups) == 1 and isinstance(followups[0], (list, tuple)):
        return list(followups[0])
    return list(followups)


def cascade(spec: Validator, *followups: Union[Followup, Sequence[Followup]]) -> Cascade:
    """Create a validator running ``spec`` followed by refinement checks.

    Followups can be given as separate arguments or as a single list. For
    example, a valid port number:

        ```python
        cascade(is_number(), is_integer(), is_in_inclusive_range(1, 65535))
        ```
    """
    return Cascade(spec, _resolve_followups(followups))


def apply_cascade(spec: Validator, *followups: Union[Followup, Sequence[Followup]]) -> Cascade:
    """Alias of ``cascade``."""
    return Cascade(spec, _resolve_followups(followups))


def is_optional(spec: Validator) -> Optional:
    """Wrap ``spec`` to also accept missing values."""
    return Optional(spec)


def is_nullable(spec: Validator) -> Nullable:
    """Wrap ``spec`` to also accept None."""
    return Nullable(spec)
