"""Error sink shared by all validators.
"""

from __future__ import annotations

from typing import Literal

from .state import ValidationState


def push_error(state: ValidationState | None, message: str) -> Literal[False]:
    """Record ``message`` at the current path, if errors are being collected.

    Always returns ``False`` so that validators can ``return push_error(...)``.
    """
    if state is not None and state.errors is not None:
        state.errors.append(f"{state.location}: {message}")
    return False


def unbound_coercion(state: ValidationState | None) -> Literal[False]:
    """Report a coercion-mode call that didn't receive a binder."""
    return push_error(state, "Unbound coercion result")
