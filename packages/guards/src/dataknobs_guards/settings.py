"""Package-wide defaults for the entry helpers.

Settings can come from a dictionary, a YAML or JSON file, and environment
variables. Environment variables take precedence and use the format:

    DATAKNOBS_GUARDS__<SETTING>

Examples:
    - DATAKNOBS_GUARDS__COERCE=true -> coerce by default in ``as_``
    - DATAKNOBS_GUARDS__ERRORS=1    -> collect detailed errors by default

Values are validated (and coerced, so ``"true"`` or ``"0"`` are fine) with
this package's own validators.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml  # type: ignore[import-untyped]

from .coercion import Coercion, apply_all, box
from .combinators import is_optional
from .composites import is_object
from .exceptions import ConfigurationError
from .state import ValidationState
from .types import is_boolean

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAKNOBS_GUARDS__"

SETTINGS_SECTION = "guards"


@dataclass(frozen=True)
class GuardSettings:
    """Defaults applied by ``as_`` when an option isn't passed explicitly.

    Attributes:
        coerce: Apply coercions to the validated value
        errors: Collect detailed error messages
        throw: Raise ``TypeAssertionError`` instead of returning a result
    """

    coerce: bool = False
    errors: bool = False
    throw: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GuardSettings:
        """Create settings from a dictionary.

        Args:
            data: Setting values, possibly as strings (e.g. from the environment)

        Returns:
            GuardSettings object

        Raises:
            ConfigurationError: If a setting is unknown or has an invalid value
        """
        values = dict(data)

        errors: list[str] = []
        coercions: list[Coercion] = []
        store, binder = box(values)

        state = ValidationState(errors=errors, coercion=binder, coercions=coercions)
        if not SETTINGS_SCHEMA(values, state):
            raise ConfigurationError(
                "Invalid guard settings:\n" + "\n".join(f"- {error}" for error in errors),
                context={"errors": errors},
            )

        apply_all(coercions)
        return cls(**store["value"])

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> GuardSettings:
        """Create settings from a YAML or JSON file."""
        return cls.from_dict(read_settings_file(path))

    def merge(self, overrides: Mapping[str, Any]) -> GuardSettings:
        """Return new settings with ``overrides`` applied over these ones."""
        return GuardSettings.from_dict({**self.to_dict(), **overrides})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SETTINGS_SCHEMA = is_object({field.name: is_optional(is_boolean()) for field in fields(GuardSettings)})


def read_settings_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read the guard settings stored in a file.

    The settings can either be at the top level of the file, or under a
    ``guards`` section (so that they can share a file with other
    configuration).

    Raises:
        ConfigurationError: If the file is missing or can't be parsed
    """
    path = Path(path).resolve()

    if not path.exists():
        raise ConfigurationError(f"Settings file not found: {path}", context={"path": str(path)})

    suffix = path.suffix.lower()
    with open(path) as f:
        try:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported file format: {suffix}", context={"path": str(path)})
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse settings file {path}: {e}", context={"path": str(path)}) from e

    if not data:
        return {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file must contain a mapping: {path}", context={"path": str(path)})

    section = data.get(SETTINGS_SECTION)
    if isinstance(section, dict):
        data = section

    logger.debug("Loaded guard settings from %s", path)
    return data


def environment_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Collect the setting overrides defined by environment variables.

    Args:
        environ: Environment to read from (default: ``os.environ``)

    Returns:
        Dictionary mapping setting names to their raw string values
    """
    environ = os.environ if environ is None else environ
    names = {field.name for field in fields(GuardSettings)}

    overrides = {}
    for key, value in environ.items():
        if key.startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX):].lower()
            if name in names:
                overrides[name] = value
            else:
                logger.warning("Ignoring unknown guard setting override %s", key)

    return overrides


_settings: GuardSettings | None = None


def load_settings(
    source: Union[str, Path, Mapping[str, Any], None] = None,
    use_env: bool = True,
) -> GuardSettings:
    """Load settings and make them the active ones.

    Args:
        source: File path or dictionary (defaults only when None)
        use_env: Apply ``DATAKNOBS_GUARDS__*`` environment overrides

    Returns:
        The new active settings
    """
    global _settings

    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, (str, Path)):
        data = read_settings_file(source)
    elif isinstance(source, Mapping):
        data = dict(source)
    else:
        raise ConfigurationError(f"Invalid settings source type: {type(source)}")

    if use_env:
        data.update(environment_overrides())

    _settings = GuardSettings.from_dict(data)
    logger.debug("Active guard settings: %s", _settings)
    return _settings


def get_settings() -> GuardSettings:
    """Return the active settings, loading defaults on first use."""
    if _settings is None:
        return load_settings()
    return _settings


def configure(**overrides: Any) -> GuardSettings:
    """Override some of the active settings."""
    global _settings

    _settings = get_settings().merge(overrides)
    return _settings


def reset_settings() -> None:
    """Forget the active settings (they'll be reloaded on next use)."""
    global _settings

    _settings = None
