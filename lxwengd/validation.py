"""Checks the configuration section against its declared fields.

Values of the wrong type and failed field checks are errors, unknown keys
only produce warnings (with a suggestion when a known key is close).
"""

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import BOOL_STRINGS

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]

_HINTS: dict[type, str] = {
    bool: "write true or false, without quotes",
    float: "write a number, without quotes",
    str: "write a quoted string",
    list: 'write a list, e.g. ["DP-1", "HDMI-A-1"]',
}


@dataclass
class ConfigField:
    """One key of the configuration section.

    Attributes:
        name: Key in the TOML section
        field_type: Accepted type, or a tuple of accepted types
        default: Used when the key is absent
        description: Shown by `lxwengd --help`
        validator: Extra check, returns the problems found
    """

    name: str
    field_type: type | tuple[type, ...] = str
    default: Any = None
    description: str = ""
    validator: Callable[[Any], list[str]] | None = None

    @property
    def types(self) -> tuple[type, ...]:
        return self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)

    @property
    def type_name(self) -> str:
        """Readable form of the accepted types, e.g. `list or str`."""
        return " or ".join(typ.__name__ for typ in self.types)


class ConfigItems(list):
    """Ordered collection of ConfigField, addressable by name."""

    def __init__(self, *fields: ConfigField) -> None:
        super().__init__(fields)
        self._by_name = {item.name: item for item in fields}

    def get(self, name: str) -> ConfigField | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return [item.name for item in self]


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Build the message reported for an invalid key.

    Args:
        section: The TOML section
        field: The offending key
        message: What is wrong with it
        suggestion: How to fix it, if known
    """
    text = f"[{section}] Config error for '{field}': {message}"
    return f"{text} -> {suggestion}" if suggestion else text


def _matches(expected: type, value: Any) -> bool:  # noqa: ANN401
    if expected is bool:
        return isinstance(value, bool) or (isinstance(value, str) and value.lower() in BOOL_STRINGS)
    if expected in (int, float):
        # TOML booleans are ints for isinstance
        return isinstance(value, int | float) and not isinstance(value, bool)
    return isinstance(value, expected)


class ConfigValidator:
    """Validates one configuration section."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return the error messages for the keys present in the section."""
        errors: list[str] = []
        for item in schema:
            value = self.config.get(item.name)
            if value is None:
                continue
            problem = self._check_type(item, value)
            if problem:
                errors.append(problem)
            elif item.validator:
                errors.extend(format_config_error(self.section, item.name, message) for message in item.validator(value))
        return errors

    def _check_type(self, item: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        if any(_matches(expected, value) for expected in item.types):
            return None
        return format_config_error(
            self.section,
            item.name,
            f"Expected {item.type_name}, got {type(value).__name__}",
            _HINTS.get(item.types[0], ""),
        )

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Warn about keys the schema does not know, returning the warnings."""
        known = schema.names()
        warnings = []
        for key in self.config:
            if key in known:
                continue
            close = difflib.get_close_matches(key, known, n=1)
            if close:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{close[0]}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}', ignored"
            self.log.warning(msg)
            warnings.append(msg)
        return warnings
