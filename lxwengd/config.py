"""Typed view over the `[lxwengd]` section, plus the boolean spellings shared with renderer properties."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["BOOL_FALSE_STRINGS", "BOOL_STRINGS", "BOOL_TRUE_STRINGS", "Configuration", "coerce_to_bool", "parse_bool"]

ConfigValue = float | bool | str | list

BOOL_TRUE_STRINGS = frozenset({"1", "true", "yes", "on", "enabled"})
BOOL_FALSE_STRINGS = frozenset({"0", "false", "no", "off", "disabled"})
BOOL_STRINGS = BOOL_FALSE_STRINGS | BOOL_TRUE_STRINGS


def coerce_to_bool(value: ConfigValue | None, default: bool = False) -> bool:
    """Loose boolean conversion used for settings.

    A missing value gives `default`, a blank or false-ish string gives
    False, any other string is True. Other values use their truth value.
    """
    if value is None:
        return default
    if not isinstance(value, str):
        return bool(value)
    text = value.strip().lower()
    return bool(text) and text not in BOOL_FALSE_STRINGS


def parse_bool(value: str) -> bool | None:
    """Strictly parse a boolean string, returning None when it is not one."""
    text = value.strip().lower()
    if text in BOOL_TRUE_STRINGS:
        return True
    if text in BOOL_FALSE_STRINGS:
        return False
    return None


class Configuration(dict):
    """The configuration section, with schema defaults for missing keys.

    Args:
        section: Values read from the file, then updated with command line overrides
        logger: Receives warnings about values of the wrong kind
        schema: Fields whose defaults fill the missing keys
    """

    def __init__(self, section: dict, *, logger: logging.Logger, schema: ConfigItems | None = None) -> None:
        super().__init__(section)
        self.log = logger
        self.defaults: dict[str, ConfigValue] = {}
        for item in schema or ():
            if item.default is not None:
                self.defaults[item.name] = item.default

    def get(self, name: str, default: ConfigValue | None = None) -> ConfigValue | None:  # type: ignore[override]
        if name in self:
            return self[name]
        return self.defaults.get(name, default)

    def get_bool(self, name: str, default: bool = False) -> bool:
        return coerce_to_bool(self.get(name), default)

    def get_float(self, name: str, default: float = 0.0) -> float:
        """Return `name` as a float, `default` when missing or not a number."""
        value = self.get(name)
        if value is None:
            return default
        try:
            return float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            self.log.warning("%s should be a number, got %r", name, value)
            return default

    def get_str(self, name: str, default: str = "") -> str:
        value = self.get(name)
        return default if value is None else str(value)

    def get_list(self, name: str) -> list[str]:
        """Return `name` as a list of strings, a single string is split on whitespace."""
        value = self.get(name)
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        if isinstance(value, list):
            return [str(item) for item in value]
        self.log.warning("%s should be a list, got %r", name, value)
        return []
