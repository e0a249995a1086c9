"""Configuration file loading and daemon settings."""

from __future__ import annotations

import os
import shlex
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import Configuration
from .constants import CACHE_DIR, CONFIG_FILE
from .models import LxwengdError
from .playlist import Duration, parse_duration
from .schema import DAEMON_CONFIG_SCHEMA, SECTION
from .validation import ConfigValidator

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader", "Settings", "build_settings"]


class ConfigLoader:
    """Loads the TOML configuration file."""

    def __init__(self, log: logging.Logger) -> None:
        self.log = log

    def load(self, config_filename: str = "") -> dict[str, Any]:
        """Load the `[lxwengd]` section.

        Args:
            config_filename: Optional path to the config file. If empty, the
                default location is used and may be missing.

        Raises:
            LxwengdError: If an explicit file is missing or the file has syntax errors.
        """
        if config_filename:
            fname = Path(os.path.expandvars(config_filename)).expanduser()
            if not fname.exists():
                self.log.critical("Config file not found: %s", fname)
                raise LxwengdError
        else:
            fname = CONFIG_FILE
            if not fname.exists():
                self.log.info("No config file at %s, using defaults", fname)
                return {}

        self.log.info("Loading %s", fname)
        with fname.open("rb") as f:
            try:
                config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                self.log.critical("Problem reading %s: %s", fname, e)
                raise LxwengdError from e

        section = config.get(SECTION, {})
        if not isinstance(section, dict):
            self.log.critical("[%s] must be a table in %s", SECTION, fname)
            raise LxwengdError
        return section


@dataclass(frozen=True)
class Settings:  # pylint: disable=too-many-instance-attributes
    """Everything the daemon needs, merged from the config file and the command line."""

    playlist: str
    binary: str
    search_path: Path
    assets_path: str = ""
    extra_args: list[str] = field(default_factory=list)
    monitors: list[str] = field(default_factory=list)
    default_duration: Duration | None = None
    graceful_timeout: float = 2.0
    cache_dir: Path = CACHE_DIR
    dry_run: bool = False
    standby: bool = False


def build_settings(section: dict[str, Any], log: logging.Logger, **overrides: Any) -> Settings:  # noqa: ANN401
    """Validate the configuration section and apply command line overrides.

    Args:
        section: The `[lxwengd]` section
        log: Logger for validation messages
        **overrides: Command line values, None or empty when not given

    Raises:
        LxwengdError: the configuration is invalid
    """
    validator = ConfigValidator(section, SECTION, log)
    errors = validator.validate(DAEMON_CONFIG_SCHEMA)
    validator.warn_unknown_keys(DAEMON_CONFIG_SCHEMA)
    for error in errors:
        log.error(error)
    if errors:
        raise LxwengdError

    conf = Configuration(section, logger=log, schema=DAEMON_CONFIG_SCHEMA)
    conf.update({key: value for key, value in overrides.items() if value not in (None, "")})

    extra_args = conf.get("extra_args")
    default_duration = conf.get_str("default_duration")
    return Settings(
        playlist=conf.get_str("playlist"),
        binary=conf.get_str("binary"),
        search_path=Path(os.path.expandvars(conf.get_str("search_path"))).expanduser(),
        assets_path=os.path.expanduser(conf.get_str("assets_path")),
        extra_args=shlex.split(extra_args) if isinstance(extra_args, str) else conf.get_list("extra_args"),
        monitors=conf.get_list("monitors"),
        default_duration=parse_duration(default_duration) if default_duration else None,
        graceful_timeout=conf.get_float("graceful_timeout"),
        dry_run=conf.get_bool("dry_run"),
        standby=conf.get_bool("standby"),
    )
