"""lxwengd - wallpaper playlist daemon (cli client & daemon)."""

import asyncio
import os
import sys

from .client import run_client
from .config_loader import ConfigLoader, build_settings
from .constants import CONTROL
from .daemon import run_daemon
from .logging_setup import get_logger, init_logger
from .models import ExitCode, LxwengdError
from .schema import DAEMON_CONFIG_SCHEMA
from .version import VERSION

__all__ = ["main", "use_flag", "use_param"]

USAGE = """Syntax: lxwengd [options]           run the daemon
        lxwengd <command> [args]    control a running daemon ("lxwengd help" lists commands)

Options:
  --playlist <name>      playlist played at startup
  --binary <path>        renderer executable
  --assets-path <path>   renderer assets folder
  --extra-args <args>    arguments passed to every renderer (one quoted string)
  --dry-run              print renderer command lines instead of running them
  --standby              do not play any playlist at startup
  --config <file>        configuration file
  --debug <logfile>      verbose logging, also written to <logfile>
  --help, --version

Configuration ([lxwengd] section):
"""


class UsageError(Exception):
    """Invalid command line."""


def use_param(txt: str) -> str:
    """Check if parameter `txt` is in sys.argv.

    if found, removes it from sys.argv & returns the argument value
    """
    v = ""
    if txt in sys.argv:
        i = sys.argv.index(txt)
        if i + 1 >= len(sys.argv):
            msg = f"{txt} needs a value"
            raise UsageError(msg)
        v = sys.argv[i + 1]
        del sys.argv[i : i + 2]
    return v


def use_flag(*names: str) -> bool:
    """Remove the flag from sys.argv, returning whether it was present."""
    found = False
    for name in names:
        while name in sys.argv:
            sys.argv.remove(name)
            found = True
    return found


def _usage() -> str:
    return USAGE + "\n".join(f"  {field.name:18s} {field.description} (default: {field.default!r})" for field in DAEMON_CONFIG_SCHEMA)


def main() -> None:  # noqa: C901
    """Run the command."""
    try:
        debug_flag = use_param("--debug")
        init_logger(filename=debug_flag or None, force_debug=bool(debug_flag))
        log = get_logger("startup")

        if len(sys.argv) > 1 and not sys.argv[1].startswith("-"):
            sys.exit(asyncio.run(run_client(sys.argv[1:])))

        if use_flag("--help", "-h"):
            print(_usage())
            sys.exit(ExitCode.SUCCESS)
        if use_flag("--version", "-V"):
            print(VERSION)
            sys.exit(ExitCode.SUCCESS)

        config_file = use_param("--config")
        overrides = {
            "playlist": use_param("--playlist"),
            "binary": use_param("--binary"),
            "assets_path": use_param("--assets-path"),
            "extra_args": use_param("--extra-args"),
            "dry_run": use_flag("--dry-run"),
            "standby": use_flag("--standby"),
        }
        if len(sys.argv) > 1:
            msg = f"unknown option {sys.argv[1]}"
            raise UsageError(msg)
    except UsageError as e:
        print(f"{e}\n\n{USAGE.splitlines()[0]}", file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)

    if os.path.exists(CONTROL):
        log.critical(
            """%s exists,
is lxwengd already running ?
If that's not the case, delete this file and run again.""",
            CONTROL,
        )
        sys.exit(ExitCode.STARTUP_ERROR)

    exit_code = ExitCode.SUCCESS
    try:
        settings = build_settings(ConfigLoader(log).load(config_file), log, **overrides)
        asyncio.run(run_daemon(settings))
    except KeyboardInterrupt:
        pass
    except LxwengdError:
        log.critical("Daemon failed.")
        exit_code = ExitCode.STARTUP_ERROR
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        exit_code = ExitCode.STARTUP_ERROR
    finally:
        if os.path.exists(CONTROL):
            os.unlink(CONTROL)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
