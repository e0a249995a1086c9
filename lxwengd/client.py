"""Client side of the control socket."""

import asyncio
import json
import shlex
import sys

from .ansi import StateStyles, colorize, should_colorize
from .constants import CONTROL
from .logging_setup import get_logger
from .models import ExitCode, ResponsePrefix

__all__ = ["format_status", "run_client", "send_request"]


async def send_request(args: list[str], path: str = CONTROL) -> str:
    """Send one request to the daemon and return its raw response.

    Raises:
        ConnectionRefusedError, FileNotFoundError: no daemon listens on `path`
    """
    reader, writer = await asyncio.open_unix_connection(path)
    writer.write((shlex.join(args) + "\n").encode())
    writer.write_eof()
    await writer.drain()
    response = (await reader.read()).decode("utf-8")
    writer.close()
    await writer.wait_closed()
    return response


def format_status(payload: str, color: bool = False) -> str:
    """Render a status payload as one line per runner."""
    runners = json.loads(payload)
    if not runners:
        return "no playlist is playing"
    lines = []
    for runner in runners:
        state = f"{runner['state']:8s}"
        if color:
            state = colorize(state, *getattr(StateStyles, runner["state"], ()))
        where = runner["monitor"] or "-"
        lines.append(f"{runner['id']:>3} {state} {where:12s} {runner['playlist']}:{runner['line']}")
    return "\n".join(lines)


async def run_client(args: list[str]) -> ExitCode:
    """Run the client (CLI) and return the exit code."""
    log = get_logger("client")
    raw_json = "--json" in args
    args = [arg for arg in args if arg != "--json"]
    try:
        response = await send_request(args)
    except (ConnectionRefusedError, FileNotFoundError):
        log.critical("Cannot connect to lxwengd at %s.\nIs the daemon running? Start it with: lxwengd (no arguments)", CONTROL)
        return ExitCode.CONNECTION_ERROR

    if response.startswith(f"{ResponsePrefix.ERROR}:"):
        # skip "ERROR: " prefix
        error_msg = response[len(ResponsePrefix.ERROR) + 2 :].strip()
        print(f"Error: {error_msg}", file=sys.stderr)
        return ExitCode.COMMAND_ERROR
    if response.startswith(f"{ResponsePrefix.OK}"):
        remaining = response[len(ResponsePrefix.OK) :].strip()
        if remaining and args[0].lower() == "status" and not raw_json:
            remaining = format_status(remaining, should_colorize(sys.stdout))
        if remaining:
            print(remaining)
        return ExitCode.SUCCESS
    log.error("Unexpected response: %s", response)
    return ExitCode.COMMAND_ERROR
