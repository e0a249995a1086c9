"""Control endpoint: one request line in, exactly one response out.

Requests are tokenized with shell quoting rules. Runner targets are a
runner id, a monitor name or `all` (the default).
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import shlex
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .logging_setup import get_logger
from .models import ControlError, ErrorKind, LaunchError, ResolutionError, ResponsePrefix, ResumeMode
from .runner import messages
from .version import VERSION

if TYPE_CHECKING:
    from .manager import Lxwengd
    from .runner import Runner

__all__ = [
    "ALL",
    "COMMANDS_HELP",
    "ControlEndpoint",
    "Exec",
    "Exit",
    "Help",
    "LoadPlaylist",
    "Response",
    "RunnerRequest",
    "Status",
    "Version",
    "parse_request",
]

ALL = "all"


@dataclass(frozen=True)
class LoadPlaylist:
    name: str
    monitor: str | None = None
    paused: bool = False
    resume: ResumeMode = ResumeMode.APPLY


@dataclass(frozen=True)
class RunnerRequest:
    """A control message for the targeted runners."""

    message: messages.ControlMessage
    target: str = ALL


@dataclass(frozen=True)
class Status:
    target: str | None = None


@dataclass(frozen=True)
class Exec:
    argv: tuple[str, ...]


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Version:
    pass


@dataclass(frozen=True)
class Help:
    pass


Request = LoadPlaylist | RunnerRequest | Status | Exec | Exit | Version | Help

COMMANDS_HELP = {
    "load": "<playlist> [--monitor M] [--paused] [--resume apply|applydel|ignore|ignoredel] Start a runner",
    "pause": "[--keep] [target] Pause, --keep freezes the renderer instead of closing it",
    "play": "[target] Resume playback",
    "resume": "[target] Same as play",
    "toggle": "[target] Pause or resume",
    "stop": "[--no-resume] [target] Stop runners, saving their position unless --no-resume",
    "next": "[target] Skip to the next line",
    "prev": "[target] Go back to the previous line",
    "jump": "<line> [target] Go to a line",
    "reload": "[target] Read the playlist again",
    "replace": "<playlist> [target] Play another playlist instead",
    "status": "[target] Show the runners as JSON",
    "exec": "<args...> Run the renderer with these arguments",
    "exit": "Stop everything and exit the daemon",
    "version": "Show the version",
    "help": "Show this help",
}

_SIMPLE_MESSAGES: dict[str, messages.ControlMessage] = {
    "play": messages.Play(),
    "resume": messages.Play(),
    "toggle": messages.Toggle(),
    "next": messages.Next(),
    "prev": messages.Prev(),
    "reload": messages.Reload(),
}


def _malformed(message: str) -> ControlError:
    return ControlError(ErrorKind.MALFORMED_REQUEST, message)


def _split_args(
    args: list[str],
    flags: frozenset[str] = frozenset(),
    options: frozenset[str] = frozenset(),
) -> tuple[list[str], set[str], dict[str, str]]:
    """Separate positional arguments, flags and `--option value` pairs."""
    positionals: list[str] = []
    found_flags: set[str] = set()
    found_options: dict[str, str] = {}
    tokens = iter(args)
    for token in tokens:
        if token in flags:
            found_flags.add(token)
        elif token in options:
            value = next(tokens, None)
            if value is None:
                msg = f"{token} needs a value"
                raise _malformed(msg)
            found_options[token] = value
        elif token.startswith("--"):
            msg = f"unknown option {token}"
            raise _malformed(msg)
        else:
            positionals.append(token)
    return positionals, found_flags, found_options


def _target(command: str, positionals: list[str], required: int = 0) -> str:
    if len(positionals) < required:
        msg = f"{command} needs {required} argument(s)"
        raise _malformed(msg)
    if len(positionals) > required + 1:
        msg = f"too many arguments for {command}"
        raise _malformed(msg)
    return positionals[required] if len(positionals) > required else ALL


def parse_request(line: str) -> Request:  # noqa: C901, PLR0911
    """Parse a request line.

    Raises:
        ControlError: the request is malformed or unknown
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise _malformed(str(e)) from e
    if not tokens:
        msg = "No command provided"
        raise _malformed(msg)

    command, args = tokens[0].lower(), tokens[1:]
    if command == "exec":
        if not args:
            msg = "exec needs arguments"
            raise _malformed(msg)
        return Exec(tuple(args))
    if command not in COMMANDS_HELP:
        msg = f"No such command: {command}"
        raise ControlError(ErrorKind.UNKNOWN_COMMAND, msg)

    if command in _SIMPLE_MESSAGES:
        positionals, _, _ = _split_args(args)
        return RunnerRequest(_SIMPLE_MESSAGES[command], _target(command, positionals))
    if command == "pause":
        positionals, flags, _ = _split_args(args, flags=frozenset({"--keep"}))
        return RunnerRequest(messages.Pause(keep_process="--keep" in flags), _target(command, positionals))
    if command == "stop":
        positionals, flags, _ = _split_args(args, flags=frozenset({"--no-resume"}))
        return RunnerRequest(messages.Stop(no_resume="--no-resume" in flags), _target(command, positionals))
    if command == "jump":
        positionals, _, _ = _split_args(args)
        target = _target(command, positionals, required=1)
        if not positionals[0].isdigit() or int(positionals[0]) < 1:
            msg = f"invalid line number {positionals[0]!r}"
            raise _malformed(msg)
        return RunnerRequest(messages.Jump(int(positionals[0])), target)
    if command == "replace":
        positionals, _, _ = _split_args(args)
        target = _target(command, positionals, required=1)
        return RunnerRequest(messages.Replace(positionals[0]), target)
    if command == "load":
        positionals, flags, options = _split_args(args, flags=frozenset({"--paused"}), options=frozenset({"--monitor", "--resume"}))
        if len(positionals) != 1:
            msg = "load needs exactly one playlist"
            raise _malformed(msg)
        try:
            resume = ResumeMode(options.get("--resume", ResumeMode.APPLY))
        except ValueError as e:
            msg = f"invalid resume mode {options['--resume']!r}"
            raise _malformed(msg) from e
        return LoadPlaylist(positionals[0], options.get("--monitor"), "--paused" in flags, resume)
    if command == "status":
        positionals, _, _ = _split_args(args)
        return Status(_target(command, positionals) if positionals else None)

    if args:
        msg = f"{command} takes no argument"
        raise _malformed(msg)
    return {"exit": Exit, "version": Version, "help": Help}[command]()


@dataclass(frozen=True)
class Response:
    payload: str = ""
    error: ErrorKind | None = None

    def encode(self) -> bytes:
        if self.error is not None:
            return f"{ResponsePrefix.ERROR}: {self.error}: {self.payload}\n".encode()
        if self.payload and not self.payload.endswith("\n"):
            return f"{ResponsePrefix.OK}\n{self.payload}\n".encode()
        return f"{ResponsePrefix.OK}\n{self.payload}".encode()


class ControlEndpoint:
    """Turns requests into runner control messages and daemon actions."""

    def __init__(self, daemon: Lxwengd) -> None:
        self.daemon = daemon
        self.log = get_logger("control")
        self._exit_task: asyncio.Task | None = None

    def resolve(self, target: str) -> list[Runner]:
        """Return the runners designated by `target`.

        Raises:
            ControlError: no runner matches
        """
        registry = self.daemon.registry
        if target == ALL:
            runners = registry.runners()
            if not runners:
                msg = "no playlist is playing"
                raise ControlError(ErrorKind.UNKNOWN_TARGET, msg)
            return runners
        if target.isdigit():
            runner = registry.lookup(int(target))
            if runner is None:
                msg = f"no runner with id {target}"
                raise ControlError(ErrorKind.UNKNOWN_TARGET, msg)
            return [runner]
        runners = registry.by_monitor(target)
        if not runners:
            msg = f"no runner on monitor {target}"
            raise ControlError(ErrorKind.UNKNOWN_TARGET, msg)
        return runners

    async def dispatch(self, request: Request) -> Response:  # noqa: PLR0911
        """Execute a parsed request.

        Raises:
            ControlError: the request cannot be fulfilled
        """
        if isinstance(request, RunnerRequest):
            runners = self.resolve(request.target)
            for runner in runners:
                runner.send(request.message)
            return Response(", ".join(f"runner {runner.id}" for runner in runners))
        if isinstance(request, LoadPlaylist):
            try:
                runner = await self.daemon.load_playlist(request.name, request.monitor, request.paused, request.resume)
            except ResolutionError as e:
                raise ControlError(ErrorKind.RESOLUTION_FAILED, str(e)) from e
            return Response(f"runner {runner.id}")
        if isinstance(request, Status):
            runners = self.daemon.registry.runners() if request.target is None else self.resolve(request.target)
            return Response(json.dumps([runner.summary() for runner in runners]))
        if isinstance(request, Exec):
            try:
                proc = await self.daemon.execute(request.argv)
            except LaunchError as e:
                raise ControlError(ErrorKind.LAUNCH_FAILED, str(e)) from e
            return Response(f"pid {proc.pid}" if proc else "dry-run")
        if isinstance(request, Exit):
            self._exit_task = asyncio.create_task(self.daemon.shutdown())
            return Response()
        if isinstance(request, Version):
            return Response(VERSION)
        return Response(get_help())

    async def handle(self, line: str) -> Response:
        """Process one request line, errors are turned into error responses."""
        try:
            return await self.dispatch(parse_request(line))
        except ControlError as e:
            self.log.warning("%s: %s", line, e.message)
            return Response(e.message, e.kind)
        except Exception as e:  # pylint: disable=W0718
            self.log.exception("%s failed:", line)
            return Response(str(e), ErrorKind.INTERNAL_ERROR)

    async def read_command(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Receive a socket command.

        Args:
            reader: The stream reader
            writer: The stream writer
        """
        try:
            raw = await reader.readline()
        except ValueError as e:
            # readline reports a line over the stream limit as ValueError
            self.log.warning("Unreadable request: %s", e)
            response = Response(f"request too long: {e}", ErrorKind.MALFORMED_REQUEST)
        else:
            data = raw.decode(errors="replace").strip()
            if not data:
                self.log.warning("Empty command received")
            self.log.debug("request: %s", data)
            response = await self.handle(data)
        writer.write(response.encode())

        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.drain()
        writer.close()


def get_help() -> str:
    """Get the documentation."""
    intro = """Syntax: lxwengd [command]

If the command is omitted, runs the daemon.
Targets are a runner id, a monitor name or "all" (default).

Available commands:
"""
    return intro + "\n".join(f" {name:10s} {doc}" for name, doc in COMMANDS_HELP.items())
