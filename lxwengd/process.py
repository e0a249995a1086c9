"""Renderer process lifecycle.

ManagedProcess:
    Wraps one child process (SIGTERM -> wait -> SIGKILL), with SIGSTOP and
    SIGCONT based freezing.

RendererSupervisor:
    Launches renderers for the runners, reports how they ended and
    terminates them. Each handle it returns is owned by a single runner.
"""

from __future__ import annotations

__all__ = ["ManagedProcess", "RendererSupervisor", "WaitOutcome", "WaitResult"]

import asyncio
import contextlib
import logging
import shlex
import signal
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .constants import DEFAULT_GRACEFUL_TIMEOUT
from .logging_setup import get_logger, is_debug
from .models import LaunchError

if TYPE_CHECKING:
    from .adapters import RendererBackend


class ManagedProcess:
    """Manages a subprocess with proper lifecycle handling.

    Shutdown sequence:
    1. SIGTERM first (graceful), preceded by SIGCONT if the process is frozen
    2. Wait with timeout
    3. SIGKILL if still alive
    4. Always wait() to reap zombie

    Usage:
        proc = ManagedProcess()
        await proc.start(["sleep", "100"])
        proc.pause()
        proc.resume()
        await proc.stop()
    """

    def __init__(self, graceful_timeout: float = DEFAULT_GRACEFUL_TIMEOUT) -> None:
        """Initialize.

        Args:
            graceful_timeout: Seconds to wait after SIGTERM before SIGKILL
        """
        self._proc: asyncio.subprocess.Process | None = None
        self._graceful_timeout = graceful_timeout
        self.argv: list[str] = []
        self.paused = False

    @property
    def pid(self) -> int | None:
        """Return PID if process exists, else None."""
        return self._proc.pid if self._proc else None

    @property
    def returncode(self) -> int | None:
        """Return exit code if process exited, else None."""
        return self._proc.returncode if self._proc else None

    @property
    def is_alive(self) -> bool:
        """Check if process is currently running (or frozen)."""
        return self._proc is not None and self._proc.returncode is None

    async def start(self, argv: Sequence[str], **subprocess_kwargs: Any) -> None:  # noqa: ANN401
        """Start the process. Stops existing process first if running.

        Args:
            argv: Program and arguments, no shell is involved
            **subprocess_kwargs: Passed to create_subprocess_exec (e.g., cwd)
        """
        if self.is_alive:
            await self.stop()

        self.argv = list(argv)
        self.paused = False
        self._proc = await asyncio.create_subprocess_exec(*self.argv, **subprocess_kwargs)

    def _signal(self, signum: int) -> None:
        if self.is_alive:
            assert self._proc is not None
            with contextlib.suppress(ProcessLookupError):
                self._proc.send_signal(signum)

    def pause(self) -> None:
        """Freeze the process, keeping its last frame on screen."""
        if self.is_alive and not self.paused:
            self._signal(signal.SIGSTOP)
            self.paused = True

    def resume(self) -> None:
        """Thaw a process frozen by pause()."""
        if self.paused:
            self._signal(signal.SIGCONT)
            self.paused = False

    async def stop(self) -> int | None:
        """Stop the process gracefully.

        Returns:
            The process return code, or None if never started
        """
        if self._proc is None:
            return None

        if self._proc.returncode is not None:
            return self._proc.returncode

        with contextlib.suppress(ProcessLookupError):
            self._proc.terminate()
        # a stopped process only handles SIGTERM once continued
        self.resume()

        try:
            await asyncio.wait_for(self._proc.wait(), timeout=self._graceful_timeout)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                self._proc.kill()
            await self._proc.wait()

        return self._proc.returncode

    async def wait(self) -> int:
        """Wait for process to exit and return exit code.

        Raises:
            RuntimeError: If no process was started
        """
        if self._proc is None:
            msg = "No process running"
            raise RuntimeError(msg)
        return await self._proc.wait()


class WaitOutcome(StrEnum):
    """How a supervised wait ended."""

    EXITED = "exited"
    TIMED_OUT = "timed out"
    CRASHED = "crashed"


@dataclass(frozen=True)
class WaitResult:
    outcome: WaitOutcome
    returncode: int | None = None

    def __str__(self) -> str:
        if self.outcome is WaitOutcome.TIMED_OUT:
            return str(self.outcome)
        if self.returncode is not None and self.returncode < 0:
            return f"{self.outcome} (signal {-self.returncode})"
        return f"{self.outcome} (code {self.returncode})"


class RendererSupervisor:
    """Spawns renderers and watches them on behalf of the runners."""

    def __init__(
        self,
        backend: RendererBackend,
        *,
        graceful_timeout: float = DEFAULT_GRACEFUL_TIMEOUT,
        dry_run: bool = False,
        cwd: Path | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize.

        Args:
            backend: Builds the renderer command lines
            graceful_timeout: Seconds to wait after SIGTERM before SIGKILL
            dry_run: Log command lines instead of running them
            cwd: Working directory of the renderers
            logger: Logger to use, defaults to the "supervisor" one
        """
        self.backend = backend
        self.graceful_timeout = graceful_timeout
        self.dry_run = dry_run
        self.cwd = cwd
        self.log = logger or get_logger("supervisor", logging.INFO if dry_run and not is_debug() else None)

    async def _spawn(self, argv: list[str]) -> ManagedProcess | None:
        if self.dry_run:
            self.log.info("[dry-run] %s", shlex.join(argv))
            return None
        proc = ManagedProcess(self.graceful_timeout)
        try:
            await proc.start(
                argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                cwd=self.cwd,
            )
        except OSError as e:
            msg = f"cannot run {argv[0]}: {e.strerror or e}"
            raise LaunchError(msg) from e
        self.log.debug("started %s (pid %s)", shlex.join(argv), proc.pid)
        return proc

    async def launch(self, wallpaper: str, monitor: str | None, properties: Mapping[str, str]) -> ManagedProcess | None:
        """Start a renderer for a wallpaper.

        Args:
            wallpaper: Wallpaper identifier
            monitor: Output to draw on, if any
            properties: Effective properties

        Returns:
            The process handle, or None under dry-run

        Raises:
            LaunchError: the renderer could not be spawned
        """
        return await self._spawn(self.backend.build_arguments(wallpaper, monitor, properties))

    async def execute(self, argv: Sequence[str]) -> ManagedProcess | None:
        """Start the renderer with exactly `argv`, outside of any playlist.

        Raises:
            LaunchError: the renderer could not be spawned
        """
        return await self._spawn(self.backend.build_exec_arguments(argv))

    async def wait_or_timeout(self, handle: ManagedProcess, timeout: float | None) -> WaitResult:
        """Wait for the renderer to exit, at most `timeout` seconds (forever if None).

        Other tasks keep running meanwhile. The process is left running on timeout.
        """
        try:
            returncode = await asyncio.wait_for(handle.wait(), timeout=timeout)
        except TimeoutError:
            return WaitResult(WaitOutcome.TIMED_OUT)
        if returncode == 0:
            return WaitResult(WaitOutcome.EXITED, returncode)
        return WaitResult(WaitOutcome.CRASHED, returncode)

    async def terminate(self, handle: ManagedProcess) -> int | None:
        """Stop the renderer, it is not running anymore once this returns."""
        returncode = await handle.stop()
        self.log.debug("renderer %s ended with %s", handle.pid, returncode)
        return returncode
