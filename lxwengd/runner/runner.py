"""The runner: one playlist being played.

A runner is an asyncio task interpreting its Program one command at a time.
It owns at most one renderer process, and is only ever modified by its own
task: other parts of the daemon talk to it through its inbox.
"""

from __future__ import annotations

import asyncio
import collections
import contextlib
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

from ..adapters import merge_properties
from ..constants import LAUNCH_RETRY_DELAY
from ..logging_setup import get_logger
from ..models import LaunchError, PlaybackState, ResolutionError
from ..playlist import (
    Duration,
    End,
    Goto,
    InvalidLine,
    Loop,
    PlayWallpaper,
    Program,
    Replace,
    SetDefaults,
    Sleep,
    Summon,
)
from ..process import WaitOutcome, WaitResult
from ..resume import save_resume
from . import messages

if TYPE_CHECKING:
    from ..process import ManagedProcess, RendererSupervisor
    from ..registry import RunnerRegistry

__all__ = ["Runner", "RunnerHost"]

_RETRY_DELAY = Duration(int(LAUNCH_RETRY_DELAY))


class RunnerHost(Protocol):
    """What a runner needs from the daemon owning it."""

    supervisor: RendererSupervisor
    registry: RunnerRegistry

    async def load_program(self, name: str) -> Program: ...

    def spawn(self, program: Program, monitor: str | None = None) -> Runner: ...


class Runner:  # pylint: disable=too-many-instance-attributes
    """Plays one Program.

    Attributes:
        id: Registry identifier, set on registration
        program: The playlist being played
        cursor: Line number of the current command
        goto_state: Remaining jumps of the bounded gotos, by goto line
        defaults: Properties set by the last `default` command
        playback: Current playback state
        child: The renderer owned by this runner, if any
        monitor: Output the renderers draw on
    """

    def __init__(
        self,
        host: RunnerHost,
        program: Program,
        *,
        monitor: str | None = None,
        paused: bool = False,
        start_line: int | None = None,
    ) -> None:
        self.host = host
        self.id = 0
        self.program = program
        self.cursor = program.normalize(start_line or program.first_line)
        self.goto_state: dict[int, int] = {}
        self.defaults: dict[str, str] = {}
        self.playback = PlaybackState.PAUSED if paused else PlaybackState.PLAYING
        self.child: ManagedProcess | None = None
        self.monitor = monitor
        self.inbox: asyncio.Queue[messages.ControlMessage] = asyncio.Queue()
        self._backlog: collections.deque[messages.ControlMessage] = collections.deque()
        self._keep_process = False
        self.log = get_logger("runner")

    def __repr__(self) -> str:
        return f"<Runner {self.id} {self.program.origin}:{self.cursor} {self.playback}>"

    @property
    def stopped(self) -> bool:
        return self.playback is PlaybackState.STOPPED

    def send(self, message: messages.ControlMessage) -> None:
        """Queue a control message, it is applied by the runner's own task."""
        self.inbox.put_nowait(message)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "playlist": self.program.origin,
            "path": str(self.program.path) if self.program.path else None,
            "line": self.cursor,
            "state": str(self.playback),
            "monitor": self.monitor,
        }

    # Main loop

    async def run(self) -> None:
        """Play until stopped, then leave the registry."""
        self.log = get_logger(f"runner.{self.id}")
        self.log.info("playing %s", self.program.origin)
        try:
            while not self.stopped:
                if self.playback is PlaybackState.PAUSED:
                    await self._suspend()
                    continue
                await self.step()
                await self._drain()
                # let other runners and the control endpoint progress
                await asyncio.sleep(0)
        finally:
            self.playback = PlaybackState.STOPPED
            await self._release_child()
            self.host.registry.remove(self.id)
            self.log.info("stopped")

    def _advance(self) -> None:
        self.cursor = self.program.next_line(self.cursor)

    async def step(self) -> None:
        """Execute the command under the cursor."""
        entry = self.program[self.cursor]
        if isinstance(entry, InvalidLine):
            self.log.warning("%s line %d: %s, skipping", self.program.origin, self.cursor, entry.error)
            self._advance()
        elif isinstance(entry, PlayWallpaper):
            if await self._play(entry):
                self._advance()
        elif isinstance(entry, Sleep):
            if await self._hold(entry.duration):
                self._advance()
        elif isinstance(entry, End):
            self.log.info("%s line %d: end", self.program.origin, self.cursor)
            self.playback = PlaybackState.STOPPED
        elif isinstance(entry, (Goto, Loop)):
            self._goto(entry.as_goto() if isinstance(entry, Loop) else entry)
        elif isinstance(entry, Replace):
            if not await self._swap(entry.playlist):
                self.playback = PlaybackState.STOPPED
        elif isinstance(entry, Summon):
            await self._summon(entry.playlist)
            self._advance()
        elif isinstance(entry, SetDefaults):
            self.defaults = dict(entry.properties)
            self._advance()

    # Commands

    def _goto(self, goto: Goto) -> None:
        target = self.program.normalize(goto.location)
        if goto.times.is_unlimited:
            self.cursor = target
            return
        assert goto.times.count is not None
        remaining = self.goto_state.setdefault(self.cursor, goto.times.count)
        if remaining == 0:
            # exhausted: dropped, so the next visit starts a fresh count
            del self.goto_state[self.cursor]
            self._advance()
            return
        self.goto_state[self.cursor] = remaining - 1
        self.cursor = target

    async def _swap(self, playlist: str) -> bool:
        """Replace the program, returns False if `playlist` cannot be used."""
        try:
            program = await self.host.load_program(playlist)
        except ResolutionError as e:
            self.log.warning("%s line %d: %s", self.program.origin, self.cursor, e)
            return False
        self.program = program
        self.cursor = program.first_line
        self.goto_state = {}
        self.defaults = {}
        self.log.info("now playing %s", program.origin)
        return True

    async def _summon(self, playlist: str) -> None:
        try:
            program = await self.host.load_program(playlist)
        except ResolutionError as e:
            self.log.warning("%s line %d: %s, skipping", self.program.origin, self.cursor, e)
            return
        runner = self.host.spawn(program, monitor=self.monitor)
        self.log.info("summoned %s as runner %d", playlist, runner.id)

    async def _launch(self, wallpaper: str, properties: dict[str, str]) -> bool:
        """Start the renderer, returns False if it could not be spawned."""
        try:
            self.child = await self.host.supervisor.launch(wallpaper, self.monitor, properties)
        except LaunchError as e:
            self.log.warning("%s line %d: %s, skipping", self.program.origin, self.cursor, e)
            return False
        return True

    async def _play(self, command: PlayWallpaper) -> bool:
        properties = merge_properties(self.defaults, command.properties)
        launch = partial(self._launch, command.wallpaper, properties)
        if not await launch():
            # avoid respawning a broken renderer in a tight loop
            return await self._hold(_RETRY_DELAY)
        return await self._hold(command.duration, relaunch=launch)

    # Waiting

    async def _hold(self, duration: Duration, relaunch: Callable[[], Awaitable[bool]] | None = None) -> bool:
        """Wait for the current command to complete.

        The command completes when its duration elapses or its renderer
        exits. Control messages are applied meanwhile.

        Args:
            duration: How long the command lasts
            relaunch: Starts the renderer again after a pause which closed it

        Returns:
            True when the command completed, False when a control message
            abandoned it (the cursor has already been moved then)
        """
        loop = asyncio.get_running_loop()
        remaining = None if duration.is_infinite else float(duration.seconds or 0)
        while True:
            if self.playback is PlaybackState.PAUSED:
                if await self._suspend():
                    return False
                if relaunch and self.child is None and not await relaunch():
                    return True
            if self.stopped:
                return False

            started = loop.time()
            waiter = asyncio.create_task(self._wait(remaining))
            getter = asyncio.create_task(self._next_message())
            done, pending = await asyncio.wait({waiter, getter}, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

            if getter in done:
                message = getter.result()
                if waiter in done:
                    # the command is over, apply the message right after it
                    self._backlog.appendleft(message)
                else:
                    if remaining is not None:
                        remaining = max(0.0, remaining - (loop.time() - started))
                    if await self.handle(message):
                        await self._release_child()
                        return False
                    continue

            await self._complete(waiter.result())
            return True

    async def _wait(self, timeout: float | None) -> WaitResult:
        if self.child is not None:
            return await self.host.supervisor.wait_or_timeout(self.child, timeout)
        if timeout is None:
            await asyncio.Future()  # until a control message arrives
        else:
            await asyncio.sleep(timeout)
        return WaitResult(WaitOutcome.TIMED_OUT)

    async def _complete(self, result: WaitResult) -> None:
        if result.outcome is WaitOutcome.TIMED_OUT:
            await self._release_child()
            return
        child, self.child = self.child, None
        argv0 = child.argv[0] if child and child.argv else "renderer"
        self.log.warning("%s line %d: `%s` unexpectedly %s, skipping", self.program.origin, self.cursor, argv0, result)

    async def _suspend(self) -> bool:
        """Stay paused until resumed or stopped.

        Returns:
            True if a control message abandoned the current command
        """
        if self.child is not None:
            if self._keep_process:
                self.child.pause()
            else:
                await self._release_child()
        self.log.info("paused at line %d", self.cursor)
        while self.playback is PlaybackState.PAUSED:
            if await self.handle(await self._next_message()):
                await self._release_child()
                return True
        if self.child is not None:
            self.child.resume()
        self.log.info("resumed at line %d", self.cursor)
        return False

    async def _release_child(self) -> None:
        if self.child is not None:
            child, self.child = self.child, None
            await self.host.supervisor.terminate(child)

    # Control messages

    async def _next_message(self) -> messages.ControlMessage:
        if self._backlog:
            return self._backlog.popleft()
        return await self.inbox.get()

    async def _drain(self) -> None:
        """Apply the messages received while executing a command."""
        while not self.stopped and (self._backlog or not self.inbox.empty()):
            message = self._backlog.popleft() if self._backlog else self.inbox.get_nowait()
            await self.handle(message)

    async def handle(self, message: messages.ControlMessage) -> bool:  # noqa: C901
        """Apply a control message.

        Returns:
            True when the current command is abandoned
        """
        self.log.debug("received %s", message)
        if isinstance(message, messages.Play):
            if self.playback is PlaybackState.PAUSED:
                self.playback = PlaybackState.PLAYING
            return False
        if isinstance(message, messages.Pause):
            if self.playback is PlaybackState.PLAYING:
                self.playback = PlaybackState.PAUSED
                self._keep_process = message.keep_process
            return False
        if isinstance(message, messages.Toggle):
            return await self.handle(messages.Play() if self.playback is PlaybackState.PAUSED else messages.Pause())
        if isinstance(message, messages.Stop):
            if not message.no_resume and self.program.path is not None:
                await self._save_position()
            self.playback = PlaybackState.STOPPED
            return True
        if isinstance(message, messages.Next):
            self.cursor = self.program.next_line(self.cursor)
            return True
        if isinstance(message, messages.Prev):
            self.cursor = self.program.previous_line(self.cursor)
            return True
        if isinstance(message, messages.Jump):
            self.cursor = self.program.normalize(message.line)
            return True
        if isinstance(message, messages.Reload):
            return await self._swap(self.program.origin)
        if isinstance(message, messages.Replace):
            return await self._swap(message.playlist)
        self.log.error("unknown control message %r", message)
        return False

    async def _save_position(self) -> None:
        assert self.program.path is not None
        try:
            await save_resume(self.program.path, self.cursor)
        except OSError as e:
            self.log.warning("cannot write resume file for %s: %s", self.program.origin, e)
