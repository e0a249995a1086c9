"""The daemon context: runners, renderer supervisor and exec processes."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence

from .adapters import WallpaperEngineBackend
from .config_loader import Settings
from .constants import SHUTDOWN_TIMEOUT
from .control import ControlEndpoint
from .logging_setup import get_logger
from .models import ResumeMode
from .playlist import Program, load_program
from .process import ManagedProcess, RendererSupervisor
from .registry import RunnerRegistry
from .resume import start_line
from .runner import Runner, Stop

__all__ = ["Lxwengd"]


class Lxwengd:
    """Main app object.

    Owns every runner, through the registry, and every process started by
    `exec`. Independent instances can coexist, each with its own state.
    """

    server: asyncio.Server | None = None

    def __init__(self, settings: Settings, supervisor: RendererSupervisor | None = None) -> None:
        self.settings = settings
        self.log = get_logger()
        self.registry = RunnerRegistry()
        if supervisor is None:
            backend = WallpaperEngineBackend(settings.binary, settings.assets_path, settings.extra_args)
            supervisor = RendererSupervisor(
                backend,
                graceful_timeout=settings.graceful_timeout,
                dry_run=settings.dry_run,
                cwd=settings.cache_dir,
            )
        self.supervisor = supervisor
        self.endpoint = ControlEndpoint(self)
        self.tasks: set[asyncio.Task] = set()
        self.exec_processes: list[ManagedProcess] = []
        self.stopped = False

    async def load_program(self, name: str) -> Program:
        """Resolve and parse a playlist.

        Raises:
            ResolutionError: the playlist is missing or has nothing to play
        """
        program = await load_program(name, self.settings.search_path, self.settings.default_duration)
        for number, entry in program.errors:
            self.log.warning("%s line %d: %s, skipping", program.origin, number, entry.error)
        return program

    def spawn(
        self,
        program: Program,
        monitor: str | None = None,
        paused: bool = False,
        start_at: int | None = None,
    ) -> Runner:
        """Register a runner for `program` and start its task."""
        runner = Runner(self, program, monitor=monitor, paused=paused, start_line=start_at)
        self.registry.register(runner)
        task = asyncio.create_task(runner.run(), name=f"runner-{runner.id}")
        self.tasks.add(task)
        task.add_done_callback(self._task_done)
        self.log.info("runner %d: %s on %s", runner.id, program.origin, monitor or "default output")
        return runner

    def _task_done(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.log.error("%s failed", task.get_name(), exc_info=task.exception())

    async def load_playlist(
        self,
        name: str,
        monitor: str | None = None,
        paused: bool = False,
        resume: ResumeMode = ResumeMode.APPLY,
    ) -> Runner:
        """Start a runner for a playlist.

        Raises:
            ResolutionError: the playlist is missing or has nothing to play
        """
        program = await self.load_program(name)
        line = await start_line(program, resume, self.log)
        return self.spawn(program, monitor=monitor, paused=paused, start_at=line)

    async def autoload(self) -> None:
        """Start the configured playlist, once per configured monitor.

        Raises:
            ResolutionError: the playlist cannot be played
        """
        monitors: Sequence[str | None] = self.settings.monitors or [None]
        program = await self.load_program(self.settings.playlist)
        line = await start_line(program, ResumeMode.APPLY, self.log)
        for monitor in monitors:
            self.spawn(program, monitor=monitor, start_at=line)

    async def execute(self, argv: Sequence[str]) -> ManagedProcess | None:
        """Run the renderer with `argv`, outside of any runner.

        Raises:
            LaunchError: the renderer could not be spawned
        """
        self.exec_processes = [proc for proc in self.exec_processes if proc.is_alive]
        proc = await self.supervisor.execute(argv)
        if proc is not None:
            self.exec_processes.append(proc)
            task = asyncio.create_task(proc.wait(), name=f"exec-{proc.pid}")
            self.tasks.add(task)
            task.add_done_callback(self.tasks.discard)
        return proc

    async def shutdown(self, save_state: bool = True) -> None:
        """Stop every runner and exec process, then close the control socket."""
        if self.stopped:
            return
        self.stopped = True
        self.log.info("shutting down")
        for runner in self.registry:
            runner.send(Stop(no_resume=not save_state))
        runner_tasks = [task for task in self.tasks if task.get_name().startswith("runner-")]
        if runner_tasks:
            _, pending = await asyncio.wait(runner_tasks, timeout=SHUTDOWN_TIMEOUT)
            for task in pending:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        for proc in self.exec_processes:
            await self.supervisor.terminate(proc)
        self.exec_processes.clear()
        if self.server is not None:
            self.server.close()

    async def serve(self) -> None:
        """Run the server."""
        assert self.server is not None
        async with self.server:
            await self.server.wait_closed()

    async def _exit_when_idle(self) -> None:
        await self.registry.wait_empty()
        self.log.info("every playlist ended")
        await self.shutdown()

    async def run(self) -> None:
        """Serve control requests until shutdown.

        Unless started in standby, the daemon also shuts down once no runner is left.
        """
        tasks = [asyncio.create_task(self.serve())]
        if not self.settings.standby:
            tasks.append(asyncio.create_task(self._exit_when_idle()))
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
