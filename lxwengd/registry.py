"""Registry of the live runners, addressable by id or monitor."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .runner import Runner

__all__ = ["RunnerRegistry"]


class RunnerRegistry:
    """Maps runner ids to runners.

    Every access happens on the event loop thread, between two suspension
    points, so no lock is needed. Ids are never reused.
    """

    def __init__(self) -> None:
        self._runners: dict[int, Runner] = {}
        self._ids = itertools.count(1)
        self._empty = asyncio.Event()
        self._empty.set()

    def __len__(self) -> int:
        return len(self.runners())

    def __iter__(self) -> Iterator[Runner]:
        return iter(self.runners())

    def register(self, runner: Runner) -> int:
        """Assign a fresh id to `runner` and make it addressable."""
        runner.id = next(self._ids)
        self._runners[runner.id] = runner
        self._empty.clear()
        return runner.id

    def lookup(self, runner_id: int) -> Runner | None:
        """Return the runner if it can still receive control messages."""
        runner = self._runners.get(runner_id)
        if runner is None or runner.stopped:
            return None
        return runner

    def remove(self, runner_id: int) -> None:
        self._runners.pop(runner_id, None)
        if not self._runners:
            self._empty.set()

    def runners(self) -> list[Runner]:
        """Return the live runners, in creation order."""
        return [runner for runner in self._runners.values() if not runner.stopped]

    def by_monitor(self, monitor: str) -> list[Runner]:
        return [runner for runner in self.runners() if runner.monitor == monitor]

    def list(self) -> list[tuple[int, dict[str, Any]]]:
        """Return (id, summary) pairs of the live runners."""
        return [(runner.id, runner.summary()) for runner in self.runners()]

    async def wait_empty(self) -> None:
        """Wait until every registered runner has been removed."""
        await self._empty.wait()
