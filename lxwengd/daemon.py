"""Daemon startup."""

import asyncio
import signal
from pathlib import Path

from .config_loader import Settings
from .constants import CONTROL
from .manager import Lxwengd
from .models import LxwengdError, ResolutionError

__all__ = ["run_daemon"]


async def run_daemon(settings: Settings) -> None:
    """Run the server / daemon.

    Raises:
        LxwengdError: nothing to play and not in standby, or the socket cannot be bound
    """
    manager = Lxwengd(settings)

    for folder in (Path(CONTROL).parent, settings.cache_dir):
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            manager.log.critical("Cannot create folder %s: %s", folder, e)
            raise LxwengdError from e

    if settings.standby:
        manager.log.info("standby: waiting for a playlist to be loaded")
    else:
        try:
            await manager.autoload()
        except ResolutionError as e:
            manager.log.critical("%s (use --standby to start without a playlist)", e)
            raise LxwengdError from e

    try:
        manager.server = await asyncio.start_unix_server(manager.endpoint.read_command, CONTROL)
    except OSError as e:
        manager.log.critical("Cannot listen on %s: %s", CONTROL, e)
        await manager.shutdown(save_state=False)
        raise LxwengdError from e

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(signum, lambda: asyncio.create_task(manager.shutdown()))

    manager.log.debug("[ initialized ]".center(80, "="))

    try:
        await manager.run()
    except asyncio.CancelledError:
        manager.log.critical("cancelled")
        await manager.shutdown()
