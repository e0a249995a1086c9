import asyncio
import logging
from dataclasses import replace

import pytest

from lxwengd.client import send_request
from lxwengd.daemon import run_daemon
from lxwengd.manager import Lxwengd
from lxwengd.models import LxwengdError

from .testtools import wait_until


@pytest.fixture
def control(tmp_path, monkeypatch):
    "Points the daemon at a socket in the test folder"
    path = tmp_path / "lxwengd.sock"
    monkeypatch.setattr("lxwengd.daemon.CONTROL", str(path))
    return path


@pytest.fixture
def critical(mocker):
    return mocker.patch.object(logging.getLogger("lxwengd"), "critical")


@pytest.mark.asyncio
async def test_missing_playlist_is_fatal(settings, control, critical):
    with pytest.raises(LxwengdError):
        await run_daemon(settings)

    critical.assert_called_once()
    assert "--standby" in critical.call_args.args[0]
    assert not control.exists()


@pytest.mark.asyncio
async def test_standby_skips_autoload(settings, control, critical):
    task = asyncio.create_task(run_daemon(replace(settings, standby=True)))
    await wait_until(control.exists)

    assert await send_request(["status"], str(control)) == "OK\n[]\n"
    assert settings.cache_dir.is_dir()

    assert await send_request(["exit"], str(control)) == "OK\n"
    await asyncio.wait_for(task, 5)
    critical.assert_not_called()


@pytest.mark.asyncio
async def test_exits_once_playlist_ended(settings, control, playlists):
    playlists(default="111 0\nend\n")
    await asyncio.wait_for(run_daemon(replace(settings, dry_run=True)), 5)


@pytest.mark.asyncio
async def test_bind_failure(settings, control, critical, mocker):
    mocker.patch("asyncio.start_unix_server", side_effect=OSError("Address already in use"))
    shutdown = mocker.spy(Lxwengd, "shutdown")

    with pytest.raises(LxwengdError):
        await run_daemon(replace(settings, standby=True))

    shutdown.assert_called_once()
    assert shutdown.call_args.kwargs == {"save_state": False}
    critical.assert_called_once()
