import asyncio
from dataclasses import replace

import pytest

from lxwengd.manager import Lxwengd
from lxwengd.models import ResolutionError, ResumeMode
from lxwengd.resume import resume_path

from .testtools import FakeSupervisor, wait_until


@pytest.mark.asyncio
async def test_load_playlist_resume_modes(daemon, supervisor, playlists, tmp_path):
    playlists(main="111 inf\n222 inf\n")
    resume_file = resume_path(tmp_path / "main.playlist")
    resume_file.write_text("2\n")

    runner = await daemon.load_playlist("main", resume=ResumeMode.IGNORE)
    assert runner.cursor == 1
    runner = await daemon.load_playlist("main", resume=ResumeMode.APPLY_DELETE)
    assert runner.cursor == 2
    assert not resume_file.exists()


@pytest.mark.asyncio
async def test_load_playlist_paused_on_monitor(daemon, supervisor, playlists):
    playlists(main="111 inf\n")
    runner = await daemon.load_playlist("main", monitor="HDMI-A-1", paused=True)
    assert str(runner.playback) == "paused"
    assert runner.monitor == "HDMI-A-1"


@pytest.mark.asyncio
async def test_load_program_reports_errors(daemon, playlists, mocker):
    playlists(main="111 10\nwhat is this\n")
    warning = mocker.patch.object(daemon.log, "warning")
    program = await daemon.load_program("main")
    assert len(program.errors) == 1
    warning.assert_called_once()


@pytest.mark.asyncio
async def test_unplayable_program(daemon, playlists):
    playlists(main="goto 1\n# nothing\n")
    with pytest.raises(ResolutionError):
        await daemon.load_program("main")


@pytest.mark.asyncio
async def test_autoload_per_monitor(settings, playlists):
    playlists(default="111 inf\n")
    supervisor = FakeSupervisor()
    daemon = Lxwengd(replace(settings, monitors=["DP-1", "DP-2"]), supervisor=supervisor)
    try:
        await daemon.autoload()
        await wait_until(lambda: len(supervisor.launched) == 2)
        assert sorted(supervisor.monitors) == ["DP-1", "DP-2"]
        assert [runner.id for runner in daemon.registry] == [1, 2]
    finally:
        await daemon.shutdown(save_state=False)


@pytest.mark.asyncio
async def test_autoload_default_output(daemon, supervisor, playlists):
    playlists(default="111 inf\n")
    await daemon.autoload()
    await wait_until(lambda: supervisor.launched == ["111"])
    assert supervisor.monitors == [None]


@pytest.mark.asyncio
async def test_autoload_missing_playlist(daemon):
    with pytest.raises(ResolutionError):
        await daemon.autoload()


@pytest.mark.asyncio
async def test_execute(daemon, supervisor):
    proc = await daemon.execute(["--list-screens"])
    assert supervisor.executed == [["--list-screens"]]
    assert daemon.exec_processes == [proc]

    await daemon.shutdown()
    assert not proc.is_alive
    assert daemon.exec_processes == []


@pytest.mark.asyncio
async def test_shutdown_saves_positions(daemon, supervisor, playlists, tmp_path):
    playlists(a="111 0\n222 inf\n", b="333 inf\n")
    await daemon.load_playlist("a")
    await daemon.load_playlist("b")
    await wait_until(lambda: len(supervisor.launched) == 3)

    await daemon.shutdown()
    assert not daemon.tasks
    assert len(daemon.registry) == 0
    assert sorted(supervisor.terminated) == ["111", "222", "333"]
    assert resume_path(tmp_path / "a.playlist").read_text() == "2\n"
    assert resume_path(tmp_path / "b.playlist").read_text() == "1\n"

    # a second call does nothing
    await daemon.shutdown()


@pytest.mark.asyncio
async def test_exit_when_idle(daemon, supervisor, playlists):
    playlists(main="111 0\nend\n")
    runner = await daemon.load_playlist("main")
    watcher = asyncio.create_task(daemon._exit_when_idle())
    await asyncio.wait_for(watcher, 1.0)
    assert runner.stopped
    assert daemon.stopped
