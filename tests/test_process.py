"""Tests for renderer process management."""

import asyncio

import pytest

from lxwengd.adapters import WallpaperEngineBackend
from lxwengd.models import LaunchError
from lxwengd.process import ManagedProcess, RendererSupervisor, WaitOutcome, WaitResult


class ShellBackend(WallpaperEngineBackend):
    """Runs the wallpaper id as a shell script."""

    def build_arguments(self, wallpaper, monitor, properties):
        return ["sh", "-c", wallpaper]


class TestManagedProcess:
    """Tests for ManagedProcess."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        """Test basic start and stop lifecycle."""
        proc = ManagedProcess()
        assert not proc.is_alive
        assert proc.pid is None

        await proc.start(["sleep", "10"])
        assert proc.is_alive
        assert proc.pid is not None
        assert proc.argv == ["sleep", "10"]

        returncode = await proc.stop()
        assert not proc.is_alive
        assert returncode is not None

    @pytest.mark.asyncio
    async def test_stop_not_started(self):
        """Test stop when never started returns None."""
        proc = ManagedProcess()
        assert await proc.stop() is None

    @pytest.mark.asyncio
    async def test_stop_already_exited(self):
        """Test stop on already exited process."""
        proc = ManagedProcess()
        await proc.start(["true"])
        await proc.wait()

        assert await proc.stop() == 0

    @pytest.mark.asyncio
    async def test_start_stops_existing(self):
        """Test that start() stops existing process first."""
        proc = ManagedProcess()
        await proc.start(["sleep", "10"])
        first_pid = proc.pid

        await proc.start(["sleep", "10"])
        assert first_pid != proc.pid
        await proc.stop()

    @pytest.mark.asyncio
    async def test_wait_without_start_raises(self):
        """Test wait without process raises RuntimeError."""
        proc = ManagedProcess()
        with pytest.raises(RuntimeError, match="No process"):
            await proc.wait()

    @pytest.mark.asyncio
    async def test_returncode(self):
        """Test returncode property."""
        proc = ManagedProcess()
        assert proc.returncode is None

        await proc.start(["sh", "-c", "exit 42"])
        await proc.wait()
        assert proc.returncode == 42

    @pytest.mark.asyncio
    async def test_sigkill_after_timeout(self):
        """Test that SIGKILL is sent if SIGTERM is ignored."""
        proc = ManagedProcess(graceful_timeout=0.2)
        await proc.start(["sh", "-c", "trap '' TERM; sleep 10"])
        await asyncio.sleep(0.1)  # let the trap be installed

        returncode = await proc.stop()
        assert returncode == -9
        assert not proc.is_alive

    @pytest.mark.asyncio
    async def test_pause_and_resume(self):
        """Test freezing a process keeps it alive."""
        proc = ManagedProcess()
        await proc.start(["sleep", "10"])

        proc.pause()
        assert proc.paused
        assert proc.is_alive

        proc.resume()
        assert not proc.paused
        assert proc.is_alive
        await proc.stop()

    @pytest.mark.asyncio
    async def test_stop_paused_process(self):
        """Test a frozen process still terminates gracefully."""
        proc = ManagedProcess(graceful_timeout=2.0)
        await proc.start(["sleep", "10"])
        proc.pause()

        returncode = await proc.stop()
        assert returncode == -15
        assert not proc.paused

    @pytest.mark.asyncio
    async def test_pause_exited_process(self):
        """Test pausing a dead process does nothing."""
        proc = ManagedProcess()
        await proc.start(["true"])
        await proc.wait()

        proc.pause()
        assert not proc.paused


class TestRendererSupervisor:
    """Tests for RendererSupervisor."""

    @pytest.fixture
    def supervisor(self, tmp_path):
        return RendererSupervisor(ShellBackend("sh"), graceful_timeout=0.5, cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_timeout_leaves_process_running(self, supervisor):
        handle = await supervisor.launch("sleep 10", None, {})
        result = await supervisor.wait_or_timeout(handle, 0.1)
        assert result == WaitResult(WaitOutcome.TIMED_OUT)
        assert handle.is_alive

        await supervisor.terminate(handle)
        assert not handle.is_alive

    @pytest.mark.asyncio
    async def test_exited(self, supervisor):
        handle = await supervisor.launch("true", None, {})
        result = await supervisor.wait_or_timeout(handle, 5)
        assert result == WaitResult(WaitOutcome.EXITED, 0)

    @pytest.mark.asyncio
    async def test_crashed(self, supervisor):
        handle = await supervisor.launch("exit 3", None, {})
        result = await supervisor.wait_or_timeout(handle, None)
        assert result == WaitResult(WaitOutcome.CRASHED, 3)
        assert str(result) == "crashed (code 3)"

    @pytest.mark.asyncio
    async def test_killed_externally(self, supervisor):
        handle = await supervisor.launch("sleep 10", None, {})
        waiter = asyncio.create_task(supervisor.wait_or_timeout(handle, None))
        await asyncio.sleep(0.1)
        handle._proc.kill()

        result = await asyncio.wait_for(waiter, 5)
        assert result.outcome is WaitOutcome.CRASHED
        assert str(result) == "crashed (signal 9)"

    @pytest.mark.asyncio
    async def test_working_directory(self, supervisor, tmp_path):
        handle = await supervisor.launch("touch here", None, {})
        await supervisor.wait_or_timeout(handle, 5)
        assert (tmp_path / "here").exists()

    @pytest.mark.asyncio
    async def test_launch_error(self, tmp_path):
        supervisor = RendererSupervisor(WallpaperEngineBackend(str(tmp_path / "missing-binary")))
        with pytest.raises(LaunchError, match="cannot run"):
            await supervisor.launch("1234", None, {})

    @pytest.mark.asyncio
    async def test_dry_run(self, mocker):
        supervisor = RendererSupervisor(WallpaperEngineBackend("lwe"), dry_run=True)
        info = mocker.patch.object(supervisor.log, "info")
        spawn = mocker.patch("asyncio.create_subprocess_exec")

        handle = await supervisor.launch("1234", "DP-1", {"fps": "30"})
        assert handle is None
        spawn.assert_not_called()
        info.assert_called_once_with("[dry-run] %s", "lwe --fps 30 --screen-root DP-1 --bg 1234")

    @pytest.mark.asyncio
    async def test_execute(self, supervisor):
        handle = await supervisor.execute(["-c", "exit 7"])
        assert handle.argv == ["sh", "-c", "exit 7"]
        result = await supervisor.wait_or_timeout(handle, 5)
        assert result == WaitResult(WaitOutcome.CRASHED, 7)
