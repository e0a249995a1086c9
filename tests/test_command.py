import sys

import pytest

from lxwengd import command
from lxwengd.command import UsageError, use_flag, use_param
from lxwengd.models import ExitCode
from lxwengd.version import VERSION


@pytest.fixture
def argv(monkeypatch):
    "Sets sys.argv: argv('--flag', 'value')"

    def _set(*args):
        monkeypatch.setattr(sys, "argv", ["lxwengd", *args])

    return _set


def test_use_param(argv):
    argv("--playlist", "night", "--dry-run")
    assert use_param("--playlist") == "night"
    assert sys.argv == ["lxwengd", "--dry-run"]
    assert use_param("--binary") == ""


def test_use_param_without_value(argv):
    argv("--config")
    with pytest.raises(UsageError):
        use_param("--config")


def test_use_flag(argv):
    argv("-h", "--standby", "--standby")
    assert use_flag("--help", "-h")
    assert use_flag("--standby")
    assert not use_flag("--dry-run")
    assert sys.argv == ["lxwengd"]


def test_version(argv, capsys, mocker):
    mocker.patch.object(command, "init_logger")
    argv("--version")
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.SUCCESS
    assert capsys.readouterr().out.strip() == VERSION


def test_help_lists_config_keys(argv, capsys, mocker):
    mocker.patch.object(command, "init_logger")
    argv("--help")
    with pytest.raises(SystemExit):
        command.main()
    out = capsys.readouterr().out
    for key in ("playlist", "binary", "graceful_timeout", "default_duration"):
        assert key in out


def test_unknown_option(argv, capsys, mocker):
    mocker.patch.object(command, "init_logger")
    argv("--loud")
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.USAGE_ERROR
    assert "unknown option --loud" in capsys.readouterr().err


def test_client_mode(argv, mocker):
    mocker.patch.object(command, "init_logger")
    run_client = mocker.patch.object(command, "run_client", return_value=ExitCode.COMMAND_ERROR)
    argv("next", "2")
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.COMMAND_ERROR
    run_client.assert_called_once_with(["next", "2"])


def test_daemon_already_running(argv, mocker, tmp_path):
    mocker.patch.object(command, "init_logger")
    socket = tmp_path / "lxwengd.sock"
    socket.touch()
    mocker.patch.object(command, "CONTROL", str(socket))
    run_daemon = mocker.patch.object(command, "run_daemon")
    argv("--standby")
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.STARTUP_ERROR
    run_daemon.assert_not_called()
    assert socket.exists()


def test_daemon_settings(argv, mocker, tmp_path):
    mocker.patch.object(command, "init_logger")
    mocker.patch.object(command, "CONTROL", str(tmp_path / "lxwengd.sock"))
    config = tmp_path / "config.toml"
    config.write_text('[lxwengd]\nbinary = "/opt/renderer"\n')
    run_daemon = mocker.patch.object(command, "run_daemon")
    argv("--config", str(config), "--playlist", "night", "--dry-run")
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.SUCCESS
    (settings,) = run_daemon.call_args.args
    assert settings.playlist == "night"
    assert settings.binary == "/opt/renderer"
    assert settings.dry_run
    assert not settings.standby


def test_daemon_bad_config(argv, mocker, tmp_path):
    mocker.patch.object(command, "init_logger")
    mocker.patch.object(command, "CONTROL", str(tmp_path / "lxwengd.sock"))
    mocker.patch.object(command, "run_daemon")
    argv("--config", str(tmp_path / "missing.toml"))
    with pytest.raises(SystemExit) as excinfo:
        command.main()
    assert excinfo.value.code == ExitCode.STARTUP_ERROR
