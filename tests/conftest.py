" generic fixtures "
import pytest
from pytest_asyncio import fixture

from lxwengd.config_loader import Settings
from lxwengd.manager import Lxwengd

from .testtools import FakeSupervisor


def pytest_configure():
    "Runs once before all"
    from lxwengd.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def playlists(tmp_path):
    "Writes playlists in the search path: playlists(name=content, ...)"

    def _write(**files):
        for name, content in files.items():
            (tmp_path / f"{name}.playlist").write_text(content)

    return _write


@pytest.fixture
def settings(tmp_path):
    return Settings(playlist="default", binary="fake-renderer", search_path=tmp_path, cache_dir=tmp_path / "cache")


@pytest.fixture
def supervisor():
    return FakeSupervisor()


@fixture
async def daemon(settings, supervisor):
    "A daemon context driving the fake supervisor"
    manager = Lxwengd(settings, supervisor=supervisor)
    yield manager
    await manager.shutdown(save_state=False)
