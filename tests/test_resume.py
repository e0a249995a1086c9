import logging
from unittest.mock import Mock

import pytest

from lxwengd.models import ResumeMode
from lxwengd.playlist import parse_program
from lxwengd.resume import discard_resume, load_resume, resume_path, save_resume, start_line


@pytest.fixture
def program(tmp_path):
    path = tmp_path / "main.playlist"
    lines = ["111 10", "", "222 10", "333 10"]
    path.write_text("\n".join(lines) + "\n")
    return parse_program("main", lines, path=path)


def test_resume_path(tmp_path):
    assert resume_path(tmp_path / "day.playlist") == tmp_path / "day.playlist.resume"


@pytest.mark.asyncio
async def test_save_load_discard(tmp_path):
    playlist = tmp_path / "day.playlist"
    assert await load_resume(playlist) is None

    await save_resume(playlist, 12)
    assert resume_path(playlist).read_text() == "12\n"
    assert await load_resume(playlist) == 12

    await discard_resume(playlist)
    assert not resume_path(playlist).exists()
    await discard_resume(playlist)


@pytest.mark.asyncio
async def test_garbage_resume_file(tmp_path):
    playlist = tmp_path / "day.playlist"
    resume_path(playlist).write_text("line three\n")
    assert await load_resume(playlist) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("mode", "line", "kept"),
    [
        (ResumeMode.APPLY, 3, True),
        (ResumeMode.APPLY_DELETE, 3, False),
        (ResumeMode.IGNORE, 1, True),
        (ResumeMode.IGNORE_DELETE, 1, False),
    ],
)
async def test_start_line_modes(program, mode, line, kept):
    await save_resume(program.path, 3)
    assert await start_line(program, mode, Mock(spec=logging.Logger)) == line
    assert resume_path(program.path).exists() is kept


@pytest.mark.asyncio
async def test_start_line_on_blank_line(program):
    await save_resume(program.path, 2)
    assert await start_line(program, ResumeMode.APPLY, Mock(spec=logging.Logger)) == 3


@pytest.mark.asyncio
async def test_start_line_out_of_range(program):
    log = Mock(spec=logging.Logger)
    await save_resume(program.path, 40)
    assert await start_line(program, ResumeMode.APPLY, log) == 1
    log.warning.assert_called_once()


@pytest.mark.asyncio
async def test_start_line_without_file(program):
    assert await start_line(program, ResumeMode.APPLY, Mock(spec=logging.Logger)) == 1
