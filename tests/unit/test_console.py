"""
Unit tests for ircterm/console.py

Tests operator input from pipes, regular files and plain file objects.
"""
import io
import os
import asyncio
import pytest

from ircterm.console import ConsoleInput


pytestmark = pytest.mark.asyncio


@pytest.fixture
def pipe():
    """Read end as a binary file object, plus the raw write descriptor."""
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, 'rb', buffering=0)
    yield reader, write_fd
    reader.close()
    try:
        os.close(write_fd)
    except OSError:
        pass


async def test_pipe_lines(transcript, pipe):
    reader, write_fd = pipe
    os.write(write_fd, b'/join #chan\r\nhello\n')
    os.close(write_fd)
    console = ConsoleInput(transcript, stdin=reader)
    assert console.selectable is True
    assert await console.readline() == '/join #chan'
    assert await console.readline() == 'hello'
    assert await console.readline() is None
    assert os.get_blocking(reader.fileno())


async def test_pipe_last_line_without_newline(transcript, pipe):
    reader, write_fd = pipe
    os.write(write_fd, 'caf\xe9 tail'.encode('utf-8'))
    os.close(write_fd)
    console = ConsoleInput(transcript, stdin=reader)
    assert await console.readline() == 'caf\xe9 tail'
    assert await console.readline() is None


async def test_pipe_waits_for_input(transcript, pipe):
    """A read with nothing available waits until a line arrives."""
    reader, write_fd = pipe
    console = ConsoleInput(transcript, stdin=reader)
    task = asyncio.create_task(console.readline())
    await asyncio.sleep(0.01)
    assert not task.done()
    os.write(write_fd, b'late\n')
    assert await asyncio.wait_for(task, timeout=5) == 'late'


async def test_pipe_read_can_be_cancelled(transcript, pipe):
    reader, write_fd = pipe
    console = ConsoleInput(transcript, stdin=reader)
    task = asyncio.create_task(console.readline())
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    os.write(write_fd, b'after\n')
    assert await asyncio.wait_for(console.readline(), timeout=5) == 'after'


async def test_empty_input_is_end(transcript, pipe):
    reader, write_fd = pipe
    os.close(write_fd)
    assert await ConsoleInput(transcript, stdin=reader).readline() is None


async def test_prompt_goes_through_transcript(transcript, output, pipe):
    reader, write_fd = pipe
    os.write(write_fd, b'hi\n')
    console = ConsoleInput(transcript, stdin=reader)
    assert await console.readline('#chan> ') == 'hi'
    assert output.getvalue() == '#chan> '


async def test_regular_file(transcript, tmp_path):
    """Input redirected from a file is read without a pipe transport."""
    path = tmp_path / 'commands.txt'
    path.write_text('/join #chan\nhello\n', encoding='utf-8')
    with open(path, 'r', encoding='utf-8') as fp:
        console = ConsoleInput(transcript, stdin=fp)
        assert console.selectable is False
        assert await console.readline() == '/join #chan'
        assert await console.readline() == 'hello'
        assert await console.readline() is None


async def test_file_object_without_descriptor(transcript):
    console = ConsoleInput(transcript, stdin=io.StringIO('one\ntwo'))
    assert console.selectable is False
    assert await console.readline() == 'one'
    assert await console.readline() == 'two'
    assert await console.readline() is None
