"""
Shared pytest fixtures for the ircterm test suite.

This file contains fixtures that are available to all test files.
"""
import io
import asyncio
import pytest
from unittest.mock import Mock, AsyncMock

from blessed import Terminal

from ircterm.buffers import BufferRegistry, CompletionStore, SharedSlot
from ircterm.commands import CommandInterpreter
from ircterm.connection import Connection, Session
from ircterm.formatter import Transcript


class ScriptedInput:
    """Operator input source that replays a fixed list of lines.

    Returns `None` (end of input) once the lines run out, or blocks
    forever if `block_at_end` is set.
    """

    def __init__(self, lines, block_at_end=False):
        self.lines = list(lines)
        self.block_at_end = block_at_end
        self.prompts = []

    async def readline(self, prompt=''):
        self.prompts.append(prompt)
        if self.lines:
            return self.lines.pop(0)
        if self.block_at_end:
            await asyncio.Event().wait()
        return None


@pytest.fixture
def term():
    """Terminal that never emits escape sequences."""
    return Terminal(force_styling=None)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def transcript(term, output):
    """Transcript writing plain text to an in-memory stream."""
    return Transcript(term=term, width=80, stream=output)


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / 'state'


@pytest.fixture
def slot(state_dir):
    return SharedSlot(state_dir / 'current')


@pytest.fixture
def completions(state_dir):
    return CompletionStore(state_dir / 'completions')


@pytest.fixture
def registry(slot, completions):
    return BufferRegistry(slot, completions)


@pytest.fixture
def session():
    return Session('irc.example.org', 6667, 'me')


@pytest.fixture
def mock_connection():
    """
    Mock connection sink.

    Returns:
        Mock: Connection whose `send` records every line
    """
    connection = Mock(spec=Connection)
    connection.send = AsyncMock()
    return connection


@pytest.fixture
def sent():
    """Lines passed to a mocked connection's `send`, in order."""
    def lines(connection):
        return [c.args[0] for c in connection.send.call_args_list]
    return lines


@pytest.fixture
def interpreter(session, mock_connection, registry, transcript, completions):
    return CommandInterpreter(session, mock_connection, registry, transcript,
                              completions=completions)


@pytest.fixture
def make_connection():
    """
    Factory for a connection over a real StreamReader and a mocked writer.

    Call it from inside a test coroutine. Feed server lines with
    `connection.reader.feed_data(...)`; written bytes are collected from
    `connection.writer.write`.
    """
    def make():
        reader = asyncio.StreamReader()
        writer = Mock()
        writer.write = Mock()
        writer.drain = AsyncMock()
        writer.close = Mock()
        writer.wait_closed = AsyncMock()
        return Connection(reader, writer)
    return make


@pytest.fixture
def written():
    """Decoded lines written through a `make_connection` connection."""
    def lines(connection):
        data = b''.join(c.args[0]
                        for c in connection.writer.write.call_args_list)
        return data.decode('utf-8').split('\r\n')[:-1]
    return lines


@pytest.fixture
def scripted_input():
    """Factory for `ScriptedInput` operator input sources."""
    return ScriptedInput
