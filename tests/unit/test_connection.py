"""
Unit tests for ircterm/connection.py

Tests Session registration lines and the Connection line codec.
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, Mock

from ircterm.connection import Connection, Session
from ircterm.error import ConnectionClosed, ConnectionFailed


class TestSession:
    """Test Session."""

    def test_defaults(self):
        session = Session('irc.example.org', 6667, 'me')
        assert session.login == 'me'
        assert session.password is None
        assert session.tls is False
        assert str(session) == 'me@irc.example.org:6667'

    def test_registration(self):
        session = Session('irc.example.org', 6667, 'me')
        assert session.registration() == [
            'NICK me',
            'USER me 0 * :me',
        ]

    def test_registration_with_password_and_login(self):
        session = Session('irc.example.org', 6667, 'me',
                          password='s3cret', login='ident')
        assert session.registration() == [
            'PASS s3cret',
            'NICK me',
            'USER ident 0 * :me',
        ]


@pytest.mark.asyncio
async def test_readline(make_connection):
    """Lines come back without their terminators."""
    connection = make_connection()
    connection.reader.feed_data(b'PING :a\r\n:x!y@z PRIVMSG #c :hi\n')
    connection.reader.feed_eof()
    assert await connection.readline() == 'PING :a'
    assert await connection.readline() == ':x!y@z PRIVMSG #c :hi'
    assert await connection.readline() is None


@pytest.mark.asyncio
async def test_readline_latin1_fallback(make_connection):
    """Undecodable UTF-8 falls back to latin-1."""
    connection = make_connection()
    connection.reader.feed_data(b'caf\xe9\r\n')
    connection.reader.feed_eof()
    assert await connection.readline() == 'caf\xe9'


@pytest.mark.asyncio
async def test_readline_error_is_end_of_stream(make_connection):
    connection = make_connection()
    connection.reader.set_exception(ConnectionResetError('reset'))
    assert await connection.readline() is None


@pytest.mark.asyncio
async def test_send(make_connection, written):
    connection = make_connection()
    await connection.send('PRIVMSG #c :hello')
    assert written(connection) == ['PRIVMSG #c :hello']
    connection.writer.drain.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_strips_line_breaks(make_connection, written):
    """Embedded line breaks cannot inject extra protocol lines."""
    connection = make_connection()
    await connection.send('PRIVMSG #c :a\r\nQUIT')
    assert written(connection) == ['PRIVMSG #c :a  QUIT']


@pytest.mark.asyncio
async def test_send_failure(make_connection):
    connection = make_connection()
    connection.writer.drain = AsyncMock(side_effect=ConnectionResetError())
    with pytest.raises(ConnectionClosed):
        await connection.send('PING :x')


@pytest.mark.asyncio
async def test_send_after_close(make_connection):
    connection = make_connection()
    await connection.close()
    connection.writer.close.assert_called_once()
    with pytest.raises(ConnectionClosed):
        await connection.send('PING :x')


@pytest.mark.asyncio
async def test_register(make_connection, written):
    connection = make_connection()
    await connection.register(Session('h', 1, 'me', password='pw'))
    assert written(connection) == ['PASS pw', 'NICK me', 'USER me 0 * :me']


class TestOpen:
    """Test Connection.open retries."""

    @pytest.mark.asyncio
    async def test_open(self):
        reader, writer = Mock(), Mock()
        open_connection = AsyncMock(return_value=(reader, writer))
        connection = await Connection.open('h', 6667,
                                           open_connection=open_connection)
        assert connection.reader is reader
        assert connection.writer is writer
        open_connection.assert_awaited_once_with('h', 6667, ssl=None)

    @pytest.mark.asyncio
    async def test_open_tls(self):
        open_connection = AsyncMock(return_value=(Mock(), Mock()))
        await Connection.open('h', 6697, tls=True,
                              open_connection=open_connection)
        assert open_connection.call_args.kwargs['ssl'] is not None

    @pytest.mark.asyncio
    async def test_open_fails(self):
        open_connection = AsyncMock(side_effect=ConnectionRefusedError())
        with pytest.raises(ConnectionFailed):
            await Connection.open('h', 1, open_connection=open_connection)
        assert open_connection.await_count == 1

    @pytest.mark.asyncio
    async def test_open_retries(self):
        open_connection = AsyncMock(side_effect=[
            OSError('unreachable'),
            asyncio.TimeoutError(),
            (Mock(), Mock()),
        ])
        connection = await Connection.open('h', 1, retry=2, retry_delay=0,
                                           open_connection=open_connection)
        assert isinstance(connection, Connection)
        assert open_connection.await_count == 3

    @pytest.mark.asyncio
    async def test_open_gives_up_after_retries(self):
        open_connection = AsyncMock(side_effect=OSError('unreachable'))
        with pytest.raises(ConnectionFailed):
            await Connection.open('h', 1, retry=1, retry_delay=0,
                                  open_connection=open_connection)
        assert open_connection.await_count == 2
