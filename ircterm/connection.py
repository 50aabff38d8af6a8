#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import ssl
import asyncio
import logging

from .error import ConnectionFailed, ConnectionClosed


class Session:
    """Identity used on the connection.

    Attributes
    ----------
    host : `str`
    port : `int`
    nick : `str`
        Current nickname, changed by the nick command.
    password : `None` or `str`
        Connection password sent with PASS.
    login : `str`
        Login identity sent with USER (the nickname if not given).
    tls : `bool`
    """

    def __init__(self, host, port, nick, password=None, login=None, tls=False):
        self.host = host
        self.port = port
        self.nick = nick
        self.password = password
        self.login = login or nick
        self.tls = tls

    def __str__(self):
        return '%s@%s:%d' % (self.nick, self.host, self.port)

    def registration(self):
        """Lines that register the session with the server."""
        lines = []
        if self.password:
            lines.append('PASS %s' % self.password)
        lines.append('NICK %s' % self.nick)
        lines.append('USER %s 0 * :%s' % (self.login, self.nick))
        return lines


class Connection:
    """Line-oriented protocol connection.

    The reading and writing halves are used independently: one task only
    calls `readline`, the other only calls `send`.

    Attributes
    ----------
    reader : `asyncio.StreamReader`
    writer : `asyncio.StreamWriter`
    encoding : `str`
    """
    logger = logging.getLogger(__name__)

    TERMINATOR = '\r\n'

    def __init__(self, reader, writer, encoding='utf-8'):
        self.reader = reader
        self.writer = writer
        self.encoding = encoding
        self.closed = False

    @classmethod
    async def open(cls, host, port, tls=False, retry=0, retry_delay=1,
                   open_connection=asyncio.open_connection):
        """Connect to a server.

        Parameters
        ----------
        host : `str`
        port : `int`
        tls : `bool`, optional
        retry : `int`, optional
            Number of attempts after the first one.
        retry_delay : `float`, optional
            Delay in seconds between attempts.
        open_connection : `function` (host, port, ssl), optional
            Stream connect coroutine.

        Raises
        ------
        ConnectionFailed
            If every attempt failed.
        """
        context = ssl.create_default_context() if tls else None
        attempt = 0
        while True:
            try:
                cls.logger.info('connecting to %s:%d (attempt %d)',
                                host, port, attempt + 1)
                reader, writer = await open_connection(host, port, ssl=context)
                cls.logger.info('connected to %s:%d', host, port)
                return cls(reader, writer)
            except (OSError, asyncio.TimeoutError) as ex:
                cls.logger.warning('connection to %s:%d failed: %s',
                                   host, port, ex)
                if attempt >= retry:
                    raise ConnectionFailed(
                        'cannot connect to %s:%d: %s' % (host, port, ex)
                    ) from ex
            attempt += 1
            await asyncio.sleep(retry_delay)

    def decode(self, data):
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError:
            return data.decode('latin-1')

    async def readline(self):
        """Read one protocol line.

        Returns
        -------
        `str` or `None`
            The line without terminator, or `None` at end of stream.
        """
        try:
            data = await self.reader.readline()
        except (OSError, asyncio.IncompleteReadError) as ex:
            self.logger.warning('read failed: %s', ex)
            return None
        except ValueError as ex:
            # line longer than the stream limit
            self.logger.warning('dropping oversized line: %s', ex)
            return ''
        if not data:
            return None
        return self.decode(data).rstrip('\r\n')

    async def send(self, line):
        """Send one protocol line.

        Raises
        ------
        ConnectionClosed
            If the transport is gone.
        """
        if self.closed:
            raise ConnectionClosed('connection is closed')
        line = line.replace('\r', ' ').replace('\n', ' ')
        self.logger.debug('>> %s', line)
        try:
            self.writer.write((line + self.TERMINATOR).encode(self.encoding))
            await self.writer.drain()
        except (OSError, RuntimeError) as ex:
            raise ConnectionClosed('send failed: %s' % ex) from ex

    async def register(self, session):
        for line in session.registration():
            await self.send(line)

    async def close(self):
        if self.closed:
            return
        self.closed = True
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (OSError, AttributeError) as ex:
            self.logger.debug('close: %s', ex)
