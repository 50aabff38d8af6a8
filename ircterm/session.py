#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""The two halves of a running session and the supervisor that runs them.

The inbound half reads the connection and renders what arrives; the
outbound half reads operator input and writes to the connection. They
share nothing in memory except the connection; the current buffer
reaches the inbound half only through the shared slot on disk.
"""
import asyncio
import logging
from collections import deque
from pathlib import Path

from .error import ConnectionClosed, QuitRequested
from .parser import ChatMessage, NameListing, Ping, parse_line, pong_line
from .buffers import BufferRegistry, CompletionStore, SharedSlot
from .commands import CommandInterpreter
from .connection import Connection
from .console import ConsoleInput
from .formatter import Transcript


class InboundLoop:
    """Reads protocol lines and renders them.

    Attributes
    ----------
    connection : `ircterm.connection.Connection`
    transcript : `ircterm.formatter.Transcript`
    completions : `ircterm.buffers.CompletionStore`
    slot : `ircterm.buffers.SharedSlot`
        Read to tell whether a message is for the current buffer.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, connection, transcript, completions, slot):
        self.connection = connection
        self.transcript = transcript
        self.completions = completions
        self.slot = slot

    async def run(self):
        """Process lines until the server closes the connection."""
        while True:
            line = await self.connection.readline()
            if line is None:
                break
            if not line:
                continue
            event = parse_line(line)
            if isinstance(event, Ping):
                await self.connection.send(pong_line(event.token))
                continue
            try:
                self.render(event)
            except Exception:
                self.logger.exception('failed to render %r', line)
        self.logger.warning('connection closed by server')
        self.transcript.info('connection closed by server')

    def render(self, event):
        if isinstance(event, ChatMessage):
            self.completions.add(event.sender)
            target = event.target
            if target == self.slot.read():
                target = None
            self.transcript.message(event.sender, event.text, target=target)
        elif isinstance(event, NameListing):
            self.completions.update(event.names)
            self.transcript.info('%s: %d names: %s' % (
                event.channel, len(event.names), ' '.join(event.names)))
        else:
            self.transcript.inbound(event.raw)


class OutboundLoop:
    """Reads operator input and feeds it to the interpreter.

    Attributes
    ----------
    interpreter : `ircterm.commands.CommandInterpreter`
    source : object with a `readline(prompt)` coroutine
        Returns `None` at end of input.
    history : `collections.deque`
        Lines entered so far, for recall.
    """
    logger = logging.getLogger(__name__)

    PROMPT = '%s> '

    def __init__(self, interpreter, source, history_size=100):
        self.interpreter = interpreter
        self.source = source
        self.history = deque(maxlen=history_size)

    @property
    def transcript(self):
        return self.interpreter.transcript

    def prompt(self):
        return self.PROMPT % self.interpreter.registry.current

    async def run(self):
        """Process input until it ends; quitting raises `QuitRequested`."""
        while True:
            line = await self.source.readline(self.prompt())
            if line is None:
                break
            line = line.strip()
            if not line:
                continue
            self.history.append(line)
            try:
                await self.interpreter.execute(line)
            except (QuitRequested, ConnectionClosed):
                raise
            except Exception as ex:
                self.logger.exception('command failed: %s', line)
                self.transcript.error('error: %s' % ex)
        self.logger.info('end of input')
        self.transcript.info('end of input')


class SessionSupervisor:
    """Connects, runs both halves of the session and tears them down.

    Attributes
    ----------
    session : `ircterm.connection.Session`
    state_dir : `pathlib.Path`
        Holds the shared current-buffer slot and completion candidates.
    connection : `None` or `ircterm.connection.Connection`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, session, state_dir, retry=0, retry_delay=1,
                 command_prefix='/', farewell='Leaving', width=None,
                 transcript_log=None, source=None, term=None, stream=None,
                 connect=Connection.open):
        self.session = session
        self.state_dir = Path(state_dir).expanduser()
        self.retry = retry
        self.retry_delay = retry_delay
        self.command_prefix = command_prefix
        self.farewell = farewell
        self.width = width
        self.transcript_log = transcript_log
        self.source = source
        self.term = term
        self.stream = stream
        self.connect = connect
        self.connection = None

    @property
    def slot_path(self):
        return self.state_dir / 'current'

    @property
    def completions_dir(self):
        return self.state_dir / 'completions'

    def make_transcript(self):
        return Transcript(self.term, self.width, self.stream,
                          log_path=self.transcript_log)

    def make_inbound(self, transcript):
        return InboundLoop(self.connection, transcript,
                           CompletionStore(self.completions_dir),
                           SharedSlot(self.slot_path))

    def make_outbound(self, transcript):
        completions = CompletionStore(self.completions_dir)
        registry = BufferRegistry(SharedSlot(self.slot_path), completions)
        interpreter = CommandInterpreter(
            self.session, self.connection, registry, transcript,
            completions=completions,
            prefix=self.command_prefix,
            farewell=self.farewell
        )
        source = self.source or ConsoleInput(transcript)
        return OutboundLoop(interpreter, source)

    async def run(self):
        """Run the session until input ends, the server hangs up or the
        operator quits.

        Raises
        ------
        ConnectionFailed
            If the server cannot be reached.
        """
        self.connection = await self.connect(
            self.session.host, self.session.port, tls=self.session.tls,
            retry=self.retry, retry_delay=self.retry_delay
        )
        in_transcript = self.make_transcript()
        out_transcript = self.make_transcript()
        try:
            await self.connection.register(self.session)
            self.logger.info('registered as %s', self.session)

            inbound_task = asyncio.create_task(
                self.make_inbound(in_transcript).run())
            outbound_task = asyncio.create_task(
                self.make_outbound(out_transcript).run())

            done, pending = await asyncio.wait(
                [inbound_task, outbound_task],
                return_when=asyncio.FIRST_COMPLETED
            )

            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            for task in done:
                ex = task.exception()
                if isinstance(ex, QuitRequested):
                    self.logger.info('quit: %s', ex)
                elif isinstance(ex, ConnectionClosed):
                    self.logger.warning('connection lost: %s', ex)
                    out_transcript.error(str(ex))
                elif ex is not None:
                    self.logger.error('session task failed', exc_info=ex)
                    out_transcript.error('error: %s' % ex)
        finally:
            await self.connection.close()
            in_transcript.close()
            out_transcript.close()
