#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import sys
import stat
import asyncio
import logging


class ConsoleInput:
    """Line source reading operator input from a terminal, pipe or file.

    Terminals, pipes and sockets are watched with the event loop and read
    only once readable, so the descriptor keeps its blocking mode (stdout
    usually shares it). Regular files and objects without a descriptor
    are read in the default executor; such reads never wait for input.

    Attributes
    ----------
    transcript : `ircterm.formatter.Transcript`
        Used to show the prompt.
    stdin : file-like
    """
    logger = logging.getLogger(__name__)

    CHUNK_SIZE = 4096

    def __init__(self, transcript, stdin=None):
        self.transcript = transcript
        self.stdin = sys.stdin if stdin is None else stdin
        self.buffer = b''
        self.eof = False
        self._selectable = None

    @property
    def selectable(self):
        if self._selectable is None:
            try:
                mode = os.fstat(self.stdin.fileno()).st_mode
            except (AttributeError, OSError, ValueError):
                self._selectable = False
            else:
                self._selectable = (stat.S_ISFIFO(mode)
                                    or stat.S_ISSOCK(mode)
                                    or stat.S_ISCHR(mode))
            self.logger.debug('operator input selectable: %s',
                              self._selectable)
        return self._selectable

    async def _wait_readable(self, fd):
        loop = asyncio.get_running_loop()
        ready = loop.create_future()

        def on_readable():
            if not ready.done():
                ready.set_result(None)

        loop.add_reader(fd, on_readable)
        try:
            await ready
        finally:
            loop.remove_reader(fd)

    async def _read_selectable(self):
        fd = self.stdin.fileno()
        while b'\n' not in self.buffer and not self.eof:
            await self._wait_readable(fd)
            chunk = os.read(fd, self.CHUNK_SIZE)
            if chunk:
                self.buffer += chunk
            else:
                self.eof = True
        if b'\n' in self.buffer:
            data, _, self.buffer = self.buffer.partition(b'\n')
            return data + b'\n'
        data, self.buffer = self.buffer, b''
        return data

    async def _read_blocking(self):
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, self.stdin.readline)
        if isinstance(data, str):
            data = data.encode('utf-8', errors='replace')
        return data

    async def readline(self, prompt=''):
        """Show `prompt` and wait for one line.

        Returns
        -------
        `str` or `None`
            The line, or `None` at end of input.
        """
        if prompt:
            self.transcript.prompt(prompt)
        if self.selectable:
            data = await self._read_selectable()
        else:
            data = await self._read_blocking()
        if not data:
            return None
        return data.decode('utf-8', errors='replace').rstrip('\r\n')
