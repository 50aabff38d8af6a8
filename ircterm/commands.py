#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Operator input interpreter: slash commands and plain chat."""
import logging

from .error import BufferIndexError, QuitRequested
from .buffers import SENTINEL_BUFFER
from .formatter import ACTION_START, ACTION_END


class CommandInterpreter:
    """Turns one line of operator input into protocol actions.

    Every `cmd_<name>` method is a command; `MIN_ARGS` gives the number of
    arguments it needs. A command given too few arguments only reports its
    usage.

    Attributes
    ----------
    session : `ircterm.connection.Session`
    connection : `ircterm.connection.Connection`
        Only `send` is used.
    registry : `ircterm.buffers.BufferRegistry`
    transcript : `ircterm.formatter.Transcript`
    completions : `None` or `ircterm.buffers.CompletionStore`
    prefix : `str`
        Character that starts a command.
    farewell : `str`
        Default quit message.
    commands : `dict` of (`str`, `function`)
    """
    logger = logging.getLogger(__name__)

    MIN_ARGS = {
        'join': 1,
        'msg': 2,
        'me': 1,
        'nick': 1,
        'raw': 1,
    }

    USAGE = {
        'join': '<channel>',
        'msg': '<target> <message>',
        'me': '<action>',
        'nick': '<nick>',
        'raw': '<line>',
    }

    HELP = [
        ('join <channel>', 'join a channel and switch to it'),
        ('part [channel]', 'leave a channel (default: current)'),
        ('msg <target> <message>', 'send a message to a nick or channel'),
        ('me <action>', 'send an action to the current buffer'),
        ('nick <nick>', 'change your nickname'),
        ('names', 'list the members of the current buffer'),
        ('topic', 'show the topic of the current buffer'),
        ('away [message]', 'set away status (no message: back)'),
        ('raw <line>', 'send a line to the server as is'),
        ('next / prev', 'switch to the next/previous buffer'),
        ('<number>', 'switch to buffer by index'),
        ('buffers', 'list joined buffers'),
        ('quit [message]', 'disconnect and exit'),
    ]

    def __init__(self, session, connection, registry, transcript,
                 completions=None, prefix='/', farewell='Leaving'):
        self.session = session
        self.connection = connection
        self.registry = registry
        self.transcript = transcript
        self.completions = completions
        self.prefix = prefix
        self.farewell = farewell
        self.commands = {}
        for attr in dir(self):
            if attr.startswith('cmd_'):
                self.commands[attr[4:]] = getattr(self, attr)

    def _remember(self, name):
        if self.completions is not None:
            self.completions.add(name)

    def _in_buffer(self):
        if not len(self.registry):
            self.transcript.error('not in a buffer')
            return False
        return True

    def _echo(self, target, text):
        shown = None if target == self.registry.current else target
        self.transcript.message(self.session.nick, text, target=shown)

    async def execute(self, line):
        """Interpret one line of operator input.

        Args:
            line (str): Raw input line
        """
        line = line.strip()
        if not line:
            return
        if line.startswith(self.prefix):
            await self.handle_command(line[len(self.prefix):])
        else:
            await self.say(line)

    async def handle_command(self, text):
        """Dispatch a command line with the prefix already removed.

        Args:
            text (str): e.g. 'join #python'
        """
        parts = text.split(None, 1)
        if not parts:
            return
        command = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ''
        args = rest.split()

        if command.isdecimal():
            self.switch_to_index(int(command))
            return

        handler = self.commands.get(command)
        if handler is None:
            self.transcript.error('unknown command: %s%s'
                                  % (self.prefix, command))
            return
        if len(args) < self.MIN_ARGS.get(command, 0):
            self.transcript.error(('usage: %s%s %s'
                                   % (self.prefix, command,
                                      self.USAGE.get(command, ''))).rstrip())
            return

        self.logger.debug('command %s %r', command, args)
        await handler(args, rest)

    def switch_to_index(self, index):
        try:
            self.registry.switch_to_index(index)
        except BufferIndexError as ex:
            self.transcript.error(str(ex))
            return
        self.transcript.info('buffer %d: %s' % (index, self.registry.current))

    async def say(self, text):
        """Send plain input to the current buffer."""
        if not self._in_buffer():
            return
        target = self.registry.current
        await self.connection.send('PRIVMSG %s :%s' % (target, text))
        self._echo(target, text)

    # === Commands ===

    async def cmd_join(self, args, rest):
        name = args[0]
        await self.connection.send('JOIN %s' % name)
        if self.registry.join(name):
            self.transcript.info('now talking in %s' % name)

    async def cmd_part(self, args, rest):
        if args:
            name = args[0]
        elif self._in_buffer():
            name = self.registry.current
        else:
            return
        await self.connection.send('PART %s' % name)
        self.registry.part(name)

    async def cmd_quit(self, args, rest):
        farewell = rest or self.farewell
        await self.connection.send('QUIT :%s' % farewell)
        raise QuitRequested(farewell)

    async def cmd_msg(self, args, rest):
        target, text = rest.split(None, 1)
        await self.connection.send('PRIVMSG %s :%s' % (target, text))
        self._remember(target)
        self._echo(target, text)

    async def cmd_me(self, args, rest):
        if not self._in_buffer():
            return
        target = self.registry.current
        text = '%s%s%s' % (ACTION_START, rest, ACTION_END)
        await self.connection.send('PRIVMSG %s :%s' % (target, text))
        self._echo(target, text)

    async def cmd_nick(self, args, rest):
        nick = args[0]
        await self.connection.send('NICK %s' % nick)
        self.logger.info('nick %s -> %s', self.session.nick, nick)
        self.session.nick = nick
        self._remember(nick)

    async def cmd_names(self, args, rest):
        if self._in_buffer():
            await self.connection.send('NAMES %s' % self.registry.current)

    async def cmd_topic(self, args, rest):
        if self._in_buffer():
            await self.connection.send('TOPIC %s' % self.registry.current)

    async def cmd_away(self, args, rest):
        if rest:
            await self.connection.send('AWAY :%s' % rest)
        else:
            await self.connection.send('AWAY')

    async def cmd_raw(self, args, rest):
        line = ' '.join(args)
        await self.connection.send(line)
        self.transcript.outbound(line)

    async def cmd_next(self, args, rest):
        self.registry.switch_next()
        if len(self.registry):
            self.transcript.info('buffer %d: %s'
                                 % (self.registry.index, self.registry.current))

    async def cmd_prev(self, args, rest):
        self.registry.switch_prev()
        if len(self.registry):
            self.transcript.info('buffer %d: %s'
                                 % (self.registry.index, self.registry.current))

    async def cmd_buffers(self, args, rest):
        if not len(self.registry):
            self.transcript.info('no buffers (current: %s)' % SENTINEL_BUFFER)
            return
        for i, name in enumerate(self.registry):
            marker = '*' if i == self.registry.index else ' '
            self.transcript.info('%s %d: %s' % (marker, i, name))

    async def cmd_help(self, args, rest):
        width = max(len(usage) for usage, _ in self.HELP) + len(self.prefix)
        for usage, description in self.HELP:
            usage = self.prefix + usage
            self.transcript.info('%s  %s' % (usage.ljust(width), description))
