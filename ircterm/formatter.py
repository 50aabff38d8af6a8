#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Transcript formatting: word wrap, nick column alignment and colors."""
import sys
import logging
from datetime import datetime

from blessed import Terminal


logger = logging.getLogger(__name__)

# Color palette for nicknames (blessed color names)
NICK_COLORS = [
    'cyan', 'green', 'yellow', 'blue', 'magenta', 'red',
    'bright_cyan', 'bright_green', 'bright_yellow',
    'bright_blue', 'bright_magenta', 'bright_red'
]

NICK_WIDTH = 12
SEPARATOR = ' | '
MIN_TEXT_WIDTH = 10

SYSTEM_NICK = '*'
INBOUND_MARKER = '<<'
OUTBOUND_MARKER = '>>'

ACTION_START = '\x01ACTION '
ACTION_END = '\x01'


def wrap_text(text, width):
    """Wrap text to lines no longer than `width`.

    Each line is broken at the last space that fits, and the space itself
    is dropped. A run without any space is cut at exactly `width`.

    Parameters
    ----------
    text : `str`
    width : `int`

    Returns
    -------
    `list` of `str`

    Examples
    --------
    >>> wrap_text('hello there world', 11)
    ['hello there', 'world']
    >>> wrap_text('abcdefgh', 3)
    ['abc', 'def', 'gh']
    """
    if width < 1:
        raise ValueError('width must be positive: %r' % width)
    lines = []
    while len(text) > width:
        cut = text.rfind(' ', 0, width + 1)
        if cut > 0:
            lines.append(text[:cut])
            text = text[cut + 1:]
        else:
            lines.append(text[:width])
            text = text[width:]
    lines.append(text)
    return lines


def nick_hash(nick):
    """Stable 32-bit string hash (unlike `hash`, not salted per process)."""
    h = 0
    for c in nick:
        h = (h * 31 + ord(c)) & 0xFFFFFFFF
    return h


def nick_color(nick):
    """Get the display color for a nickname.

    The color depends on nothing but the nickname, so every part of the
    client colors a given nick the same way without sharing any state.

    Args:
        nick (str): The nickname to colorize

    Returns:
        str: Color name from blessed (e.g., 'cyan', 'bright_green')
    """
    return NICK_COLORS[nick_hash(nick) % len(NICK_COLORS)]


def align_nick(nick, width=NICK_WIDTH):
    """Right-align a nick in a column, truncating it if too long."""
    if len(nick) > width:
        nick = nick[:width - 1] + '…'
    return nick.rjust(width)


def format_message(nick, text, width, nick_width=NICK_WIDTH, paint=None):
    """Lay out a message as aligned display lines.

    The first line carries the nick column; continuation lines leave it
    blank so the text column lines up.

    Args:
        nick (str): Sender shown in the nick column
        text (str): Message content
        width (int): Total display width
        nick_width (int): Width of the nick column
        paint (callable, optional): Applied to the nick characters only

    Returns:
        list: Display lines
    """
    column = align_nick(nick, nick_width)
    if paint is not None:
        stripped = column.lstrip(' ')
        column = column[:len(column) - len(stripped)] + paint(stripped)
    blank = ' ' * nick_width
    text_width = max(MIN_TEXT_WIDTH, width - nick_width - len(SEPARATOR))

    lines = []
    for i, chunk in enumerate(wrap_text(text, text_width)):
        lines.append('%s%s%s' % (column if i == 0 else blank, SEPARATOR, chunk))
    return lines


def split_action(text):
    """Return the body of a CTCP ACTION, or None for a plain message."""
    if not text.startswith(ACTION_START):
        return None
    body = text[len(ACTION_START):]
    if body.endswith(ACTION_END):
        body = body[:-len(ACTION_END)]
    return body


class Transcript:
    """Append-only, formatted operator transcript.

    Attributes
    ----------
    term : `blessed.Terminal`
    width : `int`
        Display width used for wrapping.
    stream : file-like
        Where display lines are written.
    log_file : `None` or file-like
        Plain-text copy of every line, with a full timestamp.
    """
    logger = logging.getLogger(__name__)

    CLOCK_FORMAT = '%H:%M'

    def __init__(self, term=None, width=None, stream=None,
                 log_path=None, clock_format=CLOCK_FORMAT):
        self.term = term or Terminal()
        self.stream = stream or sys.stdout
        self.clock_format = clock_format
        self.width = width or self.term.width or 80
        self.log_file = None
        if log_path:
            try:
                self.log_file = open(log_path, 'a', encoding='utf-8')
            except OSError as e:
                self.logger.warning('Failed to open transcript log %s: %s',
                                    log_path, e)

    def _paint_nick(self, nick):
        return getattr(self.term, nick_color(nick), self.term.white)(nick)

    def _emit(self, nick, text, paint):
        stamp = datetime.now().strftime(self.clock_format)
        width = self.width - len(stamp) - 1
        for line in format_message(nick, text, width, paint=paint):
            print('%s %s' % (self.term.bright_black(stamp), line),
                  file=self.stream, flush=True)
        self._log(nick, text)

    def _log(self, nick, text):
        if self.log_file is None:
            return
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        try:
            self.log_file.write('[%s] <%s> %s\n' % (timestamp, nick, text))
            self.log_file.flush()
        except OSError as e:
            self.logger.error('Failed to write to transcript log: %s', e)

    def message(self, nick, text, target=None):
        """Render a chat message.

        Args:
            nick (str): Sender of the message
            text (str): Message content (CTCP ACTIONs are recognized)
            target (str, optional): Shown as a `[target]` tag when given
        """
        action = split_action(text)
        if action is not None:
            text = '%s %s' % (nick, action)
            nick = SYSTEM_NICK
            paint = self.term.bright_white
        else:
            paint = self._paint_nick
        if target:
            text = '[%s] %s' % (target, text)
        self._emit(nick, text, paint)

    def info(self, text):
        self._emit(SYSTEM_NICK, text, self.term.bright_black)

    def error(self, text):
        self._emit(SYSTEM_NICK, text, self.term.bright_red)

    def inbound(self, line):
        self._emit(INBOUND_MARKER, line, self.term.bright_black)

    def outbound(self, line):
        self._emit(OUTBOUND_MARKER, line, self.term.bright_black)

    def prompt(self, text):
        """Write the input prompt without a line break."""
        print(self.term.bright_white(text), end='', file=self.stream, flush=True)

    def close(self):
        if self.log_file is not None:
            try:
                self.log_file.close()
            except OSError as e:
                self.logger.error('Error closing transcript log: %s', e)
            self.log_file = None
