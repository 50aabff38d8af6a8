#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Best-effort classification of inbound protocol lines."""
import re
from dataclasses import dataclass


PRIVILEGE_PREFIXES = '~&@%+'


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    ident: str
    target: str
    text: str


@dataclass(frozen=True)
class NameListing:
    channel: str
    names: tuple


@dataclass(frozen=True)
class Ping:
    token: str


@dataclass(frozen=True)
class Other:
    raw: str


CHAT_MESSAGE = re.compile(
    r'^:(?P<sender>[^!\s]+)!(?P<ident>\S+)\s+PRIVMSG\s+'
    r'(?P<target>\S+)\s+:(?P<text>.*)$',
    re.I
)
NAME_LISTING = re.compile(
    r'^(?:\S+\s+)?353\s+\S+\s+[=*@]\s+(?P<channel>\S+)\s+:?(?P<names>.*)$'
)
PING = re.compile(r'^(?::\S+\s+)?PING(?:\s+(?P<token>.*))?$', re.I)


def strip_privilege(name):
    """Drop one leading channel privilege prefix (`@op`, `+voice`, ...)."""
    if name[:1] and name[0] in PRIVILEGE_PREFIXES:
        return name[1:]
    return name


def match_chat_message(line):
    match = CHAT_MESSAGE.match(line)
    if match is None:
        return None
    return ChatMessage(match.group('sender'), match.group('ident'),
                       match.group('target'), match.group('text'))


def match_name_listing(line):
    match = NAME_LISTING.match(line)
    if match is None:
        return None
    names = (strip_privilege(name) for name in match.group('names').split())
    return NameListing(match.group('channel'),
                       tuple(name for name in names if name))


def match_ping(line):
    match = PING.match(line)
    if match is None:
        return None
    return Ping(match.group('token') or '')


# Tried in order, first match wins.
MATCHERS = (match_chat_message, match_name_listing, match_ping)


def parse_line(line):
    """Classify one inbound line.

    Parameters
    ----------
    line : `str`
        Protocol line without its terminator.

    Returns
    -------
    `ChatMessage`, `NameListing`, `Ping` or `Other`
        Anything that matches no known shape comes back as `Other`.

    Examples
    --------
    >>> parse_line(':alice!alice@host PRIVMSG #chan :hi')
    ChatMessage(sender='alice', ident='alice@host', target='#chan', text='hi')
    >>> parse_line('PING :token123')
    Ping(token=':token123')
    """
    if not isinstance(line, str):
        return Other(repr(line))
    for matcher in MATCHERS:
        event = matcher(line)
        if event is not None:
            return event
    return Other(line)


def pong_line(token):
    """Reply to a `Ping` carrying `token`."""
    return ('PONG %s' % token).rstrip()
