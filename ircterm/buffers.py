#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Joined buffers and the small on-disk state shared by both session halves."""
import os
import logging
import tempfile
from pathlib import Path

from .error import BufferIndexError


SENTINEL_BUFFER = '*'


class SharedSlot:
    """Current buffer pointer stored in a single small file.

    Writes replace the file atomically, so a reader sees either the old
    or the new name, never a partial one.

    Attributes
    ----------
    path : `pathlib.Path`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, path):
        self.path = Path(path)

    def write(self, name):
        """Persist `name`. Failures are logged and otherwise ignored."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent),
                                       prefix='.current-')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as fp:
                    fp.write(name)
                os.replace(tmp, str(self.path))
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as e:
            self.logger.warning('Failed to persist current buffer %s: %s',
                                name, e)

    def read(self, default=SENTINEL_BUFFER):
        try:
            name = self.path.read_text(encoding='utf-8').strip()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.debug('current buffer unreadable: %s', e)
            return default
        return name or default


class CompletionStore:
    """Append-only set of completion candidates (nicks and channels).

    Every candidate is one file named after it. Each add creates or
    truncates that whole file, so any number of writers can add the same
    name concurrently.

    Attributes
    ----------
    directory : `pathlib.Path`
    seen : `set` of `str`
        Names already written by this instance.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, directory):
        self.directory = Path(directory)
        self.seen = set()

    @staticmethod
    def is_storable(name):
        if not name or name in ('.', '..'):
            return False
        return '/' not in name and '\\' not in name and '\0' not in name

    def add(self, name):
        """Add a candidate.

        Returns
        -------
        `bool`
            `True` if the name was new to this instance.
        """
        if name in self.seen or not self.is_storable(name):
            return False
        self.seen.add(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / name).write_text(name, encoding='utf-8')
        except OSError as e:
            self.logger.warning('Failed to store completion %s: %s', name, e)
        return True

    def update(self, names):
        for name in names:
            self.add(name)

    def names(self):
        """All known candidates, including ones written by other writers."""
        names = set(self.seen)
        try:
            names.update(path.name for path in self.directory.iterdir()
                         if path.is_file())
        except OSError as e:
            self.logger.debug('completion store unreadable: %s', e)
        return sorted(names)

    def __contains__(self, name):
        if name in self.seen:
            return True
        return self.is_storable(name) and (self.directory / name).is_file()


class BufferRegistry:
    """Ordered list of joined buffers and the current one.

    The current buffer is mirrored to a `SharedSlot` whenever it changes.

    Attributes
    ----------
    buffers : `list` of `str`
        Joined buffers in join order (defines numeric addressing).
    index : `int`
        Index of the current buffer, 0 when there are none.
    slot : `SharedSlot`
    completions : `None` or `CompletionStore`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, slot, completions=None):
        self.buffers = []
        self.index = 0
        self.slot = slot
        self.completions = completions
        self._persist()

    def __len__(self):
        return len(self.buffers)

    def __iter__(self):
        return iter(self.buffers)

    def __contains__(self, name):
        return name in self.buffers

    @property
    def current(self):
        if not self.buffers:
            return SENTINEL_BUFFER
        return self.buffers[self.index]

    def current_name(self):
        """Current buffer as persisted in the shared slot."""
        return self.slot.read()

    def _persist(self):
        self.slot.write(self.current)

    def _remember(self, name):
        if self.completions is not None and name != SENTINEL_BUFFER:
            self.completions.add(name)

    def join(self, name):
        """Join a buffer and focus it.

        Joining a buffer already in the list leaves both the list and the
        focus as they are.

        Returns
        -------
        `bool`
            `True` if the buffer was added.
        """
        self._remember(name)
        if name in self.buffers:
            self.logger.debug('already in %s', name)
            return False
        self.buffers.append(name)
        self.index = len(self.buffers) - 1
        self._persist()
        self.logger.info('joined %s', name)
        return True

    def part(self, name=None):
        """Leave a buffer (the current one by default).

        Focus stays on the same index, falling back to the first buffer
        when that index no longer exists.

        Returns
        -------
        `bool`
            `True` if the buffer was removed.
        """
        if name is None:
            name = self.current
        self._remember(name)
        if name not in self.buffers:
            return False
        self.buffers.remove(name)
        if not self.buffers or self.index >= len(self.buffers):
            self.index = 0
        self._persist()
        self.logger.info('parted %s', name)
        return True

    def switch_next(self):
        if not self.buffers:
            return
        self.index = (self.index + 1) % len(self.buffers)
        self._persist()

    def switch_prev(self):
        if not self.buffers:
            return
        self.index = (self.index - 1) % len(self.buffers)
        self._persist()

    def switch_to_index(self, index):
        if not 0 <= index < len(self.buffers):
            raise BufferIndexError('no such buffer index: %d' % index)
        self.index = index
        self._persist()
