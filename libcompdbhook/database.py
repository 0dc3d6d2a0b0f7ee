# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.
""" This module implements the persistence of the compilation database.

Many hook processes might update the same database file at the same time.
Every process opens the file, takes an exclusive advisory lock on it, reads,
merges and rewrites the content, and releases the lock. Readers and writers
which do not take the lock might see a truncated file. """

import collections
import contextlib
import fcntl
import json
import logging
import os
from typing import Iterator, List  # noqa: ignore=F401

from libcompdbhook.compilation import CommandEntry

__all__ = ['DatabaseError', 'ExclusiveFileLock', 'ParseResult',
           'open_database', 'read_entries', 'decode_entries',
           'rewrite_entries']

BUFFER_SIZE = 4096

# The result of reading the database. The error is None when the content
# was decoded, otherwise the content was dropped and entries is empty.
ParseResult = collections.namedtuple('ParseResult', ['entries', 'error'])


class DatabaseError(OSError):
    """ Operating system error on the database file, tagged with the name
    of the failed operation. """

    def __init__(self, operation, error, filename=None):
        # type: (str, OSError, str) -> None
        super().__init__(error.errno, error.strerror,
                         filename or error.filename)
        self.operation = operation

    def __str__(self):
        # type: () -> str
        return '{0}: {1}'.format(self.operation, super().__str__())


@contextlib.contextmanager
def failing_as(operation, filename=None):
    # type: (str, str) -> Iterator[None]
    """ Turns the OSError of the block into DatabaseError. """

    try:
        yield
    except OSError as error:
        raise DatabaseError(operation, error, filename) from error


def open_database(filename):
    # type: (str) -> int
    """ Opens the database file for read and write, creates it when it does
    not exist.

    :param filename: path to the database file
    :return: the file descriptor """

    logging.debug('open compilation database: %s', filename)
    with failing_as('open', filename):
        return os.open(filename, os.O_RDWR | os.O_CREAT | os.O_CLOEXEC, 0o664)


class ExclusiveFileLock:
    """ Exclusive advisory lock on an open file.

    Entering the context blocks until the lock is granted, there is no
    timeout. Leaving the context releases the lock. """

    def __init__(self, fd):
        # type: (int) -> None
        self.fd = fd

    def __enter__(self):
        logging.debug('waiting for the lock on fd %d', self.fd)
        with failing_as('flock'):
            fcntl.flock(self.fd, fcntl.LOCK_EX)
        logging.debug('lock acquired on fd %d', self.fd)
        return self

    def __exit__(self, _type, _value, _traceback):
        with failing_as('flock'):
            fcntl.flock(self.fd, fcntl.LOCK_UN)
        logging.debug('lock released on fd %d', self.fd)


def read_entries(fd):
    # type: (int) -> ParseResult
    """ Reads the whole database and decodes the entries.

    An empty file has no entries. Content which can not be decoded is not
    an error: the previous entries are dropped, and those will be generated
    again by the next build. Read failures raise DatabaseError.

    :param fd: the locked database file descriptor
    :return: the decoded entries and the decode error if any """

    chunks = []
    with failing_as('read'):
        while True:
            chunk = os.read(fd, BUFFER_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
    content = b''.join(chunks)
    # new database file
    if not content:
        return ParseResult([], None)
    try:
        return ParseResult(decode_entries(content), None)
    except ValueError as error:
        return ParseResult([], str(error))


def decode_entries(content):
    # type: (bytes) -> List[CommandEntry]
    """ Decodes the database content.

    Raises ValueError when the content is not a JSON array of entries. """

    try:
        entries = json.loads(content.decode('utf-8'))
    except RecursionError as error:
        # too deeply nested
        raise ValueError(str(error)) from error
    if not isinstance(entries, list):
        raise ValueError('compilation database is not a JSON array')
    return [CommandEntry.from_db_entry(entry) for entry in entries]


def rewrite_entries(fd, entries):
    # type: (int, List[CommandEntry]) -> None
    """ Replaces the database content with the given entries.

    :param fd:      the locked database file descriptor
    :param entries: the entries to write """

    content = json.dumps([entry.as_db_entry() for entry in entries],
                         sort_keys=True, indent=4) + '\n'
    data = content.encode('utf-8')
    with failing_as('ftruncate'):
        os.ftruncate(fd, 0)
    with failing_as('lseek'):
        os.lseek(fd, 0, os.SEEK_SET)
    with failing_as('write'):
        written = 0
        while written < len(data):
            written += os.write(fd, data[written:])
    logging.debug('compilation database written: %d entries, %d bytes',
                  len(entries), len(data))
