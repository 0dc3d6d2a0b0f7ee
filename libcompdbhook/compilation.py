# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.
""" This module is responsible for parsing a compiler invocation and merging
it into the entries of a compilation database.

See https://clang.llvm.org/docs/JSONCompilationDatabase.html for the format
of the entries. """

import json
import logging
import os.path
from typing import Any, Dict, List, Optional, Tuple  # noqa: ignore=F401

__all__ = ['CommandEntry', 'SourceFile', 'make_arguments', 'current_files',
           'update_entries']

# Compiler flags which take the next token as their own argument. The token
# after these is never considered as a source file, even when it looks like
# one or starts with a dash.
FLAGS_WITH_ARGUMENT = frozenset({
    '-MF',
    '-include',
    '-iquote',
    '-isystem',
    '-o',
    '-target',
})

DIRECTORY_FIELD = 'directory'
ARGUMENTS_FIELD = 'arguments'
FILE_FIELD = 'file'
COMMAND_FIELD = 'command'


def absolute_path(directory, filename):
    # type: (str, str) -> str
    """ Joins the file name to the directory, unless the file name is an
    absolute path already, and normalize the result. """

    return os.path.normpath(os.path.join(directory, filename))


class CommandEntry:
    """ Represents a single entry of the compilation database.

    None of the fields are optional in a well formed database. But a
    damaged entry shall not fail the whole run, therefore each of them
    might be None. Keys other than these three are kept as they are. """

    def __init__(self,            # type: CommandEntry
                 directory=None,  # type: Optional[str]
                 arguments=None,  # type: Optional[List[str]]
                 file=None,       # type: Optional[str]
                 extra=None       # type: Optional[Dict[str, Any]]
                 ):
        # type: (...) -> None
        self.directory = directory
        self.arguments = arguments
        self.file = file
        self.extra = dict(extra) if extra else {}

    def __eq__(self, other):
        # type: (CommandEntry, object) -> bool
        return isinstance(other, CommandEntry) and vars(self) == vars(other)

    def __repr__(self):
        # type: (CommandEntry) -> str
        return 'CommandEntry({0!r})'.format(self.as_db_entry())

    def as_db_entry(self):
        # type: (CommandEntry) -> Dict[str, Any]
        """ This method creates a compilation database entry. """

        result = dict(self.extra)
        if self.directory is not None:
            result[DIRECTORY_FIELD] = self.directory
        if self.arguments is not None:
            result[ARGUMENTS_FIELD] = list(self.arguments)
        if self.file is not None:
            result[FILE_FIELD] = self.file
        return result

    def set_arguments(self, arguments):
        # type: (CommandEntry, List[str]) -> None
        """ Replace the recorded command. The 'arguments' field supersedes
        the 'command' field, so the latter is dropped. """

        self.arguments = list(arguments)
        self.extra.pop(COMMAND_FIELD, None)

    @classmethod
    def from_db_entry(cls, entry):
        # type: (Any) -> CommandEntry
        """ Parser method for compilation database entry.

        :param entry:   the decoded JSON object
        :return: a CommandEntry object

        Raises ValueError when the entry is not an object or a known field
        has an unexpected type. """

        if not isinstance(entry, dict):
            raise ValueError('entry is not an object: {0!r}'.format(entry))

        def string_field(key):
            # type: (str) -> Optional[str]
            value = entry.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError('{0} is not a string: {1!r}'.format(key, value))
            return value

        arguments = entry.get(ARGUMENTS_FIELD)
        if arguments is not None:
            if not isinstance(arguments, list) or \
                    not all(isinstance(arg, str) for arg in arguments):
                raise ValueError('{0} is not a list of strings: {1!r}'
                                 .format(ARGUMENTS_FIELD, arguments))

        known = {DIRECTORY_FIELD, ARGUMENTS_FIELD, FILE_FIELD}
        return cls(directory=string_field(DIRECTORY_FIELD),
                   arguments=arguments,
                   file=string_field(FILE_FIELD),
                   extra={k: v for k, v in entry.items() if k not in known})


class SourceFile:
    """ A source file referenced by the current compiler invocation.

    The identity of the object is the absolute path, the relative path is
    kept to write into new database entries. """

    def __init__(self, directory, relative_path):
        # type: (SourceFile, str, str) -> None
        self.relative_path = relative_path
        self.absolute_path = absolute_path(directory, relative_path)

    def __hash__(self):
        # type: (SourceFile) -> int
        return hash(self.absolute_path)

    def __eq__(self, other):
        # type: (SourceFile, object) -> bool
        return isinstance(other, SourceFile) and \
            self.absolute_path == other.absolute_path

    def __repr__(self):
        # type: (SourceFile) -> str
        return 'SourceFile({0!r}, {1!r})'.format(self.relative_path,
                                                 self.absolute_path)


def make_arguments(compiler, argv):
    # type: (str, List[str]) -> List[str]
    """ Creates the effective compiler command from the hook invocation.

    :param compiler:    the real compiler name
    :param argv:        the command line of the hook, argument zero ignored
    :return: the command with the compiler as argument zero """

    return [compiler] + list(argv[1:])


def current_files(directory, arguments):
    # type: (str, List[str]) -> Dict[str, SourceFile]
    """ Collects the source files referenced by the compiler command.

    Every token which is not a flag, and not the argument of a flag from
    FLAGS_WITH_ARGUMENT, is taken as a source file. This is an approximation:
    positional arguments which are not sources (like library names passed
    without a dash on a link command) are collected as well.

    :param directory:   base directory of relative file names
    :param arguments:   the effective compiler command
    :return: source files keyed by absolute path, in command line order """

    result = dict()  # type: Dict[str, SourceFile]
    args = iter(arguments[1:])
    for arg in args:
        # skip the argument of the flag
        if arg in FLAGS_WITH_ARGUMENT:
            next(args, None)
        # ignore other flags
        elif arg.startswith('-'):
            pass
        # and consider everything else as source file.
        else:
            source = SourceFile(directory, arg)
            result.setdefault(source.absolute_path, source)
    logging.debug('source files: %s', list(result))
    return result


def update_entries(directory, arguments, entries):
    # type: (str, List[str], List[CommandEntry]) -> Tuple[int, int]
    """ Merge the current compiler invocation into the database entries.

    Existing entries of the referenced source files get the new arguments,
    the rest of the referenced files are appended as new entries. Entries
    of other files are never touched or removed.

    :param directory:   the workspace directory
    :param arguments:   the effective compiler command
    :param entries:     the database entries, updated in place
    :return: the number of updated and appended entries """

    sources = current_files(directory, arguments)
    updated = 0
    for entry in entries:
        if entry.file is None:
            logging.error('compilation database contains an entry without '
                          'a `file` field:\n%s',
                          json.dumps(entry.as_db_entry(), sort_keys=True))
            continue
        base = directory if entry.directory is None else \
            os.path.join(directory, entry.directory)
        # one source file updates one entry at most
        if sources.pop(absolute_path(base, entry.file), None) is not None:
            entry.set_arguments(arguments)
            updated += 1
    for source in sources.values():
        entries.append(CommandEntry(directory=directory,
                                    arguments=list(arguments),
                                    file=source.relative_path))
    logging.debug('entries updated: %d, appended: %d', updated, len(sources))
    return updated, len(sources)
