# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.
""" This module implements the compiler hook.

The hook is installed in place of the compiler. It records the current
compiler invocation into the compilation database, then it replaces itself
with the real compiler, passing the arguments unchanged.

Build systems which run the compilations in parallel and in isolation (and
do not write a compilation database themselves) can produce one this way:
every compiler call updates the database, and the updates are serialized by
a lock on the database file. """

import logging
import os
import sys
from typing import List  # noqa: ignore=F401

from libcompdbhook import command_entry_point, reconfigure_logging
from libcompdbhook.compilation import make_arguments, update_entries
from libcompdbhook.config import HookConfig
from libcompdbhook.database import ExclusiveFileLock, open_database, \
    read_entries, rewrite_entries

__all__ = ['comp_db_hook', 'update_command_file', 'run_compiler']


@command_entry_point
def comp_db_hook():
    # type: () -> int
    """ Entry point for the `comp-db-hook` command.

    When the database update fails, the compiler is not executed. """

    config = HookConfig.from_environment(os.environ)
    reconfigure_logging(config.verbose)
    logging.debug('configuration: %s', config)

    arguments = make_arguments(config.compiler, sys.argv)
    update_command_file(config, arguments)
    return run_compiler(config.compiler, arguments)


def update_command_file(config, arguments):
    # type: (HookConfig, List[str]) -> None
    """ Records the compiler invocation into the compilation database.

    :param config:      the hook configuration
    :param arguments:   the effective compiler command """

    fd = open_database(config.database)
    try:
        with ExclusiveFileLock(fd):
            entries, error = read_entries(fd)
            if error is not None:
                logging.warning('compilation database %s is not readable, '
                                'starting with an empty one: %s',
                                config.database, error)
            update_entries(config.directory, arguments, entries)
            rewrite_entries(fd, entries)
    finally:
        os.close(fd)


def run_compiler(compiler, arguments):
    # type: (str, List[str]) -> int
    """ Replace the current process with the compiler.

    :param compiler:    the compiler executable, looked up on the PATH
    :param arguments:   the command, argument zero included
    :return: only returns when the compiler can not be executed """

    logging.debug('exec compiler: %s', arguments)
    try:
        os.execvp(compiler, arguments)
    except OSError as error:
        logging.error('failed to execute %s: %s', compiler, error)
    return 1
