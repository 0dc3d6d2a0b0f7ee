# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.
""" This module collects the configuration of a single hook invocation.

The values are read from environment variables once, at startup, and the
resulting object is passed to every component explicitly. """

import logging
import os
import os.path
from dataclasses import dataclass
from typing import Mapping, Optional  # noqa: ignore=F401

__all__ = ['HookConfig', 'DEFAULT_COMPILER', 'DATABASE_FILE_NAME']

COMPILER_ENV = 'COMP_DB_HOOK_COMPILER'
WORKSPACE_DIR_ENV = 'COMP_DB_HOOK_WORKSPACE_DIR'
DATABASE_ENV = 'COMP_DB_HOOK_DATABASE'
VERBOSE_ENV = 'COMP_DB_HOOK_VERBOSE'

DEFAULT_COMPILER = 'clang++'
DATABASE_FILE_NAME = 'compile_commands.json'


@dataclass(frozen=True)
class HookConfig:
    """ Configuration of one hook invocation.

    compiler:   the real compiler executable name, used as argument zero of
                the recorded commands and as the program to exec.
    directory:  the workspace directory; relative source files are resolved
                against it and new entries record it as their directory.
    database:   path of the compilation database file.
    verbose:    logging verbosity, 0 means warnings and errors only. """

    compiler: str
    directory: str
    database: str
    verbose: int = 0

    @classmethod
    def from_environment(cls, environ):
        # type: (Mapping[str, str]) -> HookConfig
        """ Creates the configuration from environment variables.

        Unset and empty variables fall back to the defaults. Might raise
        OSError when the current working directory is not accessible.

        :param environ: the environment to read, usually `os.environ`
        :return: the configuration object """

        compiler = environ.get(COMPILER_ENV) or DEFAULT_COMPILER
        directory = environ.get(WORKSPACE_DIR_ENV) or os.getcwd()
        database = os.path.join(
            directory, environ.get(DATABASE_ENV) or DATABASE_FILE_NAME)
        return cls(compiler=compiler,
                   directory=directory,
                   database=database,
                   verbose=_verbose_level(environ.get(VERBOSE_ENV)))


def _verbose_level(value):
    # type: (Optional[str]) -> int
    if not value:
        return 0
    try:
        return max(0, int(value))
    except ValueError:
        logging.warning('%s is not a number: %r, ignored', VERBOSE_ENV, value)
        return 0
