# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.

import os
import os.path
import subprocess
import sys

PROJECT_DIR = os.path.normpath(
    os.path.join(os.path.dirname(__file__), '..', '..', '..'))

HOOK = [sys.executable, '-c',
        'import sys; '
        'from libcompdbhook.hook import comp_db_hook; '
        'sys.exit(comp_db_hook())']


def load_tests(loader, suite, pattern):
    from . import test_exec_anatomy
    suite.addTests(loader.loadTestsFromModule(test_exec_anatomy))
    from . import test_concurrency
    suite.addTests(loader.loadTestsFromModule(test_concurrency))
    return suite


def hook_environment(directory, compiler, **kwargs):
    environment = dict(os.environ)
    environment.pop('COMP_DB_HOOK_DATABASE', None)
    environment.pop('COMP_DB_HOOK_VERBOSE', None)
    environment.update({
        'COMP_DB_HOOK_COMPILER': compiler,
        'COMP_DB_HOOK_WORKSPACE_DIR': directory,
        'PYTHONPATH': os.pathsep.join(
            [PROJECT_DIR] + [environment[key] for key in ['PYTHONPATH']
                             if key in environment])})
    environment.update(kwargs)
    return environment


def start_hook(directory, compiler, args, **kwargs):
    return subprocess.Popen(HOOK + args,
                            cwd=directory,
                            env=hook_environment(directory, compiler,
                                                 **kwargs),
                            stdout=subprocess.PIPE,
                            stderr=subprocess.PIPE,
                            universal_newlines=True)


def run_hook(directory, compiler, args, **kwargs):
    process = start_hook(directory, compiler, args, **kwargs)
    stdout, stderr = process.communicate()
    return process.returncode, stdout, stderr
