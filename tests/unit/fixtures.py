# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.

import json
import os.path
import shutil
import tempfile


class TempDir:

    def __init__(self):
        self.name = tempfile.mkdtemp('.test', 'compdb', None)

    def __enter__(self):
        return self.name

    def __exit__(self, exc, value, tb):
        self.cleanup()

    def cleanup(self):
        if self.name is not None:
            shutil.rmtree(self.name)


def write_file(filename, content):
    with open(filename, 'w') as handle:
        handle.write(content)


def write_database(filename, entries):
    write_file(filename, json.dumps(entries))


def read_database(filename):
    with open(filename, 'r') as handle:
        return json.load(handle)


def database_in(directory):
    return os.path.join(directory, 'compile_commands.json')
