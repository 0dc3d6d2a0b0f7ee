# -*- coding: utf-8 -*-
#                     The LLVM Compiler Infrastructure
#
# This file is distributed under the University of Illinois Open Source
# License. See LICENSE.TXT for details.

from . import test_libcompdbhook
from . import test_config
from . import test_compilation
from . import test_database
from . import test_hook


def load_tests(loader, suite, pattern):
    suite.addTests(loader.loadTestsFromModule(test_libcompdbhook))
    suite.addTests(loader.loadTestsFromModule(test_config))
    suite.addTests(loader.loadTestsFromModule(test_compilation))
    suite.addTests(loader.loadTestsFromModule(test_database))
    suite.addTests(loader.loadTestsFromModule(test_hook))
    return suite
