"""
threadedtest - discover, select and run tests across Python modules.

This package provides tools to:
- Discover test classes, test functions and doctests in modules
- Select tests by exact name or by package prefix
- Serialize tests marked single-threaded within their module
- Run the rest on a thread pool and collect the outcomes
"""

__version__ = "0.1.0"
__author__ = "threadedtest Team"

from threadedtest.core.attributes import dont_test, hidden_test, single_threaded
from threadedtest.core.failures import UnitTestFailure, fail
from threadedtest.core.testcase import TestCase

__all__ = [
    "TestCase",
    "UnitTestFailure",
    "dont_test",
    "fail",
    "hidden_test",
    "single_threaded",
]
