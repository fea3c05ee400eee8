"""Core test discovery, selection and execution functionality."""

from threadedtest.core.builtin import BuiltinTestRegistry, builtin_tests, install_builtin_tests
from threadedtest.core.discovery import TestDiscovery
from threadedtest.core.factory import TestFactory, create_tests
from threadedtest.core.runner import TestRunner
from threadedtest.core.selection import get_module_name, is_wanted_test
from threadedtest.core.testcase import (
    BuiltinTestCase,
    CompositeTestCase,
    FunctionTestCase,
    TestCase,
)
from threadedtest.core.testdata import TestData

__all__ = [
    "BuiltinTestCase",
    "BuiltinTestRegistry",
    "CompositeTestCase",
    "FunctionTestCase",
    "TestCase",
    "TestData",
    "TestDiscovery",
    "TestFactory",
    "TestRunner",
    "builtin_tests",
    "create_tests",
    "get_module_name",
    "install_builtin_tests",
    "is_wanted_test",
]
