"""Name-based test selection."""

from typing import Sequence

from threadedtest.core.testdata import TestData


def is_wanted_test(data: TestData, patterns: Sequence[str]) -> bool:
    """Check whether a test should run for the given selection patterns.

    With no patterns every test runs except hidden ones. Otherwise a test
    runs if a pattern names it exactly, or if the pattern is a package
    prefix of its name and the test is not hidden.

    >>> is_wanted_test(TestData("tests.server.testSubscribe"), ["tests.server"])
    True
    >>> is_wanted_test(TestData("tests.serverFoo"), ["tests.server"])
    False
    >>> is_wanted_test(TestData("tests.pass.testHidden", hidden=True), ["tests.pass"])
    False
    >>> is_wanted_test(TestData("tests.pass.testHidden", hidden=True), ["tests.pass.testHidden"])
    True
    """
    if not patterns:
        return not data.hidden

    def matches_exactly(pattern: str) -> bool:
        return pattern == data.name

    def matches_package(pattern: str) -> bool:
        name = data.name
        return (
            not data.hidden
            and len(name) > len(pattern)
            and name.startswith(pattern)
            and "." in name[len(pattern):]
        )

    return any(matches_exactly(p) or matches_package(p) for p in patterns)


def get_module_name(name: str) -> str:
    """Get the module part of a qualified test name.

    >>> get_module_name("tests.fail.composite.Test1")
    'tests.fail.composite'
    >>> get_module_name("standalone")
    ''
    """
    return ".".join(name.split(".")[:-1])
