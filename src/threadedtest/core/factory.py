"""Builds the set of test cases to run from a list of modules."""

import threading
from typing import Iterable, Optional, Sequence

from threadedtest.core.builtin import BuiltinTestRegistry, get_default_registry
from threadedtest.core.discovery import ModuleRef, TestDiscovery
from threadedtest.core.failures import FactoryError
from threadedtest.core.selection import get_module_name, is_wanted_test
from threadedtest.core.testcase import (
    CompositeTestCase,
    FunctionTestCase,
    TestCase,
    create_registered,
)
from threadedtest.core.testdata import TestData


class TestFactory:
    """Turns discovered tests into runnable test cases.

    Single-threaded tests are grouped into one ``CompositeTestCase`` per
    module. The composite map lives as long as the factory, so repeated
    calls on one factory keep adding to the same composites.
    """

    def __init__(
        self,
        discovery: Optional[TestDiscovery] = None,
        registry: Optional[BuiltinTestRegistry] = None,
    ):
        """Initialize the factory.

        Args:
            discovery: Discovery to use (default: ``TestDiscovery()``)
            registry: Source of intercepted doctest cases (default: the
                process-wide registry)
        """
        self.discovery = discovery or TestDiscovery()
        self.registry = registry if registry is not None else get_default_registry()

        self._composites: dict[str, CompositeTestCase] = {}
        self._composites_lock = threading.Lock()

    def create_tests(
        self,
        modules: Iterable[ModuleRef],
        patterns: Sequence[str] = (),
    ) -> list[TestCase]:
        """Create the test cases to run.

        Args:
            modules: Modules or dotted module names to discover tests in
            patterns: Selection patterns; empty means every non-hidden test

        Returns:
            Test cases without duplicates, in the order they were first added
        """
        # dict as an insertion-ordered identity set
        tests: dict[TestCase, None] = {}

        for data in self.discovery.discover(modules):
            if not is_wanted_test(data, patterns):
                continue

            test = self.create_test_case(data)
            # None for abstract base classes
            if test is not None:
                tests[test] = None

        for test in self.registry.tests():
            if is_wanted_test(TestData(test.get_path(), hidden=False), patterns):
                tests[test] = None

        return list(tests)

    def create_test_case(self, data: TestData) -> Optional[TestCase]:
        """Create the test case for one discovered test.

        Single-threaded tests return their module's composite. Returns None
        when a class-based test cannot be constructed.
        """
        if data.single_threaded:
            module_name = get_module_name(data.name)
            with self._composites_lock:
                composite = self._composites.get(module_name)
                if composite is None:
                    composite = CompositeTestCase(module_name)
                    self._composites[module_name] = composite

                test = self._create_impl(data)
                if test is not None:
                    composite.append(test)
            # An abstract single-threaded class alone leaves nothing to run
            return composite if len(composite) else None

        test = self._create_impl(data)
        if data.test is not None and test is None:
            raise FactoryError(f"Could not create FunctionTestCase object for function {data.name}")
        return test

    def _create_impl(self, data: TestData) -> Optional[TestCase]:
        if data.test is None:
            return create_registered(data.name)
        return FunctionTestCase(data)


def create_tests(modules: Iterable[ModuleRef], patterns: Sequence[str] = ()) -> list[TestCase]:
    """Create test cases from modules with a fresh factory.

    An empty ``patterns`` list selects every test that is not hidden.
    """
    return TestFactory().create_tests(modules, patterns)
