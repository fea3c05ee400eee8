"""Test discovery functionality."""

import importlib
import inspect
from types import ModuleType
from typing import Iterable, Union

from threadedtest.core.attributes import is_dont_test, is_hidden, is_single_threaded
from threadedtest.core.failures import DiscoveryError
from threadedtest.core.testcase import TestCase, qualified_name
from threadedtest.core.testdata import TestData


ModuleRef = Union[ModuleType, str]


class TestDiscovery:
    """Discovers test classes and test functions in modules."""

    def __init__(self, test_prefix: str = "test"):
        """Initialize test discovery.

        Args:
            test_prefix: Name prefix that marks a module-level function as a test
        """
        self.test_prefix = test_prefix

    def resolve(self, module: ModuleRef) -> ModuleType:
        """Get the module object for a module or dotted module name."""
        if isinstance(module, ModuleType):
            return module

        try:
            return importlib.import_module(module)
        except ImportError as e:
            raise DiscoveryError(f"Could not import test module {module!r}: {e}") from e

    def discover(self, modules: Iterable[ModuleRef]) -> list[TestData]:
        """Discover all tests in the given modules.

        Class-based tests of every module come first, then function tests,
        with modules visited in the order given.
        """
        resolved = [self.resolve(m) for m in modules]

        tests = []
        for module in resolved:
            tests.extend(self.get_test_classes(module))
        for module in resolved:
            tests.extend(self.get_test_functions(module))
        return tests

    def get_test_classes(self, module: ModuleType) -> list[TestData]:
        """Get the test classes defined in a module, in definition order."""
        tests = []
        for obj in list(vars(module).values()):
            if not inspect.isclass(obj) or not issubclass(obj, TestCase):
                continue
            if obj.__module__ != module.__name__ or is_dont_test(obj):
                continue

            tests.append(
                TestData(
                    name=qualified_name(obj),
                    hidden=is_hidden(obj),
                    single_threaded=is_single_threaded(obj),
                )
            )
        return tests

    def get_test_functions(self, module: ModuleType) -> list[TestData]:
        """Get the test functions defined in a module, in definition order."""
        tests = []
        for attr_name, obj in list(vars(module).items()):
            if not attr_name.startswith(self.test_prefix) or not inspect.isfunction(obj):
                continue
            # Skip functions imported from elsewhere
            if obj.__module__ != module.__name__ or is_dont_test(obj):
                continue

            tests.append(
                TestData(
                    name=f"{module.__name__}.{attr_name}",
                    hidden=is_hidden(obj),
                    test=obj,
                    single_threaded=is_single_threaded(obj),
                )
            )
        return tests
