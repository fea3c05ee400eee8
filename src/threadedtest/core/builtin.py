"""Interception of inline doctest blocks.

Doctests are the inline test blocks of a Python module. The host program
calls ``install_builtin_tests()`` once before asking for tests: doctests of
this package run immediately, while those of every other module are wrapped
in a ``BuiltinTestCase`` named ``<module>.unittest`` and kept for the
factory to merge into its result.
"""

import doctest
import site
import sys
import sysconfig
import threading
from pathlib import Path
from types import ModuleType
from typing import Callable, Iterable, Optional

from threadedtest.core.testcase import BuiltinTestCase, TestCase
from threadedtest.core.testdata import TestData


INTERNAL_NAMESPACE = __name__.split(".")[0]

# doctest swaps sys.stdout while it runs, so only one module runs at a time
_doctest_lock = threading.Lock()


def _is_internal(module: ModuleType, namespace: str) -> bool:
    name = module.__name__
    return name == namespace or name.startswith(namespace + ".")


def _library_dirs() -> list[Path]:
    paths = sysconfig.get_paths()
    dirs = {paths[key] for key in ("stdlib", "platstdlib", "purelib", "platlib") if key in paths}
    dirs.update(site.getsitepackages())
    dirs.add(site.getusersitepackages())
    return [Path(d).resolve() for d in dirs]


def _is_project_module(module: ModuleType, library_dirs: list[Path]) -> bool:
    """Check whether a module is a source module outside the stdlib and site-packages."""
    file = getattr(module, "__file__", None)
    if not isinstance(file, str) or not file.endswith(".py"):
        return False

    path = Path(file).resolve()
    return not any(path.is_relative_to(d) for d in library_dirs)


def has_doctests(module: ModuleType) -> bool:
    """Check whether a module contains at least one doctest example."""
    finder = doctest.DocTestFinder(exclude_empty=True)
    return any(test.examples for test in finder.find(module))


def doctest_block(module: ModuleType) -> Callable[[], None]:
    """Get a callable that runs a module's doctests.

    The callable raises ``doctest.DocTestFailure`` or
    ``doctest.UnexpectedException`` on the first failing example.
    """

    def run_doctests() -> None:
        finder = doctest.DocTestFinder(exclude_empty=True)
        runner = doctest.DebugRunner(verbose=False)
        with _doctest_lock:
            for test in finder.find(module):
                runner.run(test)

    return run_doctests


class BuiltinTestRegistry:
    """Holds the test cases built from intercepted doctest blocks.

    Written once by ``collect()``, read any number of times afterwards.
    """

    def __init__(self):
        self._tests: list[TestCase] = []
        self._installed = False
        self._lock = threading.Lock()

    @property
    def installed(self) -> bool:
        return self._installed

    def collect(
        self,
        modules: Optional[Iterable[ModuleType]] = None,
        internal_namespace: str = INTERNAL_NAMESPACE,
    ) -> bool:
        """Intercept the doctest blocks of the given modules.

        Only the first call does anything; later calls return straight
        away. Doctests in ``internal_namespace`` run immediately and their
        failures propagate.

        Args:
            modules: Modules to scan (default: every loaded module that is
                neither in the standard library nor in site-packages)
            internal_namespace: Top-level package whose doctests run now

        Returns:
            True, whatever the outcome of the deferred tests
        """
        with self._lock:
            if self._installed:
                return True
            self._installed = True

            if modules is None:
                library_dirs = _library_dirs()
                modules = [
                    m
                    for m in list(sys.modules.values())
                    if isinstance(m, ModuleType)
                    and (_is_internal(m, internal_namespace) or _is_project_module(m, library_dirs))
                ]

            for module in modules:
                if not has_doctests(module):
                    continue

                block = doctest_block(module)
                if _is_internal(module, internal_namespace):
                    block()
                else:
                    data = TestData(f"{module.__name__}.unittest", hidden=False, test=block)
                    self._tests.append(BuiltinTestCase(data))

        return True

    def tests(self) -> list[TestCase]:
        with self._lock:
            return list(self._tests)


_default_registry = BuiltinTestRegistry()


def get_default_registry() -> BuiltinTestRegistry:
    return _default_registry


def install_builtin_tests(
    modules: Optional[Iterable[ModuleType]] = None,
    internal_namespace: str = INTERNAL_NAMESPACE,
) -> bool:
    """Collect doctest blocks into the process-wide registry.

    Call once at startup, before creating tests.
    """
    return _default_registry.collect(modules, internal_namespace)


def builtin_tests() -> list[TestCase]:
    """Get the test cases collected by ``install_builtin_tests()``."""
    return _default_registry.tests()
