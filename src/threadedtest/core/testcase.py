"""Test case hierarchy.

Every runnable unit, whatever its origin, is a ``TestCase``: class-based
tests subclass it directly, free functions are wrapped in a
``FunctionTestCase``, doctests in a ``BuiltinTestCase`` and single-threaded
tests of one module are grouped in a ``CompositeTestCase``.
"""

import doctest
import inspect
import threading
import time
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from threadedtest.core.failures import (
    CompositeFailure,
    UnitTestFailure,
    describe_exception,
    exception_location,
    failures_from_exception,
)
from threadedtest.core.result import TestResult, TestStatus
from threadedtest.core.testdata import TestData


_test_classes: dict[str, type] = {}
_test_classes_lock = threading.Lock()


def qualified_name(cls: type) -> str:
    """Get the dotted name a test class is registered and reported under."""
    return f"{cls.__module__}.{cls.__qualname__}"


def create_registered(name: str) -> Optional["TestCase"]:
    """Instantiate the test class registered under ``name``.

    Returns None when no class is registered under that name or it cannot
    be constructed without arguments (e.g. an abstract base class). Errors
    raised by the constructor itself propagate.
    """
    with _test_classes_lock:
        cls = _test_classes.get(name)

    if cls is None or inspect.isabstract(cls):
        return None

    try:
        inspect.signature(cls).bind()
    except TypeError:
        return None
    except ValueError:
        # No introspectable signature
        pass

    return cls()


class TestCase(ABC):
    """A runnable unit with a reporting path.

    Subclasses are registered by qualified name when they are defined, so
    discovery can construct them from a name alone. Pass ``register=False``
    in the class statement to opt out.
    """

    # Keep pytest from collecting this hierarchy
    __test__ = False

    def __init_subclass__(cls, register: bool = True, **kwargs):
        super().__init_subclass__(**kwargs)
        if register:
            with _test_classes_lock:
                _test_classes[qualified_name(cls)] = cls

    @abstractmethod
    def test(self) -> None:
        """Run the test body, raising on failure."""
        pass

    def setup(self) -> None:
        pass

    def teardown(self) -> None:
        pass

    def get_path(self) -> str:
        return qualified_name(type(self))

    def run(self) -> TestResult:
        """Run the test and capture its outcome instead of raising.

        Anything the test raises, ``SystemExit`` included, is recorded as a
        failure. Only ``KeyboardInterrupt`` propagates.
        """
        path = self.get_path()
        failures = []
        start_time = time.time()

        try:
            self.setup()
            try:
                self.test()
            finally:
                self.teardown()
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            failures = failures_from_exception(path, e)

        return TestResult(
            path=path,
            status=TestStatus.FAILED if failures else TestStatus.PASSED,
            duration_ms=int((time.time() - start_time) * 1000),
            failures=failures,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_path()}>"


class FunctionTestCase(TestCase, register=False):
    """Wraps a free test function."""

    def __init__(self, data: TestData):
        self._name = data.name
        self._func = data.test

    def test(self) -> None:
        result = self._func()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            code = getattr(self._func, "__code__", None)
            raise UnitTestFailure(
                f"{self._name} returned an awaitable; async test functions are not supported",
                code.co_filename if code else None,
                code.co_firstlineno if code else None,
            )

    def get_path(self) -> str:
        return self._name


class BuiltinTestCase(FunctionTestCase, register=False):
    """Wraps a module's doctests, translating doctest failures into
    ``UnitTestFailure`` so they report like every other test."""

    def test(self) -> None:
        try:
            super().test()
        except UnitTestFailure:
            raise
        except Exception as e:
            message, file, line = _describe_builtin_failure(e)
            raise UnitTestFailure(message, file, line) from e


class CompositeTestCase(TestCase, register=False):
    """Runs a group of test cases one after another as a single unit.

    Every child runs even when an earlier one fails; the composite fails if
    any child did.
    """

    def __init__(self, path: str):
        self._path = path
        self._children: list[TestCase] = []
        self._lock = threading.Lock()

    def append(self, child: TestCase) -> None:
        self._children.append(child)

    def __iadd__(self, child: TestCase) -> "CompositeTestCase":
        self.append(child)
        return self

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[TestCase]:
        return iter(list(self._children))

    @property
    def children(self) -> list[TestCase]:
        return list(self._children)

    def test(self) -> None:
        with self._lock:
            results = [child.run() for child in self._children]

        failed = [r for r in results if not r.passed]
        if failed:
            raise CompositeFailure(failed)

    def get_path(self) -> str:
        return self._path


def _describe_builtin_failure(exc: Exception) -> tuple[str, Optional[str], Optional[int]]:
    """Get message, file and line for an exception raised by a doctest run."""
    if isinstance(exc, (doctest.DocTestFailure, doctest.UnexpectedException)):
        test = exc.test
        example = exc.example
        line = None
        if test.lineno is not None:
            line = test.lineno + example.lineno + 1

        if isinstance(exc, doctest.DocTestFailure):
            message = (
                f"{test.name}: {example.source.strip()!r} "
                f"expected {example.want.strip()!r}, got {exc.got.strip()!r}"
            )
        else:
            message = f"{test.name}: {describe_exception(exc.exc_info[1])}"
        return message, test.filename, line

    file, line = exception_location(exc)
    return describe_exception(exc), file, line
