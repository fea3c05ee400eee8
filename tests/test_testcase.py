"""Tests for the test case hierarchy."""

import sys
import threading
import time

import pytest

from threadedtest.core.failures import CompositeFailure, UnitTestFailure, fail
from threadedtest.core.result import TestStatus
from threadedtest.core.testcase import (
    BuiltinTestCase,
    CompositeTestCase,
    FunctionTestCase,
    TestCase,
    create_registered,
    qualified_name,
)
from threadedtest.core.testdata import TestData


class PassingCase(TestCase):
    def test(self):
        pass


class FailingCase(TestCase):
    def test(self):
        fail("always fails")


class AbstractCase(TestCase):
    """Has no test() and cannot be instantiated."""

    def helper(self):
        return 1


class NeedsArgumentCase(TestCase):
    def __init__(self, value):
        self.value = value

    def test(self):
        pass


class BrokenConstructorCase(TestCase):
    def __init__(self):
        self.limit = int(None)

    def test(self):
        pass


class SetupTeardownCase(TestCase):
    calls: list = []

    def setup(self):
        self.calls.append("setup")

    def test(self):
        self.calls.append("test")
        raise ValueError("boom")

    def teardown(self):
        self.calls.append("teardown")


class UnregisteredCase(TestCase, register=False):
    def test(self):
        pass


class RecordingCase(TestCase, register=False):
    def __init__(self, path, log, error=None):
        self.path = path
        self.log = log
        self.error = error

    def test(self):
        self.log.append(self.path)
        if self.error is not None:
            raise self.error

    def get_path(self):
        return self.path


class TestRegistry:
    """Tests for construction of class-based tests by name."""

    def test_create_registered(self):
        """Test that a registered class is instantiated by name."""
        test = create_registered(qualified_name(PassingCase))
        assert isinstance(test, PassingCase)
        assert test.get_path() == qualified_name(PassingCase)

    def test_unknown_name(self):
        assert create_registered("no.such.TestClass") is None

    def test_abstract_class(self):
        """Test that an abstract base yields no test case instead of an error."""
        assert create_registered(qualified_name(AbstractCase)) is None

    def test_class_needing_arguments(self):
        assert create_registered(qualified_name(NeedsArgumentCase)) is None

    def test_constructor_errors_propagate(self):
        """Test that a TypeError raised inside __init__ is not mistaken for missing arguments."""
        with pytest.raises(TypeError):
            create_registered(qualified_name(BrokenConstructorCase))

    def test_opt_out_of_registration(self):
        assert create_registered(qualified_name(UnregisteredCase)) is None

    def test_framework_classes_not_registered(self):
        assert create_registered(qualified_name(FunctionTestCase)) is None
        assert create_registered(qualified_name(CompositeTestCase)) is None


class TestTestCaseRun:
    """Tests for TestCase.run."""

    def test_passing(self):
        result = PassingCase().run()
        assert result.passed
        assert result.status == TestStatus.PASSED
        assert result.failures == []
        assert result.path == qualified_name(PassingCase)

    def test_failure_records_location(self):
        """Test that fail() reports the file and line of the caller."""
        result = FailingCase().run()

        assert result.status == TestStatus.FAILED
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.message == "always fails"
        assert failure.file.endswith("test_testcase.py")
        assert failure.line is not None
        assert failure.path == qualified_name(FailingCase)

    def test_setup_and_teardown(self):
        """Test that teardown runs after a failing test body."""
        SetupTeardownCase.calls.clear()
        result = SetupTeardownCase().run()

        assert SetupTeardownCase.calls == ["setup", "test", "teardown"]
        assert not result.passed
        assert result.failures[0].message == "ValueError: boom"
        assert result.failures[0].file.endswith("test_testcase.py")

    def test_system_exit_recorded(self):
        """Test that sys.exit() in a test body is a failure, not a process exit."""

        def exits():
            sys.exit(0)

        result = FunctionTestCase(TestData("m.exits", test=exits)).run()

        assert not result.passed
        assert result.failures[0].message == "SystemExit: 0"
        assert result.failures[0].file.endswith("test_testcase.py")

    def test_keyboard_interrupt_propagates(self):
        def interrupted():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            FunctionTestCase(TestData("m.interrupted", test=interrupted)).run()

    def test_plain_assert(self):
        def check():
            assert 1 == 2, "numbers differ"

        result = FunctionTestCase(TestData("m.check", test=check)).run()

        assert not result.passed
        assert "numbers differ" in result.failures[0].message


class TestFunctionTestCase:
    """Tests for FunctionTestCase."""

    def test_calls_function(self):
        calls = []
        test = FunctionTestCase(TestData("pkg.mod.test_it", test=lambda: calls.append(1)))

        test.test()

        assert calls == [1]
        assert test.get_path() == "pkg.mod.test_it"

    def test_failure_propagates(self):
        """Test that test() does not catch failures."""

        def broken():
            raise KeyError("missing")

        test = FunctionTestCase(TestData("pkg.mod.test_broken", test=broken))

        with pytest.raises(KeyError):
            test.test()

    def test_async_function_fails(self):
        """Test that an async test function fails instead of passing unrun."""

        async def never_awaited():
            raise AssertionError("body ran")

        result = FunctionTestCase(TestData("pkg.mod.test_async", test=never_awaited)).run()

        assert not result.passed
        failure = result.failures[0]
        assert "async test functions are not supported" in failure.message
        assert failure.file.endswith("test_testcase.py")
        assert failure.line == never_awaited.__code__.co_firstlineno

    def test_identity_hashing(self):
        """Test that equal-looking test cases are distinct set members."""
        data = TestData("pkg.mod.test_it", test=lambda: None)
        assert len({FunctionTestCase(data), FunctionTestCase(data)}) == 2


class TestCompositeTestCase:
    """Tests for CompositeTestCase."""

    def test_runs_children_in_order(self):
        log = []
        composite = CompositeTestCase("pkg.mod")
        composite.append(RecordingCase("pkg.mod.a", log))
        composite += RecordingCase("pkg.mod.b", log)
        composite.append(RecordingCase("pkg.mod.c", log))

        composite.test()

        assert log == ["pkg.mod.a", "pkg.mod.b", "pkg.mod.c"]
        assert len(composite) == 3
        assert [c.get_path() for c in composite] == log
        assert composite.get_path() == "pkg.mod"

    def test_runs_all_children_after_failure(self):
        """Test that one failing child does not stop its siblings."""
        log = []
        composite = CompositeTestCase("pkg.mod")
        composite.append(RecordingCase("pkg.mod.a", log, ValueError("first")))
        composite.append(RecordingCase("pkg.mod.b", log))
        composite.append(RecordingCase("pkg.mod.c", log, UnitTestFailure("third", "f.py", 7)))

        with pytest.raises(CompositeFailure) as exc_info:
            composite.test()

        assert log == ["pkg.mod.a", "pkg.mod.b", "pkg.mod.c"]
        assert [r.path for r in exc_info.value.results] == ["pkg.mod.a", "pkg.mod.c"]

    def test_system_exit_does_not_stop_siblings(self):
        log = []
        composite = CompositeTestCase("pkg.mod")
        composite.append(RecordingCase("pkg.mod.a", log, SystemExit(0)))
        composite.append(RecordingCase("pkg.mod.b", log))

        result = composite.run()

        assert log == ["pkg.mod.a", "pkg.mod.b"]
        assert not result.passed
        assert [f.path for f in result.failures] == ["pkg.mod.a"]
        assert result.failures[0].message == "SystemExit: 0"

    def test_run_aggregates_failures(self):
        """Test that run() reports every failing child under its own path."""
        log = []
        composite = CompositeTestCase("pkg.mod")
        composite.append(RecordingCase("pkg.mod.a", log, ValueError("first")))
        composite.append(RecordingCase("pkg.mod.b", log))
        composite.append(RecordingCase("pkg.mod.c", log, UnitTestFailure("third", "f.py", 7)))

        result = composite.run()

        assert result.path == "pkg.mod"
        assert result.status == TestStatus.FAILED
        assert [f.path for f in result.failures] == ["pkg.mod.a", "pkg.mod.c"]
        assert result.failures[0].message == "ValueError: first"
        assert result.failures[1].location == "f.py:7"

    def test_all_children_pass(self):
        log = []
        composite = CompositeTestCase("pkg.mod")
        composite.append(RecordingCase("pkg.mod.a", log))

        assert composite.run().passed

    def test_children_never_overlap(self):
        """Test that concurrent runs of one composite do not interleave children."""
        active = []
        overlaps = []
        lock = threading.Lock()

        def make(name):
            def body():
                with lock:
                    active.append(name)
                    if len(active) > 1:
                        overlaps.append(list(active))
                time.sleep(0.01)
                with lock:
                    active.remove(name)

            return FunctionTestCase(TestData(f"pkg.mod.{name}", test=body))

        composite = CompositeTestCase("pkg.mod")
        for name in ["a", "b", "c"]:
            composite.append(make(name))

        threads = [threading.Thread(target=composite.run) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlaps == []


class TestBuiltinTestCase:
    """Tests for BuiltinTestCase."""

    def test_passing_block(self):
        calls = []
        test = BuiltinTestCase(TestData("pkg.mod.unittest", test=lambda: calls.append(1)))

        assert test.run().passed
        assert calls == [1]
        assert test.get_path() == "pkg.mod.unittest"

    def test_translates_any_exception(self):
        """Test that foreign exceptions become UnitTestFailure with location."""

        def block():
            raise RuntimeError("native failure")

        test = BuiltinTestCase(TestData("pkg.mod.unittest", test=block))

        with pytest.raises(UnitTestFailure) as exc_info:
            test.test()

        assert exc_info.value.message == "RuntimeError: native failure"
        assert exc_info.value.file.endswith("test_testcase.py")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_keeps_unit_test_failure(self):
        def block():
            raise UnitTestFailure("already translated", "x.py", 3)

        test = BuiltinTestCase(TestData("pkg.mod.unittest", test=block))

        with pytest.raises(UnitTestFailure) as exc_info:
            test.test()

        assert exc_info.value.message == "already translated"
        assert exc_info.value.line == 3
