"""Test execution."""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape

from threadedtest.core.result import RunSummary, TestResult
from threadedtest.core.testcase import BuiltinTestCase, TestCase


class TestRunner:
    """Runs test cases and collects their outcomes."""

    def __init__(
        self,
        threads: Optional[int] = None,
        single_threaded: bool = False,
        verbose: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the test runner.

        Args:
            threads: Worker threads for the pool (default: executor's choice)
            single_threaded: Run every test case in the calling thread
            verbose: Print each test as it finishes
            console: Console for verbose output
        """
        self.threads = threads
        self.single_threaded = single_threaded
        self.verbose = verbose
        self.console = console or Console()

    def run(self, tests: Sequence[TestCase]) -> RunSummary:
        """Run test cases, returning results in the order the cases were given.

        Composite test cases always run their children one after another,
        even when distinct cases run on the thread pool. Doctest cases run
        alone in the calling thread once the pool has drained.
        """
        start_time = time.time()
        results: list[Optional[TestResult]] = [None] * len(tests)

        # doctest redirects sys.stdout for the whole process while it runs
        serial = [i for i, test in enumerate(tests) if isinstance(test, BuiltinTestCase)]
        concurrent = [i for i, test in enumerate(tests) if not isinstance(test, BuiltinTestCase)]

        if self.single_threaded or len(concurrent) <= 1:
            for i in concurrent:
                results[i] = self._run_one(tests[i])
        else:
            with ThreadPoolExecutor(max_workers=self.threads) as pool:
                pooled = pool.map(self._run_one, [tests[i] for i in concurrent])
                for i, result in zip(concurrent, pooled):
                    results[i] = result

        for i in serial:
            results[i] = self._run_one(tests[i])

        return RunSummary(
            results=results,
            duration_ms=int((time.time() - start_time) * 1000),
        )

    def _run_one(self, test: TestCase) -> TestResult:
        result = test.run()
        if self.verbose:
            mark = "[green]ok[/green]" if result.passed else "[red]FAILED[/red]"
            self.console.print(f"[dim]{escape(result.path)}[/dim] {mark} ({result.duration_ms}ms)")
        return result
