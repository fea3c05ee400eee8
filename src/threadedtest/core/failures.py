"""Failure channel and framework exceptions."""

import inspect
import traceback
from dataclasses import dataclass
from typing import Optional


@dataclass
class Failure:
    """A single failure recorded against a test path."""

    path: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    @property
    def location(self) -> str:
        """Get ``file:line`` or an empty string when unknown."""
        if not self.file:
            return ""
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"

    def to_dict(self) -> dict:
        """Convert to dictionary format."""
        return {
            "path": self.path,
            "message": self.message,
            "file": self.file,
            "line": self.line,
        }


class UnitTestFailure(Exception):
    """Raised by test code to signal a failure."""

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line

    def failures(self, path: str) -> list[Failure]:
        """Get the failures this exception stands for."""
        return [Failure(path=path, message=self.message, file=self.file, line=self.line)]


class CompositeFailure(UnitTestFailure):
    """Raised when one or more children of a composite test failed."""

    def __init__(self, results: list):
        self.results = results
        paths = ", ".join(r.path for r in results)
        super().__init__(f"{len(results)} test(s) failed: {paths}")

    def failures(self, path: str) -> list[Failure]:
        # Children already recorded their failures under their own paths
        return [f for result in self.results for f in result.failures]


class DiscoveryError(Exception):
    """Raised when a module cannot be resolved for discovery."""

    pass


class FactoryError(RuntimeError):
    """Raised when the factory breaks its own consistency guarantees."""

    pass


def describe_exception(exc: BaseException) -> str:
    """Get a one-line description of an exception."""
    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


def exception_location(exc: BaseException) -> tuple[Optional[str], Optional[int]]:
    """Get the file and line where an exception was raised."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return None, None
    return frames[-1].filename, frames[-1].lineno


def failures_from_exception(path: str, exc: BaseException) -> list[Failure]:
    """Convert anything a test raised into recorded failures."""
    if isinstance(exc, UnitTestFailure):
        return exc.failures(path)
    file, line = exception_location(exc)
    return [Failure(path=path, message=describe_exception(exc), file=file, line=line)]


def fail(message: str, file: Optional[str] = None, line: Optional[int] = None) -> None:
    """Signal a test failure.

    Args:
        message: Description of what went wrong
        file: Source file to report (default: the caller's file)
        line: Line number to report (default: the caller's line)

    Raises:
        UnitTestFailure: Always
    """
    if file is None:
        caller = inspect.currentframe().f_back
        file = caller.f_code.co_filename
        if line is None:
            line = caller.f_lineno
        del caller

    raise UnitTestFailure(message, file, line)
