"""Descriptor for a discovered test."""

from dataclasses import dataclass
from typing import Callable, Optional


TestFunction = Callable[[], None]


@dataclass(frozen=True)
class TestData:
    """Immutable description of one discoverable test.

    ``test`` is None for class-based tests, which are constructed by name
    from the test class registry instead.
    """

    name: str
    hidden: bool = False
    test: Optional[TestFunction] = None
    single_threaded: bool = False
