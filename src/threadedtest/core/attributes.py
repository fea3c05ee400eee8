"""Decorators that mark tests for discovery."""

HIDDEN_ATTR = "__threadedtest_hidden__"
SINGLE_THREADED_ATTR = "__threadedtest_single_threaded__"
DONT_TEST_ATTR = "__threadedtest_dont_test__"


def hidden_test(obj):
    """Exclude a test from default runs; it still runs when selected by name."""
    setattr(obj, HIDDEN_ATTR, True)
    return obj


def single_threaded(obj):
    """Run a test serially with the other single-threaded tests of its module."""
    setattr(obj, SINGLE_THREADED_ATTR, True)
    return obj


def dont_test(obj):
    """Hide a class or function from discovery entirely."""
    setattr(obj, DONT_TEST_ATTR, True)
    return obj


def is_hidden(obj: object) -> bool:
    """Check whether a class or function was marked with ``hidden_test``."""
    return bool(obj.__dict__.get(HIDDEN_ATTR, False))


def is_single_threaded(obj: object) -> bool:
    """Check whether a class or function was marked with ``single_threaded``."""
    return bool(obj.__dict__.get(SINGLE_THREADED_ATTR, False))


def is_dont_test(obj: object) -> bool:
    """Check whether a class or function was marked with ``dont_test``."""
    return bool(obj.__dict__.get(DONT_TEST_ATTR, False))
