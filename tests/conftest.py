"""Shared fixtures."""

import importlib
import sys
import textwrap

import pytest


@pytest.fixture
def make_module(tmp_path, monkeypatch):
    """Write a module under tmp_path and import it.

    Packages on the way are created as needed. Every module imported from
    the created top-level packages is dropped from sys.modules afterwards.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    roots = set()

    def _make(name: str, source: str):
        parts = name.split(".")
        for i in range(1, len(parts)):
            package_dir = tmp_path.joinpath(*parts[:i])
            package_dir.mkdir(parents=True, exist_ok=True)
            init = package_dir / "__init__.py"
            if not init.exists():
                init.write_text("")

        path = tmp_path.joinpath(*parts[:-1], parts[-1] + ".py")
        path.write_text(textwrap.dedent(source))
        roots.add(parts[0])

        importlib.invalidate_caches()
        return importlib.import_module(name)

    yield _make

    for name in list(sys.modules):
        if name.split(".")[0] in roots:
            del sys.modules[name]
