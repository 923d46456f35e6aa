"""Shared fixtures for plugdock tests."""

import sys
import textwrap
from pathlib import Path
from typing import Iterable, Optional

import pytest
import structlog
from structlog.testing import capture_logs

from plugdock import Application, Options
from plugdock.plugins.discovery import PACKAGE_STORE
from plugdock.plugins.formats import PATH_MODULE_PREFIX

PLUGIN_SOURCE = """
def load(app):
    app.order = getattr(app, "order", []) + [{name!r}]
"""


def write_package(
    store: Path,
    name: str,
    keywords: Optional[Iterable[str]] = ("plugdock-plugin",),
    source: Optional[str] = None,
    info: Optional[str] = None,
) -> Path:
    """Create an installed package below a package store.

    Args:
        store: The ``__pypackages__`` directory
        name: Package directory name, may be ``@scope/name``
        keywords: Keywords for ``pyproject.toml``, None writes no metadata
        source: ``__init__.py`` contents, defaults to a plugin recording its name
        info: Raw ``pyproject.toml`` contents, overrides ``keywords``
    """
    package = store / name
    package.mkdir(parents=True, exist_ok=True)

    if info is not None:
        (package / "pyproject.toml").write_text(info, encoding="utf-8")
    elif keywords is not None:
        quoted = ", ".join(f'"{keyword}"' for keyword in keywords)
        (package / "pyproject.toml").write_text(
            f'[project]\nname = "{package.name}"\nkeywords = [{quoted}]\n', encoding="utf-8"
        )

    if source is None:
        source = PLUGIN_SOURCE.format(name=name)
    (package / "__init__.py").write_text(textwrap.dedent(source), encoding="utf-8")
    return package


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with an empty package store, used as cwd."""
    root = tmp_path / "project"
    (root / PACKAGE_STORE).mkdir(parents=True)
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def store(project):
    return project / PACKAGE_STORE


@pytest.fixture
def app():
    return Application(Options())


@pytest.fixture
def logs():
    """Capture structlog output as a list of event dicts."""
    with capture_logs() as captured:
        yield captured


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Undo logging configuration and forget modules loaded from test paths."""
    before = set(sys.modules)
    yield
    structlog.reset_defaults()
    for name in set(sys.modules) - before:
        if name.startswith(PATH_MODULE_PREFIX) or name.startswith("tla_"):
            del sys.modules[name]


@pytest.fixture
def log_events(logs):
    """Messages captured at one level, in order."""

    def by_level(level: str):
        return [entry["event"] for entry in logs if entry["log_level"] == level]

    return by_level


@pytest.fixture
def make_package():
    return write_package
