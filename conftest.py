"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel, in addition to pytest_plugin
for pytester only being available via the root directory.

See "pytest_plugins in non-top-level conftest files" in
https://docs.pytest.org/en/stable/deprecations.html
"""

from __future__ import annotations

import re
import shutil
import typing as t

import pytest
from _pytest.doctest import DoctestItem

from tmuxctl.pane import Pane
from tmuxctl.pytest_plugin import USING_ZSH
from tmuxctl.server import Server
from tmuxctl.session import Session
from tmuxctl.window import Window

if t.TYPE_CHECKING:
    import pathlib

pytest_plugins = ["pytester", "tmuxctl.pytest_plugin"]

#: names the doctest namespace binds to live tmux objects
TMUX_NAMESPACE_RE = re.compile(r"\b(server|session|window|pane|Server)\b")


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    item = request._pyfuncitem
    if not isinstance(item, DoctestItem):
        return
    if not shutil.which("tmux"):
        if any(TMUX_NAMESPACE_RE.search(e.source) for e in item.dtest.examples):
            pytest.skip("tmux not found on $PATH")
        return
    request.getfixturevalue("set_home")
    doctest_namespace["Session"] = Session
    doctest_namespace["Window"] = Window
    doctest_namespace["Pane"] = Pane
    doctest_namespace["server"] = request.getfixturevalue("server")
    doctest_namespace["Server"] = request.getfixturevalue("TestServer")
    session: Session = request.getfixturevalue("session")
    doctest_namespace["session"] = session
    window = session.active_window
    doctest_namespace["window"] = window
    doctest_namespace["pane"] = window.active_pane
    doctest_namespace["request"] = request


@pytest.fixture(autouse=True)
def set_home(
    monkeypatch: pytest.MonkeyPatch,
    user_path: pathlib.Path,
) -> None:
    """Configure home directory for pytest tests."""
    monkeypatch.setenv("HOME", str(user_path))


@pytest.fixture(autouse=True)
def setup_fn(
    clear_env: None,
) -> None:
    """Function-level test configuration fixtures for pytest."""


@pytest.fixture(autouse=True, scope="session")
def setup_session(
    request: pytest.FixtureRequest,
    config_file: pathlib.Path,
) -> None:
    """Session-level test configuration for pytest."""
    if USING_ZSH:
        request.getfixturevalue("zshrc")
