"""tmuxctl pytest plugin."""

from __future__ import annotations

import functools
import getpass
import logging
import os
import pathlib
import shutil
import typing as t

import pytest

from tmuxctl.server import Server
from tmuxctl.test.constants import TEST_SESSION_PREFIX
from tmuxctl.test.random import get_test_session_name, namer

if t.TYPE_CHECKING:
    from tmuxctl.session import Session

logger = logging.getLogger(__name__)
USING_ZSH = "zsh" in os.getenv("SHELL", "")


@pytest.fixture(scope="session")
def home_path(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Temporary `/home/` path."""
    return tmp_path_factory.mktemp("home")


@pytest.fixture(scope="session")
def home_user_name() -> str:
    """Return default username to set for :func:`user_path` fixture."""
    return getpass.getuser()


@pytest.fixture(scope="session")
def user_path(home_path: pathlib.Path, home_user_name: str) -> pathlib.Path:
    """Ensure and return temporary user directory.

    Used by: :func:`config_file`, :func:`zshrc`
    """
    p = home_path / home_user_name
    p.mkdir()
    return p


@pytest.fixture(scope="session")
def zshrc(user_path: pathlib.Path) -> pathlib.Path:
    """Suppress ZSH default message.

    Needs a startup file .zshenv, .zprofile, .zshrc, .zlogin.
    """
    p = user_path / ".zshrc"
    p.touch()
    return p


@pytest.fixture(scope="session")
def config_file(user_path: pathlib.Path) -> pathlib.Path:
    """Return fixture for ``.tmux.conf`` configuration.

    - ``base-index -g 1``

    Windows are numbered from 1 and panes from 0, so indices in tests can be
    asserted reliably.
    """
    c = user_path / ".tmux.conf"
    c.write_text(
        """
set -g base-index 1
    """,
        encoding="utf-8",
    )
    return c


@pytest.fixture
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear out any unnecessary environment variables that could interrupt tests.

    Shells started in test panes inherit this environment.
    """
    for k in os.environ:
        if not any(
            needle in k.lower()
            for needle in [
                "window",
                "tmux",
                "pane",
                "session",
                "pytest",
                "path",
                "pwd",
                "shell",
                "home",
                "xdg",
                "disable_auto_title",
                "lang",
                "term",
            ]
        ):
            monkeypatch.delenv(k)


@pytest.fixture
def server(
    request: pytest.FixtureRequest,
    config_file: pathlib.Path,
) -> Server:
    """Return new, temporary :class:`tmuxctl.Server`.

    Skips the test when no ``tmux`` binary is on ``$PATH``.

    >>> from tmuxctl.server import Server

    >>> def test_example(server: Server) -> None:
    ...     assert isinstance(server, Server)
    ...     session = server.new_session('my_session')
    ...     assert len(server.sessions) == 1
    ...     assert [session.name.startswith('my') for session in server.sessions]
    """
    if shutil.which("tmux") is None:
        pytest.skip("tmux not found on $PATH")

    server = Server(
        socket_name=f"tmuxctl_test{next(namer)}",
        config_file=config_file,
    )

    def fin() -> None:
        if server.is_alive():
            server.kill()

    request.addfinalizer(fin)

    return server


@pytest.fixture
def session_params() -> dict[str, t.Any]:
    """Keyword arguments passed to :meth:`Server.new_session` by :func:`session`.

    >>> import pytest

    >>> @pytest.fixture
    ... def session_params(session_params):
    ...     return {
    ...         'window_name': 'editor',
    ...     }
    """
    return {}


@pytest.fixture
def session(
    request: pytest.FixtureRequest,
    session_params: dict[str, t.Any],
    server: Server,
) -> Session:
    """Return new, temporary :class:`tmuxctl.Session`.

    >>> from tmuxctl.session import Session

    >>> def test_example(session: "Session") -> None:
    ...     assert isinstance(session.name, str)
    ...     assert session.name.startswith('tmuxctl_')
    ...     window = session.new_window('new_one')
    ...     assert window.name == 'new_one'
    """
    # find current sessions left over by earlier test runs
    old_test_sessions = []
    if server.is_alive():
        for s in server.sessions:
            if s.name.startswith(TEST_SESSION_PREFIX):
                old_test_sessions.append(s.name)

    test_session_name = get_test_session_name(server=server)

    session = server.new_session(
        session_name=test_session_name,
        **session_params,
    )

    for old_test_session in old_test_sessions:
        logger.debug("Old test test session %s found. Killing it.", old_test_session)
        server.kill_session(old_test_session)

    assert session.name == test_session_name

    return session


@pytest.fixture
def TestServer(
    request: pytest.FixtureRequest,
    config_file: pathlib.Path,
) -> type[Server]:
    """Create a temporary tmux server that cleans up after itself.

    This is similar to the server pytest fixture, but each call gives a new
    server. Every server created will be killed when the test completes.

    Returns
    -------
    type[Server]
        A factory function that returns a Server with a unique socket_name

    Examples
    --------
    >>> server = Server()  # Create server instance
    >>> server.new_session('demo')
    Session(demo)
    >>> server.is_alive()
    True
    >>> # Each call creates a new server with unique socket
    >>> server2 = Server()
    >>> server2.socket_name != server.socket_name
    True
    """
    if shutil.which("tmux") is None:
        pytest.skip("tmux not found on $PATH")

    created_sockets: list[str] = []

    def on_init(server: Server) -> None:
        """Track created servers for cleanup."""
        created_sockets.append(server.socket_name or "default")

    def socket_name_factory() -> str:
        """Generate unique socket names."""
        return f"tmuxctl_test{next(namer)}"

    def fin() -> None:
        """Kill all servers created with these sockets."""
        for socket_name in created_sockets:
            server = Server(socket_name=socket_name)
            if server.is_alive():
                server.kill()

    request.addfinalizer(fin)

    return t.cast(
        "type[Server]",
        functools.partial(
            Server,
            config_file=config_file,
            on_init=on_init,
            socket_name_factory=socket_name_factory,
        ),
    )
