"""Wrapper for :term:`tmux(1)` server.

tmuxctl.server
~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import pathlib
import typing as t

from tmuxctl import exc, formats
from tmuxctl._internal.engines import SubprocessCommandRunner
from tmuxctl.common import session_check_name, window_check_name
from tmuxctl.neo import fetch_records
from tmuxctl.session import Session

if t.TYPE_CHECKING:
    import types
    from collections.abc import Callable

    from typing_extensions import Self

    from tmuxctl._internal.command_runner import CommandResult, CommandRunner

    SessionPredicate = Callable[[Session], tuple[bool, bool]]

logger = logging.getLogger(__name__)


class Server:
    """:term:`tmux(1)` :term:`Server` [server_manual]_.

    - :attr:`Server.sessions` [:class:`Session`, ...]

      - :attr:`Session.windows` [:class:`Window`, ...]

        - :attr:`Window.panes` [:class:`Pane`, ...]

    Nothing is cached: every relation is re-read from tmux on access, and
    objects returned earlier may be stale after any structural change. A
    server object is not safe for concurrent use from several threads.

    Parameters
    ----------
    socket_name : str, optional
    socket_path : str, optional
    config_file : str, optional
    tmux_bin : str, optional
    timeout : float, optional
        Deadline in seconds for each tmux call of the default runner.
    command_runner : CommandRunner, optional
        Replaces the default :class:`SubprocessCommandRunner`.

    Examples
    --------
    >>> s = server.new_session('S')
    >>> s.new_window('w1')
    Window(@... 2:w1, Session(S))

    References
    ----------
    .. [server_manual] CLIENTS AND SESSIONS. openbsd manpage for TMUX(1)
           "The tmux server manages clients, sessions, windows and panes."

       https://man.openbsd.org/tmux.1#CLIENTS_AND_SESSIONS.
    """

    socket_name: str | None = None
    """Passthrough to ``[-L socket-name]``"""
    socket_path: str | None = None
    """Passthrough to ``[-S socket-path]``"""
    config_file: str | None = None
    """Passthrough to ``[-f file]``"""

    def __init__(
        self,
        socket_name: str | None = None,
        socket_path: str | pathlib.Path | None = None,
        config_file: str | pathlib.Path | None = None,
        tmux_bin: str | None = None,
        timeout: float | None = None,
        command_runner: CommandRunner | None = None,
        on_init: Callable[[Server], None] | None = None,
        socket_name_factory: Callable[[], str] | None = None,
    ) -> None:
        if socket_path is not None:
            self.socket_path = str(socket_path)
        elif socket_name is not None:
            self.socket_name = socket_name
        elif socket_name_factory is not None:
            self.socket_name = socket_name_factory()

        if config_file:
            self.config_file = str(config_file)

        self.tmux_bin = tmux_bin
        self.timeout = timeout
        self._command_runner = command_runner

        if on_init is not None:
            on_init(self)

    @property
    def command_runner(self) -> CommandRunner:
        """Runner used for every tmux call, created on first use."""
        if self._command_runner is None:
            self._command_runner = SubprocessCommandRunner(
                tmux_bin=self.tmux_bin,
                timeout=self.timeout,
            )
        return self._command_runner

    @command_runner.setter
    def command_runner(self, runner: CommandRunner) -> None:
        self._command_runner = runner

    def __enter__(self) -> Self:
        """Enter the context, returning self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Exit the context, killing the server if it exists."""
        if self.is_alive():
            self.kill()

    def is_alive(self) -> bool:
        """Return True if tmux server alive.

        >>> tmux = Server(socket_name="no_exist")
        >>> assert not tmux.is_alive()
        """
        try:
            res = self.cmd("list-sessions")
        except exc.TmuxCommandNotFound:
            return False
        return res.returncode == 0

    #
    # Command
    #
    def cmd(
        self,
        cmd: str,
        *args: t.Any,
        target: str | int | None = None,
    ) -> CommandResult:
        """Execute tmux command respective of socket name and file, return output.

        This is the single entry point to the tmux binary. The result is
        returned as-is; callers decide what a non-zero exit means.

        Examples
        --------
        >>> server.cmd('list-sessions', '-F', '#{session_name}').stdout == [session.name]
        True

        Parameters
        ----------
        target : str, optional
            Optional custom target, passed as ``-t <target>``.
        """
        svr_args: list[str] = [cmd]
        if self.socket_name:
            svr_args.insert(0, f"-L{self.socket_name}")
        if self.socket_path:
            svr_args.insert(0, f"-S{self.socket_path}")
        if self.config_file:
            svr_args.insert(0, f"-f{self.config_file}")

        cmd_args = ["-t", str(target), *args] if target is not None else [*args]

        return self.command_runner.run(*svr_args, *[str(a) for a in cmd_args])

    def has_session(self, target_session: str, exact: bool = True) -> bool:
        """Return True if session exists.

        Uses the exit status of ``$ tmux has-session``, so it also answers
        ``False`` when no tmux server is running yet.

        Parameters
        ----------
        target_session : str
            session name
        exact : bool
            match the session name exactly. tmux uses fnmatch by default.
            Internally prepends ``=`` to the session in ``$ tmux has-session``.

        Raises
        ------
        :exc:`exc.BadSessionName`
        """
        session_check_name(target_session)

        if exact:
            target_session = f"={target_session}"

        proc = self.cmd("has-session", target=target_session)

        return bool(not proc.returncode)

    def kill(self) -> None:
        """Kill tmux server.

        >>> svr = Server(socket_name="testing")
        >>> svr.new_session('testing')
        Session(testing)
        >>> svr.kill()
        >>> svr.is_alive()
        False
        """
        self.cmd("kill-server")

    #
    # Relations
    #
    @property
    def sessions(self) -> list[Session]:
        """Sessions contained in server, freshly listed.

        Raises
        ------
        :exc:`exc.TmuxCommandError`
            tmux could not list sessions, e.g. no server is running.
        """
        return [
            Session(server=self, name=record.name)
            for record in fetch_records(
                server=self,
                list_cmd="list-sessions",
                fmt=formats.SESSION_FORMAT,
                parse=formats.parse_session_record,
            )
        ]

    def find_sessions(self, fn: SessionPredicate) -> list[Session]:
        """Return sessions for which ``fn`` reports a match.

        ``fn`` returns a ``(match, cont)`` pair. Matching sessions are
        collected; the scan stops as soon as ``cont`` is false.

        Examples
        --------
        >>> dev = server.new_session('dev')
        >>> dev2 = server.new_session('dev2')
        >>> server.find_sessions(lambda s: (s.name.startswith('dev'), True))
        [Session(dev), Session(dev2)]
        """
        found: list[Session] = []
        for session in self.sessions:
            match, cont = fn(session)
            if match:
                found.append(session)
            if not cont:
                break
        return found

    def find_session(self, name: str) -> Session:
        """Return session named ``name``.

        Raises
        ------
        :exc:`exc.SessionNotFound`
        """
        sessions = self.find_sessions(lambda s: (s.name == name, s.name != name))

        if len(sessions) == 0:
            raise exc.SessionNotFound(name)

        return sessions[0]

    def new_session(
        self,
        session_name: str,
        window_name: str | None = None,
        start_directory: str | pathlib.Path | None = None,
        shell: str | None = None,
    ) -> Session:
        """Create new session, returns new :class:`Session`.

        The session is created detached. ``new-session`` prints nothing
        useful, so the server is listed again to locate the new session.

        Parameters
        ----------
        session_name : str
            ::

                $ tmux new-session -s <session_name>

        Other Parameters
        ----------------
        window_name : str, optional
            ::

                $ tmux new-session -n <window_name>
        start_directory : str or PathLike, optional
            specifies the working directory in which the
            new session is created.
        shell : str, optional
            command to run instead of the default shell. The window closes
            when it exits.

        Raises
        ------
        :exc:`exc.BadSessionName`
        :exc:`exc.TmuxSessionExists`
            A session with this name already exists. No tmux command that
            mutates state has been issued.
        :exc:`exc.SessionNotFound`
            The session could not be found after creating it.
        """
        session_check_name(session_name)

        if self.has_session(session_name):
            raise exc.TmuxSessionExists(session_name)

        logger.debug("creating session %s", session_name)

        tmux_args: tuple[str, ...] = ("-d", "-s", session_name)

        if window_name is not None:
            window_check_name(window_name)
            tmux_args += ("-n", window_name)

        if start_directory:
            tmux_args += ("-c", str(pathlib.Path(start_directory).expanduser()))

        if shell:
            tmux_args += (shell,)

        proc = self.cmd("new-session", *tmux_args)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        return self.find_session(session_name)

    def kill_session(self, target_session: str) -> Server:
        """Kill tmux session named ``target_session``.

        Raises
        ------
        :exc:`exc.SessionNotFound`
        """
        self.find_session(target_session).kill()
        return self

    #
    # Dunder
    #
    def __eq__(self, other: object) -> bool:
        """Equal operator for :class:`Server` object."""
        if isinstance(other, Server):
            return (
                self.socket_name == other.socket_name
                and self.socket_path == other.socket_path
            )
        return False

    def __repr__(self) -> str:
        """Representation of :class:`Server` object."""
        if self.socket_name is not None:
            return f"{self.__class__.__name__}(socket_name={self.socket_name})"
        if self.socket_path is not None:
            return f"{self.__class__.__name__}(socket_path={self.socket_path})"
        return f"{self.__class__.__name__}(socket_name=default)"
