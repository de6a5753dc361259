"""Pythonization of the :term:`tmux(1)` session.

tmuxctl.session
~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from tmuxctl import exc, formats
from tmuxctl.common import window_check_name
from tmuxctl.neo import fetch_lines, fetch_records
from tmuxctl.window import Window

if t.TYPE_CHECKING:
    import types

    from typing_extensions import Self

    from tmuxctl._internal.command_runner import CommandResult

    from .server import Server


logger = logging.getLogger(__name__)


@dataclasses.dataclass()
class Session:
    """:term:`tmux(1)` :term:`Session` [session_manual]_.

    Holds :class:`Window` objects. A session is addressed by its name only.

    Parameters
    ----------
    server : :class:`Server`
    name : str

    Examples
    --------
    >>> session
    Session(tmuxctl_...)

    >>> session.target == session.name
    True

    >>> session.exact_target == '=' + session.name
    True

    >>> len(session.windows)
    1

    The session can be used as a context manager to ensure proper cleanup:

    >>> with server.new_session('scratch') as scratch:
    ...     window = scratch.new_window('w1')

    >>> server.has_session('scratch')
    False

    References
    ----------
    .. [session_manual] tmux session. openbsd manpage for TMUX(1).
           "A session is a single collection of pseudo terminals under the
           management of tmux.  Each session has one or more windows linked to
           it."

       https://man.openbsd.org/tmux.1#DESCRIPTION.
    """

    server: Server
    name: str

    def __enter__(self) -> Self:
        """Enter the context, returning self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Exit the context, killing the session if it exists."""
        if self.server.has_session(self.name):
            self.kill()

    @property
    def target(self) -> str:
        """Address of this session: its name."""
        return self.name

    @property
    def exact_target(self) -> str:
        """:attr:`target` as handed to ``-t``, ``=name``.

        tmux falls back to prefix and pattern matching on a bare name, so
        ``S`` would resolve to ``S2`` once ``S`` is gone. The ``=`` prefix
        only accepts an exact match.
        """
        return f"={self.name}"

    #
    # Command
    #
    def cmd(
        self,
        cmd: str,
        *args: t.Any,
        target: str | int | None = None,
    ) -> CommandResult:
        """Execute tmux subcommand within session context.

        Automatically binds target by adding ``-t`` for the session's
        :attr:`exact_target` to the command. Pass ``target`` to keyword
        arguments to override.
        """
        if target is None:
            target = self.exact_target
        return self.server.cmd(cmd, *args, target=target)

    #
    # Relations
    #
    @property
    def windows(self) -> list[Window]:
        """Windows contained by session, freshly listed.

        Raises
        ------
        :exc:`exc.SessionNotFound`
            The session no longer exists.
        :exc:`exc.RecordDecodeError`
            A window line did not match the window format.
        """
        try:
            records = fetch_records(
                server=self.server,
                list_cmd="list-windows",
                fmt=formats.WINDOW_FORMAT,
                parse=formats.parse_window_record,
                target=self.exact_target,
            )
        except exc.TmuxCommandError as e:
            if not self.server.has_session(self.name):
                raise exc.SessionNotFound(self.name) from e
            raise

        return [Window(session=self, **dataclasses.asdict(r)) for r in records]

    def window(self, name: str) -> Window:
        """Return the window named ``name``.

        Raises
        ------
        :exc:`exc.WindowNotFound`
        """
        for window in self.windows:
            if window.name == name:
                return window

        raise exc.WindowNotFound(name, self.name)

    @property
    def active_window(self) -> Window:
        """Return the active :class:`Window` object."""
        for window in self.windows:
            if window.active:
                return window

        raise exc.NoActiveWindow

    def pane_pids(self) -> list[int]:
        """Return the shell PIDs of every pane in every window of the session.

        Raises
        ------
        :exc:`exc.SessionNotFound`
            The session no longer exists.
        """
        try:
            lines = fetch_lines(
                server=self.server,
                list_cmd="list-panes",
                fmt=formats.PANE_PID_FORMAT,
                target=self.exact_target,
                list_extra_args=("-s",),
            )
        except exc.TmuxCommandError as e:
            if not self.server.has_session(self.name):
                raise exc.SessionNotFound(self.name) from e
            raise

        return [formats.parse_pid_record(line) for line in lines]

    """
    Commands (tmux-like)
    """

    def new_window(
        self,
        window_name: str,
        shell: str | None = None,
    ) -> Window:
        """Create new window, returns new :class:`Window`.

        ``new-window`` prints nothing useful, so the session's windows are
        listed again to locate the new window by name.

        Parameters
        ----------
        window_name : str
            ::

                $ tmux new-window -n <window_name>
        shell : str, optional
            command to run instead of the default shell. The window closes
            when it exits.

        Raises
        ------
        :exc:`exc.BadWindowName`
        :exc:`exc.TmuxWindowExists`
            A window with this name already exists in the session. No
            mutating command has been issued.
        :exc:`exc.WindowNotFound`
            The window could not be found after creating it.

        Examples
        --------
        >>> window = session.new_window('w1')
        >>> window.name
        'w1'

        >>> session.new_window('w1')
        Traceback (most recent call last):
        ...
        tmuxctl.exc.TmuxWindowExists: window "w1" already exists in session "tmuxctl_..."
        """
        window_check_name(window_name)

        if any(w.name == window_name for w in self.windows):
            raise exc.TmuxWindowExists(window_name, self.name)

        tmux_args: tuple[str, ...] = ("-n", window_name)

        if shell:
            tmux_args += (shell,)

        # empty window index after the colon picks the first free one
        proc = self.cmd("new-window", *tmux_args, target=f"{self.exact_target}:")

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        logger.debug("created window %s in session %s", window_name, self.name)

        return self.window(window_name)

    def kill_window(self, window_name: str) -> None:
        """Kill the window named ``window_name``.

        Raises
        ------
        :exc:`exc.WindowNotFound`
        """
        self.window(window_name).kill()

    def kill(self) -> None:
        """Kill :class:`Session`, closes linked windows and detach all clients.

        ``$ tmux kill-session``.

        Raises
        ------
        :exc:`exc.SessionNotFound`
            The session is already gone.
        """
        proc = self.cmd("kill-session")

        if proc.returncode != 0:
            if not self.server.has_session(self.name):
                raise exc.SessionNotFound(self.name)
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        logger.debug("killed session %s", self.name)

    #
    # Dunder
    #
    def __eq__(self, other: object) -> bool:
        """Equal operator for :class:`Session` object."""
        if isinstance(other, Session):
            return self.name == other.name
        return False

    def __repr__(self) -> str:
        """Representation of :class:`Session` object."""
        return f"{self.__class__.__name__}({self.name})"
