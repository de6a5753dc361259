"""Pythonization of the :term:`tmux(1)` pane.

tmuxctl.pane
~~~~~~~~~~~~

"""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from tmuxctl import exc, formats, proctable
from tmuxctl.common import pane_check_title
from tmuxctl.constants import PANE_DIRECTION_FLAG_MAP, PaneDirection
from tmuxctl.process import KeystrokeSpawner, Process

if t.TYPE_CHECKING:
    import types

    from typing_extensions import Self

    from tmuxctl._internal.command_runner import CommandResult
    from tmuxctl.process import Spawner

    from .server import Server
    from .session import Session
    from .window import Window

logger = logging.getLogger(__name__)


@dataclasses.dataclass()
class Pane:
    """:term:`tmux(1)` :term:`Pane` [pane_manual]_.

    ``Pane`` instances can send keys directly to a pane, capture what it
    shows, and start processes in it.

    Attributes
    ----------
    window : :class:`Window`
    pid : int
        PID of the shell tmux started in the pane.

    Examples
    --------
    >>> pane = window.active_pane

    >>> pane
    Pane(%... Window(@... 1:..., Session(tmuxctl_...)))

    >>> pane.target == f'{window.target}.{pane.id}'
    True

    >>> pane.exact_target == f'{window.exact_target}.{pane.id}'
    True

    References
    ----------
    .. [pane_manual] tmux pane. openbsd manpage for TMUX(1).
           "Each window displayed by tmux may be split into one or more
           panes; each pane takes up a certain area of the display and is
           a separate terminal."

       https://man.openbsd.org/tmux.1#WINDOWS_AND_PANES.
    """

    window: Window
    id: str
    index: int
    title: str
    active: bool
    pid: int

    def __enter__(self) -> Self:
        """Enter the context, returning self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Exit the context, killing the pane if it exists."""
        try:
            panes = self.window.panes
        except exc.ObjectDoesNotExist:
            return
        if any(p.id == self.id for p in panes):
            self.kill()

    @property
    def session(self) -> Session:
        """Session of the parent window."""
        return self.window.session

    @property
    def server(self) -> Server:
        """Server of the parent window."""
        return self.window.server

    @property
    def target(self) -> str:
        """Address of this pane, ``session:window.%id``."""
        return f"{self.window.target}.{self.id}"

    @property
    def exact_target(self) -> str:
        """:attr:`target` as handed to ``-t``, names matched exactly."""
        return f"{self.window.exact_target}.{self.id}"

    #
    # Command
    #
    def cmd(
        self,
        cmd: str,
        *args: t.Any,
        target: str | int | None = None,
    ) -> CommandResult:
        """Execute tmux subcommand within pane context.

        Automatically binds target by adding ``-t`` for the pane's
        :attr:`exact_target` to the command. Pass ``target`` to keyword
        arguments to override.
        """
        if target is None:
            target = self.exact_target

        return self.server.cmd(cmd, *args, target=target)

    """
    Commands (tmux-like)
    """

    def capture_pane(
        self,
        start: t.Literal["-"] | int | None = None,
        end: t.Literal["-"] | int | None = None,
    ) -> list[str]:
        """Capture text from pane.

        ``$ tmux capture-pane -p`` to pane.
        ``$ tmux capture-pane -p -S -10`` to pane.
        ``$ tmux capture-pane -p -E 3`` to pane.

        Parameters
        ----------
        start : str | int, optional
            Specify the starting line number.
            Zero is the first line of the visible pane.
            Negative numbers are lines in the history.
            ``-`` is the start of the history.
        end : str | int, optional
            Specify the ending line number.
            ``-`` is the end of the visible pane.

        Returns
        -------
        list[str]
            Captured pane content, trailing empty lines removed.
        """
        tmux_args: list[str] = ["-p"]
        if start is not None:
            tmux_args.extend(["-S", str(start)])
        if end is not None:
            tmux_args.extend(["-E", str(end)])

        proc = self.cmd("capture-pane", *tmux_args)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        return proc.stdout

    def send_keys(
        self,
        cmd: str,
        enter: bool | None = True,
        literal: bool | None = False,
    ) -> None:
        r"""``$ tmux send-keys`` to the pane.

        Parameters
        ----------
        cmd : str
            Text or input into pane
        enter : bool, optional
            Send enter after sending the input, default True.
        literal : bool, optional
            Send keys literally, so key names such as ``Enter`` or ``C-c``
            are typed as text. Default False.

        Examples
        --------
        >>> pane.send_keys('echo "Hello world"', enter=True)
        """
        if literal:
            proc = self.cmd("send-keys", "-l", cmd)
        else:
            proc = self.cmd("send-keys", cmd)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        if enter:
            self.enter()

    def enter(self) -> Pane:
        """Send carriage return to pane.

        ``$ tmux send-keys`` send Enter to the pane.
        """
        proc = self.cmd("send-keys", "Enter")

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        return self

    def set_title(self, title: str) -> Pane:
        """Set the pane title, ``$ tmux select-pane -T <title>``.

        Raises
        ------
        :exc:`exc.BadPaneTitle`
        """
        pane_check_title(title)

        proc = self.cmd("select-pane", "-T", title)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        return self.window.pane(self.id)

    def kill(self) -> None:
        """Kill :class:`Pane`.

        ``$ tmux kill-pane``. Killing the last pane of a window also
        destroys the window.
        """
        proc = self.cmd("kill-pane")

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        logger.debug("killed pane %s", self.target)

    def split(
        self,
        direction: PaneDirection | None = None,
        title: str | None = None,
    ) -> Pane:
        """Split this pane and return the new :class:`Pane`.

        The new pane's ID is printed by ``split-window -P``; the window is
        then listed again to return the fully populated pane.

        Parameters
        ----------
        direction : PaneDirection, optional
            split in direction. If none is specified, assume down.
        title : str, optional
            title of the new pane, set with ``select-pane -T``.

        Raises
        ------
        :exc:`exc.BadPaneTitle`
        :exc:`exc.PaneNotFound`
            The new pane could not be found after splitting.
        """
        if title is not None:
            pane_check_title(title)

        tmux_args: tuple[str, ...] = (
            *PANE_DIRECTION_FLAG_MAP[direction or PaneDirection.Below],
            "-P",
            "-F",
            formats.PANE_ID_FORMAT,
        )

        proc = self.cmd("split-window", *tmux_args)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        if not proc.stdout:
            raise exc.PaneNotFound(None, self.window.name)

        pane = self.window.pane(formats.unquote(proc.stdout[0]))

        if title is not None:
            pane = pane.set_title(title)

        return pane

    """
    Processes
    """

    def start_process(
        self,
        cmd: str,
        *args: str,
        spawner: Spawner | None = None,
    ) -> Process:
        """Start ``cmd args...`` in the pane and return its :class:`Process`.

        The command is typed into the pane's shell. See
        :class:`~tmuxctl.process.KeystrokeSpawner` for the protocol and its
        limits.

        Raises
        ------
        :exc:`exc.NoCommandConfigured`
        :exc:`exc.PidNotRecovered`

        Examples
        --------
        >>> sh = session.new_window('sh', shell="env PS1='$ ' sh").active_pane
        >>> proc = sh.start_process('sleep', '30')
        >>> proc.pid > 0
        True
        >>> proc.kill()
        """
        cmdline = " ".join([cmd, *args]).strip()
        if spawner is None:
            spawner = KeystrokeSpawner()
        return spawner.spawn(self, cmdline)

    def processes(self) -> list[Process]:
        """Return the processes owned by this pane.

        That is the pane's shell plus its direct children, read from the OS
        process table.
        """
        return [
            Process(pane=self, cmdline=cmdline, pid=pid)
            for pid, cmdline in proctable.pane_processes(self.pid)
        ]

    #
    # Dunder
    #
    def __eq__(self, other: object) -> bool:
        """Equal operator for :class:`Pane` object."""
        if isinstance(other, Pane):
            return self.id == other.id
        return False

    def __repr__(self) -> str:
        """Representation of :class:`Pane` object."""
        return f"{self.__class__.__name__}({self.id} {self.window})"
