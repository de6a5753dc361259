"""Pythonization of the :term:`tmux(1)` window.

tmuxctl.window
~~~~~~~~~~~~~~

"""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from tmuxctl import exc, formats
from tmuxctl.common import window_check_name
from tmuxctl.neo import fetch_records
from tmuxctl.pane import Pane

if t.TYPE_CHECKING:
    import types

    from typing_extensions import Self

    from tmuxctl._internal.command_runner import CommandResult
    from tmuxctl.constants import PaneDirection

    from .server import Server
    from .session import Session


logger = logging.getLogger(__name__)


@dataclasses.dataclass()
class Window:
    """:term:`tmux(1)` :term:`Window` [window_manual]_.

    Holds :class:`Pane` objects. ``id`` is assigned by tmux and survives
    renames; ``index`` is positional and is only valid for the listing it
    came from.

    Parameters
    ----------
    session : :class:`Session`

    Examples
    --------
    >>> window = session.new_window('w1')

    >>> window
    Window(@... 2:w1, Session(tmuxctl_...))

    >>> window.target == session.name + ':w1'
    True

    >>> window.exact_target == '=' + session.name + ':=w1'
    True

    >>> len(window.panes)
    1

    References
    ----------
    .. [window_manual] tmux window. openbsd manpage for TMUX(1).
           "Each session has one or more windows linked into it. Windows may
           be linked to multiple sessions and are made up of one or more
           panes, each of which contains a pseudo terminal."

       https://man.openbsd.org/tmux.1#WINDOWS_AND_PANES.
    """

    session: Session
    id: str
    index: int
    active: bool
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
        """Exit the context, killing the window if it exists."""
        if any(w.id == self.id for w in self.session.windows):
            self.kill()

    @property
    def server(self) -> Server:
        """Server of the parent session."""
        return self.session.server

    @property
    def target(self) -> str:
        """Address of this window, ``session:window``."""
        return f"{self.session.target}:{self.name}"

    @property
    def exact_target(self) -> str:
        """:attr:`target` as handed to ``-t``, ``=session:=window``.

        Without the ``=`` prefixes ``w1`` resolves to ``w10`` once ``w1`` is
        gone.
        """
        return f"{self.session.exact_target}:={self.name}"

    """
    Commands (pane-scoped)
    """

    def cmd(
        self,
        cmd: str,
        *args: t.Any,
        target: str | int | None = None,
    ) -> CommandResult:
        """Execute tmux subcommand within window context.

        Automatically binds target by adding ``-t`` for the window's
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
    def panes(self) -> list[Pane]:
        """Panes contained by window, freshly listed.

        A window cannot exist without panes. Once its last pane is killed the
        window is gone, so listing raises :exc:`exc.WindowNotFound` instead of
        returning an empty list.

        Raises
        ------
        :exc:`exc.WindowNotFound`
        :exc:`exc.SessionNotFound`
        :exc:`exc.RecordDecodeError`
        """
        try:
            records = fetch_records(
                server=self.server,
                list_cmd="list-panes",
                fmt=formats.PANE_FORMAT,
                parse=formats.parse_pane_record,
                target=self.exact_target,
            )
        except exc.TmuxCommandError as e:
            if not any(w.name == self.name for w in self.session.windows):
                raise exc.WindowNotFound(self.name, self.session.name) from e
            raise

        return [Pane(window=self, **dataclasses.asdict(r)) for r in records]

    def pane(self, pane_id: str) -> Pane:
        """Return the pane with ID ``pane_id``.

        Raises
        ------
        :exc:`exc.PaneNotFound`
        """
        for pane in self.panes:
            if pane.id == pane_id:
                return pane

        raise exc.PaneNotFound(pane_id, self.name)

    @property
    def active_pane(self) -> Pane:
        """Return the active :class:`Pane`.

        Raises
        ------
        :exc:`exc.NoActivePane`
        """
        for pane in self.panes:
            if pane.active:
                return pane

        raise exc.NoActivePane(self.id)

    """
    Commands (tmux-like)
    """

    def split(
        self,
        pane_id: str | None = None,
        direction: PaneDirection | None = None,
        title: str | None = None,
    ) -> Pane:
        """Split a pane of the window and return the created :class:`Pane`.

        Parameters
        ----------
        pane_id : str, optional
            Pane to split. The active pane when omitted.
        direction : PaneDirection, optional
            Split in direction. If none is specified, assume down.
        title : str, optional
            Title for the new pane.

        Examples
        --------
        >>> window = session.new_window('w1')
        >>> pane = window.split()
        >>> sorted(p.index for p in window.panes)
        [0, 1]
        """
        pane = self.active_pane if pane_id is None else self.pane(pane_id)
        return pane.split(direction=direction, title=title)

    def rename(self, new_name: str) -> Window:
        """Rename window and return the re-listed :class:`Window`.

        ``$ tmux rename-window <new_name>``.

        Raises
        ------
        :exc:`exc.BadWindowName`
        :exc:`exc.TmuxWindowExists`
        """
        window_check_name(new_name)

        if any(w.name == new_name for w in self.session.windows):
            raise exc.TmuxWindowExists(new_name, self.session.name)

        proc = self.cmd("rename-window", new_name, target=self.id)

        if proc.returncode != 0:
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        return self.session.window(new_name)

    def kill(self) -> None:
        """Kill :class:`Window`.

        ``$ tmux kill-window``.

        Raises
        ------
        :exc:`exc.WindowNotFound`
            The window is already gone.
        """
        proc = self.cmd("kill-window")

        if proc.returncode != 0:
            if not any(w.name == self.name for w in self.session.windows):
                raise exc.WindowNotFound(self.name, self.session.name)
            raise exc.TmuxCommandError(proc.cmd, proc.stderr)

        logger.debug("killed window %s", self.target)

    #
    # Dunder
    #
    def __eq__(self, other: object) -> bool:
        """Equal operator for :class:`Window` object."""
        if isinstance(other, Window):
            return self.id == other.id
        return False

    def __repr__(self) -> str:
        """Representation of :class:`Window` object."""
        return (
            f"{self.__class__.__name__}({self.id} "
            f"{self.index}:{self.name}, {self.session})"
        )
