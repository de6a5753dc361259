"""Seam between tmuxctl objects and the tmux binary.

:class:`~tmuxctl.server.Server` sends every tmux call through a
:class:`CommandRunner`. Swap the runner to redirect or record calls.
"""

from __future__ import annotations

import typing as t


class CommandResult(t.Protocol):
    """Outcome of one finished tmux call.

    :class:`tmuxctl.common.tmux_cmd` satisfies this.
    """

    #: argv that ran, tmux binary first
    cmd: list[str]
    #: stdout lines, trailing blank lines removed
    stdout: list[str]
    #: non-empty stderr lines
    stderr: list[str]
    #: exit status; callers decide what non-zero means
    returncode: int


class CommandRunner(t.Protocol):
    """Runs ``tmux <args>`` to completion and reports the result.

    A runner raises only when tmux could not be run at all
    (:exc:`~tmuxctl.exc.TmuxCommandNotFound`,
    :exc:`~tmuxctl.exc.SubprocessTimeout`). A non-zero exit is returned, not
    raised.

    Examples
    --------
    >>> from tmuxctl._internal.engines import SubprocessCommandRunner
    >>> result = SubprocessCommandRunner().run("-V")
    >>> result.returncode
    0
    """

    def run(self, *args: str) -> CommandResult:
        """Run tmux with ``args``, server flags included."""
        ...
