"""Tools for hydrating tmux listings into typed records."""

from __future__ import annotations

import logging
import typing as t
from collections.abc import Iterable

from tmuxctl import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from tmuxctl.server import Server

    ListCmd = t.Literal["list-sessions", "list-windows", "list-panes"]
    ListExtraArgs = Iterable[str] | None

logger = logging.getLogger(__name__)

RecordT = t.TypeVar("RecordT")


def fetch_lines(
    server: Server,
    list_cmd: ListCmd,
    fmt: str,
    target: str | None = None,
    list_extra_args: ListExtraArgs = None,
) -> list[str]:
    """Run a listing command and return its non-empty output lines.

    Raises
    ------
    :exc:`exc.TmuxCommandError`
        tmux exited with a non-zero status.
    """
    tmux_args: list[str] = []

    if list_extra_args is not None and isinstance(list_extra_args, Iterable):
        tmux_args.extend(list(list_extra_args))

    tmux_args += ["-F", fmt]

    proc = server.cmd(list_cmd, *tmux_args, target=target)

    if proc.returncode != 0:
        raise exc.TmuxCommandError(proc.cmd, proc.stderr)

    return [line for line in proc.stdout if line]


def fetch_records(
    server: Server,
    list_cmd: ListCmd,
    fmt: str,
    parse: Callable[[str], RecordT],
    target: str | None = None,
    list_extra_args: ListExtraArgs = None,
) -> list[RecordT]:
    """Fetch a listing and decode each line with ``parse``.

    A single malformed line fails the whole listing.
    """
    return [
        parse(line)
        for line in fetch_lines(
            server=server,
            list_cmd=list_cmd,
            fmt=fmt,
            target=target,
            list_extra_args=list_extra_args,
        )
    ]
