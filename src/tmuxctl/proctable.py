"""Adapter over the OS process table.

tmuxctl.proctable
~~~~~~~~~~~~~~~~~

Thin layer over :mod:`psutil` used by the process control code. A zombie
(exited but not yet reaped by the pane's shell) counts as gone.
"""

from __future__ import annotations

import logging
import shlex
import typing as t

import psutil

from tmuxctl import exc

if t.TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


def iter_processes() -> Iterator[psutil.Process]:
    """Iterate over every process, with ``pid``, ``ppid`` and ``cmdline`` cached.

    Attributes the caller is not allowed to read come back as ``None`` in
    ``proc.info``.
    """
    return psutil.process_iter(["pid", "ppid", "cmdline"])


def get_process(pid: int) -> psutil.Process:
    """Return a handle on the live process ``pid``.

    Raises
    ------
    :exc:`exc.ProcessNotFound`
        No such process, or it is a zombie.
    """
    if pid <= 0:
        raise exc.ProcessNotFound(pid)
    try:
        proc = psutil.Process(pid)
        if proc.status() == psutil.STATUS_ZOMBIE:
            raise exc.ProcessNotFound(pid)
    except psutil.NoSuchProcess as e:
        raise exc.ProcessNotFound(pid) from e
    return proc


def pid_exists(pid: int) -> bool:
    """Return True if ``pid`` names a live, non-zombie process."""
    try:
        get_process(pid)
    except exc.ProcessNotFound:
        return False
    return True


def format_cmdline(parts: list[str] | None) -> str:
    """Join an argv list into a command line the shell splits back the same way.

    >>> format_cmdline(['sleep', '30'])
    'sleep 30'
    >>> format_cmdline(['sh', '-c', 'sleep 5; echo done'])
    "sh -c 'sleep 5; echo done'"
    """
    return shlex.join(parts or [])


def parent_pid(pid: int) -> int:
    """Return the parent PID of ``pid``."""
    proc = get_process(pid)
    try:
        return proc.ppid()
    except psutil.NoSuchProcess as e:
        raise exc.ProcessNotFound(pid) from e


def cmdline(pid: int) -> str:
    """Return the command line ``pid`` was started with.

    An empty string if the OS does not let us read it.
    """
    proc = get_process(pid)
    try:
        return format_cmdline(proc.cmdline())
    except psutil.NoSuchProcess as e:
        raise exc.ProcessNotFound(pid) from e
    except psutil.AccessDenied:
        logger.debug("cannot read command line of process %d", pid)
        return ""


def kill(pid: int) -> None:
    """Send SIGKILL to ``pid``.

    Raises
    ------
    :exc:`exc.ProcessNotFound`
    """
    proc = get_process(pid)
    try:
        proc.kill()
    except psutil.NoSuchProcess as e:
        raise exc.ProcessNotFound(pid) from e
    logger.debug("killed process %d", pid)


def pane_processes(shell_pid: int) -> list[tuple[int, str]]:
    """Return ``(pid, cmdline)`` for a pane shell and its direct children.

    Grandchildren are not included.
    """
    owned: list[tuple[int, str]] = []
    for proc in iter_processes():
        info = proc.info
        if shell_pid in (info["pid"], info["ppid"]):
            owned.append((info["pid"], format_cmdline(info["cmdline"])))
    return owned
