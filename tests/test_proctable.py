"""Tests for the OS process table adapter."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
import typing as t

import pytest

from tmuxctl import exc, proctable
from tmuxctl.test.retry import retry_until

if t.TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sleeper() -> Iterator[subprocess.Popen[bytes]]:
    """A ``sleep 30`` child of the test process."""
    child = subprocess.Popen(["sleep", "30"])
    try:
        yield child
    finally:
        if child.poll() is None:
            child.kill()
        child.wait()


def test_live_process(sleeper: subprocess.Popen[bytes]) -> None:
    """A running child is found with its command line and parent."""
    assert proctable.pid_exists(sleeper.pid)
    assert proctable.cmdline(sleeper.pid) == "sleep 30"
    assert proctable.parent_pid(sleeper.pid) == os.getpid()


def test_pane_processes(sleeper: subprocess.Popen[bytes]) -> None:
    """A shell PID owns itself and its direct children."""
    owned = proctable.pane_processes(os.getpid())

    assert (sleeper.pid, "sleep 30") in owned
    assert os.getpid() in [pid for pid, _ in owned]


def test_kill(sleeper: subprocess.Popen[bytes]) -> None:
    """A killed process is gone, even before it is reaped."""
    proctable.kill(sleeper.pid)

    # unreaped, the child is a zombie, which already counts as dead
    assert retry_until(lambda: not proctable.pid_exists(sleeper.pid))

    with pytest.raises(exc.ProcessNotFound):
        proctable.kill(sleeper.pid)


def test_reaped_process() -> None:
    """An exited and reaped PID is not found."""
    child = subprocess.Popen(["true"])
    child.wait()

    assert not proctable.pid_exists(child.pid)
    with pytest.raises(exc.ProcessNotFound) as excinfo:
        proctable.cmdline(child.pid)

    assert excinfo.value.pid == child.pid


@pytest.mark.parametrize("pid", [0, -1])
def test_non_positive_pid(pid: int) -> None:
    """PIDs of zero or below never name a process."""
    assert not proctable.pid_exists(pid)
    with pytest.raises(exc.ProcessNotFound):
        proctable.get_process(pid)


def test_format_cmdline() -> None:
    """argv lists are joined into a line the shell splits back the same way."""
    assert proctable.format_cmdline(["sleep", "30"]) == "sleep 30"
    assert proctable.format_cmdline(None) == ""

    argv = ["sh", "-c", "sleep 5; echo done"]
    line = proctable.format_cmdline(argv)

    assert line == "sh -c 'sleep 5; echo done'"
    assert shlex.split(line) == argv


def test_cmdline_keeps_shell_quoting() -> None:
    """A live argument holding spaces is read back quoted."""
    argv = ["sh", "-c", "sleep 30; echo done"]
    child = subprocess.Popen(argv, start_new_session=True)
    try:
        line = proctable.cmdline(child.pid)
    finally:
        os.killpg(child.pid, signal.SIGKILL)
        child.wait()

    assert line == "sh -c 'sleep 30; echo done'"
    assert shlex.split(line) == argv
