"""Start, track and restart processes inside tmux panes.

tmuxctl.process
~~~~~~~~~~~~~~~

tmux has no "spawn and hand me a PID" command, so a process is started by
typing into the pane's shell:

1. the command line, forced into the background with ``&`` so the shell
   returns to its prompt, then ``Enter``;
2. ``echo $!``, which prints the PID of that background job, then ``Enter``;
3. after a short settling delay the pane is captured and scanned from the
   most recent line backwards for the first line made only of digits.

If no such line turns up, the capture is polled again with exponential
backoff until :data:`~tmuxctl.constants.PID_TIMEOUT_SECONDS` runs out. Keys
are typed once per spawn; a failure is never retried.

This is best-effort. The scan is fooled by a command that prints a bare
number before the echo runs, by prompts that print digits, and by anyone
else typing into the same pane meanwhile. The settling delay and the poll
are heuristics, not synchronization. tmux and the OS process table can
disagree, so a stored PID is only trusted after checking it with
:mod:`tmuxctl.proctable`.

:class:`Process` objects are not safe to share between threads.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import re
import time
import typing as t

from tmuxctl import exc, proctable
from tmuxctl.constants import (
    PID_ECHO_COMMAND,
    PID_POLL_INTERVAL_SECONDS,
    PID_POLL_MAX_INTERVAL_SECONDS,
    PID_TIMEOUT_SECONDS,
    SETTLE_SECONDS,
)

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from tmuxctl.pane import Pane

logger = logging.getLogger(__name__)

PID_LINE_RE = re.compile(r"[0-9]+")


class ProcessState(enum.Enum):
    """Lifecycle state of a :class:`Process`, as confirmed by the OS."""

    #: No PID known.
    Idle = "IDLE"
    #: PID known and alive in the OS process table.
    Running = "RUNNING"
    #: PID known but the OS has no such live process.
    Dead = "DEAD"


def requests_background(cmdline: str) -> bool:
    """Return True if ``cmdline`` already ends by backgrounding itself.

    >>> requests_background('sleep 30 &')
    True
    >>> requests_background('make && ./run')
    False
    """
    stripped = cmdline.rstrip()
    return stripped.endswith("&") and not stripped.endswith("&&")


def find_pid(lines: Sequence[str]) -> int | None:
    """Return the PID from the most recent digits-only line, if any.

    >>> find_pid(['$ sleep 30 &', '[1] 4821', '$ echo $!', '4821', '$'])
    4821
    >>> find_pid(['$']) is None
    True
    """
    for line in reversed(lines):
        if PID_LINE_RE.fullmatch(line):
            return int(line)
    return None


class Spawner(t.Protocol):
    """Start a command line in a pane and return a handle on it."""

    def spawn(self, pane: Pane, cmdline: str) -> Process:
        """Start ``cmdline`` in ``pane``.

        Raises
        ------
        :exc:`exc.NoCommandConfigured`
        :exc:`exc.PidNotRecovered`
        """
        ...


class KeystrokeSpawner:
    """Spawn processes by typing into the pane and scraping ``echo $!``.

    Parameters
    ----------
    settle : float
        Seconds to sleep after typing, before the first capture.
    timeout : float
        Seconds to keep polling the capture for a PID after the first miss.
        ``0`` captures exactly once.
    interval : float
        First poll interval, doubled after each miss.
    max_interval : float
        Ceiling for the poll interval.
    """

    def __init__(
        self,
        settle: float = SETTLE_SECONDS,
        timeout: float = PID_TIMEOUT_SECONDS,
        interval: float = PID_POLL_INTERVAL_SECONDS,
        max_interval: float = PID_POLL_MAX_INTERVAL_SECONDS,
    ) -> None:
        self.settle = settle
        self.timeout = timeout
        self.interval = interval
        self.max_interval = max_interval

    def spawn(self, pane: Pane, cmdline: str) -> Process:
        """Type ``cmdline`` into ``pane`` and return the started :class:`Process`.

        The returned command line includes the ``&`` appended for
        backgrounding.

        Raises
        ------
        :exc:`exc.NoCommandConfigured`
            ``cmdline`` is empty. Nothing is sent to tmux.
        :exc:`exc.PidNotRecovered`
            No digits-only line appeared before the timeout.
        """
        cmdline = cmdline.strip()
        if not cmdline:
            raise exc.NoCommandConfigured

        if not requests_background(cmdline):
            cmdline = f"{cmdline} &"

        logger.debug("launching in %s: %s", pane.target, cmdline)

        pane.send_keys(cmdline, enter=True, literal=True)
        pane.send_keys(PID_ECHO_COMMAND, enter=True, literal=True)

        pid = self.wait_for_pid(pane)
        if pid is None:
            raise exc.PidNotRecovered(cmdline)

        logger.info("started process %d in %s: %s", pid, pane.target, cmdline)

        return Process(pane=pane, cmdline=cmdline, pid=pid, spawner=self)

    def wait_for_pid(self, pane: Pane) -> int | None:
        """Capture ``pane`` until a PID line shows up or the timeout passes."""
        time.sleep(self.settle)

        deadline = time.monotonic() + self.timeout
        interval = self.interval

        while True:
            pid = find_pid(pane.capture_pane())
            if pid is not None:
                return pid

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None

            logger.debug("no PID in %s yet, polling again", pane.target)
            time.sleep(min(interval, remaining))
            interval = min(interval * 2, self.max_interval)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(settle={self.settle}, "
            f"timeout={self.timeout})"
        )


@dataclasses.dataclass()
class Process:
    """A process started in, or found running under, a :class:`Pane`.

    A process is controlled only through its pane. ``pid == 0`` means no
    process is known to be running; a positive ``pid`` is a claim that is
    checked against the OS before it is acted on.

    Examples
    --------
    >>> from tmuxctl.test.retry import retry_until

    >>> sh = session.new_window('sh', shell="env PS1='$ ' sh").active_pane
    >>> proc = sh.start_process('sleep', '30')
    >>> proc
    Process(pane=Pane(%... Window(...)), cmdline='sleep 30 &', pid=...)

    >>> proc.status()
    <ProcessState.Running: 'RUNNING'>

    >>> proc.kill()
    >>> retry_until(lambda: proc.status() is ProcessState.Dead)
    True
    """

    pane: Pane
    cmdline: str = ""
    pid: int = 0
    spawner: Spawner | None = dataclasses.field(
        default=None,
        repr=False,
        compare=False,
    )

    def _spawn(self, cmdline: str) -> Process:
        spawner = self.spawner if self.spawner is not None else KeystrokeSpawner()
        return spawner.spawn(self.pane, cmdline)

    def _replace(self, other: Process) -> None:
        self.pane = other.pane
        self.cmdline = other.cmdline
        self.pid = other.pid
        self.spawner = other.spawner

    def status(self) -> ProcessState:
        """Return the state of the process according to the OS."""
        if self.pid <= 0:
            return ProcessState.Idle
        if proctable.pid_exists(self.pid):
            return ProcessState.Running
        return ProcessState.Dead

    def is_running(self) -> bool:
        """Return True if the OS reports the PID alive."""
        return self.status() is ProcessState.Running

    def start(self) -> Process:
        """Start :attr:`cmdline` in the pane.

        A stale PID whose process has exited is discarded first.

        Raises
        ------
        :exc:`exc.ProcessAlreadyStarted`
            The recorded PID is still alive.
        :exc:`exc.NoCommandConfigured`
            No command line is set. Nothing is sent to tmux.
        :exc:`exc.PidNotRecovered`
        """
        if self.pid > 0 and proctable.pid_exists(self.pid):
            raise exc.ProcessAlreadyStarted(self.pid)

        if not self.cmdline.strip():
            raise exc.NoCommandConfigured

        self._replace(self._spawn(self.cmdline))
        return self

    def kill(self) -> None:
        """Kill the process by PID.

        Raises
        ------
        :exc:`exc.ProcessNotFound`
            The OS has no live process with this PID.
        """
        proctable.kill(self.pid)

    def restart(self) -> Process:
        """Kill the process if it is alive, then start it again in the same pane.

        A live process's command line is re-read from the OS, since that is
        what is actually running. A PID the OS no longer knows is treated as
        already dead. Either way the old PID is dropped before the new
        process is started: if starting fails the record is left with
        ``pid == 0`` and the command line that was to be started, so a
        recycled PID is never mistaken for this process.

        Raises
        ------
        :exc:`exc.NothingToRestart`
            Neither a live PID nor a command line is known.
        :exc:`exc.PidNotRecovered`
        """
        cmdline = self.cmdline

        if self.pid > 0:
            try:
                cmdline = proctable.cmdline(self.pid) or cmdline
                proctable.kill(self.pid)
            except exc.ProcessNotFound:
                logger.debug("process %d already gone, restarting", self.pid)
            self.pid = 0
            self.cmdline = cmdline

        if not cmdline.strip():
            raise exc.NothingToRestart

        self._replace(self._spawn(cmdline))
        return self
