"""Provide exceptions used by tmuxctl.

tmuxctl.exc
~~~~~~~~~~~

This module implements exceptions used throughout tmuxctl for error handling
in sessions, windows, panes and the processes started inside them.

Notes
-----
Every exception inherits from :exc:`TmuxctlException`. Absence of a session,
window or pane is always signalled with a subclass of
:exc:`ObjectDoesNotExist`, never with ``None`` or an empty list.
"""

from __future__ import annotations

import typing as t


class TmuxctlException(Exception):
    """Base exception for all tmuxctl errors."""


class TmuxCommandNotFound(TmuxctlException):
    """Raised when the tmux binary cannot be found on the system."""


class TmuxCommandError(TmuxctlException):
    """Raised when tmux exits with a non-zero status.

    The tmux diagnostic text is kept verbatim in :attr:`stderr`.
    """

    def __init__(
        self,
        cmd: t.Sequence[str] | None = None,
        stderr: t.Sequence[str] | None = None,
        *args: object,
    ) -> None:
        self.cmd = list(cmd) if cmd is not None else []
        self.stderr = list(stderr) if stderr is not None else []
        msg = "\n".join(self.stderr) or "tmux exited with an error"
        if self.cmd:
            msg = f"{msg} (command: {' '.join(self.cmd)})"
        super().__init__(msg)


class SubprocessTimeout(TmuxctlException):
    """Raised when a tmux subprocess does not finish within its timeout."""


class WaitTimeout(TmuxctlException):
    """Raised when a function times out waiting for a condition."""


class RecordDecodeError(TmuxctlException):
    """Base exception for tmux listing lines that cannot be decoded."""


class RecordFieldCountError(RecordDecodeError):
    """Raised if a listing line has the wrong number of fields."""

    def __init__(self, record: str, expected: int, got: int, *args: object) -> None:
        self.record = record
        self.expected = expected
        self.got = got
        super().__init__(f"{record} record: expected {expected} fields, got {got}")


class RecordFieldError(RecordDecodeError):
    """Raised if a numeric field of a listing line is not a base-10 integer."""

    def __init__(self, record: str, field: str, value: str, *args: object) -> None:
        self.record = record
        self.field = field
        self.value = value
        super().__init__(f"{record} record: field {field!r} is not a number: {value!r}")


class ObjectDoesNotExist(TmuxctlException):
    """The requested tmux object does not exist."""


class SessionNotFound(ObjectDoesNotExist):
    """Raised if a session cannot be found in the server listing."""

    def __init__(self, session_name: str | None = None, *args: object) -> None:
        self.session_name = session_name
        if session_name is not None:
            super().__init__(f'session "{session_name}" not found')
        else:
            super().__init__("Session not found")


class WindowNotFound(ObjectDoesNotExist):
    """Raised if a window cannot be found in its session's listing."""

    def __init__(
        self,
        window_name: str | None = None,
        session_name: str | None = None,
        *args: object,
    ) -> None:
        self.window_name = window_name
        self.session_name = session_name
        super().__init__(
            f'window "{window_name}" not found in session "{session_name}"',
        )


class PaneNotFound(ObjectDoesNotExist):
    """Raised if a pane cannot be found in its window's listing."""

    def __init__(
        self,
        pane_id: str | None = None,
        window_name: str | None = None,
        *args: object,
    ) -> None:
        self.pane_id = pane_id
        self.window_name = window_name
        if pane_id is not None:
            super().__init__(f'pane ID "{pane_id}" not found in window "{window_name}"')
        else:
            super().__init__("Pane not found")


class WindowError(TmuxctlException):
    """Base exception for window-related errors."""


class NoActivePane(WindowError):
    """Raised if a window reports no active pane."""

    def __init__(self, window_id: str | None = None, *args: object) -> None:
        super().__init__(f'no active pane for window "{window_id}"')


class NoActiveWindow(TmuxctlException):
    """Raised if no active window exists when one is expected."""

    def __init__(self, *args: object) -> None:
        super().__init__("No active windows found")


class TmuxSessionExists(TmuxctlException):
    """Raised if a tmux session with the requested name already exists."""

    def __init__(self, session_name: str, *args: object) -> None:
        self.session_name = session_name
        super().__init__(f'session named "{session_name}" already exists')


class TmuxWindowExists(TmuxctlException):
    """Raised if a window with the requested name already exists in a session."""

    def __init__(self, window_name: str, session_name: str, *args: object) -> None:
        self.window_name = window_name
        self.session_name = session_name
        super().__init__(
            f'window "{window_name}" already exists in session "{session_name}"',
        )


class BadSessionName(TmuxctlException):
    """Raised if a tmux session name is disallowed (e.g., empty, has colons/periods)."""

    def __init__(
        self,
        reason: str,
        session_name: str | None = None,
        *args: object,
    ) -> None:
        msg = f"Bad session name: {reason}"
        if session_name is not None:
            msg += f" (session name: {session_name})"
        super().__init__(msg)


class BadWindowName(TmuxctlException):
    """Raised if a window name cannot round-trip through the window listing."""

    def __init__(
        self,
        reason: str,
        window_name: str | None = None,
        *args: object,
    ) -> None:
        msg = f"Bad window name: {reason}"
        if window_name is not None:
            msg += f" (window name: {window_name})"
        super().__init__(msg)


class BadPaneTitle(TmuxctlException):
    """Raised if a pane title cannot round-trip through the pane listing."""

    def __init__(self, reason: str, title: str | None = None, *args: object) -> None:
        msg = f"Bad pane title: {reason}"
        if title is not None:
            msg += f" (title: {title})"
        super().__init__(msg)


class ProcessError(TmuxctlException):
    """Base exception for process control errors."""


class NoCommandConfigured(ProcessError):
    """Raised when starting a process without a command line."""

    def __init__(self, *args: object) -> None:
        super().__init__("no command configured")


class PidNotRecovered(ProcessError):
    """Raised if the PID of a new process cannot be scraped from its pane."""

    def __init__(self, cmdline: str | None = None, *args: object) -> None:
        self.cmdline = cmdline
        msg = "could not recover PID for new process"
        if cmdline:
            msg += f" ({cmdline})"
        super().__init__(msg)


class NothingToRestart(ProcessError):
    """Raised if a restart has neither a live PID nor a command line."""

    def __init__(self, *args: object) -> None:
        super().__init__("nothing to restart: process not running and no command line set")


class ProcessNotFound(ProcessError):
    """Raised if the OS process table has no live process with a PID."""

    def __init__(self, pid: int, *args: object) -> None:
        self.pid = pid
        super().__init__(f"no process with PID {pid}")


class ProcessAlreadyStarted(ProcessError):
    """Raised when starting a process whose PID is still alive."""

    def __init__(self, pid: int, *args: object) -> None:
        self.pid = pid
        super().__init__(f"process with PID {pid} already started")
