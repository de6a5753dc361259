"""Format strings and record decoding for tmux listings.

tmuxctl.formats
~~~~~~~~~~~~~~~

Every listing command is issued with a ``-F`` format that emits one
single-quoted line per object, fields separated by single spaces. The
decoders below are strict: a line with the wrong number of fields, or a
non-numeric value where a number is expected, raises
:exc:`~tmuxctl.exc.RecordDecodeError` instead of guessing. Names and titles
therefore cannot contain spaces.

>>> parse_window_record("'@1 2 1 build'")
WindowRecord(id='@1', index=2, active=True, name='build')

>>> parse_pane_record("'%1 0 shell 0 4821'")
PaneRecord(id='%1', index=0, title='shell', active=False, pid=4821)
"""

from __future__ import annotations

import dataclasses
import re

from . import exc

#: ``list-sessions`` format: session name
SESSION_FORMAT = "'#{session_name}'"

#: ``list-windows`` format: window ID, index, active flag, name
WINDOW_FORMAT = "'#{window_id} #I #{window_active} #W'"

#: ``list-panes`` format: pane ID, index, title, active flag, shell PID
PANE_FORMAT = "'#D #P #T #{pane_active} #{pane_pid}'"

#: ``list-panes`` format used for PIDs only
PANE_PID_FORMAT = "'#{pane_pid}'"

#: ``split-window -P`` format used to report the new pane
PANE_ID_FORMAT = "'#{pane_id}'"

FIELD_SEPARATOR = " "
QUOTE = "'"
INTEGER_RE = re.compile(r"-?[0-9]+")


@dataclasses.dataclass(frozen=True)
class SessionRecord:
    """One decoded ``list-sessions`` line."""

    name: str


@dataclasses.dataclass(frozen=True)
class WindowRecord:
    """One decoded ``list-windows`` line."""

    id: str
    index: int
    active: bool
    name: str


@dataclasses.dataclass(frozen=True)
class PaneRecord:
    """One decoded ``list-panes`` line."""

    id: str
    index: int
    title: str
    active: bool
    pid: int


def unquote(line: str) -> str:
    """Strip a single leading and a single trailing quote, if present.

    >>> unquote("'main'")
    'main'
    >>> unquote("''main''")
    "'main'"
    """
    if line.startswith(QUOTE):
        line = line[1:]
    if line.endswith(QUOTE):
        line = line[:-1]
    return line


def split_fields(line: str, record: str, expected: int) -> list[str]:
    """Unquote ``line`` and split it into exactly ``expected`` fields."""
    fields = unquote(line).split(FIELD_SEPARATOR)
    if len(fields) != expected:
        raise exc.RecordFieldCountError(record=record, expected=expected, got=len(fields))
    return fields


def parse_int(value: str, record: str, field: str) -> int:
    """Parse a base-10 integer field, naming the field on failure.

    >>> parse_int("42", "pane", "pid")
    42
    """
    if INTEGER_RE.fullmatch(value) is None:
        raise exc.RecordFieldError(record=record, field=field, value=value)
    return int(value, 10)


def parse_flag(value: str) -> bool:
    """Return ``True`` for tmux's ``"1"`` flag, ``False`` for anything else."""
    return value == "1"


def parse_session_record(line: str) -> SessionRecord:
    """Decode a ``list-sessions`` line.

    >>> parse_session_record("'dev'")
    SessionRecord(name='dev')
    """
    return SessionRecord(name=unquote(line))


def parse_window_record(line: str) -> WindowRecord:
    """Decode a ``list-windows`` line into a :class:`WindowRecord`.

    Raises
    ------
    :exc:`exc.RecordFieldCountError`
        The line does not have exactly 4 fields.
    :exc:`exc.RecordFieldError`
        The index is not a number.
    """
    window_id, index, active, name = split_fields(line, "window", 4)
    return WindowRecord(
        id=window_id,
        index=parse_int(index, "window", "index"),
        active=parse_flag(active),
        name=name,
    )


def parse_pane_record(line: str) -> PaneRecord:
    """Decode a ``list-panes`` line into a :class:`PaneRecord`.

    Raises
    ------
    :exc:`exc.RecordFieldCountError`
        The line does not have exactly 5 fields.
    :exc:`exc.RecordFieldError`
        The index or the PID is not a number.
    """
    pane_id, index, title, active, pid = split_fields(line, "pane", 5)
    return PaneRecord(
        id=pane_id,
        index=parse_int(index, "pane", "index"),
        title=title,
        active=parse_flag(active),
        pid=parse_int(pid, "pane", "pid"),
    )


def parse_pid_record(line: str) -> int:
    """Decode a single-field PID line.

    >>> parse_pid_record("'4821'")
    4821
    """
    (pid,) = split_fields(line, "pid", 1)
    return parse_int(pid, "pid", "pid")
