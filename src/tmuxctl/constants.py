"""Constant variables for tmuxctl.

Timing values used by the process spawner can be overridden with environment
variables, read once at import time.
"""

from __future__ import annotations

import enum
import os

#: Seconds to wait after typing a command before the first pane capture.
#: Configurable via :envvar:`TMUXCTL_SETTLE_SECONDS`.
SETTLE_SECONDS = float(os.getenv("TMUXCTL_SETTLE_SECONDS", 0.1))

#: Upper bound in seconds on polling the pane for the PID echo after the
#: settling delay. ``0`` captures exactly once.
#: Configurable via :envvar:`TMUXCTL_PID_TIMEOUT_SECONDS`.
PID_TIMEOUT_SECONDS = float(os.getenv("TMUXCTL_PID_TIMEOUT_SECONDS", 1.0))

#: First interval between PID polls, doubled after each miss.
#: Configurable via :envvar:`TMUXCTL_PID_POLL_INTERVAL_SECONDS`.
PID_POLL_INTERVAL_SECONDS = float(
    os.getenv("TMUXCTL_PID_POLL_INTERVAL_SECONDS", 0.05),
)

#: Ceiling for the PID poll backoff.
#: Configurable via :envvar:`TMUXCTL_PID_POLL_MAX_INTERVAL_SECONDS`.
PID_POLL_MAX_INTERVAL_SECONDS = float(
    os.getenv("TMUXCTL_PID_POLL_MAX_INTERVAL_SECONDS", 0.4),
)

#: Shell snippet typed into a pane to print the PID of the last background job.
PID_ECHO_COMMAND = "echo $!"


class PaneDirection(enum.Enum):
    """Used for *direction* in :meth:`Pane.split()`."""

    Above = "ABOVE"
    Below = "BELOW"  # default with no args
    Right = "RIGHT"
    Left = "LEFT"


PANE_DIRECTION_FLAG_MAP: dict[PaneDirection, list[str]] = {
    # -v is assumed, but for explicitness it is passed
    PaneDirection.Above: ["-v", "-b"],
    PaneDirection.Below: ["-v"],
    PaneDirection.Right: ["-h"],
    PaneDirection.Left: ["-h", "-b"],
}
