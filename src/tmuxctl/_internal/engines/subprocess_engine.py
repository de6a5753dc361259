"""Subprocess engine for tmuxctl."""

from __future__ import annotations

import logging

from tmuxctl.common import tmux_cmd

logger = logging.getLogger(__name__)


class SubprocessCommandRunner:
    """Runner that executes every tmux command as a blocking subprocess.

    Parameters
    ----------
    tmux_bin : str, optional
        Path to the tmux binary, looked up on ``$PATH`` when omitted.
    timeout : float, optional
        Per-command deadline in seconds. ``None`` lets a hung tmux hang the
        caller.
    """

    def __init__(
        self,
        tmux_bin: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.tmux_bin = tmux_bin
        self.timeout = timeout

    def run(self, *args: str) -> tmux_cmd:
        """Run ``tmux <args>`` and return the finished :class:`tmux_cmd`."""
        return tmux_cmd(*args, tmux_bin=self.tmux_bin, timeout=self.timeout)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(tmux_bin={self.tmux_bin!r}, "
            f"timeout={self.timeout!r})"
        )
