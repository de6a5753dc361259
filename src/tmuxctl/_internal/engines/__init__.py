"""Command execution engines for tmuxctl."""

from __future__ import annotations

__all__ = ("SubprocessCommandRunner",)

from tmuxctl._internal.engines.subprocess_engine import SubprocessCommandRunner
