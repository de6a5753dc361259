"""tmuxctl, drive tmux sessions, windows, panes and the processes inside them."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .pane import Pane
from .process import KeystrokeSpawner, Process, ProcessState
from .server import Server
from .session import Session
from .window import Window

__all__ = (
    "KeystrokeSpawner",
    "Pane",
    "Process",
    "ProcessState",
    "Server",
    "Session",
    "Window",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
)
