"""Helper methods for tmuxctl tests and downstream tmuxctl libraries."""

from __future__ import annotations

from tmuxctl.test.constants import (
    RETRY_INTERVAL_SECONDS,
    RETRY_TIMEOUT_SECONDS,
    TEST_SESSION_PREFIX,
)
from tmuxctl.test.random import get_test_session_name, get_test_window_name, namer
from tmuxctl.test.retry import retry_until
from tmuxctl.test.temporary import temp_session, temp_window

__all__ = (
    "RETRY_INTERVAL_SECONDS",
    "RETRY_TIMEOUT_SECONDS",
    "TEST_SESSION_PREFIX",
    "get_test_session_name",
    "get_test_window_name",
    "namer",
    "retry_until",
    "temp_session",
    "temp_window",
)
