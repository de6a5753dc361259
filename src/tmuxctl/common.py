"""Helper methods for tmuxctl.

tmuxctl.common
~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import shutil
import subprocess
import typing as t

from . import exc

logger = logging.getLogger(__name__)


class tmux_cmd:
    """Run any :term:`tmux(1)` command through :py:mod:`subprocess`.

    The command always runs to completion; ``stdout`` and ``stderr`` are
    split into lines, with trailing empty lines removed from ``stdout``.

    Examples
    --------
    >>> proc = tmux_cmd(f'-L{server.socket_name}', 'new-session', '-d', '-s', 'demo')
    >>> proc.returncode
    0
    >>> server.has_session('demo')
    True

    Parameters
    ----------
    tmux_bin : str, optional
        Path to the tmux binary. Looked up on ``$PATH`` when omitted.
    timeout : float, optional
        Seconds to wait for tmux before raising
        :exc:`exc.SubprocessTimeout`. ``None`` waits forever.
    """

    def __init__(
        self,
        *args: t.Any,
        tmux_bin: str | None = None,
        timeout: float | None = None,
    ) -> None:
        tmux_bin = tmux_bin or shutil.which("tmux")
        if not tmux_bin:
            raise exc.TmuxCommandNotFound

        cmd = [tmux_bin]
        cmd += args  # add the command arguments to cmd
        cmd = [str(c) for c in cmd]

        self.cmd = cmd

        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="backslashreplace",
            )
            stdout, stderr = self.process.communicate(timeout=timeout)
            returncode = self.process.returncode
        except subprocess.TimeoutExpired:
            self.process.kill()
            self.process.wait()
            msg = f"tmux subprocess timed out after {timeout}s"
            raise exc.SubprocessTimeout(msg) from None
        except Exception:
            logger.exception(f"Exception for {subprocess.list2cmdline(cmd)}")
            raise

        self.returncode = returncode

        stdout_split = stdout.split("\n")
        # remove trailing newlines from stdout
        while stdout_split and stdout_split[-1] == "":
            stdout_split.pop()
        self.stdout = stdout_split

        stderr_split = stderr.split("\n")
        self.stderr = list(filter(None, stderr_split))  # filter empty values

        logger.debug(
            "self.stdout for {cmd}: {stdout}".format(
                cmd=" ".join(cmd),
                stdout=self.stdout,
            ),
        )


def session_check_name(session_name: str | None) -> None:
    """Raise exception session name invalid, modeled after tmux function.

    tmux(1) session names may not be empty, or include periods or colons.
    These delimiters are reserved for noting session, window and pane.

    Parameters
    ----------
    session_name : str
        Name of session.

    Raises
    ------
    :exc:`exc.BadSessionName`
        Invalid session name.
    """
    if session_name is None or len(session_name) == 0:
        raise exc.BadSessionName(reason="empty", session_name=session_name)
    if "." in session_name:
        raise exc.BadSessionName(reason="contains periods", session_name=session_name)
    if ":" in session_name:
        raise exc.BadSessionName(reason="contains colons", session_name=session_name)
    if "'" in session_name:
        raise exc.BadSessionName(reason="contains quotes", session_name=session_name)


def window_check_name(window_name: str | None) -> None:
    """Raise exception if a window name would not survive a window listing.

    Window records are split on single spaces, so names may not contain
    whitespace in addition to the delimiters reserved for targets. tmux
    reads an all-digits window target as an index, even with ``=``, so
    such names are refused too.

    Raises
    ------
    :exc:`exc.BadWindowName`
        Invalid window name.
    """
    if window_name is None or len(window_name) == 0:
        raise exc.BadWindowName(reason="empty", window_name=window_name)
    if window_name.isdigit():
        raise exc.BadWindowName(reason="all digits", window_name=window_name)
    if any(c.isspace() for c in window_name):
        raise exc.BadWindowName(reason="contains whitespace", window_name=window_name)
    if "." in window_name:
        raise exc.BadWindowName(reason="contains periods", window_name=window_name)
    if ":" in window_name:
        raise exc.BadWindowName(reason="contains colons", window_name=window_name)
    if "'" in window_name:
        raise exc.BadWindowName(reason="contains quotes", window_name=window_name)


def pane_check_title(title: str | None) -> None:
    """Raise exception if a pane title would not survive a pane listing.

    Raises
    ------
    :exc:`exc.BadPaneTitle`
        Invalid pane title.
    """
    if title is None or len(title) == 0:
        raise exc.BadPaneTitle(reason="empty", title=title)
    if any(c.isspace() for c in title):
        raise exc.BadPaneTitle(reason="contains whitespace", title=title)
    if "'" in title:
        raise exc.BadPaneTitle(reason="contains quotes", title=title)
