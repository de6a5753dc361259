"""Test helpers: a scripted stand-in for the tmux binary."""

from __future__ import annotations

import collections
import dataclasses
import typing as t

from tmuxctl.pane import Pane
from tmuxctl.server import Server
from tmuxctl.session import Session
from tmuxctl.window import Window


@dataclasses.dataclass()
class FakeResult:
    """Result of a scripted tmux call, shaped like :class:`tmuxctl.common.tmux_cmd`."""

    cmd: list[str]
    stdout: list[str] = dataclasses.field(default_factory=list)
    stderr: list[str] = dataclasses.field(default_factory=list)
    returncode: int = 0


class FakeCommandRunner:
    """Command runner that answers tmux subcommands from scripted replies.

    Replies registered with :meth:`on` are consumed in order; the last one
    for a subcommand keeps answering once the others are used up.
    Subcommands with no reply succeed with empty output. Every call is
    recorded in :attr:`calls`.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._replies: dict[str, collections.deque[FakeResult]] = (
            collections.defaultdict(collections.deque)
        )

    def on(
        self,
        subcommand: str,
        stdout: list[str] | None = None,
        stderr: list[str] | None = None,
        returncode: int = 0,
    ) -> FakeCommandRunner:
        self._replies[subcommand].append(
            FakeResult(
                cmd=["tmux", subcommand],
                stdout=list(stdout or []),
                stderr=list(stderr or []),
                returncode=returncode,
            ),
        )
        return self

    def run(self, *args: str) -> FakeResult:
        self.calls.append(args)
        subcommand = subcommand_of(args)
        queue = self._replies.get(subcommand)
        if not queue:
            return FakeResult(cmd=["tmux", *args])
        if len(queue) > 1:
            return queue.popleft()
        return queue[0]

    def subcommands(self) -> list[str]:
        """Return the subcommand of every recorded call, in order."""
        return [subcommand_of(call) for call in self.calls]

    def calls_for(self, subcommand: str) -> list[tuple[str, ...]]:
        """Return the recorded calls of ``subcommand``."""
        return [call for call in self.calls if subcommand_of(call) == subcommand]


def subcommand_of(args: t.Sequence[str]) -> str:
    """Return the tmux subcommand, skipping ``-L``/``-S``/``-f`` server flags."""
    for arg in args:
        if not arg.startswith("-"):
            return arg
    return ""


def make_server(runner: FakeCommandRunner) -> Server:
    """Return a :class:`Server` wired to ``runner``."""
    return Server(socket_name="fake", command_runner=runner)


def make_pane(runner: FakeCommandRunner, pid: int = 100) -> Pane:
    """Return pane ``%1`` of window ``S:w1``, wired to ``runner``."""
    session = Session(server=make_server(runner), name="S")
    window = Window(session=session, id="@1", index=1, active=True, name="w1")
    return Pane(window=window, id="%1", index=0, title="host", active=True, pid=pid)
