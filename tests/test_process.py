"""Tests for starting and restarting processes in panes."""

from __future__ import annotations

import typing as t

import pytest

from tests.helpers import FakeCommandRunner, make_pane
from tmuxctl import exc, proctable
from tmuxctl.process import (
    KeystrokeSpawner,
    Process,
    ProcessState,
    find_pid,
    requests_background,
)
from tmuxctl.test.retry import retry_until

if t.TYPE_CHECKING:
    from tmuxctl.session import Session

CAPTURE_WITH_PID = ["$ sleep 30 &", "[1] 4821", "$ echo $!", "4821", "$"]


def fast_spawner(timeout: float = 0) -> KeystrokeSpawner:
    return KeystrokeSpawner(settle=0, timeout=timeout, interval=0.01, max_interval=0.02)


class FakeProcTable:
    """Replaces :mod:`tmuxctl.proctable` lookups with a dict of live PIDs."""

    def __init__(self, live: dict[int, str] | None = None) -> None:
        self.live = dict(live or {})
        self.killed: list[int] = []

    def pid_exists(self, pid: int) -> bool:
        return pid in self.live

    def cmdline(self, pid: int) -> str:
        if pid not in self.live:
            raise exc.ProcessNotFound(pid)
        return self.live[pid]

    def kill(self, pid: int) -> None:
        if pid not in self.live:
            raise exc.ProcessNotFound(pid)
        self.killed.append(pid)
        del self.live[pid]


@pytest.fixture
def fake_proctable(monkeypatch: pytest.MonkeyPatch) -> FakeProcTable:
    table = FakeProcTable()
    monkeypatch.setattr(proctable, "pid_exists", table.pid_exists)
    monkeypatch.setattr(proctable, "cmdline", table.cmdline)
    monkeypatch.setattr(proctable, "kill", table.kill)
    return table


class BackgroundFixture(t.NamedTuple):
    """Test fixture for requests_background()."""

    test_id: str
    cmdline: str
    expected: bool


BACKGROUND_FIXTURES: list[BackgroundFixture] = [
    BackgroundFixture("plain", "sleep 30", False),
    BackgroundFixture("trailing_ampersand", "sleep 30 &", True),
    BackgroundFixture("trailing_ampersand_space", "sleep 30 & ", True),
    BackgroundFixture("and_list", "make && ./run", False),
    BackgroundFixture("trailing_and", "make &&", False),
]


@pytest.mark.parametrize(
    list(BackgroundFixture._fields),
    BACKGROUND_FIXTURES,
    ids=[test.test_id for test in BACKGROUND_FIXTURES],
)
def test_requests_background(test_id: str, cmdline: str, expected: bool) -> None:
    """Only a trailing single ``&`` counts as backgrounding."""
    assert requests_background(cmdline) is expected


def test_find_pid() -> None:
    """The most recent digits-only line wins."""
    assert find_pid(CAPTURE_WITH_PID) == 4821
    assert find_pid(["100", "$ echo $!", "200", "$"]) == 200


def test_find_pid_ignores_mixed_lines() -> None:
    """Lines with anything besides digits are skipped."""
    assert find_pid(["[1] 4821", "$ echo 4821", " 4821", "$"]) is None


def test_spawn() -> None:
    """The command is typed backgrounded, then ``echo $!`` reports the PID."""
    runner = FakeCommandRunner().on("capture-pane", stdout=CAPTURE_WITH_PID)
    pane = make_pane(runner)
    spawner = fast_spawner()

    proc = spawner.spawn(pane, "sleep 30")

    assert proc.pid == 4821
    assert proc.cmdline == "sleep 30 &"
    assert proc.pane is pane
    assert proc.spawner is spawner
    assert runner.calls_for("send-keys") == [
        ("-Lfake", "send-keys", "-t", "=S:=w1.%1", "-l", "sleep 30 &"),
        ("-Lfake", "send-keys", "-t", "=S:=w1.%1", "Enter"),
        ("-Lfake", "send-keys", "-t", "=S:=w1.%1", "-l", "echo $!"),
        ("-Lfake", "send-keys", "-t", "=S:=w1.%1", "Enter"),
    ]


def test_spawn_keeps_existing_ampersand() -> None:
    """A command line already ending in ``&`` is not backgrounded twice."""
    runner = FakeCommandRunner().on("capture-pane", stdout=CAPTURE_WITH_PID)

    proc = fast_spawner().spawn(make_pane(runner), "sleep 30 &")

    assert proc.cmdline == "sleep 30 &"
    assert runner.calls_for("send-keys")[0][-1] == "sleep 30 &"


def test_spawn_empty_command() -> None:
    """An empty command line is refused before any tmux call."""
    runner = FakeCommandRunner()

    with pytest.raises(exc.NoCommandConfigured, match="no command configured"):
        fast_spawner().spawn(make_pane(runner), "   ")

    assert runner.calls == []


def test_spawn_polls_until_pid() -> None:
    """A capture without a PID line is retried until one shows up."""
    runner = (
        FakeCommandRunner()
        .on("capture-pane", stdout=["$ sleep 30 &"])
        .on("capture-pane", stdout=["$ sleep 30 &", "$ echo $!"])
        .on("capture-pane", stdout=CAPTURE_WITH_PID)
    )

    proc = fast_spawner(timeout=1).spawn(make_pane(runner), "sleep 30")

    assert proc.pid == 4821
    assert runner.subcommands().count("capture-pane") == 3
    # keys are typed once, however many captures it takes
    assert runner.subcommands().count("send-keys") == 4


def test_spawn_pid_not_recovered() -> None:
    """No PID line before the timeout raises PidNotRecovered."""
    runner = FakeCommandRunner().on("capture-pane", stdout=["$ sleep 30 &", "$"])

    with pytest.raises(exc.PidNotRecovered, match="could not recover PID"):
        fast_spawner(timeout=0.05).spawn(make_pane(runner), "sleep 30")

    assert runner.subcommands().count("send-keys") == 4


def test_pane_start_process() -> None:
    """Pane.start_process joins the arguments into one command line."""
    runner = FakeCommandRunner().on("capture-pane", stdout=CAPTURE_WITH_PID)
    pane = make_pane(runner)

    proc = pane.start_process("sleep", "30", spawner=fast_spawner())

    assert proc.cmdline == "sleep 30 &"
    assert proc.pid == 4821


def test_status(fake_proctable: FakeProcTable) -> None:
    """status() is confirmed against the OS process table."""
    pane = make_pane(FakeCommandRunner())
    fake_proctable.live[4821] = "sleep 30"

    assert Process(pane=pane).status() is ProcessState.Idle
    assert Process(pane=pane, pid=4821).status() is ProcessState.Running
    assert Process(pane=pane, pid=4821).is_running()
    assert Process(pane=pane, pid=4822).status() is ProcessState.Dead


def test_start_without_command(fake_proctable: FakeProcTable) -> None:
    """Starting with no command line raises before any tmux call."""
    runner = FakeCommandRunner()
    proc = Process(pane=make_pane(runner))

    with pytest.raises(exc.NoCommandConfigured):
        proc.start()

    assert runner.calls == []
    assert proc.pid == 0


def test_start(fake_proctable: FakeProcTable) -> None:
    """start() fills in the PID of the spawned process."""
    runner = FakeCommandRunner().on("capture-pane", stdout=CAPTURE_WITH_PID)
    proc = Process(pane=make_pane(runner), cmdline="sleep 30", spawner=fast_spawner())

    assert proc.start() is proc
    assert proc.pid == 4821
    assert proc.cmdline == "sleep 30 &"


def test_start_stale_pid(fake_proctable: FakeProcTable) -> None:
    """A recorded PID that is dead does not block start()."""
    runner = FakeCommandRunner().on("capture-pane", stdout=CAPTURE_WITH_PID)
    proc = Process(
        pane=make_pane(runner),
        cmdline="sleep 30",
        pid=1234,
        spawner=fast_spawner(),
    )

    proc.start()

    assert proc.pid == 4821


def test_start_already_running(fake_proctable: FakeProcTable) -> None:
    """start() refuses while the recorded PID is alive."""
    runner = FakeCommandRunner()
    fake_proctable.live[1234] = "sleep 30"
    proc = Process(pane=make_pane(runner), cmdline="sleep 30", pid=1234)

    with pytest.raises(exc.ProcessAlreadyStarted):
        proc.start()

    assert runner.calls == []


def test_kill(fake_proctable: FakeProcTable) -> None:
    """kill() signals the recorded PID."""
    fake_proctable.live[1234] = "sleep 30"
    Process(pane=make_pane(FakeCommandRunner()), pid=1234).kill()

    assert fake_proctable.killed == [1234]


def test_kill_not_found(fake_proctable: FakeProcTable) -> None:
    """Killing a PID the OS does not know raises ProcessNotFound."""
    with pytest.raises(exc.ProcessNotFound):
        Process(pane=make_pane(FakeCommandRunner()), pid=1234).kill()


def test_restart_live_process(fake_proctable: FakeProcTable) -> None:
    """A live process is killed and relaunched from its OS command line."""
    fake_proctable.live[1234] = "sleep 60"
    runner = FakeCommandRunner().on("capture-pane", stdout=["5000", "$"])
    proc = Process(
        pane=make_pane(runner),
        cmdline="sleep 30 &",
        pid=1234,
        spawner=fast_spawner(),
    )

    assert proc.restart() is proc

    assert fake_proctable.killed == [1234]
    assert proc.pid == 5000
    assert proc.cmdline == "sleep 60 &"
    assert runner.calls_for("send-keys")[0][-1] == "sleep 60 &"


def test_restart_dead_process(fake_proctable: FakeProcTable) -> None:
    """A dead PID is treated as already stopped and the command relaunched."""
    runner = FakeCommandRunner().on("capture-pane", stdout=["5000", "$"])
    proc = Process(
        pane=make_pane(runner),
        cmdline="sleep 30 &",
        pid=1234,
        spawner=fast_spawner(),
    )

    proc.restart()

    assert fake_proctable.killed == []
    assert proc.pid == 5000
    assert proc.cmdline == "sleep 30 &"


def test_restart_nothing_to_restart(fake_proctable: FakeProcTable) -> None:
    """Neither a live PID nor a command line: nothing to restart."""
    runner = FakeCommandRunner()

    with pytest.raises(exc.NothingToRestart):
        Process(pane=make_pane(runner)).restart()

    assert runner.calls == []


def test_restart_quoted_cmdline(fake_proctable: FakeProcTable) -> None:
    """An OS argument holding spaces is retyped quoted, as one argument."""
    fake_proctable.live[1234] = proctable.format_cmdline(
        ["sh", "-c", "sleep 5; echo done"],
    )
    runner = FakeCommandRunner().on("capture-pane", stdout=["5000", "$"])
    proc = Process(pane=make_pane(runner), pid=1234, spawner=fast_spawner())

    proc.restart()

    assert runner.calls_for("send-keys")[0][-1] == "sh -c 'sleep 5; echo done' &"
    assert proc.cmdline == "sh -c 'sleep 5; echo done' &"


def test_restart_failure_after_kill(fake_proctable: FakeProcTable) -> None:
    """Once the old process is killed its PID is dropped, even if the start fails."""
    fake_proctable.live[1234] = "sleep 60"
    runner = FakeCommandRunner().on("capture-pane", stdout=["$"])
    proc = Process(
        pane=make_pane(runner),
        cmdline="sleep 30 &",
        pid=1234,
        spawner=fast_spawner(),
    )

    with pytest.raises(exc.PidNotRecovered):
        proc.restart()

    assert fake_proctable.killed == [1234]
    assert proc.pid == 0
    assert proc.cmdline == "sleep 60"
    assert proc.status() is ProcessState.Idle


def test_restart_failure_dead_pid(fake_proctable: FakeProcTable) -> None:
    """A dead PID is dropped too, and the recorded command line kept."""
    runner = FakeCommandRunner().on("capture-pane", stdout=["$"])
    proc = Process(
        pane=make_pane(runner),
        cmdline="sleep 30 &",
        pid=1234,
        spawner=fast_spawner(),
    )

    with pytest.raises(exc.PidNotRecovered):
        proc.restart()

    assert proc.pid == 0
    assert proc.cmdline == "sleep 30 &"


def test_restart_unreadable_cmdline(fake_proctable: FakeProcTable) -> None:
    """A killed process with no readable or recorded command line is not restarted."""
    fake_proctable.live[1234] = ""
    runner = FakeCommandRunner()
    proc = Process(pane=make_pane(runner), pid=1234)

    with pytest.raises(exc.NothingToRestart):
        proc.restart()

    assert fake_proctable.killed == [1234]
    assert proc.pid == 0
    assert runner.calls == []


def test_process_repr() -> None:
    """The spawner is left out of the repr."""
    proc = Process(pane=make_pane(FakeCommandRunner()), cmdline="sleep 30 &", pid=7)

    assert repr(proc) == (
        "Process(pane=Pane(%1 Window(@1 1:w1, Session(S))), "
        "cmdline='sleep 30 &', pid=7)"
    )


#
# Live tmux
#
def test_start_process_live(session: Session) -> None:
    """A process started in a pane is a child of the pane's shell."""
    window = session.new_window("w1", shell="env PS1='$ ' sh")
    pane = window.active_pane

    proc = pane.start_process("sleep", "30")

    assert proc.pid > 0
    assert proc.is_running()
    assert proctable.cmdline(proc.pid) == "sleep 30"
    assert pane.pid in [p.pid for p in proctable.get_process(proc.pid).parents()]

    proc.kill()
    assert retry_until(lambda: not proc.is_running())
    assert proc.status() is ProcessState.Dead


def test_restart_process_live(session: Session) -> None:
    """Restarting kills the old PID and records a new one."""
    window = session.new_window("w1", shell="env PS1='$ ' sh")
    pane = window.active_pane

    proc = pane.start_process("sleep", "30")
    old_pid = proc.pid

    proc.restart()

    assert proc.pid != old_pid
    assert proc.is_running()
    assert retry_until(lambda: not proctable.pid_exists(old_pid))
    assert proc.cmdline == "sleep 30 &"

    proc.kill()
