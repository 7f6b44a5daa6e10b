import signal
import subprocess
import time

import pytest

from discharge_monitor import privileged
from discharge_monitor.errors import ExecutionError, PrivilegeDenied
from discharge_monitor.privileged import PrivilegedRunner, is_privilege_available, run_privileged


class FakePopen:
    """Stand-in for an elevated shell process."""

    stdout = ""
    stderr = ""
    returncode = 0
    hang = False
    pid = 424242
    instances = []

    def __init__(self, args, **kwargs):
        self.args = args
        self.input = None
        self.killed = False
        FakePopen.instances.append(self)

    def communicate(self, input=None, timeout=None):
        if input is not None:
            self.input = input
        if self.hang and not self.killed:
            raise subprocess.TimeoutExpired(self.args, timeout)
        return self.stdout, self.stderr

    def kill(self):
        self.killed = True


@pytest.fixture
def fake_shell(monkeypatch):
    FakePopen.instances = []
    killed_groups = []

    def killpg(pgid, sig):
        killed_groups.append((pgid, sig))
        FakePopen.instances[-1].killed = True

    monkeypatch.setattr(privileged.os, "killpg", killpg)

    def factory(stdout="", stderr="", returncode=0, hang=False):
        attrs = {"stdout": stdout, "stderr": stderr, "returncode": returncode, "hang": hang}
        shell = type("Shell", (FakePopen,), attrs)
        monkeypatch.setattr(privileged.subprocess, "Popen", shell)
        return shell

    factory.killed_groups = killed_groups
    return factory


def test_command_written_with_exit(fake_shell):
    fake_shell(stdout="-450000\nextra\n")
    assert run_privileged("cat /sys/class/power_supply/battery/current_now") == "-450000"
    proc = FakePopen.instances[-1]
    assert proc.args == ["su"]
    assert proc.input == "cat /sys/class/power_supply/battery/current_now\nexit\n"


def test_shell_split_on_whitespace(fake_shell):
    fake_shell(stdout="1\n")
    run_privileged("echo 1", shell="sudo -n sh")
    assert FakePopen.instances[-1].args == ["sudo", "-n", "sh"]


def test_timeout_kills_shell(fake_shell):
    fake_shell(hang=True)
    with pytest.raises(ExecutionError, match="timed out"):
        run_privileged("cat current_now", timeout=0.1)
    assert FakePopen.instances[-1].killed
    assert fake_shell.killed_groups == [(FakePopen.pid, signal.SIGKILL)]


def test_refused_shell_is_denied(fake_shell):
    fake_shell(stderr="su: permission denied\n", returncode=1)
    with pytest.raises(PrivilegeDenied, match="permission denied"):
        run_privileged("cat current_now")


def test_silent_success_is_execution_error(fake_shell):
    fake_shell(stdout="\n", returncode=0)
    with pytest.raises(ExecutionError):
        run_privileged("cat current_now")


def test_missing_shell_is_denied():
    with pytest.raises(PrivilegeDenied):
        run_privileged("echo hi", shell="/nonexistent/elevated-shell")


def test_runs_through_plain_shell():
    assert run_privileged("echo hello", shell="sh", timeout=5) == "hello"


def test_runner_binds_shell_and_timeout(fake_shell):
    fake_shell(stdout="42\n")
    runner = PrivilegedRunner(shell="doas sh", timeout=1)
    assert runner("echo 42") == "42"
    assert FakePopen.instances[-1].args == ["doas", "sh"]


def test_privilege_probe(fake_shell):
    fake_shell(stdout="test\n")
    assert is_privilege_available() is True
    fake_shell(returncode=1)
    assert is_privilege_available() is False
    assert is_privilege_available(shell="/nonexistent/elevated-shell") is False


def test_timeout_not_held_up_by_child_keeping_the_pipe():
    started = time.monotonic()
    with pytest.raises(ExecutionError, match="timed out"):
        run_privileged("sleep 6", shell="sh", timeout=0.3)
    assert time.monotonic() - started < 2
