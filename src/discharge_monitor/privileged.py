"""
Privileged command channel - one-line reads through an elevated shell.
Missing or refused privilege is an ordinary runtime condition here.
"""

import logging
import os
import signal
import subprocess

from .config import PRIVILEGED_SHELL, PRIVILEGED_TIMEOUT
from .errors import ExecutionError, PrivilegeDenied

log = logging.getLogger(__name__)


def run_privileged(
    command: str, shell: str = PRIVILEGED_SHELL, timeout: float = PRIVILEGED_TIMEOUT
) -> str:
    """
    Run a command in an elevated shell and return its first output line.

    The command is written to the shell's stdin followed by ``exit``, so any
    shell that reads commands from stdin works (``su``, ``sudo -n sh``).

    Args:
        command: Shell command line, e.g. ``cat /sys/.../current_now``.
        shell: Elevated shell to spawn; split on whitespace.
        timeout: Seconds to wait before killing the shell.

    Returns:
        First line of stdout, stripped.

    Raises:
        PrivilegeDenied: the shell is missing or refused to run.
        ExecutionError: the shell timed out or printed nothing.
    """
    try:
        proc = subprocess.Popen(
            shell.split(),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            start_new_session=True,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise PrivilegeDenied(f"cannot start {shell!r}: {e}") from e

    try:
        stdout, stderr = proc.communicate(f"{command}\nexit\n", timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_group(proc)
        raise ExecutionError(f"{command!r} timed out after {timeout}s") from None

    lines = stdout.splitlines()
    result = lines[0].strip() if lines else ""
    log.debug("Privileged command %r -> %r (rc=%s)", command, result, proc.returncode)

    if result:
        return result
    if proc.returncode != 0:
        reason = stderr.strip() or f"exit status {proc.returncode}"
        raise PrivilegeDenied(f"{shell!r} refused {command!r}: {reason}")
    raise ExecutionError(f"{command!r} produced no output")


def _kill_group(proc):
    """Kill the shell and anything it started; children may hold the pipes."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        proc.kill()
    try:
        proc.communicate(timeout=1)
    except subprocess.TimeoutExpired:
        log.warning("Privileged shell %d did not exit after kill", proc.pid)


class PrivilegedRunner:
    """run_privileged bound to one shell and timeout."""

    def __init__(self, shell: str = PRIVILEGED_SHELL, timeout: float = PRIVILEGED_TIMEOUT):
        self.shell = shell
        self.timeout = timeout

    def __call__(self, command: str) -> str:
        return run_privileged(command, shell=self.shell, timeout=self.timeout)


def is_privilege_available(
    shell: str = PRIVILEGED_SHELL, timeout: float = PRIVILEGED_TIMEOUT
) -> bool:
    """Check whether the elevated shell will run commands for us."""
    try:
        return run_privileged("echo test", shell=shell, timeout=timeout) == "test"
    except (PrivilegeDenied, ExecutionError) as e:
        log.debug("Privilege check failed: %s", e)
        return False
