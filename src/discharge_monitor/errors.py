"""Exceptions raised by the discharge monitor core."""


class MonitorError(Exception):
    """Base class for all discharge monitor errors."""


class ConfigError(MonitorError):
    """Configuration file holds a value the monitor cannot work with."""


class SourceUnavailable(MonitorError):
    """A single metric source could not produce a value."""


class NoSourceAvailable(MonitorError):
    """Every source for a metric failed during this tick."""


class PrivilegedCommandError(MonitorError):
    """The elevated shell did not return usable output."""


class PrivilegeDenied(PrivilegedCommandError):
    """No elevated shell, or the shell refused to run the command."""


class ExecutionError(PrivilegedCommandError):
    """The elevated shell ran but timed out or produced nothing."""
