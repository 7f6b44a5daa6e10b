"""
Battery Discharge Monitor - time-left estimate from power-supply telemetry.

This package provides:
- Ordered multi-source reads of battery level and current draw
- Privileged shell fallback for access-restricted current nodes
- Discharge time calculation from level, draw and rated capacity
- Periodic monitor loop that goes quiet while charging
- System tray indicator and conky-style status helper
"""

__version__ = "1.0.0"

from .calculator import (
    DischargeEstimate,
    UNKNOWN,
    compute,
    discharge_time,
    format_estimate,
)
from .config import MonitorConfig, load_config
from .errors import (
    ConfigError,
    ExecutionError,
    MonitorError,
    NoSourceAvailable,
    PrivilegeDenied,
    SourceUnavailable,
)
from .estimator import CurrentEstimator
from .monitor import (
    HIDE_STATUS,
    ChargingState,
    MonitorLoop,
    MonitorState,
    Sample,
    StatusRecord,
)
from .privileged import is_privilege_available, run_privileged
from .sources import read_charging_state, read_metric

__all__ = [
    "DischargeEstimate",
    "UNKNOWN",
    "compute",
    "discharge_time",
    "format_estimate",
    "MonitorConfig",
    "load_config",
    "ConfigError",
    "ExecutionError",
    "MonitorError",
    "NoSourceAvailable",
    "PrivilegeDenied",
    "SourceUnavailable",
    "CurrentEstimator",
    "HIDE_STATUS",
    "ChargingState",
    "MonitorLoop",
    "MonitorState",
    "Sample",
    "StatusRecord",
    "is_privilege_available",
    "run_privileged",
    "read_charging_state",
    "read_metric",
]
