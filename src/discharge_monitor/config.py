"""
Monitor configuration - power-supply node lists, rated capacity and timings.
Defaults match a Galaxy S10+ class device; override with a JSON file.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple

from .errors import ConfigError

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DISCHARGE_MONITOR_CONFIG"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "discharge-monitor" / "config.json"

POWER_SUPPLY_ROOT = "/sys/class/power_supply"

# Vendor fuel-gauge directories, most common first
BATTERY_DIRS = (
    "battery",
    "bms",
    "sec-fuelgauge",
    "max77705-fuelgauge",
    "s2mu004-fuelgauge",
)

# Current draw node names (microamps, negative while discharging)
CURRENT_NODES = ("current_now", "current_avg", "present_current", "batt_current")

# Design capacity node names (mAh or uAh depending on the driver)
DESIGN_CAPACITY_NODES = ("charge_full_design", "charge_full", "batt_capacity")

RATED_CAPACITY_MAH = 4100
TICK_INTERVAL = 15  # seconds
FALLBACK_CURRENT_MA = 450
PRIVILEGED_SHELL = "su"
PRIVILEGED_TIMEOUT = 5.0  # seconds
READ_TIMEOUT = 2.0  # seconds


def expand_paths(dirs, nodes, root: str = POWER_SUPPLY_ROOT) -> Tuple[str, ...]:
    """Cross directory names with node names, keeping directory priority first."""
    return tuple(f"{root}/{d}/{n}" for d in dirs for n in nodes)


DEFAULT_CAPACITY_PATHS = expand_paths(("battery", "bms"), ("capacity",))
DEFAULT_CURRENT_PATHS = expand_paths(BATTERY_DIRS, CURRENT_NODES)
DEFAULT_STATUS_PATHS = (
    f"{POWER_SUPPLY_ROOT}/battery/status",
    f"{POWER_SUPPLY_ROOT}/ac/online",
    f"{POWER_SUPPLY_ROOT}/usb/online",
)
DEFAULT_DESIGN_CAPACITY_PATHS = expand_paths(BATTERY_DIRS, DESIGN_CAPACITY_NODES)


@dataclass(frozen=True)
class MonitorConfig:
    """Read-only settings for one monitor process."""

    capacity_paths: Tuple[str, ...] = DEFAULT_CAPACITY_PATHS
    current_paths: Tuple[str, ...] = DEFAULT_CURRENT_PATHS
    status_paths: Tuple[str, ...] = DEFAULT_STATUS_PATHS
    design_capacity_paths: Tuple[str, ...] = DEFAULT_DESIGN_CAPACITY_PATHS
    rated_capacity_mah: int = RATED_CAPACITY_MAH
    tick_interval: int = TICK_INTERVAL
    fallback_current_ma: int = FALLBACK_CURRENT_MA
    privileged_shell: str = PRIVILEGED_SHELL
    privileged_timeout: float = PRIVILEGED_TIMEOUT
    read_timeout: float = READ_TIMEOUT
    source_file: Optional[str] = field(default=None, compare=False)

    def validate(self) -> "MonitorConfig":
        if not self.capacity_paths:
            raise ConfigError("capacity_paths must not be empty")
        if not self.current_paths:
            raise ConfigError("current_paths must not be empty")
        if self.rated_capacity_mah <= 0:
            raise ConfigError(f"rated_capacity_mah must be positive, got {self.rated_capacity_mah}")
        if self.tick_interval <= 0:
            raise ConfigError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.fallback_current_ma < 0:
            raise ConfigError(
                f"fallback_current_ma must not be negative, got {self.fallback_current_ma}"
            )
        if self.privileged_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigError("timeouts must be positive")
        return self


_PATH_KEYS = ("capacity_paths", "current_paths", "status_paths", "design_capacity_paths")
_INT_KEYS = ("rated_capacity_mah", "tick_interval", "fallback_current_ma")
_FLOAT_KEYS = ("privileged_timeout", "read_timeout")


def _coerce(key, value):
    """Convert a JSON value to the type the config field expects."""
    try:
        if key in _PATH_KEYS:
            if isinstance(value, str) or not all(isinstance(p, str) for p in value):
                raise TypeError
            return tuple(value)
        if key in _INT_KEYS:
            if isinstance(value, bool) or int(value) != value:
                raise TypeError
            return int(value)
        if key in _FLOAT_KEYS:
            return float(value)
        return str(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigError(f"invalid value for {key}: {value!r}") from None


def config_path() -> Path:
    """Location of the override file, honouring the environment variable."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config(path=None) -> MonitorConfig:
    """
    Load configuration, merging an optional JSON file over the defaults.

    Args:
        path: Override file; defaults to ``config_path()``.

    Returns:
        A validated MonitorConfig.

    Raises:
        ConfigError: if the file holds a value of the wrong type or range.
    """
    path = Path(path) if path is not None else config_path()
    config = MonitorConfig()

    if not path.exists():
        return config.validate()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return config.validate()

    if not isinstance(data, dict):
        log.warning("Ignoring config %s: top level must be an object", path)
        return config.validate()

    known = {f.name for f in fields(MonitorConfig)} - {"source_file"}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            log.warning("Unknown config key %r in %s", key, path)
            continue
        overrides[key] = _coerce(key, value)

    log.debug("Loaded %d config overrides from %s", len(overrides), path)
    return replace(config, source_file=str(path), **overrides).validate()
