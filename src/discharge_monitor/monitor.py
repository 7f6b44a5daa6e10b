"""
Monitor loop - the per-tick sampler and its charging/discharging state.

The host calls on_tick() on a fixed interval and forwards power events to
on_power_connected() / on_power_disconnected(). The loop only ever reads
the charging flag; the event handlers are its only writers.
"""

import enum
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Union

from .calculator import DischargeEstimate, compute, format_estimate
from .errors import NoSourceAvailable
from .estimator import CurrentEstimator
from .privileged import PrivilegedRunner
from .sources import (
    PrivilegedSource,
    RangeChecked,
    StaticSource,
    file_sources,
    first_available,
    microamps_to_milliamps,
    read_charging_state,
    read_metric,
    resolve_rated_capacity,
)

log = logging.getLogger(__name__)


class ChargingState(enum.Enum):
    CHARGING = "charging"
    DISCHARGING = "discharging"


class MonitorState(enum.Enum):
    SUPPRESSED = "suppressed"  # on external power, status hidden
    ACTIVE = "active"  # on battery, sampling every tick


@dataclass(frozen=True)
class Sample:
    """One tick's readings."""

    battery_percent: int
    current_ma: int
    charging_state: ChargingState


@dataclass(frozen=True)
class StatusRecord:
    """What the presentation layer shows while on battery."""

    percent: int
    current_ma: int
    estimate: DischargeEstimate
    estimated: bool = False

    @property
    def time_str(self) -> str:
        return format_estimate(self.estimate)

    @property
    def line(self) -> str:
        mark = "~" if self.estimated else ""
        return f"{self.time_str} remaining ({mark}{self.current_ma}mA)"

    @property
    def subtext(self) -> str:
        return f"{self.percent}%"


class HideStatus:
    """Signal to hide the status line while charging."""

    def __repr__(self):
        return "HIDE_STATUS"


HIDE_STATUS = HideStatus()

TickResult = Union[StatusRecord, HideStatus, None]


class MonitorLoop:
    """
    Two-state sampler: SUPPRESSED while charging, ACTIVE on battery.

    Args:
        capacity_sources: Ordered sources for battery percent.
        current_sources: Ordered fallback chain for current draw in mA;
            the last entry is normally a StaticSource that never fails.
        rated_capacity_mah: Battery capacity, fixed for the process.
        charging: Initial charging flag.
    """

    def __init__(self, capacity_sources, current_sources, rated_capacity_mah: int, charging=False):
        # Fuel gauges report -1 or junk above 100 before calibration
        self.capacity_sources = [RangeChecked(s, 0, 100) for s in capacity_sources]
        self.current_sources = list(current_sources)
        self.rated_capacity_mah = rated_capacity_mah

        self._lock = Lock()
        self._charging = bool(charging)

    @classmethod
    def from_config(cls, config, runner=None, estimator=None, charging=False) -> "MonitorLoop":
        """Wire the standard source chains from a MonitorConfig."""
        if runner is None:
            runner = PrivilegedRunner(config.privileged_shell, config.privileged_timeout)
        if estimator is None:
            estimator = CurrentEstimator(config.fallback_current_ma)

        return cls(
            capacity_sources=file_sources(config.capacity_paths, timeout=config.read_timeout),
            current_sources=build_current_chain(config, runner, estimator),
            rated_capacity_mah=resolve_rated_capacity(config),
            charging=charging,
        )

    @property
    def charging(self) -> bool:
        return self._charging

    @property
    def state(self) -> MonitorState:
        return MonitorState.SUPPRESSED if self._charging else MonitorState.ACTIVE

    def on_power_connected(self):
        """Charger plugged in: stop sampling, hide the status."""
        with self._lock:
            if not self._charging:
                log.info("Charging started - hiding discharge status")
            self._charging = True

    def on_power_disconnected(self):
        """Charger removed: resume sampling on the next tick."""
        with self._lock:
            if self._charging:
                log.info("Charging stopped - showing discharge status")
            self._charging = False

    def read_percent(self) -> int:
        return read_metric(self.capacity_sources)

    def read_current(self):
        """Current draw in mA and whether it came from the static estimate."""
        source, value = first_available(self.current_sources)
        estimated = isinstance(source, StaticSource)
        if estimated:
            log.info("No current reading available, using estimate of %d mA", value)
        return value, estimated

    def sample(self):
        """
        Read percent, then current, for one tick.

        Returns:
            Tuple of (Sample, estimated) where estimated flags a static current.

        Raises:
            NoSourceAvailable: if the battery level or current is unreadable.
        """
        percent = self.read_percent()
        current_ma, estimated = self.read_current()
        return Sample(percent, current_ma, ChargingState.DISCHARGING), estimated

    def on_tick(self) -> TickResult:
        """
        Run one sampling cycle.

        Returns:
            HIDE_STATUS while charging, a StatusRecord on battery, or None when
            the tick had to be skipped (percent unreadable or any other error).
        """
        if self._charging:
            return HIDE_STATUS

        try:
            sample, estimated = self.sample()
            estimate = compute(sample.battery_percent, sample.current_ma, self.rated_capacity_mah)
        except NoSourceAvailable as e:
            log.warning("Skipping tick, battery unreadable: %s", e)
            return None
        except Exception:
            log.exception("Error updating battery status")
            return None

        record = StatusRecord(sample.battery_percent, sample.current_ma, estimate, estimated)
        log.debug("Tick: %s %s", record.subtext, record.line)
        return record


def build_current_chain(config, runner, estimator):
    """Privileged read of the primary node, then direct reads, then the estimate."""
    chain = []
    if config.current_paths:
        chain.append(
            PrivilegedSource(
                f"cat {config.current_paths[0]}", runner, transform=microamps_to_milliamps
            )
        )
    chain.extend(
        file_sources(
            config.current_paths, transform=microamps_to_milliamps, timeout=config.read_timeout
        )
    )
    chain.append(StaticSource(estimator))
    return chain


def seed_charging_state(monitor: MonitorLoop, config):
    """
    Set the initial state from the charge status nodes.

    Only for hosts without a power event source at startup; the loop itself
    never reads these nodes.
    """
    try:
        charging = read_charging_state(config.status_paths, config.read_timeout)
    except NoSourceAvailable:
        log.info("Charge status unknown, assuming on battery")
        return
    if charging:
        monitor.on_power_connected()
    else:
        monitor.on_power_disconnected()
