"""
Discharge calculator - remaining runtime from charge level and current draw.
"""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DischargeEstimate:
    """Time left on battery; both fields None means the estimate is unknown."""

    hours: Optional[int] = None
    minutes: Optional[int] = None

    @property
    def known(self) -> bool:
        return self.hours is not None

    def total_minutes(self) -> Optional[int]:
        if not self.known:
            return None
        return self.hours * 60 + self.minutes

    def __str__(self):
        return format_estimate(self)


UNKNOWN = DischargeEstimate()


def compute(percent: int, current_ma: int, rated_capacity_mah: int) -> DischargeEstimate:
    """
    Estimate time remaining at a constant draw.

    Args:
        percent: Battery level, 0-100
        current_ma: Discharge current in milliamps (already made positive)
        rated_capacity_mah: Battery rated capacity

    Returns:
        DischargeEstimate, or UNKNOWN if the draw is not a usable rate
    """
    if current_ma <= 0:
        return UNKNOWN

    remaining_mah = rated_capacity_mah * percent / 100.0
    hours_remaining = remaining_mah / current_ma

    hours = math.floor(hours_remaining)
    minutes = math.floor((hours_remaining - hours) * 60)

    return DischargeEstimate(hours=hours, minutes=minutes)


def format_estimate(estimate: DischargeEstimate) -> str:
    """Render as "5h 0m", "12m" or "Unknown"."""
    if not estimate.known:
        return "Unknown"
    if estimate.hours > 0:
        return f"{estimate.hours}h {estimate.minutes}m"
    return f"{estimate.minutes}m"


def discharge_time(percent: int, current_ma: int, rated_capacity_mah: int) -> str:
    """Shortcut for format_estimate(compute(...))."""
    return format_estimate(compute(percent, current_ma, rated_capacity_mah))
