"""Static current draw used when no real current reading is available."""

from .config import FALLBACK_CURRENT_MA


class CurrentEstimator:
    """Conservative fixed estimate of typical draw (screen on/off mix)."""

    def __init__(self, current_ma: int = FALLBACK_CURRENT_MA):
        self.current_ma = current_ma

    def estimate(self) -> int:
        """Return the fallback draw in milliamps."""
        return self.current_ma
