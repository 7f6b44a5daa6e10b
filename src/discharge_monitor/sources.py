"""
Metric sources - ordered fallback reads of single-value power-supply nodes.

Every source is a callable that returns an int or raises SourceUnavailable.
File nodes, the privileged shell and the static estimate all share that
shape, so a fallback chain is just a list evaluated left to right.
"""

import logging
import threading

from .config import READ_TIMEOUT
from .errors import NoSourceAvailable, PrivilegedCommandError, SourceUnavailable

log = logging.getLogger(__name__)


def microamps_to_milliamps(value: int) -> int:
    """Hardware reports microamps, negative while discharging."""
    return abs(value) // 1000


def parse_int(text, origin: str) -> int:
    """Parse one line of node output, raising SourceUnavailable on junk."""
    if text is None:
        raise SourceUnavailable(f"{origin}: no output")
    line = text.strip()
    if not line:
        raise SourceUnavailable(f"{origin}: empty")
    try:
        return int(line)
    except ValueError:
        raise SourceUnavailable(f"{origin}: not a number: {line!r}") from None


def _read_first_line(path: str, result: dict):
    try:
        with open(path, "r") as f:
            result["line"] = f.readline()
    except (OSError, UnicodeDecodeError) as e:
        result["error"] = e


def read_line(path: str, timeout: float = READ_TIMEOUT) -> str:
    """
    Read the first line of a node, giving up after ``timeout`` seconds.

    Each read gets its own daemon thread, so a node that never answers
    leaks one idle thread but never blocks later reads or process exit.
    """
    result = {}
    reader = threading.Thread(
        target=_read_first_line, args=(path, result), name="metric-read", daemon=True
    )
    reader.start()
    reader.join(timeout)
    if reader.is_alive():
        raise SourceUnavailable(f"{path}: read timed out after {timeout}s")

    error = result.get("error")
    if isinstance(error, OSError):
        raise SourceUnavailable(f"{path}: {error.strerror or error}")
    if error is not None:
        raise SourceUnavailable(f"{path}: not text")
    return result["line"]


class FileSource:
    """A single sysfs-like node holding one integer."""

    def __init__(self, path: str, transform=None, timeout: float = READ_TIMEOUT):
        self.path = path
        self.name = path
        self.transform = transform
        self.timeout = timeout

    def __call__(self) -> int:
        value = parse_int(read_line(self.path, self.timeout), self.path)
        return self.transform(value) if self.transform else value

    def __repr__(self):
        return f"FileSource({self.path!r})"


class PrivilegedSource:
    """Runs a read command through the elevated shell."""

    def __init__(self, command: str, runner, transform=None):
        self.command = command
        self.name = f"privileged:{command}"
        self.runner = runner
        self.transform = transform

    def __call__(self) -> int:
        try:
            output = self.runner(self.command)
        except PrivilegedCommandError as e:
            raise SourceUnavailable(f"{self.name}: {e}") from e
        value = parse_int(output, self.name)
        return self.transform(value) if self.transform else value

    def __repr__(self):
        return f"PrivilegedSource({self.command!r})"


class RangeChecked:
    """Rejects values outside [low, high] so the next source gets a turn."""

    def __init__(self, source, low: int, high: int):
        self.source = source
        self.name = getattr(source, "name", repr(source))
        self.low = low
        self.high = high

    def __call__(self) -> int:
        value = self.source()
        if not self.low <= value <= self.high:
            raise SourceUnavailable(
                f"{self.name}: {value} outside {self.low}..{self.high}"
            )
        return value

    def __repr__(self):
        return f"RangeChecked({self.source!r}, {self.low}, {self.high})"


class StaticSource:
    """Always succeeds with a fixed value; wraps an estimator."""

    def __init__(self, estimator, name: str = "estimate"):
        self.estimator = estimator
        self.name = name

    def __call__(self) -> int:
        return self.estimator.estimate()

    def __repr__(self):
        return f"StaticSource({self.name!r})"


def file_sources(paths, transform=None, timeout: float = READ_TIMEOUT):
    """Build FileSources for a path list, preserving order."""
    return [FileSource(p, transform=transform, timeout=timeout) for p in paths]


def first_available(sources):
    """
    Evaluate sources in priority order and stop at the first success.

    Args:
        sources: Ordered callables returning int or raising SourceUnavailable.

    Returns:
        Tuple of (source, value) for the winning source.

    Raises:
        NoSourceAvailable: if every source failed.
    """
    tried = 0
    for source in sources:
        tried += 1
        try:
            return source, source()
        except SourceUnavailable as e:
            log.debug("Source unavailable: %s", e)
    raise NoSourceAvailable(f"all {tried} sources failed")


def read_metric(sources) -> int:
    """Value of the first readable source; raises NoSourceAvailable."""
    _, value = first_available(sources)
    return value


# Charge status nodes: text "status" or numeric "online" per supply
_CHARGING_WORDS = {"charging": True, "full": True, "discharging": False, "not charging": False}


def read_charging_state(paths, timeout: float = READ_TIMEOUT) -> bool:
    """
    Read whether the device is on external power.

    A ``status`` node is authoritative. ``online`` nodes report one supply
    each, so any "1" means charging and "0" only counts once every readable
    supply is offline.

    Returns:
        True when charging, False when discharging.

    Raises:
        NoSourceAvailable: if no node gave a recognisable answer.
    """
    seen_offline = False
    for path in paths:
        try:
            text = read_line(path, timeout).strip()
        except SourceUnavailable as e:
            log.debug("Status unavailable: %s", e)
            continue

        word = text.lower()
        if word in _CHARGING_WORDS:
            return _CHARGING_WORDS[word]
        if word == "1":
            return True
        if word == "0":
            seen_offline = True
            continue
        log.debug("Unrecognised status %r in %s", text, path)

    if seen_offline:
        return False
    raise NoSourceAvailable("no charge status node readable")


def resolve_rated_capacity(config) -> int:
    """
    Discover the battery design capacity in mAh, once per process.

    Drivers report either mAh or uAh; anything above 100000 is taken as uAh.
    Readings at or below 1000 mAh are not plausible for a phone battery and
    are skipped. Falls back to the configured rated capacity.
    """
    for source in file_sources(config.design_capacity_paths, timeout=config.read_timeout):
        try:
            value = source()
        except SourceUnavailable as e:
            log.debug("Design capacity unavailable: %s", e)
            continue
        if value > 100000:
            value //= 1000
        if value > 1000:
            log.info("Design capacity %d mAh from %s", value, source.path)
            return value

    log.info("Using configured capacity: %d mAh", config.rated_capacity_mah)
    return config.rated_capacity_mah
