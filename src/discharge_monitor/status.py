"""
Battery status helper for conky and other scripts.
Outputs battery level with discharge time remaining.
"""

import argparse
import logging
import sys

from .config import load_config
from .errors import ConfigError, NoSourceAvailable, SourceUnavailable
from .monitor import HIDE_STATUS, MonitorLoop, seed_charging_state
from .privileged import is_privilege_available
from .sources import file_sources


def first_readable(paths, timeout):
    """Return (path, value) of the first readable node, or (None, None)."""
    for source in file_sources(paths, timeout=timeout):
        try:
            return source.path, source()
        except SourceUnavailable:
            continue
    return None, None


def print_debug(config, monitor):
    """Dump the resolved configuration and which nodes answer."""
    print("=== Battery Discharge Debug Info ===")
    print(f"Config file: {config.source_file or '(defaults)'}")
    print(f"Rated capacity: {monitor.rated_capacity_mah} mAh")
    print(f"Tick interval: {config.tick_interval}s")
    print(f"Fallback current: {config.fallback_current_ma} mA")

    for label, paths in (
        ("Capacity", config.capacity_paths),
        ("Current", config.current_paths),
        ("Design capacity", config.design_capacity_paths),
    ):
        path, value = first_readable(paths, config.read_timeout)
        print(f"{label} path: {path or 'none readable'}" + (f" = {value}" if path else ""))

    available = is_privilege_available(config.privileged_shell, config.privileged_timeout)
    print(f"Privileged shell ({config.privileged_shell}): {'available' if available else 'not available'}")


def main(argv=None):
    """Entry point for battery status output."""
    parser = argparse.ArgumentParser(description="Print battery discharge status")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--debug", action="store_true", help="print node diagnostics")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    monitor = MonitorLoop.from_config(config)

    if args.debug:
        print_debug(config, monitor)
        return 0

    seed_charging_state(monitor, config)
    result = monitor.on_tick()

    if result is HIDE_STATUS:
        try:
            percent = monitor.read_percent()
        except NoSourceAvailable:
            print("> CHG")
        else:
            print(f"> {percent}% CHG")
    elif result is None:
        print("> N/A")
    else:
        # Output formatted for conky
        print(f"> {result.subtext}")
        print(f"${{color4}}  {result.line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
