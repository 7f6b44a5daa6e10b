#!/usr/bin/env python3
"""
Discharge Time Tray Indicator.
Shows estimated time left on battery; hides itself while charging.
"""

import argparse
import logging
import sys

import gi
gi.require_version("Gtk", "3.0")
gi.require_version("AyatanaAppIndicator3", "0.1")
from gi.repository import Gtk, AyatanaAppIndicator3, GLib

from .config import load_config
from .errors import ConfigError
from .monitor import MonitorLoop, StatusRecord, seed_charging_state
from .power_events import UPowerWatcher

log = logging.getLogger(__name__)


class DischargeIndicator:
    """System tray indicator showing discharge time remaining."""

    def __init__(self, monitor: MonitorLoop, interval: int):
        self.monitor = monitor

        self.indicator = AyatanaAppIndicator3.Indicator.new(
            "battery-discharge", "battery-good", AyatanaAppIndicator3.IndicatorCategory.HARDWARE
        )
        self.indicator.set_status(AyatanaAppIndicator3.IndicatorStatus.ACTIVE)
        self.indicator.set_title("Battery: --")

        self._build_menu()

        GLib.timeout_add_seconds(interval, self.update)
        self.update()

    def _build_menu(self):
        """Build the indicator menu."""
        self.menu = Gtk.Menu()

        self.time_item = Gtk.MenuItem(label="Time: --")
        self.time_item.set_sensitive(False)
        self.menu.append(self.time_item)

        self.percent_item = Gtk.MenuItem(label="Battery: --%")
        self.percent_item.set_sensitive(False)
        self.menu.append(self.percent_item)

        self.current_item = Gtk.MenuItem(label="Current: --")
        self.current_item.set_sensitive(False)
        self.menu.append(self.current_item)

        self.menu.append(Gtk.SeparatorMenuItem())

        capacity_item = Gtk.MenuItem(label=f"Capacity: {self.monitor.rated_capacity_mah} mAh")
        capacity_item.set_sensitive(False)
        self.menu.append(capacity_item)

        self.menu.append(Gtk.SeparatorMenuItem())

        quit_item = Gtk.MenuItem(label="Quit")
        quit_item.connect("activate", self.quit)
        self.menu.append(quit_item)

        self.menu.show_all()
        self.indicator.set_menu(self.menu)

    def get_battery_icon(self, percent: int) -> str:
        """Get appropriate battery icon name."""
        if percent >= 80:
            return "battery-full"
        elif percent >= 50:
            return "battery-good"
        elif percent >= 20:
            return "battery-low"
        return "battery-empty"

    def show(self, record: StatusRecord):
        self.indicator.set_status(AyatanaAppIndicator3.IndicatorStatus.ACTIVE)
        self.indicator.set_icon_full(self.get_battery_icon(record.percent), f"Battery {record.subtext}")
        self.indicator.set_label(record.time_str, "")
        self.indicator.set_title(f"Battery {record.subtext}: {record.line}")

        self.time_item.set_label(f"Time: {record.line}")
        self.percent_item.set_label(f"Battery: {record.subtext}")
        estimate_note = " (estimated)" if record.estimated else ""
        self.current_item.set_label(f"Current: {record.current_ma} mA{estimate_note}")

    def hide(self):
        self.indicator.set_status(AyatanaAppIndicator3.IndicatorStatus.PASSIVE)

    def update(self) -> bool:
        """Run one monitor tick and render the result."""
        result = self.monitor.on_tick()
        if isinstance(result, StatusRecord):
            self.show(result)
        elif result is not None:
            self.hide()
        # A skipped tick leaves the last status on screen
        return True

    def quit(self, widget):
        Gtk.main_quit()


def main():
    """Entry point for the tray indicator."""
    parser = argparse.ArgumentParser(description="Battery discharge time tray indicator")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    monitor = MonitorLoop.from_config(config)
    watcher = UPowerWatcher(monitor)
    if not watcher.start():
        seed_charging_state(monitor, config)

    DischargeIndicator(monitor, config.tick_interval)
    Gtk.main()


if __name__ == "__main__":
    main()
