"""
Power connect/disconnect events from UPower over the system D-Bus.
"""

import logging

import gi

gi.require_version("Gio", "2.0")
from gi.repository import Gio, GLib

log = logging.getLogger(__name__)

UPOWER_NAME = "org.freedesktop.UPower"
UPOWER_PATH = "/org/freedesktop/UPower"


class UPowerWatcher:
    """Forwards UPower's OnBattery flips to a MonitorLoop."""

    def __init__(self, monitor):
        self.monitor = monitor
        self.proxy = None

    def start(self) -> bool:
        """
        Subscribe to OnBattery changes and seed the monitor with its value.

        Returns:
            False if UPower is not reachable; the caller seeds state itself.
        """
        try:
            self.proxy = Gio.DBusProxy.new_for_bus_sync(
                Gio.BusType.SYSTEM,
                Gio.DBusProxyFlags.NONE,
                None,
                UPOWER_NAME,
                UPOWER_PATH,
                UPOWER_NAME,
                None,
            )
        except GLib.Error as e:
            log.warning("UPower unavailable: %s", e.message)
            return False

        on_battery = self.proxy.get_cached_property("OnBattery")
        if on_battery is None:
            log.warning("UPower did not report OnBattery")
            self.proxy = None
            return False

        self._apply(on_battery.unpack())
        self.proxy.connect("g-properties-changed", self._on_properties_changed)
        return True

    def _apply(self, on_battery: bool):
        if on_battery:
            self.monitor.on_power_disconnected()
        else:
            self.monitor.on_power_connected()

    def _on_properties_changed(self, proxy, changed, invalidated):
        props = changed.unpack()
        if "OnBattery" in props:
            self._apply(props["OnBattery"])
