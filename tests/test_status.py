import json

import pytest

from discharge_monitor import status


@pytest.fixture
def config_file(tmp_path, sysfs):
    def write(**overrides):
        data = {
            "capacity_paths": [sysfs.node("battery/capacity")],
            "current_paths": [sysfs.node("battery/current_now")],
            "status_paths": [sysfs.node("battery/status")],
            "design_capacity_paths": [],
            "privileged_shell": "/nonexistent/elevated-shell",
        }
        data.update(overrides)
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data))
        return str(path)

    return write


def test_prints_level_and_time(sysfs, config_file, capsys):
    sysfs.node("battery/capacity", 50)
    sysfs.node("battery/current_now", -410000)
    sysfs.node("battery/status", "Discharging")
    assert status.main(["--config", config_file()]) == 0
    assert capsys.readouterr().out.splitlines() == ["> 50%", "${color4}  5h 0m remaining (410mA)"]


def test_charging_shows_level_only(sysfs, config_file, capsys):
    sysfs.node("battery/capacity", 90)
    sysfs.node("battery/status", "Charging")
    status.main(["--config", config_file()])
    assert capsys.readouterr().out == "> 90% CHG\n"


def test_unreadable_level(config_file, capsys):
    status.main(["--config", config_file()])
    assert capsys.readouterr().out == "> N/A\n"


def test_bad_config_exits_nonzero(config_file, capsys):
    assert status.main(["--config", config_file(tick_interval=0)]) == 1
    assert "Config error" in capsys.readouterr().err


def test_debug_lists_nodes(sysfs, config_file, capsys):
    sysfs.node("battery/capacity", 64)
    status.main(["--config", config_file(), "--debug"])
    out = capsys.readouterr().out
    assert f"Capacity path: {sysfs.node('battery/capacity')} = 64" in out
    assert "Current path: none readable" in out
    assert "not available" in out
