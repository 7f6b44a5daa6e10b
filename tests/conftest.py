from pathlib import Path

import pytest

from discharge_monitor.errors import SourceUnavailable


class FakeSysfs:
    """Writes single-value nodes under a temp power_supply tree."""

    def __init__(self, root: Path):
        self.root = root

    def node(self, name: str, value=None) -> str:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if value is not None:
            path.write_text(f"{value}\n")
        return str(path)


@pytest.fixture
def sysfs(tmp_path):
    return FakeSysfs(tmp_path / "power_supply")


class CountingSource:
    """Source double that records calls."""

    def __init__(self, value=None, name="fake"):
        self.value = value
        self.name = name
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.value is None:
            raise SourceUnavailable(f"{self.name}: unavailable")
        return self.value


@pytest.fixture
def counting_source():
    return CountingSource
