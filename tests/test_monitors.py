import sys
from types import SimpleNamespace

import pytest

from monitoralign import monitors
from monitoralign.errors import ApplyFailure, StoreError
from monitoralign.models import Axis, Correction, MonitorEntry


def _fake_screeninfo(monkeypatch: pytest.MonkeyPatch) -> None:
    detected = [
        SimpleNamespace(name="\\\\.\\DISPLAY1", x=0, y=0, width=3440, height=1440, is_primary=True),
        SimpleNamespace(name=None, x=2262, y=-1442, width=2560, height=1440, is_primary=False),
    ]
    monkeypatch.setitem(sys.modules, "screeninfo", SimpleNamespace(get_monitors=lambda: detected))


def test_list_live_monitors_maps_screeninfo(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_screeninfo(monkeypatch)

    entries = monitors.list_live_monitors()

    assert [(m.x, m.y, m.width, m.height) for m in entries] == [(0, 0, 3440, 1440), (2262, -1442, 2560, 1440)]
    assert all(m.id.startswith("monitor-") for m in entries)
    assert entries[0].id != entries[1].id
    assert monitors.list_live_monitors() == entries


def test_live_store_is_read_only(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_screeninfo(monkeypatch)
    store = monitors.LiveStore()

    snapshot = store.list_snapshots()[0]
    entries = store.read_monitors(snapshot.id)

    assert len(entries) == 2
    with pytest.raises(StoreError):
        store.read_monitors("SET1")
    with pytest.raises(ApplyFailure):
        store.write_field(snapshot.id, Correction(entries[1].id, Axis.Y, -1442, -1440))


def test_set_dpi_awareness_off_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(monitors.sys, "platform", "darwin")

    assert monitors.set_dpi_awareness() == "unsupported-platform"


def test_set_dpi_awareness_falls_back_to_system_aware(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def set_process_dpi_aware() -> int:
        calls.append("SetProcessDPIAware")
        return 1

    monkeypatch.setattr(monitors.sys, "platform", "win32")
    monkeypatch.setattr(
        monitors.ctypes,
        "windll",
        SimpleNamespace(user32=SimpleNamespace(SetProcessDPIAware=set_process_dpi_aware)),
        raising=False,
    )

    assert monitors.set_dpi_awareness() == "system-dpi-aware"
    assert calls == ["SetProcessDPIAware"]


def test_monitor_entry_value_on_axis() -> None:
    entry = MonitorEntry(id="monitor-0", x=-1920, y=7)

    assert entry.value_on(Axis.X) == -1920
    assert entry.value_on(Axis.Y) == 7
    assert (entry.width, entry.height) == (0, 0)
