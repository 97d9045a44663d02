from __future__ import annotations

import ctypes
import hashlib
import logging
import sys

from .errors import ApplyFailure, StoreError
from .models import Correction, MonitorEntry, Snapshot

logger = logging.getLogger(__name__)

LIVE_SNAPSHOT_ID = "live"

_DPI_AWARENESS_CONTEXT_PER_MONITOR_AWARE_V2 = ctypes.c_void_p(-4)


def set_dpi_awareness() -> str:
    """Ask Windows for physical pixel coordinates before enumerating monitors."""
    if sys.platform != "win32":
        return "unsupported-platform"

    user32 = ctypes.windll.user32
    for mode, call in (
        ("per-monitor-v2", lambda: user32.SetProcessDpiAwarenessContext(_DPI_AWARENESS_CONTEXT_PER_MONITOR_AWARE_V2)),
        ("system-dpi-aware", lambda: user32.SetProcessDPIAware()),
    ):
        try:
            if call():
                return mode
        except AttributeError:
            continue
    return "dpi-awareness-unavailable"


def _stable_monitor_id(name: str, width: int, height: int) -> str:
    identity = f"{name}|{width}|{height}".encode("utf-8")
    return f"monitor-{hashlib.blake2s(identity, digest_size=6).hexdigest()}"


def list_live_monitors() -> list[MonitorEntry]:
    try:
        from screeninfo import get_monitors
    except ImportError as exc:
        raise StoreError("The 'screeninfo' package is required to read the live layout.") from exc

    entries: list[MonitorEntry] = []
    for index, monitor in enumerate(get_monitors()):
        name = str(getattr(monitor, "name", None) or f"Monitor {index + 1}")
        width = int(monitor.width)
        height = int(monitor.height)
        entries.append(
            MonitorEntry(
                id=_stable_monitor_id(name=name, width=width, height=height),
                x=int(monitor.x),
                y=int(monitor.y),
                width=width,
                height=height,
            )
        )
    return entries


class LiveStore:
    """Read-only view of the layout the desktop is currently using."""

    def __init__(self) -> None:
        self._dpi_mode = set_dpi_awareness()
        logger.debug("DPI awareness: %s", self._dpi_mode)

    def list_snapshots(self) -> list[Snapshot]:
        return [Snapshot(id=LIVE_SNAPSHOT_ID, timestamp=0)]

    def read_monitors(self, snapshot_id: str) -> list[MonitorEntry]:
        if snapshot_id != LIVE_SNAPSHOT_ID:
            raise StoreError(f"Unknown snapshot: {snapshot_id}")
        return list_live_monitors()

    def write_field(self, snapshot_id: str, correction: Correction) -> None:
        raise ApplyFailure(correction, "The live layout is read-only; use the registry source to apply.")
