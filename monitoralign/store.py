from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from .errors import ApplyFailure, StoreError
from .models import Axis, Correction, MonitorEntry, Snapshot

_UINT32_MASK = 0xFFFFFFFF
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1


class ConfigStore(Protocol):
    def list_snapshots(self) -> list[Snapshot]: ...

    def read_monitors(self, snapshot_id: str) -> list[MonitorEntry]: ...

    def write_field(self, snapshot_id: str, correction: Correction) -> None: ...


def to_signed32(value: int) -> int:
    """Reinterpret a 32-bit pattern (as stored in a DWORD) as a signed integer."""
    value &= _UINT32_MASK
    return value - (1 << 32) if value > _INT32_MAX else value


def to_unsigned32(value: int) -> int:
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"Coordinate {value} does not fit in a signed 32-bit field.")
    return value & _UINT32_MASK


def select_latest(snapshots: Iterable[Snapshot]) -> Snapshot:
    latest: Snapshot | None = None
    for snapshot in snapshots:
        # Strictly greater keeps the first snapshot on equal timestamps.
        if latest is None or snapshot.timestamp > latest.timestamp:
            latest = snapshot
    if latest is None:
        raise StoreError("No display configuration snapshots were found.")
    return latest


class InMemoryStore:
    """Dict-backed store holding raw DWORD patterns, used for tests and dry runs."""

    def __init__(
        self,
        snapshots: Mapping[str, tuple[int, Iterable[MonitorEntry]]],
        failing_writes: Iterable[tuple[str, Axis]] = (),
    ) -> None:
        self._timestamps: dict[str, int] = {}
        self._fields: dict[str, dict[str, dict[str, int]]] = {}
        for snapshot_id, (timestamp, monitors) in snapshots.items():
            self._timestamps[snapshot_id] = timestamp
            self._fields[snapshot_id] = {
                monitor.id: {
                    Axis.X.field_name: to_unsigned32(monitor.x),
                    Axis.Y.field_name: to_unsigned32(monitor.y),
                    "PrimSurfSize.cx": monitor.width,
                    "PrimSurfSize.cy": monitor.height,
                }
                for monitor in monitors
            }
        self._failing_writes = set(failing_writes)
        self.writes: list[tuple[str, str, str, int]] = []

    def list_snapshots(self) -> list[Snapshot]:
        return [Snapshot(id=snapshot_id, timestamp=ts) for snapshot_id, ts in self._timestamps.items()]

    def read_monitors(self, snapshot_id: str) -> list[MonitorEntry]:
        try:
            monitors = self._fields[snapshot_id]
        except KeyError as exc:
            raise StoreError(f"Unknown snapshot: {snapshot_id}") from exc

        return [
            MonitorEntry(
                id=monitor_id,
                x=to_signed32(fields[Axis.X.field_name]),
                y=to_signed32(fields[Axis.Y.field_name]),
                width=fields.get("PrimSurfSize.cx", 0),
                height=fields.get("PrimSurfSize.cy", 0),
            )
            for monitor_id, fields in monitors.items()
        ]

    def raw_field(self, snapshot_id: str, monitor_id: str, axis: Axis) -> int:
        return self._fields[snapshot_id][monitor_id][axis.field_name]

    def write_field(self, snapshot_id: str, correction: Correction) -> None:
        if (correction.monitor_id, correction.axis) in self._failing_writes:
            raise ApplyFailure(correction, f"Write rejected for {correction.monitor_id}.")

        monitor = self._fields.get(snapshot_id, {}).get(correction.monitor_id)
        if monitor is None:
            raise ApplyFailure(correction, f"Monitor {correction.monitor_id} not found in {snapshot_id}.")

        raw = to_unsigned32(correction.new_value)
        monitor[correction.axis.field_name] = raw
        self.writes.append((snapshot_id, correction.monitor_id, correction.axis.field_name, raw))
