from __future__ import annotations

import logging
import sys
from types import ModuleType

from .errors import ApplyFailure, StoreError
from .models import Axis, Correction, MonitorEntry, Snapshot
from .store import to_signed32, to_unsigned32

logger = logging.getLogger(__name__)

CONFIGURATION_PATH = r"SYSTEM\CurrentControlSet\Control\GraphicsDrivers\Configuration"

_TIMESTAMP_VALUE = "Timestamp"
_WIDTH_VALUE = "PrimSurfSize.cx"
_HEIGHT_VALUE = "PrimSurfSize.cy"


def _load_winreg() -> ModuleType:
    if sys.platform != "win32":
        raise StoreError("The display configuration registry is available only on Windows.")
    import winreg

    return winreg


def _subkey_names(api: ModuleType, key) -> list[str]:
    subkey_count, _value_count, _modified = api.QueryInfoKey(key)
    return [api.EnumKey(key, index) for index in range(subkey_count)]


def _query_int(api: ModuleType, key, name: str) -> int | None:
    try:
        value, _kind = api.QueryValueEx(key, name)
    except FileNotFoundError:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise StoreError(f"Registry value {name} is not an integer: {value!r}") from exc


class RegistryStore:
    """Display configuration snapshots kept by the Windows graphics stack.

    Each subkey of ``CONFIGURATION_PATH`` is a snapshot with a ``Timestamp``
    QWORD. Its ``<path>\\<target>`` grandchildren hold one monitor each, with
    positions stored as DWORD bit patterns of signed coordinates.
    """

    def __init__(self, api: ModuleType | None = None, root=None, path: str = CONFIGURATION_PATH) -> None:
        self._api = api if api is not None else _load_winreg()
        self._root = root if root is not None else self._api.HKEY_LOCAL_MACHINE
        self._path = path

    def _open(self, subpath: str, access=None):
        full_path = f"{self._path}\\{subpath}" if subpath else self._path
        if access is None:
            access = self._api.KEY_READ
        return self._api.OpenKey(self._root, full_path, 0, access)

    def list_snapshots(self) -> list[Snapshot]:
        try:
            with self._open("") as config_key:
                snapshot_ids = _subkey_names(self._api, config_key)
        except OSError as exc:
            raise StoreError(f"Unable to open {self._path}: {exc}") from exc

        snapshots: list[Snapshot] = []
        for snapshot_id in snapshot_ids:
            try:
                with self._open(snapshot_id) as key:
                    timestamp = _query_int(self._api, key, _TIMESTAMP_VALUE)
            except OSError as exc:
                raise StoreError(f"Unable to read snapshot {snapshot_id}: {exc}") from exc
            if timestamp is None:
                logger.warning("Snapshot %s has no timestamp; treating it as oldest.", snapshot_id)
                timestamp = 0
            snapshots.append(Snapshot(id=snapshot_id, timestamp=timestamp))
        return snapshots

    def read_monitors(self, snapshot_id: str) -> list[MonitorEntry]:
        monitors: list[MonitorEntry] = []
        try:
            with self._open(snapshot_id) as snapshot_key:
                path_names = _subkey_names(self._api, snapshot_key)
            for path_name in path_names:
                with self._open(f"{snapshot_id}\\{path_name}") as path_key:
                    target_names = _subkey_names(self._api, path_key)
                for target_name in target_names:
                    monitor_id = f"{path_name}\\{target_name}"
                    entry = self._read_monitor(snapshot_id, monitor_id)
                    if entry is not None:
                        monitors.append(entry)
        except OSError as exc:
            raise StoreError(f"Unable to read monitors of snapshot {snapshot_id}: {exc}") from exc
        return monitors

    def _read_monitor(self, snapshot_id: str, monitor_id: str) -> MonitorEntry | None:
        with self._open(f"{snapshot_id}\\{monitor_id}") as key:
            raw_x = _query_int(self._api, key, Axis.X.field_name)
            raw_y = _query_int(self._api, key, Axis.Y.field_name)
            if raw_x is None or raw_y is None:
                logger.debug("Skipping %s\\%s: no position values.", snapshot_id, monitor_id)
                return None
            return MonitorEntry(
                id=monitor_id,
                x=to_signed32(raw_x),
                y=to_signed32(raw_y),
                width=_query_int(self._api, key, _WIDTH_VALUE) or 0,
                height=_query_int(self._api, key, _HEIGHT_VALUE) or 0,
            )

    def write_field(self, snapshot_id: str, correction: Correction) -> None:
        try:
            raw = to_unsigned32(correction.new_value)
            with self._open(f"{snapshot_id}\\{correction.monitor_id}", self._api.KEY_SET_VALUE) as key:
                self._api.SetValueEx(key, correction.axis.field_name, 0, self._api.REG_DWORD, raw)
        except (OSError, ValueError) as exc:
            raise ApplyFailure(correction, f"Unable to write {correction.axis.field_name}: {exc}") from exc
