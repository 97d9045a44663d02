import pytest

from monitoralign.applier import apply_corrections
from monitoralign.errors import StoreError
from monitoralign.models import Axis, Correction, MonitorEntry, Snapshot
from monitoralign.store import InMemoryStore, select_latest, to_signed32, to_unsigned32


@pytest.mark.parametrize(
    ("raw", "signed"),
    [(0, 0), (1440, 1440), (0xFFFFFA60, -1440), (0xFFFFFED6, -298), (0x80000000, -(1 << 31))],
)
def test_signed_conversion(raw: int, signed: int) -> None:
    assert to_signed32(raw) == signed
    assert to_unsigned32(signed) == raw


@pytest.mark.parametrize("value", [1 << 31, -(1 << 31) - 1])
def test_to_unsigned32_rejects_out_of_range(value: int) -> None:
    with pytest.raises(ValueError):
        to_unsigned32(value)


def test_select_latest_picks_max_timestamp() -> None:
    snapshots = [Snapshot("old", 10), Snapshot("new", 30), Snapshot("mid", 20)]

    assert select_latest(snapshots).id == "new"


def test_select_latest_keeps_first_on_tie() -> None:
    snapshots = [Snapshot("first", 30), Snapshot("second", 30)]

    assert select_latest(snapshots).id == "first"


def test_select_latest_requires_a_snapshot() -> None:
    with pytest.raises(StoreError):
        select_latest([])


def _store(**kwargs) -> InMemoryStore:
    return InMemoryStore(
        {
            "SET1": (
                100,
                [
                    MonitorEntry("00\\00", 0, 0, 3440, 1440),
                    MonitorEntry("01\\00", 2262, -1442, 2560, 1440),
                ],
            )
        },
        **kwargs,
    )


def test_in_memory_store_round_trips_negative_positions() -> None:
    store = _store()

    assert store.raw_field("SET1", "01\\00", Axis.Y) == 0xFFFFFA5E
    assert store.read_monitors("SET1")[1] == MonitorEntry("01\\00", 2262, -1442, 2560, 1440)


def test_in_memory_store_unknown_snapshot() -> None:
    with pytest.raises(StoreError):
        _store().read_monitors("SET2")


def test_apply_corrections_writes_signed_pattern() -> None:
    store = _store()

    report = apply_corrections(store, "SET1", [Correction("01\\00", Axis.Y, -1442, -1440)])

    assert report.ok
    assert store.writes == [("SET1", "01\\00", "Position.cy", 0xFFFFFA60)]
    assert store.read_monitors("SET1")[1].y == -1440


def test_apply_corrections_reports_partial_failure() -> None:
    store = _store(failing_writes=[("00\\00", Axis.X)])
    corrections = [
        Correction("00\\00", Axis.X, 0, 2),
        Correction("01\\00", Axis.Y, -1442, -1440),
        Correction("missing", Axis.X, 1, 2),
    ]

    report = apply_corrections(store, "SET1", corrections)

    assert not report.ok
    assert report.applied == [corrections[1]]
    assert [correction for correction, _message in report.failed] == [corrections[0], corrections[2]]
    assert store.read_monitors("SET1")[0].x == 0
