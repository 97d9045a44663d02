from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from .errors import InputError
from .models import Axis, Correction, MonitorEntry

logger = logging.getLogger(__name__)

ClusterFn = Callable[[Iterable[int], int], list[list[int]]]


def cluster(values: Iterable[int], threshold: int) -> list[list[int]]:
    """Group distinct axis values into runs of values meant to be equal.

    Values are scanned in ascending order and a value joins the open cluster
    when it is within ``threshold`` of the last value added to it, so a long
    chain may span more than ``threshold`` end to end.
    """
    clusters: list[list[int]] = []
    for value in sorted(values):
        if clusters and value - clusters[-1][-1] <= threshold:
            clusters[-1].append(value)
        else:
            clusters.append([value])
    return clusters


def cluster_pairwise(values: Iterable[int], threshold: int) -> list[list[int]]:
    """Like :func:`cluster`, but no two members of a cluster differ by more than ``threshold``."""
    clusters: list[list[int]] = []
    for value in sorted(values):
        if clusters and value - clusters[-1][0] <= threshold:
            clusters[-1].append(value)
        else:
            clusters.append([value])
    return clusters


CLUSTER_POLICIES: dict[str, ClusterFn] = {
    "chained": cluster,
    "pairwise": cluster_pairwise,
}


def canonical_value(members: Sequence[int]) -> int:
    # Upper middle element for even sizes, never an average.
    return members[len(members) // 2]


def validate_inputs(monitors: Sequence[MonitorEntry], threshold: int) -> None:
    if len(monitors) < 2:
        raise InputError(f"At least two monitors are required, found {len(monitors)}.")
    _check_threshold(threshold)


def _check_threshold(threshold: int) -> None:
    if threshold < 0:
        raise InputError(f"Threshold must be zero or greater, got {threshold}.")


def _plan_axis(monitors: Sequence[MonitorEntry], axis: Axis, threshold: int, cluster_fn: ClusterFn) -> list[Correction]:
    values = {monitor.value_on(axis) for monitor in monitors}
    if len(values) < 2:
        return []

    corrections: list[Correction] = []
    for members in cluster_fn(values, threshold):
        if len(members) < 2:
            continue

        target = canonical_value(members)
        logger.debug("Axis %s cluster %s snaps to %d", axis.label, members, target)
        member_set = set(members)
        for monitor in monitors:
            current = monitor.value_on(axis)
            if current in member_set and current != target:
                corrections.append(
                    Correction(
                        monitor_id=monitor.id,
                        axis=axis,
                        old_value=current,
                        new_value=target,
                    )
                )
    return corrections


def plan(monitors: Sequence[MonitorEntry], threshold: int, policy: str = "chained") -> list[Correction]:
    """Return the corrections that snap near-equal coordinates together.

    Each axis is handled independently. An axis with fewer than two distinct
    values is skipped, so an empty or single monitor list simply yields no
    corrections.
    """
    _check_threshold(threshold)
    try:
        cluster_fn = CLUSTER_POLICIES[policy]
    except KeyError as exc:
        raise InputError(f"Unknown clustering policy: {policy!r}.") from exc

    corrections: list[Correction] = []
    for axis in (Axis.X, Axis.Y):
        corrections.extend(_plan_axis(monitors, axis, threshold, cluster_fn))
    return corrections
