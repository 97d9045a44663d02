from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import ApplyFailure
from .models import Correction
from .store import ConfigStore

logger = logging.getLogger(__name__)


@dataclass
class ApplyReport:
    applied: list[Correction] = field(default_factory=list)
    failed: list[tuple[Correction, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def apply_corrections(store: ConfigStore, snapshot_id: str, corrections: Iterable[Correction]) -> ApplyReport:
    """Write every correction once, in order, recording failures instead of stopping."""
    report = ApplyReport()
    for correction in corrections:
        try:
            store.write_field(snapshot_id, correction)
        except ApplyFailure as exc:
            logger.error(
                "Failed to set %s %s to %d: %s",
                correction.monitor_id,
                correction.axis.label,
                correction.new_value,
                exc,
            )
            report.failed.append((correction, str(exc)))
            continue

        logger.info(
            "Set %s %s: %d -> %d",
            correction.monitor_id,
            correction.axis.label,
            correction.old_value,
            correction.new_value,
        )
        report.applied.append(correction)
    return report
