from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Axis(Enum):
    X = "Position.cx"
    Y = "Position.cy"

    @property
    def field_name(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class MonitorEntry:
    id: str
    x: int
    y: int
    width: int = 0
    height: int = 0

    def value_on(self, axis: Axis) -> int:
        return self.x if axis is Axis.X else self.y


@dataclass(frozen=True)
class Correction:
    monitor_id: str
    axis: Axis
    old_value: int
    new_value: int

    def __post_init__(self) -> None:
        if self.old_value == self.new_value:
            raise ValueError(f"Correction for {self.monitor_id} does not change {self.axis.label}.")

    @property
    def delta(self) -> int:
        return self.new_value - self.old_value


@dataclass(frozen=True)
class Snapshot:
    id: str
    timestamp: int


@dataclass(frozen=True)
class AlignConfig:
    threshold: int
    source: str = "registry"
    policy: str = "chained"
    snapshot_id: str | None = None
    assume_yes: bool = False
    dry_run: bool = False
    gui: bool = False
    verbose: bool = False
