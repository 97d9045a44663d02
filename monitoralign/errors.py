from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Correction


class AlignError(Exception):
    """Base class for every error raised by monitoralign."""


class InputError(AlignError, ValueError):
    """The monitor snapshot or threshold cannot be planned."""


class StoreError(AlignError, OSError):
    """The configuration store could not be read."""


class ApplyFailure(AlignError):
    def __init__(self, correction: Correction, message: str) -> None:
        super().__init__(message)
        self.correction = correction
