from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Callable, Sequence
from tkinter import messagebox

from .models import Correction, MonitorEntry

logger = logging.getLogger(__name__)

_AFFIRMATIVE = {"y", "yes"}


def format_monitor(monitor: MonitorEntry) -> str:
    return f"{monitor.id}  {monitor.width}x{monitor.height} at {monitor.x},{monitor.y}"


def format_monitors(monitors: Sequence[MonitorEntry]) -> str:
    return "\n".join(f"  {format_monitor(monitor)}" for monitor in monitors)


def format_correction(correction: Correction) -> str:
    return (
        f"{correction.monitor_id}  {correction.axis.label}  "
        f"{correction.old_value} -> {correction.new_value} ({correction.delta:+d})"
    )


def format_corrections(corrections: Sequence[Correction]) -> str:
    return "\n".join(f"  {format_correction(correction)}" for correction in corrections)


def confirm_console(prompt: str, input_fn: Callable[[str], str] = input) -> bool:
    try:
        answer = input_fn(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in _AFFIRMATIVE


def confirm_dialog(corrections: Sequence[Correction]) -> bool:
    try:
        root = tk.Tk()
    except tk.TclError as exc:
        logger.warning("Confirmation dialog unavailable (%s); treating as refusal.", exc)
        return False

    root.withdraw()
    try:
        return bool(
            messagebox.askyesno(
                "Apply monitor alignment",
                f"Apply {len(corrections)} correction(s)?\n\n{format_corrections(corrections)}",
                parent=root,
            )
        )
    finally:
        root.destroy()
