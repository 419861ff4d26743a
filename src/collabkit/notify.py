"""User-facing notifications (toasts) for the editor and wizard flows.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

LOGGER = logging.getLogger("collabkit.notify")

TOAST_ICONS = ("success", "error", "info")


@dataclass(frozen=True)
class Toast:
    icon: str
    title: str
    text: Optional[str] = None

    def __post_init__(self) -> None:
        if self.icon not in TOAST_ICONS:
            raise ValueError(f"Unsupported toast icon: {self.icon!r}")


class Notifier(Protocol):
    def show(self, toast: Toast) -> None:
        ...


class LoggingNotifier:
    def show(self, toast: Toast) -> None:
        line = f"[notify] {toast.title}" + (f": {toast.text}" if toast.text else "")
        if toast.icon == "error":
            LOGGER.error(line)
        else:
            LOGGER.info(line)


class RecordingNotifier(LoggingNotifier):
    def __init__(self) -> None:
        self.toasts: List[Toast] = []

    def show(self, toast: Toast) -> None:
        self.toasts.append(toast)
        super().show(toast)

    def by_icon(self, icon: str) -> List[Toast]:
        return [toast for toast in self.toasts if toast.icon == icon]
