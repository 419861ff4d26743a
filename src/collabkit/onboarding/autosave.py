"""Debounced persistence of a value that changes over time.

One ``AutosaveScheduler`` tracks one value. The first observed value is the
baseline and is never persisted; every later structurally different value
restarts a debounce window, and the value is persisted once the window elapses
without a newer change. Timers run on the asyncio event loop of the caller.
Closing drops any pending change and returns the status to idle; an error
status is kept.
"""

from __future__ import annotations

import asyncio
import logging
from copy import deepcopy
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

LOGGER = logging.getLogger("collabkit.onboarding")

DEFAULT_DELAY_S = 0.6
DEFAULT_SAVED_RESET_S = 1.0


class AutosaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


PersistFn = Callable[[Any], Awaitable[Any]]


class AutosaveScheduler:
    def __init__(
        self,
        persist: PersistFn,
        delay: float = DEFAULT_DELAY_S,
        saved_reset: float = DEFAULT_SAVED_RESET_S,
        name: str = "",
        on_status: Optional[Callable[[AutosaveStatus], None]] = None,
    ) -> None:
        self.persist = persist
        self.delay = delay
        self.saved_reset = saved_reset
        self.name = name or "value"
        self.on_status = on_status
        self._status = AutosaveStatus.IDLE
        self._has_baseline = False
        self._last: Any = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._reset_timer: Optional[asyncio.TimerHandle] = None
        self._save_task: Optional[asyncio.Task] = None
        self._generation = 0
        self._closed = False

    @property
    def status(self) -> AutosaveStatus:
        return self._status

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def observe(self, value: Any) -> AutosaveStatus:
        if self._closed:
            return self._status
        snapshot = deepcopy(value)
        if not self._has_baseline:
            self._has_baseline = True
            self._last = snapshot
            return self._status
        if snapshot == self._last:
            return self._status

        self._last = snapshot
        self._cancel_reset()
        self._set_status(AutosaveStatus.SAVING)
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().call_later(self.delay, self._fire)
        return self._status

    async def flush(self) -> None:
        """Fire a pending debounce immediately and wait for the in-flight save."""
        if self._timer is not None:
            self._timer.cancel()
            self._fire()
        task = self._save_task
        if task is not None and not task.done():
            await task

    def close(self) -> None:
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._cancel_reset()
        if self._status is not AutosaveStatus.ERROR:
            self._set_status(AutosaveStatus.IDLE)

    def _fire(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._generation += 1
        self._save_task = asyncio.get_running_loop().create_task(
            self._run_save(self._generation, deepcopy(self._last))
        )

    async def _run_save(self, generation: int, value: Any) -> None:
        LOGGER.info(f"[autosave] {self.name} save #{generation} started")
        try:
            await self.persist(value)
        except Exception as err:
            LOGGER.error(f"[autosave] {self.name} save #{generation} failed: {err}")
            if self._is_current(generation):
                self._set_status(AutosaveStatus.ERROR)
            return

        LOGGER.info(f"[autosave] {self.name} save #{generation} done")
        if not self._is_current(generation):
            return
        self._set_status(AutosaveStatus.SAVED)
        self._reset_timer = asyncio.get_running_loop().call_later(self.saved_reset, self._reset_to_idle)

    def _is_current(self, generation: int) -> bool:
        # A newer fired save or a newer pending change owns the status.
        return not self._closed and generation == self._generation and self._timer is None

    def _reset_to_idle(self) -> None:
        self._reset_timer = None
        if self._status is AutosaveStatus.SAVED:
            self._set_status(AutosaveStatus.IDLE)

    def _cancel_reset(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None

    def _set_status(self, status: AutosaveStatus) -> None:
        if status is self._status:
            return
        self._status = status
        if self.on_status is not None:
            self.on_status(status)
