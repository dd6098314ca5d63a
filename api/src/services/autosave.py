"""
Debounced Autosave

Coalesces bursts of edits into a single persist call after an idle
window, with a manual-save override.

States (derived from timer pending / write in flight):

    IDLE                      --mark_dirty-->  PENDING_TIMER
    PENDING_TIMER             --mark_dirty-->  PENDING_TIMER (timer restarted)
    PENDING_TIMER             --timer fire-->  SAVING
    PENDING_TIMER             --manual_save->  SAVING (timer cancelled)
    SAVING                    --mark_dirty-->  PENDING_TIMER_AND_SAVING
    SAVING                    --settled---->   IDLE
    PENDING_TIMER_AND_SAVING  --settled---->   PENDING_TIMER
    PENDING_TIMER_AND_SAVING  --timer fire-->  SAVING (+ one follow-up queued)

A save requested while a write is in flight never runs concurrently with
it. Exactly one follow-up write is queued and starts as soon as the
current write settles; further requests fold into that follow-up.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

# Idle window after the last edit before an automatic save (seconds)
DEFAULT_AUTOSAVE_DELAY = 2.0


class AutosaveState(str, Enum):
    IDLE = "idle"
    PENDING_TIMER = "pending_timer"
    SAVING = "saving"
    PENDING_TIMER_AND_SAVING = "pending_timer_and_saving"


class AutosaveScheduler:
    """
    Debounce timer plus save-in-flight tracking for one form session.

    The persist callback builds and writes a fresh snapshot each time it
    is called, so a delayed write always carries the latest state.
    Failures are reported through on_failed and leave the form dirty;
    there is no automatic retry.
    """

    def __init__(
        self,
        persist: Callable[[], Awaitable[None]],
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        on_saved: Callable[[], None] | None = None,
        on_failed: Callable[[Exception], None] | None = None,
    ):
        self._persist = persist
        self.delay = delay
        self._on_saved = on_saved
        self._on_failed = on_failed

        self.dirty = False
        self.saving = False
        self.last_saved_at: datetime | None = None
        self.last_error: Exception | None = None

        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._follow_up = False
        self._closed = False

    @property
    def state(self) -> AutosaveState:
        timer_pending = self._timer is not None
        if self.saving and timer_pending:
            return AutosaveState.PENDING_TIMER_AND_SAVING
        if self.saving:
            return AutosaveState.SAVING
        if timer_pending:
            return AutosaveState.PENDING_TIMER
        return AutosaveState.IDLE

    @property
    def follow_up_requested(self) -> bool:
        return self._follow_up

    def mark_dirty(self) -> None:
        """Flag unsaved changes and restart the idle timer."""
        if self._closed:
            return

        self.dirty = True
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._on_timer)

    async def manual_save(self) -> bool:
        """
        Save immediately, superseding any pending debounced save.

        Returns:
            True if the write (or the follow-up it folded into) succeeded
        """
        self._cancel_timer()
        self.dirty = False
        task = self._request_save()
        # Shielded so a cancelled caller does not abort the write
        await asyncio.shield(task)
        return self.last_error is None

    async def wait_settled(self) -> None:
        """Wait for the in-flight write (and queued follow-up) to finish."""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    def close(self) -> None:
        """Cancel the pending timer. An in-flight write is left to finish."""
        self._closed = True
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if not self.dirty:
            return
        self.dirty = False
        self._request_save()

    def _request_save(self) -> asyncio.Task[None]:
        if self._task is not None and not self._task.done():
            self._follow_up = True
            logger.debug("Save requested while writing, queued follow-up")
            return self._task

        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def _run(self) -> None:
        while True:
            self._follow_up = False
            await self._persist_once()
            if not self._follow_up:
                return
            # The follow-up snapshot includes every edit made so far
            self._cancel_timer()
            self.dirty = False

    async def _persist_once(self) -> None:
        self.saving = True
        try:
            await self._persist()
        except Exception as e:
            logger.error(f"Autosave write failed: {e}")
            self.last_error = e
            self.dirty = True
            if self._on_failed:
                self._on_failed(e)
        else:
            self.last_error = None
            self.last_saved_at = datetime.now(timezone.utc)
            if self._on_saved:
                self._on_saved()
        finally:
            self.saving = False
