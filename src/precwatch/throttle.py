"""Suppression of repeated console events within a time window."""
from __future__ import annotations

import logging
from typing import Optional

from .events import ConsoleEvent, EventOccurrence

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 7.5


class Throttler:
    """Collapses bursts of the same event while letting direction changes through.

    The window is anchored on the last *emitted* occurrence, so suppressed
    duplicates never extend it.
    """

    def __init__(self, window: float = DEFAULT_WINDOW):
        if window < 0:
            raise ValueError("window must not be negative")
        self._window = window
        self._last_event: Optional[ConsoleEvent] = None
        self._last_emitted_at: float = 0.0

    @property
    def window(self) -> float:
        return self._window

    @property
    def last_event(self) -> Optional[ConsoleEvent]:
        return self._last_event

    def debounce(self, occurrence: EventOccurrence) -> Optional[ConsoleEvent]:
        """Return the event if it should be acted upon, otherwise ``None``."""

        if self._last_event is not None and occurrence.event is self._last_event:
            elapsed = occurrence.at - self._last_emitted_at
            if elapsed < self._window:
                logger.debug(
                    "Suppressing %s, %.2fs since last emission (window %.2fs)",
                    occurrence.event.value,
                    elapsed,
                    self._window,
                )
                return None

        self._last_event = occurrence.event
        self._last_emitted_at = occurrence.at
        return occurrence.event
