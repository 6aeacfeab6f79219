"""Console log monitoring loop."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .classifier import LineClassifier
from .dispatch import CommandDispatcher
from .events import EventOccurrence
from .throttle import Throttler

logger = logging.getLogger(__name__)


@dataclass
class MonitorStats:
    """Counters emitted by the monitor for observability."""

    lines_read: int = 0
    events_recognized: int = 0
    events_suppressed: int = 0
    commands_sent: int = 0
    commands_failed: int = 0


class ConsoleMonitor:
    """Feeds log lines through classification and debouncing into RCON commands.

    Dispatches are awaited one at a time, in log order, before the next line
    is read.
    """

    def __init__(
        self,
        source: Iterable[str],
        classifier: LineClassifier,
        throttler: Throttler,
        dispatcher: CommandDispatcher,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source = source
        self._classifier = classifier
        self._throttler = throttler
        self._dispatcher = dispatcher
        self._clock = clock
        self._stats = MonitorStats()

    @property
    def stats(self) -> MonitorStats:
        return self._stats

    async def run(self) -> None:
        """Run the monitoring loop until the line source ends."""

        logger.info("Starting console monitor")
        try:
            for line in self._source:
                await self._handle_line(line)
        finally:
            logger.info(
                "Monitor stopped after %s lines, %s events (%s suppressed), %s commands sent, %s failed",
                self._stats.lines_read,
                self._stats.events_recognized,
                self._stats.events_suppressed,
                self._stats.commands_sent,
                self._stats.commands_failed,
            )

    def stop(self) -> None:
        """Signal the line source to stop at the next opportunity."""

        stop: Optional[Callable[[], None]] = getattr(self._source, "stop", None)
        if stop is not None:
            stop()

    async def _handle_line(self, line: str) -> None:
        self._stats.lines_read += 1
        logger.debug("got log line: %s", line)

        event = self._classifier.classify(line.strip())
        if event is None:
            return
        self._stats.events_recognized += 1

        emitted = self._throttler.debounce(EventOccurrence(event=event, at=self._clock()))
        if emitted is None:
            self._stats.events_suppressed += 1
            return

        if await self._dispatcher.dispatch(emitted):
            self._stats.commands_sent += 1
        else:
            self._stats.commands_failed += 1
