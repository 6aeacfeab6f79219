"""Recognition of recording transitions in console log lines."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from .events import ConsoleEvent

logger = logging.getLogger(__name__)

# Evaluated in order; the first rule with a matching marker wins.
EVENT_RULES: Sequence[Tuple[Tuple[str, ...], ConsoleEvent]] = (
    (("[SOAP] Soap DM unloaded.", "[P-REC] Recording..."), ConsoleEvent.RECORD),
    (("[LogsTF] Uploading logs...", "[P-REC] Stop record."), ConsoleEvent.STOP),
)

DEMO_MARKER = "(Demo Support) End recording"
# "(Demo Support) End recording demos/2024-01-01_12-00-00.dem"
_DEMO_TOKEN_INDEX = 4

DemoHandler = Callable[[Path], None]


def match_event(line: str) -> Optional[ConsoleEvent]:
    """Return the recording event a line announces, if any."""

    for markers, event in EVENT_RULES:
        if any(marker in line for marker in markers):
            return event
    return None


def extract_demo_name(line: str) -> Optional[str]:
    """Return the demo path token of a demo completion line, if present."""

    tokens = line.split(" ")
    if len(tokens) <= _DEMO_TOKEN_INDEX or not tokens[_DEMO_TOKEN_INDEX]:
        return None
    return tokens[_DEMO_TOKEN_INDEX]


class LineClassifier:
    """Maps log lines to console events and forwards finished demos."""

    def __init__(self, log_dir: Path, demo_handler: Optional[DemoHandler] = None):
        self._log_dir = Path(log_dir)
        self._demo_handler = demo_handler

    def classify(self, line: str) -> Optional[ConsoleEvent]:
        event = match_event(line)
        if event is not None:
            return event
        if DEMO_MARKER in line:
            self._handle_demo_line(line)
        return None

    def _handle_demo_line(self, line: str) -> None:
        demo_name = extract_demo_name(line)
        if demo_name is None:
            logger.warning("Demo completion line without a demo path: %r", line)
            return
        demo_path = self._log_dir / demo_name
        logger.info("Found demo: %s", demo_path)
        if self._demo_handler is not None:
            self._demo_handler(demo_path)
