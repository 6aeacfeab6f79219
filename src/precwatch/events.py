"""Event models shared across monitor components."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConsoleEvent(str, Enum):
    """Recording transitions recognized in the game console log."""

    RECORD = "record"
    STOP = "stop"

    @property
    def command(self) -> str:
        """RCON command that carries out this transition."""

        return _COMMANDS[self]


_COMMANDS = {
    ConsoleEvent.RECORD: "ds_record",
    ConsoleEvent.STOP: "ds_stop",
}


@dataclass(frozen=True)
class EventOccurrence:
    """A console event paired with the instant it was recognized."""

    event: ConsoleEvent
    at: float
