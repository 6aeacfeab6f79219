from __future__ import annotations

import pytest

from precwatch.events import ConsoleEvent, EventOccurrence
from precwatch.throttle import Throttler

RECORD = ConsoleEvent.RECORD
STOP = ConsoleEvent.STOP


def feed(throttler, *occurrences):
    return [throttler.debounce(EventOccurrence(event, at)) for event, at in occurrences]


def test_first_occurrence_is_emitted():
    assert feed(Throttler(7.5), (RECORD, 0.0)) == [RECORD]


def test_duplicate_within_window_is_suppressed():
    assert feed(Throttler(7.5), (RECORD, 0.0), (RECORD, 1.0)) == [RECORD, None]


def test_duplicate_after_window_is_emitted():
    assert feed(Throttler(7.5), (RECORD, 0.0), (RECORD, 8.0)) == [RECORD, RECORD]


def test_duplicate_exactly_at_window_is_emitted():
    assert feed(Throttler(7.5), (RECORD, 0.0), (RECORD, 7.5)) == [RECORD, RECORD]


@pytest.mark.parametrize("window", [0.0, 7.5, 3600.0])
def test_direction_change_is_never_delayed(window):
    assert feed(Throttler(window), (RECORD, 0.0), (STOP, 0.01)) == [RECORD, STOP]


def test_suppressed_occurrences_do_not_extend_window():
    results = feed(
        Throttler(7.5),
        (RECORD, 0.0),
        (RECORD, 1.0),
        (RECORD, 7.4),
        (RECORD, 7.6),
    )
    assert results == [RECORD, None, None, RECORD]


def test_window_restarts_from_last_emission():
    results = feed(
        Throttler(7.5),
        (RECORD, 0.0),
        (RECORD, 8.0),
        (RECORD, 10.0),
        (RECORD, 15.5),
    )
    assert results == [RECORD, RECORD, None, RECORD]


def test_same_tag_after_direction_change_uses_new_anchor():
    throttler = Throttler(7.5)
    results = feed(throttler, (RECORD, 0.0), (STOP, 1.0), (RECORD, 2.0), (RECORD, 3.0))
    assert results == [RECORD, STOP, RECORD, None]
    assert throttler.last_event is RECORD


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        Throttler(-1.0)
