from __future__ import annotations

import asyncio
from itertools import count

from precwatch.classifier import LineClassifier
from precwatch.events import ConsoleEvent
from precwatch.monitor import ConsoleMonitor
from precwatch.throttle import Throttler


class FakeDispatcher:
    def __init__(self, *, succeed=True):
        self.sent = []
        self._succeed = succeed

    async def dispatch(self, event: ConsoleEvent) -> bool:
        self.sent.append(event.command)
        return self._succeed


class StoppableSource:
    def __init__(self, lines):
        self._lines = list(lines)
        self.stopped = False

    def __iter__(self):
        return iter(self._lines)

    def stop(self):
        self.stopped = True


def _monitor(tmp_path, lines, *, clock=None, dispatcher=None, demos=None):
    dispatcher = dispatcher or FakeDispatcher()
    classifier = LineClassifier(tmp_path, demos.append if demos is not None else None)
    ticks = count()
    monitor = ConsoleMonitor(
        lines,
        classifier,
        Throttler(7.5),
        dispatcher,
        clock=clock or (lambda: float(next(ticks)) * 0.01),
    )
    return monitor, dispatcher


def test_record_then_stop_dispatches_both(tmp_path):
    monitor, dispatcher = _monitor(
        tmp_path,
        ["[P-REC] Recording...", "[LogsTF] Uploading logs..."],
    )

    asyncio.run(monitor.run())

    assert dispatcher.sent == ["ds_record", "ds_stop"]
    assert monitor.stats.commands_sent == 2


def test_burst_of_record_markers_dispatches_once(tmp_path):
    monitor, dispatcher = _monitor(
        tmp_path,
        ["[SOAP] Soap DM unloaded.", "[P-REC] Recording...", "chatter"],
    )

    asyncio.run(monitor.run())

    assert dispatcher.sent == ["ds_record"]
    assert monitor.stats.lines_read == 3
    assert monitor.stats.events_recognized == 2
    assert monitor.stats.events_suppressed == 1


def test_repeat_after_window_dispatches_again(tmp_path):
    instants = iter([0.0, 8.0])
    monitor, dispatcher = _monitor(
        tmp_path,
        ["[P-REC] Recording...", "[P-REC] Recording..."],
        clock=lambda: next(instants),
    )

    asyncio.run(monitor.run())

    assert dispatcher.sent == ["ds_record", "ds_record"]


def test_demo_line_reaches_hook_without_dispatch(tmp_path):
    demos = []
    monitor, dispatcher = _monitor(
        tmp_path,
        ["  (Demo Support) End recording demos/match.dem  "],
        demos=demos,
    )

    asyncio.run(monitor.run())

    assert demos == [tmp_path / "demos" / "match.dem"]
    assert dispatcher.sent == []
    assert monitor.stats.events_recognized == 0


def test_failed_dispatch_does_not_stop_loop(tmp_path):
    dispatcher = FakeDispatcher(succeed=False)
    monitor, _ = _monitor(
        tmp_path,
        ["[P-REC] Recording...", "[P-REC] Stop record."],
        dispatcher=dispatcher,
    )

    asyncio.run(monitor.run())

    assert dispatcher.sent == ["ds_record", "ds_stop"]
    assert monitor.stats.commands_failed == 2


def test_stop_is_forwarded_to_source(tmp_path):
    source = StoppableSource([])
    monitor, _ = _monitor(tmp_path, source)

    monitor.stop()

    assert source.stopped


def test_end_to_end_with_log_file(tmp_path):
    from precwatch.tail import LogWatcher

    log = tmp_path / "console.log"
    log.write_text(
        "Connected.\n"
        "[P-REC] Recording...\n"
        "[LogsTF] Uploading logs...\n"
        "(Demo Support) End recording demos/final.dem\n"
    )
    watcher = LogWatcher(log, poll_interval=0.01, max_poll_interval=0.05, start_at_end=False)
    demos = []

    def collect(path):
        demos.append(path)
        watcher.stop()

    dispatcher = FakeDispatcher()
    monitor = ConsoleMonitor(watcher, LineClassifier(tmp_path, collect), Throttler(7.5), dispatcher)

    asyncio.run(monitor.run())

    assert dispatcher.sent == ["ds_record", "ds_stop"]
    assert demos == [tmp_path / "demos" / "final.dem"]


def test_dispatch_failures_during_login_keep_loop_running(tmp_path):
    from rcon.exceptions import EmptyResponse

    from precwatch.config import RconConfig
    from precwatch.dispatch import CommandDispatcher

    class ClosingClient:
        def __init__(self, *args, **kwargs):
            pass

        def connect(self, login=False):
            raise EmptyResponse()

        def close(self):
            pass

    dispatcher = CommandDispatcher(RconConfig(), client_factory=ClosingClient)
    monitor = ConsoleMonitor(
        ["[P-REC] Recording...", "[P-REC] Stop record."],
        LineClassifier(tmp_path),
        Throttler(7.5),
        dispatcher,
    )

    asyncio.run(monitor.run())

    assert monitor.stats.commands_failed == 2
