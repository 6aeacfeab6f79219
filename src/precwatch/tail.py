"""Incremental reader for a growing log file."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.25
DEFAULT_MAX_POLL_INTERVAL = 2.0
_CHUNK_SIZE = 64 * 1024


def ensure_log_file(path: Path) -> None:
    """Create an empty file at ``path`` unless one already exists."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "ab"):
        pass


class LogWatcher:
    """Yields lines appended to a file, waiting for more when none are available.

    Iteration ends only when :meth:`stop` is called. Truncation or replacement of
    the file restarts reading from the beginning of the new content.
    """

    def __init__(
        self,
        path: Path,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_interval: float = DEFAULT_MAX_POLL_INTERVAL,
        start_at_end: bool = True,
        encoding: str = "utf-8",
    ):
        self._path = Path(path)
        self._poll_interval = poll_interval
        self._max_poll_interval = max(max_poll_interval, poll_interval)
        self._start_at_end = start_at_end
        self._encoding = encoding
        self._stop_event = threading.Event()
        self._handle: Optional[BinaryIO] = None
        self._position = 0
        self._pending = b""
        self._skip_fragment = False
        self._iterating = False

    @property
    def path(self) -> Path:
        return self._path

    def __iter__(self) -> Iterator[str]:
        if self._iterating:
            raise RuntimeError("LogWatcher can only be iterated once")
        self._iterating = True
        return self._follow()

    def stop(self) -> None:
        """Signal the watcher to stop at the next poll."""

        self._stop_event.set()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _follow(self) -> Iterator[str]:
        ensure_log_file(self._path)
        self._open(seek_end=self._start_at_end)
        logger.info("Watching %s", self._path)
        delay = self._poll_interval
        try:
            while not self._stop_event.is_set():
                lines = self._read_available()
                if lines:
                    delay = self._poll_interval
                    yield from lines
                    continue
                if self._was_rotated():
                    logger.info("%s was truncated or replaced; reading from the start", self._path)
                    self._reopen()
                    continue
                self._stop_event.wait(delay)
                delay = min(delay * 2, self._max_poll_interval)
        finally:
            self.close()

    def _open(self, *, seek_end: bool) -> None:
        handle = open(self._path, "rb")
        self._skip_fragment = False
        if seek_end:
            size = handle.seek(0, os.SEEK_END)
            if size > 0:
                # Mid-line start: drop the rest of the line being written
                handle.seek(size - 1)
                self._skip_fragment = handle.read(1) != b"\n"
        self._handle = handle
        self._position = handle.tell()
        self._pending = b""

    def _reopen(self) -> None:
        self.close()
        try:
            self._open(seek_end=False)
        except FileNotFoundError:
            # Replaced file not written yet
            ensure_log_file(self._path)
            self._open(seek_end=False)

    def _require_handle(self) -> BinaryIO:
        if self._handle is None:
            raise RuntimeError(f"{self._path} is not open")
        return self._handle

    def _read_available(self) -> List[str]:
        chunk = self._require_handle().read(_CHUNK_SIZE)
        if not chunk:
            return []
        self._position += len(chunk)
        data = self._pending + chunk
        *complete, self._pending = data.split(b"\n")
        if self._skip_fragment and complete:
            complete = complete[1:]
            self._skip_fragment = False
        return [self._decode(raw) for raw in complete]

    def _decode(self, raw: bytes) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(self._encoding, errors="replace")

    def _was_rotated(self) -> bool:
        handle = self._require_handle()
        try:
            current = os.stat(self._path)
        except FileNotFoundError:
            return False
        opened = os.fstat(handle.fileno())
        if (current.st_dev, current.st_ino) != (opened.st_dev, opened.st_ino):
            return True
        return current.st_size < self._position
