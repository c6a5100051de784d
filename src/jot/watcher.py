"""Directory watcher - stat-based polling that reports file changes.

A snapshot maps every regular file under a directory to its
(mtime, size). Each poll diffs the current snapshot against the last one
and reports create/modify/delete events sorted by (path, type).

This module provides:
1. snapshot_dir - recursive stat walk
2. DirectoryWatcher - poll() on demand, or start() a background thread
3. WatchHandle - queues the background thread reports through
"""

from __future__ import annotations

import os
import queue
import stat
import threading
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from loguru import logger

from .models import EventType, FileEvent, FileState

DEFAULT_POLL_INTERVAL = 1.0  # seconds

# Put on both queues when the background thread exits
CLOSED = object()

Snapshot = dict[str, FileState]


def snapshot_dir(directory: Union[str, Path]) -> Snapshot:
    """Stat every regular file under ``directory``.

    A missing root is an empty snapshot. Subdirectories and files that
    vanish mid-walk are skipped; the next poll reports them as deleted.
    Any other walk error propagates.
    """
    root = str(directory)
    state: Snapshot = {}

    def on_error(err: OSError) -> None:
        missing = isinstance(err, FileNotFoundError)
        if missing and os.path.normpath(err.filename or root) != os.path.normpath(root):
            return
        raise err

    try:
        for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
            for name in filenames:
                path = os.path.join(dirpath, name)
                try:
                    st = os.lstat(path)
                except FileNotFoundError:
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue
                state[path] = FileState(mtime_ns=st.st_mtime_ns, size=st.st_size)
    except FileNotFoundError:
        if not os.path.exists(root):
            return {}
        raise
    return state


def diff_snapshots(previous: Snapshot, current: Snapshot) -> list[FileEvent]:
    """Events that turn ``previous`` into ``current``, sorted by (path, type)."""
    events = []
    for path, cur in current.items():
        prev = previous.get(path)
        if prev is None:
            events.append(FileEvent(path, EventType.CREATE))
        elif prev != cur:
            events.append(FileEvent(path, EventType.MODIFY))

    for path in previous:
        if path not in current:
            events.append(FileEvent(path, EventType.DELETE))

    events.sort(key=FileEvent.sort_key)
    return events


class WatchHandle:
    """Consumer side of a running watcher.

    ``events`` blocks the producer until each event is taken; ``errors``
    holds at most one terminal error. Both receive CLOSED when the
    producer exits.
    """

    def __init__(self, stop_event: threading.Event):
        self.events: queue.Queue = queue.Queue(maxsize=1)
        self.errors: queue.Queue = queue.Queue(maxsize=1)
        self.stop_event = stop_event
        self.thread: Optional[threading.Thread] = None

    def stop(self, timeout: float = 5.0) -> None:
        """Signal cancellation and wait for the producer to exit."""
        self.stop_event.set()
        if self.thread is not None:
            self.thread.join(timeout=timeout)

    def __iter__(self) -> Iterator[FileEvent]:
        while True:
            item = self.events.get()
            if item is CLOSED:
                return
            yield item

    def error(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """Wait for the error queue to close; return the error if one was sent."""
        item = self.errors.get(timeout=timeout)
        if item is CLOSED:
            return None
        return item


class DirectoryWatcher:
    """Polls a directory and reports what changed since the last poll."""

    def __init__(self, directory: Union[str, Path]):
        """Initialize the watcher with a baseline snapshot.

        Args:
            directory: Directory to watch; need not exist yet

        Raises:
            OSError: If the initial walk fails for a reason other than a
                missing root
        """
        self.directory = str(directory)
        self._state = snapshot_dir(self.directory)

    def poll(self) -> list[FileEvent]:
        """Diff the directory against the previous snapshot."""
        current = snapshot_dir(self.directory)
        events = diff_snapshots(self._state, current)
        self._state = current
        if events:
            logger.debug("poll of {} found {} change(s)", self.directory, len(events))
        return events

    def start(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        stop_event: Optional[threading.Event] = None,
    ) -> WatchHandle:
        """Start polling on a background thread.

        Args:
            interval: Seconds between polls
            stop_event: Cancellation signal; a fresh one is made if omitted

        Returns:
            WatchHandle to consume events and errors from
        """
        handle = WatchHandle(stop_event or threading.Event())
        handle.thread = threading.Thread(
            target=self._run, args=(handle, interval), daemon=True
        )
        handle.thread.start()
        return handle

    def _run(self, handle: WatchHandle, interval: float) -> None:
        """Producer loop."""
        stop = handle.stop_event
        try:
            while not stop.wait(interval):
                try:
                    batch = self.poll()
                except Exception as e:
                    logger.error("watcher for {} stopped: {!r}", self.directory, e)
                    handle.errors.put(e)
                    return

                for event in batch:
                    if not self._send(handle.events, event, stop):
                        return
        finally:
            self._close(handle)

    @staticmethod
    def _send(q: queue.Queue, item: Any, stop: threading.Event) -> bool:
        """Blocking put that gives up once ``stop`` is set."""
        while not stop.is_set():
            try:
                q.put(item, timeout=0.05)
                return True
            except queue.Full:
                continue
        return False

    @staticmethod
    def _close(handle: WatchHandle) -> None:
        # errors has room unless a terminal error is still unread; CLOSED
        # then follows once the consumer takes it
        for q in (handle.events, handle.errors):
            try:
                q.put_nowait(CLOSED)
            except queue.Full:
                threading.Thread(target=q.put, args=(CLOSED,), daemon=True).start()
