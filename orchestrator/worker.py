"""
worker: run scans, searches and art downloads off the interactive thread.

Each job runs on its own daemon thread with its own source instance and
reports exactly one event (ScanDone / SearchDone / AlbumArtDone or
Failed) on a queue. The interactive side drains it with poll().
"""
from __future__ import annotations
import queue
import threading
from typing import Callable, List, Optional

import structlog

from sources.base import MusicSource, TrackInfo
from utilities.scanner import scan_directory

from .session import AlbumArtDone, Event, Failed, ScanDone, SearchDone

log = structlog.get_logger()


class BackgroundWorker:
    """Spawn background jobs and collect their outcomes."""

    def __init__(self, source_factory: Callable[[], MusicSource]):
        self._source_factory = source_factory
        self._results: "queue.Queue[Event]" = queue.Queue()

    def start_scan(self, directory: str) -> threading.Thread:
        def _run():
            return ScanDone(tuple(scan_directory(directory)))
        return self._spawn("scan", _run)

    def start_search(self, query: str, search_id: int) -> threading.Thread:
        def _run():
            source = self._source_factory()
            return SearchDone(tuple(source.search(query)), search_id)
        return self._spawn("search", _run)

    def start_album_art(self, index: int, track: TrackInfo, search_id: int) -> threading.Thread:
        def _run():
            source = self._source_factory()
            return AlbumArtDone(index, source.fetch_album_art(track), search_id)
        return self._spawn("album_art", _run)

    def poll(self) -> List[Event]:
        """All outcomes delivered so far, without blocking"""
        events = []
        while True:
            try:
                events.append(self._results.get_nowait())
            except queue.Empty:
                return events

    def wait(self, timeout: Optional[float] = None) -> Event:
        """Block until the next outcome arrives (queue.Empty on timeout)"""
        return self._results.get(timeout=timeout)

    def _spawn(self, name: str, fn: Callable[[], Event]) -> threading.Thread:
        def _run():
            try:
                event = fn()
            except Exception as e:
                log.error("background_job_failed", job=name, error=str(e))
                event = Failed(f"{name} failed: {e}")
            self._results.put(event)

        t = threading.Thread(target=_run, name=f"mp3tag-{name}", daemon=True)
        t.start()
        return t
