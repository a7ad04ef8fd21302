#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tagging Orchestrator - drives an interactive tagging session.

Provides a programmatic interface for a front end (terminal or GUI):
    Scan -> Select file -> Search -> Pick result -> Write tags

Usage:
    from orchestrator import TaggingOrchestrator

    orch = TaggingOrchestrator(config)
    orch.scan('/path/to/music')
    orch.pump()             # call from the UI loop
    orch.select_file(0)
    orch.search()
    ...
    orch.apply_result(0)

All state lives in orch.state (a SessionState); background outcomes are
only applied inside pump(), on the caller's thread.
"""

from typing import Callable, List, Optional

import structlog

from sources import create_source
from sources.base import MusicSource
from utilities.tagger import TagWriteError, write_tags

from .config import ConfigManager
from .session import (
    Event, Failed, FieldEdited, FileSelected, ResultSelected, ScanStarted,
    SearchDone, SearchStarted, SessionState, TagsWritten,
    pending_apply, pending_save, reduce,
)
from .worker import BackgroundWorker

log = structlog.get_logger()


class TaggingOrchestrator:
    """
    Owns the session state and the background worker.

    Writes happen synchronously on the calling thread; the caller is the
    only writer, so two writes to the same file never overlap.
    """

    def __init__(
        self,
        config: ConfigManager,
        source_name: Optional[str] = None,
        source_factory: Optional[Callable[[], MusicSource]] = None
    ):
        """
        Args:
            config: ConfigManager instance
            source_name: 'spotify' or 'melon' (default from config)
            source_factory: Overrides how per-job source instances are built
        """
        self.config = config
        self.source_name = source_name or config.default_source
        self.state = SessionState()
        self.worker = BackgroundWorker(
            source_factory or (lambda: create_source(self.source_name, self.config))
        )

    def dispatch(self, event: Event) -> SessionState:
        self.state = reduce(self.state, event)
        return self.state

    # ==================== Background jobs ====================

    def scan(self, directory: str) -> None:
        self.dispatch(ScanStarted(directory))
        self.worker.start_scan(directory)

    def search(self, query: Optional[str] = None) -> bool:
        """
        Start a search for `query` (default: the current search field).

        Returns:
            False when there is nothing to search for
        """
        query = (query if query is not None else self.state.search_query).strip()
        if not query:
            self.dispatch(Failed("Nothing to search for"))
            return False
        self.dispatch(SearchStarted(query))
        self.worker.start_search(query, self.state.search_id)
        return True

    def pump(self) -> List[Event]:
        """
        Apply every finished background result to the state.

        New search results also start one art download per result.
        """
        events = self.worker.poll()
        for event in events:
            self.dispatch(event)
            # Only the current search gets artwork
            if isinstance(event, SearchDone) and event.search_id == self.state.search_id:
                for i, track in enumerate(event.results):
                    if track.album_art_url:
                        self.worker.start_album_art(i, track, event.search_id)
        return events

    # ==================== User actions ====================

    def select_file(self, index: int) -> None:
        self.dispatch(FileSelected(index))

    def edit_field(self, name: str, value: str) -> None:
        self.dispatch(FieldEdited(name, value))

    def select_result(self, index: int) -> None:
        self.dispatch(ResultSelected(index))

    def save(self) -> bool:
        """Write the editor fields to the selected file"""
        return self._write(pending_save(self.state))

    def apply_result(self, index: int) -> bool:
        """Write a search result (with any fetched art) to the selected file"""
        self.dispatch(ResultSelected(index))
        return self._write(pending_apply(self.state, index))

    def _write(self, pending) -> bool:
        if pending is None:
            return False
        index, path, info = pending
        try:
            write_tags(path, info)
        except TagWriteError as e:
            log.error("tag_write_failed", path=str(path), error=str(e))
            self.dispatch(Failed(f"Save failed: {e}"))
            return False
        self.dispatch(TagsWritten(index, info))
        return True

    def __repr__(self) -> str:
        return f"TaggingOrchestrator(source={self.source_name}, files={len(self.state.files)})"
