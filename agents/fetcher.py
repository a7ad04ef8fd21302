#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fetcher Agent - Fills in tags for untagged files from a music catalog.

Per file:
- Parse artist/title hints from the filename
- Search the catalog with them
- Let the chooser pick a result (first one by default)
- Fetch details and album art
- Merge with existing tags and write
- Optionally rename to "Artist - Title.mp3"

Search failures skip the file; the rest of the batch carries on.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from sources.base import MusicSource, TrackInfo
from sources.exceptions import SourceError
from utilities.filename_parser import build_search_query, parse_filename
from utilities.renamer import rename_file
from utilities.scanner import AudioFile, scan_path
from utilities.tagger import merge_tags, write_tags

from .base import BaseAgent

Chooser = Callable[[AudioFile, List[TrackInfo]], Optional[int]]


def first_result(item: AudioFile, results: List[TrackInfo]) -> Optional[int]:
    """Default chooser: take the top-ranked result"""
    return 0


class FetchAgent(BaseAgent):
    """
    Fetcher agent for tagging files from a catalog.

    The source must already be constructed; authentication problems
    surface there, before any file is touched.
    """

    def __init__(
        self,
        config,
        source: MusicSource,
        chooser: Optional[Chooser] = None,
        rename: bool = False
    ):
        """
        Args:
            config: ConfigManager instance
            source: Catalog to search
            chooser: Picks a result index, or None to skip the file
            rename: Rename files after writing tags
        """
        super().__init__(config)
        self.source = source
        self.chooser = chooser or first_result
        self.rename = rename

    @property
    def name(self) -> str:
        return "Fetcher"

    def run(self, path: Union[str, Path], callback=None) -> Dict[str, Any]:
        """
        Scan a file or directory and process every untagged file.

        Returns:
            Batch summary (see BaseAgent.process_batch)
        """
        files = scan_path(path)
        targets = [f for f in files if not f.has_tags]
        self.log("fetch_start", path=str(path), files=len(files), untagged=len(targets))
        return self.process_batch(targets, callback=callback)

    def process(self, item: AudioFile) -> Dict[str, Any]:
        result: Dict[str, Any] = {"path": str(item.path)}

        query = build_search_query(parse_filename(item.path))
        if not query:
            return {**result, "status": "skipped", "reason": "no search query from filename"}
        result["query"] = query

        try:
            matches = self.source.search(query)
        except SourceError as e:
            self.log_error("search_failed", path=str(item.path), error=str(e))
            return {**result, "status": "failed", "error": str(e)}

        if not matches:
            return {**result, "status": "skipped", "reason": "no search results"}

        choice = self.chooser(item, matches)
        if choice is None or not 0 <= choice < len(matches):
            return {**result, "status": "skipped", "reason": "no result chosen"}

        track = matches[choice]
        try:
            track = self.source.fetch_detail(track)
        except SourceError as e:
            # Tags without artwork are still worth writing
            self.log("detail_fetch_failed", path=str(item.path), error=str(e))
            result["detail_error"] = str(e)

        merged = merge_tags(item.current_tags, track)
        write_tags(item.path, merged)
        item.current_tags = merged
        item.has_tags = True
        result.update({"status": "success", "track": merged.summary()})

        if self.rename:
            try:
                item.path = rename_file(item.path, merged)
                result["new_path"] = str(item.path)
            except (ValueError, OSError) as e:
                self.log("rename_failed", path=str(item.path), error=str(e))
                result["rename_error"] = str(e)

        self.log("file_tagged", path=str(item.path), track=merged.summary())
        return result
