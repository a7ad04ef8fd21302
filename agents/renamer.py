#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Renamer Agent - Gives tagged files their canonical "Artist - Title.mp3" name.
"""

from pathlib import Path
from typing import Any, Dict, Union

from utilities.renamer import build_filename, rename_file
from utilities.scanner import AudioFile, scan_path

from .base import BaseAgent


class RenameAgent(BaseAgent):
    """
    Renamer agent.

    Untagged files and files missing artist or title are skipped.
    A name collision fails only that file; it keeps its old name.
    """

    def __init__(self, config, dry_run: bool = False):
        super().__init__(config)
        self.dry_run = dry_run

    @property
    def name(self) -> str:
        return "Renamer"

    def run(self, path: Union[str, Path], callback=None) -> Dict[str, Any]:
        """Scan a file or directory and rename every tagged file"""
        files = scan_path(path)
        return self.process_batch(files, callback=callback)

    def process(self, item: AudioFile) -> Dict[str, Any]:
        result: Dict[str, Any] = {"path": str(item.path), "old": item.filename}

        if item.current_tags is None:
            return {**result, "status": "skipped", "reason": "no tags"}

        new_name = build_filename(item.current_tags, extension=item.path.suffix.lstrip(".").lower())
        if new_name is None:
            return {**result, "status": "skipped", "reason": "artist or title missing"}

        if new_name == item.filename:
            return {**result, "status": "skipped", "reason": "already named", "new": new_name}

        if self.dry_run:
            target = item.path.parent / new_name
            status = "failed" if target.exists() else "success"
            return {**result, "status": status, "new": new_name, "dry_run": True}

        item.path = rename_file(item.path, item.current_tags)
        self.log("renamed", old=result["old"], new=item.filename)
        return {**result, "status": "success", "new": item.filename}
