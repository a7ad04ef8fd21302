#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Scanner - find MP3 files and load their current tags.

Usage:
    from utilities.scanner import scan_path

    for f in scan_path("/path/to/music"):
        print(f.filename, f.has_tags)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import structlog

from sources.base import TrackInfo
from .tagger import TagReadError, read_tags

log = structlog.get_logger()

AUDIO_EXTENSION = ".mp3"


class UnsupportedFileError(ValueError):
    """The path is not an MP3 file."""


@dataclass
class AudioFile:
    """Snapshot of one MP3 file and its tags at scan time"""
    path: Path
    current_tags: Optional[TrackInfo] = None
    has_tags: bool = False

    @property
    def filename(self) -> str:
        return self.path.name


def is_mp3(path: Union[str, Path]) -> bool:
    """Check the extension, ignoring case"""
    return Path(path).suffix.lower() == AUDIO_EXTENSION


def scan_directory(directory: Union[str, Path]) -> List[AudioFile]:
    """
    Recursively collect every MP3 below a directory.

    Files whose tags cannot be parsed are listed as untagged.

    Raises:
        NotADirectoryError: directory is not a directory
    """
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    files: List[AudioFile] = []
    _collect(root, files)
    files.sort(key=lambda f: f.path)

    log.info(
        "scan_done",
        directory=str(root),
        files=len(files),
        tagged=sum(1 for f in files if f.has_tags)
    )
    return files


def load_single_file(path: Union[str, Path]) -> AudioFile:
    """
    Load one MP3 file.

    Raises:
        FileNotFoundError: path does not exist
        UnsupportedFileError: not an .mp3 file
        TagReadError: the tag is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not is_mp3(path):
        raise UnsupportedFileError(f"Not an MP3 file: {path}")
    return _load(path, read_tags(path))


def scan_path(path: Union[str, Path]) -> List[AudioFile]:
    """Scan a directory recursively, or load a single file"""
    path = Path(path)
    if path.is_dir():
        return scan_directory(path)
    return [load_single_file(path)]


def _collect(directory: Path, files: List[AudioFile]) -> None:
    for entry in directory.iterdir():
        if entry.is_dir():
            _collect(entry, files)
        elif is_mp3(entry):
            try:
                tags = read_tags(entry)
            except TagReadError as e:
                log.warning("tag_read_failed", path=str(entry), error=str(e))
                tags = None
            files.append(_load(entry, tags))


def _load(path: Path, tags: Optional[TrackInfo]) -> AudioFile:
    return AudioFile(path=path, current_tags=tags, has_tags=tags is not None)
