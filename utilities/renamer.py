#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rename MP3 files to "Artist - Title.mp3".

Never overwrites: if the target name is taken the file stays where it is.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Union

import structlog

from sources.base import TrackInfo

log = structlog.get_logger()

WINDOWS_INVALID_CHARS = '\\:*?"<>|'


class RenameCollisionError(FileExistsError):
    """Another file already has the target name."""


def sanitize_filename(name: str, platform: str = sys.platform) -> str:
    """
    Replace characters that can't appear in a filename with '_'.

    '/' and NUL everywhere; Windows also rejects \\ : * ? " < > | and
    control characters; macOS reserves ':'.
    """
    windows = platform.startswith("win")
    macos = platform == "darwin"

    chars = []
    for c in name:
        if c in "/\0":
            c = "_"
        elif windows and (c in WINDOWS_INVALID_CHARS or ord(c) < 32 or ord(c) == 127):
            c = "_"
        elif macos and c == ":":
            c = "_"
        chars.append(c)
    return "".join(chars)


def build_filename(info: TrackInfo, extension: str = "mp3") -> Optional[str]:
    """
    Canonical filename for a track, or None unless both artist and
    title are non-empty.
    """
    artist = (info.artist or "").strip()
    title = (info.title or "").strip()
    if not artist or not title:
        return None
    return f"{sanitize_filename(artist)} - {sanitize_filename(title)}.{extension}"


def rename_file(old_path: Union[str, Path], info: TrackInfo) -> Path:
    """
    Rename a file to its canonical name in the same directory.

    Returns:
        The new path, or the unchanged path when it already has that name

    Raises:
        ValueError: artist or title missing
        RenameCollisionError: target already exists
    """
    old_path = Path(old_path)
    new_name = build_filename(info, extension=old_path.suffix.lstrip(".").lower() or "mp3")
    if new_name is None:
        raise ValueError(f"Artist and title are both required to rename {old_path.name}")

    new_path = old_path.parent / new_name
    if new_path == old_path:
        return old_path

    # On case-insensitive filesystems a case-only change "exists" already
    if new_path.exists() and not new_path.samefile(old_path):
        raise RenameCollisionError(f"File already exists: {new_path}")

    os.rename(old_path, new_path)
    log.info("file_renamed", old=old_path.name, new=new_name)
    return new_path
