#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Filename Parser

Recover artist/title hints from common download naming conventions,
tried in this order:

    "01 IU - Blueming.mp3"   -> artist "IU", title "Blueming"
    "IU - Blueming.mp3"      -> artist "IU", title "Blueming"
    "01. Blueming.mp3"       -> title "Blueming"
    "Blueming.mp3"           -> title "Blueming"

A stem made only of digits has nothing left after the track number,
so it ends up as the title itself.
"""

from pathlib import Path
from typing import Optional, Union

from sources.base import Provenance, TrackInfo

SEPARATOR = " - "


def parse_filename(path: Union[str, Path]) -> TrackInfo:
    """Parse the stem of a file path (extension is dropped)"""
    return parse_stem(Path(path).stem)


def parse_stem(stem: str) -> TrackInfo:
    """
    Parse a filename stem into a TrackInfo with source FILENAME.

    Args:
        stem: Filename without extension

    Returns:
        TrackInfo with title and possibly artist
    """
    stem = stem.strip()

    rest = _strip_track_number(stem)

    # "01 Artist - Title" / "01. Artist - Title"
    if rest is not None:
        info = _split_artist_title(rest)
        if info:
            return info

    # "Artist - Title"
    info = _split_artist_title(stem)
    if info:
        return info

    # "01. Title" / "01 Title"
    if rest is not None and rest.strip():
        return TrackInfo(source=Provenance.FILENAME, title=rest.strip())

    return TrackInfo(source=Provenance.FILENAME, title=stem)


def build_search_query(info: TrackInfo) -> str:
    """
    Build a catalog search query: artist then title.

    Returns an empty string when neither is known, meaning the file
    cannot be searched.
    """
    parts = [p for p in (info.artist, info.title) if p]
    return " ".join(parts)


def _split_artist_title(text: str) -> Optional[TrackInfo]:
    parts = text.split(SEPARATOR, 1)
    if len(parts) != 2:
        return None

    artist = parts[0].strip()
    title = parts[1].strip()
    if not artist or not title:
        return None

    return TrackInfo(source=Provenance.FILENAME, title=title, artist=artist)


def _strip_track_number(stem: str) -> Optional[str]:
    """
    Remove a leading track number plus an optional '.' and spaces.

    Returns None when the stem doesn't start with digits or nothing
    is left afterwards.
    """
    if len(stem) < 2:
        return None

    i = 0
    while i < len(stem) and stem[i] in "0123456789":
        i += 1
    if i == 0:
        return None

    rest = stem[i:]
    if rest.startswith("."):
        rest = rest[1:]
    rest = rest.lstrip()

    return rest or None
