#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ID3 tag reading, merging and writing for MP3 files.

Tags are treated as partially-known records: reading yields only the
frames present, writing touches only the fields that are set, and
merging lets the newer record win field by field.
"""

from dataclasses import fields, replace
from pathlib import Path
from typing import Optional, Union

import structlog
from mutagen import MutagenError
from mutagen.id3 import (
    APIC, ID3, BitPaddedInt, ID3NoHeaderError, PictureType,
    TALB, TCON, TDRC, TIT2, TPE1, TPE2, TRCK,
    error as ID3Error,
)

from sources.base import Provenance, TrackInfo

log = structlog.get_logger()

PNG_MAGIC = b"\x89PNG"
ID3_HEADER_SIZE = 10


class TagReadError(Exception):
    """The file has an ID3 header but the tag could not be parsed."""


class TagWriteError(Exception):
    """Saving the tag failed."""


def read_tags(path: Union[str, Path]) -> Optional[TrackInfo]:
    """
    Read ID3 tags into a TrackInfo.

    Args:
        path: MP3 file

    Returns:
        TrackInfo with source EMBEDDED, or None when the file has no ID3
        tag or its title, artist and album are all empty

    Raises:
        TagReadError: malformed tag or unreadable file
    """
    try:
        tags = ID3(str(path))
    except ID3NoHeaderError:
        return None
    except MutagenError as e:
        raise TagReadError(f"Cannot read tags from {path}: {e}") from e

    title = _text(tags, "TIT2")
    artist = _text(tags, "TPE1")
    album = _text(tags, "TALB")

    if not (title or artist or album):
        return None

    pictures = tags.getall("APIC")

    return TrackInfo(
        source=Provenance.EMBEDDED,
        title=title,
        artist=artist,
        album=album,
        album_artist=_text(tags, "TPE2"),
        track_number=_track_number(tags),
        year=_year(tags),
        genre=_genre(tags),
        album_art=pictures[0].data if pictures else None
    )


def write_tags(path: Union[str, Path], info: TrackInfo) -> None:
    """
    Write the fields set in `info` as ID3v2.4 frames.

    Fields that are None leave the existing frames alone. A file without
    any tag, or with one that cannot be parsed, gets a new one. Album art
    replaces every existing picture.

    Raises:
        TagWriteError: the tag could not be loaded or saved
    """
    broken = False
    try:
        tags = ID3(str(path))
    except ID3NoHeaderError:
        tags = ID3()
    except ID3Error as e:
        log.warning("unreadable_tag_replaced", path=str(path), error=str(e))
        tags = ID3()
        broken = True
    except MutagenError as e:
        raise TagWriteError(f"Cannot load tags from {path}: {e}") from e

    if info.title is not None:
        tags.add(TIT2(encoding=3, text=[info.title]))
    if info.artist is not None:
        tags.add(TPE1(encoding=3, text=[info.artist]))
    if info.album is not None:
        tags.add(TALB(encoding=3, text=[info.album]))
    if info.album_artist is not None:
        tags.add(TPE2(encoding=3, text=[info.album_artist]))
    if info.track_number is not None:
        tags.add(TRCK(encoding=3, text=[str(info.track_number)]))
    if info.year is not None:
        tags.add(TDRC(encoding=3, text=[str(info.year)]))
    if info.genre is not None:
        tags.add(TCON(encoding=3, text=[info.genre]))

    if info.album_art is not None:
        tags.delall("APIC")
        tags.add(APIC(
            encoding=3,
            mime=detect_mime_type(info.album_art),
            type=PictureType.COVER_FRONT,
            desc="",
            data=info.album_art
        ))

    try:
        if broken:
            _drop_id3_header(Path(path))
        tags.save(str(path), v2_version=4)
    except (MutagenError, OSError) as e:
        raise TagWriteError(f"Cannot write tags to {path}: {e}") from e

    log.info("tags_written", path=str(path), source=info.source.value)


def _drop_id3_header(path: Path) -> None:
    """Cut an unparseable ID3v2 block off the front of the file"""
    data = path.read_bytes()
    size = BitPaddedInt(data[6:10]) + ID3_HEADER_SIZE
    if size > len(data):
        # Size field is garbage too; only the header itself is certain
        size = ID3_HEADER_SIZE
    path.write_bytes(data[size:])


def merge_tags(existing: Optional[TrackInfo], incoming: TrackInfo) -> TrackInfo:
    """
    Merge two records; incoming values win wherever they are set.

    The result always carries incoming's source.
    """
    if existing is None:
        return incoming

    merged = {}
    for f in fields(TrackInfo):
        if f.name == "source":
            continue
        value = getattr(incoming, f.name)
        merged[f.name] = value if value is not None else getattr(existing, f.name)

    return replace(incoming, **merged)


def detect_mime_type(data: bytes) -> str:
    """PNG by magic number, JPEG otherwise"""
    if data.startswith(PNG_MAGIC):
        return "image/png"
    return "image/jpeg"


def _text(tags: ID3, frame_id: str) -> Optional[str]:
    frame = tags.get(frame_id)
    if frame is None or not frame.text:
        return None
    value = str(frame.text[0])
    return value or None


def _track_number(tags: ID3) -> Optional[int]:
    # "3/12" -> 3
    value = _text(tags, "TRCK")
    if not value:
        return None
    try:
        return int(value.split("/")[0])
    except ValueError:
        return None


def _year(tags: ID3) -> Optional[int]:
    frame = tags.get("TDRC")
    if frame is None or not frame.text:
        return None
    return frame.text[0].year


def _genre(tags: ID3) -> Optional[str]:
    frame = tags.get("TCON")
    if frame is None:
        return None
    genres = frame.genres
    return genres[0] if genres else None
