#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Interactive tagging session state.

The state is an immutable SessionState; every change goes through
reduce(state, event). Background results (ScanDone, SearchDone,
AlbumArtDone, Failed) and user actions are both events, so a front end
only has to feed events in and render the state that comes out.
File writes stay outside: pending_save() and pending_apply() say what
to write, and the caller reports the outcome with TagsWritten or Failed.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Tuple, Union

from sources.base import Provenance, TrackInfo
from utilities.filename_parser import build_search_query, parse_filename
from utilities.scanner import AudioFile


# ==================== Events ====================

@dataclass(frozen=True)
class ScanStarted:
    directory: str


@dataclass(frozen=True)
class ScanDone:
    files: Tuple[AudioFile, ...]


@dataclass(frozen=True)
class SearchStarted:
    query: str


@dataclass(frozen=True)
class SearchDone:
    results: Tuple[TrackInfo, ...]
    search_id: int


@dataclass(frozen=True)
class AlbumArtDone:
    index: int
    data: bytes
    search_id: int


@dataclass(frozen=True)
class Failed:
    message: str


@dataclass(frozen=True)
class FileSelected:
    index: int


@dataclass(frozen=True)
class FieldEdited:
    name: str
    value: str


@dataclass(frozen=True)
class ResultSelected:
    index: int


@dataclass(frozen=True)
class TagsWritten:
    index: int
    info: TrackInfo


Event = Union[
    ScanStarted, ScanDone, SearchStarted, SearchDone, AlbumArtDone, Failed,
    FileSelected, FieldEdited, ResultSelected, TagsWritten,
]


# ==================== State ====================

@dataclass(frozen=True)
class EditFields:
    """Text contents of the tag editor"""
    title: str = ""
    artist: str = ""
    album: str = ""
    album_artist: str = ""
    track: str = ""
    year: str = ""
    genre: str = ""

    @classmethod
    def from_track(cls, info: TrackInfo) -> "EditFields":
        return cls(
            title=info.title or "",
            artist=info.artist or "",
            album=info.album or "",
            album_artist=info.album_artist or "",
            track=str(info.track_number) if info.track_number is not None else "",
            year=str(info.year) if info.year is not None else "",
            genre=info.genre or ""
        )

    def to_track(self, album_art: Optional[bytes] = None) -> TrackInfo:
        """Blank fields become None; unparseable numbers are dropped"""
        return TrackInfo(
            source=Provenance.MANUAL,
            title=_non_empty(self.title),
            artist=_non_empty(self.artist),
            album=_non_empty(self.album),
            album_artist=_non_empty(self.album_artist),
            track_number=_parse_int(self.track),
            year=_parse_int(self.year),
            genre=_non_empty(self.genre),
            album_art=album_art
        )


@dataclass(frozen=True)
class SessionState:
    directory: str = ""
    files: Tuple[AudioFile, ...] = ()
    selected_index: Optional[int] = None
    edit: EditFields = EditFields()
    search_query: str = ""
    search_results: Tuple[TrackInfo, ...] = ()
    # Bumped whenever results are replaced or cleared; late outcomes of
    # older searches carry a stale id and are dropped
    search_id: int = 0
    selected_result: Optional[int] = None
    is_loading: bool = False
    status_msg: str = ""

    @property
    def selected_file(self) -> Optional[AudioFile]:
        if self.selected_index is None or not 0 <= self.selected_index < len(self.files):
            return None
        return self.files[self.selected_index]


# ==================== Transitions ====================

def reduce(state: SessionState, event: Event) -> SessionState:
    """Return the state that follows `event`. Never performs I/O."""
    if isinstance(event, ScanStarted):
        return replace(state, directory=event.directory, is_loading=True, status_msg="Scanning...")

    if isinstance(event, ScanDone):
        return replace(
            state,
            files=tuple(event.files),
            selected_index=None,
            edit=EditFields(),
            search_query="",
            search_results=(),
            search_id=state.search_id + 1,
            selected_result=None,
            is_loading=False,
            status_msg=f"Found {len(event.files)} MP3 files"
        )

    if isinstance(event, SearchStarted):
        return replace(
            state,
            search_query=event.query,
            search_id=state.search_id + 1,
            is_loading=True,
            status_msg="Searching..."
        )

    if isinstance(event, SearchDone):
        if event.search_id != state.search_id:
            return state
        return replace(
            state,
            search_results=tuple(event.results),
            selected_result=None,
            is_loading=False,
            status_msg=f"{len(event.results)} search results"
        )

    if isinstance(event, AlbumArtDone):
        if event.search_id != state.search_id:
            return state
        if not 0 <= event.index < len(state.search_results):
            return state
        results = list(state.search_results)
        results[event.index] = replace(results[event.index], album_art=event.data)
        return replace(state, search_results=tuple(results))

    if isinstance(event, Failed):
        return replace(state, is_loading=False, status_msg=event.message)

    if isinstance(event, FileSelected):
        return _select_file(state, event.index)

    if isinstance(event, FieldEdited):
        if event.name == "search_query":
            return replace(state, search_query=event.value)
        if event.name not in {f.name for f in fields(EditFields)}:
            return replace(state, status_msg=f"Unknown field: {event.name}")
        return replace(state, edit=replace(state.edit, **{event.name: event.value}))

    if isinstance(event, ResultSelected):
        if not 0 <= event.index < len(state.search_results):
            return state
        result = state.search_results[event.index]
        return replace(state, selected_result=event.index, edit=EditFields.from_track(result))

    if isinstance(event, TagsWritten):
        if not 0 <= event.index < len(state.files):
            return state
        files = list(state.files)
        files[event.index] = replace(files[event.index], current_tags=event.info, has_tags=True)
        return replace(state, files=tuple(files), status_msg="Tags saved")

    raise TypeError(f"Unknown event: {event!r}")


def pending_save(state: SessionState) -> Optional[Tuple[int, Path, TrackInfo]]:
    """
    What saving the editor would write: (file index, path, record).

    The file's current album art is carried over since the editor
    has no art field.
    """
    file = state.selected_file
    if file is None:
        return None
    art = file.current_tags.album_art if file.current_tags else None
    return state.selected_index, file.path, state.edit.to_track(album_art=art)


def pending_apply(state: SessionState, result_index: int) -> Optional[Tuple[int, Path, TrackInfo]]:
    """What applying a search result to the selected file would write"""
    file = state.selected_file
    if file is None or not 0 <= result_index < len(state.search_results):
        return None
    return state.selected_index, file.path, state.search_results[result_index]


def _select_file(state: SessionState, index: int) -> SessionState:
    if not 0 <= index < len(state.files):
        return replace(state, selected_index=None, edit=EditFields(), search_query="")

    file = state.files[index]
    tags = file.current_tags
    if tags is not None:
        edit = EditFields.from_track(tags)
        query = build_search_query(tags) or state.search_query
    else:
        # No tags: start from whatever the filename suggests
        parsed = parse_filename(file.path)
        edit = EditFields(title=parsed.title or "", artist=parsed.artist or "")
        query = build_search_query(parsed)

    return replace(
        state,
        selected_index=index,
        edit=edit,
        search_query=query,
        search_results=(),
        search_id=state.search_id + 1,
        selected_result=None
    )


def _non_empty(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None
