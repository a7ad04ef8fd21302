"""Tests for the session reducer and its write helpers."""

from dataclasses import replace
from pathlib import Path

import pytest

from orchestrator.session import (
    AlbumArtDone, EditFields, Failed, FieldEdited, FileSelected, ResultSelected,
    ScanDone, ScanStarted, SearchDone, SearchStarted, SessionState, TagsWritten,
    pending_apply, pending_save, reduce,
)
from sources.base import Provenance, TrackInfo
from utilities.scanner import AudioFile

from conftest import JPEG_BYTES, spotify_result


def tagged_file(name="a.mp3", **tags):
    info = TrackInfo(source=Provenance.EMBEDDED, **tags)
    return AudioFile(path=Path("/music") / name, current_tags=info, has_tags=True)


def untagged_file(name):
    return AudioFile(path=Path("/music") / name)


def found(state, *results):
    """Deliver results for the search currently in flight"""
    return reduce(state, SearchDone(tuple(results), state.search_id))


@pytest.fixture
def scanned():
    files = (
        tagged_file("a.mp3", title="Blueming", artist="IU", year=2019, album_art=JPEG_BYTES),
        untagged_file("01 IU - Palette.mp3"),
    )
    return reduce(SessionState(), ScanDone(files))


class TestScan:

    def test_started(self):
        state = reduce(SessionState(), ScanStarted("/music"))
        assert state.directory == "/music"
        assert state.is_loading

    def test_done_resets_selection(self, scanned):
        state = reduce(scanned, FileSelected(0))
        state = reduce(state, ScanDone(()))

        assert state.files == ()
        assert state.selected_index is None
        assert state.edit == EditFields()
        assert not state.is_loading
        assert state.status_msg == "Found 0 MP3 files"

    def test_reduce_does_not_mutate(self, scanned):
        reduce(scanned, FileSelected(0))
        assert scanned.selected_index is None


class TestFileSelected:

    def test_tagged_file_fills_editor(self, scanned):
        state = reduce(scanned, FileSelected(0))

        assert state.selected_file.filename == "a.mp3"
        assert state.edit.title == "Blueming"
        assert state.edit.year == "2019"
        assert state.search_query == "IU Blueming"

    def test_untagged_file_uses_filename(self, scanned):
        state = reduce(scanned, FileSelected(1))

        assert state.edit.artist == "IU"
        assert state.edit.title == "Palette"
        assert state.edit.album == ""
        assert state.search_query == "IU Palette"

    def test_clears_previous_results(self, scanned):
        state = found(scanned, spotify_result())
        state = reduce(state, FileSelected(1))
        assert state.search_results == ()

    def test_out_of_range_clears_selection(self, scanned):
        state = reduce(reduce(scanned, FileSelected(0)), FileSelected(9))
        assert state.selected_index is None
        assert state.selected_file is None


class TestSearch:

    def test_started_sets_query(self):
        state = reduce(SessionState(), SearchStarted("IU"))
        assert state.search_query == "IU"
        assert state.is_loading

    def test_done_stores_results(self):
        state = found(SessionState(is_loading=True), spotify_result())
        assert len(state.search_results) == 1
        assert not state.is_loading

    def test_album_art_attached_by_index(self):
        state = found(SessionState(), spotify_result(), spotify_result(title="B"))
        state = reduce(state, AlbumArtDone(1, b"art", state.search_id))

        assert state.search_results[1].album_art == b"art"
        assert state.search_results[0].album_art is None

    def test_late_album_art_is_ignored(self):
        state = reduce(SessionState(), AlbumArtDone(3, b"art", 0))
        assert state == SessionState()

    def test_art_from_superseded_search_is_dropped(self):
        state = reduce(SessionState(), SearchStarted("IU"))
        old_search = state.search_id
        state = found(state, spotify_result(title="Old"))
        state = reduce(state, SearchStarted("IU Blueming"))
        state = found(state, spotify_result(title="New"))

        state = reduce(state, AlbumArtDone(0, b"old cover", old_search))

        assert state.search_results[0].title == "New"
        assert state.search_results[0].album_art is None

    def test_results_of_superseded_search_are_dropped(self):
        state = reduce(SessionState(), SearchStarted("IU"))
        old_search = state.search_id
        state = reduce(state, SearchStarted("IU Blueming"))

        state = reduce(state, SearchDone((spotify_result(title="Old"),), old_search))

        assert state.search_results == ()
        assert state.is_loading

    def test_selecting_a_file_invalidates_pending_search(self, scanned):
        state = reduce(scanned, SearchStarted("IU"))
        pending = state.search_id
        state = reduce(state, FileSelected(1))

        state = reduce(state, SearchDone((spotify_result(),), pending))

        assert state.search_results == ()

    def test_failed_keeps_results(self):
        state = found(SessionState(is_loading=True), spotify_result())
        state = reduce(state, Failed("album_art failed: timeout"))
        assert state.status_msg == "album_art failed: timeout"
        assert len(state.search_results) == 1


class TestEditing:

    def test_field_edited(self, scanned):
        state = reduce(reduce(scanned, FileSelected(0)), FieldEdited("genre", "Ballad"))
        assert state.edit.genre == "Ballad"

    def test_unknown_field_is_reported(self, scanned):
        state = reduce(scanned, FileSelected(0))

        edited = reduce(state, FieldEdited("lyrics", "la la"))

        assert edited.edit == state.edit
        assert edited.status_msg == "Unknown field: lyrics"

    def test_search_query_field(self):
        state = reduce(SessionState(), FieldEdited("search_query", "IU Palette"))
        assert state.search_query == "IU Palette"

    def test_result_selected_fills_editor(self):
        state = found(SessionState(), spotify_result())
        state = reduce(state, ResultSelected(0))

        assert state.selected_result == 0
        assert state.edit.album == "Love poem"
        assert state.edit.track == "3"

    def test_result_out_of_range(self):
        state = reduce(SessionState(), ResultSelected(0))
        assert state.selected_result is None

    def test_unknown_event(self):
        with pytest.raises(TypeError):
            reduce(SessionState(), object())


class TestEditFields:

    def test_to_track(self):
        edit = EditFields(title=" Blueming ", artist="IU", track="3", year="not a year")
        info = edit.to_track()

        assert info.source is Provenance.MANUAL
        assert info.title == "Blueming"
        assert info.track_number == 3
        assert info.year is None
        assert info.album is None


class TestPendingWrites:

    def test_save_keeps_art(self, scanned):
        state = reduce(reduce(scanned, FileSelected(0)), FieldEdited("title", "New"))

        index, path, info = pending_save(state)

        assert index == 0
        assert path == Path("/music/a.mp3")
        assert info.title == "New"
        assert info.album_art == JPEG_BYTES

    def test_nothing_selected(self, scanned):
        assert pending_save(scanned) is None
        assert pending_apply(scanned, 0) is None

    def test_apply(self, scanned):
        state = found(reduce(scanned, FileSelected(1)), spotify_result())

        index, path, info = pending_apply(state, 0)

        assert index == 1
        assert info.title == "Blueming"
        assert pending_apply(state, 1) is None

    def test_tags_written_updates_file(self, scanned):
        info = spotify_result()
        state = reduce(scanned, TagsWritten(1, info))

        assert state.files[1].has_tags
        assert state.files[1].current_tags == info
        assert not scanned.files[1].has_tags
