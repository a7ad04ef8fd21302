"""Shared fixtures: MP3 files on disk and an in-memory music source."""

import logging
from pathlib import Path

import pytest
import structlog
from mutagen.id3 import APIC, ID3, TALB, TIT2, TPE1

from sources.base import MusicSource, Provenance, TrackInfo
from sources.exceptions import SourceError

# An MPEG audio frame header followed by silence; enough for mutagen's ID3 layer
MP3_BYTES = b"\xff\xfb\x90\x64" + b"\x00" * 413

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_mp3(path: Path, title=None, artist=None, album=None, art=None) -> Path:
    """Write a small MP3 file, with an ID3 tag when any field is given"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(MP3_BYTES)
    if any(v is not None for v in (title, artist, album, art)):
        tags = ID3()
        if title is not None:
            tags.add(TIT2(encoding=3, text=[title]))
        if artist is not None:
            tags.add(TPE1(encoding=3, text=[artist]))
        if album is not None:
            tags.add(TALB(encoding=3, text=[album]))
        if art is not None:
            tags.add(APIC(encoding=3, mime="image/jpeg", type=3, desc="", data=art))
        tags.save(str(path), v2_version=4)
    return path


class FakeSource(MusicSource):
    """Catalog that answers from a dict of query -> results"""

    def __init__(self, results=None, art=JPEG_BYTES, fail_search=False, fail_art=False):
        super().__init__(rate_limit=0.0)
        self.results = results or {}
        self.art = art
        self.fail_search = fail_search
        self.fail_art = fail_art
        self.queries = []

    @property
    def name(self) -> str:
        return "Fake"

    def search(self, query):
        self.queries.append(query)
        if self.fail_search:
            raise SourceError("search is down")
        return list(self.results.get(query, []))

    def fetch_album_art(self, track):
        if self.fail_art:
            raise SourceError("no art")
        return self.art


def spotify_result(**kw) -> TrackInfo:
    defaults = dict(
        source=Provenance.SPOTIFY,
        title="Blueming",
        artist="IU",
        album="Love poem",
        album_artist="IU",
        track_number=3,
        year=2019,
        album_art_url="https://i.scdn.co/image/large"
    )
    defaults.update(kw)
    return TrackInfo(**defaults)


@pytest.fixture
def mp3(tmp_path):
    """Factory: mp3('name.mp3', title=...) -> Path inside tmp_path"""
    def _make(name, **tags):
        return make_mp3(tmp_path / name, **tags)
    return _make


@pytest.fixture
def fake_source():
    return FakeSource(results={"IU Blueming": [spotify_result()]})


@pytest.fixture
def blueming():
    return spotify_result()


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging() replaces root handlers; put them back after each test"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
