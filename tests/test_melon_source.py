"""Tests for the Melon scraper against canned HTML."""

import pytest
import requests

from sources.base import Provenance, TrackInfo
from sources.exceptions import SourceError
from sources.melon import DETAIL_URL, SEARCH_URL, MelonSource, strip_resize_suffix

SEARCH_HTML = """
<html><body><table>
<thead><tr><th>곡명</th></tr></thead>
<tbody>
<tr>
  <td><input type="checkbox" class="input_check" value="32183386"></td>
  <td><a class="fc_gray" title="Blueming" href="javascript:;">Blueming</a></td>
  <td><div id="artistName"><a class="fc_mgray" href="javascript:goArtistDetail('261143')">아이유</a></div></td>
  <td><a class="fc_mgray" href="https://www.melon.com/album/detail.htm?albumId=10346641">Love poem</a></td>
</tr>
<tr>
  <td><input type="checkbox" class="input_check" value="1234"></td>
  <td><a class="fc_gray" title="Untitled" href="javascript:;">Untitled</a></td>
</tr>
<tr>
  <td><input type="checkbox" class="input_check" value="5678"></td>
  <td><a class="fc_gray" href="javascript:;">No title attribute</a></td>
</tr>
<tr>
  <td><a class="fc_gray" title="No checkbox">No checkbox</a></td>
</tr>
</tbody>
</table></body></html>
"""

DETAIL_HTML = """
<html><body>
<div id="d_song_org">
  <a><img src="https://cdnimg.melon.co.kr/cm/album/images/103/46/641_500.jpg/melon/resize/282/quality/80/optimize" /></a>
</div>
<div class="meta">
  <dl class="list">
    <dt>앨범</dt><dd>Love&nbsp;poem</dd>
    <dt>발매일</dt><dd>2019.11.18</dd>
    <dt>장르</dt><dd>발라드</dd>
    <dt>FLAC</dt><dd>16/24bit</dd>
  </dl>
</div>
</body></html>
"""

ORIGINAL_ART_URL = "https://cdnimg.melon.co.kr/cm/album/images/103/46/641_500.jpg"


class FakeResponse:
    def __init__(self, text="", content=b"", status=200):
        self.text = text
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeWeb:
    """Routes session.get calls by URL"""

    def __init__(self, pages):
        self.pages = pages
        self.requests = []

    def get(self, url, params=None, **kw):
        self.requests.append((url, params))
        page = self.pages.get(url)
        if page is None:
            return FakeResponse(status=404)
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def source():
    return MelonSource()


def install(source, monkeypatch, pages):
    web = FakeWeb(pages)
    monkeypatch.setattr(source.session, "get", web.get)
    return web


def detail_track(song_id="32183386"):
    return TrackInfo(
        source=Provenance.MELON,
        title="Blueming",
        artist="아이유",
        album_art_url=DETAIL_URL.format(song_id=song_id)
    )


class TestSearch:
    """Parsing the song search page."""

    def test_parses_rows(self, source, monkeypatch):
        install(source, monkeypatch, {SEARCH_URL: FakeResponse(text=SEARCH_HTML)})

        results = source.search("아이유 Blueming")

        assert [r.title for r in results] == ["Blueming", "Untitled"]
        first = results[0]
        assert first.source is Provenance.MELON
        assert first.artist == "아이유"
        assert first.album == "Love poem"
        assert first.album_art_url == "https://www.melon.com/song/detail.htm?songId=32183386"
        assert first.album_art is None

    def test_missing_columns_are_none(self, source, monkeypatch):
        install(source, monkeypatch, {SEARCH_URL: FakeResponse(text=SEARCH_HTML)})

        second = source.search("x")[1]

        assert second.artist is None
        assert second.album is None

    def test_sends_query_params(self, source, monkeypatch):
        web = install(source, monkeypatch, {SEARCH_URL: FakeResponse(text=SEARCH_HTML)})

        source.search("IU Blueming")

        url, params = web.requests[0]
        assert url == SEARCH_URL
        assert params["q"] == "IU Blueming"
        assert params["searchGnbYn"] == "Y"

    def test_sends_browser_user_agent(self, source):
        assert "Mozilla" in source.session.headers["User-Agent"]

    def test_empty_page(self, source, monkeypatch):
        install(source, monkeypatch, {SEARCH_URL: FakeResponse(text="<html></html>")})
        assert source.search("nothing") == []

    def test_http_error(self, source, monkeypatch):
        install(source, monkeypatch, {SEARCH_URL: FakeResponse(status=503)})
        with pytest.raises(SourceError):
            source.search("IU")

    def test_network_error(self, source, monkeypatch):
        install(source, monkeypatch, {SEARCH_URL: requests.ConnectionError("offline")})
        with pytest.raises(SourceError):
            source.search("IU")

    def test_name(self, source):
        assert source.name == "Melon"


class TestFetchDetail:
    """Parsing the song detail page."""

    def test_fills_metadata_and_art(self, source, monkeypatch):
        web = install(source, monkeypatch, {
            detail_track().album_art_url: FakeResponse(text=DETAIL_HTML),
            ORIGINAL_ART_URL: FakeResponse(content=b"cover"),
        })

        detail = source.fetch_detail(detail_track())

        assert detail.year == 2019
        assert detail.genre == "발라드"
        assert detail.album == "Love poem"
        assert detail.album_art == b"cover"
        assert detail.title == "Blueming"
        assert detail.artist == "아이유"
        assert web.requests[-1][0] == ORIGINAL_ART_URL

    def test_art_failure_keeps_metadata(self, source, monkeypatch):
        install(source, monkeypatch, {
            detail_track().album_art_url: FakeResponse(text=DETAIL_HTML),
        })

        detail = source.fetch_detail(detail_track())

        assert detail.year == 2019
        assert detail.album_art is None

    def test_page_without_metadata(self, source, monkeypatch):
        install(source, monkeypatch, {
            detail_track().album_art_url: FakeResponse(text="<html><body></body></html>"),
        })

        detail = source.fetch_detail(detail_track())

        assert detail == detail_track()

    def test_detail_page_error(self, source, monkeypatch):
        install(source, monkeypatch, {})
        with pytest.raises(SourceError):
            source.fetch_detail(detail_track())

    def test_requires_detail_url(self, source):
        with pytest.raises(SourceError):
            source.fetch_detail(TrackInfo(source=Provenance.MELON, title="x"))


class TestFetchAlbumArt:

    def test_returns_bytes(self, source, monkeypatch):
        install(source, monkeypatch, {
            detail_track().album_art_url: FakeResponse(text=DETAIL_HTML),
            ORIGINAL_ART_URL: FakeResponse(content=b"cover"),
        })
        assert source.fetch_album_art(detail_track()) == b"cover"

    def test_no_image(self, source, monkeypatch):
        install(source, monkeypatch, {
            detail_track().album_art_url: FakeResponse(text="<html></html>"),
        })
        with pytest.raises(SourceError):
            source.fetch_album_art(detail_track())


class TestStripResizeSuffix:

    def test_strips(self):
        url = "https://cdn/album/1.jpg/melon/resize/282/quality/80"
        assert strip_resize_suffix(url) == "https://cdn/album/1.jpg"

    def test_plain_url_unchanged(self):
        assert strip_resize_suffix("https://cdn/album/1.jpg") == "https://cdn/album/1.jpg"
