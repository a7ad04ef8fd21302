#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Melon web scraper.
Unauthenticated catalog - song search page and song detail page.

Search results carry no artwork, so the detail page URL is stored in
album_art_url and resolved later by fetch_detail().
"""

from dataclasses import replace
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from .base import MusicSource, Provenance, TrackInfo
from .exceptions import SourceError

SEARCH_URL = "https://www.melon.com/search/song/index.htm"
DETAIL_URL = "https://www.melon.com/song/detail.htm?songId={song_id}"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Labels of the detail page metadata list
RELEASE_DATE_LABEL = "발매일"
GENRE_LABEL = "장르"
ALBUM_LABEL = "앨범"

# Thumbnails are served as <original>/melon/resize/...
RESIZE_MARKER = "/melon/resize/"


def strip_resize_suffix(url: str) -> str:
    """Return the original-resolution image URL for a resized thumbnail"""
    pos = url.find(RESIZE_MARKER)
    return url[:pos] if pos >= 0 else url


def _normalize(text: str) -> str:
    return text.replace("\xa0", " ").strip()


class MelonSource(MusicSource):
    """
    Melon data source.

    Scrapes HTML, so it breaks whenever the site layout changes.
    No credentials needed.
    """

    def __init__(self, rate_limit: float = 0.0):
        super().__init__(rate_limit)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    @property
    def name(self) -> str:
        return "Melon"

    def search(self, query: str) -> List[TrackInfo]:
        """
        Search songs by free text.

        Args:
            query: Usually "artist title"

        Returns:
            One result per song row; album_art_url holds the detail page URL
        """
        params = {
            "q": query,
            "section": "",
            "searchGnbYn": "Y",
            "kkoSpl": "N",
            "kkoDpType": ""
        }
        html = self._get_html(SEARCH_URL, params=params, what="search")
        soup = BeautifulSoup(html, "html.parser")

        results = []
        for row in soup.select("tr"):
            checkbox = row.select_one("input.input_check")
            song_id = checkbox.get("value") if checkbox else None
            if not song_id:
                continue

            title_link = row.select_one("a.fc_gray")
            if title_link is None:
                continue
            title = title_link.get("title", "")
            if not title:
                continue

            artist_link = row.select_one("div#artistName a.fc_mgray")
            artist = artist_link.get_text().strip() if artist_link else ""

            # The album column uses the same link class as the artist; only
            # its href points at an album page
            album = ""
            for link in row.select("a.fc_mgray"):
                if "album" in link.get("href", ""):
                    album = link.get_text().strip()
                    break

            results.append(TrackInfo(
                source=Provenance.MELON,
                title=title,
                artist=artist or None,
                album=album or None,
                album_art_url=DETAIL_URL.format(song_id=song_id)
            ))

        self.log("search_done", query=query, results=len(results))
        return results

    def fetch_detail(self, track: TrackInfo) -> TrackInfo:
        """
        Fill in year, genre, album and artwork from the song detail page.

        Title and artist are kept as given. A failed image download
        leaves album_art empty instead of failing the whole lookup.
        """
        if not track.album_art_url:
            raise SourceError("No detail page URL on this track")

        html = self._get_html(track.album_art_url, what="detail page")
        soup = BeautifulSoup(html, "html.parser")

        updates: Dict[str, object] = {}
        labels = [_normalize(dt.get_text()) for dt in soup.select("div.meta dl.list dt")]
        values = [_normalize(dd.get_text()) for dd in soup.select("div.meta dl.list dd")]

        for label, value in zip(labels, values):
            if label == RELEASE_DATE_LABEL:
                # "2007.05.07" -> 2007
                year = self._extract_year(value, separator=".")
                if year is not None:
                    updates["year"] = year
            elif label == GENRE_LABEL:
                if value:
                    updates["genre"] = value
            elif label == ALBUM_LABEL:
                if value:
                    updates["album"] = value

        art = self._download_art(soup)
        if art is not None:
            updates["album_art"] = art

        return replace(track, **updates)

    def fetch_album_art(self, track: TrackInfo) -> bytes:
        """Album art is only reachable through the detail page"""
        detail = self.fetch_detail(track)
        if not detail.album_art:
            raise SourceError("Album art not found on the detail page")
        return detail.album_art

    def _download_art(self, soup: BeautifulSoup) -> Optional[bytes]:
        img = soup.select_one("div#d_song_org img")
        src = img.get("src") if img else None
        if not src:
            return None

        url = strip_resize_suffix(src)
        try:
            response = self.session.get(url)
            response.raise_for_status()
        except requests.RequestException as e:
            self._log.debug("album_art_download_failed", url=url, error=str(e))
            return None
        return response.content

    def _get_html(self, url: str, params: Optional[Dict[str, str]] = None, what: str = "page") -> str:
        self._rate_limit_wait()
        try:
            response = self.session.get(url, params=params)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceError(f"Melon {what} request failed: {e}") from e
        return response.text
