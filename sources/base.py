#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base class for music metadata sources.
All sources (Spotify, Melon) inherit from this.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional
import time

import structlog


class Provenance(Enum):
    """Where a TrackInfo came from"""
    EMBEDDED = "id3"
    FILENAME = "filename"
    MANUAL = "manual"
    SPOTIFY = "spotify"
    MELON = "melon"


UNKNOWN = "Unknown"


@dataclass(frozen=True)
class TrackInfo:
    """
    Partially-known track metadata.

    Only `source` is mandatory. Search results carry `album_art_url`
    but no `album_art` until a detail or art fetch fills it in.
    """
    source: Provenance
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None
    track_number: Optional[int] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    album_art: Optional[bytes] = None
    album_art_url: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or UNKNOWN

    @property
    def display_artist(self) -> str:
        return self.artist or UNKNOWN

    @property
    def display_album(self) -> str:
        return self.album or UNKNOWN

    def summary(self) -> str:
        return f"{self.display_artist} - {self.display_title} [{self.display_album}]"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "source": self.source.value,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "album_artist": self.album_artist,
            "track_number": self.track_number,
            "year": self.year,
            "genre": self.genre,
            "album_art_bytes": len(self.album_art) if self.album_art else 0,
            "album_art_url": self.album_art_url
        }


class MusicSource(ABC):
    """
    Abstract base class for music metadata sources.

    Sources look up tracks in external catalogs:
    - Spotify: Web API, client credentials required
    - Melon: scraped search and detail pages, no account needed
    """

    def __init__(self, rate_limit: float = 0.0):
        """
        Initialize source with rate limiting.

        Args:
            rate_limit: Minimum seconds between requests
        """
        self.rate_limit = rate_limit
        self._last_request: float = 0
        self._log = structlog.get_logger().bind(source=self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name identifier"""
        pass

    @abstractmethod
    def search(self, query: str) -> List[TrackInfo]:
        """
        Search for tracks matching a free-text query.

        Args:
            query: Usually "artist title"

        Returns:
            List of search results (no album art bytes yet)
        """
        pass

    @abstractmethod
    def fetch_album_art(self, track: TrackInfo) -> bytes:
        """
        Download album art for a search result.

        Raises:
            SourceError: if the art cannot be fetched
        """
        pass

    def fetch_detail(self, track: TrackInfo) -> TrackInfo:
        """
        Complete a search result with whatever the source can add.

        The default only attaches album art; sources with a richer
        detail view override this.
        """
        art = self.fetch_album_art(track)
        return replace(track, album_art=art)

    def _rate_limit_wait(self) -> None:
        """Wait if necessary to respect rate limits"""
        if self._last_request > 0:
            elapsed = time.time() - self._last_request
            if elapsed < self.rate_limit:
                time.sleep(self.rate_limit - elapsed)
        self._last_request = time.time()

    def _extract_year(self, date_str: Optional[str], separator: str = "-") -> Optional[int]:
        """Extract year from the leading component of a date string"""
        if not date_str:
            return None
        try:
            return int(date_str.split(separator)[0])
        except ValueError:
            return None

    def log(self, event: str, **kw: Any) -> None:
        """Log an event tagged with the source name"""
        self._log.info(event, **kw)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rate_limit={self.rate_limit})"
