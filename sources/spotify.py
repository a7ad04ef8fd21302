#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Spotify Web API adapter.
Authenticated catalog - client credentials flow, track search.

API Documentation:
https://developer.spotify.com/documentation/web-api

Rate Limits: ~180 requests per minute (with backoff)
"""

import os
from typing import Any, Dict, List, Optional

import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from .base import MusicSource, Provenance, TrackInfo
from .exceptions import AuthenticationError, SourceError

SEARCH_LIMIT = 10


class SpotifySource(MusicSource):
    """
    Spotify Web API data source.

    Requires client_id and client_secret from the Spotify Developer
    Dashboard. The token exchange happens in the constructor so bad
    credentials fail before any search is attempted.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        rate_limit: float = 0.0
    ):
        """
        Initialize Spotify source.

        Args:
            client_id: Spotify API client ID (or SPOTIFY_CLIENT_ID env var)
            client_secret: Spotify API client secret (or SPOTIFY_CLIENT_SECRET env var)
            rate_limit: Seconds between requests

        Raises:
            AuthenticationError: credentials missing or rejected
        """
        super().__init__(rate_limit)

        # Get credentials from args or environment
        self.client_id = client_id or os.environ.get("SPOTIFY_CLIENT_ID")
        self.client_secret = client_secret or os.environ.get("SPOTIFY_CLIENT_SECRET")

        if not self.client_id or not self.client_secret:
            raise AuthenticationError(
                "Spotify credentials required. Set SPOTIFY_CLIENT_ID and "
                "SPOTIFY_CLIENT_SECRET or run the config command."
            )

        auth_manager = SpotifyClientCredentials(
            client_id=self.client_id,
            client_secret=self.client_secret
        )
        try:
            auth_manager.get_access_token(as_dict=False)
        except (SpotifyOauthError, requests.RequestException) as e:
            raise AuthenticationError(
                f"Spotify authentication failed, check client_id and client_secret: {e}"
            ) from e

        self.spotify = spotipy.Spotify(auth_manager=auth_manager)
        self.session = requests.Session()

    @property
    def name(self) -> str:
        return "Spotify"

    def search(self, query: str) -> List[TrackInfo]:
        """
        Search for tracks.

        Args:
            query: Free-text query, usually "artist title"

        Returns:
            Up to SEARCH_LIMIT results in Spotify's ranking order
        """
        self._rate_limit_wait()

        try:
            results = self.spotify.search(q=query, type="track", limit=SEARCH_LIMIT)
        except (spotipy.SpotifyException, requests.RequestException) as e:
            raise SourceError(f"Spotify search failed: {e}") from e

        items = (results or {}).get("tracks", {}).get("items", [])
        self.log("search_done", query=query, results=len(items))
        return [self._convert_track(item) for item in items]

    def fetch_album_art(self, track: TrackInfo) -> bytes:
        """Download the image referenced by album_art_url"""
        if not track.album_art_url:
            raise SourceError("No album art URL on this track")

        self._rate_limit_wait()

        try:
            response = self.session.get(track.album_art_url)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceError(f"Album art download failed: {e}") from e

        return response.content

    def _convert_track(self, item: Dict[str, Any]) -> TrackInfo:
        """Convert a track object from the search response"""
        artists = [a["name"] for a in item.get("artists", []) if a.get("name")]
        album = item.get("album", {})

        # Widest image wins; Spotify lists sizes without a guaranteed order
        images = album.get("images", [])
        widest = max(images, key=lambda img: img.get("width") or 0) if images else None

        return TrackInfo(
            source=Provenance.SPOTIFY,
            title=item.get("name"),
            artist=", ".join(artists) or None,
            album=album.get("name"),
            album_artist=artists[0] if artists else None,
            track_number=item.get("track_number"),
            year=self._extract_year(album.get("release_date")),
            album_art_url=widest.get("url") if widest else None
        )
