# Music Sources
# Catalog adapters for Spotify and Melon

from .base import MusicSource, Provenance, TrackInfo
from .exceptions import AuthenticationError, SourceError
from .spotify import SpotifySource
from .melon import MelonSource

SOURCE_NAMES = ('spotify', 'melon')


def create_source(name: str, config) -> MusicSource:
    """
    Build a fresh source instance.

    Args:
        name: 'spotify' or 'melon'
        config: ConfigManager supplying credentials and rate limits

    Raises:
        ValueError: unknown source name
        AuthenticationError: Spotify credentials missing or rejected
    """
    name = name.lower()
    if name == 'spotify':
        return SpotifySource(
            client_id=config.spotify_client_id,
            client_secret=config.spotify_client_secret,
            rate_limit=config.rate_limit('spotify')
        )
    if name == 'melon':
        return MelonSource(rate_limit=config.rate_limit('melon'))
    raise ValueError(f"Unknown source: {name} (choose from {', '.join(SOURCE_NAMES)})")


__all__ = [
    'MusicSource',
    'Provenance',
    'TrackInfo',
    'SourceError',
    'AuthenticationError',
    'SpotifySource',         # Authenticated Web API
    'MelonSource',           # Scraped web pages
    'SOURCE_NAMES',
    'create_source'
]
