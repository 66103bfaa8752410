"""
Client for the YouTube Music InnerTube API.
"""

from innertube.catalog import SearchFilter
from innertube.client import YouTubeMusic
from innertube.config import ClientSettings, InnerTubeConfig, load_config
from innertube.exceptions import (
    AuthRequiredError,
    ConfigError,
    InnerTubeError,
    SchemaMismatchError,
    TransportError,
)
from innertube.logging_handler import DroppedItemHandler
from innertube.models import (
    Album,
    AlbumRef,
    Artist,
    ContinuationCursor,
    Playlist,
    ResultPage,
    Song,
    WatchEndpoint,
)
from innertube.session import Locale, SessionContext

__all__ = [
    "YouTubeMusic",
    "SessionContext",
    "Locale",
    "SearchFilter",
    "ClientSettings",
    "InnerTubeConfig",
    "load_config",
    "Song",
    "Album",
    "AlbumRef",
    "Artist",
    "Playlist",
    "WatchEndpoint",
    "ContinuationCursor",
    "ResultPage",
    "DroppedItemHandler",
    "InnerTubeError",
    "TransportError",
    "SchemaMismatchError",
    "AuthRequiredError",
    "ConfigError",
]
