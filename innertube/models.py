"""
Data models for the InnerTube client.

All entities are immutable value objects produced by the renderer adapter.
"""

from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar, Union


@dataclass(frozen=True)
class WatchEndpoint:
    """Opaque playback-start descriptor (play, shuffle or radio)."""

    video_id: Optional[str] = None
    playlist_id: Optional[str] = None
    params: Optional[str] = None


@dataclass(frozen=True)
class BrowseEndpoint:
    """Reference to a browsable page."""

    browse_id: str
    params: Optional[str] = None
    page_type: Optional[str] = None


@dataclass(frozen=True)
class Artist:
    """Artist reference or search result."""

    name: str
    id: Optional[str] = None
    thumbnail: Optional[str] = None
    shuffle_endpoint: Optional[WatchEndpoint] = None
    radio_endpoint: Optional[WatchEndpoint] = None


@dataclass(frozen=True)
class AlbumRef:
    """Album reference attached to a song."""

    id: str
    name: str


@dataclass(frozen=True)
class Song:
    """Song metadata model."""

    id: str
    title: str
    thumbnail: str
    artists: Tuple[Artist, ...] = ()
    album: Optional[AlbumRef] = None
    duration: Optional[int] = None
    explicit: bool = False


@dataclass(frozen=True)
class Album:
    """Album metadata model."""

    id: str
    playlist_id: str
    title: str
    thumbnail: str
    artists: Tuple[Artist, ...] = ()
    year: Optional[int] = None
    explicit: bool = False


@dataclass(frozen=True)
class Playlist:
    """Playlist metadata model."""

    id: str
    title: str
    author: Artist
    song_count_text: str
    thumbnail: str
    play_endpoint: WatchEndpoint
    shuffle_endpoint: Optional[WatchEndpoint] = None
    radio_endpoint: Optional[WatchEndpoint] = None


Item = Union[Song, Album, Artist, Playlist]
T = TypeVar("T")


@dataclass(frozen=True)
class ContinuationCursor:
    """Opaque, server-issued pagination token."""

    token: str

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class ResultPage(Generic[T]):
    """One page of parsed items plus the cursor for the next page, if any."""

    items: Tuple[T, ...] = ()
    continuation: Optional[ContinuationCursor] = None

    @property
    def has_more(self) -> bool:
        """False when the upstream signalled the end of results."""
        return self.continuation is not None

    def __len__(self) -> int:
        return len(self.items)
