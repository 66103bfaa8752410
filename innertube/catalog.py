"""
Endpoint catalog: the logical operations the client supports.

Each entry names the upstream endpoint, how logical parameters become body
fields, how a continuation cursor is sent and which renderer-adapter entry
point parses the response. Adding a surface means adding one entry here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from innertube import renderers


class ContinuationStyle(Enum):
    """Where a continuation cursor goes in a follow-up request."""

    QUERY = "query"
    BODY = "body"


class SearchFilter(Enum):
    """Search result-type filters (opaque params the web client sends)."""

    SONGS = "EgWKAQIIAWoKEAkQBRAKEAMQBA%3D%3D"
    VIDEOS = "EgWKAQIQAWoKEAkQChAFEAMQBA%3D%3D"
    ALBUMS = "EgWKAQIYAWoKEAkQChAFEAMQBA%3D%3D"
    ARTISTS = "EgWKAQIgAWoKEAkQChAFEAMQBA%3D%3D"
    FEATURED_PLAYLISTS = "EgeKAQQoADgBagwQDhAKEAMQBRAJEAQ%3D"
    COMMUNITY_PLAYLISTS = "EgeKAQQoAEABagoQAxAEEAoQCRAF"

    @classmethod
    def from_name(cls, name: str) -> "SearchFilter":
        """Look up a filter by case-insensitive name ("songs", "albums", ...)."""
        try:
            return cls[name.strip().upper().replace("-", "_")]
        except KeyError:
            choices = ", ".join(f.name.lower() for f in cls)
            raise ValueError(f"Unknown search filter '{name}' (choose from {choices})") from None


@dataclass(frozen=True)
class Operation:
    """Endpoint descriptor for one logical operation."""

    name: str
    endpoint: str
    build_body: Callable[[Dict[str, Any]], Dict[str, Any]]
    parse: Callable[[Any], Any]
    continuation_style: ContinuationStyle = ContinuationStyle.QUERY
    requires_auth: bool = False


def _require(params: Dict[str, Any], name: str) -> Any:
    value = params.get(name)
    if value is None or value == "":
        raise ValueError(f"Missing required parameter '{name}'")
    return value


def _search_body(params: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"query": _require(params, "query")}
    search_filter: Optional[Any] = params.get("filter")
    if isinstance(search_filter, str):
        search_filter = SearchFilter.from_name(search_filter)
    if search_filter is not None:
        body["params"] = search_filter.value
    return body


def _browse_body(params: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"browseId": _require(params, "browse_id")}
    if params.get("params"):
        body["params"] = params["params"]
    return body


def _next_body(params: Dict[str, Any]) -> Dict[str, Any]:
    video_id = params.get("video_id")
    playlist_id = params.get("playlist_id")
    if not video_id and not playlist_id:
        raise ValueError("Missing required parameter 'video_id' or 'playlist_id'")
    body: Dict[str, Any] = {
        "enablePersistentPlaylistPanel": True,
        "isAudioOnly": True,
        "tunerSettingValue": "AUTOMIX_SETTING_NORMAL",
    }
    if video_id:
        body["videoId"] = video_id
    if playlist_id:
        body["playlistId"] = playlist_id
    if params.get("params"):
        body["params"] = params["params"]
    if params.get("index") is not None:
        body["index"] = int(params["index"])
    return body


SEARCH = Operation(
    name="search",
    endpoint="search",
    build_body=_search_body,
    parse=renderers.parse_page,
)

BROWSE = Operation(
    name="browse",
    endpoint="browse",
    build_body=_browse_body,
    parse=renderers.parse_page,
)

QUEUE = Operation(
    name="queue",
    endpoint="next",
    build_body=_next_body,
    parse=renderers.parse_queue,
    continuation_style=ContinuationStyle.BODY,
)

# First hop of "related": the watch-next response names the related page.
RELATED_LOOKUP = Operation(
    name="related_lookup",
    endpoint="next",
    build_body=_next_body,
    parse=renderers.parse_related_endpoint,
    continuation_style=ContinuationStyle.BODY,
)

RELATED = Operation(
    name="related",
    endpoint="browse",
    build_body=_browse_body,
    parse=renderers.parse_page,
)

LIBRARY = Operation(
    name="library",
    endpoint="browse",
    build_body=_browse_body,
    parse=renderers.parse_page,
    requires_auth=True,
)

CATALOG: Dict[str, Operation] = {
    op.name: op for op in (SEARCH, BROWSE, QUEUE, RELATED_LOOKUP, RELATED, LIBRARY)
}


def get_operation(name: str) -> Operation:
    """
    Look up a catalog entry by name.

    Raises:
        KeyError: If the operation is unknown
    """
    try:
        return CATALOG[name]
    except KeyError:
        raise KeyError(f"Unknown operation '{name}'") from None
