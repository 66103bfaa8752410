"""
Renderer adapter: turns the upstream's renderer tree into typed entities.

Responses are forests of named renderer nodes wrapped in tabs, sections and
shelves whose layout differs from page to page. The adapter ignores the
wrappers, finds every node of a known renderer kind and maps each one on its
own. Each kind has an ordered table of (name, predicate, builder) rules; the
first matching predicate decides the entity type and a node matching none is
dropped. A builder that misses a required field drops its node only, never
the page.

Everything here is pure and safe to call from several threads at once.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from innertube.exceptions import SchemaMismatchError
from innertube.models import (
    AlbumRef,
    Album,
    Artist,
    BrowseEndpoint,
    ContinuationCursor,
    Item,
    Playlist,
    ResultPage,
    Song,
    WatchEndpoint,
)
from innertube.runs import (
    Node,
    Run,
    browse_id,
    first_text,
    get_runs,
    has_badge,
    nav,
    odd_elements,
    page_type,
    parse_time,
    parse_year,
    run_text,
    split_by_separator,
    thumbnail_url,
)

logger = logging.getLogger(__name__)

LIST_ITEM = "musicResponsiveListItemRenderer"
TWO_ROW_ITEM = "musicTwoRowItemRenderer"
QUEUE_ITEM = "playlistPanelVideoRenderer"

PAGE_TYPE_ARTIST = "MUSIC_PAGE_TYPE_ARTIST"
PAGE_TYPE_ALBUM = "MUSIC_PAGE_TYPE_ALBUM"
PAGE_TYPE_AUDIOBOOK = "MUSIC_PAGE_TYPE_AUDIOBOOK"
PAGE_TYPE_PLAYLIST = "MUSIC_PAGE_TYPE_PLAYLIST"
PAGE_TYPE_USER_CHANNEL = "MUSIC_PAGE_TYPE_USER_CHANNEL"
PAGE_TYPE_TRACK_RELATED = "MUSIC_PAGE_TYPE_TRACK_RELATED"

EXPLICIT_BADGE = "MUSIC_EXPLICIT_BADGE"
SHUFFLE_ICON = "MUSIC_SHUFFLE"
RADIO_ICON = "MIX"

PLAYLIST_BROWSE_PREFIX = "VL"

TOP_LEVEL_SECTIONS = ("contents", "continuationContents", "onResponseReceivedActions")


class MissingField(Exception):
    """Raised by builders when a required field is absent."""


def _required(value, name: str):
    if value is None or value == "":
        raise MissingField(name)
    return value


def _required_id(value, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise MissingField(name)
    return value


# Shared field extraction


def watch_endpoint(endpoint: Any) -> Optional[WatchEndpoint]:
    """Opaque play descriptor from a navigation endpoint, if it holds one."""
    watch = nav(endpoint, "watchEndpoint") or nav(endpoint, "watchPlaylistEndpoint")
    if not isinstance(watch, dict):
        return None
    return WatchEndpoint(
        video_id=watch.get("videoId"),
        playlist_id=watch.get("playlistId"),
        params=watch.get("params"),
    )


def browse_endpoint(endpoint: Any) -> Optional[BrowseEndpoint]:
    target = nav(endpoint, "browseEndpoint", "browseId")
    if not isinstance(target, str):
        return None
    return BrowseEndpoint(
        browse_id=target,
        params=nav(endpoint, "browseEndpoint", "params"),
        page_type=page_type(endpoint),
    )


def menu_action(menu: Any, icon_type: str) -> Optional[WatchEndpoint]:
    """Secondary action from a context menu, matched by its icon tag."""
    items = nav(menu, "menuRenderer", "items")
    if not isinstance(items, list):
        return None
    for item in items:
        renderer = nav(item, "menuNavigationItemRenderer")
        if nav(renderer, "icon", "iconType") == icon_type:
            return watch_endpoint(nav(renderer, "navigationEndpoint"))
    return None


def artist_ref(run: Run) -> Artist:
    return Artist(name=_required(run_text(run), "artist name"), id=browse_id(run))


def artist_refs(runs: Iterable[Run]) -> Tuple[Artist, ...]:
    return tuple(artist_ref(run) for run in runs if run_text(run))


def album_ref(run: Optional[Run]) -> Optional[AlbumRef]:
    """Album reference from a run, only if it links to a browse page."""
    album_id = browse_id(run)
    name = run_text(run)
    if album_id is None or not name:
        return None
    return AlbumRef(id=album_id, name=name)


def strip_playlist_prefix(value: Any) -> Any:
    if isinstance(value, str) and value.startswith(PLAYLIST_BROWSE_PREFIX):
        return value[len(PLAYLIST_BROWSE_PREFIX):]
    return value


# musicResponsiveListItemRenderer (search results, shelves, track lists)


def _flex_runs(node: Node, index: int) -> Optional[List[Run]]:
    text = nav(
        node, "flexColumns", index, "musicResponsiveListItemFlexColumnRenderer", "text"
    )
    if text is None:
        return None
    return get_runs(text)


def _fixed_text(node: Node, index: int) -> Optional[str]:
    return first_text(
        nav(node, "fixedColumns", index, "musicResponsiveListItemFixedColumnRenderer", "text")
    )


def _list_title(node: Node) -> str:
    title_runs = _flex_runs(node, 0) or []
    return _required(run_text(title_runs[0]) if title_runs else None, "title")


def _list_secondary(node: Node) -> List[List[Run]]:
    return split_by_separator(_required(_flex_runs(node, 1), "secondary line"))


def _list_thumbnail(node: Node) -> Optional[str]:
    return thumbnail_url(nav(node, "thumbnail"))


def _overlay_play(node: Node, *path: str) -> Any:
    return nav(
        node,
        *path,
        "musicItemThumbnailOverlayRenderer",
        "content",
        "musicPlayButtonRenderer",
        "playNavigationEndpoint",
    )


def list_is_song(node: Node) -> bool:
    endpoint = node.get("navigationEndpoint")
    if not isinstance(endpoint, dict):
        return endpoint is None
    return "watchEndpoint" in endpoint or "watchPlaylistEndpoint" in endpoint


def list_is_artist(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) == PAGE_TYPE_ARTIST


def list_is_album(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) in (
        PAGE_TYPE_ALBUM,
        PAGE_TYPE_AUDIOBOOK,
    )


def list_is_playlist(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) == PAGE_TYPE_PLAYLIST


def build_list_song(node: Node) -> Song:
    groups = _list_secondary(node)
    title_runs = _flex_runs(node, 0) or []
    video_id = nav(node, "playlistItemData", "videoId") or nav(
        title_runs, 0, "navigationEndpoint", "watchEndpoint", "videoId"
    )
    duration = parse_time(run_text(nav(groups, -1, 0))) if len(groups) > 1 else None
    if duration is None:
        duration = parse_time(_fixed_text(node, 0))
    return Song(
        id=_required_id(video_id, "videoId"),
        title=_list_title(node),
        artists=artist_refs(odd_elements(groups[0])),
        album=album_ref(nav(groups, 1, 0)) if len(groups) > 1 else None,
        duration=duration,
        thumbnail=_required(_list_thumbnail(node), "thumbnail"),
        explicit=has_badge(node.get("badges"), EXPLICIT_BADGE),
    )


def build_list_artist(node: Node) -> Artist:
    # Rows without a secondary line are malformed for every kind.
    _list_secondary(node)
    menu = node.get("menu")
    return Artist(
        id=_required_id(nav(node, "navigationEndpoint", "browseEndpoint", "browseId"), "browseId"),
        name=_list_title(node),
        thumbnail=_list_thumbnail(node),
        shuffle_endpoint=menu_action(menu, SHUFFLE_ICON),
        radio_endpoint=menu_action(menu, RADIO_ICON),
    )


def build_list_album(node: Node) -> Album:
    groups = _list_secondary(node)
    play = watch_endpoint(_overlay_play(node, "overlay"))
    return Album(
        id=_required_id(nav(node, "navigationEndpoint", "browseEndpoint", "browseId"), "browseId"),
        playlist_id=_required_id(play.playlist_id if play else None, "playlistId"),
        title=_list_title(node),
        artists=artist_refs(odd_elements(groups[1])) if len(groups) > 1 else (),
        year=parse_year(run_text(nav(groups, 2, 0))),
        thumbnail=_required(_list_thumbnail(node), "thumbnail"),
        explicit=has_badge(node.get("badges"), EXPLICIT_BADGE),
    )


def build_list_playlist(node: Node) -> Playlist:
    groups = _list_secondary(node)
    secondary_runs = _flex_runs(node, 1) or []
    menu = node.get("menu")
    author = nav(groups, 0, 0)
    return Playlist(
        id=_required_id(
            strip_playlist_prefix(nav(node, "navigationEndpoint", "browseEndpoint", "browseId")),
            "browseId",
        ),
        title=_list_title(node),
        author=artist_ref(_required(author, "author")),
        song_count_text=_required(run_text(nav(secondary_runs, -1)), "song count"),
        thumbnail=_required(_list_thumbnail(node), "thumbnail"),
        play_endpoint=_required(watch_endpoint(_overlay_play(node, "overlay")), "play endpoint"),
        shuffle_endpoint=menu_action(menu, SHUFFLE_ICON),
        radio_endpoint=menu_action(menu, RADIO_ICON),
    )


# musicTwoRowItemRenderer (carousel cards on browse and related pages)


def _two_row_title(node: Node) -> str:
    return _required(first_text(node.get("title")), "title")


def _two_row_thumbnail(node: Node) -> Optional[str]:
    return thumbnail_url(nav(node, "thumbnailRenderer"))


def _linked_runs(runs: Iterable[Run], *page_types: str) -> List[Run]:
    return [
        run for run in runs if page_type(run.get("navigationEndpoint")) in page_types
    ]


def two_row_is_song(node: Node) -> bool:
    return nav(node, "navigationEndpoint", "watchEndpoint") is not None


def two_row_is_artist(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) == PAGE_TYPE_ARTIST


def two_row_is_album(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) in (
        PAGE_TYPE_ALBUM,
        PAGE_TYPE_AUDIOBOOK,
    )


def two_row_is_playlist(node: Node) -> bool:
    return page_type(node.get("navigationEndpoint")) == PAGE_TYPE_PLAYLIST


def build_two_row_song(node: Node) -> Song:
    runs = get_runs(node.get("subtitle"))
    artists = _linked_runs(runs, PAGE_TYPE_ARTIST)
    albums = _linked_runs(runs, PAGE_TYPE_ALBUM)
    return Song(
        id=_required_id(nav(node, "navigationEndpoint", "watchEndpoint", "videoId"), "videoId"),
        title=_two_row_title(node),
        artists=artist_refs(artists),
        album=album_ref(albums[0]) if albums else None,
        thumbnail=_required(_two_row_thumbnail(node), "thumbnail"),
        explicit=has_badge(node.get("subtitleBadges"), EXPLICIT_BADGE),
    )


def build_two_row_artist(node: Node) -> Artist:
    menu = node.get("menu")
    return Artist(
        id=_required_id(nav(node, "navigationEndpoint", "browseEndpoint", "browseId"), "browseId"),
        name=_two_row_title(node),
        thumbnail=_two_row_thumbnail(node),
        shuffle_endpoint=menu_action(menu, SHUFFLE_ICON),
        radio_endpoint=menu_action(menu, RADIO_ICON),
    )


def build_two_row_album(node: Node) -> Album:
    runs = get_runs(node.get("subtitle"))
    play = watch_endpoint(_overlay_play(node, "thumbnailOverlay"))
    return Album(
        id=_required_id(nav(node, "navigationEndpoint", "browseEndpoint", "browseId"), "browseId"),
        playlist_id=_required_id(play.playlist_id if play else None, "playlistId"),
        title=_two_row_title(node),
        artists=artist_refs(_linked_runs(runs, PAGE_TYPE_ARTIST)),
        year=parse_year(run_text(nav(runs, -1))),
        thumbnail=_required(_two_row_thumbnail(node), "thumbnail"),
        explicit=has_badge(node.get("subtitleBadges"), EXPLICIT_BADGE),
    )


def build_two_row_playlist(node: Node) -> Playlist:
    runs = get_runs(node.get("subtitle"))
    groups = split_by_separator(runs)
    linked = _linked_runs(runs, PAGE_TYPE_ARTIST, PAGE_TYPE_USER_CHANNEL)
    if linked:
        author = linked[0]
    else:
        # "Playlist • Author • 50 songs": the author leads the second group.
        author = nav(groups, 1, 0) if len(groups) > 2 else nav(groups, 0, 0)
    menu = node.get("menu")
    return Playlist(
        id=_required_id(
            strip_playlist_prefix(nav(node, "navigationEndpoint", "browseEndpoint", "browseId")),
            "browseId",
        ),
        title=_two_row_title(node),
        author=artist_ref(_required(author, "author")),
        song_count_text=_required(run_text(nav(runs, -1)), "song count"),
        thumbnail=_required(_two_row_thumbnail(node), "thumbnail"),
        play_endpoint=_required(
            watch_endpoint(_overlay_play(node, "thumbnailOverlay")), "play endpoint"
        ),
        shuffle_endpoint=menu_action(menu, SHUFFLE_ICON),
        radio_endpoint=menu_action(menu, RADIO_ICON),
    )


# playlistPanelVideoRenderer (watch queue rows)


def queue_is_song(node: Node) -> bool:
    return True


def build_queue_song(node: Node) -> Song:
    groups = split_by_separator(get_runs(node.get("longBylineText")))
    video_id = node.get("videoId") or nav(
        node, "navigationEndpoint", "watchEndpoint", "videoId"
    )
    return Song(
        id=_required_id(video_id, "videoId"),
        title=_required(first_text(node.get("title")), "title"),
        artists=artist_refs(odd_elements(groups[0])),
        album=album_ref(nav(groups, 1, 0)) if len(groups) > 1 else None,
        duration=parse_time(first_text(node.get("lengthText"))),
        thumbnail=_required(thumbnail_url(node.get("thumbnail")), "thumbnail"),
        explicit=has_badge(node.get("badges"), EXPLICIT_BADGE),
    )


Rule = Tuple[str, Callable[[Node], bool], Callable[[Node], Item]]

RENDERER_RULES: Dict[str, Tuple[Rule, ...]] = {
    LIST_ITEM: (
        ("song", list_is_song, build_list_song),
        ("artist", list_is_artist, build_list_artist),
        ("album", list_is_album, build_list_album),
        ("playlist", list_is_playlist, build_list_playlist),
    ),
    TWO_ROW_ITEM: (
        ("song", two_row_is_song, build_two_row_song),
        ("artist", two_row_is_artist, build_two_row_artist),
        ("album", two_row_is_album, build_two_row_album),
        ("playlist", two_row_is_playlist, build_two_row_playlist),
    ),
    QUEUE_ITEM: (
        ("song", queue_is_song, build_queue_song),
    ),
}

ALL_KINDS = tuple(RENDERER_RULES)


def _dropped(kind: str, reason: str) -> None:
    logger.debug(
        f"Dropped {kind} node: {reason}",
        extra={"renderer": kind, "reason": reason},
    )


def match_rule(kind: str, node: Node) -> Optional[Tuple[str, Callable[[Node], Item]]]:
    """(name, builder) of the first rule whose predicate matches, or None."""
    for name, predicate, builder in RENDERER_RULES.get(kind, ()):
        if predicate(node):
            return name, builder
    return None


def to_item(kind: str, node: Node) -> Optional[Item]:
    """
    Map one renderer node to an entity.

    Returns:
        The entity, or None if the node is unclassifiable, misses a required
        field or holds a field of the wrong shape (the drop is logged, never
        raised)
    """
    rule = match_rule(kind, node)
    if rule is None:
        _dropped(kind, "unclassified")
        return None

    name, builder = rule
    try:
        return builder(node)
    except MissingField as e:
        _dropped(kind, f"{name} missing {e}")
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        _dropped(kind, f"{name} malformed: {type(e).__name__}: {e}")
    return None


def iter_renderers(tree: Any, kinds: Iterable[str] = ALL_KINDS) -> Iterator[Tuple[str, Node]]:
    """
    Yield (kind, node) for every renderer node of a known kind, in document order.

    Unknown wrapper levels are walked through; matched nodes are not descended.
    """
    kinds = frozenset(kinds)
    stack: List[Any] = [tree]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            children = []
            for key, value in current.items():
                if key in kinds and isinstance(value, dict):
                    children.append((key, value))
                elif isinstance(value, (dict, list)):
                    children.append(value)
            stack.extend(reversed(children))
        elif isinstance(current, list):
            stack.extend(reversed(current))
        elif isinstance(current, tuple):
            yield current


def _continuation_token(node: Node) -> Optional[str]:
    for path in (
        ("nextContinuationData", "continuation"),
        ("nextRadioContinuationData", "continuation"),
        ("continuationItemRenderer", "continuationEndpoint", "continuationCommand", "token"),
    ):
        token = nav(node, *path)
        if isinstance(token, str) and token:
            return token
    return None


def find_continuation(tree: Any) -> Optional[ContinuationCursor]:
    """
    First continuation token in the tree, outside item nodes.

    The cursor sits beside the item list, so it may be present on a page
    without items.
    """
    stack: List[Any] = [tree]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            token = _continuation_token(current)
            if token:
                return ContinuationCursor(token)
            stack.extend(
                value
                for key, value in reversed(list(current.items()))
                if key not in RENDERER_RULES and isinstance(value, (dict, list))
            )
        elif isinstance(current, list):
            stack.extend(reversed(current))
    return None


def require_sections(response: Any, sections: Tuple[str, ...] = TOP_LEVEL_SECTIONS) -> Dict[str, Any]:
    """
    Check that a response carries at least one of the required sections.

    Raises:
        SchemaMismatchError: If the response is not an object or lacks all sections
    """
    if not isinstance(response, dict):
        raise SchemaMismatchError(
            f"Expected a JSON object, got {type(response).__name__}"
        )
    present = {key: response[key] for key in sections if response.get(key)}
    if not present:
        raise SchemaMismatchError(
            f"Response has none of the sections: {', '.join(sections)}"
        )
    return present


def parse_page(response: Any, kinds: Iterable[str] = ALL_KINDS) -> ResultPage:
    """
    Parse a search, browse or continuation response into a result page.

    Raises:
        SchemaMismatchError: If no required top-level section is present
    """
    sections = require_sections(response)
    items: List[Item] = []
    for kind, node in iter_renderers(sections, kinds):
        item = to_item(kind, node)
        if item is not None:
            items.append(item)
    return ResultPage(items=tuple(items), continuation=find_continuation(sections))


def parse_queue(response: Any) -> ResultPage:
    """Parse a watch-next response (or its continuation) into queued songs."""
    return parse_page(response, kinds=(QUEUE_ITEM,))


def parse_related_endpoint(response: Any) -> Optional[BrowseEndpoint]:
    """
    Locate the related-content browse endpoint in a watch-next response.

    Returns:
        The endpoint, or None if the upstream offers no related tab

    Raises:
        SchemaMismatchError: If the watch-next tab list is missing
    """
    require_sections(response, ("contents",))
    tabs = nav(
        response,
        "contents",
        "singleColumnMusicWatchNextResultsRenderer",
        "tabbedRenderer",
        "watchNextTabbedResultsRenderer",
        "tabs",
    )
    if not isinstance(tabs, list):
        raise SchemaMismatchError("Watch-next response has no tab list")
    for tab in tabs:
        endpoint = nav(tab, "tabRenderer", "endpoint")
        if page_type(endpoint) == PAGE_TYPE_TRACK_RELATED:
            return browse_endpoint(endpoint)
    return None
