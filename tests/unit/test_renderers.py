"""
Unit tests for the renderer adapter.
"""
import logging

import pytest

from innertube import renderers
from innertube.exceptions import SchemaMismatchError
from innertube.models import (
    Album,
    AlbumRef,
    Artist,
    BrowseEndpoint,
    ContinuationCursor,
    Playlist,
    Song,
    WatchEndpoint,
)
from tests.fixtures.renderer_nodes import (
    MIDDLE_DOT,
    SEP,
    append_continuation,
    browse_response,
    list_album,
    list_artist,
    list_items,
    list_playlist,
    list_song,
    next_response,
    queue_continuation,
    queue_song,
    related_response,
    run,
    search_response,
    shelf_continuation,
    two_row_album,
    two_row_artist,
    two_row_playlist,
    two_row_song,
    wrap,
)
from tests.helpers import item_ids

LIST = renderers.LIST_ITEM
TWO_ROW = renderers.TWO_ROW_ITEM
QUEUE = renderers.QUEUE_ITEM


class TestListItemSong:
    """Test song rows from search and shelves."""

    def test_song_fields(self):
        song = renderers.to_item(LIST, list_song(explicit=True))

        assert isinstance(song, Song)
        assert song.id == "vid00000001"
        assert song.title == "Song Title"
        assert song.artists == (
            Artist(name="Artist A", id="UCartistA"),
            Artist(name="Artist B", id="UCartistB"),
        )
        assert song.album == AlbumRef(id="MPREb_albumX", name="Album X")
        assert song.duration == 225
        assert song.thumbnail == "https://lh3.googleusercontent.com/vid00000001=w544-h544"
        assert song.explicit is True

    def test_middle_dot_secondary_line(self):
        """'Artist A & Artist B · Album X' splits into artists and album."""
        secondary = [
            run("Artist A", "UCa"),
            {"text": " & "},
            run("Artist B", "UCb"),
            MIDDLE_DOT,
            run("Album X", "MPREb_x"),
        ]
        song = renderers.to_item(LIST, list_song(secondary=secondary))

        assert [a.name for a in song.artists] == ["Artist A", "Artist B"]
        assert song.album == AlbumRef(id="MPREb_x", name="Album X")

    def test_missing_duration_is_none(self):
        secondary = [run("Artist A", "UCa"), SEP, run("Album X", "MPREb_x")]
        song = renderers.to_item(LIST, list_song(secondary=secondary))

        assert song.duration is None
        assert song.album == AlbumRef(id="MPREb_x", name="Album X")
        assert song.artists == (Artist(name="Artist A", id="UCa"),)

    def test_duration_from_fixed_column(self):
        node = list_song(secondary=[run("Artist A", "UCa")])
        node["fixedColumns"] = [
            {"musicResponsiveListItemFixedColumnRenderer": {"text": {"runs": [{"text": "1:02:03"}]}}}
        ]
        assert renderers.to_item(LIST, node).duration == 3723

    def test_artist_only_secondary_line(self):
        song = renderers.to_item(LIST, list_song(secondary=[run("1999", "UCprince")]))

        assert song.artists == (Artist(name="1999", id="UCprince"),)
        assert song.album is None
        assert song.duration is None

    def test_album_without_browse_endpoint_is_omitted(self):
        secondary = [run("Artist A", "UCa"), SEP, {"text": "Single"}, SEP, {"text": "2:00"}]
        song = renderers.to_item(LIST, list_song(secondary=secondary))
        assert song.album is None
        assert song.duration == 120

    def test_artist_without_browse_id(self):
        secondary = [{"text": "Unknown Artist"}, SEP, {"text": "2:00"}]
        song = renderers.to_item(LIST, list_song(secondary=secondary))
        assert song.artists == (Artist(name="Unknown Artist", id=None),)

    def test_not_explicit_without_badges(self):
        assert renderers.to_item(LIST, list_song()).explicit is False

    def test_video_id_from_title_run(self):
        node = list_song()
        del node["playlistItemData"]
        assert renderers.to_item(LIST, node).id == "vid00000001"

    @pytest.mark.parametrize(
        "remove",
        [
            lambda n: n.pop("thumbnail"),
            lambda n: n["flexColumns"].pop(),
            lambda n: n["flexColumns"][0]["musicResponsiveListItemFlexColumnRenderer"]["text"].update(runs=[]),
            lambda n: (n.pop("playlistItemData"), n["flexColumns"][0]["musicResponsiveListItemFlexColumnRenderer"]["text"]["runs"][0].pop("navigationEndpoint")),
        ],
        ids=["thumbnail", "secondary-line", "title", "video-id"],
    )
    def test_missing_required_field_drops_node(self, remove):
        node = list_song()
        remove(node)
        assert renderers.to_item(LIST, node) is None


class TestListItemArtist:
    """Test artist rows."""

    def test_artist_fields(self):
        artist = renderers.to_item(LIST, list_artist())

        assert isinstance(artist, Artist)
        assert artist.id == "UCartist0001"
        assert artist.name == "Artist Name"
        assert artist.thumbnail == "https://lh3.googleusercontent.com/UCartist0001=w544-h544"
        assert artist.shuffle_endpoint == WatchEndpoint(
            playlist_id="RDAOartist0001", params="wAEB8gECKAE%3D"
        )
        assert artist.radio_endpoint == WatchEndpoint(playlist_id="RDEMartist0001", params="wAEB")

    def test_missing_menu_actions_are_unavailable(self):
        artist = renderers.to_item(LIST, list_artist(shuffle=None, radio=None))

        assert artist.shuffle_endpoint is None
        assert artist.radio_endpoint is None
        assert artist.id == "UCartist0001"

    def test_missing_thumbnail_is_optional(self):
        node = list_artist()
        del node["thumbnail"]
        artist = renderers.to_item(LIST, node)
        assert artist.thumbnail is None
        assert artist.name == "Artist Name"


class TestListItemAlbum:
    """Test album rows."""

    def test_album_fields(self):
        album = renderers.to_item(LIST, list_album())

        assert isinstance(album, Album)
        assert album.id == "MPREb_album0001"
        assert album.playlist_id == "OLAK5uy_album0001"
        assert album.title == "Album Title"
        assert [a.name for a in album.artists] == ["Artist A", "Artist B"]
        assert album.year == 2019
        assert album.explicit is True

    def test_missing_year(self):
        node = list_album()
        runs = node["flexColumns"][1]["musicResponsiveListItemFlexColumnRenderer"]["text"]["runs"]
        del runs[-2:]
        album = renderers.to_item(LIST, node)
        assert album.year is None
        assert album.playlist_id == "OLAK5uy_album0001"

    def test_missing_play_overlay_drops_album(self):
        node = list_album()
        del node["overlay"]
        assert renderers.to_item(LIST, node) is None


class TestListItemPlaylist:
    """Test playlist rows."""

    def test_playlist_fields(self):
        playlist = renderers.to_item(LIST, list_playlist())

        assert isinstance(playlist, Playlist)
        assert playlist.id == "PLplaylist0001"
        assert playlist.title == "Playlist Title"
        assert playlist.author == Artist(name="Curator", id="UCcurator")
        assert playlist.song_count_text == "25 songs"
        assert playlist.play_endpoint == WatchEndpoint(playlist_id="PLplaylist0001")
        assert playlist.shuffle_endpoint.playlist_id == "PLplaylist0001"
        assert playlist.radio_endpoint.playlist_id == "RDAMPLPLplaylist0001"

    def test_author_without_browse_id(self):
        """Play overlay with a playlist id but an unlinked author still parses."""
        playlist = renderers.to_item(LIST, list_playlist(author={"text": "YouTube Music"}))

        assert isinstance(playlist, Playlist)
        assert playlist.author.id is None
        assert playlist.author.name == "YouTube Music"
        assert playlist.play_endpoint.playlist_id == "PLplaylist0001"

    def test_missing_menu_is_optional(self):
        node = list_playlist()
        del node["menu"]
        playlist = renderers.to_item(LIST, node)
        assert playlist.shuffle_endpoint is None
        assert playlist.radio_endpoint is None

    def test_missing_play_endpoint_drops_playlist(self):
        node = list_playlist()
        del node["overlay"]
        assert renderers.to_item(LIST, node) is None


class TestClassification:
    """Test renderer-kind classification."""

    @pytest.mark.parametrize(
        "node,expected",
        [
            (list_song(), "song"),
            (list_artist(), "artist"),
            (list_album(), "album"),
            (list_playlist(), "playlist"),
        ],
    )
    def test_list_item_kinds(self, node, expected):
        assert renderers.match_rule(LIST, node)[0] == expected

    def test_rules_are_mutually_exclusive(self):
        for node in (list_song(), list_artist(), list_album(), list_playlist()):
            matches = [name for name, predicate, _ in renderers.RENDERER_RULES[LIST] if predicate(node)]
            assert len(matches) == 1

    def test_unknown_page_type_is_unclassified(self):
        node = list_artist()
        node["navigationEndpoint"]["browseEndpoint"]["browseEndpointContextSupportedConfigs"][
            "browseEndpointContextMusicConfig"
        ]["pageType"] = "MUSIC_PAGE_TYPE_PODCAST_SHOW_DETAIL_PAGE"

        assert renderers.match_rule(LIST, node) is None
        assert renderers.to_item(LIST, node) is None

    def test_unknown_kind(self):
        assert renderers.to_item("musicCardShelfRenderer", {}) is None

    @pytest.mark.parametrize(
        "node,expected",
        [
            (two_row_song(), "song"),
            (two_row_artist(), "artist"),
            (two_row_album(), "album"),
            (two_row_playlist(), "playlist"),
        ],
    )
    def test_two_row_kinds(self, node, expected):
        assert renderers.match_rule(TWO_ROW, node)[0] == expected


class TestTwoRowItems:
    """Test carousel cards."""

    def test_song_card(self):
        song = renderers.to_item(TWO_ROW, two_row_song())
        assert song.id == "vid00000101"
        assert song.title == "Card Song"
        assert song.artists == (Artist(name="Artist A", id="UCartistA"),)
        assert song.album == AlbumRef(id="MPREb_albumX", name="Album X")
        assert song.duration is None

    def test_album_card(self):
        album = renderers.to_item(TWO_ROW, two_row_album())
        assert album.id == "MPREb_album0101"
        assert album.playlist_id == "OLAK5uy_album0101"
        assert album.artists == (Artist(name="Artist A", id="UCartistA"),)
        assert album.year == 2021
        assert album.explicit is True

    def test_playlist_card(self):
        playlist = renderers.to_item(TWO_ROW, two_row_playlist())
        assert playlist.id == "RDCLAK5uy_mix0101"
        assert playlist.author == Artist(name="YouTube Music", id=None)
        assert playlist.song_count_text == "50 songs"
        assert playlist.play_endpoint.playlist_id == "RDCLAK5uy_mix0101"

    def test_artist_card(self):
        artist = renderers.to_item(TWO_ROW, two_row_artist())
        assert artist.id == "UCartist0101"
        assert artist.name == "Card Artist"
        assert artist.shuffle_endpoint is None
        assert artist.radio_endpoint.playlist_id == "RDEMUCartist0101"


class TestQueueItems:
    """Test watch-queue rows."""

    def test_queue_song(self):
        song = renderers.to_item(QUEUE, queue_song())
        assert song.id == "vid00000201"
        assert song.title == "Queued Song"
        assert song.artists == (Artist(name="Artist A", id="UCartistA"),)
        assert song.album == AlbumRef(id="MPREb_albumX", name="Album X")
        assert song.duration == 245
        assert song.thumbnail.endswith("hqdefault.jpg")

    def test_missing_length_is_optional(self):
        assert renderers.to_item(QUEUE, queue_song(length=None)).duration is None

    def test_unavailable_row_is_dropped(self):
        node = queue_song()
        del node["videoId"]
        del node["navigationEndpoint"]
        assert renderers.to_item(QUEUE, node) is None


class TestWalker:
    """Test renderer discovery through wrapper levels."""

    def test_finds_nodes_in_document_order(self):
        tree = {
            "a": [{"musicShelfRenderer": {"contents": list_items(list_song("v1"), list_song("v2"))}}],
            "b": {"deep": {"deeper": [wrap(TWO_ROW, two_row_album())]}},
        }
        found = list(renderers.iter_renderers(tree))
        assert [kind for kind, _ in found] == [LIST, LIST, TWO_ROW]
        assert found[0][1]["playlistItemData"]["videoId"] == "v1"

    def test_does_not_descend_into_matched_nodes(self):
        outer = list_song("outer")
        outer["nested"] = wrap(LIST, list_song("inner"))
        found = list(renderers.iter_renderers([wrap(LIST, outer)]))
        assert len(found) == 1

    def test_kind_filter(self):
        tree = [wrap(LIST, list_song()), wrap(QUEUE, queue_song())]
        found = list(renderers.iter_renderers(tree, kinds=(QUEUE,)))
        assert [kind for kind, _ in found] == [QUEUE]


class TestParsePage:
    """Test whole-page parsing."""

    def test_search_page(self):
        response = search_response(
            list_items(list_song(), list_artist(), list_album(), list_playlist()),
            token="token-page-2",
        )
        page = renderers.parse_page(response)

        assert [type(item) for item in page.items] == [Song, Artist, Album, Playlist]
        assert page.continuation == ContinuationCursor("token-page-2")

    def test_unclassifiable_nodes_are_dropped(self):
        bad_kind = list_artist("UCbad")
        bad_kind["navigationEndpoint"] = {"browseEndpoint": {"browseId": "UCbad"}}
        missing_field = list_song("v-missing")
        del missing_field["thumbnail"]

        response = search_response(
            list_items(list_song("v1"), bad_kind, list_album(), missing_field, list_song("v2"))
        )
        page = renderers.parse_page(response)

        assert item_ids(page) == ["v1", "MPREb_album0001", "v2"]
        assert page.continuation is None

    def test_empty_page_with_cursor(self):
        page = renderers.parse_page(shelf_continuation([], token="still-going"))
        assert page.items == ()
        assert page.continuation == ContinuationCursor("still-going")

    def test_shelf_continuation_page(self):
        page = renderers.parse_page(shelf_continuation(list_items(list_song("v3")), token=None))
        assert item_ids(page) == ["v3"]
        assert page.has_more is False

    def test_append_continuation_items(self):
        response = append_continuation(list_items(list_song("v4")), token="next-token")
        page = renderers.parse_page(response)
        assert item_ids(page) == ["v4"]
        assert page.continuation == ContinuationCursor("next-token")

    def test_browse_page_mixes_rows_and_cards(self):
        response = browse_response(
            list_items(list_song("v5")),
            carousel_items=[wrap(TWO_ROW, two_row_album()), wrap(TWO_ROW, two_row_artist())],
        )
        page = renderers.parse_page(response)
        assert item_ids(page) == ["v5", "MPREb_album0101", "UCartist0101"]

    @pytest.mark.parametrize("response", [{}, {"responseContext": {}}, {"contents": {}}])
    def test_missing_sections_raise(self, response):
        with pytest.raises(SchemaMismatchError):
            renderers.parse_page(response)

    def test_non_object_raises(self):
        with pytest.raises(SchemaMismatchError, match="JSON object"):
            renderers.parse_page(["not", "a", "page"])

    def test_cursor_inside_item_node_is_ignored(self):
        node = list_song()
        node["continuations"] = [{"nextContinuationData": {"continuation": "bogus"}}]
        page = renderers.parse_page(search_response(list_items(node)))
        assert page.continuation is None


class TestWrongFieldTypes:
    """Fields of the wrong type drop their node and keep the page."""

    def test_non_string_playlist_browse_id(self):
        bad = list_playlist()
        bad["navigationEndpoint"]["browseEndpoint"]["browseId"] = 12345

        page = renderers.parse_page(search_response(list_items(list_song("v1"), bad, list_song("v2"))))

        assert item_ids(page) == ["v1", "v2"]

    def test_non_string_video_id(self):
        bad = list_song("v-bad")
        bad["playlistItemData"]["videoId"] = 42

        page = renderers.parse_page(search_response(list_items(bad, list_album())))

        assert item_ids(page) == ["MPREb_album0001"]

    def test_non_string_playlist_id_on_card(self):
        bad = two_row_album()
        bad["thumbnailOverlay"]["musicItemThumbnailOverlayRenderer"]["content"][
            "musicPlayButtonRenderer"
        ]["playNavigationEndpoint"]["watchPlaylistEndpoint"]["playlistId"] = ["OLAK5uy"]

        page = renderers.parse_page(
            browse_response(
                list_items(list_song("v1")),
                carousel_items=[wrap(TWO_ROW, bad), wrap(TWO_ROW, two_row_artist())],
            )
        )

        assert item_ids(page) == ["v1", "UCartist0101"]

    def test_builder_error_is_logged_drop(self, mocker, caplog):
        mocker.patch("innertube.renderers.parse_year", side_effect=ValueError("bad year"))

        with caplog.at_level(logging.DEBUG, logger="innertube.renderers"):
            page = renderers.parse_page(
                search_response(list_items(list_song("v1"), list_album(), list_song("v2")))
            )

        assert item_ids(page) == ["v1", "v2"]
        assert "album malformed: ValueError: bad year" in caplog.text


class TestQueueAndRelated:
    """Test watch-next parsing."""

    def test_parse_queue(self):
        response = next_response([queue_song("q1"), queue_song("q2")], token="radio-2")
        page = renderers.parse_queue(response)
        assert item_ids(page) == ["q1", "q2"]
        assert page.continuation == ContinuationCursor("radio-2")

    def test_parse_queue_continuation(self):
        page = renderers.parse_queue(queue_continuation([queue_song("q3")]))
        assert item_ids(page) == ["q3"]
        assert page.continuation is None

    def test_related_endpoint(self):
        endpoint = renderers.parse_related_endpoint(next_response([]))
        assert endpoint == BrowseEndpoint(
            browse_id="MPTRt_related0001",
            page_type="MUSIC_PAGE_TYPE_TRACK_RELATED",
        )

    def test_related_endpoint_absent(self):
        assert renderers.parse_related_endpoint(next_response([], related_browse_id=None)) is None

    def test_related_without_tabs_raises(self):
        with pytest.raises(SchemaMismatchError):
            renderers.parse_related_endpoint({"contents": {"somethingElse": {}}})

    def test_related_page(self):
        page = renderers.parse_page(
            related_response([wrap(TWO_ROW, two_row_song()), wrap(TWO_ROW, two_row_playlist())])
        )
        assert item_ids(page) == ["vid00000101", "RDCLAK5uy_mix0101"]
