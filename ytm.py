#!/usr/bin/env python3
"""
Query YouTube Music from the command line.

USAGE:
    python3 ytm.py [--config CONFIG] [--pages N] COMMAND ARGS

SYNOPSIS:
    Runs one client operation (search, browse, queue, related, library)
    and prints one line per parsed item, following continuation cursors
    for up to N pages.

COMMAND LINE ARGUMENT:
    [CONFIG]      YAML configuration file with locale, credentials and
                  transport settings (optional)
"""

import argparse
import logging
import sys
from typing import Dict, Optional

from innertube.client import YouTubeMusic
from innertube.config import ClientSettings, ConfigError, load_config
from innertube.exceptions import AuthRequiredError, InnerTubeError
from innertube.logging_handler import DroppedItemHandler
from innertube.models import Album, Artist, Item, Playlist, Song

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Apply the configured level to the root logger and its handlers."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
    logger.setLevel(level)


def format_duration(seconds: Optional[int]) -> str:
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_item(item: Item) -> str:
    """One display line per item."""
    if isinstance(item, Song):
        artists = ", ".join(a.name for a in item.artists) or "?"
        album = f" [{item.album.name}]" if item.album else ""
        explicit = " (E)" if item.explicit else ""
        return (
            f"song      {item.id:<14} {artists} - {item.title}{album}{explicit} "
            f"{format_duration(item.duration)}"
        )
    if isinstance(item, Album):
        artists = ", ".join(a.name for a in item.artists) or "?"
        year = f" ({item.year})" if item.year else ""
        return f"album     {item.id:<14} {artists} - {item.title}{year}"
    if isinstance(item, Playlist):
        return (
            f"playlist  {item.id:<14} {item.title} by {item.author.name} "
            f"({item.song_count_text})"
        )
    if isinstance(item, Artist):
        return f"artist    {item.id or '-':<14} {item.name}"
    return repr(item)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ytm.py",
        description="Query YouTube Music through its InnerTube API.",
    )
    parser.add_argument("--config", type=str, help="Path to the YAML configuration file.")
    parser.add_argument("--log-level", type=str, help="Override the configured log level.")
    parser.add_argument(
        "--pages", type=int, default=1, help="Number of pages to fetch (default: 1)."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search for songs, albums, artists or playlists.")
    search.add_argument("query", type=str)
    search.add_argument(
        "--filter",
        type=str,
        help="songs, videos, albums, artists, featured_playlists or community_playlists",
    )

    browse = subparsers.add_parser("browse", help="Browse a page by id.")
    browse.add_argument("browse_id", type=str)
    browse.add_argument("--params", type=str)

    queue = subparsers.add_parser("queue", help="Resolve the queue for a song or playlist.")
    queue.add_argument("--video-id", type=str)
    queue.add_argument("--playlist-id", type=str)

    related = subparsers.add_parser("related", help="Content related to a song.")
    related.add_argument("video_id", type=str)

    library = subparsers.add_parser("library", help="Signed-in library page.")
    library.add_argument("browse_id", type=str, nargs="?", default="FEmusic_liked_playlists")

    return parser


def operation_params(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    if args.command == "search":
        return {"query": args.query, "filter": args.filter}
    if args.command == "browse":
        return {"browse_id": args.browse_id, "params": args.params}
    if args.command == "queue":
        return {"video_id": args.video_id, "playlist_id": args.playlist_id}
    if args.command == "related":
        return {"video_id": args.video_id}
    return {"browse_id": args.browse_id}


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    # Load configuration
    try:
        settings = load_config(args.config).settings if args.config else ClientSettings()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(args.log_level or settings.log_level)
    drops = DroppedItemHandler.install()

    total = 0
    try:
        with YouTubeMusic(settings=settings) as client:
            logger.debug(f"Using {client!r}")
            pages = client.iter_pages(
                args.command, max_pages=max(1, args.pages), **operation_params(args)
            )
            for page in pages:
                for item in page.items:
                    print(format_item(item))
                total += len(page.items)
    except AuthRequiredError as e:
        logger.error(f"Sign-in required: {e}")
        sys.exit(2)
    except InnerTubeError as e:
        logger.error(f"Request failed: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)
    finally:
        drops.uninstall()

    logger.info(f"{total} items, {drops.total} dropped")


if __name__ == "__main__":
    main()
