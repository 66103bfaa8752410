"""
Helpers for the upstream's text-run micro-format.

A run is one fragment of styled text, optionally carrying a navigation
endpoint. Secondary metadata lines are run sequences split into groups by
literal separator runs.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

Run = Dict[str, Any]
Node = Dict[str, Any]

SEPARATORS = frozenset({"•", "·"})

_TIME_PATTERN = re.compile(r"^\d+(:\d+){0,2}$")
_YEAR_PATTERN = re.compile(r"^\d{4}$")


def nav(node: Any, *path: Any) -> Any:
    """
    Follow a path of dict keys and list indexes, returning None on any miss.

    Negative indexes are allowed on lists.
    """
    current = node
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
        elif not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def get_runs(text: Any) -> List[Run]:
    """Return the runs of a text object, or an empty list."""
    runs = nav(text, "runs")
    if not isinstance(runs, list):
        return []
    return [run for run in runs if isinstance(run, dict)]


def run_text(run: Optional[Run]) -> Optional[str]:
    text = nav(run, "text")
    return text if isinstance(text, str) else None


def first_text(text: Any) -> Optional[str]:
    """Text of the first run of a text object."""
    runs = get_runs(text)
    return run_text(runs[0]) if runs else None


def is_separator(run: Run) -> bool:
    text = run_text(run)
    return text is not None and text.strip() in SEPARATORS


def split_by_separator(runs: Sequence[Run]) -> List[List[Run]]:
    """
    Split runs into groups on separator runs.

    "A & B · Album" becomes [[A, &, B], [Album]]. There is always at least one
    group, possibly empty.
    """
    groups: List[List[Run]] = [[]]
    for run in runs:
        if is_separator(run):
            groups.append([])
        else:
            groups[-1].append(run)
    return groups


def odd_elements(runs: Sequence[Run]) -> List[Run]:
    """Every other run starting at the first (skips connector runs such as "&")."""
    return list(runs[::2])


def parse_time(text: Optional[str]) -> Optional[int]:
    """
    Parse "[[H:]MM:]SS" into total seconds.

    Returns:
        Seconds, or None if the text is not a time string
    """
    if not text:
        return None
    text = text.strip()
    if not _TIME_PATTERN.match(text):
        return None
    seconds = 0
    for part in text.split(":"):
        seconds = seconds * 60 + int(part)
    return seconds


def parse_year(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = _YEAR_PATTERN.match(text.strip())
    return int(match.group(0)) if match else None


def browse_id(run: Optional[Run]) -> Optional[str]:
    """Browse id of a run's navigation endpoint, if any."""
    value = nav(run, "navigationEndpoint", "browseEndpoint", "browseId")
    return value if isinstance(value, str) else None


def page_type(endpoint: Any) -> Optional[str]:
    """Page type of a navigation endpoint's browse target."""
    return nav(
        endpoint,
        "browseEndpoint",
        "browseEndpointContextSupportedConfigs",
        "browseEndpointContextMusicConfig",
        "pageType",
    )


def thumbnail_url(node: Any) -> Optional[str]:
    """URL of the largest (last) thumbnail in a thumbnail container."""
    for path in (
        ("musicThumbnailRenderer", "thumbnail", "thumbnails"),
        ("croppedSquareThumbnailRenderer", "thumbnail", "thumbnails"),
        ("thumbnails",),
    ):
        thumbnails = nav(node, *path)
        if isinstance(thumbnails, list) and thumbnails:
            url = nav(thumbnails, -1, "url")
            if isinstance(url, str):
                return url
    return None


def has_badge(badges: Any, icon_type: str) -> bool:
    """True if any badge in an unordered badge list carries the icon type."""
    if not isinstance(badges, list):
        return False
    return any(
        nav(badge, "musicInlineBadgeRenderer", "icon", "iconType") == icon_type
        for badge in badges
    )
