"""
Session identity shared by every request: locale, client descriptor,
anonymous visitor token and optional cookie credentials.

Writers serialize on a single lock and publish a fresh immutable
SessionSnapshot; readers take the current snapshot without locking.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAMES = ("SAPISID", "__Secure-3PAPISID")


@dataclass(frozen=True)
class Locale:
    """Region (gl) and language (hl) sent in the client context."""

    gl: str = "US"
    hl: str = "en"


@dataclass(frozen=True)
class ClientDescriptor:
    """Identity of the first-party client being reproduced."""

    client_name: str
    client_version: str
    client_id: str
    user_agent: str
    origin: str = "https://music.youtube.com"
    referer: str = "https://music.youtube.com/"
    api_key: Optional[str] = None
    login_supported: bool = True


WEB_REMIX = ClientDescriptor(
    client_name="WEB_REMIX",
    client_version="1.20250310.01.00",
    client_id="67",
    user_agent=(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
    ),
)

WEB_REMIX_MOBILE = ClientDescriptor(
    client_name="WEB_REMIX",
    client_version="1.20250310.01.00",
    client_id="67",
    user_agent=(
        "Mozilla/5.0 (Linux; Android 14) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/133.0.0.0 Mobile Safari/537.36"
    ),
)

CLIENTS: Dict[str, ClientDescriptor] = {
    "WEB_REMIX": WEB_REMIX,
    "WEB_REMIX_MOBILE": WEB_REMIX_MOBILE,
}


def parse_cookie(cookie: Optional[str]) -> Dict[str, str]:
    """Split a raw Cookie header into an ordered name -> value mapping."""
    cookies: Dict[str, str] = {}
    if not cookie:
        return cookies
    for part in cookie.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            cookies[name] = value
    return cookies


def format_cookie(cookies: Mapping[str, str]) -> str:
    """Join a cookie mapping back into a Cookie header value."""
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session used to build one request."""

    locale: Locale
    client: ClientDescriptor
    visitor_data: Optional[str] = None
    cookie: Optional[str] = None
    version: int = 0

    @property
    def cookies(self) -> Dict[str, str]:
        return parse_cookie(self.cookie)

    @property
    def sapisid(self) -> Optional[str]:
        """SAPISID value used for the authorization hash, if any."""
        cookies = self.cookies
        for name in AUTH_COOKIE_NAMES:
            if cookies.get(name):
                return cookies[name]
        return None

    @property
    def logged_in(self) -> bool:
        return self.sapisid is not None


class SessionContext:
    """
    Process-wide session state.

    The visitor token and cookie may be rotated by the transport as a side
    effect of responses. Every mutation replaces the published snapshot in one
    step, so concurrent readers always see a consistent identity.
    """

    def __init__(
        self,
        locale: Optional[Locale] = None,
        client: ClientDescriptor = WEB_REMIX,
        visitor_data: Optional[str] = None,
        cookie: Optional[str] = None,
    ):
        """
        Initialize session.

        Args:
            locale: Region/language pair (default: US/en)
            client: Client descriptor to reproduce
            visitor_data: Anonymous visitor token, if already known
            cookie: Raw Cookie header for an authenticated session
        """
        self._lock = threading.Lock()
        self._snapshot = SessionSnapshot(
            locale=locale or Locale(),
            client=client,
            visitor_data=visitor_data or None,
            cookie=cookie or None,
        )

    def snapshot(self) -> SessionSnapshot:
        """Return the latest published snapshot (never blocks)."""
        return self._snapshot

    @property
    def locale(self) -> Locale:
        return self._snapshot.locale

    @property
    def visitor_data(self) -> Optional[str]:
        return self._snapshot.visitor_data

    @property
    def cookie(self) -> Optional[str]:
        return self._snapshot.cookie

    @property
    def logged_in(self) -> bool:
        return self._snapshot.logged_in

    def _publish(self, **changes) -> SessionSnapshot:
        # Caller holds the lock.
        current = self._snapshot
        self._snapshot = replace(current, version=current.version + 1, **changes)
        return self._snapshot

    def set_locale(self, locale: Locale) -> None:
        with self._lock:
            self._publish(locale=locale)

    def set_visitor_data(self, visitor_data: Optional[str]) -> None:
        with self._lock:
            self._publish(visitor_data=visitor_data or None)

    def set_cookie(self, cookie: Optional[str]) -> None:
        with self._lock:
            self._publish(cookie=cookie or None)

    def compare_and_swap(self, expected: SessionSnapshot, new: SessionSnapshot) -> bool:
        """
        Publish ``new`` only if ``expected`` is still the current snapshot.

        Returns:
            True if the swap happened, False if another writer got there first
        """
        with self._lock:
            if self._snapshot is not expected:
                return False
            self._snapshot = replace(new, version=expected.version + 1)
            return True

    def apply_updates(
        self,
        visitor_data: Optional[str] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Apply upstream-issued identity updates in a single swap.

        Rotated cookies are merged into the existing cookie string; they are
        ignored for sessions that hold no cookie.

        Args:
            visitor_data: New visitor token, if the upstream issued one
            cookies: Rotated cookie values from the response

        Returns:
            True if anything changed
        """
        with self._lock:
            current = self._snapshot
            changes = {}

            if visitor_data and visitor_data != current.visitor_data:
                changes["visitor_data"] = visitor_data

            if cookies and current.cookie:
                merged = current.cookies
                merged.update(cookies)
                cookie = format_cookie(merged)
                if cookie != current.cookie:
                    changes["cookie"] = cookie

            if not changes:
                return False

            self._publish(**changes)

        logger.debug(f"Session updated from response: {', '.join(sorted(changes))}")
        return True
