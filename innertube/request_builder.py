"""
Builds outbound requests that match the envelope first-party clients send.
"""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from innertube.catalog import ContinuationStyle, Operation
from innertube.exceptions import AuthRequiredError
from innertube.models import ContinuationCursor
from innertube.session import SessionSnapshot

logger = logging.getLogger(__name__)

BASE_URL = "https://music.youtube.com/youtubei/v1/"


@dataclass(frozen=True)
class OutboundRequest:
    """Transport-ready request."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    operation: str = ""
    requires_auth: bool = False


def sapisid_hash(sapisid: str, origin: str, timestamp: Optional[int] = None) -> str:
    """
    Compute the SAPISIDHASH authorization value.

    Args:
        sapisid: SAPISID cookie value
        origin: Origin the request claims to come from
        timestamp: Unix time in seconds (default: now)

    Returns:
        Header value in the form "SAPISIDHASH <ts>_<sha1>"
    """
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hashlib.sha1(f"{ts} {sapisid} {origin}".encode("utf-8")).hexdigest()
    return f"SAPISIDHASH {ts}_{digest}"


def build_context(snapshot: SessionSnapshot) -> Dict[str, Any]:
    """Build the client-context block of the request body."""
    client: Dict[str, Any] = {
        "clientName": snapshot.client.client_name,
        "clientVersion": snapshot.client.client_version,
        "gl": snapshot.locale.gl,
        "hl": snapshot.locale.hl,
    }
    if snapshot.visitor_data:
        client["visitorData"] = snapshot.visitor_data
    return {
        "client": client,
        "user": {"lockedSafetyMode": False},
        "request": {"useSsl": True, "internalExperimentFlags": []},
    }


def build_headers(
    snapshot: SessionSnapshot, timestamp: Optional[int] = None
) -> Dict[str, str]:
    """Build headers for a snapshot, adding credentials when logged in."""
    client = snapshot.client
    headers = {
        "Content-Type": "application/json",
        "Accept-Language": snapshot.locale.hl,
        "User-Agent": client.user_agent,
        "Origin": client.origin,
        "X-Origin": client.origin,
        "Referer": client.referer,
        "X-Goog-Api-Format-Version": "1",
        "X-YouTube-Client-Name": client.client_id,
        "X-YouTube-Client-Version": client.client_version,
    }
    if snapshot.visitor_data:
        headers["X-Goog-Visitor-Id"] = snapshot.visitor_data

    if client.login_supported and snapshot.logged_in:
        headers["Cookie"] = snapshot.cookie
        headers["X-Goog-AuthUser"] = "0"
        headers["Authorization"] = sapisid_hash(
            snapshot.sapisid, client.origin, timestamp
        )

    return headers


class RequestBuilder:
    """Maps a catalog operation plus session snapshot to an OutboundRequest."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url
        self.clock = clock

    def _url(self, endpoint: str) -> str:
        return self.base_url.rstrip("/") + "/" + endpoint

    def build(
        self,
        operation: Operation,
        snapshot: SessionSnapshot,
        params: Optional[Dict[str, Any]] = None,
        continuation: Optional[ContinuationCursor] = None,
    ) -> OutboundRequest:
        """
        Build a request for an operation.

        Args:
            operation: Catalog entry describing the endpoint
            snapshot: Session identity to embed
            params: Logical parameters (ignored when resuming from a cursor)
            continuation: Cursor from a previous page

        Returns:
            OutboundRequest ready for the transport

        Raises:
            AuthRequiredError: If the operation needs credentials the session lacks
            ValueError: If required logical parameters are missing
        """
        if operation.requires_auth and not snapshot.logged_in:
            raise AuthRequiredError(
                f"Operation '{operation.name}' requires a signed-in session"
            )

        body: Dict[str, Any] = {"context": build_context(snapshot)}
        query = {"prettyPrint": "false"}
        if snapshot.client.api_key:
            query["key"] = snapshot.client.api_key

        if continuation is not None:
            # The cursor carries all paging state; nothing else is sent.
            if operation.continuation_style is ContinuationStyle.BODY:
                body["continuation"] = continuation.token
            else:
                query["continuation"] = continuation.token
                query["ctoken"] = continuation.token
                query["type"] = "next"
        else:
            body.update(operation.build_body(params or {}))

        headers = build_headers(snapshot, int(self.clock()))

        logger.debug(
            f"Built {operation.name} request"
            f"{' (continuation)' if continuation else ''} for {operation.endpoint}"
        )

        return OutboundRequest(
            method="POST",
            url=self._url(operation.endpoint),
            headers=headers,
            params=query,
            body=body,
            operation=operation.name,
            requires_auth=operation.requires_auth,
        )
