"""
Test helper functions and utilities.
"""
import json
from typing import Any, Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

from innertube.transport import RawResponse


def make_http_response(
    status: int = 200,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    cookies: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """
    Create a requests.Response as the HTTP layer would return it.

    Args:
        status: HTTP status code
        body: JSON-serializable body, or raw bytes
        headers: Response headers
        cookies: Cookies the upstream sets on this response
    """
    response = requests.Response()
    response.status_code = status
    if isinstance(body, bytes):
        response._content = body
    else:
        response._content = json.dumps({} if body is None else body).encode("utf-8")
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    return response


def make_raw_response(body: Dict[str, Any], status: int = 200) -> RawResponse:
    """Create a decoded transport response."""
    return RawResponse(status=status, body=body, headers={}, attempts=1)


def item_ids(page) -> list:
    """Identifier of every item in a page, in order."""
    return [getattr(item, "id", None) for item in page.items]
