"""
HTTP transport with timeout, bounded retry and failure classification.
"""

import logging
import time
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from innertube.exceptions import AuthRequiredError, SchemaMismatchError, TransportError
from innertube.request_builder import OutboundRequest
from innertube.session import SessionContext

logger = logging.getLogger(__name__)

VISITOR_ID_HEADER = "X-Goog-Visitor-Id"
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
AUTH_STATUS = frozenset({401, 403})


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry policy.

    Attributes:
        max_retries: Extra attempts after the first one
        backoff_factor: Base delay in seconds, doubled on each retry
        max_backoff: Upper bound for any single delay (including Retry-After)
    """

    max_retries: int = 3
    backoff_factor: float = 0.5
    max_backoff: float = 8.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, retry: int, retry_after: Optional[float] = None) -> float:
        """Delay before retry number ``retry`` (1-based)."""
        if retry_after is not None:
            return max(0.0, min(self.max_backoff, retry_after))
        return min(self.max_backoff, self.backoff_factor * 2 ** (retry - 1))


@dataclass(frozen=True)
class RawResponse:
    """Decoded response body plus status and headers."""

    status: int
    body: Dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)
    attempts: int = 1


class _RejectAllCookies(DefaultCookiePolicy):
    """Keep the pooled HTTP session from storing cookies of its own."""

    def set_ok(self, cookie, request):
        return False


def _retry_after(response: requests.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class Transport:
    """Executes OutboundRequests and feeds identity updates back to the session."""

    def __init__(
        self,
        session: SessionContext,
        timeout: float = 10.0,
        retry_policy: Optional[RetryPolicy] = None,
        proxy: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
        http: Optional[requests.Session] = None,
    ):
        """
        Initialize transport.

        Args:
            session: Session context updated from response headers
            timeout: Per-attempt timeout in seconds
            retry_policy: Retry policy (default: RetryPolicy())
            proxy: Optional proxy URL for both schemes
            sleep: Sleep function used between retries
            http: Pre-built requests session (default: a new one)
        """
        self.session = session
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep
        self.http = http or requests.Session()
        self.http.cookies.set_policy(_RejectAllCookies())
        if proxy:
            self.http.proxies.update({"http": proxy, "https": proxy})

    def close(self) -> None:
        self.http.close()

    def execute(self, request: OutboundRequest) -> RawResponse:
        """
        Execute a request with retries.

        Args:
            request: Request produced by the RequestBuilder

        Returns:
            RawResponse with the decoded JSON body

        Raises:
            TransportError: Network/timeout/status failure after retries
            AuthRequiredError: Upstream rejected the credentials (401/403)
            SchemaMismatchError: Body is not a JSON object
        """
        policy = self.retry_policy
        last_error: Optional[TransportError] = None

        for attempt in range(1, policy.max_attempts + 1):
            retry_after = None
            try:
                response = self.http.request(
                    request.method,
                    request.url,
                    params=request.params,
                    json=request.body,
                    headers=request.headers,
                    timeout=self.timeout,
                )
            except requests.Timeout as e:
                last_error = TransportError(
                    f"{request.operation} timed out after {self.timeout}s: {e}",
                    attempts=attempt,
                )
            except requests.RequestException as e:
                last_error = TransportError(
                    f"{request.operation} network error: {e}", attempts=attempt
                )
            else:
                status = response.status_code
                if 200 <= status < 300:
                    return self._accept(request, response, attempt)
                if status in AUTH_STATUS:
                    raise AuthRequiredError(
                        f"{request.operation} rejected with HTTP {status}"
                        f"{'' if request.headers.get('Cookie') else ' (no credentials)'}"
                    )
                last_error = TransportError(
                    f"{request.operation} failed with HTTP {status}",
                    status=status,
                    attempts=attempt,
                )
                if status not in RETRYABLE_STATUS:
                    raise last_error
                if status == 429:
                    retry_after = _retry_after(response)

            if attempt < policy.max_attempts:
                wait_time = policy.delay(attempt, retry_after)
                logger.warning(
                    f"Attempt {attempt}/{policy.max_attempts} failed: {last_error}. "
                    f"Retrying in {wait_time:.1f}s..."
                )
                self.sleep(wait_time)

        logger.error(f"Giving up after {policy.max_attempts} attempts: {last_error}")
        raise last_error

    def _accept(
        self,
        request: OutboundRequest,
        response: requests.Response,
        attempt: int,
    ) -> RawResponse:
        try:
            body = response.json()
        except ValueError as e:
            raise SchemaMismatchError(
                f"{request.operation} returned a non-JSON body"
            ) from e
        if not isinstance(body, dict):
            raise SchemaMismatchError(
                f"{request.operation} returned {type(body).__name__}, expected an object"
            )

        # Applied only once the body is fully received and decoded.
        self.session.apply_updates(
            visitor_data=response.headers.get(VISITOR_ID_HEADER),
            cookies=dict(response.cookies.items()),
        )

        return RawResponse(
            status=response.status_code,
            body=body,
            headers=dict(response.headers),
            attempts=attempt,
        )
