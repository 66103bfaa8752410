"""
YouTube Music InnerTube client.

One call per catalog operation, each returning a typed ResultPage. Calls are
independent and may run concurrently; ``submit`` runs any of them on the
client's thread pool and returns a Future.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Iterator, Optional, Union

from innertube import catalog
from innertube.catalog import Operation, SearchFilter
from innertube.config import ClientSettings
from innertube.models import ContinuationCursor, ResultPage
from innertube.request_builder import RequestBuilder
from innertube.session import CLIENTS, Locale, SessionContext
from innertube.transport import RetryPolicy, Transport

logger = logging.getLogger(__name__)

# Consecutive empty pages that still carry a cursor before paging stops.
MAX_EMPTY_PAGES = 2

OPERATIONS = ("search", "browse", "queue", "related", "library")


def session_from_settings(settings: ClientSettings) -> SessionContext:
    """Build a SessionContext from configuration."""
    return SessionContext(
        locale=Locale(gl=settings.gl, hl=settings.hl),
        client=CLIENTS[settings.client],
        visitor_data=settings.visitor_data,
        cookie=settings.cookie,
    )


class YouTubeMusic:
    """Client facade over request building, transport and parsing."""

    def __init__(
        self,
        session: Optional[SessionContext] = None,
        transport: Optional[Transport] = None,
        settings: Optional[ClientSettings] = None,
        builder: Optional[RequestBuilder] = None,
    ):
        """
        Initialize client.

        Args:
            session: Shared session context (default: built from settings)
            transport: Transport to use (default: built from settings)
            settings: Client settings (default: ClientSettings())
            builder: Request builder (default: RequestBuilder())
        """
        self.settings = settings or ClientSettings()
        self.session = session or session_from_settings(self.settings)
        self.transport = transport or Transport(
            self.session,
            timeout=self.settings.timeout,
            retry_policy=RetryPolicy(
                max_retries=self.settings.max_retries,
                backoff_factor=self.settings.backoff_factor,
                max_backoff=self.settings.max_backoff,
            ),
            proxy=self.settings.proxy,
        )
        self.builder = builder or RequestBuilder()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def __enter__(self) -> "YouTubeMusic":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the thread pool and the HTTP session."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
        self.transport.close()

    def execute(
        self,
        operation: Union[str, Operation],
        continuation: Optional[ContinuationCursor] = None,
        **params: Any,
    ) -> Any:
        """
        Run one catalog operation end to end.

        Args:
            operation: Catalog entry or its name
            continuation: Cursor to resume from (logical params are then ignored)
            **params: Logical parameters of the operation

        Returns:
            Whatever the operation's parser returns (a ResultPage for all
            public operations)

        Raises:
            TransportError, SchemaMismatchError, AuthRequiredError
        """
        if isinstance(operation, str):
            operation = catalog.get_operation(operation)
        request = self.builder.build(
            operation,
            self.session.snapshot(),
            params=params,
            continuation=continuation,
        )
        response = self.transport.execute(request)
        return operation.parse(response.body)

    def search(
        self,
        query: Optional[str] = None,
        filter: Optional[Union[SearchFilter, str]] = None,
        continuation: Optional[ContinuationCursor] = None,
    ) -> ResultPage:
        """Search, optionally restricted to one result type."""
        return self.execute(
            catalog.SEARCH, continuation=continuation, query=query, filter=filter
        )

    def browse(
        self,
        browse_id: Optional[str] = None,
        params: Optional[str] = None,
        continuation: Optional[ContinuationCursor] = None,
    ) -> ResultPage:
        """Browse a channel, album, playlist or other page by id."""
        return self.execute(
            catalog.BROWSE, continuation=continuation, browse_id=browse_id, params=params
        )

    def queue(
        self,
        video_id: Optional[str] = None,
        playlist_id: Optional[str] = None,
        params: Optional[str] = None,
        index: Optional[int] = None,
        continuation: Optional[ContinuationCursor] = None,
    ) -> ResultPage:
        """Resolve the playback queue for a watch endpoint."""
        return self.execute(
            catalog.QUEUE,
            continuation=continuation,
            video_id=video_id,
            playlist_id=playlist_id,
            params=params,
            index=index,
        )

    def related(
        self,
        video_id: Optional[str] = None,
        continuation: Optional[ContinuationCursor] = None,
    ) -> ResultPage:
        """
        Content related to a song.

        Without a cursor this takes two requests: the watch-next page names
        the related page, which is then browsed. A song without a related
        tab yields an empty page.
        """
        if continuation is not None:
            return self.execute(catalog.RELATED, continuation=continuation)

        endpoint = self.execute(catalog.RELATED_LOOKUP, video_id=video_id)
        if endpoint is None:
            logger.info(f"No related content offered for {video_id}")
            return ResultPage()
        return self.execute(
            catalog.RELATED, browse_id=endpoint.browse_id, params=endpoint.params
        )

    def library(
        self,
        browse_id: str = "FEmusic_liked_playlists",
        continuation: Optional[ContinuationCursor] = None,
    ) -> ResultPage:
        """Signed-in library page (liked playlists by default)."""
        return self.execute(catalog.LIBRARY, continuation=continuation, browse_id=browse_id)

    def _call(self, name: str, **params: Any) -> ResultPage:
        if name not in OPERATIONS:
            raise KeyError(f"Unknown operation '{name}'")
        return getattr(self, name)(**params)

    def submit(self, name: str, **params: Any) -> "Future[ResultPage]":
        """
        Run an operation on the client's thread pool.

        Args:
            name: One of search, browse, queue, related, library
            **params: Arguments for that method (including ``continuation``)

        Returns:
            Future resolving to a ResultPage or raising the classified failure
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.workers,
                    thread_name_prefix="innertube",
                )
            return self._executor.submit(self._call, name, **params)

    def iter_pages(
        self,
        name: str,
        max_pages: Optional[int] = None,
        **params: Any,
    ) -> Iterator[ResultPage]:
        """
        Yield successive pages, following continuation cursors.

        Stops when a page has no cursor, after ``max_pages`` pages, when a
        cursor repeats, or after consecutive empty pages that keep returning
        cursors.

        Args:
            name: One of search, browse, queue, related, library
            max_pages: Page cap (default: settings.max_pages)
            **params: Logical parameters of the first call

        Raises:
            ValueError: If max_pages is below 1
        """
        limit = self.settings.max_pages if max_pages is None else max_pages
        if limit < 1:
            raise ValueError(f"max_pages must be at least 1, got {limit}")
        seen: set = set()
        empty_streak = 0
        page = self._call(name, **params)

        for number in range(1, limit + 1):
            yield page

            cursor = page.continuation
            if cursor is None:
                return

            if cursor in seen:
                logger.warning(f"{name}: cursor repeated on page {number}, stopping")
                return
            seen.add(cursor)

            empty_streak = empty_streak + 1 if not page.items else 0
            if empty_streak >= MAX_EMPTY_PAGES:
                logger.warning(
                    f"{name}: {empty_streak} empty pages still carrying cursors, stopping"
                )
                return

            if number == limit:
                logger.warning(f"{name}: reached page limit ({limit}), stopping")
                return

            page = self._call(name, continuation=cursor)

    def __repr__(self) -> str:
        snapshot = self.session.snapshot()
        return (
            f"YouTubeMusic(client={snapshot.client.client_name}, "
            f"gl={snapshot.locale.gl}, hl={snapshot.locale.hl}, "
            f"logged_in={snapshot.logged_in})"
        )
