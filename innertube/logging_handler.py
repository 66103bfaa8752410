"""
Logging handler that turns dropped-item log records into counters.

The renderer adapter never raises for a single bad node; it logs the drop
on the ``innertube.renderers`` logger instead. Attaching this handler makes
those drops observable without changing any parse result.
"""

import logging
import threading
from collections import Counter
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

RENDERERS_LOGGER = "innertube.renderers"


class DroppedItemHandler(logging.Handler):
    """
    Counts dropped renderer nodes per renderer kind.

    Only records carrying a ``renderer`` attribute (set through ``extra``)
    are counted; everything else on the logger is ignored.
    """

    def __init__(self, callback: Optional[Callable[[str, str], None]] = None):
        """
        Initialize the handler.

        Args:
            callback: Optional function called with (renderer_kind, reason)
                      for every drop.
        """
        super().__init__(level=logging.DEBUG)
        self._callback = callback
        self._counts: Counter = Counter()
        self._counts_lock = threading.Lock()

    @property
    def total(self) -> int:
        with self._counts_lock:
            return sum(self._counts.values())

    def counts(self) -> Dict[str, int]:
        """Snapshot of drop counts keyed by renderer kind."""
        with self._counts_lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._counts_lock:
            self._counts.clear()

    def emit(self, record: logging.LogRecord) -> None:
        kind = getattr(record, "renderer", None)
        if kind is None:
            return

        with self._counts_lock:
            self._counts[kind] += 1

        if self._callback:
            try:
                self._callback(kind, getattr(record, "reason", ""))
            except Exception as e:
                logger.error(f"Error in dropped-item callback: {e}", exc_info=True)

    @classmethod
    def install(
        cls,
        callback: Optional[Callable[[str, str], None]] = None,
    ) -> "DroppedItemHandler":
        """
        Attach a new handler to the renderers logger.

        The logger's level is lowered to DEBUG so drops reach the handler.
        """
        handler = cls(callback)
        renderers_logger = logging.getLogger(RENDERERS_LOGGER)
        renderers_logger.addHandler(handler)
        renderers_logger.setLevel(logging.DEBUG)
        return handler

    def uninstall(self) -> None:
        logging.getLogger(RENDERERS_LOGGER).removeHandler(self)
