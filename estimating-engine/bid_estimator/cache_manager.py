# estimating-engine/bid_estimator/cache_manager.py
import logging
import threading
from typing import Any, Callable, Dict, Hashable, Tuple

# Set up a logger for this module
logger = logging.getLogger(__name__)


class ResultCache:
    """
    Keeps the last computed result per (operation, parameters, dataset version).
    Entries from older dataset versions are dropped when the version changes.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, Hashable, int], Any] = {}
        self._version = 0
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        return self._version

    def invalidate(self) -> int:
        """Moves to a new dataset version and clears every cached result."""
        with self._lock:
            self._version += 1
            self._entries.clear()
            logger.info(f"Result cache invalidated, dataset version is now {self._version}.")
            return self._version

    def get_or_compute(self, operation: str, params: Hashable, compute: Callable[[], Any]) -> Any:
        with self._lock:
            key = (operation, params, self._version)
            if key in self._entries:
                logger.debug(f"Cache hit for {operation} {params}")
                return self._entries[key]

        result = compute()

        with self._lock:
            # A concurrent invalidate() means this result belongs to an old dataset
            if key[2] == self._version:
                self._entries[key] = result
        return result

    def __len__(self) -> int:
        return len(self._entries)
