import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MAX_VARIANTS_PER_PATH = 64


class ViewCache:
    """Cached view payloads, grouped by path and keyed by query string.

    Revalidating a path drops every cached variant of it, so the next read
    goes back to the store. Each path keeps at most ``max_variants``
    variants, evicting the least recently used.

    Readers take ``generation()`` before querying the store and pass it
    to ``set``; a payload read before any later revalidation is discarded.
    """

    def __init__(self, max_variants: int = MAX_VARIANTS_PER_PATH) -> None:
        self.max_variants = max_variants
        self._entries: Dict[str, "OrderedDict[str, Any]"] = {}
        self._generation = 0
        self._lock = threading.Lock()

    def get(self, path: str, variant: str = "") -> Optional[Any]:
        with self._lock:
            variants = self._entries.get(path)
            if variants is None or variant not in variants:
                return None
            variants.move_to_end(variant)
            return variants[variant]

    def generation(self) -> int:
        with self._lock:
            return self._generation

    def set(self, path: str, payload: Any, variant: str = "", generation: Optional[int] = None) -> None:
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Skipped stale payload for %s", path)
                return
            variants = self._entries.setdefault(path, OrderedDict())
            variants[variant] = payload
            variants.move_to_end(variant)
            while len(variants) > self.max_variants:
                variants.popitem(last=False)

    def revalidate_path(self, path: str) -> None:
        with self._lock:
            dropped = self._entries.pop(path, None)
            self._generation += 1
        logger.debug("Revalidated %s (%d cached variants)", path, len(dropped or {}))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(variants) for variants in self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
