"""
Content-addressed LRU cache of pipeline results.

Keys are (content hash, sorted layer ids). The content hash covers the grammar
the filename selects as well as the text, since the same text parses
differently as .ts and .tsx.
"""

import hashlib
import logging
import threading
from collections import OrderedDict

from layerlint.core.run import PipelineResult
from layerlint.core.syntax import extension_of, language_for


logger = logging.getLogger(__name__)


def content_hash(text: str, filename: str | None = None) -> str:
    hint = f"{language_for(filename)}:{extension_of(filename)}"
    return hashlib.sha256(f"{hint}\0{text}".encode("utf-8")).hexdigest()


def cacheable(result: PipelineResult) -> bool:
    return not (result.has_critical_failure or result.cancelled or result.has_timeout)


class ResultCache:

    def __init__(self, capacity: int = 256):
        self.capacity = capacity
        self._entries: OrderedDict[tuple, PipelineResult] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _key(content_hash: str, layers) -> tuple:
        return (content_hash, tuple(sorted(set(layers))))

    def get(self, content_hash: str, layers) -> PipelineResult | None:
        key = self._key(content_hash, layers)
        with self._lock:
            result = self._entries.get(key)
            if result is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return result

    def put(self, content_hash: str, layers, result: PipelineResult) -> bool:
        """Store a result. Returns False when the result is refused."""
        if self.capacity <= 0 or not cacheable(result):
            return False
        key = self._key(content_hash, layers)
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache evicted %s", evicted[0][:12])
        return True

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key) -> bool:
        with self._lock:
            return self._key(*key) in self._entries
