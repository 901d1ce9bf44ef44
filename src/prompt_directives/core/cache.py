"""
Prompt Directives - Directive cache.

Memoises parser output by content. Entries are addressed by a cheap
CRC32 of the content string, never by prompt identifier: editing a prompt
produces a new key and a fresh parse, while an untouched prompt's entry
ages out through the TTL or capacity eviction.

CRC32 collides. Each entry keeps the content it was parsed from and a
lookup whose stored content differs is treated as a miss, so a collision
costs a re-parse but never returns another prompt's directives.

Eviction:
- Capacity is checked when a new key is inserted
- On overflow the oldest third of keys (by insertion order, not LRU) go
- clear() drops everything and bumps the cache version
"""

import logging
import time
import zlib
from collections.abc import Callable
from dataclasses import dataclass

from prompt_directives.core.parser import EMPTY_DIRECTIVES, parse
from prompt_directives.models import DirectiveSet

logger = logging.getLogger(__name__)


DEFAULT_MAX_SIZE = 500
DEFAULT_TTL_SECONDS = 300.0


def content_hash(content: str) -> int:
    """Fast non-cryptographic hash of a content string."""
    return zlib.crc32(content.encode("utf-8"))


@dataclass
class CacheEntry:
    """Parsed directives plus the moment they were stored."""

    directives: DirectiveSet
    timestamp: float
    content: str


@dataclass
class CacheStats:
    """Snapshot of cache counters."""

    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int
    version: int

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "version": self.version,
        }


class DirectiveCache:
    """
    Bounded, TTL-limited cache in front of the directive parser.

    Each instance is independent; tests build their own with a fake clock.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        parser: Callable[[str], DirectiveSet] = parse,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._parser = parser
        self._entries: dict[int, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._version = 0

    @classmethod
    def from_settings(cls, settings=None) -> "DirectiveCache":
        """Build a cache sized from DirectiveSettings."""
        if settings is None:
            from prompt_directives.config import get_settings
            settings = get_settings()
        return cls(max_size=settings.cache_max_size, ttl_seconds=settings.cache_ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, content: str | None) -> DirectiveSet:
        """
        Return the directives for a content string, parsing on miss.

        Stale entries and hash collisions are both misses. A parser failure
        is logged and yields the empty DirectiveSet, which is not cached.
        """
        if not content:
            return EMPTY_DIRECTIVES

        key = content_hash(content)
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and entry.content == content and now - entry.timestamp < self.ttl_seconds:
            self._hits += 1
            return entry.directives

        self._misses += 1
        try:
            directives = self._parser(content)
        except Exception as e:
            logger.warning(f"Directive cache: failed to parse content (hash {key:08x}): {e}")
            return EMPTY_DIRECTIVES

        self._store(key, CacheEntry(directives=directives, timestamp=now, content=content))
        return directives

    def _store(self, key: int, entry: CacheEntry) -> None:
        if key in self._entries:
            # Refresh counts as a new insertion
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key] = entry

    def _evict_oldest(self) -> None:
        count = max(1, len(self._entries) // 3)
        for key in list(self._entries)[:count]:
            del self._entries[key]
        self._evictions += count
        logger.debug(f"Directive cache: evicted {count} oldest entries")

    def clear(self) -> None:
        """Drop every entry (e.g. after a preset switch)."""
        self._entries.clear()
        self._version += 1
        logger.debug("Directive cache cleared")

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            version=self._version,
        )
