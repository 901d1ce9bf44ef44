"""
Tests for DirectiveCache - transparency, TTL, eviction, collisions.

Each test builds its own cache with a FakeClock (see conftest).
"""

import logging
from unittest.mock import MagicMock

import pytest

from prompt_directives.config import DirectiveSettings
from prompt_directives.core import cache as cache_module
from prompt_directives.core.cache import DirectiveCache, content_hash
from prompt_directives.core.parser import EMPTY_DIRECTIVES, parse


def _content(n: int) -> str:
    return f"{{{{// @tags tag-{n} }}}}\nPrompt {n}"


class TestTransparency:
    """Cached results equal fresh parses."""

    def test_get_equals_parse(self, clock):
        cache = DirectiveCache(clock=clock)
        content = _content(1)
        assert cache.get(content) == parse(content)
        assert cache.get(content) == parse(content)

    def test_hit_returns_same_record(self, clock):
        cache = DirectiveCache(clock=clock)
        first = cache.get(_content(1))
        assert cache.get(_content(1)) is first

    def test_cached_lists_are_read_only(self, clock):
        cache = DirectiveCache(clock=clock)
        content = _content(1)
        with pytest.raises(AttributeError):
            cache.get(content).tags.append("extra")
        assert cache.get(content) == parse(content)
        assert cache.get(content).tags == ("tag-1",)

    def test_counts_hits_and_misses(self, clock):
        cache = DirectiveCache(clock=clock)
        cache.get(_content(1))
        cache.get(_content(1))
        cache.get(_content(2))

        stats = cache.stats()
        assert stats.hits == 1
        assert stats.misses == 2
        assert stats.size == 2

    def test_empty_content_bypasses_cache(self, clock):
        cache = DirectiveCache(clock=clock)
        assert cache.get("") is EMPTY_DIRECTIVES
        assert cache.get(None) is EMPTY_DIRECTIVES
        assert len(cache) == 0
        assert cache.stats().misses == 0


class TestTTL:
    """Entries go stale after ttl_seconds."""

    def test_fresh_within_ttl(self, clock):
        parser = MagicMock(side_effect=parse)
        cache = DirectiveCache(ttl_seconds=300, clock=clock, parser=parser)

        cache.get(_content(1))
        clock.advance(299.9)
        cache.get(_content(1))

        assert parser.call_count == 1

    def test_stale_after_ttl(self, clock):
        parser = MagicMock(side_effect=parse)
        cache = DirectiveCache(ttl_seconds=300, clock=clock, parser=parser)

        cache.get(_content(1))
        clock.advance(300)
        result = cache.get(_content(1))

        assert parser.call_count == 2
        assert result == parse(_content(1))
        assert len(cache) == 1

    def test_refresh_moves_entry_to_newest(self, clock):
        cache = DirectiveCache(max_size=3, ttl_seconds=10, clock=clock)
        for n in (1, 2, 3):
            cache.get(_content(n))

        clock.advance(11)
        cache.get(_content(1))  # stale → re-parsed and re-inserted
        cache.get(_content(4))  # overflow evicts the oldest: content 2

        assert content_hash(_content(2)) not in cache._entries
        assert content_hash(_content(1)) in cache._entries


class TestEviction:
    """Capacity overflow drops the oldest third by insertion order."""

    def test_overflow_does_not_raise_and_keeps_newest(self, clock):
        parser = MagicMock(side_effect=parse)
        cache = DirectiveCache(max_size=3, clock=clock, parser=parser)
        for n in range(1, 5):
            cache.get(_content(n))

        assert len(cache) == 3
        parser.reset_mock()
        for n in (2, 3, 4):
            cache.get(_content(n))
        parser.assert_not_called()

    def test_evicts_a_third(self, clock):
        cache = DirectiveCache(max_size=9, clock=clock)
        for n in range(10):
            cache.get(_content(n))

        stats = cache.stats()
        assert stats.evictions == 3
        assert stats.size == 7
        for n in range(3):
            assert content_hash(_content(n)) not in cache._entries

    def test_size_one_cache(self, clock):
        cache = DirectiveCache(max_size=1, clock=clock)
        cache.get(_content(1))
        cache.get(_content(2))
        assert len(cache) == 1
        assert cache.stats().evictions == 1

    def test_never_exceeds_capacity(self, clock):
        cache = DirectiveCache(max_size=5, clock=clock)
        for n in range(50):
            cache.get(_content(n))
            assert len(cache) <= 5


class TestCollisions:
    """Hash collisions degrade to misses, never wrong results."""

    def test_colliding_contents_parse_separately(self, clock, monkeypatch):
        monkeypatch.setattr(cache_module, "content_hash", lambda content: 42)
        cache = DirectiveCache(clock=clock)

        first = cache.get(_content(1))
        second = cache.get(_content(2))

        assert first.tags == ("tag-1",)
        assert second.tags == ("tag-2",)
        assert cache.get(_content(2)) is second
        assert len(cache) == 1


class TestClearAndErrors:
    """clear(), parser failures and construction."""

    def test_clear(self, clock):
        parser = MagicMock(side_effect=parse)
        cache = DirectiveCache(clock=clock, parser=parser)
        cache.get(_content(1))

        cache.clear()

        assert len(cache) == 0
        assert cache.stats().version == 1
        cache.get(_content(1))
        assert parser.call_count == 2

    def test_parser_failure_returns_defaults_uncached(self, clock, caplog):
        parser = MagicMock(side_effect=RuntimeError("boom"))
        cache = DirectiveCache(clock=clock, parser=parser)

        with caplog.at_level(logging.WARNING, logger="prompt_directives.core.cache"):
            result = cache.get(_content(1))

        assert result is EMPTY_DIRECTIVES
        assert len(cache) == 0
        assert "boom" in caplog.text

    @pytest.mark.parametrize("kwargs", [{"max_size": 0}, {"ttl_seconds": 0}, {"ttl_seconds": -1}])
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            DirectiveCache(**kwargs)

    def test_from_settings(self):
        settings = DirectiveSettings(cache_max_size=10, cache_ttl_seconds=5)
        cache = DirectiveCache.from_settings(settings)
        assert cache.max_size == 10
        assert cache.ttl_seconds == 5

    def test_stats_to_dict(self, clock):
        cache = DirectiveCache(max_size=7, clock=clock)
        cache.get(_content(1))
        assert cache.stats().to_dict() == {
            "size": 1,
            "max_size": 7,
            "hits": 0,
            "misses": 1,
            "evictions": 0,
            "version": 0,
        }
