"""
Unit tests for aicheck/detection/cache.py.

Memory-path tests drive expiry with a fake clock. Redis-path tests use the
in-memory MockRedis fixture.
"""

import json

from aicheck.detection.cache import FingerprintCache
from aicheck.schemas.analysis import AnalysisResult, Label


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _result(label=Label.HUMAN, confidence=0.4) -> AnalysisResult:
    return AnalysisResult(
        label=label,
        confidence=confidence,
        ai_probability_pct=30,
        human_probability_pct=70,
        explanation="test",
    )


def _memory_cache(clock=None, **kwargs) -> FingerprintCache:
    return FingerprintCache("classify", 300, AnalysisResult, clock=clock or FakeClock(), use_redis=False, **kwargs)


# ---------------------------------------------------------------------------
# Memory backend
# ---------------------------------------------------------------------------


def test_memory_miss_then_hit():
    cache = _memory_cache()
    assert cache.get("k:text") is None

    cache.set("k:text", _result())
    entry = cache.get("k:text")

    assert entry is not None
    assert entry.payload.label == Label.HUMAN
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_memory_entry_expires_lazily():
    clock = FakeClock()
    cache = _memory_cache(clock)
    cache.set("k:text", _result())

    clock.now += 299
    assert cache.get("k:text") is not None

    clock.now += 2
    assert cache.get("k:text") is None
    assert cache.stats()["entries"] == 0


def test_cleanup_removes_only_expired():
    clock = FakeClock()
    cache = _memory_cache(clock)
    cache.set("old:text", _result())
    clock.now += 200
    cache.set("new:text", _result())
    clock.now += 150

    assert cache.cleanup() == 1
    assert cache.get("new:text") is not None
    assert cache.get("old:text") is None


def test_lru_eviction_drops_least_recently_used():
    cache = _memory_cache(max_size=2)
    cache.set("a:text", _result())
    cache.set("b:text", _result())
    cache.get("a:text")
    cache.set("c:text", _result())

    assert cache.get("b:text") is None
    assert cache.get("a:text") is not None
    assert cache.get("c:text") is not None


def test_clear_resets_entries_and_counters():
    cache = _memory_cache()
    cache.set("a:text", _result())
    cache.get("a:text")
    cache.clear()

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0


# ---------------------------------------------------------------------------
# Redis backend
# ---------------------------------------------------------------------------


def test_redis_set_uses_namespace_and_ttl(mock_redis):
    cache = FingerprintCache("verify", 86400, AnalysisResult)
    cache.set("abc:text", _result())

    assert mock_redis.set_calls == [("verify:abc:text", 86400)]
    stored = json.loads(mock_redis.get("verify:abc:text"))
    assert stored["payload"]["label"] == "Human"


def test_redis_roundtrip_validates_payload(mock_redis):
    cache = FingerprintCache("classify", 300, AnalysisResult)
    cache.set("abc:text", _result(Label.AI, 0.9))

    entry = cache.get("abc:text")
    assert isinstance(entry.payload, AnalysisResult)
    assert entry.payload.label == Label.AI


def test_redis_corrupt_value_is_a_miss(mock_redis):
    mock_redis.set("classify:bad:text", "not json")
    cache = FingerprintCache("classify", 300, AnalysisResult)
    assert cache.get("bad:text") is None


def test_no_redis_falls_back_to_memory(no_redis):
    cache = FingerprintCache("classify", 300, AnalysisResult)
    cache.set("k:text", _result())
    assert cache.stats()["entries"] == 1
