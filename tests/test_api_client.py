"""Tests for app.clients.base: ApiClient, CircuitBreaker, RateLimiter."""
from __future__ import annotations

import gzip
import json
import time

import pytest

from app.clients.base import (
    ApiClient,
    ApiResponse,
    CircuitBreaker,
    CircuitOpenError,
    RateLimiter,
    RetryableStatusError,
    _jittered_backoff,
)
from app.clients.cache import ResponseCache


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.text = json.dumps(payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


def _client(session, **kwargs) -> ApiClient:
    kwargs.setdefault("max_retries", 2)
    kwargs.setdefault("backoff_seconds", 0.0)
    client = ApiClient(source_name="test", **kwargs)
    client._session = session
    return client


# ---------------------------------------------------------------------------
# CircuitBreaker
# ---------------------------------------------------------------------------
class TestCircuitBreaker:
    def test_starts_closed(self):
        assert not CircuitBreaker(failure_threshold=3).is_open

    def test_opens_after_threshold(self):
        cb = CircuitBreaker(failure_threshold=3, cooldown_seconds=60.0)
        assert cb.record_failure() is False
        assert cb.record_failure() is False
        assert cb.record_failure() is True
        assert cb.is_open

    def test_success_resets_failures(self):
        cb = CircuitBreaker(failure_threshold=3)
        cb.record_failure()
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        cb.record_failure()
        assert not cb.is_open

    def test_half_open_after_cooldown(self):
        cb = CircuitBreaker(failure_threshold=2, cooldown_seconds=0.05)
        cb.record_failure()
        cb.record_failure()
        assert cb.is_open
        time.sleep(0.06)
        assert not cb.is_open

    def test_reset(self):
        cb = CircuitBreaker(failure_threshold=1)
        cb.record_failure()
        cb.reset()
        assert not cb.is_open


class TestRateLimiter:
    def test_no_delay_when_zero_interval(self):
        rl = RateLimiter(min_interval_seconds=0.0)
        start = time.monotonic()
        rl.wait()
        rl.wait()
        assert time.monotonic() - start < 0.05

    def test_respects_min_interval(self):
        rl = RateLimiter(min_interval_seconds=0.1)
        start = time.monotonic()
        rl.wait()
        rl.wait()
        assert time.monotonic() - start >= 0.09


class TestJitteredBackoff:
    def test_increases_with_attempt(self):
        assert _jittered_backoff(1.0, 0, jitter_factor=0.0) == pytest.approx(1.0)
        assert _jittered_backoff(1.0, 2, jitter_factor=0.0) == pytest.approx(4.0)

    def test_stays_within_bounds(self):
        for _ in range(100):
            assert 4.0 <= _jittered_backoff(1.0, 2, jitter_factor=0.5) <= 6.0


# ---------------------------------------------------------------------------
# ApiClient (no real HTTP)
# ---------------------------------------------------------------------------
class TestApiClient:
    def test_parses_json_and_headers(self):
        session = FakeSession([FakeResponse(200, {"ok": True}, {"x-requests-remaining": "42"})])
        result = _client(session).get("https://api.test/x", params={"a": 1})
        assert result.json_data == {"ok": True}
        assert result.header("X-Requests-Remaining") == "42"
        assert result.attempt_count == 1
        assert session.calls[0]["params"] == {"a": 1}

    def test_retries_retryable_status(self):
        session = FakeSession([FakeResponse(503, {}), FakeResponse(200, {"ok": 1})])
        client = _client(session, should_retry=lambda s: s >= 500)
        result = client.get("https://api.test/x")
        assert result.json_data == {"ok": 1}
        assert result.attempt_count == 2

    def test_raises_after_exhausting_retries(self):
        session = FakeSession([FakeResponse(503, {})] * 3)
        client = _client(session, should_retry=lambda s: s >= 500)
        with pytest.raises(RetryableStatusError):
            client.get("https://api.test/x")
        assert len(session.calls) == 3
        assert session.closed

    def test_circuit_open_short_circuits(self):
        session = FakeSession([])
        client = _client(session, max_retries=0, failure_threshold=1)
        client.circuit_breaker.record_failure()
        with pytest.raises(CircuitOpenError):
            client.get("https://api.test/x")
        assert session.calls == []

    def test_cache_hit_skips_network(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        session = FakeSession([FakeResponse(200, {"n": 1})])
        client = _client(session, cache=cache)
        first = client.get("https://api.test/x", params={"d": "1"})
        second = client.get("https://api.test/x", params={"d": "1"})
        assert first.cached is False
        assert second.cached is True
        assert second.json_data == {"n": 1}
        assert len(session.calls) == 1

    def test_use_cache_false_refetches(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        session = FakeSession([FakeResponse(200, {"n": 1}), FakeResponse(200, {"n": 2})])
        client = _client(session, cache=cache)
        client.get("https://api.test/x")
        assert client.get("https://api.test/x", use_cache=False).json_data == {"n": 2}

    def test_serves_stale_on_failure(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        session = FakeSession([FakeResponse(200, {"n": 1}), RuntimeError("down")])
        client = _client(session, cache=cache, max_retries=0, cache_ttl_seconds=-1)
        client.get("https://api.test/x")
        result = client.get("https://api.test/x")
        assert result.stale is True
        assert result.json_data == {"n": 1}

    def test_truncated_cache_entry_refetches(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        session = FakeSession([FakeResponse(200, {"n": 1}), FakeResponse(200, {"n": 2})])
        client = _client(session, cache=cache)
        client.get("https://api.test/x")
        (path,) = tmp_path.rglob("*.json.gz")
        path.write_bytes(path.read_bytes()[: path.stat().st_size // 2])

        result = client.get("https://api.test/x")
        assert result.cached is False
        assert result.json_data == {"n": 2}
        assert len(session.calls) == 2

    def test_cache_params_keep_secrets_out_of_key(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        session = FakeSession([FakeResponse(200, [])])
        client = _client(session, cache=cache)
        client.get("https://api.test/odds", params={"apiKey": "secret", "regions": "us"}, cache_params={"regions": "us"})
        assert cache.get(ResponseCache.make_key("test", "https://api.test/odds", {"regions": "us"})) is not None
        for path in tmp_path.rglob("*.json.gz"):
            assert "secret" not in gzip.open(path, "rt").read()


def test_api_response_cache_round_trip():
    response = ApiResponse(status_code=200, headers={"a": "b"}, body="[]", json_data=[], source="espn")
    restored = ApiResponse.from_cache(response.to_cache(), source="espn")
    assert restored.cached is True
    assert restored.headers == {"a": "b"}
    assert restored.json_data == []
