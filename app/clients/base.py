"""HTTP client with retry, circuit breaker, rate limiter and response caching."""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from curl_cffi import requests as curl_requests

from app.clients.cache import ResponseCache
from app.clients.logging import (
    log_cache,
    log_circuit_open,
    log_request_end,
    log_request_error,
    log_request_start,
)

logger = logging.getLogger(__name__)


def _jittered_backoff(base: float, attempt: int, jitter_factor: float = 0.5) -> float:
    """Exponential backoff with random jitter to de-correlate retries."""
    delay = base * (2 ** attempt)
    jitter = delay * jitter_factor * random.random()
    return delay + jitter


# ---------------------------------------------------------------------------
# ApiResponse
# ---------------------------------------------------------------------------
@dataclass
class ApiResponse:
    status_code: int
    headers: dict[str, str]
    body: str
    json_data: Any | None
    source: str
    elapsed_ms: float = 0.0
    attempt_count: int = 0
    cached: bool = False
    stale: bool = False

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def to_cache(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "headers": self.headers,
            "body": self.body,
            "json_data": self.json_data,
        }

    @classmethod
    def from_cache(cls, data: dict[str, Any], *, source: str, stale: bool = False) -> ApiResponse:
        return cls(
            status_code=int(data.get("status_code", 200)),
            headers=dict(data.get("headers") or {}),
            body=data.get("body", ""),
            json_data=data.get("json_data"),
            source=source,
            cached=True,
            stale=stale,
        )


# ---------------------------------------------------------------------------
# Circuit Breaker
# ---------------------------------------------------------------------------
@dataclass
class CircuitBreaker:
    """Per-source circuit breaker to avoid hammering a down API."""
    failure_threshold: int = 5
    cooldown_seconds: float = 60.0

    _failures: int = field(default=0, init=False)
    _opened_at: float | None = field(default=None, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def is_open(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return False
            if (time.monotonic() - self._opened_at) >= self.cooldown_seconds:
                # half-open: allow one attempt
                self._opened_at = None
                self._failures = 0
                return False
            return True

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None

    def record_failure(self) -> bool:
        """Count a failure; returns True when this failure tripped the breaker."""
        with self._lock:
            self._failures += 1
            if self._opened_at is None and self._failures >= self.failure_threshold:
                self._opened_at = time.monotonic()
                return True
            return False

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None


# ---------------------------------------------------------------------------
# Rate Limiter
# ---------------------------------------------------------------------------
@dataclass
class RateLimiter:
    """Thread-safe min-interval rate limiter."""
    min_interval_seconds: float = 0.0

    _next_allowed: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def wait(self) -> None:
        if self.min_interval_seconds <= 0:
            return
        while True:
            with self._lock:
                now = time.monotonic()
                if now >= self._next_allowed:
                    self._next_allowed = now + self.min_interval_seconds
                    return
                wait_for = self._next_allowed - now
            if wait_for > 0:
                time.sleep(wait_for)


# ---------------------------------------------------------------------------
# ApiClient
# ---------------------------------------------------------------------------
class ApiClient:
    """JSON API client with retry, circuit breaker, rate limiter, session reuse and caching."""

    def __init__(
        self,
        *,
        source_name: str,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        timeout: float = 15.0,
        min_request_interval: float = 0.0,
        failure_threshold: int = 5,
        cooldown_seconds: float = 60.0,
        impersonate: str | None = None,
        default_headers: dict[str, str] | None = None,
        should_retry: Callable[[int], bool] | None = None,
        cache: ResponseCache | None = None,
        cache_ttl_seconds: float | None = None,
    ) -> None:
        self.source_name = source_name
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.timeout = timeout
        self.impersonate = impersonate or "chrome"
        self.default_headers = dict(default_headers or {})
        self.should_retry = should_retry
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            cooldown_seconds=cooldown_seconds,
        )
        self.rate_limiter = RateLimiter(min_interval_seconds=min_request_interval)

        self._session: curl_requests.Session | None = None
        self._session_lock = threading.Lock()

    def _get_session(self) -> curl_requests.Session:
        with self._session_lock:
            if self._session is None:
                self._session = curl_requests.Session(impersonate=self.impersonate)
            return self._session

    def _reset_session(self) -> None:
        with self._session_lock:
            if self._session is not None:
                try:
                    self._session.close()
                except Exception:  # noqa: BLE001
                    logger.debug("Error closing %s session", self.source_name, exc_info=True)
                self._session = None

    def _cache_key(self, url: str, params: dict[str, Any] | None) -> str:
        return ResponseCache.make_key(self.source_name, url, params)

    def get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        use_cache: bool = True,
        cache_params: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """
        GET with caching, retry, circuit breaker and rate limiting.

        ``cache_params`` replaces ``params`` in the cache key so secrets such
        as API keys stay out of it. When every attempt fails and a stale
        cached response exists, the stale response is returned instead of
        raising.
        """
        key = self._cache_key(url, params if cache_params is None else cache_params)
        if use_cache and self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                log_cache(self.source_name, url, "hit")
                return ApiResponse.from_cache(cached, source=self.source_name)
            log_cache(self.source_name, url, "miss")

        try:
            response = self._fetch(url, params=params, headers=headers, timeout=timeout)
        except Exception:
            if use_cache and self.cache is not None:
                stale = self.cache.get_stale(key)
                if stale is not None:
                    log_cache(self.source_name, url, "stale")
                    logger.warning("%s request failed, serving stale cache for %s", self.source_name, url)
                    return ApiResponse.from_cache(stale, source=self.source_name, stale=True)
            raise

        if use_cache and self.cache is not None:
            self.cache.set(key, response.to_cache(), self.cache_ttl_seconds)
        return response

    def _fetch(
        self,
        url: str,
        *,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: float | None,
    ) -> ApiResponse:
        if self.circuit_breaker.is_open:
            raise CircuitOpenError(
                f"Circuit breaker open for {self.source_name}; "
                f"cooldown {self.circuit_breaker.cooldown_seconds}s"
            )

        merged_headers = {**self.default_headers, **(headers or {})}
        effective_timeout = timeout or self.timeout
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            self.rate_limiter.wait()
            log_request_start(self.source_name, url, attempt + 1)

            start_time = time.monotonic()
            try:
                session = self._get_session()
                response = session.get(
                    url,
                    params=params or {},
                    headers=merged_headers,
                    timeout=effective_timeout,
                )
                elapsed_ms = (time.monotonic() - start_time) * 1000

                if self.should_retry and self.should_retry(response.status_code):
                    raise RetryableStatusError(
                        f"Retryable status {response.status_code} from {self.source_name}"
                    )

                response.raise_for_status()
                self.circuit_breaker.record_success()

                json_data = None
                content_type = response.headers.get("Content-Type", "")
                if "json" in content_type:
                    try:
                        json_data = response.json()
                    except ValueError:
                        logger.warning("%s returned invalid JSON from %s", self.source_name, url)

                log_request_end(
                    self.source_name,
                    url,
                    status_code=response.status_code,
                    elapsed_ms=elapsed_ms,
                    attempt=attempt + 1,
                )
                return ApiResponse(
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    body=response.text,
                    json_data=json_data,
                    source=self.source_name,
                    elapsed_ms=elapsed_ms,
                    attempt_count=attempt + 1,
                )

            except Exception as exc:  # noqa: BLE001
                last_error = exc
                log_request_error(self.source_name, url, error=str(exc), attempt=attempt + 1)
                logger.warning("%s attempt %d failed: %s", self.source_name, attempt + 1, exc)
                if self.circuit_breaker.record_failure():
                    log_circuit_open(self.source_name, self.circuit_breaker.cooldown_seconds)

                if attempt >= self.max_retries:
                    break

                time.sleep(_jittered_backoff(self.backoff_seconds, attempt))

        # Start from a fresh session on the next call.
        self._reset_session()

        if last_error:
            raise last_error
        raise RuntimeError(f"{self.source_name} request failed without exception")


# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------
class CircuitOpenError(RuntimeError):
    """Raised when the circuit breaker is open for a source."""


class RetryableStatusError(RuntimeError):
    """Raised on a retryable HTTP status code to trigger retry logic."""
