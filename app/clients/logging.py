"""Structured JSON logging for upstream API traffic.

Writes one JSON line per event to a configurable log file: request start/end,
errors, circuit breaker trips, cache lookups, Odds API quota readings and
per-slate run summaries. Nothing is written until ``set_log_path`` is called.
"""
from __future__ import annotations

import json
import threading
from collections import Counter, defaultdict
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Literal


_LOG_PATH: Path | None = None
_LOCK = threading.Lock()

CacheOutcome = Literal["hit", "miss", "stale"]

# event name -> per-source counter in the health report
_COUNTED_EVENTS = {
    "request_end": "requests",
    "request_error": "errors",
    "cache_hit": "cache_hits",
    "cache_miss": "cache_misses",
    "cache_stale": "stale_fallbacks",
    "circuit_open": "circuit_opens",
}


def set_log_path(path: str | Path | None) -> None:
    global _LOG_PATH  # noqa: PLW0603
    if path is None:
        _LOG_PATH = None
        return
    _LOG_PATH = Path(path)
    _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)


def _emit(event: str, source: str, **fields: Any) -> None:
    if _LOG_PATH is None:
        return
    entry = {"ts": datetime.now(timezone.utc).isoformat(), "event": event, "source": source, **fields}
    line = json.dumps(entry, default=str)
    with _LOCK:
        with open(_LOG_PATH, "a", encoding="utf-8") as f:
            f.write(line + "\n")


def log_request_start(source: str, url: str, attempt: int = 1) -> None:
    _emit("request_start", source, url=url, attempt=attempt)


def log_request_end(source: str, url: str, *, status_code: int, elapsed_ms: float, attempt: int) -> None:
    _emit("request_end", source, url=url, status_code=status_code, elapsed_ms=round(elapsed_ms, 1), attempt=attempt)


def log_request_error(source: str, url: str, *, error: str, attempt: int) -> None:
    _emit("request_error", source, url=url, error=error, attempt=attempt)


def log_circuit_open(source: str, cooldown_seconds: float) -> None:
    _emit("circuit_open", source, cooldown_seconds=cooldown_seconds)


def log_cache(source: str, url: str, outcome: CacheOutcome) -> None:
    """Record a response-cache lookup: a fresh hit, a miss, or a stale fallback after a failed fetch."""
    _emit(f"cache_{outcome}", source, url=url)


def log_quota(source: str, *, remaining: int | None, used: int | None) -> None:
    _emit("quota", source, remaining=remaining, used=used)


def log_run_summary(source: str, *, duration_seconds: float, counts: dict[str, int], errors: list[str] | None = None) -> None:
    _emit("run_summary", source, duration_seconds=round(duration_seconds, 2), counts=counts, errors=errors or [])


def _events_since(path: Path, since: datetime) -> Iterator[dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        for line in f:
            try:
                entry = json.loads(line)
                ts = datetime.fromisoformat(entry["ts"])
            except (ValueError, TypeError, KeyError):
                continue
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            if ts >= since:
                yield entry


def _source_stats(tally: Counter[str], elapsed: list[float]) -> dict[str, Any]:
    stats: dict[str, Any] = {name: tally[name] for name in _COUNTED_EVENTS.values()}
    attempts = tally["requests"] + tally["errors"]
    lookups = tally["cache_hits"] + tally["cache_misses"]
    stats["avg_elapsed_ms"] = round(sum(elapsed) / len(elapsed), 1) if elapsed else 0.0
    stats["error_rate"] = round(tally["errors"] / attempts, 3) if attempts else 0.0
    stats["cache_hit_rate"] = round(tally["cache_hits"] / lookups, 3) if lookups else 0.0
    return stats


def generate_health_report(log_path: str | Path, hours: int = 24) -> dict[str, Any]:
    """Summarize the last ``hours`` of the collection log.

    ``sources`` holds per-upstream counters, latency, error and cache hit
    rates, the latest error message and (Odds API only) the latest quota
    reading. ``slate_runs`` counts run summaries in the window and
    ``last_run`` is the newest one, or None.
    """
    path = Path(log_path)
    if not path.exists():
        return {"error": "Log file not found", "path": str(path)}

    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    tallies: dict[str, Counter[str]] = defaultdict(Counter)
    elapsed: dict[str, list[float]] = defaultdict(list)
    last_error: dict[str, str | None] = {}
    quota: dict[str, int | None] = {}
    runs: list[dict[str, Any]] = []

    for entry in _events_since(path, since):
        event = entry.get("event")
        if event == "run_summary":
            runs.append(entry)
            continue
        source = entry.get("source", "unknown")
        tally = tallies[source]
        if event in _COUNTED_EVENTS:
            tally[_COUNTED_EVENTS[event]] += 1
        if event == "request_end":
            elapsed[source].append(float(entry.get("elapsed_ms") or 0.0))
        elif event == "request_error":
            last_error[source] = entry.get("error")
        elif event == "quota":
            quota[source] = entry.get("remaining")

    sources = {}
    for source, tally in sorted(tallies.items()):
        stats = _source_stats(tally, elapsed[source])
        stats["last_error"] = last_error.get(source)
        stats["quota_remaining"] = quota.get(source)
        sources[source] = stats

    last_run = None
    if runs:
        newest = runs[-1]
        last_run = {key: newest.get(key) for key in ("ts", "duration_seconds", "counts", "errors")}
    return {"hours": hours, "sources": sources, "slate_runs": len(runs), "last_run": last_run}
