"""Tests for app.clients.logging: structured collection logging and health report."""
from __future__ import annotations

import json

import pytest

from app.clients.logging import (
    generate_health_report,
    log_cache,
    log_circuit_open,
    log_quota,
    log_request_end,
    log_request_error,
    log_request_start,
    log_run_summary,
    set_log_path,
)


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs" / "collection.jsonl"
    set_log_path(path)
    yield path
    set_log_path(None)


def _entries(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().strip().split("\n")]


class TestLogEvents:
    def test_disabled_until_path_set(self, tmp_path):
        set_log_path(None)
        log_request_start("espn", "https://example.com")
        assert not list(tmp_path.rglob("*.jsonl"))

    def test_request_start(self, log_file):
        log_request_start("espn", "https://site.api.espn.com/scoreboard")
        (entry,) = _entries(log_file)
        assert entry["event"] == "request_start"
        assert entry["source"] == "espn"
        assert "ts" in entry

    def test_request_end(self, log_file):
        log_request_end("odds_api", "https://api.example.com", status_code=200, elapsed_ms=123.44, attempt=1)
        (entry,) = _entries(log_file)
        assert entry["status_code"] == 200
        assert entry["elapsed_ms"] == 123.4

    def test_request_error(self, log_file):
        log_request_error("espn", "https://api.example.com", error="Timeout", attempt=2)
        (entry,) = _entries(log_file)
        assert entry["event"] == "request_error"
        assert entry["attempt"] == 2

    def test_cache_events(self, log_file):
        log_cache("espn", "url", "hit")
        log_cache("odds_api", "url", "miss")
        log_cache("espn", "url", "stale")
        assert [e["event"] for e in _entries(log_file)] == ["cache_hit", "cache_miss", "cache_stale"]

    def test_quota(self, log_file):
        log_quota("odds_api", remaining=480, used=20)
        (entry,) = _entries(log_file)
        assert entry == {**entry, "event": "quota", "remaining": 480, "used": 20}

    def test_run_summary(self, log_file):
        log_run_summary("slate", duration_seconds=3.456, counts={"games": 9}, errors=["odds: boom"])
        (entry,) = _entries(log_file)
        assert entry["duration_seconds"] == 3.46
        assert entry["counts"]["games"] == 9
        assert entry["errors"] == ["odds: boom"]


class TestHealthReport:
    def test_missing_log(self, tmp_path):
        report = generate_health_report(tmp_path / "nonexistent.jsonl")
        assert "error" in report

    def test_basic_report(self, log_file):
        log_request_end("espn", "url", status_code=200, elapsed_ms=100, attempt=1)
        log_request_end("espn", "url", status_code=200, elapsed_ms=200, attempt=1)
        log_request_error("espn", "url", error="timeout", attempt=1)
        log_cache("espn", "url", "hit")
        log_cache("espn", "url", "miss")
        log_cache("espn", "url2", "miss")

        stats = generate_health_report(log_file, hours=1)["sources"]["espn"]
        assert stats["requests"] == 2
        assert stats["errors"] == 1
        assert stats["avg_elapsed_ms"] == 150.0
        assert stats["cache_hit_rate"] == pytest.approx(1 / 3, abs=0.01)
        assert stats["error_rate"] == pytest.approx(1 / 3, abs=0.01)

    def test_quota_and_circuit(self, log_file):
        log_quota("odds_api", remaining=500, used=0)
        log_quota("odds_api", remaining=499, used=1)
        log_circuit_open("espn", 60.0)

        report = generate_health_report(log_file, hours=1)
        assert report["sources"]["odds_api"]["quota_remaining"] == 499
        assert report["sources"]["espn"]["circuit_opens"] == 1

    def test_filters_old_events(self, log_file):
        old_entry = json.dumps({"event": "request_end", "source": "old", "ts": "2020-01-01T00:00:00+00:00", "status_code": 200, "elapsed_ms": 10, "attempt": 1})
        log_file.write_text(old_entry + "\n")
        log_request_end("new", "url", status_code=200, elapsed_ms=10, attempt=1)

        report = generate_health_report(log_file, hours=24)
        assert "old" not in report["sources"]
        assert "new" in report["sources"]

    def test_stale_fallbacks_and_last_error(self, log_file):
        log_request_error("odds_api", "url", error="timeout", attempt=1)
        log_request_error("odds_api", "url", error="HTTP 503", attempt=2)
        log_cache("odds_api", "url", "stale")

        stats = generate_health_report(log_file, hours=1)["sources"]["odds_api"]
        assert stats["stale_fallbacks"] == 1
        assert stats["cache_hit_rate"] == 0.0
        assert stats["last_error"] == "HTTP 503"
        assert stats["error_rate"] == 1.0
        assert stats["quota_remaining"] is None

    def test_run_summaries(self, log_file):
        log_run_summary("slate", duration_seconds=1.0, counts={"games": 4})
        log_run_summary("slate", duration_seconds=2.5, counts={"games": 9}, errors=["odds: boom"])

        report = generate_health_report(log_file, hours=1)
        assert report["slate_runs"] == 2
        assert report["last_run"]["counts"] == {"games": 9}
        assert report["last_run"]["errors"] == ["odds: boom"]
        assert "slate" not in report["sources"]

    def test_no_runs(self, log_file):
        log_request_start("espn", "url")
        report = generate_health_report(log_file, hours=1)
        assert report["slate_runs"] == 0
        assert report["last_run"] is None
        assert report["sources"]["espn"]["requests"] == 0

    def test_skips_unreadable_lines(self, log_file):
        log_file.write_text('not json\n[1, 2]\n{"event": "request_end", "source": "espn"}\n\n')
        log_request_end("espn", "url", status_code=200, elapsed_ms=40, attempt=1)

        stats = generate_health_report(log_file, hours=1)["sources"]["espn"]
        assert stats["requests"] == 1
        assert stats["avg_elapsed_ms"] == 40.0
