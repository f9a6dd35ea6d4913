"""File-based response cache with per-source TTLs.

Keys look like ``"<source>:<anything>"``; the source prefix picks the TTL and
the subdirectory the entry lands in. Keys without a prefix go to ``default``.
"""
from __future__ import annotations

import gzip
import hashlib
import json
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_SOURCE = "default"


@dataclass
class CacheEntry:
    key: str
    value: Any
    cached_at: float
    expires_at: float

    @property
    def expired(self) -> bool:
        return time.time() > self.expires_at


def source_of(key: str) -> str:
    source, sep, _ = key.partition(":")
    return source if sep and source else DEFAULT_SOURCE


class ResponseCache:
    """Gzipped JSON file cache. ``get``/``set`` are the whole contract callers rely on."""

    def __init__(self, cache_dir: str = "data/cache", default_ttl_seconds: float = 300.0) -> None:
        self.cache_dir = Path(cache_dir)
        self.default_ttl_seconds = default_ttl_seconds
        self._ttls: dict[str, float] = {}
        self._lock = threading.Lock()

    def set_ttl(self, source: str, ttl_seconds: float) -> None:
        self._ttls[source] = ttl_seconds

    def ttl_for(self, source: str) -> float:
        return self._ttls.get(source, self.default_ttl_seconds)

    @staticmethod
    def make_key(source: str, url: str, params: dict[str, Any] | None = None) -> str:
        parts = url
        if params:
            parts += "?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()))
        return f"{source}:{parts}"

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode()).hexdigest()
        return self.cache_dir / source_of(key) / f"{digest}.json.gz"

    def _read(self, key: str) -> CacheEntry | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with gzip.open(path, "rt", encoding="utf-8") as f:
                data = json.loads(f.read())
        except Exception:  # noqa: BLE001
            # truncated or corrupt entry; treat as a miss
            return None
        if not isinstance(data, dict):
            return None
        return CacheEntry(
            key=data.get("key", key),
            value=data.get("value"),
            cached_at=float(data.get("cached_at", 0.0)),
            expires_at=float(data.get("expires_at", 0.0)),
        )

    def get(self, key: str) -> Any | None:
        entry = self._read(key)
        if entry is None or entry.expired:
            return None
        return entry.value

    def get_stale(self, key: str) -> Any | None:
        """Return the value even if expired, for serving stale data when a refetch fails."""
        entry = self._read(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_for(source_of(key)) if ttl_seconds is None else ttl_seconds
        now = time.time()
        payload = {
            "key": key,
            "value": value,
            "cached_at": now,
            "expires_at": now + ttl,
        }
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        with self._lock:
            with gzip.open(tmp, "wt", encoding="utf-8") as f:
                f.write(json.dumps(payload, default=str))
            # readers never see a half-written file
            os.replace(tmp, path)

    def clear(self, source: str | None = None) -> int:
        """Remove cache entries. If source given, only that source. Returns count removed."""
        root = self.cache_dir / source if source else self.cache_dir
        if not root.exists():
            return 0
        count = 0
        with self._lock:
            for f in root.rglob("*.json.gz"):
                f.unlink()
                count += 1
        return count
