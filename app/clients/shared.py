"""Shared singleton instances for the response cache and collection log."""
from __future__ import annotations

from app.clients.cache import ResponseCache
from app.clients.logging import set_log_path

_cache: ResponseCache | None = None
_log_configured = False


def get_shared_cache() -> ResponseCache:
    global _cache  # noqa: PLW0603
    if _cache is None:
        from app.core.config import settings
        _cache = ResponseCache(
            cache_dir=settings.cache_dir,
            default_ttl_seconds=settings.cache_default_ttl_seconds,
        )
        _cache.set_ttl("espn", settings.cache_espn_ttl_seconds)
        _cache.set_ttl("odds_api", settings.cache_odds_ttl_seconds)
    return _cache


def configure_collection_log() -> None:
    global _log_configured  # noqa: PLW0603
    if _log_configured:
        return
    from app.core.config import settings
    if settings.collection_log_path:
        set_log_path(settings.collection_log_path)
    _log_configured = True
