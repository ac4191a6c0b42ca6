"""httpver Cache — Public API

In-memory result cache and the cached batch scan path used by the web UI.

Usage:
    from cache import ResultCache, CachedScanner
    scanner = CachedScanner(ResultCache())
    outcome = scanner.scan(["cloudflare.com"])
"""
from cache.result_cache import CacheEntry, RecentSnapshot, ResultCache, cache_key
from cache.scan_service import CachedScanner, ScanOutcome, has_successful_result

__all__ = [
    "CacheEntry",
    "RecentSnapshot",
    "ResultCache",
    "cache_key",
    "CachedScanner",
    "ScanOutcome",
    "has_successful_result",
]
