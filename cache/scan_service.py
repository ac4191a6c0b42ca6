"""
cache/scan_service.py
Cached batch path: reuse a live cache entry, else scan and store.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from cache.result_cache import ResultCache, cache_key
from core.probe_engine import CheckResult
from core.scheduler import BatchScheduler


@dataclass
class ScanOutcome:
    results:    List[CheckResult]
    used_cache: bool
    scanned_at: Optional[datetime] = None   # set on cache hits


def has_successful_result(results: Sequence[CheckResult]) -> bool:
    """
    True if at least one resolvable host answered on some protocol, i.e. the
    scan reached and meaningfully probed something.
    """
    for cr in results:
        if cr.unresolved:
            continue
        if any(vr.supported for vr in cr.results):
            return True
    return False


class CachedScanner:
    """
    Front door for the web UI: identical requests within the TTL are served
    from the ResultCache without touching the network.

    Completely failed scans (invalid hostname, no DNS, all probes failing)
    are cached too, but never listed as recent scans.
    """

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        scheduler: Optional[BatchScheduler] = None,
    ):
        self.cache = cache if cache is not None else ResultCache()
        self._scheduler = scheduler or BatchScheduler()

    async def scan_async(
        self, targets: Sequence[str], hide_from_recent: bool = False
    ) -> ScanOutcome:
        key = cache_key(targets)
        hit = self.cache.get(key)
        if hit is not None:
            results, scanned_at = hit
            return ScanOutcome(results=results, used_cache=True, scanned_at=scanned_at)

        # Web scans always use default ports (no override)
        results = await self._scheduler.run(targets)
        include_in_recent = not hide_from_recent and has_successful_result(results)
        self.cache.set(key, results, include_in_recent=include_in_recent)
        return ScanOutcome(results=results, used_cache=False)

    def scan(self, targets: Sequence[str], hide_from_recent: bool = False) -> ScanOutcome:
        """Blocking variant for Flask request threads."""
        return asyncio.run(self.scan_async(targets, hide_from_recent))


__all__ = ["CachedScanner", "ScanOutcome", "has_successful_result"]
