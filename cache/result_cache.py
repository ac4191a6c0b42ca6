"""
cache/result_cache.py
In-memory, time-boxed store of completed batch scans.

  • entries expire TTL (4h) after the scan; expired entries are never
    returned, and are purged by the sweep that runs on every write
  • a bounded most-recently-used key list (32) feeds "recent scans";
    it never affects lookups
  • process memory only: lost on restart

Layering: dashboard reads/writes through this. Does NOT import dashboard.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from core.probe_engine import CheckResult
from core.probes import VersionResult
from utils.constants import CACHE_TTL_HOURS, MAX_RECENT_KEYS
from utils.logger import get_logger

log = get_logger("httpver.cache")


@dataclass(frozen=True)
class CacheEntry:
    results:    Tuple[CheckResult, ...]
    scanned_at: datetime
    expires_at: datetime
    hidden:     bool = False

    def expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class RecentSnapshot:
    """One host from a recent scan, for the overview lists."""
    target:     str
    url:        str
    port:       str
    results:    Tuple[VersionResult, ...]
    scanned_at: datetime
    score:      Optional[int]
    grade:      Optional[str]


def cache_key(targets: Sequence[str]) -> str:
    """
    Lower-cased, trimmed, comma-joined targets in request order.

    Order is significant: "a.com,b.com" and "b.com,a.com" are different keys.
    """
    return ",".join(t.strip().lower() for t in targets)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResultCache:
    """Thread-safe TTL cache shared by all web request threads."""

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=CACHE_TTL_HOURS),
        max_recent: int = MAX_RECENT_KEYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._ttl = ttl
        self._max_recent = max_recent
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, CacheEntry] = {}
        self._recent_keys: List[str] = []     # most recent last

    # ── Public API ────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[Tuple[List[CheckResult], datetime]]:
        """(results, scanned_at) for a live entry, else None."""
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
        if entry is None or entry.expired(now):
            return None
        return list(entry.results), entry.scanned_at

    def set(
        self,
        key: str,
        results: Sequence[CheckResult],
        include_in_recent: bool = True,
    ) -> None:
        """Store results under key; sweeps expired entries first."""
        now = self._clock()
        with self._lock:
            stale = [k for k, v in self._data.items() if v.expired(now)]
            for k in stale:
                del self._data[k]
            if stale:
                log.debug(f"[cache] purged {len(stale)} expired entr{'y' if len(stale) == 1 else 'ies'}")

            # CheckResult is frozen; a tuple copy keeps callers from mutating our list
            self._data[key] = CacheEntry(
                results=tuple(results),
                scanned_at=now,
                expires_at=now + self._ttl,
                hidden=not include_in_recent,
            )

            if include_in_recent:
                if key in self._recent_keys:
                    self._recent_keys.remove(key)
                self._recent_keys.append(key)
                if len(self._recent_keys) > self._max_recent:
                    self._recent_keys = self._recent_keys[-self._max_recent:]

    def recent_snapshots(self, limit: int) -> List[RecentSnapshot]:
        """Per-host snapshots from the most recent visible scans, newest first."""
        if limit <= 0:
            return []
        now = self._clock()
        snapshots: List[RecentSnapshot] = []
        with self._lock:
            for key in reversed(self._recent_keys):
                entry = self._data.get(key)
                if entry is None or entry.hidden or entry.expired(now):
                    continue
                for cr in entry.results:
                    snapshots.append(RecentSnapshot(
                        target=cr.target,
                        url=cr.url,
                        port=cr.port,
                        results=cr.results,
                        scanned_at=entry.scanned_at,
                        score=cr.score,
                        grade=cr.grade,
                    ))
                    if len(snapshots) >= limit:
                        return snapshots
        return snapshots

    # ── Introspection ─────────────────────────────────────────────────────────

    def __len__(self) -> int:
        """Physically stored entries, expired ones included until the next sweep."""
        with self._lock:
            return len(self._data)

    def recent_keys(self) -> List[str]:
        with self._lock:
            return list(self._recent_keys)


__all__ = ["CacheEntry", "RecentSnapshot", "ResultCache", "cache_key"]
