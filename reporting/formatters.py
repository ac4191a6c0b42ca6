"""
reporting/formatters.py
Text and JSON renderings of CheckResults for the CLI and web UI.
Layering: imports core result types only. Does NOT import cache or dashboard.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from core.probe_engine import CheckResult
from core.probes import VersionResult

EMOJI_SUPPORTED   = "✅"
EMOJI_UNSUPPORTED = "❌"
EMOJI_ERROR       = "🟧"

LEGEND = (
    f"{EMOJI_SUPPORTED} supported, {EMOJI_UNSUPPORTED} not supported, "
    f"{EMOJI_ERROR} error/probe failed"
)


def status_emoji(vr: VersionResult) -> str:
    if vr.supported:
        return EMOJI_SUPPORTED
    if vr.error:
        return EMOJI_ERROR
    return EMOJI_UNSUPPORTED


def status_title(vr: VersionResult) -> str:
    if vr.supported:
        return "supported"
    if vr.error:
        return "error / probe failed"
    return "not supported"


def summary_line(res: CheckResult) -> str:
    """
    One line per host, statuses first:

      HTTP/1.0 ✅ | HTTP/1.1 ✅ | HTTP/2.0 ✅ | HTTP/3.0 ❌\tGrade: B (90)\texample.com:443
    """
    statuses = " | ".join(f"{vr.version} {status_emoji(vr)}" for vr in res.results)
    if res.grade:
        return f"{statuses}\tGrade: {res.grade} ({res.score})\t{res.target}:{res.port}"
    return f"{statuses}\t{res.target}:{res.port}"


def results_to_json(results: Sequence[CheckResult]) -> str:
    """A single result encodes as one object, several as an array."""
    if len(results) == 1:
        payload = results[0].to_dict()
    else:
        payload = [r.to_dict() for r in results]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def plural(n: int) -> str:
    return "" if n == 1 else "s"


def format_age(d: timedelta) -> str:
    if d < timedelta(minutes=1):
        secs = int(d.total_seconds())
        if secs <= 1:
            return "just now"
        return f"{secs}s ago"
    if d < timedelta(hours=1):
        mins = int(d.total_seconds() // 60)
        return f"{mins} minute{plural(mins)} ago"
    hours = int(d.total_seconds() // 3600)
    if d < timedelta(hours=24):
        return f"{hours} hour{plural(hours)} ago"
    days = hours // 24
    return f"{days} day{plural(days)} ago"


def age_since(t: Optional[datetime], now: Optional[datetime] = None) -> str:
    if t is None:
        return ""
    return format_age((now or datetime.now(timezone.utc)) - t)


def format_elapsed(seconds: float) -> str:
    """Elapsed wall time truncated to milliseconds, e.g. '1.234s' or '87ms'."""
    ms = int(seconds * 1000)
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:.3f}s"


__all__ = [
    "LEGEND", "status_emoji", "status_title", "summary_line",
    "results_to_json", "format_age", "age_since", "format_elapsed", "plural",
]
