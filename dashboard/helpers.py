"""
dashboard/helpers.py
Request parsing, user-facing messages and template helpers for the web UI.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from cache.result_cache import RecentSnapshot
from core.probe_engine import CheckResult
from core.probes import VersionResult
from utils.constants import HttpVersion


# ── Request parsing ───────────────────────────────────────────────────────────

def parse_targets_param(raw: str) -> List[str]:
    """Split a comma list, trim, drop blanks and case-insensitive duplicates."""
    raw = (raw or "").strip()
    if not raw:
        return []
    targets: List[str] = []
    seen = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        lower = part.lower()
        if lower in seen:
            continue
        seen.add(lower)
        targets.append(part)
    return targets


def wants_json(args, headers) -> bool:
    if args.get("format") == "json":
        return True
    return "application/json" in headers.get("Accept", "")


# ── Messages for failed single-target scans ───────────────────────────────────

def input_validation_error(results: Sequence[CheckResult]) -> Optional[str]:
    """Friendly message when a single target never got scanned because it is invalid."""
    if len(results) != 1 or not results[0].is_invalid:
        return None
    cr = results[0]
    detail = cr.results[0].detail or "invalid hostname or URL"
    return f"The hostname \"{cr.target}\" is invalid and cannot be scanned ({detail})."


def unresolved_host_error(results: Sequence[CheckResult]) -> Optional[str]:
    if len(results) != 1 or not results[0].unresolved:
        return None
    return f"The hostname \"{results[0].target}\" cannot be scanned (no DNS records found)."


# ── Overview lists ────────────────────────────────────────────────────────────

def filter_by_grade(src: Sequence[RecentSnapshot], want: str, limit: int) -> List[RecentSnapshot]:
    if limit <= 0:
        return []
    out: List[RecentSnapshot] = []
    for snap in src:
        if snap.grade == want:
            out.append(snap)
            if len(out) >= limit:
                break
    return out


# ── Template helpers ──────────────────────────────────────────────────────────

def grade_class(grade: Optional[str]) -> str:
    if grade == "A":
        return "fantastic"
    if grade in ("B", "C"):
        return "borderline"
    return "fail"


def has_version(results: Sequence[VersionResult], want: str) -> bool:
    return any(vr.version == want and vr.supported for vr in results)


def legacy_not_supported_ok(vr: VersionResult) -> bool:
    """
    HTTP/1.0 or HTTP/1.1 *not* being supported is a good outcome for
    security, including "not supported (good) - TCP connection refused".
    """
    if vr.supported:
        return False
    if vr.version not in (HttpVersion.HTTP_1_0.value, HttpVersion.HTTP_1_1.value):
        return False
    return vr.detail.startswith("not supported")


def http11_warning(all_results: Sequence[VersionResult], vr: VersionResult) -> str:
    """Warning for a supported HTTP/1.1 row: no upgrade path, or 1.0 downgrade possible."""
    if vr.version != HttpVersion.HTTP_1_1.value or not vr.supported:
        return ""
    has_h3 = has_version(all_results, HttpVersion.HTTP_3_0.value)
    has_h2 = has_version(all_results, HttpVersion.HTTP_2_0.value)
    has_h10 = has_version(all_results, HttpVersion.HTTP_1_0.value)

    notes = []
    if not has_h2 and not has_h3:
        notes.append(
            "HTTP/1.1 is the highest supported version; clients cannot upgrade to HTTP/2 or HTTP/3."
        )
    if has_h10:
        notes.append("Clients can be downgraded to HTTP/1.0, which is strongly discouraged.")
    return " ".join(notes)


def version_downgrade_note(all_results: Sequence[VersionResult], vr: VersionResult) -> str:
    """Whether clients on HTTP/3 or HTTP/2 can be pushed down to an older protocol."""
    if not vr.supported:
        return ""
    has_h2 = has_version(all_results, HttpVersion.HTTP_2_0.value)
    has_h11 = has_version(all_results, HttpVersion.HTTP_1_1.value)

    if vr.version == HttpVersion.HTTP_3_0.value:
        if has_h2 or has_h11:
            return "Downgrade to HTTP/2 or HTTP/1.1 is possible (not ideal; prefer keeping clients on HTTP/3)."
        return "Downgrade below HTTP/3 is not possible (good)."
    if vr.version == HttpVersion.HTTP_2_0.value:
        if has_h11:
            return "Downgrade to HTTP/1.1 is possible (not ideal; limit HTTP/1.x exposure)."
        return "Downgrade to HTTP/1.1 is not possible (good)."
    return ""


def cap_first(s: str) -> str:
    if not s:
        return ""
    return s[0].upper() + s[1:]


TEMPLATE_HELPERS = {
    "grade_class":            grade_class,
    "has_version":            has_version,
    "legacy_not_supported_ok": legacy_not_supported_ok,
    "http11_warning":         http11_warning,
    "version_downgrade_note": version_downgrade_note,
    "cap_first":              cap_first,
}


__all__ = [
    "parse_targets_param", "wants_json",
    "input_validation_error", "unresolved_host_error",
    "filter_by_grade", "TEMPLATE_HELPERS",
    "grade_class", "has_version", "legacy_not_supported_ok",
    "http11_warning", "version_downgrade_note", "cap_first",
]
