"""
core/probe_engine.py
Per-target protocol check:
  • normalizes the target (no network I/O for invalid input)
  • runs the four version probes concurrently and joins all of them
  • derives h2/h3 support, TLS version + ALPN (from the HTTP/2 probe),
    and the DNS-unresolved flag
  • grades the result
No imports of cache/dashboard/reporting (clean layering).
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core.grading import compute_grade
from core.probes import (
    ProbeSession, VersionProbe, VersionResult, default_probes, describe,
)
from core.target_normalizer import TargetNormalizer, TargetValidationError
from utils.constants import HttpVersion, PROBE_ORDER
from utils.logger import get_logger

log = get_logger("httpver.engine")


# ─── Data Classes ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CheckResult:
    target:      str
    url:         str = ""
    port:        str = ""
    results:     Tuple[VersionResult, ...] = field(default_factory=tuple)
    score:       Optional[int] = None     # None when the target was rejected
    grade:       Optional[str] = None
    alpn:        str = ""
    tls_version: str = ""
    # Set when the hostname does not resolve (NXDOMAIN / "no such host") so
    # callers can say so instead of showing four generic probe failures
    unresolved:  bool = False

    @property
    def is_invalid(self) -> bool:
        return (
            len(self.results) == 1
            and self.results[0].version == HttpVersion.ERROR.value
            and self.results[0].error
        )

    def to_dict(self) -> dict:
        data = {
            "target":  self.target,
            "url":     self.url,
            "port":    self.port,
            "results": [r.to_dict() for r in self.results],
            "score":   self.score,
            "grade":   self.grade,
        }
        if self.alpn:
            data["alpn"] = self.alpn
        if self.tls_version:
            data["tls_version"] = self.tls_version
        if self.unresolved:
            data["unresolved"] = True
        return data


# ─── Engine ───────────────────────────────────────────────────────────────────

class ProtocolProbeEngine:
    """
    Runs the four version probes for one target.

    Layering contract:
      Imports only: core/*, utils/*
      Does NOT import: cache, dashboard, reporting
    """

    def __init__(
        self,
        probes: Optional[Sequence[VersionProbe]] = None,
        normalizer: Optional[TargetNormalizer] = None,
    ):
        self._probes: List[VersionProbe] = list(probes) if probes is not None else default_probes()
        if [p.version for p in self._probes] != list(PROBE_ORDER):
            raise ValueError("probes must cover HTTP/1.0, 1.1, 2.0, 3.0 in that order")
        self._normalizer = normalizer or TargetNormalizer()

    async def check(self, target: str, override_port: Optional[int] = None) -> CheckResult:
        """Check one target. Never raises; invalid input yields the error sentinel."""
        try:
            norm = self._normalizer.normalize(target, override_port)
        except TargetValidationError as exc:
            log.debug(f"[-] {target!r} rejected: {exc}")
            return CheckResult(
                target=target,
                results=(VersionResult(
                    version=HttpVersion.ERROR.value,
                    supported=False,
                    error=True,
                    detail=f"invalid URL: {exc}",
                ),),
            )

        t0 = time.monotonic()
        session = ProbeSession()
        raw = await asyncio.gather(
            *(probe.run(norm, session, override_port) for probe in self._probes),
            return_exceptions=True,
        )
        results = tuple(
            self._as_result(probe, outcome) for probe, outcome in zip(self._probes, raw)
        )

        by_version = {r.version: r for r in results}
        has_h2 = by_version[HttpVersion.HTTP_2_0.value].supported
        has_h3 = by_version[HttpVersion.HTTP_3_0.value].supported
        score, grade = compute_grade(has_h3, has_h2, session.tls_version)

        log.debug(
            f"[✓] {target} done: grade {grade} in {time.monotonic() - t0:.2f}s"
        )
        return CheckResult(
            target=target,
            url=norm.url,
            port=str(norm.port),
            results=results,
            score=score,
            grade=grade,
            alpn=session.alpn,
            tls_version=session.tls_version,
            unresolved=session.unresolved,
        )

    @staticmethod
    def _as_result(probe: VersionProbe, outcome) -> VersionResult:
        if isinstance(outcome, VersionResult):
            return outcome
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        # A probe bug must not take down its siblings or the batch
        log.warning(f"{probe.version.value} probe crashed: {outcome!r}")
        return VersionResult(
            version=probe.version.value,
            error=True,
            detail="probe failed",
            evidence=describe(outcome),
        )


__all__ = ["CheckResult", "ProtocolProbeEngine"]
