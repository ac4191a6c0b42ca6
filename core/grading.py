"""
core/grading.py
Minimal protocol grade.

Uses only whether HTTP/3 and HTTP/2 were negotiated and the TLS version seen
on the HTTP/2 connection:

  A  95  HTTP/3 supported
  B  90  HTTP/2 with TLS 1.3
  C  80  HTTP/2 with TLS 1.2, or a TLS version we could not classify
  F  40  everything else (HTTP/1.x only, plain HTTP, probe failures)
"""

from __future__ import annotations

from typing import Tuple


def compute_grade(has_h3: bool, has_h2: bool, tls_version: str) -> Tuple[int, str]:
    """Return (score, letter)."""
    if has_h3:
        return 95, "A"

    if has_h2:
        if tls_version == "TLS 1.3":
            return 90, "B"
        # TLS 1.2, or HTTP/2 with an unknown TLS version: treated alike
        return 80, "C"

    return 40, "F"


__all__ = ["compute_grade"]
