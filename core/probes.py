"""
core/probes.py
The four HTTP version probes and their outcome classification.

  HTTP/1.0  raw TCP to http://host:80 (or the override port), status line only
  HTTP/1.1  httpx, ALPN pinned to http/1.1 so the transport never speaks h2
  HTTP/2.0  httpx with h2 offered; also the only source of TLS/ALPN evidence
  HTTP/3.0  aioquic over UDP; a failure means "not supported", never "error"

Every probe:
  • is bounded by its own total timeout (core timeouts never propagate)
  • never raises for network failures, returns a VersionResult instead
  • flags the shared ProbeSession as unresolved on DNS "no such host"

No imports of cache/dashboard/reporting (clean layering).
"""

from __future__ import annotations

import asyncio
import errno
import socket
import ssl
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple
from urllib.parse import urlsplit

import httpx

from core.h3_client import h3_get
from core.target_normalizer import NormalizedTarget, join_host_port
from utils.constants import (
    DEFAULT_HTTP_PORT, DEFAULT_HTTPS_PORT, EVIDENCE_MAX_LEN,
    PROBE_TIMEOUTS, TLS_VERSION_NAMES, USER_AGENT, HttpVersion,
)
from utils.validators import sanitize_evidence


# ─── Data Classes ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class VersionResult:
    """
    Outcome for a single HTTP version.

    `detail` stays human-friendly; `evidence` carries the low-level error or
    protocol text behind the finding (tooltips, advanced users).
    """
    version:   str
    supported: bool = False
    detail:    str = ""
    evidence:  str = ""
    error:     bool = False

    def to_dict(self) -> dict:
        data = {"version": self.version, "supported": self.supported}
        if self.detail:
            data["detail"] = self.detail
        if self.evidence:
            data["evidence"] = self.evidence
        if self.error:
            data["error"] = True
        return data


@dataclass
class ProbeSession:
    """Aggregation shared by the four probes of one target check."""
    unresolved:  bool = False
    tls_version: str = ""
    alpn:        str = ""

    def note_failure(self, exc: BaseException) -> None:
        if is_dns_not_found(exc):
            self.unresolved = True


# ─── Error classification ─────────────────────────────────────────────────────

PROBE_ERRORS = (
    httpx.HTTPError,
    httpx.InvalidURL,
    OSError,                 # includes ssl.SSLError, socket.gaierror, ConnectionError
    asyncio.TimeoutError,
    EOFError,
)

_DNS_NOT_FOUND_ERRNOS = {
    socket.EAI_NONAME,
    getattr(socket, "EAI_NODATA", socket.EAI_NONAME),
}

_DNS_NOT_FOUND_TEXT = (
    "name or service not known",
    "nodename nor servname provided",
    "no address associated with hostname",
    "no such host",
)

HTTP10_REFUSED_DETAIL = "not supported (good) - TCP connection refused"
H3_NOT_SUPPORTED_DETAIL = "not supported – enable HTTP/3 to offer a more secure option."


def exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield exc and everything it was raised from (__cause__ / __context__)."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _chain_text(exc: BaseException) -> str:
    return " | ".join(describe(e) for e in exception_chain(exc)).lower()


def is_dns_not_found(exc: BaseException) -> bool:
    """True when the resolver reported that the host has no records."""
    for err in exception_chain(exc):
        if isinstance(err, socket.gaierror) and err.errno in _DNS_NOT_FOUND_ERRNOS:
            return True
    text = _chain_text(exc)
    return any(marker in text for marker in _DNS_NOT_FOUND_TEXT)


def is_connection_refused(exc: BaseException) -> bool:
    """True for a plain TCP RST on connect, however the stack wrapped it."""
    for err in exception_chain(exc):
        if isinstance(err, ConnectionRefusedError):
            return True
        if isinstance(err, OSError) and err.errno == errno.ECONNREFUSED:
            return True
    # asyncio folds multi-address failures into one OSError("Multiple exceptions: ...")
    text = _chain_text(exc)
    return "connection refused" in text or f"[errno {errno.ECONNREFUSED}]" in text


def parse_http_version(proto: str) -> Optional[Tuple[int, int]]:
    """'HTTP/1.1' → (1, 1); 'HTTP/2' → (2, 0); anything else → None."""
    if not proto or not proto.upper().startswith("HTTP/"):
        return None
    major, _, minor = proto[5:].partition(".")
    try:
        return int(major), int(minor or 0)
    except ValueError:
        return None


def tls_version_name(raw: Optional[str]) -> str:
    """ssl.SSLObject.version() → 'TLS 1.3' etc.; unknown → ''."""
    return TLS_VERSION_NAMES.get(raw or "", "")


def insecure_ssl_context() -> ssl.SSLContext:
    """
    Fresh client context without verification, one per client.

    No ALPN here: httpcore sets it on every connect, ["http/1.1", "h2"] with
    http2=True and ["http/1.1"] otherwise.
    """
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


# ─── Base probe ───────────────────────────────────────────────────────────────

class VersionProbe:
    """One protocol-version check against one normalized target."""

    version: HttpVersion
    recoverable = PROBE_ERRORS

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else PROBE_TIMEOUTS[self.version]

    async def run(
        self,
        target: NormalizedTarget,
        session: ProbeSession,
        override_port: Optional[int] = None,
    ) -> VersionResult:
        try:
            return await asyncio.wait_for(
                self._probe(target, session, override_port),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return self._failure(TimeoutError(f"timed out after {self.timeout:g}s"))
        except self.recoverable as exc:
            session.note_failure(exc)
            return self._failure(exc)

    async def _probe(
        self,
        target: NormalizedTarget,
        session: ProbeSession,
        override_port: Optional[int],
    ) -> VersionResult:
        raise NotImplementedError

    def _failure(self, exc: BaseException) -> VersionResult:
        evidence = sanitize_evidence(describe(exc), EVIDENCE_MAX_LEN)
        return VersionResult(
            version=self.version.value,
            error=True,
            detail=f"not supported (or probe failed): {evidence}",
            evidence=evidence,
        )

    def _result(self, supported: bool, detail: str, evidence: str = "") -> VersionResult:
        return VersionResult(
            version=self.version.value,
            supported=supported,
            detail=detail,
            evidence=sanitize_evidence(evidence, EVIDENCE_MAX_LEN),
        )


# ─── HTTP/1.0 ─────────────────────────────────────────────────────────────────

class Http10Probe(VersionProbe):
    """
    Legacy HTTP/1.0 is a plaintext concern: always probe http://host:80
    (or the override port), whatever the primary scheme is.
    """

    version = HttpVersion.HTTP_1_0

    async def _probe(self, target, session, override_port):
        port = target.plain_http_port(override_port)
        host_header = target.host if port == DEFAULT_HTTP_PORT else join_host_port(target.host, port)
        request = (
            f"GET / HTTP/1.0\r\n"
            f"Host: {host_header}\r\n"
            f"User-Agent: {USER_AGENT}\r\n"
            f"Accept: */*\r\n"
            f"\r\n"
        ).encode("ascii", errors="replace")

        reader, writer = await asyncio.open_connection(target.host, port)
        try:
            writer.write(request)
            await writer.drain()
            raw = await reader.readline()
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

        status_line = raw.decode("latin-1").strip()
        if not status_line:
            raise ConnectionError("server closed the connection without a response")

        proto = status_line.split(" ", 1)[0]
        parsed = parse_http_version(proto)
        if parsed is None:
            raise ConnectionError(f"malformed HTTP response {status_line!r}")

        major, minor = parsed
        if major != 1:
            return self._result(False, f"server replied with {proto}", status_line)
        # Any HTTP/1.x answer to a 1.0 request counts as 1.0 support
        if minor == 0:
            return self._result(True, "supported", status_line)
        return self._result(
            True, f"server upgraded HTTP/1.0 request to {proto} (good)", status_line,
        )

    def _failure(self, exc):
        if not is_connection_refused(exc):
            return super()._failure(exc)
        # Port 80 closed: the legacy surface is absent, which is what we want
        return VersionResult(
            version=self.version.value,
            error=True,
            detail=HTTP10_REFUSED_DETAIL,
            evidence=sanitize_evidence(describe(exc), EVIDENCE_MAX_LEN),
        )


# ─── HTTP/1.1 and HTTP/2.0 (httpx) ────────────────────────────────────────────

class _HttpxProbe(VersionProbe):

    http2 = False

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        options = dict(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=False,
        )
        if self._transport is not None:
            return httpx.AsyncClient(transport=self._transport, **options)
        return httpx.AsyncClient(
            http1=True,
            http2=self.http2,
            verify=insecure_ssl_context(),
            **options,
        )

    async def _probe(self, target, session, override_port):
        async with self._client() as client:
            # Stream so only the status line and headers are read
            async with client.stream("GET", target.url) as response:
                return self._classify(response, session)

    def _classify(self, response: httpx.Response, session: ProbeSession) -> VersionResult:
        raise NotImplementedError


class Http11Probe(_HttpxProbe):
    version = HttpVersion.HTTP_1_1
    http2 = False

    def _classify(self, response, session):
        proto = response.http_version
        if parse_http_version(proto) == (1, 1):
            return self._result(True, "supported", f"{proto} {response.status_code}")
        return self._result(False, f"server replied with {proto}", f"{proto} {response.status_code}")


class Http2Probe(_HttpxProbe):
    version = HttpVersion.HTTP_2_0
    http2 = True

    def _classify(self, response, session):
        record_tls_evidence(response, session)
        proto = response.http_version
        parsed = parse_http_version(proto)
        if parsed is not None and parsed[0] == 2:
            return self._result(True, "supported", f"{proto} {response.status_code}")
        return self._result(False, f"server replied with {proto}", f"{proto} {response.status_code}")


def record_tls_evidence(response: httpx.Response, session: ProbeSession) -> None:
    """Copy negotiated TLS version and ALPN protocol into the session, if TLS was used."""
    stream = response.extensions.get("network_stream")
    if stream is None:
        return
    ssl_object = stream.get_extra_info("ssl_object")
    if ssl_object is None:
        return
    session.tls_version = tls_version_name(ssl_object.version())
    session.alpn = ssl_object.selected_alpn_protocol() or ""


# ─── HTTP/3.0 (aioquic) ───────────────────────────────────────────────────────

class Http3Probe(VersionProbe):
    """
    Most servers simply lack HTTP/3, so any failure here is reported as
    "not supported" (error=False) instead of an alarming probe error.
    """

    version = HttpVersion.HTTP_3_0
    recoverable = (Exception,)

    async def _probe(self, target, session, override_port):
        authority = (
            target.host if target.port == DEFAULT_HTTPS_PORT
            else join_host_port(target.host, target.port)
        )
        parts = urlsplit(target.url)
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        status = await h3_get(target.host, target.port, authority, path, self.timeout)
        return self._result(True, "supported", f"HTTP/3 {status}")

    def _failure(self, exc):
        return VersionResult(
            version=self.version.value,
            supported=False,
            error=False,
            detail=H3_NOT_SUPPORTED_DETAIL,
            evidence=sanitize_evidence(describe(exc), EVIDENCE_MAX_LEN),
        )


def default_probes():
    """Fresh probe set in report order (1.0, 1.1, 2.0, 3.0)."""
    return [Http10Probe(), Http11Probe(), Http2Probe(), Http3Probe()]


__all__ = [
    "VersionResult", "ProbeSession", "VersionProbe",
    "Http10Probe", "Http11Probe", "Http2Probe", "Http3Probe",
    "default_probes", "is_dns_not_found", "is_connection_refused",
    "parse_http_version", "tls_version_name", "record_tls_evidence",
    "HTTP10_REFUSED_DETAIL", "H3_NOT_SUPPORTED_DETAIL",
]
