"""
core/h3_client.py
Single-request HTTP/3 client on top of aioquic.

aioquic provides QUIC and the HTTP/3 framing; this module only wires one
GET request through it and reports the response status. Certificate
verification is off: the probe measures protocol support, not trust.

The whole exchange (handshake + HEADERS) is bounded by one deadline owned
here, not by cancelling aioquic from outside:
  • the handshake is never awaited through aioquic's shielded
    wait_connected() waiter, so nothing is left pending after a timeout
  • a connection whose handshake never completed is dropped without
    sitting out QUIC's closing period
"""

from __future__ import annotations

import asyncio
import ssl
from typing import Dict, List, Optional, Tuple

from aioquic.asyncio.client import connect
from aioquic.asyncio.protocol import QuicConnectionProtocol
from aioquic.h3.connection import H3_ALPN, H3Connection
from aioquic.h3.events import H3Event, HeadersReceived
from aioquic.quic.configuration import QuicConfiguration
from aioquic.quic.events import ConnectionTerminated, HandshakeCompleted, QuicEvent

from utils.constants import PROBE_TIMEOUTS, USER_AGENT, HttpVersion

Headers = List[Tuple[bytes, bytes]]

DEFAULT_H3_TIMEOUT = PROBE_TIMEOUTS[HttpVersion.HTTP_3_0]


class H3ClientProtocol(QuicConnectionProtocol):
    """QUIC protocol that resolves one future per request stream on HEADERS."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._http = H3Connection(self._quic)
        self._waiters: Dict[int, asyncio.Future] = {}
        self.handshake_done = False

    async def get(
        self, authority: str, path: str = "/", timeout: Optional[float] = None,
    ) -> Headers:
        """Send GET and wait for the response HEADERS; TimeoutError after `timeout`."""
        stream_id = self._quic.get_next_available_stream_id()
        self._http.send_headers(
            stream_id=stream_id,
            headers=[
                (b":method", b"GET"),
                (b":scheme", b"https"),
                (b":authority", authority.encode()),
                (b":path", path.encode()),
                (b"user-agent", USER_AGENT.encode()),
            ],
            end_stream=True,
        )
        waiter = asyncio.get_running_loop().create_future()
        self._waiters[stream_id] = waiter
        # Request frames are queued until the handshake yields 1-RTT keys
        self.transmit()
        try:
            return await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"no HTTP/3 response within {timeout:g}s") from None
        finally:
            self._waiters.pop(stream_id, None)

    async def wait_closed(self) -> None:
        # Nothing was established: skip the 3×PTO closing period
        if not self.handshake_done:
            return
        await super().wait_closed()

    def quic_event_received(self, event: QuicEvent) -> None:
        if isinstance(event, HandshakeCompleted):
            self.handshake_done = True
        if isinstance(event, ConnectionTerminated):
            reason = event.reason_phrase or f"error code {event.error_code}"
            self._fail_all(ConnectionError(f"QUIC connection terminated: {reason}"))
            return
        for h3_event in self._http.handle_event(event):
            self._h3_event_received(h3_event)

    def _h3_event_received(self, event: H3Event) -> None:
        if isinstance(event, HeadersReceived):
            waiter = self._waiters.pop(event.stream_id, None)
            if waiter is not None and not waiter.done():
                waiter.set_result(event.headers)

    def _fail_all(self, exc: Exception) -> None:
        for waiter in self._waiters.values():
            if not waiter.done():
                waiter.set_exception(exc)
        self._waiters.clear()


def status_from_headers(headers: Headers) -> Optional[int]:
    for name, value in headers:
        if name == b":status":
            try:
                return int(value)
            except ValueError:
                return None
    return None


async def h3_get(
    host: str,
    port: int,
    authority: str,
    path: str = "/",
    timeout: float = DEFAULT_H3_TIMEOUT,
) -> int:
    """
    Perform GET over HTTP/3 and return the response status code.

    Raises TimeoutError when no response arrives within `timeout`, and
    ConnectionError / OSError (including socket.gaierror) on other failures.
    """
    configuration = QuicConfiguration(
        is_client=True,
        alpn_protocols=H3_ALPN,
        verify_mode=ssl.CERT_NONE,
        idle_timeout=timeout,
    )
    async with connect(
        host, port,
        configuration=configuration,
        create_protocol=H3ClientProtocol,
        wait_connected=False,
    ) as client:
        headers = await client.get(authority, path or "/", timeout)

    status = status_from_headers(headers)
    if status is None:
        raise ConnectionError("HTTP/3 response without :status header")
    return status


__all__ = ["H3ClientProtocol", "h3_get", "status_from_headers"]
