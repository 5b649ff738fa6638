# tests/mock/mock_peer.py
# SPDX-License-Identifier: Apache-2.0
"""
Scripted loopback peers for exchange tests.

MockPeer listens on 127.0.0.1 (ephemeral port) and serves connections one at
a time on a background thread. Each connection's request is read in full
(head plus Content-Length body) and recorded, then handled per `mode`:

- "respond": send `responder(request)` (or the fixed `response`) and keep the
  connection open until the client closes it
- "silent":  never send anything; hold the connection open
- "close":   close the connection without sending anything
- "stall":   accept and never read, so the client's send buffer fills up

TrackingSocket is a socket subclass that counts close() calls, used to check
that every exchange closes its socket exactly once.
"""

from __future__ import annotations

import re
import socket
import threading
import time
from typing import Callable, List, Optional

from vector_wire.exchange.config import ExchangeConfig

OK_RESPONSE = b'HTTP/1.1 200 OK\r\n\r\n{"ack":true}'

_CONTENT_LENGTH = re.compile(rb"^content-length:\s*(\d+)\s*$", re.IGNORECASE | re.MULTILINE)


class TrackingSocket(socket.socket):
    """socket.socket that records how many times close() was called."""

    instances: List["TrackingSocket"] = []

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.close_calls = 0
        TrackingSocket.instances.append(self)

    def close(self) -> None:
        self.close_calls += 1
        super().close()


def read_http_request(conn: socket.socket, *, limit: int = 1 << 20) -> bytes:
    """Read one request: headers up to the blank line, then Content-Length bytes."""
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(65536)
        if not chunk:
            return data
        data += chunk
        if len(data) > limit:
            return data
    head, _, body = data.partition(b"\r\n\r\n")
    m = _CONTENT_LENGTH.search(head)
    expected = int(m.group(1)) if m else 0
    while len(body) < expected:
        chunk = conn.recv(65536)
        if not chunk:
            break
        body += chunk
    return head + b"\r\n\r\n" + body


class MockPeer:
    def __init__(
        self,
        *,
        mode: str = "respond",
        response: bytes = OK_RESPONSE,
        responder: Optional[Callable[[bytes], bytes]] = None,
        delay_s: float = 0.0,
    ) -> None:
        if mode not in ("respond", "silent", "close", "stall"):
            raise ValueError(f"unknown mode {mode!r}")
        self.mode = mode
        self.response = response
        self.responder = responder
        self.delay_s = delay_s
        self.requests: List[bytes] = []
        self._stop = threading.Event()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(16)
        self._listener.settimeout(0.05)
        self._thread = threading.Thread(target=self._serve, name="mock_peer", daemon=True)

    @property
    def host(self) -> str:
        return "127.0.0.1"

    @property
    def port(self) -> int:
        return self._listener.getsockname()[1]

    def start(self) -> "MockPeer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(5.0)
        self._listener.close()

    def __enter__(self) -> "MockPeer":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(None)
                self._handle(conn)

    def _handle(self, conn: socket.socket) -> None:
        if self.mode == "stall":
            self._stop.wait()
            return
        try:
            request = read_http_request(conn)
        except OSError:
            return
        if not request:
            # client hung up without sending (failed before the write)
            return
        self.requests.append(request)
        if self.mode == "close":
            return
        if self.mode == "respond":
            if self.delay_s:
                time.sleep(self.delay_s)
            reply = self.responder(request) if self.responder else self.response
            try:
                conn.sendall(reply)
            except OSError:
                return
        self._hold(conn)

    def _hold(self, conn: socket.socket) -> None:
        """Keep the connection open until the client closes it or the peer stops."""
        conn.settimeout(0.05)
        while not self._stop.is_set():
            try:
                if not conn.recv(65536):
                    return
            except socket.timeout:
                continue
            except OSError:
                return


def unused_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def config_for(peer: MockPeer, **overrides) -> ExchangeConfig:
    """ExchangeConfig pointed at `peer` with short timeouts."""
    values = dict(host=peer.host, port=peer.port, timeout_s=2.0, completion_timeout_s=2.0)
    values.update(overrides)
    return ExchangeConfig(**values)
