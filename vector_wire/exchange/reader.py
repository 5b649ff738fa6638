# vector_wire/exchange/reader.py
# SPDX-License-Identifier: Apache-2.0
"""
Single-shot response read.

One `recv_into` call fills at most one buffer's worth of bytes. The reader
never loops: anything beyond the buffer capacity is left unread and the
truncation is not reported.
"""

from __future__ import annotations

import logging
import socket

from vector_wire.exchange.errors import ReadError

logger = logging.getLogger(__name__)


def allocate_buffer(capacity: int) -> bytearray:
    """Return a zero-initialised response buffer of `capacity` bytes."""
    if capacity <= 0:
        raise ValueError("buffer capacity must be positive")
    return bytearray(capacity)


def read_response(sock: socket.socket, buffer: bytearray) -> int:
    """
    Read once from `sock` into `buffer`.

    Returns:
        Number of bytes received (1..len(buffer)).

    Raises:
        ReadError: the peer closed the connection (zero bytes), the socket's
            receive timeout elapsed, or the OS reported an error.
    """
    try:
        received = sock.recv_into(buffer)
    except socket.timeout as exc:
        raise ReadError(
            "receive timed out",
            code="READ_TIMEOUT",
            details={"timeout_s": sock.gettimeout()},
        ) from exc
    except OSError as exc:
        raise ReadError.from_os_error("receive failed", exc) from exc

    if received <= 0:
        raise ReadError("connection closed by peer before any response bytes", code="PEER_CLOSED")

    logger.debug("received %d bytes (capacity %d)", received, len(buffer))
    return received


__all__ = ["allocate_buffer", "read_response"]
