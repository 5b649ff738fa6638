# vector_wire/exchange/connection.py
# SPDX-License-Identifier: Apache-2.0
"""Opening the TCP connection for a single exchange."""

from __future__ import annotations

import logging
import socket
from typing import Callable

from vector_wire.exchange.errors import ConnectError

logger = logging.getLogger(__name__)

#: Signature shared by `connect` and any replacement injected into the controller.
Connector = Callable[[str, int], socket.socket]


def connect(host: str, port: int) -> socket.socket:
    """
    Open a blocking IPv4 stream socket connected to host:port.

    The connect uses the OS default timeout and is never retried; the caller
    decides whether to retry the whole exchange.

    Raises:
        ConnectError: socket creation or connect failed.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise ConnectError.from_os_error("socket creation failed", exc) from exc

    logger.debug("connecting to %s:%d", host, port)
    try:
        sock.connect((host, port))
    except OSError as exc:
        sock.close()
        raise ConnectError.from_os_error(
            f"connect to {host}:{port} failed",
            exc,
            details={"host": host, "port": port},
        ) from exc

    logger.debug("connected to %s:%d", host, port)
    return sock


__all__ = ["Connector", "connect"]
