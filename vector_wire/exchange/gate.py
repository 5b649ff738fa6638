# vector_wire/exchange/gate.py
# SPDX-License-Identifier: Apache-2.0
"""
Bounded readiness wait before the response read.

The read is not routed through the completion context, so without an
explicit bounded wait a silent peer would block `recv` indefinitely. This
gate polls the socket with `selectors` and reports whether it became
readable within the bound.
"""

from __future__ import annotations

import enum
import logging
import selectors
import socket
import time

from vector_wire.exchange.errors import GateError

logger = logging.getLogger(__name__)


class Readiness(enum.Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"


def await_readable(sock: socket.socket, timeout: float) -> Readiness:
    """
    Wait up to `timeout` seconds for `sock` to have data (or EOF) to read.

    Returns READY as soon as the socket is readable and TIMED_OUT exactly when
    the bound elapses without a readiness signal.

    Raises:
        GateError: the polling primitive itself failed (e.g. closed socket).
    """
    t0 = time.monotonic()
    try:
        with selectors.DefaultSelector() as sel:
            sel.register(sock, selectors.EVENT_READ)
            events = sel.select(timeout)
    except OSError as exc:
        raise GateError.from_os_error("readiness wait failed", exc) from exc
    except ValueError as exc:
        # closed socket: fileno() is -1
        raise GateError(f"readiness wait failed: {exc}") from exc

    waited_ms = (time.monotonic() - t0) * 1000.0
    if not events:
        logger.debug("socket not readable after %.1fms (bound %.3fs)", waited_ms, timeout)
        return Readiness.TIMED_OUT
    logger.debug("socket readable after %.1fms", waited_ms)
    return Readiness.READY


__all__ = ["Readiness", "await_readable"]
