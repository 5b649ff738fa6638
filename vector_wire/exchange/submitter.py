# vector_wire/exchange/submitter.py
# SPDX-License-Identifier: Apache-2.0
"""
Outbound write through a completion context.

The write is queued on the context and performed off the caller's thread; the
caller only blocks on the completion wait. Partial writes are treated as
failures rather than resubmitted: payloads are short and built in one piece,
so an underrun signals a broken peer rather than back-pressure.
"""

from __future__ import annotations

import errno as errno_mod
import logging
import os
import socket
from typing import Callable, Optional

from vector_wire.exchange.completion import CompletionContext
from vector_wire.exchange.errors import SubmitError

logger = logging.getLogger(__name__)


def submit_write(
    context: CompletionContext,
    sock: socket.socket,
    payload: bytes,
    *,
    timeout: Optional[float] = None,
    on_submitted: Optional[Callable[[], None]] = None,
) -> int:
    """
    Send `payload` on `sock` via one completion-queue operation.

    `on_submitted` runs after the entry is handed to the context and before
    the completion wait starts.

    Returns:
        Number of bytes written, always equal to len(payload).

    Raises:
        SubmitError: the submission failed, the completion carried a negative
            result, fewer bytes than the payload were written, or no
            completion arrived within `timeout`.
    """
    expected = len(payload)
    with context.exclusive():
        entry = context.prep_send(sock, payload)
        context.submit()
        if on_submitted is not None:
            on_submitted()
        try:
            event = context.wait_for(entry.user_data, timeout=timeout)
        except SubmitError:
            context.abandon(entry.user_data)
            raise
        if event.user_data != entry.user_data:
            context.abandon(entry.user_data)
            context.discard(event)
            raise SubmitError(
                "completion does not belong to this submission",
                code="COMPLETION_MISMATCH",
                details={"expected": entry.user_data, "received": event.user_data},
            )
        context.seen(event)

    if event.res < 0:
        num = -event.res
        raise SubmitError(
            f"write failed: {os.strerror(num)}",
            errno=num,
            details={"res": event.res, "errno_name": errno_mod.errorcode.get(num, str(num))},
        )
    if event.res < expected:
        raise SubmitError(
            f"partial write: {event.res} of {expected} bytes",
            code="PARTIAL_WRITE",
            details={"written": event.res, "expected": expected},
        )

    logger.debug("write completed: %d bytes (entry %d)", event.res, event.user_data)
    return event.res


__all__ = ["submit_write"]
