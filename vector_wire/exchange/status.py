# vector_wire/exchange/status.py
# SPDX-License-Identifier: Apache-2.0
"""Status-line extraction from a raw response buffer."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Union

BufferLike = Union[bytes, bytearray, memoryview, str]

_STATUS_LINE = re.compile(rb"^(?P<protocol>[!-~]+) (?P<code>\d{3})(?![0-9])[ \t]*(?P<reason>[^\r\n\x00]*)")


class StatusLine(NamedTuple):
    protocol: str
    code: int
    reason: str


def parse_status_line(buffer: BufferLike) -> Optional[StatusLine]:
    """
    Parse `<protocol-token> <3-digit-code> [reason]` at the very start of `buffer`.

    Returns None when the buffer does not start with a status line. The rest
    of the buffer is not inspected.
    """
    data = buffer.encode("latin-1", "replace") if isinstance(buffer, str) else bytes(buffer)
    m = _STATUS_LINE.match(data)
    if m is None:
        return None
    return StatusLine(
        protocol=m.group("protocol").decode("ascii"),
        code=int(m.group("code")),
        reason=m.group("reason").decode("latin-1").rstrip(),
    )


def parse_status(buffer: BufferLike) -> Optional[int]:
    """Return the numeric status code of `buffer`, or None if there is none."""
    line = parse_status_line(buffer)
    return line.code if line is not None else None


__all__ = ["StatusLine", "parse_status_line", "parse_status"]
