# vector_wire/exchange/errors.py
# SPDX-License-Identifier: Apache-2.0
"""
Normalized errors for the request/response exchange.

Every failure an exchange can hit maps onto exactly one subclass of
`ExchangeError`. Subclasses set a default `code` in UPPER_SNAKE_CASE and the
`stage` of the exchange that produced them, so callers (and the wire envelope
helpers) can branch on `code` without string-matching messages.

A status line that does not parse is *not* an error: it surfaces as
`status=None` on the result.
"""

from __future__ import annotations

import errno as errno_mod
from typing import Any, Dict, Mapping, Optional


class ExchangeError(Exception):
    """
    Base exception for all exchange failures.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (UPPER_SNAKE_CASE)
        errno: OS error number when the failure came from a system call
        stage: Exchange stage that failed ("connect", "submit", "gate", "read", ...)
        details: Additional JSON-serializable context
    """

    default_code: Optional[str] = None
    default_stage: Optional[str] = None

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        errno: Optional[int] = None,
        stage: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.errno = errno
        self.stage = stage or self.default_stage
        self.details = dict(details or {})

    @classmethod
    def from_os_error(cls, message: str, exc: OSError, **kwargs: Any) -> "ExchangeError":
        """Build an error from an OSError, keeping its errno and strerror."""
        num = exc.errno
        details = dict(kwargs.pop("details", None) or {})
        if num is not None:
            details.setdefault("errno_name", errno_mod.errorcode.get(num, str(num)))
        details.setdefault("os_error", exc.strerror or str(exc) or type(exc).__name__)
        return cls(f"{message}: {details['os_error']}", errno=num, details=details, **kwargs)

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization and logging."""
        return {
            "message": self.message,
            "code": self.code,
            "errno": self.errno,
            "stage": self.stage,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


class BadConfig(ExchangeError):
    """Exchange configuration is invalid."""
    default_code = "BAD_CONFIG"
    default_stage = "config"


class ConnectError(ExchangeError):
    """Socket creation or connect failed."""
    default_code = "CONNECT_ERROR"
    default_stage = "connect"


class SubmitError(ExchangeError):
    """
    Asynchronous write submission or completion failed.

    Covers negative completion results, partial writes, a full submission
    queue, a completion that never arrived, and a completion whose tag does
    not match the submission.
    """
    default_code = "SUBMIT_ERROR"
    default_stage = "submit"


class GateTimeout(ExchangeError):
    """No readability signal within the configured bound."""
    default_code = "GATE_TIMEOUT"
    default_stage = "gate"


class GateError(ExchangeError):
    """The readiness-wait primitive itself failed."""
    default_code = "GATE_ERROR"
    default_stage = "gate"


class ReadError(ExchangeError):
    """Read returned zero bytes (peer closed) or failed at the OS level."""
    default_code = "READ_ERROR"
    default_stage = "read"


__all__ = [
    "ExchangeError",
    "BadConfig",
    "ConnectError",
    "SubmitError",
    "GateTimeout",
    "GateError",
    "ReadError",
]
