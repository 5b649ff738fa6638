# vector_wire/exchange/wire.py
# SPDX-License-Identifier: Apache-2.0
"""
Canonical envelopes for exchange outcomes.

    Success:
        {
            "ok": true,
            "code": "OK",
            "ms": <float>,
            "result": {"status": <int|null>, "bytes_sent": <int>, ...}
        }

    Error:
        {
            "ok": false,
            "code": "<UPPER_SNAKE_CASE>",
            "error": "<ErrorClassName>",
            "message": "<human readable>",
            "details": { ... } | null,
            "ms": <float>
        }

Unexpected exceptions (anything that is not an ExchangeError) map to
code "UNAVAILABLE", matching the common error taxonomy.
"""

from __future__ import annotations

from typing import Any, Dict

from vector_wire.exchange.errors import ExchangeError


def error_to_wire(e: BaseException, ms: float) -> Dict[str, Any]:
    """Map an ExchangeError (or unexpected exception) to an error envelope."""
    if isinstance(e, ExchangeError):
        payload = e.asdict()
        details = dict(payload.get("details") or {})
        if payload.get("stage"):
            details.setdefault("stage", payload["stage"])
        if payload.get("errno") is not None:
            details.setdefault("errno", payload["errno"])
        return {
            "ok": False,
            "code": payload.get("code") or type(e).__name__.upper(),
            "error": type(e).__name__,
            "message": payload.get("message", ""),
            "details": details or None,
            "ms": ms,
        }
    return {
        "ok": False,
        "code": "UNAVAILABLE",
        "error": type(e).__name__,
        "message": str(e) or "internal error",
        "details": None,
        "ms": ms,
    }


def success_to_wire(result: Dict[str, Any], ms: float) -> Dict[str, Any]:
    """Wrap a result mapping in a success envelope."""
    return {
        "ok": True,
        "code": "OK",
        "ms": ms,
        "result": result,
    }


__all__ = ["error_to_wire", "success_to_wire"]
