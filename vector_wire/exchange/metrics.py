# vector_wire/exchange/metrics.py
# SPDX-License-Identifier: Apache-2.0
"""
Metrics hook for exchanges.

The controller reports one `observe` per exchange (wall time, outcome code,
failed stage, byte counts) and bumps a `status_<N>xx` counter whenever a
status line was parsed. Request and response bytes never reach the sink.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class MetricsSink(Protocol):
    """Anything with these two keyword-only methods can receive exchange metrics."""

    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """One finished exchange: `code` is "OK" or the error code, `extra` holds stage and byte counts."""
        ...

    def counter(
        self,
        *,
        component: str,
        name: str,
        value: int = 1,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ...


class NoopMetrics:
    """Default sink; drops everything."""
    def observe(self, **_: Any) -> None: ...
    def counter(self, **_: Any) -> None: ...


__all__ = ["MetricsSink", "NoopMetrics"]
