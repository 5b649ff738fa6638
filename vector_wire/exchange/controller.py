# vector_wire/exchange/controller.py
# SPDX-License-Identifier: Apache-2.0
"""
Exchange controller - one request out, one response in.

Composes the exchange components into a strictly sequential state machine:

    IDLE -> CONNECTING -> SENDING -> AWAITING_COMPLETION -> AWAITING_READABLE
         -> READING -> PARSING -> CLOSED

Any stage error moves the exchange to FAILED, carrying the typed error. The
write goes through a completion context (queued, then awaited); the read is a
bounded readiness wait followed by one blocking read. The two primitives are
kept separate on purpose.

Resource policy
---------------
- The socket belongs to the exchange and is closed exactly once on every
  exit path, before the exchange reaches a terminal state.
- Without an explicit context the controller creates a fresh
  CompletionContext per exchange and tears it down after the socket is
  closed. A context passed in by the caller is shared: submissions on it are
  serialised, and the caller owns its teardown.
- Exchange failures never raise out of `send_request`; they come back as
  `ExchangeResult(ok=False, error=...)`. Programming errors still propagate.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import socket
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from vector_wire.exchange.completion import CompletionContext
from vector_wire.exchange.config import ExchangeConfig
from vector_wire.exchange.connection import Connector, connect
from vector_wire.exchange.errors import ExchangeError, GateTimeout
from vector_wire.exchange.gate import Readiness, await_readable
from vector_wire.exchange.metrics import MetricsSink, NoopMetrics
from vector_wire.exchange.reader import allocate_buffer, read_response
from vector_wire.exchange.status import parse_status
from vector_wire.exchange.submitter import submit_write
from vector_wire.exchange.wire import error_to_wire, success_to_wire

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview, str]


class ExchangeState(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    SENDING = "sending"
    AWAITING_COMPLETION = "awaiting_completion"
    AWAITING_READABLE = "awaiting_readable"
    READING = "reading"
    PARSING = "parsing"
    CLOSED = "closed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (ExchangeState.CLOSED, ExchangeState.FAILED)


_NEXT_STATE: Dict[ExchangeState, ExchangeState] = {
    ExchangeState.IDLE: ExchangeState.CONNECTING,
    ExchangeState.CONNECTING: ExchangeState.SENDING,
    ExchangeState.SENDING: ExchangeState.AWAITING_COMPLETION,
    ExchangeState.AWAITING_COMPLETION: ExchangeState.AWAITING_READABLE,
    ExchangeState.AWAITING_READABLE: ExchangeState.READING,
    ExchangeState.READING: ExchangeState.PARSING,
    ExchangeState.PARSING: ExchangeState.CLOSED,
}


@dataclass(frozen=True)
class ExchangeResult:
    """
    Outcome of one exchange.

    Attributes:
        ok: True when the exchange reached CLOSED
        status: Parsed status code; None on failure or when no status line matched
        response: Raw bytes received (at most one buffer's worth)
        state: Terminal state (CLOSED or FAILED)
        failed_in: State the exchange was in when it failed
        error: The typed failure, if any
        bytes_sent: Bytes acknowledged by the write completion
        bytes_received: Bytes returned by the single read
        ms: Wall time of the whole exchange
    """
    ok: bool
    status: Optional[int]
    response: bytes
    state: ExchangeState
    failed_in: Optional[ExchangeState] = None
    error: Optional[ExchangeError] = None
    bytes_sent: int = 0
    bytes_received: int = 0
    ms: float = 0.0

    @property
    def failure_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    def raise_for_failure(self) -> "ExchangeResult":
        """Re-raise the carried error, or return self on success."""
        if self.error is not None:
            raise self.error
        return self

    def to_wire(self) -> Dict[str, Any]:
        """Canonical success/error envelope for this outcome."""
        if self.error is not None:
            envelope = error_to_wire(self.error, self.ms)
            if self.failed_in is not None:
                envelope["details"] = dict(envelope["details"] or {}, failed_in=self.failed_in.value)
            return envelope
        return success_to_wire(
            {
                "status": self.status,
                "bytes_sent": self.bytes_sent,
                "bytes_received": self.bytes_received,
                "response": self.response.decode("utf-8", "replace"),
            },
            self.ms,
        )


class Exchange:
    """
    State for one request/response cycle.

    Owns its socket and response buffer; `release()` closes the socket
    exactly once no matter how often it is called.
    """

    def __init__(self, payload: bytes, capacity: int) -> None:
        self.payload = bytes(payload)
        self.sock: Optional[socket.socket] = None
        self.buffer = allocate_buffer(capacity)
        self.state = ExchangeState.IDLE
        self.failed_in: Optional[ExchangeState] = None
        self.error: Optional[ExchangeError] = None
        self.status: Optional[int] = None
        self.bytes_sent = 0
        self.bytes_received = 0
        self._released = False

    def advance(self, expected: ExchangeState) -> None:
        """Move to the next state, which must be `expected`."""
        nxt = _NEXT_STATE.get(self.state)
        if nxt is not expected:
            raise RuntimeError(f"illegal exchange transition {self.state.value} -> {expected.value}")
        logger.debug("exchange %s -> %s", self.state.value, nxt.value)
        self.state = nxt

    def fail(self, err: ExchangeError) -> None:
        if self.state.terminal:
            raise RuntimeError(f"exchange already {self.state.value}")
        logger.debug("exchange %s -> failed (%s)", self.state.value, err.code)
        self.failed_in = self.state
        self.error = err
        self.state = ExchangeState.FAILED

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self.sock is None:
            return
        try:
            # wakes a worker still blocked in send on this socket
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()

    def result(self, ms: float) -> ExchangeResult:
        return ExchangeResult(
            ok=self.state is ExchangeState.CLOSED,
            status=self.status,
            response=bytes(self.buffer[: self.bytes_received]),
            state=self.state,
            failed_in=self.failed_in,
            error=self.error,
            bytes_sent=self.bytes_sent,
            bytes_received=self.bytes_received,
            ms=ms,
        )


class ExchangeController:
    """
    Runs exchanges against one configured endpoint.

    Example:
        controller = ExchangeController(ExchangeConfig(port=6333))
        result = controller.send_request(b"GET /collections HTTP/1.1\\r\\nHost: 127.0.0.1\\r\\n\\r\\n")
        if result.ok and result.status == 200:
            ...
    """

    _component = "exchange"

    def __init__(
        self,
        config: Optional[ExchangeConfig] = None,
        *,
        context: Optional[CompletionContext] = None,
        connector: Connector = connect,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self._config = (config or ExchangeConfig()).validate()
        self._shared_context = context
        self._connector = connector
        self._metrics: MetricsSink = metrics or NoopMetrics()

    @property
    def config(self) -> ExchangeConfig:
        return self._config

    def send_request(self, payload: Payload) -> ExchangeResult:
        """
        Send `payload` verbatim and return the outcome.

        `str` payloads are encoded as UTF-8; everything else is sent as-is.
        """
        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        t0 = time.monotonic()
        exchange = Exchange(data, self._config.buffer_size)
        context: Optional[CompletionContext] = None
        try:
            context = self._shared_context or CompletionContext(self._config.queue_depth)
            self._run(exchange, context)
        except ExchangeError as e:
            exchange.fail(e)
        finally:
            exchange.release()
            if context is not None and context is not self._shared_context:
                context.close()

        if exchange.state is ExchangeState.PARSING:
            exchange.advance(ExchangeState.CLOSED)

        result = exchange.result((time.monotonic() - t0) * 1000.0)
        self._record(result)
        if result.ok:
            logger.info("exchange ok: status=%s sent=%d received=%d", result.status, result.bytes_sent, result.bytes_received)
        else:
            logger.warning("exchange failed in %s: %s", result.failed_in.value, result.error)
        return result

    async def asend_request(self, payload: Payload) -> ExchangeResult:
        """Awaitable `send_request`; the blocking exchange runs in a worker thread."""
        return await asyncio.to_thread(self.send_request, payload)

    def _run(self, exchange: Exchange, context: CompletionContext) -> None:
        cfg = self._config

        exchange.advance(ExchangeState.CONNECTING)
        exchange.sock = self._connector(cfg.host, cfg.port)

        exchange.advance(ExchangeState.SENDING)
        # bounds a send stuck behind a peer that stopped reading
        exchange.sock.settimeout(cfg.completion_timeout_s)
        exchange.bytes_sent = submit_write(
            context,
            exchange.sock,
            exchange.payload,
            timeout=cfg.completion_timeout_s,
            on_submitted=lambda: exchange.advance(ExchangeState.AWAITING_COMPLETION),
        )

        exchange.advance(ExchangeState.AWAITING_READABLE)
        if await_readable(exchange.sock, cfg.timeout_s) is Readiness.TIMED_OUT:
            raise GateTimeout(
                f"no response within {cfg.timeout_s:g}s",
                details={"timeout_s": cfg.timeout_s},
            )

        exchange.advance(ExchangeState.READING)
        exchange.sock.settimeout(cfg.timeout_s)
        exchange.bytes_received = read_response(exchange.sock, exchange.buffer)

        exchange.advance(ExchangeState.PARSING)
        exchange.status = parse_status(memoryview(exchange.buffer)[: exchange.bytes_received])
        if exchange.status is None:
            logger.debug("response has no status line")

    def _record(self, result: ExchangeResult) -> None:
        try:
            code = "OK" if result.ok else (result.error.code or result.failure_kind)
            extra: Dict[str, Any] = {"bytes_sent": result.bytes_sent, "bytes_received": result.bytes_received}
            if result.failed_in is not None:
                extra["failed_in"] = result.failed_in.value
            self._metrics.observe(
                component=self._component,
                op="send_request",
                ms=result.ms,
                ok=result.ok,
                code=code,
                extra=extra,
            )
            if result.status is not None:
                self._metrics.counter(component=self._component, name=f"status_{result.status // 100}xx")
        except Exception:
            # Never let metrics recording break the exchange
            logger.debug("metrics recording failed", exc_info=True)


def send_http_request(payload: Payload, *, config: Optional[ExchangeConfig] = None, **kwargs: Any) -> ExchangeResult:
    """One-shot exchange with a fresh controller (and a fresh completion context)."""
    return ExchangeController(config, **kwargs).send_request(payload)


__all__ = [
    "ExchangeState",
    "ExchangeResult",
    "Exchange",
    "ExchangeController",
    "send_http_request",
]
