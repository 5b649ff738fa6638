# vector_wire/exchange/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Exchange core - Public API

Request/response exchange over a raw TCP connection: completion-queue write,
bounded readiness wait, single read, status-line parse. All public types are
re-exported here for clean imports.
"""

from vector_wire.exchange.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_S,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_QUEUE_DEPTH,
    ExchangeConfig,
)
from vector_wire.exchange.errors import (
    ExchangeError,
    BadConfig,
    ConnectError,
    SubmitError,
    GateTimeout,
    GateError,
    ReadError,
)
from vector_wire.exchange.connection import Connector, connect
from vector_wire.exchange.completion import (
    CompletionContext,
    CompletionEvent,
    SubmissionEntry,
)
from vector_wire.exchange.submitter import submit_write
from vector_wire.exchange.gate import Readiness, await_readable
from vector_wire.exchange.reader import allocate_buffer, read_response
from vector_wire.exchange.status import StatusLine, parse_status, parse_status_line
from vector_wire.exchange.metrics import MetricsSink, NoopMetrics
from vector_wire.exchange.wire import error_to_wire, success_to_wire
from vector_wire.exchange.controller import (
    Exchange,
    ExchangeController,
    ExchangeResult,
    ExchangeState,
    send_http_request,
)

__all__ = [
    # Configuration
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_S",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_QUEUE_DEPTH",
    "ExchangeConfig",

    # Error types
    "ExchangeError",
    "BadConfig",
    "ConnectError",
    "SubmitError",
    "GateTimeout",
    "GateError",
    "ReadError",

    # Components
    "Connector",
    "connect",
    "CompletionContext",
    "CompletionEvent",
    "SubmissionEntry",
    "submit_write",
    "Readiness",
    "await_readable",
    "allocate_buffer",
    "read_response",
    "StatusLine",
    "parse_status",
    "parse_status_line",

    # Observability and envelopes
    "MetricsSink",
    "NoopMetrics",
    "error_to_wire",
    "success_to_wire",

    # Controller
    "Exchange",
    "ExchangeController",
    "ExchangeResult",
    "ExchangeState",
    "send_http_request",
]
