# vector_wire/exchange/completion.py
# SPDX-License-Identifier: Apache-2.0

"""
Completion-queue context for asynchronous socket writes.

A `CompletionContext` pairs a bounded submission queue with a completion
queue. Callers prepare entries (`prep_send`), hand them off in one batch
(`submit`), and later block on the completion queue (`wait_for`) for the
`CompletionEvent` describing the outcome. The write itself runs on the
context's worker thread, so the submitting thread never blocks on socket I/O;
it only blocks on the completion wait.

Lifecycle
---------
- Default policy is one context per exchange: create, use once, `close()`.
- A context may be shared across exchanges. Submit/await pairs must then be
  serialised with `exclusive()`, because completions are posted to the queue
  as a whole rather than per exchange. Every event carries the `user_data`
  tag of the submission it completes.
- Every submitted entry's completion is consumed exactly once: by `seen()`
  on the normal path, or by the drain in `close()` / `wait_for()` for
  entries whose submitter gave up (`abandon()`).

Result codes follow the kernel convention: a non-negative `res` is the number
of bytes written, a negative `res` is `-errno`.
"""

from __future__ import annotations

import errno
import itertools
import logging
import queue
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set

from vector_wire.exchange.config import DEFAULT_QUEUE_DEPTH
from vector_wire.exchange.errors import SubmitError

logger = logging.getLogger(__name__)

OP_SEND = "send"


@dataclass(frozen=True)
class CompletionEvent:
    """Outcome of one submitted operation."""
    user_data: int
    res: int

    @property
    def ok(self) -> bool:
        return self.res >= 0


@dataclass(frozen=True)
class SubmissionEntry:
    """A prepared operation waiting in the submission queue."""
    opcode: str
    sock: socket.socket
    payload: memoryview
    offset: int
    user_data: int


class CompletionContext:
    """
    Submission queue + completion queue backed by a single worker thread.

    A single worker keeps operations executing in submission order, which is
    the ordering a shared context relies on.
    """

    def __init__(self, depth: int = DEFAULT_QUEUE_DEPTH, *, name: str = "vector_wire_cq") -> None:
        if depth <= 0:
            raise ValueError("depth must be a positive integer")
        self._depth = int(depth)
        self._name = name
        self._lock = threading.RLock()
        self._exclusive = threading.Lock()
        self._sq: List[SubmissionEntry] = []
        self._cq: "queue.Queue[CompletionEvent]" = queue.Queue()
        self._outstanding: Set[int] = set()
        self._abandoned: Set[int] = set()
        self._tags = itertools.count(1)
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=name,
        )
        self._closed = False

    def __enter__(self) -> "CompletionContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Entries submitted whose completion has not been consumed yet."""
        with self._lock:
            return len(self._outstanding)

    # ------------------------------------------------------------------ #
    # Submission side
    # ------------------------------------------------------------------ #

    @contextmanager
    def exclusive(self) -> Iterator["CompletionContext"]:
        """Hold the context for one complete submit/await pair."""
        with self._exclusive:
            yield self

    def prep_send(self, sock: socket.socket, payload: bytes, *, offset: int = 0) -> SubmissionEntry:
        """
        Queue a send of `payload[offset:]` on `sock`.

        Raises:
            SubmitError: the context is closed or the submission queue is full.
        """
        with self._lock:
            self._ensure_open()
            if len(self._sq) + len(self._outstanding) >= self._depth:
                raise SubmitError(
                    "submission queue full",
                    code="QUEUE_FULL",
                    details={"depth": self._depth},
                )
            entry = SubmissionEntry(
                opcode=OP_SEND,
                sock=sock,
                payload=memoryview(payload),
                offset=offset,
                user_data=next(self._tags),
            )
            self._sq.append(entry)
            return entry

    def submit(self) -> int:
        """Hand every prepared entry to the worker. Returns the number submitted."""
        with self._lock:
            self._ensure_open()
            entries, self._sq = self._sq, []
            for entry in entries:
                self._outstanding.add(entry.user_data)
                self._executor.submit(self._execute, entry)
        if entries:
            logger.debug("%s: submitted %d entr%s", self._name, len(entries), "y" if len(entries) == 1 else "ies")
        return len(entries)

    def _execute(self, entry: SubmissionEntry) -> None:
        try:
            res = entry.sock.send(entry.payload[entry.offset:])
        except socket.timeout:
            res = -errno.ETIMEDOUT
        except OSError as exc:
            res = -(exc.errno or errno.EIO)
        self._cq.put(CompletionEvent(user_data=entry.user_data, res=res))

    # ------------------------------------------------------------------ #
    # Completion side
    # ------------------------------------------------------------------ #

    def wait_for(self, user_data: int, timeout: Optional[float] = None) -> CompletionEvent:
        """
        Block until the next live completion arrives and return it.

        Completions of abandoned entries are consumed and skipped. The event
        returned is normally the one tagged `user_data`; a different tag means
        the context was shared without serialisation, and the caller decides
        how to fail.

        Raises:
            SubmitError: nothing was posted within `timeout` (COMPLETION_TIMEOUT).
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                event = self._cq.get(timeout=remaining)
            except queue.Empty:
                raise SubmitError(
                    "write completion did not arrive in time",
                    code="COMPLETION_TIMEOUT",
                    details={"timeout_s": timeout, "user_data": user_data},
                ) from None
            with self._lock:
                if event.user_data in self._abandoned:
                    self._abandoned.discard(event.user_data)
                    self._outstanding.discard(event.user_data)
                    logger.debug("%s: skipped completion of abandoned entry %d", self._name, event.user_data)
                    continue
            return event

    def seen(self, event: CompletionEvent) -> None:
        """Mark a completion consumed. Consuming the same completion twice is a bug."""
        with self._lock:
            if event.user_data not in self._outstanding:
                raise RuntimeError(f"completion {event.user_data} already consumed or never submitted")
            self._outstanding.discard(event.user_data)

    def discard(self, event: CompletionEvent) -> None:
        """Consume a completion nobody will claim (e.g. one received by the wrong waiter)."""
        with self._lock:
            self._outstanding.discard(event.user_data)
            self._abandoned.discard(event.user_data)
        logger.warning("%s: discarded unclaimed completion %d (res=%d)", self._name, event.user_data, event.res)

    def abandon(self, user_data: int) -> None:
        """Stop waiting for an entry; its completion will be drained when it arrives."""
        with self._lock:
            if user_data in self._outstanding:
                self._abandoned.add(user_data)

    # ------------------------------------------------------------------ #
    # Teardown
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """
        Tear the context down.

        Waits for operations still running on the worker, then consumes every
        completion left in the queue. Safe to call more than once.

        Sockets referenced by in-flight entries must be shut down (not merely
        closed) first: `close()` alone does not wake a thread blocked in
        `send`, and the worker join here has no bound.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            dropped = len(self._sq)
            self._sq = []
            executor, self._executor = self._executor, None

        if dropped:
            logger.warning("%s: dropped %d prepared but unsubmitted entr%s", self._name, dropped, "y" if dropped == 1 else "ies")

        if executor is not None:
            executor.shutdown(wait=True)

        drained = 0
        while True:
            try:
                event = self._cq.get_nowait()
            except queue.Empty:
                break
            with self._lock:
                was_abandoned = event.user_data in self._abandoned
                self._abandoned.discard(event.user_data)
                self._outstanding.discard(event.user_data)
            if not was_abandoned:
                drained += 1

        if drained:
            logger.warning("%s: discarded %d unconsumed completion(s) at teardown", self._name, drained)
        logger.debug("%s: closed", self._name)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SubmitError("completion context is closed", code="CONTEXT_CLOSED")


__all__ = [
    "OP_SEND",
    "CompletionEvent",
    "SubmissionEntry",
    "CompletionContext",
]
