# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the exchange and Qdrant caller-layer tests.

Every test talks to real loopback sockets: MockPeer servers on 127.0.0.1 or
socket pairs. Nothing here reaches beyond the local host.
"""

from __future__ import annotations

import socket
import types
from typing import Callable, Iterator, List

import pytest

from vector_wire.exchange import connection as connection_mod
from tests.mock.mock_peer import MockPeer, TrackingSocket


@pytest.fixture
def peer_factory() -> Iterator[Callable[..., MockPeer]]:
    """Start MockPeers on demand; all are stopped at teardown."""
    started: List[MockPeer] = []

    def _make(**kwargs) -> MockPeer:
        peer = MockPeer(**kwargs).start()
        started.append(peer)
        return peer

    yield _make
    for peer in started:
        peer.stop()


@pytest.fixture
def peer(peer_factory) -> MockPeer:
    """A peer answering every request with a 200 and a small JSON body."""
    return peer_factory()


@pytest.fixture
def sockpair() -> Iterator[tuple]:
    """A connected stream socket pair, closed at teardown."""
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def tracked_sockets(monkeypatch) -> List[TrackingSocket]:
    """Make `connect()` create TrackingSockets; returns the list of created sockets."""
    TrackingSocket.instances = []
    fake_socket_module = types.SimpleNamespace(
        socket=TrackingSocket,
        AF_INET=socket.AF_INET,
        SOCK_STREAM=socket.SOCK_STREAM,
    )
    monkeypatch.setattr(connection_mod, "socket", fake_socket_module)
    return TrackingSocket.instances
