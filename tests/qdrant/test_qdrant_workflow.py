# SPDX-License-Identifier: Apache-2.0
"""
Qdrant - create / insert / retrieve / delete workflow.

Covers:
  • run_demo issues the four requests in order, one connection each
  • 400 on create means "already exists" and the sequence continues
  • Any other create outcome (status or exchange failure) is fatal
  • 404 on retrieve/delete is reported, not raised
"""

import json
import logging
from typing import Dict

import pytest

from vector_wire.exchange.config import ExchangeConfig
from vector_wire.exchange.controller import ExchangeController
from vector_wire.qdrant.workflow import (
    CollectionSetupFailed,
    create_collection,
    delete_vector,
    retrieve_vector,
    run_demo,
)
from tests.mock.mock_peer import config_for, unused_port


def _http(status: int, reason: str, body: bytes = b"{}") -> bytes:
    return f"HTTP/1.1 {status} {reason}\r\nContent-Length: {len(body)}\r\n\r\n".encode() + body


def routed(statuses: Dict[str, int]):
    """Responder answering by HTTP method with the given status codes."""
    reasons = {200: "OK", 400: "Bad Request", 404: "Not Found", 500: "Internal Server Error"}

    def responder(request: bytes) -> bytes:
        method = request.split(b" ", 1)[0].decode()
        status = statuses.get(method, 200)
        return _http(status, reasons[status])

    return responder


def test_run_demo_order(peer_factory):
    p = peer_factory(responder=routed({}))
    results = run_demo(ExchangeController(config_for(p)), "my_collection", point_id=1)

    assert list(results) == ["create", "insert", "retrieve", "delete"]
    assert all(r.status == 200 for r in results.values())
    request_lines = [r.split(b"\r\n", 1)[0] for r in p.requests]
    assert request_lines == [
        b"PUT /collections/my_collection HTTP/1.1",
        b"POST /collections/my_collection/points HTTP/1.1",
        b"GET /collections/my_collection/points/1 HTTP/1.1",
        b"DELETE /collections/my_collection/points/1 HTTP/1.1",
    ]


def test_collection_sized_to_vector(peer_factory):
    p = peer_factory(responder=routed({}))
    run_demo(ExchangeController(config_for(p)), "c", vector=[0.5, 0.25, 0.125])

    create_body = json.loads(p.requests[0].partition(b"\r\n\r\n")[2])
    insert_body = json.loads(p.requests[1].partition(b"\r\n\r\n")[2])
    assert create_body["vectors"]["size"] == 3
    assert insert_body["points"][0]["vector"] == [0.5, 0.25, 0.125]


def test_existing_collection_continues(peer_factory, caplog):
    p = peer_factory(responder=routed({"PUT": 400}))
    with caplog.at_level(logging.INFO, logger="vector_wire.qdrant.workflow"):
        results = run_demo(ExchangeController(config_for(p)))

    assert results["create"].status == 400
    assert len(p.requests) == 4
    assert "already exists" in caplog.text


def test_create_server_error_is_fatal(peer_factory):
    p = peer_factory(responder=routed({"PUT": 500}))
    with pytest.raises(CollectionSetupFailed) as exc_info:
        run_demo(ExchangeController(config_for(p)))

    assert exc_info.value.result.status == 500
    assert "status 500" in str(exc_info.value)
    assert len(p.requests) == 1


def test_create_exchange_failure_is_fatal():
    controller = ExchangeController(ExchangeConfig(port=unused_port()))
    with pytest.raises(CollectionSetupFailed) as exc_info:
        create_collection(controller)
    assert exc_info.value.result.ok is False
    assert "ConnectError" in str(exc_info.value)


def test_not_found_is_reported_not_raised(peer_factory, caplog):
    p = peer_factory(responder=routed({"GET": 404, "DELETE": 404}))
    controller = ExchangeController(config_for(p))
    with caplog.at_level(logging.INFO, logger="vector_wire.qdrant.workflow"):
        assert retrieve_vector(controller, point_id=9).status == 404
        assert delete_vector(controller, point_id=9).status == 404

    assert "point 9 not found" in caplog.text
    assert "already deleted or not found" in caplog.text
