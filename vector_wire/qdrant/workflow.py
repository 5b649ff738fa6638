# vector_wire/qdrant/workflow.py
# SPDX-License-Identifier: Apache-2.0
"""
Create / insert / retrieve / delete sequence against a Qdrant collection.

Status-code policy lives here, not in the exchange core:

- create: 200 is success, 400 means the collection already exists (continue),
  anything else (including an exchange failure) is fatal.
- insert: anything but 200 is logged and the sequence continues.
- retrieve / delete: 404 is reported as "not found" and is not an error.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Optional, Sequence

from vector_wire.exchange.controller import ExchangeController, ExchangeResult
from vector_wire.qdrant.requests import (
    DEFAULT_COLLECTION,
    DEFAULT_DISTANCE,
    DEFAULT_POINT_ID,
    DEFAULT_VECTOR,
    DEFAULT_VECTOR_SIZE,
    create_collection_request,
    delete_vector_request,
    insert_vector_request,
    retrieve_vector_request,
)

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_ALREADY_EXISTS = 400
STATUS_NOT_FOUND = 404


class CollectionSetupFailed(RuntimeError):
    """Collection creation returned neither 200 nor 400."""

    def __init__(self, result: ExchangeResult):
        if result.ok:
            reason = f"status {result.status}"
        else:
            reason = f"{result.failure_kind}: {result.error}"
        super().__init__(f"failed to create collection ({reason}); is Qdrant running?")
        self.result = result


def _describe(result: ExchangeResult) -> str:
    return str(result.status) if result.ok else f"{result.failure_kind} ({result.error})"


def create_collection(
    controller: ExchangeController,
    name: str = DEFAULT_COLLECTION,
    *,
    size: int = DEFAULT_VECTOR_SIZE,
    distance: str = DEFAULT_DISTANCE,
) -> ExchangeResult:
    logger.info("creating collection %r", name)
    result = controller.send_request(
        create_collection_request(name, size=size, distance=distance, host=controller.config.host)
    )
    if result.status == STATUS_OK:
        logger.info("collection %r created", name)
    elif result.status == STATUS_ALREADY_EXISTS:
        logger.info("collection %r already exists; skipping creation", name)
    else:
        raise CollectionSetupFailed(result)
    return result


def insert_vector(
    controller: ExchangeController,
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
    vector: Sequence[float] = DEFAULT_VECTOR,
) -> ExchangeResult:
    logger.info("inserting point %s into %r", point_id, name)
    result = controller.send_request(
        insert_vector_request(name, point_id=point_id, vector=vector, host=controller.config.host)
    )
    if result.status != STATUS_OK:
        logger.warning("vector insertion failed: %s", _describe(result))
    return result


def retrieve_vector(
    controller: ExchangeController,
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
) -> ExchangeResult:
    logger.info("retrieving point %s from %r", point_id, name)
    result = controller.send_request(
        retrieve_vector_request(name, point_id=point_id, host=controller.config.host)
    )
    if result.status == STATUS_NOT_FOUND:
        logger.info("point %s not found", point_id)
    elif not result.ok:
        logger.warning("vector retrieval failed: %s", _describe(result))
    return result


def delete_vector(
    controller: ExchangeController,
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
) -> ExchangeResult:
    logger.info("deleting point %s from %r", point_id, name)
    result = controller.send_request(
        delete_vector_request(name, point_id=point_id, host=controller.config.host)
    )
    if result.status == STATUS_NOT_FOUND:
        logger.info("point %s already deleted or not found", point_id)
    elif not result.ok:
        logger.warning("vector deletion failed: %s", _describe(result))
    return result


def run_demo(
    controller: ExchangeController,
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
    vector: Optional[Sequence[float]] = None,
    size: Optional[int] = None,
) -> Dict[str, ExchangeResult]:
    """
    Run create, insert, retrieve and delete in order.

    The collection is sized to the vector unless `size` is given. Returns the
    result of every step keyed by step name. Raises CollectionSetupFailed if
    the collection cannot be created.
    """
    vector = tuple(vector) if vector is not None else DEFAULT_VECTOR
    results: Dict[str, ExchangeResult] = OrderedDict()
    results["create"] = create_collection(controller, name, size=size or len(vector))
    results["insert"] = insert_vector(controller, name, point_id=point_id, vector=vector)
    results["retrieve"] = retrieve_vector(controller, name, point_id=point_id)
    results["delete"] = delete_vector(controller, name, point_id=point_id)
    return results


__all__ = [
    "CollectionSetupFailed",
    "create_collection",
    "insert_vector",
    "retrieve_vector",
    "delete_vector",
    "run_demo",
]
