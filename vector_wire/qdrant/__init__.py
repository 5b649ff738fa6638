# vector_wire/qdrant/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Qdrant caller layer - request templates and the demo workflow built on the
exchange core.
"""

from vector_wire.qdrant.requests import (
    DEFAULT_COLLECTION,
    DEFAULT_VECTOR_SIZE,
    DEFAULT_DISTANCE,
    DEFAULT_POINT_ID,
    DEFAULT_VECTOR,
    build_request,
    create_collection_request,
    insert_vector_request,
    retrieve_vector_request,
    delete_vector_request,
)
from vector_wire.qdrant.workflow import (
    CollectionSetupFailed,
    create_collection,
    insert_vector,
    retrieve_vector,
    delete_vector,
    run_demo,
)

__all__ = [
    "DEFAULT_COLLECTION",
    "DEFAULT_VECTOR_SIZE",
    "DEFAULT_DISTANCE",
    "DEFAULT_POINT_ID",
    "DEFAULT_VECTOR",
    "build_request",
    "create_collection_request",
    "insert_vector_request",
    "retrieve_vector_request",
    "delete_vector_request",
    "CollectionSetupFailed",
    "create_collection",
    "insert_vector",
    "retrieve_vector",
    "delete_vector",
    "run_demo",
]
