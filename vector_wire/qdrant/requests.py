# vector_wire/qdrant/requests.py
# SPDX-License-Identifier: Apache-2.0
"""
Literal HTTP/1.1 request builders for the Qdrant REST API.

Each builder returns the exact bytes handed to the exchange core. Bodies are
serialised with `json.dumps`; `Content-Length` is always computed from the
encoded body.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from vector_wire.exchange.config import DEFAULT_HOST

DEFAULT_COLLECTION = "my_collection"
DEFAULT_VECTOR_SIZE = 128
DEFAULT_DISTANCE = "Cosine"
DEFAULT_POINT_ID = 1
DEFAULT_VECTOR = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)

_DISTANCES = ("Cosine", "Euclid", "Dot", "Manhattan")
CRLF = "\r\n"


def build_request(
    method: str,
    path: str,
    *,
    host: str = DEFAULT_HOST,
    body: Optional[Mapping[str, Any]] = None,
) -> bytes:
    """
    Build `METHOD path HTTP/1.1` with a Host header and an optional JSON body.

    A body adds `Content-Type: application/json` and a matching
    `Content-Length`.
    """
    method = method.strip().upper()
    if not method or not path.startswith("/"):
        raise ValueError("method must be non-empty and path must start with '/'")

    lines = [f"{method} {path} HTTP/1.1", f"Host: {host}"]
    encoded = b""
    if body is not None:
        encoded = json.dumps(body, separators=(", ", ": ")).encode("utf-8")
        lines.append("Content-Type: application/json")
        lines.append(f"Content-Length: {len(encoded)}")
    head = CRLF.join(lines) + CRLF + CRLF
    return head.encode("ascii") + encoded


def create_collection_request(
    name: str = DEFAULT_COLLECTION,
    *,
    size: int = DEFAULT_VECTOR_SIZE,
    distance: str = DEFAULT_DISTANCE,
    host: str = DEFAULT_HOST,
) -> bytes:
    if distance not in _DISTANCES:
        raise ValueError(f"distance must be one of {', '.join(_DISTANCES)}")
    if size <= 0:
        raise ValueError("size must be positive")
    body = {"name": name, "vectors": {"size": size, "distance": distance}}
    return build_request("PUT", f"/collections/{name}", host=host, body=body)


def insert_vector_request(
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
    vector: Sequence[float] = DEFAULT_VECTOR,
    host: str = DEFAULT_HOST,
) -> bytes:
    if not vector:
        raise ValueError("vector must not be empty")
    body = {"points": [{"id": point_id, "vector": [float(x) for x in vector]}]}
    return build_request("POST", f"/collections/{name}/points", host=host, body=body)


def retrieve_vector_request(
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
    host: str = DEFAULT_HOST,
) -> bytes:
    return build_request("GET", f"/collections/{name}/points/{point_id}", host=host)


def delete_vector_request(
    name: str = DEFAULT_COLLECTION,
    *,
    point_id: int = DEFAULT_POINT_ID,
    host: str = DEFAULT_HOST,
) -> bytes:
    return build_request("DELETE", f"/collections/{name}/points/{point_id}", host=host)


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
]
