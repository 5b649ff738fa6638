# vector_wire/exchange/config.py
# SPDX-License-Identifier: Apache-2.0
"""
Exchange configuration.

Defaults target a local Qdrant instance on its REST port. Every value can be
overridden explicitly or through `VECTOR_WIRE_*` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Optional

from vector_wire.exchange.errors import BadConfig

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6333
DEFAULT_TIMEOUT_S = 5.0
DEFAULT_BUFFER_SIZE = 4096
DEFAULT_QUEUE_DEPTH = 8

ENV_PREFIX = "VECTOR_WIRE_"


@dataclass(frozen=True)
class ExchangeConfig:
    """
    Immutable settings consumed by the exchange core.

    Attributes:
        host: Target host (IPv4 address or resolvable name)
        port: Target TCP port
        timeout_s: Bound for the readiness wait and the socket receive timeout
        completion_timeout_s: Bound for waiting on the write completion event
        buffer_size: Response buffer capacity in bytes
        queue_depth: Submission queue depth of a completion context
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout_s: float = DEFAULT_TIMEOUT_S
    completion_timeout_s: float = DEFAULT_TIMEOUT_S
    buffer_size: int = DEFAULT_BUFFER_SIZE
    queue_depth: int = DEFAULT_QUEUE_DEPTH

    def validate(self) -> "ExchangeConfig":
        """Raise BadConfig if any field is out of range; return self otherwise."""
        if not isinstance(self.host, str) or not self.host.strip():
            raise BadConfig("host must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise BadConfig("port must be an integer in 1..65535", details={"port": self.port})
        for name in ("timeout_s", "completion_timeout_s"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise BadConfig(f"{name} must be a positive number", details={name: value})
        for name in ("buffer_size", "queue_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise BadConfig(f"{name} must be a positive integer", details={name: value})
        return self

    def with_updates(self, **changes: Any) -> "ExchangeConfig":
        return replace(self, **changes).validate()

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> "ExchangeConfig":
        """
        Build a config from `VECTOR_WIRE_<FIELD>` variables.

        Explicit keyword overrides win over the environment, which wins over
        the defaults. Values that fail to parse raise BadConfig.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            values[f.name] = _coerce(f.name, raw, _PARSERS[f.name])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values).validate()


_PARSERS: Dict[str, Callable[[str], Any]] = {
    "host": str,
    "port": int,
    "timeout_s": float,
    "completion_timeout_s": float,
    "buffer_size": int,
    "queue_depth": int,
}


def _coerce(name: str, raw: str, parser: Callable[[str], Any]) -> Any:
    try:
        return parser(raw.strip())
    except ValueError as exc:
        raise BadConfig(
            f"invalid value for {ENV_PREFIX}{name.upper()}",
            details={"value": raw},
        ) from exc


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_S",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_QUEUE_DEPTH",
    "ExchangeConfig",
]
