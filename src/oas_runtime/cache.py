"""Per-client cache of successful idempotent responses."""

from __future__ import annotations

from typing import Dict, Optional

from .models import Response


def request_key(method: str, url: str) -> str:
    return f"{method.upper()}:{url}"


class OperationCache:
    """Last-write-wins store of responses keyed by ``METHOD:url``.

    Each operation id also points at the most recent cached response of that
    operation, whatever its URL.
    """

    def __init__(self) -> None:
        self._by_key: Dict[str, Response] = {}
        self._by_operation: Dict[str, Response] = {}

    def get(self, key: str) -> Optional[Response]:
        return self._by_key.get(key)

    def latest(self, operation_id: str) -> Optional[Response]:
        return self._by_operation.get(operation_id)

    def put(self, key: str, response: Response) -> None:
        self._by_key[key] = response
        if response.operation_id:
            self._by_operation[response.operation_id] = response

    def clear(self) -> None:
        self._by_key.clear()
        self._by_operation.clear()

    def __len__(self) -> int:
        return len(self._by_key)
