from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest


_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))


PETSTORE: Dict[str, Any] = {
    "basePath": "http://api.test/v1/",
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "parameters": [
                    {"name": "limit", "in": "query"},
                    {"name": "sort", "in": "query", "default": "name"},
                    {"name": "X-Trace", "in": "header"},
                ],
            },
            "post": {
                "operationId": "addPet",
                "parameters": [{"name": "pet", "in": "body", "required": True}],
            },
        },
        "/pets/{petId}": {
            "parameters": [{"name": "petId", "in": "path", "required": True}],
            "get": {"operationId": "showPetById"},
            "put": {
                "operationId": "updatePet",
                "parameters": [
                    {"name": "name", "in": "formData"},
                    {"name": "status", "in": "formData"},
                ],
            },
        },
        "/pets/{petId}/photo": {
            "post": {
                "operationId": "uploadPhoto",
                "parameters": [
                    {"name": "petId", "in": "path", "required": True},
                    {"name": "photo", "in": "file", "required": True},
                ],
            }
        },
        "/search": {
            "get": {
                "operationId": "search",
                "parameters": [
                    {"name": "q", "in": "query", "required": True},
                    {"name": "session", "in": "cookie", "required": True},
                ],
            }
        },
        "/status": {
            "get": {},
            "x-internal": {"operationId": "hidden"},
        },
        "relative": {"get": {"operationId": "ignored"}},
    },
}


@pytest.fixture
def petstore() -> Dict[str, Any]:
    return copy.deepcopy(PETSTORE)


class FakeChannel:
    def __init__(self, is_open: bool = True) -> None:
        self.is_open = is_open
        self.sent: List[Dict[str, Any]] = []
        self._handlers: List[Callable[[Any], None]] = []

    async def send(self, message: Dict[str, Any]) -> None:
        self.sent.append(message)

    def on_message(self, handler: Callable[[Any], None]) -> None:
        self._handlers.append(handler)

    def emit(self, message: Any) -> None:
        for handler in self._handlers:
            handler(message)


class BrokenChannel(FakeChannel):
    async def send(self, message: Dict[str, Any]) -> None:
        raise ConnectionError("socket closed")


class RecordingHandler:
    """httpx.MockTransport handler that records requests."""

    def __init__(self, respond: Callable[[Any], Any]) -> None:
        self.requests: List[Any] = []
        self._respond = respond

    def __call__(self, request: Any) -> Any:
        self.requests.append(request)
        return self._respond(request)
