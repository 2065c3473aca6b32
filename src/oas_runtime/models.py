"""Internal models for operations, requests and results."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, TypedDict, Union

from pydantic import BaseModel, ConfigDict


class ParameterLocation(str, enum.Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    FORM_DATA = "formData"
    FILE = "file"


class ErrorRecord(TypedDict):
    message: str
    path: str


class ErrorKind(str, enum.Enum):
    BINDING = "binding"
    TRANSPORT = "transport"
    SERVER_STRUCTURED = "server_structured"
    SERVER_UNSTRUCTURED = "server_unstructured"


_MISSING = object()


@dataclass(frozen=True)
class ParameterDef:
    name: str
    location: ParameterLocation
    required: bool = False
    default: Any = _MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


@dataclass(frozen=True)
class OperationDef:
    operation_id: str
    method: str
    path_segments: Tuple[str, ...]
    parameters: Tuple[ParameterDef, ...] = ()

    @property
    def path(self) -> str:
        return "/" + "/".join(self.path_segments)


@dataclass(frozen=True)
class Specification:
    base_path: str
    operations: Dict[str, OperationDef]


@dataclass
class PreparedRequest:
    method: str
    url: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: Any = None
    errors: List[ErrorRecord] = field(default_factory=list)


@dataclass
class Response:
    method: str
    url: str
    status: Optional[int] = None
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    operation_id: Optional[str] = None


@dataclass
class Result:
    """Outcome of one invocation.

    ``errors`` is ``None`` on success. For binding failures ``response`` is the
    half-built :class:`PreparedRequest`; otherwise it is a :class:`Response`.
    """

    errors: Optional[List[Any]]
    response: Union[Response, PreparedRequest]
    kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.errors is None

    def __iter__(self) -> Iterator[Any]:
        yield self.errors
        yield self.response


@dataclass
class PendingRequest:
    correlation_id: int
    operation_id: str
    url: str
    method: str
    headers: List[Tuple[str, str]]
    body: Any
    future: "asyncio.Future[Result]"
    timeout_handle: Optional[asyncio.TimerHandle] = None


class ChannelRequest(BaseModel):
    id: int
    op: str
    params: Dict[str, Any]


class ChannelResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    code: int
    body: Any = None
