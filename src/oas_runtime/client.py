"""Client generated from a Swagger specification."""

from __future__ import annotations

import asyncio
import keyword
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import httpx

from .cache import OperationCache
from .channel import Channel, ChannelRouter
from .config import Settings, get_settings
from .dispatcher import Dispatcher
from .errors import UnknownOperationError
from .logging import redact_payload
from .models import OperationDef, Response, Result, Specification
from .normalizer import normalize
from .openapi import SpecLoader, load_spec_file, parse_specification
from .transport import HttpTransport

logger = logging.getLogger(__name__)

Callback = Callable[[Any, Any], None]


class Client:
    """Callable operations for every ``operationId`` of a specification.

    Each operation is available as ``client.call(operation_id, params)`` and,
    when the id is a free Python identifier, as ``client.<operation_id>(params)``.
    Both return a future resolving to a :class:`Result`; an optional
    ``callback(errors, response)`` is invoked once from the event loop.

    Example::

        async with Client(spec) as client:
            errors, response = await client.listPets({"limit": 10})
            client.fresh().listPets({"limit": 10}, callback=print)
    """

    def __init__(
        self,
        spec: Union[Specification, Mapping[str, Any]],
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> None:
        if not isinstance(spec, Specification):
            spec = parse_specification(spec)
        self.settings = settings or get_settings()
        self.spec = spec
        self.base_url = (base_url or self.settings.base_url or spec.base_path).rstrip("/")
        self.cache = OperationCache()
        self.transport = HttpTransport(
            client=http_client,
            timeout_seconds=self.settings.timeout_seconds,
            verify_ssl=self.settings.verify_ssl,
        )
        self._dispatcher = Dispatcher(self.base_url, self.transport, self.cache)
        self.operations: Dict[str, OperationDef] = {}
        self._generate()

    @classmethod
    async def from_url(
        cls,
        url: str,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        loader: Optional[SpecLoader] = None,
    ) -> "Client":
        settings = settings or get_settings()
        loader = loader or SpecLoader(
            cache_seconds=settings.spec_cache_seconds,
            timeout_seconds=settings.timeout_seconds,
            verify_ssl=settings.verify_ssl,
        )
        raw = await loader.load_spec(url, client=http_client)
        return cls(parse_specification(raw, origin=url), settings=settings, http_client=http_client)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "Client":
        return cls(load_spec_file(path), settings=settings, http_client=http_client)

    def _generate(self) -> None:
        for operation in self.spec.operations.values():
            self.operations[operation.operation_id] = operation
            name = operation.operation_id
            if not name.isidentifier() or keyword.iskeyword(name) or hasattr(self, name):
                logger.warning("Operation %s is only reachable through call()", name)
                continue
            setattr(self, name, self._operation_method(operation))

    def _operation_method(self, operation: OperationDef) -> Callable[..., "asyncio.Future[Result]"]:
        def method(
            params: Optional[Mapping[str, Any]] = None, callback: Optional[Callback] = None
        ) -> "asyncio.Future[Result]":
            return self._invoke(operation, params, callback)

        method.__name__ = operation.operation_id
        method.__doc__ = f"{operation.method} {operation.path}"
        return method

    def call(
        self,
        operation_id: str,
        params: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> "asyncio.Future[Result]":
        operation = self.operations.get(operation_id)
        if operation is None:
            raise UnknownOperationError(operation_id)
        return self._invoke(operation, params, callback)

    def _invoke(
        self,
        operation: OperationDef,
        params: Optional[Mapping[str, Any]],
        callback: Optional[Callback],
    ) -> "asyncio.Future[Result]":
        params = dict(params or {})
        logger.debug("Dispatch %s params=%s", operation.operation_id, redact_payload(params))
        future = self._dispatcher.dispatch(operation, params)
        if callback is not None:
            future.add_done_callback(lambda done: _deliver(done, callback, operation))
        return future

    def cached(self, operation_id: str) -> Optional[Response]:
        return self.cache.latest(operation_id)

    def fresh(self) -> "Client":
        self._dispatcher.fresh_requested = True
        return self

    def use_channel(self, channel: Channel) -> "Client":
        if self._dispatcher.channel is not None:
            self._dispatcher.channel.close()
        self._dispatcher.channel = ChannelRouter(
            channel, timeout_seconds=self.settings.channel_timeout_seconds
        )
        return self

    @property
    def channel(self) -> Optional[ChannelRouter]:
        return self._dispatcher.channel

    async def close(self) -> None:
        if self._dispatcher.channel is not None:
            self._dispatcher.channel.close()
        await self.transport.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def _deliver(
    future: "asyncio.Future[Result]", callback: Callback, operation: OperationDef
) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("%s failed: %r", operation.operation_id, exc)
        response = Response(
            method=operation.method, url=operation.path, operation_id=operation.operation_id
        )
        errors, _ = normalize(response)
        callback(errors, response)
        return
    result = future.result()
    callback(result.errors, result.response)
