"""Per-invocation transport selection: cache, channel or HTTP."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from .cache import OperationCache, request_key
from .channel import ChannelRouter
from .models import ErrorKind, OperationDef, PreparedRequest, Result
from .normalizer import normalize
from .request import build_request
from .transport import HttpTransport

logger = logging.getLogger(__name__)


def _resolve(future: "asyncio.Future[Result]", result: Result) -> None:
    if not future.done():
        future.set_result(result)


class Dispatcher:
    """Runs one operation call through the request pipeline.

    The transport decision is made synchronously in :meth:`dispatch`; the
    outcome is always delivered later through the returned future:

    * a cached response, unless a fresh request was asked for;
    * the attached channel, when it is open;
    * binding errors, without any traffic;
    * a one-shot HTTP request otherwise.

    The fresh flag is consumed by every dispatch.
    """

    def __init__(self, base_url: str, transport: HttpTransport, cache: OperationCache) -> None:
        self.base_url = base_url
        self.transport = transport
        self.cache = cache
        self.channel: Optional[ChannelRouter] = None
        self.fresh_requested = False
        self._tasks: "set[asyncio.Task[Result]]" = set()

    def dispatch(
        self, operation: OperationDef, params: Mapping[str, Any]
    ) -> "asyncio.Future[Result]":
        loop = asyncio.get_running_loop()
        fresh, self.fresh_requested = self.fresh_requested, False
        request = build_request(self.base_url, operation, params)

        if not fresh and not request.errors:
            cached = self.cache.get(request_key(request.method, request.url))
            if cached is not None:
                logger.debug("%s is cached", cached.url)
                return self._later(loop, Result(None, cached))

        if self.channel is not None and self.channel.is_open:
            return self.channel.send(operation, params, request)

        if request.errors:
            return self._later(loop, Result(request.errors, request, ErrorKind.BINDING))

        task = loop.create_task(self._send_http(operation, request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send_http(self, operation: OperationDef, request: PreparedRequest) -> Result:
        response = await self.transport.send(request, operation.operation_id)
        if request.method == "GET" and response.status == 200:
            self.cache.put(request_key(request.method, request.url), response)
        errors, kind = normalize(response)
        return Result(errors, response, kind)

    def _later(self, loop: asyncio.AbstractEventLoop, result: Result) -> "asyncio.Future[Result]":
        future: "asyncio.Future[Result]" = loop.create_future()
        loop.call_soon(_resolve, future, result)
        return future
