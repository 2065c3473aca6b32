"""Bidirectional channel transport with correlation-id routing."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Mapping, Protocol, Set, runtime_checkable

from pydantic import ValidationError

from .logging import redact_payload
from .models import (
    ChannelRequest,
    ChannelResponse,
    OperationDef,
    PendingRequest,
    PreparedRequest,
    Response,
    Result,
)
from .normalizer import normalize

logger = logging.getLogger(__name__)


@runtime_checkable
class Channel(Protocol):
    """A persistent connection that can carry operation calls.

    ``on_message`` registers a handler that the channel calls with every
    message it receives, either as a decoded mapping or as JSON text.
    """

    @property
    def is_open(self) -> bool: ...

    async def send(self, message: Dict[str, Any]) -> None: ...

    def on_message(self, handler: Callable[[Any], None]) -> None: ...


class ChannelRouter:
    def __init__(self, channel: Channel, timeout_seconds: float = 30) -> None:
        self.channel = channel
        self.timeout_seconds = timeout_seconds
        self._next_id = 1
        self._pending: Dict[int, PendingRequest] = {}
        self._tasks: Set["asyncio.Task[None]"] = set()
        channel.on_message(self.handle_message)

    @property
    def is_open(self) -> bool:
        return bool(self.channel.is_open)

    @property
    def pending(self) -> Dict[int, PendingRequest]:
        return dict(self._pending)

    def send(
        self, operation: OperationDef, params: Mapping[str, Any], request: PreparedRequest
    ) -> "asyncio.Future[Result]":
        loop = asyncio.get_running_loop()
        correlation_id = self._next_id
        self._next_id += 1

        pending = PendingRequest(
            correlation_id=correlation_id,
            operation_id=operation.operation_id,
            url=request.url,
            method=request.method,
            headers=request.headers,
            body=request.body,
            future=loop.create_future(),
        )
        if self.timeout_seconds > 0:
            pending.timeout_handle = loop.call_later(
                self.timeout_seconds, self._expire, correlation_id
            )
        self._pending[correlation_id] = pending

        message = ChannelRequest(id=correlation_id, op=operation.operation_id, params=dict(params))
        logger.debug(
            "Channel send id=%s op=%s params=%s",
            correlation_id,
            operation.operation_id,
            redact_payload(message.params),
        )
        task = loop.create_task(self._send(correlation_id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return pending.future

    async def _send(self, correlation_id: int, message: ChannelRequest) -> None:
        try:
            await self.channel.send(message.model_dump())
        except Exception as exc:
            logger.warning("Channel send failed for id=%s: %s", correlation_id, exc)
            self._fail(correlation_id)

    def handle_message(self, raw: Any) -> None:
        if isinstance(raw, (str, bytes, bytearray)):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.debug("Dropping non-JSON channel message")
                return

        try:
            message = ChannelResponse.model_validate(raw)
        except ValidationError:
            logger.debug("Dropping malformed channel message: %r", raw)
            return
        if not message.id or not message.code:
            logger.debug("Dropping channel message without id or code: %r", raw)
            return

        pending = self._pending.pop(message.id, None)
        if pending is None:
            logger.debug("Dropping channel message for unknown id=%s", message.id)
            return

        response = Response(
            method=pending.method,
            url=pending.url,
            status=message.code,
            body=message.body,
            operation_id=pending.operation_id,
        )
        logger.debug("Channel %s %s %s", pending.operation_id, response.status, response.body)
        self._complete(pending, response)

    def close(self) -> None:
        for correlation_id in list(self._pending):
            self._fail(correlation_id)

    def _expire(self, correlation_id: int) -> None:
        if correlation_id in self._pending:
            logger.warning("Channel request id=%s timed out", correlation_id)
            self._fail(correlation_id)

    def _fail(self, correlation_id: int) -> None:
        pending = self._pending.pop(correlation_id, None)
        if pending is None:
            return
        response = Response(
            method=pending.method,
            url=pending.url,
            operation_id=pending.operation_id,
        )
        self._complete(pending, response)

    def _complete(self, pending: PendingRequest, response: Response) -> None:
        if pending.timeout_handle is not None:
            pending.timeout_handle.cancel()
        if pending.future.done():
            return
        errors, kind = normalize(response)
        pending.future.set_result(Result(errors, response, kind))
