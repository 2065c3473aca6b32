"""One-shot HTTP transport."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .models import PreparedRequest, Response
from .normalizer import decode_body

logger = logging.getLogger(__name__)


class HttpTransport:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30,
        verify_ssl: bool = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds, verify=verify_ssl)

    async def send(self, request: PreparedRequest, operation_id: Optional[str] = None) -> Response:
        response = Response(method=request.method, url=request.url, operation_id=operation_id)
        try:
            http_response = await self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            logger.warning("%s %s failed: %s", request.method, request.url, exc)
            response.body = ""
            return response
        except Exception as exc:
            logger.warning("%s %s could not be sent: %r", request.method, request.url, exc)
            response.body = ""
            return response

        response.status = http_response.status_code
        response.headers = dict(http_response.headers)
        response.body = decode_body(http_response.text)
        logger.debug("%s %s %s", response.url, response.status, http_response.text)
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
