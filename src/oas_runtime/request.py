"""Build outgoing HTTP requests from an operation and its input."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Tuple
from urllib.parse import quote

from .binder import bind_parameters, invalid_input, substitute_path, to_text
from .models import OperationDef, PreparedRequest

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def encode_component(value: Any) -> str:
    return quote(to_text(value), safe="!*'()")


def encode_pairs(pairs: Iterable[Tuple[str, Any]]) -> str:
    return "&".join(f"{encode_component(key)}={encode_component(value)}" for key, value in pairs)


def build_request(
    base_url: str, operation: OperationDef, params: Mapping[str, Any]
) -> PreparedRequest:
    """Resolve the target URL, headers and encoded body for one call.

    When any input is missing, or the body cannot be JSON encoded, the
    returned request only carries ``errors`` and must not be sent.
    """
    segments, errors = substitute_path(operation.path_segments, params)
    bound = bind_parameters(operation.parameters, params)
    errors.extend(bound.errors)

    request = PreparedRequest(
        method=operation.method,
        url="/".join([base_url, *segments]),
    )

    if errors:
        logger.debug("%s %s binding errors=%s", request.method, request.url, errors)
        request.errors = errors
        return request

    if bound.query:
        request.url += "?" + encode_pairs(bound.query)

    headers = [(name, to_text(value)) for name, value in bound.headers]
    if bound.has_json_body:
        headers.insert(0, ("Content-Type", JSON_CONTENT_TYPE))
        try:
            request.body = json.dumps(bound.json_body)
        except (TypeError, ValueError) as exc:
            logger.debug("%s body %s not encodable: %s", request.url, bound.json_body_name, exc)
            request.errors = [invalid_input(bound.json_body_name)]
            return request
        logger.debug("%s <<< %s", request.url, request.body)
    elif bound.form:
        headers.insert(0, ("Content-Type", FORM_CONTENT_TYPE))
        request.body = encode_pairs(bound.form)
        logger.debug("%s <<< %s", request.url, request.body)
    elif bound.has_file_body:
        request.body = bound.file_body

    request.headers = headers
    return request
