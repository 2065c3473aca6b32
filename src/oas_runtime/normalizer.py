"""Response normalization into a uniform error list."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Tuple

from .models import ErrorKind, ErrorRecord, Response

logger = logging.getLogger(__name__)

TIMEOUT_STATUS = 408
_LOOKS_LIKE_JSON = re.compile(r"^[\{\[]")


def decode_body(text: str) -> Any:
    if not _LOOKS_LIKE_JSON.match(text):
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Response body looks like JSON but does not parse; keeping raw text")
        return text


def generic_error(status: int, url: str) -> ErrorRecord:
    return {
        "message": f"Something very bad happened! Try again later. ({status})",
        "path": url,
    }


def normalize(response: Response) -> Tuple[Optional[List[Any]], Optional[ErrorKind]]:
    if response.status == 200:
        return None, None

    body_errors = response.body.get("errors") if isinstance(response.body, dict) else None
    if isinstance(body_errors, list) and body_errors:
        return body_errors, ErrorKind.SERVER_STRUCTURED

    if not response.status:
        response.status = TIMEOUT_STATUS
        return [generic_error(TIMEOUT_STATUS, response.url)], ErrorKind.TRANSPORT

    return [generic_error(response.status, response.url)], ErrorKind.SERVER_UNSTRUCTURED


def make_errors(response: Response) -> Optional[List[Any]]:
    errors, _ = normalize(response)
    return errors
