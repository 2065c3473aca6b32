"""Swagger spec loader and operation parser."""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import httpx

from .errors import SpecError
from .models import OperationDef, ParameterDef, ParameterLocation, Specification
from .normalizer import decode_body

logger = logging.getLogger(__name__)

_METHOD_KEY = re.compile(r"^\w+$")


class SpecLoader:
    def __init__(
        self, cache_seconds: int = 3600, timeout_seconds: float = 30, verify_ssl: bool = True
    ) -> None:
        self.cache_seconds = cache_seconds
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self._cache: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    async def load_spec(self, url: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
        cached = self._cache.get(url)
        if cached and time.time() - cached[0] < self.cache_seconds:
            return cached[1]

        if client is None:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, verify=self.verify_ssl
            ) as owned:
                response = await owned.get(url)
        else:
            response = await client.get(url)

        if response.status_code != 200:
            logger.warning("Failed to fetch spec: %s (%s)", url, response.status_code)
            raise SpecError(f"Failed to fetch spec from {url}", status=response.status_code)

        data = decode_body(response.text)
        if not isinstance(data, dict):
            logger.warning("Spec at %s is not a JSON object; no operations generated", url)
            data = {}

        logger.debug("Generate methods from %s", url)
        self._cache[url] = (time.time(), data)
        return data


def load_spec_file(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SpecError(f"Cannot read spec {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SpecError(f"Spec {path} is not a JSON object")
    return data


def parse_specification(raw: Mapping[str, Any], origin: Optional[str] = None) -> Specification:
    """Build a :class:`Specification` from a fully inlined Swagger document.

    ``origin`` is the URL the document came from; a relative ``basePath`` is
    resolved against it.
    """
    base_path = str(raw.get("basePath") or "").rstrip("/")
    if origin and "://" not in base_path:
        base_path = str(httpx.URL(origin).join(base_path or "/")).rstrip("/")
    return Specification(base_path=base_path, operations=extract_operations(raw))


def extract_operations(raw: Mapping[str, Any]) -> Dict[str, OperationDef]:
    operations: Dict[str, OperationDef] = {}
    paths = raw.get("paths") or {}

    for path, methods in paths.items():
        if not path.startswith("/") or not isinstance(methods, Mapping):
            continue
        shared_parameters = methods.get("parameters") or []
        segments = tuple(path.split("/")[1:])

        for method, operation in methods.items():
            if method == "parameters" or not _METHOD_KEY.match(method):
                continue
            if not isinstance(operation, Mapping):
                continue
            operation_id = operation.get("operationId") or _fallback_operation_id(method, path)
            if operation_id in operations:
                logger.warning("Duplicate operationId %s; %s %s wins", operation_id, method, path)

            logger.debug("Add method %s", operation_id)
            operations[operation_id] = OperationDef(
                operation_id=operation_id,
                method=method.upper(),
                path_segments=segments,
                parameters=tuple(
                    _build_parameters([*shared_parameters, *(operation.get("parameters") or [])])
                ),
            )

    return operations


def _build_parameters(raw_parameters: List[Mapping[str, Any]]) -> List[ParameterDef]:
    parameters: List[ParameterDef] = []
    for raw in raw_parameters:
        name = raw.get("name")
        if not name:
            continue
        try:
            location = ParameterLocation(raw.get("in"))
        except ValueError:
            continue
        kwargs: Dict[str, Any] = {"required": bool(raw.get("required", False))}
        if "default" in raw:
            kwargs["default"] = raw["default"]
        parameters.append(ParameterDef(name=name, location=location, **kwargs))
    return parameters


def _fallback_operation_id(method: str, path: str) -> str:
    sanitized = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
    return f"{method.lower()}_{sanitized or 'root'}"
