"""Parameter binding: match invocation input to declared parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .models import ErrorRecord, ParameterDef, ParameterLocation

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_UNSET = object()


@dataclass
class BoundParameters:
    query: List[Tuple[str, Any]] = field(default_factory=list)
    headers: List[Tuple[str, Any]] = field(default_factory=list)
    form: List[Tuple[str, Any]] = field(default_factory=list)
    json_body: Any = _UNSET
    json_body_name: str = ""
    file_body: Any = _UNSET
    errors: List[ErrorRecord] = field(default_factory=list)

    @property
    def has_json_body(self) -> bool:
        return self.json_body is not _UNSET

    @property
    def has_file_body(self) -> bool:
        return self.file_body is not _UNSET


def missing_input(name: str) -> ErrorRecord:
    return {"message": f"Missing input: {name}", "path": f"/{name}"}


def invalid_input(name: str) -> ErrorRecord:
    return {"message": f"Invalid input: {name}", "path": f"/{name}"}


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_value(parameter: ParameterDef, params: Mapping[str, Any]) -> Any:
    value = params.get(parameter.name)
    if value is None and parameter.has_default:
        value = parameter.default
    return _UNSET if value is None else value


def bind_parameters(
    parameters: Sequence[ParameterDef], params: Mapping[str, Any]
) -> BoundParameters:
    bound = BoundParameters()

    for parameter in parameters:
        # path placeholders are checked by substitute_path
        if parameter.location is ParameterLocation.PATH:
            continue
        value = resolve_value(parameter, params)
        if value is _UNSET:
            if parameter.required:
                bound.errors.append(missing_input(parameter.name))
            continue

        location = parameter.location
        if location is ParameterLocation.BODY:
            bound.json_body = value
            bound.json_body_name = parameter.name
        elif location is ParameterLocation.FILE:
            bound.file_body = value
        elif location is ParameterLocation.FORM_DATA:
            bound.form.append((parameter.name, value))
        elif location is ParameterLocation.HEADER:
            bound.headers.append((parameter.name, value))
        elif location is ParameterLocation.QUERY:
            bound.query.append((parameter.name, value))

    return bound


def substitute_path(
    segments: Sequence[str], params: Mapping[str, Any]
) -> Tuple[List[str], List[ErrorRecord]]:
    """Fill ``{name}`` placeholders in each path segment from ``params``.

    Only the first placeholder of a segment is substituted. Missing values
    produce an error and leave an empty string in their place.
    """
    errors: List[ErrorRecord] = []
    resolved: List[str] = []

    for segment in segments:
        match: Optional[re.Match[str]] = _PLACEHOLDER.search(segment)
        if not match:
            resolved.append(segment)
            continue
        name = match.group(1)
        value = params.get(name)
        if value is None:
            errors.append(missing_input(name))
            value = ""
        resolved.append(segment[: match.start()] + to_text(value) + segment[match.end() :])

    return resolved, errors
