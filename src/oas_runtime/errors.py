"""Exceptions raised outside of the dispatch pipeline."""

from __future__ import annotations

from typing import Optional


class SpecError(Exception):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class UnknownOperationError(LookupError):
    pass
