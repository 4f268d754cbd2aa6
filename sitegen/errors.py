"""Exceptions raised by sitegen."""

from __future__ import annotations

from typing import Any


class SitegenError(Exception):
    """Base class for sitegen errors."""


class ConfigurationError(SitegenError):
    """Business configuration or settings are invalid.

    Attributes:
        missing_fields: Required fields that were absent or blank.
    """

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class MalformedResponseError(SitegenError):
    """A provider response failed parsing or schema validation.

    Attributes:
        payload: The offending response content, kept for diagnosis.
    """

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class GraphError(SitegenError):
    """Stage dependency graph is invalid (unknown dependency or cycle)."""


class StateTransitionError(SitegenError):
    """An illegal stage status transition was attempted."""
