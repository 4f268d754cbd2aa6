"""Uniform result type produced by the provider adapter and every stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar


T = TypeVar("T")


class ErrorKind(Enum):
    """Why a stage or provider call did not produce a value."""

    PROVIDER_UNAVAILABLE = "provider_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    CONFIGURATION_INVALID = "configuration_invalid"
    CANCELLED = "cancelled"
    INTERNAL_ERROR = "internal_error"


class ResultStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Tagged success/failure value. Immutable once produced.

    Attributes:
        status: SUCCESS or FAILURE.
        value: Produced value (SUCCESS only).
        used_fallback: True when the value came from a rule-based generator.
        error: Error kind (FAILURE only).
        message: Human readable detail.
        provider_id: Provider that produced the value or failed.
    """

    status: ResultStatus
    value: T | None = None
    used_fallback: bool = False
    error: ErrorKind | None = None
    message: str = ""
    provider_id: str | None = None

    @classmethod
    def success(
        cls,
        value: T,
        used_fallback: bool = False,
        provider_id: str | None = None,
        message: str = "",
    ) -> "StageResult[T]":
        return cls(
            status=ResultStatus.SUCCESS,
            value=value,
            used_fallback=used_fallback,
            provider_id=provider_id,
            message=message,
        )

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        message: str = "",
        provider_id: str | None = None,
    ) -> "StageResult[T]":
        return cls(
            status=ResultStatus.FAILURE,
            error=error,
            message=message,
            provider_id=provider_id,
        )

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_cancelled(self) -> bool:
        return self.error == ErrorKind.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, serializing the value when it supports it."""
        value = self.value
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        elif isinstance(value, list):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        return {
            "status": self.status.value,
            "value": value,
            "used_fallback": self.used_fallback,
            "error": self.error.value if self.error else None,
            "message": self.message,
            "provider_id": self.provider_id,
        }
