"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Records and aggregators import types from here, never the reverse
- All types are frozen dataclasses for immutability guarantee
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for validation failures.
    Every rejection at the core boundary maps to one of these.
    """
    # Record validation
    INVALID_RECORD = auto()
    EMPTY_BATCH = auto()
    MULTIPLE_RECORDS = auto()

    # Routing
    UNKNOWN_EVENT_TYPE = auto()

    # Ownership
    WRITER_CONFLICT = auto()
    WRITER_RELEASED = auto()

    # Log integrity
    INVALID_SEQUENCE = auto()
    STRUCTURAL_INCONSISTENCY = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> Error:
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((key, str(value)) for key, value in sorted(context.items()))
        )

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


class ContractViolation(ValueError):
    """
    Raised at the core boundary when a value breaks its contract.

    Carries the structured Error so callers converting to Result
    lose nothing.
    """

    def __init__(self, code: ErrorCode, message: str, **context: object):
        super().__init__(message)
        self.error = Error.create(code, message, **context)

    @property
    def code(self) -> ErrorCode:
        return self.error.code


@dataclass(frozen=True)
class Result:
    """
    Generic result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(value: object) -> Result:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(value=None, error=error)


# =============================================================================
# TEMPORAL TYPES (Immutable, explicit semantics)
# =============================================================================

@dataclass(frozen=True)
class Timestamp:
    """
    Immutable timestamp with explicit semantics.
    All timestamps are UTC, never local time.
    """
    value: datetime

    def __post_init__(self):
        if not isinstance(self.value, datetime):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "Timestamp value must be a datetime",
                value_type=type(self.value).__name__
            )
        # Naive datetimes are taken as UTC
        if self.value.tzinfo is None:
            object.__setattr__(self, 'value', self.value.replace(tzinfo=timezone.utc))

    @staticmethod
    def now() -> Timestamp:
        return Timestamp(value=datetime.now(timezone.utc))

    @staticmethod
    def from_iso(iso_string: str) -> Timestamp:
        dt = datetime.fromisoformat(iso_string.replace('Z', '+00:00'))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return Timestamp(value=dt)

    def plus_seconds(self, seconds: float) -> Timestamp:
        return Timestamp(value=self.value + timedelta(seconds=seconds))

    def to_iso(self) -> str:
        return self.value.isoformat()

    def __lt__(self, other: Timestamp) -> bool:
        return self.value < other.value

    def __le__(self, other: Timestamp) -> bool:
        return self.value <= other.value
