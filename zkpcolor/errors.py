"""
Status codes and exceptions.

Protocol outcomes (a bad edge index, an out-of-order call, a commitment that
does not open) are reported as ``ProtocolStatus`` values on result objects.
``ZKPColorError`` is reserved for misuse that is not a protocol outcome.
"""

from enum import IntEnum
from typing import Any, Dict, Optional


class ProtocolStatus(IntEnum):
    """Status codes for protocol operations."""
    SUCCESS = 0
    INVALID_EDGE_INDEX = 1
    NOT_APPLICABLE = 2
    COMMITMENT_MISMATCH = 3
    INVALID_COLORING = 4
    INVALID_INPUT = 5
    NO_COLORING_FOUND = 6

    @property
    def is_success(self) -> bool:
        return self == ProtocolStatus.SUCCESS


class ZKPColorError(Exception):
    """Base exception for zkpcolor."""

    def __init__(self, message: str, status: ProtocolStatus = ProtocolStatus.INVALID_INPUT,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.details = details or {}


class SolverError(ZKPColorError):
    """Raised when the exact solver ends in a state it cannot interpret."""
