"""Standardized error types for selections and the reference view tree.

Every error carries a machine-readable code and a consistent dictionary
serialization so callers can surface failures without string matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes carried by selection errors."""

    # Range storage errors
    INVALID_RANGE = "invalid_range"
    RANGE_INTERSECTS = "range_intersects"

    # Selection mutation errors
    MISSING_PLACEMENT = "missing_placement"
    NO_ANCHOR = "no_anchor"
    NOT_SELECTABLE = "not_selectable"

    # Tree errors
    TREE_ERROR = "tree_error"

    INTERNAL_ERROR = "internal_error"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class SelectionError(Exception):
    """Base exception class for all selection errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# -----------------------------------------------------------------------------
# Range Storage Errors
# -----------------------------------------------------------------------------

@dataclass
class InvalidRangeError(SelectionError, TypeError):
    """Raised when a value handed to the selection is not a usable range."""

    error_code: str = field(default=ErrorCode.INVALID_RANGE)
    message: str = field(default="Invalid Range")
    details: dict[str, Any] = field(default_factory=dict)

    value: Any = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value_type"] = type(self.value).__name__
        return result


@dataclass
class IntersectingRangeError(SelectionError):
    """Raised when an added range intersects a range already in the selection.

    Both ranges are kept on the error: ``added_range`` is the one being
    inserted and ``intersecting_range`` the stored range it collides with.
    """

    error_code: str = field(default=ErrorCode.RANGE_INTERSECTS)
    message: str = field(
        default="Trying to add a range that intersects with another range from selection"
    )
    details: dict[str, Any] = field(default_factory=dict)

    added_range: Any = field(default=None)
    intersecting_range: Any = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.added_range is not None:
            result["added_range"] = repr(self.added_range)
        if self.intersecting_range is not None:
            result["intersecting_range"] = repr(self.intersecting_range)
        return result


# -----------------------------------------------------------------------------
# Selection Mutation Errors
# -----------------------------------------------------------------------------

@dataclass
class MissingPlacementError(SelectionError):
    """Raised when a selection is set to a tree item without a placement."""

    error_code: str = field(default=ErrorCode.MISSING_PLACEMENT)
    message: str = field(default="Required second parameter when setting selection to node")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class NoAnchorError(SelectionError):
    """Raised when the focus is moved on a selection without ranges."""

    error_code: str = field(default=ErrorCode.NO_ANCHOR)
    message: str = field(default="Cannot set selection focus if there are no ranges in selection")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class NotSelectableError(SelectionError, TypeError):
    """Raised when ``set_to`` receives a value it cannot turn into ranges."""

    error_code: str = field(default=ErrorCode.NOT_SELECTABLE)
    message: str = field(default="Cannot set selection to given place")
    details: dict[str, Any] = field(default_factory=dict)

    value: Any = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value_type"] = type(self.value).__name__
        return result


# -----------------------------------------------------------------------------
# Tree Errors
# -----------------------------------------------------------------------------

@dataclass
class TreeError(SelectionError, ValueError):
    """Raised on misuse of the reference view tree (bad offsets, bad parents)."""

    error_code: str = field(default=ErrorCode.TREE_ERROR)
    message: str = field(default="Invalid tree operation")
    details: dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Utility Functions
# -----------------------------------------------------------------------------

def error_from_dict(data: Mapping[str, Any]) -> SelectionError:
    """Reconstruct a SelectionError from its dictionary representation.

    Args:
        data: Dictionary with 'error' (code) and 'message' keys.

    Returns:
        SelectionError instance (base class, not specific subclass).
    """
    return SelectionError(
        error_code=data.get("error", ErrorCode.INTERNAL_ERROR),
        message=data.get("message", "Unknown error"),
        details=dict(data.get("details", {})),
    )


__all__ = [
    "ErrorCode",
    "SelectionError",
    # Range storage errors
    "InvalidRangeError",
    "IntersectingRangeError",
    # Selection mutation errors
    "MissingPlacementError",
    "NoAnchorError",
    "NotSelectableError",
    # Tree errors
    "TreeError",
    "error_from_dict",
]
