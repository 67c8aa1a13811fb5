"""Capability protocols the selection relies on.

The selection only talks to positions, ranges and tree items through these
protocols, so any tree implementation offering the same surface can back it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PositionLike(Protocol):
    """Totally ordered location inside a document tree."""

    @property
    def node_after(self) -> Any:
        ...

    @property
    def node_before(self) -> Any:
        ...

    @property
    def editable_element(self) -> Any:
        ...

    def compare_with(self, other: Any) -> Any:
        ...

    def is_before(self, other: Any) -> bool:
        ...

    def is_after(self, other: Any) -> bool:
        ...

    def is_equal(self, other: Any) -> bool:
        ...

    @classmethod
    def from_position(cls, position: Any) -> Any:
        ...


@runtime_checkable
class RangeLike(Protocol):
    """Pair of positions that can be compared, intersected, copied and trimmed."""

    @property
    def start(self) -> Any:
        ...

    @property
    def end(self) -> Any:
        ...

    @property
    def is_collapsed(self) -> bool:
        ...

    def is_equal(self, other: Any) -> bool:
        ...

    def is_intersecting(self, other: Any) -> bool:
        ...

    def get_trimmed(self) -> Any:
        ...

    @classmethod
    def from_range(cls, other: Any) -> Any:
        ...


@runtime_checkable
class TreeItem(Protocol):
    """Node of the document tree."""

    @property
    def parent(self) -> Any:
        ...

    @property
    def index(self) -> int | None:
        ...

    def is_(self, type_name: str) -> bool:
        ...


__all__ = ["PositionLike", "RangeLike", "TreeItem"]
