"""Immutable ranges spanning two view positions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import TreeError
from .position import Position, WalkStep
from .tree import Node, Text, max_offset


def _boundary_skip(step: WalkStep) -> bool:
    """Accept moves that only cross non-content boundaries."""

    if step.kind == "textBoundary":
        return True
    return step.item.is_("attributeElement") or step.item.is_("uiElement")


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Range:
    """Pair of positions; ``end`` defaults to ``start`` for a collapsed range."""

    start: Position
    end: Position = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not isinstance(self.start, Position):
            raise TreeError(message="Range start must be a Position")
        if self.end is None:
            object.__setattr__(self, "end", self.start)
        elif not isinstance(self.end, Position):
            raise TreeError(message="Range end must be a Position")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_range(cls, other: Range) -> Range:
        return cls(Position.from_position(other.start), Position.from_position(other.end))

    @classmethod
    def create_in(cls, element: Node) -> Range:
        """Return a range spanning the whole contents of ``element``."""

        return cls(Position(element, 0), Position(element, max_offset(element)))

    @classmethod
    def create_on(cls, item: Node) -> Range:
        """Return a range wrapping ``item`` itself."""

        return cls(Position.create_before(item), Position.create_after(item))

    @classmethod
    def create_collapsed_at(cls, item_or_position: Node | Position, offset: int | str | None = None) -> Range:
        position = Position.create_at(item_or_position, offset)
        return cls(position, position)

    @classmethod
    def create_from_parents_and_offsets(
        cls,
        start_parent: Node,
        start_offset: int,
        end_parent: Node,
        end_offset: int,
    ) -> Range:
        return cls(Position(start_parent, start_offset), Position(end_parent, end_offset))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_collapsed(self) -> bool:
        return self.start.is_equal(self.end)

    @property
    def is_flat(self) -> bool:
        return self.start.parent is self.end.parent

    @property
    def root(self) -> Node:
        return self.start.root

    def is_equal(self, other: Range) -> bool:
        return self.start.is_equal(other.start) and self.end.is_equal(other.end)

    def is_intersecting(self, other: Range) -> bool:
        return self.start.is_before(other.end) and self.end.is_after(other.start)

    def contains_position(self, position: Position) -> bool:
        return position.is_after(self.start) and position.is_before(self.end)

    def get_trimmed(self) -> Range:
        """Return the range narrowed inward past attribute, UI element and text boundaries."""

        start = self.start.get_last_matching_position(_boundary_skip)
        if start.is_after(self.end) or start.is_equal(self.end):
            return Range(start, start)
        end = self.end.get_last_matching_position(_boundary_skip, direction="backward")
        node_after_start = start.node_after
        node_before_end = end.node_before
        if isinstance(node_after_start, Text):
            start = Position(node_after_start, 0)
        if isinstance(node_before_end, Text):
            end = Position(node_before_end, len(node_before_end.data))
        return Range(start, end)

    def get_enlarged(self) -> Range:
        """Return the range widened outward past attribute, UI element and text boundaries."""

        start = self.start.get_last_matching_position(_boundary_skip, direction="backward")
        end = self.end.get_last_matching_position(_boundary_skip)
        if isinstance(start.parent, Text) and start.is_at_start:
            start = Position.create_before(start.parent)
        if isinstance(end.parent, Text) and end.is_at_end:
            end = Position.create_after(end.parent)
        return Range(start, end)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((self.start, self.end))

    def __repr__(self) -> str:
        return f"Range({self.start!r}, {self.end!r})"


__all__ = ["Range"]
