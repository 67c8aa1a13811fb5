"""Immutable positions inside a view tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal, NamedTuple

from ..errors import TreeError
from .tree import Element, Node, Text, max_offset

Direction = Literal["forward", "backward"]


class PositionRelation(str, Enum):
    """Result of comparing two positions."""

    BEFORE = "before"
    AFTER = "after"
    SAME = "same"
    DIFFERENT = "different"


class WalkStep(NamedTuple):
    """One move of the tree walker.

    ``kind`` is ``"text"``, ``"textBoundary"``, ``"elementStart"``,
    ``"elementEnd"`` or ``"uiElement"``; ``position`` is where the walker lands.
    """

    kind: str
    item: Node
    position: "Position"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Position:
    """Location in the tree: an offset inside an element (children) or a text node (characters)."""

    parent: Node
    offset: int

    def __post_init__(self) -> None:
        if not isinstance(self.parent, (Element, Text)):
            raise TreeError(message="Position parent must be an element or a text node")
        if isinstance(self.offset, bool) or not isinstance(self.offset, int):
            raise TreeError(message="Position offset must be an integer", details={"offset": self.offset})
        if not 0 <= self.offset <= max_offset(self.parent):
            raise TreeError(
                message="Position offset out of bounds",
                details={"offset": self.offset, "max_offset": max_offset(self.parent)},
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_position(cls, position: Position) -> Position:
        """Copy ``position`` as is.

        The copy is not checked against the tree: a stored position may
        point past the end of a node that was edited after it was taken.
        """

        copy = object.__new__(cls)
        object.__setattr__(copy, "parent", position.parent)
        object.__setattr__(copy, "offset", position.offset)
        return copy

    @classmethod
    def create_at(cls, item_or_position: Node | Position, offset: int | str | None = None) -> Position:
        """Create a position from a position copy or from an item and an offset.

        ``offset`` may be an integer, ``"end"``, ``"before"`` or ``"after"``;
        it defaults to ``0``.
        """

        if isinstance(item_or_position, Position):
            return cls.from_position(item_or_position)
        node = item_or_position
        if offset == "end":
            return cls(node, max_offset(node))
        if offset == "before":
            return cls.create_before(node)
        if offset == "after":
            return cls.create_after(node)
        if offset is None:
            return cls(node, 0)
        if isinstance(offset, str):
            raise TreeError(message=f"Unknown position offset {offset!r}")
        return cls(node, offset)

    @classmethod
    def create_before(cls, item: Node) -> Position:
        if item.parent is None:
            raise TreeError(message="You can not make a position before a root")
        return cls(item.parent, item.parent.get_child_index(item))

    @classmethod
    def create_after(cls, item: Node) -> Position:
        if item.parent is None:
            raise TreeError(message="You can not make a position after a root")
        return cls(item.parent, item.parent.get_child_index(item) + 1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def node_after(self) -> Node | None:
        if isinstance(self.parent, Text):
            return None
        return self.parent.get_child(self.offset)

    @property
    def node_before(self) -> Node | None:
        if isinstance(self.parent, Text):
            return None
        return self.parent.get_child(self.offset - 1)

    @property
    def root(self) -> Node:
        return self.parent.root

    @property
    def is_at_start(self) -> bool:
        return self.offset == 0

    @property
    def is_at_end(self) -> bool:
        return self.offset == max_offset(self.parent)

    @property
    def editable_element(self) -> Element | None:
        """Return the closest editable ancestor containing the position."""

        for node in self.parent.get_ancestors(include_self=True, parent_first=True):
            if node.is_("editableElement"):
                return node  # type: ignore[return-value]
        return None

    def get_path(self) -> list[int]:
        return self.parent.get_path() + [self.offset]

    def get_shifted_by(self, shift: int) -> Position:
        return Position(self.parent, max(0, self.offset + shift))

    def compare_with(self, other: Position) -> PositionRelation:
        if self.root is not other.root:
            return PositionRelation.DIFFERENT
        if self.is_equal(other):
            return PositionRelation.SAME
        this_path = self.get_path()
        other_path = other.get_path()
        for mine, theirs in zip(this_path, other_path):
            if mine != theirs:
                return PositionRelation.BEFORE if mine < theirs else PositionRelation.AFTER
        # One path is a prefix of the other.
        if len(this_path) < len(other_path):
            return PositionRelation.BEFORE
        return PositionRelation.AFTER

    def is_before(self, other: Position) -> bool:
        return self.compare_with(other) is PositionRelation.BEFORE

    def is_after(self, other: Position) -> bool:
        return self.compare_with(other) is PositionRelation.AFTER

    def is_equal(self, other: Position) -> bool:
        return self.parent is other.parent and self.offset == other.offset

    # ------------------------------------------------------------------
    # Walking
    # ------------------------------------------------------------------
    def step(self, direction: Direction = "forward") -> WalkStep | None:
        """Return the next walker move from this position, or ``None`` at the root boundary."""

        if direction == "forward":
            return self._step_forward()
        if direction == "backward":
            return self._step_backward()
        raise TreeError(message=f"Unknown walk direction {direction!r}")

    def get_last_matching_position(
        self,
        skip: Callable[[WalkStep], bool],
        direction: Direction = "forward",
    ) -> Position:
        """Walk from this position while ``skip`` accepts each step and return where it stopped."""

        position = self
        while True:
            move = position.step(direction)
            if move is None or not skip(move):
                return position
            position = move.position

    def _step_forward(self) -> WalkStep | None:
        parent = self.parent
        if isinstance(parent, Text):
            if self.offset < len(parent.data):
                return WalkStep("text", parent, Position(parent, len(parent.data)))
            if parent.parent is None:
                return None
            return WalkStep("textBoundary", parent, Position.create_after(parent))
        node = self.node_after
        if node is None:
            if parent.parent is None:
                return None
            return WalkStep("elementEnd", parent, Position.create_after(parent))
        if isinstance(node, Text):
            return WalkStep("text", node, Position.create_after(node))
        if node.is_("uiElement"):
            return WalkStep("uiElement", node, Position.create_after(node))
        return WalkStep("elementStart", node, Position(node, 0))

    def _step_backward(self) -> WalkStep | None:
        parent = self.parent
        if isinstance(parent, Text):
            if self.offset > 0:
                return WalkStep("text", parent, Position(parent, 0))
            if parent.parent is None:
                return None
            return WalkStep("textBoundary", parent, Position.create_before(parent))
        node = self.node_before
        if node is None:
            if parent.parent is None:
                return None
            return WalkStep("elementStart", parent, Position.create_before(parent))
        if isinstance(node, Text):
            return WalkStep("text", node, Position.create_before(node))
        if node.is_("uiElement"):
            return WalkStep("uiElement", node, Position.create_before(node))
        return WalkStep("elementEnd", node, Position(node, max_offset(node)))

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self.parent), self.offset))

    def __repr__(self) -> str:
        return f"Position({self.parent!r}, {self.offset})"


__all__ = ["Direction", "Position", "PositionRelation", "WalkStep"]
