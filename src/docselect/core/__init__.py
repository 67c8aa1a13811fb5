"""Core view tree types: nodes, positions and ranges.

These are the document-model collaborators a selection is built on.
"""

from .position import Position, PositionRelation
from .protocols import PositionLike, RangeLike, TreeItem
from .range import Range
from .tree import (
    AttributeElement,
    ContainerElement,
    EditableElement,
    Element,
    Node,
    RootEditableElement,
    Text,
    UIElement,
)

__all__ = [
    "AttributeElement",
    "ContainerElement",
    "EditableElement",
    "Element",
    "Node",
    "Position",
    "PositionLike",
    "PositionRelation",
    "Range",
    "RangeLike",
    "RootEditableElement",
    "Text",
    "TreeItem",
    "UIElement",
]
