"""docselect: multi-range, directional document selections over a view tree."""

from .core import (
    AttributeElement,
    ContainerElement,
    EditableElement,
    Element,
    Node,
    Position,
    PositionRelation,
    Range,
    RootEditableElement,
    Text,
    UIElement,
)
from .errors import (
    IntersectingRangeError,
    InvalidRangeError,
    MissingPlacementError,
    NoAnchorError,
    NotSelectableError,
    SelectionError,
    TreeError,
)
from .events import EventBus, SelectionChanged
from .view import Selection, SelectionOptions

__all__ = [
    "AttributeElement",
    "ContainerElement",
    "EditableElement",
    "Element",
    "EventBus",
    "IntersectingRangeError",
    "InvalidRangeError",
    "MissingPlacementError",
    "NoAnchorError",
    "Node",
    "NotSelectableError",
    "Position",
    "PositionRelation",
    "Range",
    "RootEditableElement",
    "Selection",
    "SelectionChanged",
    "SelectionError",
    "SelectionOptions",
    "Text",
    "TreeError",
    "UIElement",
]
