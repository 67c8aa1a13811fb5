"""Selection over the view tree.

A selection stores copies of the ranges it is given, so later changes to
those range objects never reach it, and it hands out copies from every read
(``get_ranges``, ``anchor``, ``focus`` ...). Stored ranges never intersect.

Direction is only remembered for the most recently added range: ``anchor``
and ``focus`` are derived from that range and the backward flag.

Every committed mutation publishes a :class:`~docselect.events.SelectionChanged`
on the selection's event bus, synchronously, before the mutating call returns.
Failed mutations leave the selection exactly as it was and publish nothing.
Handler exceptions are not swallowed: they propagate out of the mutating call.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from ..core.position import Position, PositionRelation
from ..core.protocols import PositionLike, RangeLike
from ..errors import IntersectingRangeError, InvalidRangeError, NoAnchorError
from ..events import EventBus, Handler, SelectionChanged
from ..utils.logging import get_logger
from . import comparison
from .selectable import resolve_selectable

LOGGER = get_logger(__name__)


class Selection:
    """Ordered set of non-intersecting ranges with an anchor/focus direction.

    The constructor takes the same arguments as :meth:`set_to`::

        Selection()                                  # empty
        Selection(other_selection)                   # copy
        Selection(range_, {"backward": True})        # single range
        Selection(position)                          # caret
        Selection(paragraph, "in")                   # whole contents of an element
        Selection(image, "on", {"fake": True, "label": "Image"})
        Selection(text, 2)                           # caret at offset 2
        Selection([range_a, range_b])                # several ranges

    Args:
        emitter: Event bus to publish change events on. A private bus is
            created when omitted.
    """

    def __init__(
        self,
        selectable: Any = None,
        place_or_offset_or_options: Any = None,
        options: Any = None,
        *,
        emitter: EventBus | None = None,
    ) -> None:
        self._ranges: list[Any] = []
        self._last_range_backward = False
        self._is_fake = False
        self._fake_selection_label = ""
        self._emitter: EventBus = emitter if emitter is not None else EventBus()
        self.set_to(selectable, place_or_offset_or_options, options)

    # ------------------------------------------------------------------
    # Fake selection metadata
    # ------------------------------------------------------------------
    @property
    def is_fake(self) -> bool:
        """Whether the selection should be rendered without a native selection."""

        return self._is_fake

    @property
    def fake_selection_label(self) -> str:
        """Accessibility label of a fake selection; empty when not fake."""

        return self._fake_selection_label

    # ------------------------------------------------------------------
    # Direction model
    # ------------------------------------------------------------------
    @property
    def anchor(self) -> Any:
        """Start of the last gesture: ``end`` of the last added range when backward, else ``start``."""

        if not self._ranges:
            return None
        last = self._ranges[-1]
        anchor = last.end if self._last_range_backward else last.start
        return type(anchor).from_position(anchor)

    @property
    def focus(self) -> Any:
        if not self._ranges:
            return None
        last = self._ranges[-1]
        focus = last.start if self._last_range_backward else last.end
        return type(focus).from_position(focus)

    @property
    def is_collapsed(self) -> bool:
        return len(self._ranges) == 1 and self._ranges[0].is_collapsed

    @property
    def range_count(self) -> int:
        return len(self._ranges)

    @property
    def is_backward(self) -> bool:
        return not self.is_collapsed and self._last_range_backward

    @property
    def editable_element(self) -> Any:
        """Editable element containing the anchor, or ``None``."""

        anchor = self.anchor
        if anchor is None:
            return None
        return anchor.editable_element

    @property
    def emitter(self) -> EventBus:
        return self._emitter

    # ------------------------------------------------------------------
    # Range set queries
    # ------------------------------------------------------------------
    def get_ranges(self) -> Iterator[Any]:
        """Yield copies of the stored ranges in insertion order."""

        for stored in tuple(self._ranges):
            yield type(stored).from_range(stored)

    def get_first_range(self) -> Any:
        """Return a copy of the range starting before all others, or ``None``.

        Among collapsed ranges sharing a position the earliest added one wins.
        """

        first = None
        for stored in self._ranges:
            if first is None or stored.start.is_before(first.start):
                first = stored
        return type(first).from_range(first) if first is not None else None

    def get_last_range(self) -> Any:
        """Return a copy of the range ending after all others, or ``None``."""

        last = None
        for stored in self._ranges:
            if last is None or stored.end.is_after(last.end):
                last = stored
        return type(last).from_range(last) if last is not None else None

    def get_first_position(self) -> Any:
        first = self.get_first_range()
        return first.start if first is not None else None

    def get_last_position(self) -> Any:
        last = self.get_last_range()
        return last.end if last is not None else None

    def get_selected_element(self) -> Any:
        """Return the element the single range wraps exactly, or ``None``."""

        if self.range_count != 1:
            return None
        only = self.get_first_range()
        node_after_start = only.start.node_after
        node_before_end = only.end.node_before
        if node_after_start is None or node_after_start is not node_before_end:
            return None
        if not node_after_start.is_("element"):
            return None
        return node_after_start

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------
    def is_equal(self, other: Selection) -> bool:
        return comparison.is_equal(self, other)

    def is_similar(self, other: Selection) -> bool:
        return comparison.is_similar(self, other)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def set_to(
        self,
        selectable: Any = None,
        place_or_offset_or_options: Any = None,
        options: Any = None,
    ) -> None:
        """Replace the selection's ranges and fake state.

        ``selectable`` may be ``None``, another selection, a range, a
        position, a tree item (with a placement of ``"in"``, ``"on"`` or an
        offset) or an iterable of ranges. For tree items the options come
        from the third argument, otherwise from the second.

        Raises:
            MissingPlacementError: A tree item was given without a placement.
            NotSelectableError: ``selectable`` is of none of the accepted kinds.
            InvalidRangeError: An iterable yielded something that is not a range.
            IntersectingRangeError: Two of the new ranges intersect.
        """

        resolved = resolve_selectable(selectable, place_or_offset_or_options, options)
        self._replace_ranges(resolved.ranges, resolved.backward)
        self._is_fake = resolved.is_fake
        self._fake_selection_label = resolved.fake_label
        LOGGER.debug(
            "Selection set: %d range(s), backward=%s, fake=%s",
            len(self._ranges),
            self._last_range_backward,
            self._is_fake,
        )
        self.fire("change")

    def relocate_focus(self, item_or_position: Any, offset: int | str | None = None) -> None:
        """Move the focus of the last added range, keeping its anchor.

        ``item_or_position`` is a position, or a tree item combined with
        ``offset`` (an integer, ``"end"``, ``"before"`` or ``"after"``).
        Other ranges are left untouched. Moving the focus onto itself is a
        no-op and publishes nothing.

        Raises:
            NoAnchorError: The selection has no ranges.
            IntersectingRangeError: The extended range would intersect another
                stored range; the selection is left unchanged.
        """

        if not self._ranges:
            raise NoAnchorError()

        if isinstance(item_or_position, PositionLike):
            new_focus = type(item_or_position).from_position(item_or_position)
        else:
            new_focus = Position.create_at(item_or_position, offset)

        if new_focus.compare_with(self.focus) == PositionRelation.SAME:
            LOGGER.debug("Focus already at %r; nothing to do", new_focus)
            return

        anchor = self.anchor
        previous_backward = self._last_range_backward
        last = self._ranges.pop()
        range_type = type(last)
        try:
            if new_focus.compare_with(anchor) == PositionRelation.BEFORE:
                self._insert_range(range_type(new_focus, anchor), backward=True)
            else:
                self._insert_range(range_type(anchor, new_focus))
        except Exception:
            self._ranges.append(last)
            self._last_range_backward = previous_backward
            raise

        LOGGER.debug("Focus moved, backward=%s", self._last_range_backward)
        self.fire("change")

    set_focus = relocate_focus

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------
    def fire(self, name: str = "change") -> None:
        """Publish a change event on the selection's bus.

        The mutation is already committed. An exception raised by a handler,
        including one from a nested mutation, reaches the caller of the
        mutating method.
        """

        self._emitter.publish(SelectionChanged(selection=self, name=name), raise_errors=True)

    def on_change(self, handler: Handler[SelectionChanged]) -> None:
        """Subscribe ``handler`` to this selection's change events.

        On a shared bus the handler also sees other selections' events;
        use ``event.selection`` to filter.
        """

        self._emitter.subscribe(SelectionChanged, handler)

    def off_change(self, handler: Handler[SelectionChanged]) -> None:
        self._emitter.unsubscribe(SelectionChanged, handler)

    # ------------------------------------------------------------------
    # Range set internals
    # ------------------------------------------------------------------
    def _replace_ranges(self, new_ranges: Iterable[Any], last_backward: bool = False) -> None:
        """Swap in ``new_ranges`` all at once; on any failure nothing changes."""

        staged: list[Any] = []
        for candidate in new_ranges:
            staged.append(self._checked_copy(candidate, staged))
        self._ranges = staged
        self._last_range_backward = bool(last_backward)

    def _insert_range(self, candidate: Any, backward: bool = False) -> None:
        copy = self._checked_copy(candidate, self._ranges)
        self._ranges.append(copy)
        self._last_range_backward = bool(backward)

    @staticmethod
    def _checked_copy(candidate: Any, stored_ranges: Iterable[Any]) -> Any:
        if not isinstance(candidate, RangeLike):
            raise InvalidRangeError(value=candidate)
        for stored in stored_ranges:
            if candidate.is_intersecting(stored):
                raise IntersectingRangeError(
                    added_range=candidate,
                    intersecting_range=type(stored).from_range(stored),
                )
        return type(candidate).from_range(candidate)

    def __repr__(self) -> str:
        return (
            f"<Selection ranges={len(self._ranges)} backward={self.is_backward}"
            f" fake={self._is_fake}>"
        )


__all__ = ["Selection"]
