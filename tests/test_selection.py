"""Unit tests for :mod:`docselect.view.selection`."""

from __future__ import annotations

import itertools

import pytest

from docselect.core import Position, Range
from docselect.errors import (
    IntersectingRangeError,
    InvalidRangeError,
    MissingPlacementError,
    NoAnchorError,
    NotSelectableError,
    TreeError,
)
from docselect.events import EventBus, SelectionChanged
from docselect.view import Selection, SelectionOptions


def _ranges(selection: Selection) -> list[Range]:
    return list(selection.get_ranges())


@pytest.fixture
def points(tree) -> list[Position]:
    """Positions P0..P3 inside the ``foo`` text node."""
    return [Position(tree.foo, offset) for offset in range(4)]


@pytest.fixture
def events() -> tuple[EventBus, list[SelectionChanged]]:
    bus: EventBus = EventBus()
    received: list[SelectionChanged] = []
    bus.subscribe(SelectionChanged, received.append)
    return bus, received


# =============================================================================
# Construction
# =============================================================================


class TestEmptySelection:
    """Tests for a selection without ranges."""

    def test_defaults(self) -> None:
        """An empty selection has no anchor, focus or ranges."""
        selection = Selection()
        assert selection.range_count == 0
        assert selection.anchor is None
        assert selection.focus is None
        assert not selection.is_collapsed
        assert not selection.is_backward
        assert not selection.is_fake
        assert selection.fake_selection_label == ""
        assert _ranges(selection) == []

    def test_queries_return_none(self) -> None:
        """Range and element queries return None when empty."""
        selection = Selection()
        assert selection.get_first_range() is None
        assert selection.get_last_range() is None
        assert selection.get_first_position() is None
        assert selection.get_last_position() is None
        assert selection.get_selected_element() is None
        assert selection.editable_element is None

    def test_empty_with_fake_options(self) -> None:
        """Fake metadata of an empty selection comes from the second argument."""
        selection = Selection(None, {"fake": True, "label": "Widget"})
        assert selection.is_fake
        assert selection.fake_selection_label == "Widget"
        assert selection.range_count == 0


class TestFromRange:
    """Tests for selections built from a single range."""

    def test_forward_range(self, points) -> None:
        """A forward range has its anchor at start and focus at end."""
        selection = Selection(Range(points[0], points[3]))
        assert selection.anchor == points[0]
        assert selection.focus == points[3]
        assert not selection.is_backward

    def test_backward_range(self, points) -> None:
        """A backward range has its anchor at end and focus at start."""
        selection = Selection(Range(points[0], points[3]), {"backward": True})
        assert selection.anchor == points[3]
        assert selection.focus == points[0]
        assert selection.is_backward

    def test_backward_via_options_object(self, points) -> None:
        """SelectionOptions works wherever an options mapping does."""
        selection = Selection(Range(points[0], points[3]), SelectionOptions(backward=True))
        assert selection.is_backward

    def test_collapsed_range_is_never_backward(self, points) -> None:
        """A collapsed selection is not backward even when asked to be."""
        selection = Selection(Range(points[1]), {"backward": True})
        assert selection.is_collapsed
        assert not selection.is_backward

    def test_fake_label_kept_only_when_fake(self, points) -> None:
        """The label is dropped unless the fake flag is set."""
        fake = Selection(Range(points[0], points[1]), {"fake": True, "label": "Caption"})
        not_fake = Selection(Range(points[0], points[1]), {"fake": False, "label": "Caption"})
        unlabelled = Selection(Range(points[0], points[1]), {"fake": True})
        assert fake.is_fake and fake.fake_selection_label == "Caption"
        assert not not_fake.is_fake and not_fake.fake_selection_label == ""
        assert unlabelled.is_fake and unlabelled.fake_selection_label == ""


class TestFromPosition:
    """Tests for selections built from a position."""

    def test_collapsed_at_position(self, points) -> None:
        """A position gives a single collapsed range."""
        selection = Selection(points[1])
        assert selection.is_collapsed
        assert selection.range_count == 1
        assert selection.anchor == points[1]
        assert selection.focus == points[1]

    def test_editable_element(self, tree, points) -> None:
        """editable_element is resolved from the anchor."""
        assert Selection(points[1]).editable_element is tree.root

    def test_position_ignores_backward_option(self, points) -> None:
        """A caret is stored without direction whatever the options say."""
        selection = Selection(points[1], {"backward": True, "fake": True, "label": "Caret"})
        assert selection._last_range_backward is False
        assert selection.is_fake
        assert selection.fake_selection_label == "Caret"



class TestFromItemPlacement:
    """Tests for selections built from a tree item and a placement."""

    def test_in(self, tree) -> None:
        """'in' selects the contents of the element."""
        selection = Selection(tree.bold, "in")
        assert _ranges(selection) == [Range.create_in(tree.bold)]

    def test_on(self, tree) -> None:
        """'on' selects the element itself."""
        selection = Selection(tree.img, "on")
        assert _ranges(selection) == [Range.create_on(tree.img)]

    def test_offset(self, tree) -> None:
        """Any other placement is an offset for a collapsed range."""
        assert _ranges(Selection(tree.foo, 2)) == [Range(Position(tree.foo, 2))]
        assert _ranges(Selection(tree.first, "end")) == [Range(Position(tree.first, 3))]
        assert _ranges(Selection(tree.bold, "after")) == [Range(Position(tree.first, 2))]
        assert _ranges(Selection(tree.foo, 0)) == [Range(Position(tree.foo, 0))]

    def test_options_come_from_third_argument(self, tree) -> None:
        """For tree items, direction and fake metadata use the third argument."""
        selection = Selection(tree.img, "on", {"backward": True, "fake": True, "label": "Image"})
        assert selection.is_backward
        assert selection.is_fake
        assert selection.fake_selection_label == "Image"
        assert selection.anchor == Position(tree.second, 2)

    def test_missing_placement(self, tree) -> None:
        """A tree item without a placement is rejected."""
        with pytest.raises(MissingPlacementError):
            Selection(tree.img)


class TestFromRangeList:
    """Tests for selections built from several ranges."""

    def test_multiple_ranges(self, tree, points) -> None:
        """Every range is stored in insertion order."""
        first = Range(points[0], points[1])
        second = Range.create_in(tree.baz)
        selection = Selection([first, second])
        assert selection.range_count == 2
        assert _ranges(selection) == [first, second]

    def test_backward_applies_to_last_range(self, tree, points) -> None:
        """The backward option describes the last range only."""
        last = Range(Position(tree.baz, 0), Position(tree.baz, 2))
        selection = Selection([Range(points[0], points[1]), last], {"backward": True})
        assert selection.is_backward
        assert selection.anchor == Position(tree.baz, 2)
        assert selection.focus == Position(tree.baz, 0)

    def test_generator_is_accepted(self, tree, points) -> None:
        """Any iterable of ranges works, including one-shot generators."""
        source = [Range(points[0], points[1]), Range.create_in(tree.baz)]
        selection = Selection(item for item in source)
        assert _ranges(selection) == source

    def test_empty_iterable(self) -> None:
        """An empty iterable clears the selection."""
        assert Selection([]).range_count == 0

    def test_two_collapsed_ranges_are_not_collapsed(self, points) -> None:
        """Only a single collapsed range makes the selection collapsed."""
        selection = Selection([Range(points[1]), Range(points[2])])
        assert selection.range_count == 2
        assert not selection.is_collapsed

    def test_non_range_item(self, points) -> None:
        """Items that are not ranges are rejected."""
        with pytest.raises(InvalidRangeError):
            Selection([Range(points[0], points[1]), points[2]])

    def test_caller_list_is_not_aliased(self, tree, points) -> None:
        """Changing the caller's list afterwards does not change the selection."""
        source = [Range(points[0], points[1])]
        selection = Selection(source)
        source.append(Range.create_in(tree.baz))
        assert selection.range_count == 1


class TestFromSelection:
    """Tests for copying another selection."""

    def test_copies_ranges_direction_and_fake_state(self, tree, points) -> None:
        """Ranges, direction and fake metadata are taken from the other selection."""
        source = Selection(
            [Range.create_in(tree.baz), Range(points[0], points[2])],
            {"backward": True, "fake": True, "label": "Copied"},
        )
        copy = Selection(source)
        assert _ranges(copy) == _ranges(source)
        assert copy.is_backward
        assert copy.anchor == source.anchor
        assert copy.is_fake
        assert copy.fake_selection_label == "Copied"

    def test_copy_is_independent(self, tree, points) -> None:
        """Changing the copy leaves the source alone."""
        source = Selection(Range(points[0], points[2]))
        copy = Selection(source)
        copy.set_to(tree.baz, "in")
        assert _ranges(source) == [Range(points[0], points[2])]

    def test_set_to_self(self, points) -> None:
        """Setting a selection to itself keeps its state."""
        selection = Selection(Range(points[0], points[2]), {"backward": True})
        selection.set_to(selection)
        assert _ranges(selection) == [Range(points[0], points[2])]
        assert selection.is_backward


class TestNotSelectable:
    """Tests for values that cannot become a selection."""

    @pytest.mark.parametrize("value", [42, "text", {"start": 0}, object(), 3.5])
    def test_rejected(self, value) -> None:
        """Values of unknown kinds raise NotSelectableError."""
        with pytest.raises(NotSelectableError):
            Selection(value)

    def test_not_selectable_is_type_error(self) -> None:
        """NotSelectableError can be caught as a TypeError."""
        with pytest.raises(TypeError):
            Selection(42)


# =============================================================================
# Range set
# =============================================================================


class TestEditedTree:
    """Tests for reading a selection after the tree changed under it."""

    def test_reads_after_text_shrinks(self, tree) -> None:
        """anchor, focus and get_ranges keep working on stale offsets."""
        selection = Selection(Position(tree.foo, 3))
        tree.foo.data = "f"

        anchor = selection.anchor
        assert anchor.parent is tree.foo
        assert anchor.offset == 3
        assert selection.focus.offset == 3
        (stored,) = _ranges(selection)
        assert stored.start.parent is tree.foo
        assert stored.start.offset == 3

    def test_compare_after_children_removed(self, tree) -> None:
        """Comparisons and copies work after the selected node was removed."""
        selection = Selection(Range(Position(tree.second, 1), Position(tree.second, 4)))
        tree.second.remove_children(1, 3)

        copy = Selection(selection)
        assert copy.is_equal(selection)
        assert selection.get_first_range().end.offset == 4
        assert selection.get_last_position().offset == 4

    def test_new_positions_are_still_validated(self, tree) -> None:
        """Only copies skip the bounds check; new positions are still checked."""
        tree.foo.data = "f"
        with pytest.raises(TreeError):
            Position(tree.foo, 3)


class TestRangeCopies:
    """Tests for the copy-on-read/copy-on-write boundary."""

    def test_returned_ranges_are_copies(self, points) -> None:
        """get_ranges yields equal ranges that are not the inserted objects."""
        inserted = Range(points[0], points[2])
        selection = Selection(inserted)
        returned = _ranges(selection)
        assert returned == [inserted]
        assert returned[0] is not inserted
        assert returned[0] is not selection._ranges[0]

    def test_each_read_returns_new_objects(self, points) -> None:
        """Repeated reads never share objects."""
        selection = Selection(Range(points[0], points[2]))
        assert _ranges(selection)[0] is not _ranges(selection)[0]
        assert selection.anchor is not selection.anchor
        assert selection.get_first_range() is not selection.get_first_range()

    def test_get_ranges_is_restartable(self, tree, points) -> None:
        """Each call to get_ranges starts a fresh iteration."""
        selection = Selection([Range(points[0], points[1]), Range.create_in(tree.baz)])
        ranges = selection.get_ranges
        assert len(list(ranges())) == 2
        assert len(list(ranges())) == 2

    def test_first_and_last_range(self, tree, points) -> None:
        """First/last are chosen by document order, not insertion order."""
        in_baz = Range(Position(tree.baz, 0), Position(tree.baz, 1))
        in_foo = Range(points[0], points[1])
        in_bar = Range(Position(tree.bar, 0), Position(tree.bar, 1))
        selection = Selection([in_baz, in_foo, in_bar])
        assert selection.get_first_range() == in_foo
        assert selection.get_last_range() == in_baz
        assert selection.get_first_position() == points[0]
        assert selection.get_last_position() == Position(tree.baz, 1)

    def test_coinciding_carets_are_resolved_deterministically(self, points) -> None:
        """Two carets at one position are both accepted and ties resolve the same way each time."""
        selection = Selection([Range(points[1]), Range(points[1])])
        assert selection.range_count == 2
        assert selection.get_first_range() == Range(points[1])
        assert selection.get_first_range() == selection.get_first_range()
        assert selection.get_last_range() == selection.get_last_range()


class TestIntersection:
    """Tests for the non-intersection invariant."""

    def test_overlapping_batch_rejected(self, points) -> None:
        """Intersecting ranges raise with both ranges attached."""
        stored = Range(points[0], points[2])
        added = Range(points[1], points[3])
        with pytest.raises(IntersectingRangeError) as excinfo:
            Selection([stored, added])
        assert excinfo.value.added_range == added
        assert excinfo.value.intersecting_range == stored

    def test_failed_batch_leaves_selection_untouched(self, tree, points, events) -> None:
        """Batch replacement is all-or-nothing: a failure keeps the previous state."""
        bus, received = events
        previous = Range.create_in(tree.baz)
        selection = Selection(previous, {"backward": True, "fake": True, "label": "Old"}, emitter=bus)
        received.clear()

        with pytest.raises(IntersectingRangeError):
            selection.set_to([Range(points[0], points[2]), Range(points[1], points[3])])

        assert _ranges(selection) == [previous]
        assert selection.is_backward
        assert selection.fake_selection_label == "Old"
        assert received == []

    def test_failed_batch_with_invalid_item_leaves_selection_untouched(self, tree, points) -> None:
        """A non-range item late in a batch does not leave earlier items behind."""
        selection = Selection(tree.baz, "in")
        with pytest.raises(InvalidRangeError):
            selection.set_to([Range(points[0], points[1]), "not a range"])
        assert _ranges(selection) == [Range.create_in(tree.baz)]

    def test_single_insert_rejects_overlap(self, points) -> None:
        """Inserting an overlapping range leaves the stored set as it was."""
        selection = Selection(Range(points[0], points[2]))
        stored_before = list(selection._ranges)

        with pytest.raises(IntersectingRangeError):
            selection._insert_range(Range(points[1], points[3]))

        assert selection._ranges == stored_before
        assert all(a is b for a, b in zip(selection._ranges, stored_before))

    def test_touching_ranges_allowed(self, points) -> None:
        """Ranges sharing only a boundary do not intersect."""
        selection = Selection([Range(points[0], points[1]), Range(points[1], points[3])])
        assert selection.range_count == 2

    def test_invariant_holds_for_all_reachable_states(self, tree, points) -> None:
        """No sequence of mutations leaves intersecting ranges behind."""
        candidates = [
            Range(points[0], points[2]),
            Range(points[1], points[3]),
            Range.create_in(tree.baz),
            Range(Position(tree.bar, 1)),
        ]
        selection = Selection()
        for size in (1, 2, 3):
            for batch in itertools.permutations(candidates, size):
                try:
                    selection.set_to(list(batch))
                except IntersectingRangeError:
                    pass
                stored = selection._ranges
                for left, right in itertools.combinations(stored, 2):
                    assert not left.is_intersecting(right)


# =============================================================================
# Focus relocation
# =============================================================================


class TestRelocateFocus:
    """Tests for moving the focus."""

    def test_requires_anchor(self, points) -> None:
        """Moving the focus of an empty selection raises."""
        with pytest.raises(NoAnchorError):
            Selection().relocate_focus(points[0])

    def test_extend_forward(self, points, events) -> None:
        """Moving the focus after the anchor extends forward."""
        bus, received = events
        selection = Selection(points[1], emitter=bus)
        received.clear()

        selection.relocate_focus(points[3])

        assert _ranges(selection) == [Range(points[1], points[3])]
        assert selection.anchor == points[1]
        assert selection.focus == points[3]
        assert not selection.is_backward
        assert len(received) == 1

    def test_direction_flip(self, points) -> None:
        """Moving the focus before the anchor makes the selection backward."""
        selection = Selection(points[2])
        selection.relocate_focus(points[0])
        assert _ranges(selection) == [Range(points[0], points[2])]
        assert selection.is_backward
        assert selection.anchor == points[2]
        assert selection.focus == points[0]

    def test_backward_to_forward(self, points) -> None:
        """A backward selection turns forward when the focus passes the anchor."""
        selection = Selection(Range(points[0], points[2]), {"backward": True})
        selection.relocate_focus(points[3])
        assert _ranges(selection) == [Range(points[2], points[3])]
        assert not selection.is_backward

    def test_same_focus_is_noop(self, points, events) -> None:
        """Moving the focus onto itself changes nothing and fires nothing."""
        bus, received = events
        selection = Selection(Range(points[0], points[2]), emitter=bus)
        received.clear()
        stored_list = selection._ranges
        stored_range = selection._ranges[0]

        selection.relocate_focus(points[2])

        assert received == []
        assert selection._ranges is stored_list
        assert selection._ranges[0] is stored_range

    def test_item_and_offset(self, tree, points) -> None:
        """The focus may be given as a tree item plus an offset."""
        selection = Selection(points[0])
        selection.relocate_focus(tree.foo, 3)
        assert selection.focus == points[3]
        selection.relocate_focus(tree.baz, "end")
        assert selection.focus == Position(tree.baz, 3)
        selection.relocate_focus(tree.bold, "before")
        assert selection.focus == Position(tree.first, 1)

    def test_item_without_offset_uses_start(self, tree, points) -> None:
        """A tree item alone places the focus at its offset 0."""
        selection = Selection(points[0])
        selection.relocate_focus(tree.bar)
        assert selection.focus == Position(tree.bar, 0)

    def test_only_last_range_changes(self, tree, points) -> None:
        """Earlier ranges keep their place when the focus moves."""
        kept = Range(points[0], points[1])
        selection = Selection([kept, Range(Position(tree.baz, 0), Position(tree.baz, 1))])
        selection.relocate_focus(Position(tree.baz, 3))
        assert _ranges(selection) == [kept, Range(Position(tree.baz, 0), Position(tree.baz, 3))]

    def test_intersection_rolls_back(self, tree, points, events) -> None:
        """A focus move colliding with an earlier range raises and keeps the old state."""
        bus, received = events
        earlier = Range(Position(tree.baz, 0), Position(tree.baz, 1))
        last = Range(points[0], points[1])
        selection = Selection([earlier, last], {"backward": True}, emitter=bus)
        received.clear()

        with pytest.raises(IntersectingRangeError) as excinfo:
            selection.relocate_focus(Position(tree.baz, 2))

        assert excinfo.value.intersecting_range == earlier
        assert _ranges(selection) == [earlier, last]
        assert selection.is_backward
        assert selection.anchor == points[1]
        assert received == []

    def test_set_focus_alias(self, points) -> None:
        """set_focus is the same operation as relocate_focus."""
        selection = Selection(points[0])
        selection.set_focus(points[2])
        assert selection.focus == points[2]


# =============================================================================
# Selected element
# =============================================================================


class TestSelectedElement:
    """Tests for get_selected_element."""

    def test_range_on_element(self, tree) -> None:
        """A range exactly around an element selects it."""
        assert Selection(Range.create_on(tree.img)).get_selected_element() is tree.img
        assert Selection(tree.bold, "on").get_selected_element() is tree.bold

    def test_text_characters(self, points) -> None:
        """A range over characters selects no element."""
        assert Selection(Range(points[0], points[2])).get_selected_element() is None

    def test_range_on_text_node(self, tree) -> None:
        """A range around a text node selects no element."""
        assert Selection(tree.foo, "on").get_selected_element() is None

    def test_range_over_several_nodes(self, tree) -> None:
        """A range spanning more than one node selects no element."""
        selection = Selection(Range(Position(tree.first, 0), Position(tree.first, 2)))
        assert selection.get_selected_element() is None

    def test_multiple_ranges(self, tree) -> None:
        """Selections with more than one range select no element."""
        selection = Selection([Range.create_on(tree.img), Range.create_in(tree.baz)])
        assert selection.get_selected_element() is None


# =============================================================================
# Change notification
# =============================================================================


class TestChangeEvents:
    """Tests for change events."""

    def test_constructor_fires_change(self, events) -> None:
        """Building a selection announces the initial state."""
        bus, received = events
        selection = Selection(emitter=bus)
        assert len(received) == 1
        assert received[0].selection is selection
        assert received[0].name == "change"

    def test_set_to_empty_still_fires(self, events) -> None:
        """Clearing an already empty selection still fires."""
        bus, received = events
        selection = Selection(emitter=bus)
        selection.set_to(None)
        assert len(received) == 2

    def test_handler_sees_new_state(self, points) -> None:
        """Handlers run after the mutation has been committed."""
        selection = Selection()
        seen: list[int] = []
        selection.on_change(lambda event: seen.append(event.selection.range_count))

        selection.set_to(Range(points[0], points[1]))

        assert seen == [1]

    def test_reentrant_handler(self, points) -> None:
        """A handler can mutate the selection it is notified about."""
        selection = Selection()
        seen: list[int] = []

        def clear_once(event: SelectionChanged) -> None:
            seen.append(event.selection.range_count)
            if event.selection.range_count:
                event.selection.set_to(None)

        selection.on_change(clear_once)
        selection.set_to(Range(points[0], points[1]))

        assert seen == [1, 0]
        assert selection.range_count == 0

    def test_nested_failure_reaches_caller(self, points) -> None:
        """A failing mutation inside a handler is raised from the outer call."""
        selection = Selection()
        committed = Range(points[0], points[1])

        def overlap_once(event: SelectionChanged) -> None:
            if event.selection.range_count == 1:
                event.selection.set_to([Range(points[0], points[2]), Range(points[1], points[3])])

        selection.on_change(overlap_once)

        with pytest.raises(IntersectingRangeError):
            selection.set_to(committed)

        assert _ranges(selection) == [committed]

    def test_handler_error_reaches_caller(self, points) -> None:
        """Handler exceptions are not swallowed by the selection's bus."""
        selection = Selection(points[0])

        def failing(event: SelectionChanged) -> None:
            raise RuntimeError("listener broke")

        selection.on_change(failing)

        with pytest.raises(RuntimeError, match="listener broke"):
            selection.relocate_focus(points[2])
        assert selection.focus == points[2]

    def test_off_change(self, points) -> None:
        """off_change stops delivery."""
        selection = Selection()
        seen: list[SelectionChanged] = []
        selection.on_change(seen.append)
        selection.off_change(seen.append)
        selection.set_to(points[0])
        assert seen == []

    def test_private_bus_per_selection(self) -> None:
        """Selections without an explicit emitter do not share events."""
        first = Selection()
        second = Selection()
        assert first.emitter is not second.emitter

    def test_failed_set_to_fires_nothing(self, tree, events) -> None:
        """Rejected input leaves no trace in the event stream."""
        bus, received = events
        selection = Selection(emitter=bus)
        received.clear()
        with pytest.raises(MissingPlacementError):
            selection.set_to(tree.img)
        assert received == []
