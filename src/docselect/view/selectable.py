"""Normalization of the values a selection can be set to.

``Selection.set_to`` accepts several kinds of input. Each kind is classified
once into one of the variant dataclasses below and then resolved into a
:class:`ResolvedSelection`, the single form the selection stores from.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from ..core.position import Position
from ..core.protocols import PositionLike, RangeLike, TreeItem
from ..core.range import Range
from ..errors import MissingPlacementError, NotSelectableError

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from .selection import Selection


@dataclass(slots=True, frozen=True)
class SelectionOptions:
    """Direction and fake-selection flags accompanying a selectable."""

    backward: bool = False
    fake: bool = False
    label: str = ""

    @classmethod
    def from_value(cls, value: Any) -> SelectionOptions:
        """Coerce ``value`` into options; anything that is not an options record yields defaults."""

        if isinstance(value, SelectionOptions):
            return value
        if isinstance(value, Mapping):
            return cls(
                backward=bool(value.get("backward")),
                fake=bool(value.get("fake")),
                label=str(value.get("label") or ""),
            )
        return cls()

    @property
    def fake_label(self) -> str:
        """Return the label to store; discarded unless the selection is fake."""

        return (self.label or "") if self.fake else ""


@dataclass(slots=True, frozen=True)
class Empty:
    options: SelectionOptions = SelectionOptions()


@dataclass(slots=True, frozen=True)
class FromSelection:
    selection: "Selection"


@dataclass(slots=True, frozen=True)
class FromRange:
    range: Any
    options: SelectionOptions = SelectionOptions()


@dataclass(slots=True, frozen=True)
class FromPosition:
    position: Any
    options: SelectionOptions = SelectionOptions()


@dataclass(slots=True, frozen=True)
class FromItemPlacement:
    item: Any
    placement: int | str
    options: SelectionOptions = SelectionOptions()


@dataclass(slots=True, frozen=True)
class FromRangeList:
    ranges: Iterable[Any]
    options: SelectionOptions = SelectionOptions()


Selectable = Union[Empty, FromSelection, FromRange, FromPosition, FromItemPlacement, FromRangeList]


@dataclass(slots=True, frozen=True)
class ResolvedSelection:
    """Ranges, direction and fake metadata a selection should switch to.

    ``ranges`` may be a one-shot iterable; it is consumed exactly once.
    """

    ranges: Iterable[Any]
    backward: bool
    is_fake: bool
    fake_label: str


def classify(
    selectable: Any,
    place_or_offset_or_options: Any = None,
    options: Any = None,
) -> Selectable:
    """Map a raw ``set_to`` argument triple onto a selectable variant.

    Raises:
        MissingPlacementError: A tree item was given without a placement.
        NotSelectableError: The value matches none of the accepted kinds.
    """

    from .selection import Selection

    if selectable is None:
        return Empty(SelectionOptions.from_value(place_or_offset_or_options))
    if isinstance(selectable, Selection):
        return FromSelection(selectable)
    if isinstance(selectable, RangeLike):
        return FromRange(selectable, SelectionOptions.from_value(place_or_offset_or_options))
    if isinstance(selectable, PositionLike):
        return FromPosition(selectable, SelectionOptions.from_value(place_or_offset_or_options))
    if isinstance(selectable, TreeItem):
        if place_or_offset_or_options is None:
            raise MissingPlacementError(details={"item": repr(selectable)})
        return FromItemPlacement(
            selectable,
            place_or_offset_or_options,
            SelectionOptions.from_value(options),
        )
    if isinstance(selectable, Iterable) and not isinstance(selectable, (str, bytes, Mapping)):
        return FromRangeList(selectable, SelectionOptions.from_value(place_or_offset_or_options))
    raise NotSelectableError(value=selectable)


def resolve(variant: Selectable) -> ResolvedSelection:
    """Turn a classified selectable into the normalized form."""

    if isinstance(variant, Empty):
        return _resolved((), variant.options)
    if isinstance(variant, FromSelection):
        source = variant.selection
        return ResolvedSelection(
            ranges=tuple(source.get_ranges()),
            backward=source.is_backward,
            is_fake=source.is_fake,
            fake_label=source.fake_selection_label if source.is_fake else "",
        )
    if isinstance(variant, FromRange):
        return _resolved((variant.range,), variant.options)
    if isinstance(variant, FromPosition):
        # A caret has no direction.
        return ResolvedSelection(
            ranges=(Range(Position.from_position(variant.position)),),
            backward=False,
            is_fake=variant.options.fake,
            fake_label=variant.options.fake_label,
        )
    if isinstance(variant, FromItemPlacement):
        return _resolved((_range_for_placement(variant.item, variant.placement),), variant.options)
    if isinstance(variant, FromRangeList):
        return _resolved(variant.ranges, variant.options)
    raise NotSelectableError(value=variant)


def resolve_selectable(
    selectable: Any,
    place_or_offset_or_options: Any = None,
    options: Any = None,
) -> ResolvedSelection:
    return resolve(classify(selectable, place_or_offset_or_options, options))


def _range_for_placement(item: Any, placement: int | str) -> Range:
    if placement == "in":
        return Range.create_in(item)
    if placement == "on":
        return Range.create_on(item)
    return Range.create_collapsed_at(item, placement)


def _resolved(ranges: Iterable[Any], options: SelectionOptions) -> ResolvedSelection:
    return ResolvedSelection(
        ranges=ranges,
        backward=options.backward,
        is_fake=options.fake,
        fake_label=options.fake_label,
    )


__all__ = [
    "Empty",
    "FromItemPlacement",
    "FromPosition",
    "FromRange",
    "FromRangeList",
    "FromSelection",
    "ResolvedSelection",
    "Selectable",
    "SelectionOptions",
    "classify",
    "resolve",
    "resolve_selectable",
]
