"""Value comparisons between two selections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from .selection import Selection


def is_equal(a: "Selection", b: "Selection") -> bool:
    """Return ``True`` when both selections hold the same ranges, anchor, focus and fake state.

    Range order does not matter; each range of ``a`` must have a value-equal
    counterpart in ``b``.
    """

    if a.is_fake != b.is_fake:
        return False
    if a.is_fake and a.fake_selection_label != b.fake_selection_label:
        return False
    if a.range_count != b.range_count:
        return False
    if a.range_count == 0:
        return True

    if not a.anchor.is_equal(b.anchor) or not a.focus.is_equal(b.focus):
        return False

    other_ranges = list(b.get_ranges())
    return all(_has_match(range_a, other_ranges, _same_range) for range_a in a.get_ranges())


def is_similar(a: "Selection", b: "Selection") -> bool:
    """Return ``True`` when the selections cover the same content once trimmed.

    Direction and range count must match; each range's trimmed edges are
    compared instead of its original ones.
    """

    if a.is_backward != b.is_backward:
        return False
    if a.range_count != b.range_count:
        return False
    if a.range_count == 0:
        return True

    trimmed_b = [range_b.get_trimmed() for range_b in b.get_ranges()]
    for range_a in a.get_ranges():
        if not _has_match(range_a.get_trimmed(), trimmed_b, _same_edges):
            return False
    return True


def _has_match(candidate: Any, pool: Sequence[Any], predicate) -> bool:
    return any(predicate(candidate, other) for other in pool)


def _same_range(left: Any, right: Any) -> bool:
    return left.is_equal(right)


def _same_edges(left: Any, right: Any) -> bool:
    return left.start.is_equal(right.start) and left.end.is_equal(right.end)


__all__ = ["is_equal", "is_similar"]
