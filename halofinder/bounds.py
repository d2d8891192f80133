"""Axis-aligned bounding boxes with optional periodic wrapping.

Boxes are six numbers: three minima followed by three maxima.
"""

from __future__ import annotations

from typing import Optional, Sequence


def check_bounds(
    pos: Sequence[float], bounds: Sequence[float], box_size: float, periodic: bool
) -> Optional[tuple]:
    """Return the position, wrapped periodically if needed, when it lies in bounds.

    Returns None when the position cannot be placed inside the bounds.
    """
    result = []
    for x, lo, hi in zip(pos[:3], bounds[:3], bounds[3:6]):
        if x > hi:
            if lo < 0 and periodic:
                x -= box_size
                if x > hi or x < lo:
                    return None
            else:
                return None
        elif x < lo:
            if hi > box_size and periodic:
                x += box_size
                if x > hi or x < lo:
                    return None
            else:
                return None
        result.append(x)
    return tuple(result)


def check_bounds_raw(pos: Sequence[float], bounds: Sequence[float]) -> bool:
    """True if the position is in [min, max) on every axis."""
    return all(lo <= x < hi for x, lo, hi in zip(pos[:3], bounds[:3], bounds[3:6]))


def wrap_into_box(pos: Sequence[float], box_size: float, periodic: bool) -> tuple:
    """Move a position back into the periodic box by at most one box length."""
    if not periodic or not box_size:
        return tuple(pos)
    wrapped = []
    for x in pos[:3]:
        if x > box_size:
            x -= box_size
        elif x < 0:
            x += box_size
        wrapped.append(x)
    return tuple(wrapped) + tuple(pos[3:])


def bounds_overlap(
    b1: Sequence[float],
    b2: Sequence[float],
    overlap: float,
    box_size: float,
    periodic: bool,
) -> Optional[tuple]:
    """Test b1 against b2 grown by ``overlap`` on every side.

    Returns the grown b2 when the boxes overlap (allowing periodic images),
    otherwise None.
    """
    minima, maxima = [], []
    for lo1, hi1, lo2, hi2 in zip(b1[:3], b1[3:6], b2[:3], b2[3:6]):
        low = lo2 - overlap
        high = hi2 + overlap
        minima.append(low)
        maxima.append(high)
        first = -1 if (low < 0 and periodic) else 0
        last = 2 if (high > box_size and periodic) else 1
        if not any(
            lo1 + wrap * box_size < high and hi1 + wrap * box_size > low
            for wrap in range(first, last)
        ):
            return None
    return tuple(minima) + tuple(maxima)


def bounds_union(b1: Sequence[float], b2: Sequence[float]) -> tuple:
    """Smallest box containing both boxes."""
    return tuple(map(min, b1[:3], b2[:3])) + tuple(map(max, b1[3:6], b2[3:6]))