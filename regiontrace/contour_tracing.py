"""Boundary extraction from a region mask by left-turn boundary following."""
import logging
from typing import Optional, Set, Tuple
import numpy as np
from skimage.draw import line

from regiontrace.grid import as_mask, point_in_bounds, point_is_marked
from regiontrace.types import (
    InvalidParameterError,
    InvalidSeedError,
    Mask,
    Perimeter,
    PerimeterSet,
    Point,
)

logger = logging.getLogger(__name__)

LEFT = Point(-1, 0)
RIGHT = Point(1, 0)

# (pixel, direction) pairs: the side of the pixel facing that direction
Sides = Set[Tuple[Point, Point]]


def rotate_left(d: Point) -> Point:
    return Point(d.y, -d.x)


def rotate_right(d: Point) -> Point:
    return Point(-d.y, d.x)


def _next_move(mask: np.ndarray, current: Point, heading: Point, swept: Sides) -> Optional[Point]:
    """
    Pick the next direction, left turn first, then rotating right.

    Every direction tried and rejected on the way is a background-facing side
    of ``current`` and gets recorded in ``swept``.
    """
    direction = rotate_left(heading)
    for _ in range(4):
        if point_is_marked(mask, current + direction):
            return direction
        swept.add((current, direction))
        direction = rotate_right(direction)
    return None


def _follow(mask: np.ndarray, start: Point, came_from: Point) -> Tuple[Perimeter, Sides]:
    swept: Sides = set()
    first_move = _next_move(mask, start, start - came_from, swept)

    perimeter = [start]
    if first_move is None:
        # Nothing to walk to: single pixel region
        return perimeter, swept

    current, heading = start + first_move, first_move
    while True:
        move = _next_move(mask, current, heading, swept)
        # Closed once the walk would repeat its first step
        if current == start and move == first_move:
            break
        perimeter.append(current)
        current, heading = current + move, move

    return perimeter, swept


def trace_perimeter(mask: Mask, start: Point, came_from: Optional[Point] = None) -> Perimeter:
    """
    Trace the perimeter passing through ``start``.

    Walks along the region edge preferring the leftmost turn at every step,
    as if the walk entered ``start`` from ``came_from`` (by default the cell to
    its left). The walk ends when it is back at ``start`` about to repeat its
    first step; the start point is not repeated at the end.

    Args:
        mask: Region mask (H, W), nonzero cells are marked
        start: Initial point of the perimeter, must be marked
        came_from: 4-neighbour of ``start`` the walk is treated as coming from

    Returns:
        List of points the perimeter consists of. A single point means the
        region is one isolated pixel.

    Raises:
        PreconditionViolationError: If the mask is not a 2D grid
        InvalidSeedError: If ``start`` is outside the mask or not marked
        InvalidParameterError: If ``came_from`` is not a 4-neighbour of ``start``
    """
    mask = as_mask(mask)
    start = Point(*start)

    if not point_in_bounds(mask, start):
        raise InvalidSeedError(f"Start point {start} is outside the mask")
    if not mask[start.y, start.x]:
        raise InvalidSeedError(f"Start point {start} is not marked")

    came_from = start + LEFT if came_from is None else Point(*came_from)
    step = start - came_from
    if abs(step.x) + abs(step.y) != 1:
        raise InvalidParameterError(f"{came_from} is not a 4-neighbour of {start}")

    perimeter, _ = _follow(mask, start, came_from)
    return perimeter


def trace_perimeters(mask: Mask) -> PerimeterSet:
    """
    Find all perimeters of a region mask.

    Scans the mask row by row. A marked cell whose horizontal neighbours are
    not both marked starts a new perimeter from each background side that no
    earlier perimeter has walked past. Outer boundaries and hole boundaries
    each produce their own perimeter. A cell that is the only link between
    two parts of the region, such as the corner of a one-cell-wide L, is
    visited once per part and so appears more than once in its perimeter.

    Args:
        mask: Region mask (H, W), nonzero cells are marked

    Returns:
        List of perimeters in scan order
    """
    mask = as_mask(mask)
    height, width = mask.shape

    perimeters = []
    covered: Sides = set()

    for y in range(height):
        for x in range(width):
            current = Point(x, y)
            prev_marked = point_is_marked(mask, current + LEFT)
            next_marked = point_is_marked(mask, current + RIGHT)

            if not mask[y, x] or (prev_marked and next_marked):
                continue

            for side, marked in ((LEFT, prev_marked), (RIGHT, next_marked)):
                if marked or (current, side) in covered:
                    continue

                perimeter, swept = _follow(mask, current, current + side)
                covered |= swept
                perimeters.append(perimeter)

    logger.debug(f"Traced {len(perimeters)} perimeters")

    return perimeters


def fill_gaps(perimeter: Perimeter) -> Perimeter:
    """
    Insert the cells of a digital line between consecutive points that are not
    8-adjacent, including the closing segment from last back to first.

    Args:
        perimeter: Closed loop without consecutive duplicates

    Returns:
        New closed loop in which every step moves at most one cell per axis
    """
    if len(perimeter) == 0:
        raise InvalidParameterError("Cannot fill gaps of an empty perimeter")

    n = len(perimeter)
    filled = []

    for i, p in enumerate(perimeter):
        filled.append(p)
        q = perimeter[(i + 1) % n]

        if max(abs(q.x - p.x), abs(q.y - p.y)) > 1:
            rr, cc = line(p.y, p.x, q.y, q.x)
            filled.extend(Point(int(c), int(r)) for r, c in zip(rr[1:-1], cc[1:-1]))

    return filled
