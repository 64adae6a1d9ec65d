"""Similarity-bounded region growing (flood fill)."""
import logging
from collections import deque
import numpy as np

from regiontrace.grid import as_color_grid, channel_tolerance, point_in_bounds
from regiontrace.types import ChannelTolerance, ImageArray, InvalidSeedError, Mask, Point

logger = logging.getLogger(__name__)

# Neighbour visiting order: up, down, left, right
NEIGHBORS_4 = (Point(0, -1), Point(0, 1), Point(-1, 0), Point(1, 0))


def grow_region(
    image: ImageArray,
    seed: Point,
    upper_bound: ChannelTolerance,
    step_diff: ChannelTolerance
) -> Mask:
    """
    Find the contiguous region of similar colour around a seed.

    A 4-neighbour P of an already marked pixel Q joins the region when, on
    every channel, it is within upper_bound of the seed colour and within
    step_diff of Q. The seed itself is always marked.

    Args:
        image: Colour grid (H, W) or (H, W, C) with integer samples
        seed: Starting point
        upper_bound: Maximal per-channel difference from the seed colour
        step_diff: Maximal per-channel difference between adjacent pixels

    Returns:
        Boolean mask (H, W), True for region members

    Raises:
        InvalidSeedError: If the seed is outside the image
        InvalidParameterError: If a tolerance does not match the channel count
        PreconditionViolationError: If the image is not a colour grid
    """
    grid = as_color_grid(image)
    height, width, channels = grid.shape
    seed = Point(*seed)

    if not point_in_bounds(grid, seed):
        raise InvalidSeedError(f"Seed {seed} is outside the {width}x{height} image")

    upper = channel_tolerance(upper_bound, channels, "upper_bound")
    diff = channel_tolerance(step_diff, channels, "step_diff")

    region = np.zeros((height, width), dtype=bool)
    seed_color = grid[seed.y, seed.x]

    region[seed.y, seed.x] = True
    queue = deque([seed])

    while queue:
        p = queue.popleft()
        current_color = grid[p.y, p.x]

        for offset in NEIGHBORS_4:
            n = p + offset
            if not point_in_bounds(grid, n) or region[n.y, n.x]:
                continue

            color = grid[n.y, n.x]
            if np.all(np.abs(color - seed_color) <= upper) and \
                    np.all(np.abs(color - current_color) <= diff):
                region[n.y, n.x] = True
                queue.append(n)

    logger.debug(f"Region from seed {seed}: {int(region.sum())} pixels")

    return region
