"""Grid helpers shared by the pipeline stages.

Colour grids are numpy arrays of shape (H, W) or (H, W, C); region masks are
(H, W) arrays where any nonzero cell is marked. Points address cells as
(x, y) = (column, row).
"""
from typing import Iterable, Iterator, List, Tuple
import numpy as np

from regiontrace.types import (
    ChannelTolerance,
    ImageArray,
    InvalidParameterError,
    Mask,
    Point,
    PreconditionViolationError,
)


def point_in_bounds(grid: np.ndarray, p: Point) -> bool:
    """Check whether the point is inside the grid."""
    return 0 <= p.y < grid.shape[0] and 0 <= p.x < grid.shape[1]


def point_is_marked(mask: Mask, p: Point) -> bool:
    """Check whether the point is inside the mask and its cell is nonzero."""
    return point_in_bounds(mask, p) and bool(mask[p.y, p.x])


def as_color_grid(image: ImageArray) -> np.ndarray:
    """
    Normalize a colour grid to (H, W, C) with a signed dtype.

    Args:
        image: Integer array (H, W) or (H, W, C)

    Returns:
        int32 copy of shape (H, W, C) safe for channel differences

    Raises:
        PreconditionViolationError: If the array is not a 2D colour grid
    """
    image = np.asarray(image)

    if image.ndim not in (2, 3):
        raise PreconditionViolationError(
            f"Expected (H, W) or (H, W, C) image, got {image.ndim}D array"
        )
    if not (np.issubdtype(image.dtype, np.integer) or image.dtype == np.bool_):
        raise PreconditionViolationError(
            f"Expected integer channel samples, got dtype {image.dtype}"
        )
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise PreconditionViolationError(f"Image has no pixels: shape {image.shape}")

    if image.ndim == 2:
        image = image[..., np.newaxis]

    return image.astype(np.int32)


def as_mask(mask: Mask) -> np.ndarray:
    """Validate a region mask and return it as a bool array."""
    mask = np.asarray(mask)

    if mask.ndim != 2:
        raise PreconditionViolationError(
            f"Expected single-channel (H, W) mask, got shape {mask.shape}"
        )

    return mask != 0


def channel_tolerance(tolerance: ChannelTolerance, channels: int, name: str) -> np.ndarray:
    """
    Resolve a per-channel tolerance vector.

    A bare int applies to every channel; a sequence must match the channel
    count exactly.
    """
    if np.isscalar(tolerance):
        values = np.full(channels, int(tolerance), dtype=np.int32)
    else:
        values = np.asarray(tolerance, dtype=np.int32).ravel()
        if len(values) != channels:
            raise InvalidParameterError(
                f"{name} has {len(values)} channels, image has {channels}"
            )

    if np.any(values < 0):
        raise InvalidParameterError(f"{name} must be non-negative, got {values.tolist()}")

    return values


def iter_marked_points(mask: Mask) -> Iterator[Point]:
    """Yield marked cells in row-major order (x varies fastest)."""
    height, width = mask.shape[:2]
    for y in range(height):
        for x in range(width):
            if mask[y, x]:
                yield Point(x, y)


def points_to_array(points: Iterable[Point]) -> np.ndarray:
    """Convert points to an (N, 2) float array of (x, y)."""
    return np.array([(p.x, p.y) for p in points], dtype=np.float64).reshape(-1, 2)


def array_to_points(array: np.ndarray) -> List[Point]:
    """Convert an (N, 2) array of (x, y) to integer points."""
    return [Point(int(x), int(y)) for x, y in np.asarray(array).reshape(-1, 2)]


def bounding_shape(points: Iterable[Point]) -> Tuple[int, int]:
    """Smallest (H, W) grid that contains all points with non-negative coordinates."""
    max_x, max_y = -1, -1
    for p in points:
        max_x = max(max_x, p.x)
        max_y = max(max_y, p.y)
    return max_y + 1, max_x + 1
