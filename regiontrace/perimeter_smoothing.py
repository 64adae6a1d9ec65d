"""Closed perimeter smoothing by circular convolution."""
import logging
import math
from typing import Tuple
import numpy as np
from scipy.ndimage import correlate1d

from regiontrace.grid import array_to_points, points_to_array
from regiontrace.types import InvalidParameterError, Perimeter, PerimeterSet

logger = logging.getLogger(__name__)

FIXED_WEIGHTS = np.array([1, 3, 16, 3, 1], dtype=np.float64)

# Largest Gaussian sigma accepted; its kernel has about 37600 taps
MAX_SIGMA = 1e4


def fixed_kernel() -> Tuple[np.ndarray, int]:
    """
    Fixed 5-tap integer kernel.

    Returns:
        Tuple of (normalized weights, center index)
    """
    return FIXED_WEIGHTS / FIXED_WEIGHTS.sum(), 2


def gaussian_kernel(sigma: float) -> Tuple[np.ndarray, int]:
    """
    Sampled Gaussian kernel with odd length derived from sigma.

    The length is 2 * round(3 * sigma * sqrt(2 pi) / 4), bumped to the next
    odd number, so sigma <= 0.2 gives the identity kernel [1.0].

    Args:
        sigma: Standard deviation in points along the perimeter

    Returns:
        Tuple of (normalized weights, center index)

    Raises:
        InvalidParameterError: If sigma is not positive or above
            MAX_SIGMA
    """
    if not sigma > 0:
        raise InvalidParameterError(f"Smoothing factor must be positive, got {sigma}")
    if sigma > MAX_SIGMA:
        raise InvalidParameterError(
            f"Smoothing factor must be a finite number up to {MAX_SIGMA:g}, got {sigma}"
        )

    size = 2 * int(round(sigma * 3 * math.sqrt(2 * math.pi) / 4))
    if size % 2 == 0:
        size += 1
    center = size // 2

    offsets = np.arange(size) - center
    weights = np.exp(-0.5 * (offsets / sigma) ** 2) / (sigma * math.sqrt(2 * math.pi))

    return weights / weights.sum(), center


def get_kernel(factor: float, kernel: str = "gaussian") -> Tuple[np.ndarray, int]:
    """Resolve a kernel policy name to (weights, center)."""
    if kernel == "gaussian":
        return gaussian_kernel(factor)
    if kernel == "fixed":
        return fixed_kernel()
    raise InvalidParameterError(f"Unknown smoothing kernel '{kernel}'")


def remove_repeated_points(points: np.ndarray) -> np.ndarray:
    """
    Drop every point equal to its cyclic predecessor.

    Args:
        points: (N, 2) array, N >= 1

    Returns:
        (M, 2) array with 1 <= M <= N and no cyclically adjacent duplicates
    """
    changed = np.any(points != np.roll(points, 1, axis=0), axis=1)
    if not changed.any():
        return points[:1]
    return points[changed]


def smooth_perimeter(perimeter: Perimeter, factor: float, kernel: str = "gaussian") -> Perimeter:
    """
    Smooth a closed perimeter.

    Each output point is the kernel-weighted average of its neighbours along
    the loop, with indices wrapping around both ends. Averaged coordinates are
    rounded back to the grid and zero-length steps are collapsed.

    Args:
        perimeter: Closed loop of at least two points
        factor: Gaussian sigma; ignored by the fixed kernel
        kernel: "gaussian" or "fixed"

    Returns:
        New perimeter, no longer than the input

    Raises:
        InvalidParameterError: If the perimeter has fewer than two points,
            the factor is not positive for the Gaussian kernel, or the kernel
            name is unknown
    """
    if len(perimeter) < 2:
        raise InvalidParameterError(
            f"Perimeter needs at least 2 points to smooth, got {len(perimeter)}"
        )

    weights, _ = get_kernel(factor, kernel)

    points = points_to_array(perimeter)
    # Both kernels are odd with the center in the middle, as correlate1d expects
    averaged = correlate1d(points, weights, axis=0, mode="grid-wrap")

    smoothed = remove_repeated_points(np.rint(averaged).astype(np.int64))

    return array_to_points(smoothed)


def smooth_perimeters(perimeters: PerimeterSet, factor: float, kernel: str = "gaussian") -> PerimeterSet:
    """
    Smooth every perimeter in a set.

    Single point perimeters have nothing to smooth and are passed through.
    """
    # Validates the factor even when every loop is degenerate
    get_kernel(factor, kernel)

    smoothed = []
    for i, perimeter in enumerate(perimeters):
        if len(perimeter) < 2:
            logger.debug(f"Perimeter {i} has {len(perimeter)} points, left unchanged")
            smoothed.append(list(perimeter))
            continue
        smoothed.append(smooth_perimeter(perimeter, factor, kernel))

    return smoothed
