"""Core types for the region tracing pipeline."""
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union
import numpy as np

# Type aliases
ImageArray = np.ndarray
Mask = np.ndarray
Color = Tuple[int, ...]
ChannelTolerance = Union[int, Sequence[int]]

KERNELS = ("gaussian", "fixed")


@dataclass(frozen=True)
class Point:
    """2D point with integer grid coordinates (x = column, y = row)."""
    x: int
    y: int

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}]"


# A closed loop; the first point is not repeated at the end.
Perimeter = List[Point]
PerimeterSet = List[Perimeter]


@dataclass
class TraceConfig:
    """Configuration for an interactive tracing session."""
    # Region growing
    upper_bound: Tuple[int, ...] = (50, 50, 50)
    step_diff: Tuple[int, ...] = (5, 5, 5)

    # Smoothing
    smoothing_kernel: str = "gaussian"

    # Display
    region_color: Color = (255, 255, 255)
    perimeter_color: Color = (255, 0, 0)

    def __post_init__(self):
        self.upper_bound = tuple(int(v) for v in self.upper_bound)
        self.step_diff = tuple(int(v) for v in self.step_diff)

        if any(v < 0 for v in self.upper_bound + self.step_diff):
            raise InvalidParameterError(
                f"Tolerances must be non-negative, got upper_bound={self.upper_bound}, "
                f"step_diff={self.step_diff}"
            )
        if self.smoothing_kernel not in KERNELS:
            raise InvalidParameterError(
                f"Unknown smoothing kernel '{self.smoothing_kernel}', "
                f"expected one of {KERNELS}"
            )


class SegmentationError(Exception):
    """Base exception for region tracing errors."""
    pass


class InvalidSeedError(SegmentationError):
    """Seed or start point lies outside the grid (or off the region)."""
    pass


class InvalidParameterError(SegmentationError):
    """Tolerance, smoothing factor or perimeter argument is unusable."""
    pass


class PreconditionViolationError(SegmentationError):
    """Input grid does not have the shape or depth the operation expects."""
    pass


class ImageLoadError(SegmentationError):
    """Exception raised when the source image cannot be read."""
    pass
