"""Seeded colour region growing, perimeter tracing and smoothing."""
from regiontrace.types import (
    Point,
    Perimeter,
    PerimeterSet,
    TraceConfig,
    SegmentationError,
    InvalidSeedError,
    InvalidParameterError,
    PreconditionViolationError,
    ImageLoadError,
)
from regiontrace.region_growing import grow_region
from regiontrace.contour_tracing import trace_perimeter, trace_perimeters, fill_gaps
from regiontrace.perimeter_smoothing import smooth_perimeter, smooth_perimeters

__version__ = "0.1.0"

__all__ = [
    "Point",
    "Perimeter",
    "PerimeterSet",
    "TraceConfig",
    "SegmentationError",
    "InvalidSeedError",
    "InvalidParameterError",
    "PreconditionViolationError",
    "ImageLoadError",
    "grow_region",
    "trace_perimeter",
    "trace_perimeters",
    "fill_gaps",
    "smooth_perimeter",
    "smooth_perimeters",
]
