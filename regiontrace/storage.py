"""Plain-text persistence of regions and perimeters.

File layout, one header line and one point line per block:

    region 0
    [x, y] [x, y] ...
    perimeter 0
    [x, y] [x, y] ...

All region blocks come first, then one perimeter block per region with the
points of all of that region's perimeters in order.
"""
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import numpy as np

from regiontrace.grid import bounding_shape, iter_marked_points
from regiontrace.types import Mask, PerimeterSet, Point

logger = logging.getLogger(__name__)

POINT_PATTERN = re.compile(r"\[\s*(-?\d+)\s*,\s*(-?\d+)\s*\]")
HEADER_PATTERN = re.compile(r"^(region|perimeter) (\d+)$")


def format_points(points: Iterable[Point]) -> str:
    """Format points as ``[x, y]`` separated by spaces, with a trailing space."""
    return "".join(f"{p} " for p in points)


def store(
    regions: Sequence[Mask],
    perimeters: Sequence[PerimeterSet],
    path: Union[str, Path]
) -> None:
    """
    Write regions and perimeters data to a file.

    Args:
        regions: Region masks to be written
        perimeters: Perimeter sets to be written, one per region
        path: Name of the file
    """
    path = Path(path)

    with open(path, "w") as out:
        for i, region in enumerate(regions):
            out.write(f"region {i}\n")
            out.write(format_points(iter_marked_points(region)) + "\n")

        for i, perimeter_set in enumerate(perimeters):
            out.write(f"perimeter {i}\n")
            out.write(format_points(p for loop in perimeter_set for p in loop) + "\n")

    logger.info(f"Stored {len(regions)} regions and {len(perimeters)} perimeters to {path}")


def parse_points(text: str) -> List[Point]:
    """Parse a line of ``[x, y]`` tokens."""
    return [Point(int(x), int(y)) for x, y in POINT_PATTERN.findall(text)]


def load(
    path: Union[str, Path],
    shape: Optional[Tuple[int, int]] = None
) -> Tuple[List[Mask], List[List[Point]]]:
    """
    Read a file written by :func:`store`.

    Perimeter blocks come back as flat point lists since the file does not
    keep the split between a region's perimeters.

    Args:
        path: Name of the file
        shape: (H, W) of the rebuilt masks; defaults to the smallest grid
            holding every region point

    Returns:
        Tuple of (region masks, perimeter point lists)
    """
    region_points = []
    perimeter_points = []

    with open(path) as f:
        lines = f.read().splitlines()

    for header, body in zip(lines[0::2], lines[1::2]):
        match = HEADER_PATTERN.match(header.strip())
        if match is None:
            raise ValueError(f"Malformed block header: {header!r}")

        points = parse_points(body)
        if match.group(1) == "region":
            region_points.append(points)
        else:
            perimeter_points.append(points)

    if shape is None:
        shape = bounding_shape(p for points in region_points for p in points)

    masks = []
    for points in region_points:
        mask = np.zeros(shape, dtype=bool)
        for p in points:
            mask[p.y, p.x] = True
        masks.append(mask)

    return masks, perimeter_points
