"""Overlay rendering and image viewing for regions and perimeters."""
from pathlib import Path
from typing import Callable, Iterable, Sequence
import numpy as np
from PIL import Image

from regiontrace.grid import point_in_bounds
from regiontrace.types import (
    Color,
    ImageArray,
    Mask,
    Perimeter,
    PerimeterSet,
    PreconditionViolationError,
    TraceConfig,
)

# Shows an RGB image under a window title
Viewer = Callable[[np.ndarray, str], None]


def _ensure_rgb(image: np.ndarray) -> np.ndarray:
    """Copy an 8-bit image into a fresh (H, W, 3) buffer."""
    image = np.asarray(image)
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)
    elif image.ndim == 3 and image.shape[2] == 1:
        image = np.repeat(image, 3, axis=-1)
    return np.array(image, dtype=np.uint8)


def dump_pixels(image: ImageArray, mask: Mask, color: Color) -> None:
    """Draw pixels of the mask on the image with the given colour."""
    if image.shape[:2] != np.shape(mask)[:2]:
        raise PreconditionViolationError(
            f"Mask shape {np.shape(mask)[:2]} does not match image shape {image.shape[:2]}"
        )
    image[np.asarray(mask) != 0] = color


def dump_points(image: ImageArray, perimeters: Iterable[Perimeter], color: Color) -> None:
    """Draw perimeter points on the image with the given colour."""
    for perimeter in perimeters:
        for p in perimeter:
            if point_in_bounds(image, p):
                image[p.y, p.x] = color


def render_overlay(
    image: ImageArray,
    regions: Sequence[Mask],
    perimeters: Sequence[PerimeterSet],
    config: TraceConfig
) -> np.ndarray:
    """
    Render regions, then perimeters on top, over a copy of the image.

    Args:
        image: Source colour grid
        regions: Region masks
        perimeters: One perimeter set per region
        config: Supplies region and perimeter colours

    Returns:
        New (H, W, 3) uint8 image; the source is left untouched
    """
    canvas = _ensure_rgb(image)

    for region in regions:
        dump_pixels(canvas, region, config.region_color)
    for perimeter_set in perimeters:
        dump_points(canvas, perimeter_set, config.perimeter_color)

    return canvas


def show_image(image: np.ndarray, title: str = "Image") -> None:
    """Display image in a new window and block until it is closed."""
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(num=title)
    ax.imshow(image, interpolation="nearest")
    ax.set_axis_off()
    fig.tight_layout()
    plt.show()
    plt.close(fig)


def save_image(image: np.ndarray, path: Path) -> None:
    """Save an overlay as an image file."""
    Image.fromarray(_ensure_rgb(image)).save(path)
