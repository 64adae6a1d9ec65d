"""Raster image ingestion into 8-bit colour grids."""
from dataclasses import dataclass
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image
from PIL import ImageOps

from regiontrace.types import ImageLoadError


@dataclass
class IngestResult:
    """Result from raster image ingestion."""
    image: np.ndarray  # uint8 (H, W, C)
    original_path: str
    width: int
    height: int
    channels: int


def ingest(path: Union[str, Path]) -> IngestResult:
    """
    Ingest a raster image file as an RGB uint8 grid.

    Args:
        path: Path to image file

    Returns:
        IngestResult holding the (H, W, 3) colour grid

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode == 'RGBA':
                # Composite on white background
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[3])
                img = background
            elif img.mode != 'RGB':
                img = img.convert('RGB')

            image = np.array(img, dtype=np.uint8)

    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}")

    return _result(image, str(path))


def ingest_from_array(image: np.ndarray, path: str = "") -> IngestResult:
    """
    Create IngestResult from numpy array.

    Args:
        image: (H, W), (H, W, 1), (H, W, 3) or (H, W, 4) array, integer
            in 0..255 or float in [0, 1]
        path: Optional path for reference

    Returns:
        IngestResult with a uint8 grid; grayscale input keeps one channel

    Raises:
        ImageLoadError: If the shape is unsupported or integer samples fall
            outside 0..255
    """
    image = np.asarray(image)

    if image.ndim == 2:
        image = image[..., np.newaxis]

    if image.ndim != 3:
        raise ImageLoadError(f"Expected 2D or 3D array, got {image.ndim}D")

    if image.dtype.kind == 'f':
        if image.size and image.max() <= 1.0:
            image = image * 255.0
        image = np.clip(np.rint(image), 0, 255)
    elif image.dtype.kind in 'iu' and image.size:
        low, high = int(image.min()), int(image.max())
        if low < 0 or high > 255:
            raise ImageLoadError(
                f"Integer samples must lie in 0..255, got range {low}..{high}"
            )

    image = image.astype(np.uint8)

    if image.shape[2] == 4:
        # RGBA - composite on white
        alpha = image[..., 3:4].astype(np.float32) / 255.0
        rgb = image[..., :3].astype(np.float32)
        image = np.rint(rgb * alpha + 255.0 * (1 - alpha)).astype(np.uint8)
    elif image.shape[2] not in (1, 3):
        raise ImageLoadError(f"Expected 1, 3 or 4 channels, got {image.shape[2]}")

    return _result(image, path)


def _result(image: np.ndarray, path: str) -> IngestResult:
    height, width, channels = image.shape
    return IngestResult(
        image=image,
        original_path=path,
        width=width,
        height=height,
        channels=channels
    )
