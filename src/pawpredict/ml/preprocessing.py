"""Image preprocessing: decode, resize, and export a fixed-format pixel buffer.

The classifier consumes an HxWx3 RGB uint8 buffer at the model's input size.
Resizing stretches to the exact target, the image is not letterboxed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

if TYPE_CHECKING:
    from pathlib import Path

    from numpy.typing import NDArray

DEFAULT_INPUT_SIZE: tuple[int, int] = (224, 224)


def load_image(path: Path, max_pixels: int | None = None) -> Image.Image:
    """Open and fully decode an image file.

    EXIF orientation is applied so the buffer matches what a viewer shows.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a decodable image, exceeds ``max_pixels``,
            or trips Pillow's decompression bomb guard.
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
            if max_pixels is not None and width * height > max_pixels:
                raise ValueError(f"Image {path.name} has {width * height} pixels, limit is {max_pixels}")
            img.load()
            return ImageOps.exif_transpose(img)
    except UnidentifiedImageError as exc:
        raise ValueError(f"Cannot decode image {path.name}") from exc
    except Image.DecompressionBombError as exc:
        raise ValueError(f"Image {path.name} exceeds the decoder pixel limit") from exc


def resize(image: Image.Image, size: tuple[int, int] = DEFAULT_INPUT_SIZE) -> Image.Image:
    """Resample an image to exactly ``size`` (width, height)."""
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid target size: {size}")
    return image.resize((width, height), Image.Resampling.BILINEAR)


def to_pixel_buffer(image: Image.Image) -> NDArray[np.uint8]:
    """Convert an image to a contiguous HxWx3 RGB uint8 buffer.

    Alpha and palette data are flattened away.
    """
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = np.ascontiguousarray(np.asarray(image, dtype=np.uint8))
    if buffer.ndim != 3 or buffer.shape[2] != 3:
        raise ValueError(f"Unexpected pixel buffer shape: {buffer.shape}")
    return buffer


def prepare(
    path: Path,
    size: tuple[int, int] = DEFAULT_INPUT_SIZE,
    max_pixels: int | None = None,
) -> NDArray[np.uint8]:
    """Load, resize, and convert an image file in one step."""
    return to_pixel_buffer(resize(load_image(path, max_pixels=max_pixels), size))
