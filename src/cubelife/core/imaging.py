"""Single-channel image import and export of cube buffers.

A cube is stored as one image ``width`` pixels wide and ``6 * width`` tall,
with the faces stacked top to bottom in buffer order.
"""

from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from .cube import Cube

EIGHT_BIT_MODES = ("L", "LA", "P", "RGB", "RGBA")


def load_png_binary(path: Union[str, Path]) -> Tuple[int, np.ndarray]:
    """Read an image as a flat boolean buffer.

    The first channel of each pixel decides the cell: nonzero is alive.
    Palette images are read by index, so index 0 is dead.

    Returns:
        Tuple of (image width, flat boolean buffer in row-major order)

    Raises:
        ValueError: If the image does not use 8-bit channels
    """
    with Image.open(path) as img:
        if img.mode not in EIGHT_BIT_MODES:
            raise ValueError(f"Image mode {img.mode!r} unsupported, expected 8-bit channels")
        if img.mode == "P":
            channel = np.asarray(img)
        else:
            channel = np.asarray(img.getchannel(0))

    return channel.shape[1], (channel > 0).reshape(-1)


def write_png_binary(path: Union[str, Path], buf, width: int) -> None:
    """Write a flat boolean buffer as a grayscale PNG.

    Alive cells are written as 255 and dead cells as 0.

    Raises:
        ValueError: If the buffer length is not a multiple of width
    """
    data = np.asarray(buf, dtype=bool).reshape(-1)
    if width <= 0 or data.size % width != 0:
        raise ValueError("Image data must be divisible by width")

    height = data.size // width
    pixels = np.where(data, 255, 0).astype(np.uint8).reshape(height, width)
    Image.fromarray(pixels).save(path, format="PNG")


def import_cube_png(path: Union[str, Path]) -> Cube:
    """Load a cube from an image; the image width is the cube width.

    Raises:
        ValueError: If the pixel count is not ``6 * width**2``
    """
    width, data = load_png_binary(path)
    if data.size != 6 * width * width:
        raise ValueError(
            f"Image of width {width} has {data.size} pixels, expected {6 * width * width}"
        )
    return Cube(width, data)


def export_cube_png(path: Union[str, Path], cube: Cube) -> None:
    """Write a cube as a ``width x 6*width`` grayscale image."""
    write_png_binary(path, cube.cells, cube.width)
