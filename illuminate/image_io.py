"""
Writing finished images to disk.

The renderer hands over an 8-bit (height, width, 3) buffer; the file
extension picks the format.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image as PILImage

FORMATS = {
    '.png': 'PNG',
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
    '.ppm': 'PPM',
}


def save_image(pixels: np.ndarray, filename: Union[str, Path]) -> Path:
    """Save an 8-bit RGB buffer to file.

    Unknown or missing extensions are written as PNG. Parent
    directories are created as needed.

    Args:
        pixels: uint8 array of shape (height, width, 3)
        filename: Output filename (extension determines format)

    Returns:
        The path written
    """
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(
            f"Expected a uint8 (height, width, 3) buffer, got {pixels.dtype} {pixels.shape}"
        )

    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)

    image_format = FORMATS.get(path.suffix.lower(), 'PNG')
    options = {'quality': 100} if image_format == 'JPEG' else {}

    PILImage.fromarray(pixels, 'RGB').save(path, format=image_format, **options)
    return path
