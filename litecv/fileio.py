"""Saving images to disk."""

from __future__ import annotations

import os
from typing import Union

from .image import Image
from .png import write_png

PathLike = Union[str, "os.PathLike[str]"]


def save_image(image: Image, path: PathLike) -> None:
    """Write ``image`` to ``path`` as a PNG file.

    Rows are taken as tightly packed, ``width * channels`` bytes each.
    Raises ``ValueError`` for unsupported geometry and ``OSError`` if the
    file cannot be written.
    """
    print("Saving Image File!")
    write_png(
        path,
        image.pixels,
        image.width,
        image.height,
        image.channels,
        image.width * image.channels,
    )
    print("Image File Saved!")