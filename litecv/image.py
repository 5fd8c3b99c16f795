"""In-memory raster image with interleaved 8-bit channels."""

from __future__ import annotations

from dataclasses import dataclass, field

PPM_CHANNEL_SIZE = 3


@dataclass
class Image:
    """An image whose pixels are stored row by row, channels interleaved.

    When ``pixels`` is not given, a zero-filled buffer of
    ``width * height * channels`` bytes is allocated.
    """

    width: int = 0
    height: int = 0
    channels: int = 0
    max_val: int = 0
    pixels: bytearray = field(default=None, repr=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.pixels is None:
            self.pixels = bytearray(max(self.width * self.height * self.channels, 0))
        else:
            self.pixels = bytearray(self.pixels)

    def copy(self) -> Image:
        """Return an independent copy of this image."""
        return Image(
            width=self.width,
            height=self.height,
            channels=self.channels,
            max_val=self.max_val,
            pixels=bytearray(self.pixels),
        )