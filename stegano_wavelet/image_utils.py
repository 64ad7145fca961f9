from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from .channels import DISPLAY_DTYPE, to_display
from .errors import DimensionError, UnsupportedFormatError


LOGGER = logging.getLogger("stegano_wavelet")

# Lossy formats would destroy the coefficients the key points at.
LOSSLESS_EXTENSIONS = (".ppm", ".png", ".bmp", ".tif", ".tiff")

RGB = Tuple[int, int, int]


@dataclass
class PixelGrid:
    """Row-major RGB image held as a ``(height, width, 3)`` uint8 array."""

    pixels: np.ndarray

    def __post_init__(self):
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise DimensionError(f"Expected a (height, width, 3) array, got shape {arr.shape}")
        if arr.dtype != DISPLAY_DTYPE:
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise ValueError("Pixel values must lie in 0..255")
            arr = to_display(arr)
        self.pixels = arr

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def zeros(cls, width: int, height: int) -> "PixelGrid":
        return cls(np.zeros((height, width, 3), dtype=DISPLAY_DTYPE))

    @classmethod
    def from_rows(cls, width: int, height: int, values: Sequence[RGB]) -> "PixelGrid":
        """Build a grid from a row-major sequence of ``width * height`` triples."""
        if len(values) != width * height:
            raise DimensionError(
                f"Expected {width * height} pixels for {width}x{height}, got {len(values)}"
            )
        arr = np.asarray(values, dtype=np.int64).reshape(height, width, 3)
        return cls(arr)

    def to_rows(self) -> List[RGB]:
        return [tuple(int(c) for c in px) for px in self.pixels.reshape(-1, 3)]

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))


def load_pixel_grid(path: str) -> PixelGrid:
    """Load an image (PPM, PNG, ...) and return it as an RGB pixel grid."""
    with Image.open(path) as img:
        arr = np.array(img.convert("RGB"), dtype=DISPLAY_DTYPE)
    LOGGER.debug("Loaded %s (%dx%d)", path, arr.shape[1], arr.shape[0])
    return PixelGrid(arr)


def save_pixel_grid(path: str, grid: PixelGrid) -> None:
    """Save a pixel grid losslessly; the format follows the file extension."""
    ext = os.path.splitext(path)[1].lower()
    if ext not in LOSSLESS_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Cannot save to '{ext or path}': use one of {', '.join(LOSSLESS_EXTENSIONS)}"
        )
    img = Image.fromarray(np.ascontiguousarray(grid.pixels))
    img.save(path)
    LOGGER.debug("Saved %s (%dx%d)", path, grid.width, grid.height)


def psnr(reference: PixelGrid, other: PixelGrid) -> float:
    """Peak signal-to-noise ratio between two equally sized grids, in dB."""
    if reference.pixels.shape != other.pixels.shape:
        raise DimensionError(
            f"Cannot compare {reference.width}x{reference.height} with {other.width}x{other.height}"
        )
    return float(cv2.PSNR(np.ascontiguousarray(reference.pixels), np.ascontiguousarray(other.pixels)))
