"""One-level sum/difference wavelet transform over RGB pixel grids.

The forward pass is unnormalized: every coefficient is a plain sum or
difference of pixel values, so it stays integral.  All halving happens on
the inverse pass, which works in float64 and only rounds at the final
write into display range (see :func:`stegano_wavelet.channels.to_display`).

Odd widths or heights lose their trailing row/column: it is dropped before
the forward pass and comes back zero-filled from the inverse pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

import numpy as np

from .channels import add, divide, subtract, to_coefficients, to_display
from .errors import DimensionError
from .image_utils import PixelGrid


LOGGER = logging.getLogger("stegano_wavelet")


class Band(IntEnum):
    """Detail bands; the value is the tag stored in keys and the tie-break order."""

    LH = 0
    HL = 1
    HH = 2


@dataclass(frozen=True, eq=False)
class CoefficientImage:
    """The four sub-bands of a one-level decomposition.

    Each band is a ``(height // 2, width // 2, 3)`` int64 array.  ``width``
    and ``height`` are the dimensions of the pixel grid the bands came from.
    """

    ll: np.ndarray
    lh: np.ndarray
    hl: np.ndarray
    hh: np.ndarray
    width: int
    height: int

    def __post_init__(self):
        shapes = {arr.shape for arr in (self.ll, self.lh, self.hl, self.hh)}
        if len(shapes) != 1:
            raise DimensionError(f"Sub-bands differ in shape: {sorted(shapes)}")
        expected = (self.height // 2, self.width // 2, 3)
        if self.ll.shape != expected:
            raise DimensionError(
                f"Sub-band shape {self.ll.shape} does not match a {self.width}x{self.height} image"
            )
        for name in ("ll", "lh", "hl", "hh"):
            arr = np.array(getattr(self, name), copy=True)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def band_width(self) -> int:
        return self.width // 2

    @property
    def band_height(self) -> int:
        return self.height // 2

    def band(self, band: Band) -> np.ndarray:
        return {Band.LH: self.lh, Band.HL: self.hl, Band.HH: self.hh}[Band(band)]


def _horizontal_pass(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    left, right = pixels[:, 0::2], pixels[:, 1::2]
    return add(left, right), subtract(left, right)


def forward_transform(grid: PixelGrid) -> CoefficientImage:
    """Decompose a pixel grid into LL/LH/HL/HH coefficient bands."""
    if grid.width < 2 or grid.height < 2:
        raise DimensionError(f"Image must be at least 2x2, got {grid.width}x{grid.height}")
    rows = grid.height - grid.height % 2
    cols = grid.width - grid.width % 2
    if (rows, cols) != (grid.height, grid.width):
        LOGGER.debug(
            "Dropping trailing row/column: %dx%d -> %dx%d", grid.width, grid.height, cols, rows
        )
    pixels = to_coefficients(grid.pixels[:rows, :cols])

    low, high = _horizontal_pass(pixels)
    ll = add(low[1::2], low[0::2])
    hl = add(high[1::2], high[0::2])
    lh = subtract(low[0::2], low[1::2])
    hh = subtract(high[0::2], high[1::2])
    return CoefficientImage(ll, lh, hl, hh, grid.width, grid.height)


def reconstruct(coeffs: CoefficientImage) -> np.ndarray:
    """Invert the transform into a float64 ``(rows, cols, 3)`` array, unrounded.

    ``rows`` and ``cols`` are the even parts of the original dimensions.
    """
    ll, lh, hl, hh = (np.asarray(b, dtype=np.float64) for b in (coeffs.ll, coeffs.lh, coeffs.hl, coeffs.hh))

    # vertical inverse: recover the horizontal low/high rows of each pair
    low_top = divide(add(ll, lh), 2)
    low_bottom = subtract(ll, low_top)
    high_top = divide(add(hl, hh), 2)
    high_bottom = subtract(hl, high_top)

    out = np.zeros((2 * coeffs.band_height, 2 * coeffs.band_width, 3), dtype=np.float64)
    top_left = divide(add(low_top, high_top), 2)
    bottom_left = divide(add(low_bottom, high_bottom), 2)
    out[0::2, 0::2] = top_left
    out[0::2, 1::2] = subtract(low_top, top_left)
    out[1::2, 0::2] = bottom_left
    out[1::2, 1::2] = subtract(low_bottom, bottom_left)
    return out


def inverse_transform(coeffs: CoefficientImage) -> PixelGrid:
    """Rebuild a pixel grid at the coefficient image's original size."""
    out = reconstruct(coeffs)
    grid = PixelGrid.zeros(coeffs.width, coeffs.height)
    grid.pixels[: out.shape[0], : out.shape[1]] = to_display(out)
    return grid
