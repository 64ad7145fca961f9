"""Stegano-Wavelet package: hide one image inside another's wavelet detail bands.

Modules:
- channels: channel-wise arithmetic and display/coefficient conversions
- image_utils: PixelGrid container, lossless image I/O, PSNR
- wavelet: one-level sum/difference wavelet transform and its inverse
- blocks: 2x2 block decomposition and recomposition of coefficient grids
- matching: block RMSE and nearest-block search
- embedder: greedy embedding and key-driven extraction
- keyfile: versioned binary key format
- errors: exception hierarchy
- cli: command-line interface (hide/extract/capacity/show-key)
"""

from .embedder import embed, extract
from .image_utils import PixelGrid
from .keyfile import StegoKey

__all__ = [
    "channels",
    "image_utils",
    "wavelet",
    "blocks",
    "matching",
    "embedder",
    "keyfile",
    "errors",
    "embed",
    "extract",
    "PixelGrid",
    "StegoKey",
]
