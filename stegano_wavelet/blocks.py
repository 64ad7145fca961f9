from __future__ import annotations

from typing import Optional

import numpy as np

from .errors import DimensionError


# Corner order inside a block: top-left, top-right, bottom-left, bottom-right.
BLOCK_SIZE = 4


def block_count(width: int, height: int) -> int:
    """Number of complete 2x2 windows in a ``width`` x ``height`` grid."""
    return (width // 2) * (height // 2)


def decompose(grid: np.ndarray) -> np.ndarray:
    """Split a ``(height, width, channels)`` grid into ``(N, 4, channels)`` blocks.

    Windows are scanned row-major in steps of 2; a trailing odd row or
    column is not part of any block.
    """
    grid = np.asarray(grid)
    height, width, channels = grid.shape
    rows, cols = height // 2, width // 2
    cropped = grid[: 2 * rows, : 2 * cols]
    blocks = cropped.reshape(rows, 2, cols, 2, channels).swapaxes(1, 2)
    return blocks.reshape(rows * cols, BLOCK_SIZE, channels).copy()


def recompose(blocks: np.ndarray, width: int, height: int, base: Optional[np.ndarray] = None) -> np.ndarray:
    """Write blocks back to the grid positions :func:`decompose` read them from.

    Positions outside every complete window come from ``base`` when given,
    zero otherwise.
    """
    blocks = np.asarray(blocks)
    expected = block_count(width, height)
    if len(blocks) != expected:
        raise DimensionError(f"{width}x{height} grid takes {expected} blocks, got {len(blocks)}")
    channels = blocks.shape[2] if blocks.ndim == 3 else 3
    rows, cols = height // 2, width // 2

    if base is None:
        grid = np.zeros((height, width, channels), dtype=blocks.dtype)
    else:
        base = np.asarray(base)
        if base.shape != (height, width, channels):
            raise DimensionError(f"Base grid shape {base.shape} does not match {width}x{height}")
        grid = np.array(base, dtype=np.result_type(base, blocks))

    tiles = blocks.reshape(rows, cols, 2, 2, channels).swapaxes(1, 2)
    grid[: 2 * rows, : 2 * cols] = tiles.reshape(2 * rows, 2 * cols, channels)
    return grid
