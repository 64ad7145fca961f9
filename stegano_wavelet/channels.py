from __future__ import annotations

import numpy as np


COEFFICIENT_DTYPE = np.int64
DISPLAY_DTYPE = np.uint8


def _widen(values) -> np.ndarray:
    arr = np.asarray(values)
    if arr.dtype.kind in "biu":
        return arr.astype(COEFFICIENT_DTYPE, copy=False)
    return arr


def to_coefficients(values) -> np.ndarray:
    """Convert display values (0..255) into signed coefficients."""
    return np.asarray(values).astype(COEFFICIENT_DTYPE)


def to_display(values) -> np.ndarray:
    """Truncate toward zero and clamp into the 0..255 display range."""
    arr = np.trunc(np.asarray(values, dtype=np.float64))
    return np.clip(arr, 0, 255).astype(DISPLAY_DTYPE)


def add(a, b) -> np.ndarray:
    return _widen(a) + _widen(b)


def subtract(a, b) -> np.ndarray:
    return _widen(a) - _widen(b)


def divide(a, scalar) -> np.ndarray:
    return _widen(a) / scalar
