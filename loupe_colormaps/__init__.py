# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Colormap tables and the index arithmetic used to apply them to error maps.
"""

import numpy as np
from numba import njit

from loupe_colorengine import ArrayFloat, ColorSpaceEngine
from .magma import MAGMA_SRGB

__all__ = [
    "MAGMA_SRGB",
    "magma_srgb",
    "magma_linear",
    "lut_indices",
]


def magma_srgb() -> ArrayFloat:
    """Returns the magma table as a fresh (256, 3) float32 array of sRGB values."""
    return np.array(MAGMA_SRGB, dtype=np.float32)

def magma_linear() -> ArrayFloat:
    """Returns the magma table decoded to linear RGB, shape (256, 3)."""
    return ColorSpaceEngine.srgb_to_linear(magma_srgb())


@njit(cache=True)
def _lut_indices_kernel(values: ArrayFloat, n: int) -> np.ndarray:
    out = np.empty(values.size, dtype=np.int64)
    values_flat = values.ravel()
    last = n - 1
    for i in range(values.size):
        v = values_flat[i] * np.float32(255.0)
        if v != v:
            out[i] = 0
            continue
        # round half away from zero
        if v >= 0.0:
            r = np.int64(np.floor(v + 0.5))
        else:
            r = -np.int64(np.floor(-v + 0.5))
        r = r % n
        out[i] = r if r < last else last
    return out

def lut_indices(values: ArrayFloat, n: int) -> np.ndarray:
    """
    Maps float values to lookup table rows.

    Each value becomes ``min(round(v * 255) mod n, n - 1)`` with halves rounded
    away from zero; NaN selects row 0.  The modulo follows Python's sign
    convention, so negative values wrap to the top of the table.

    Args:
        values: float array of any shape.
        n: number of lookup table rows, at least 1.

    Returns:
        int64 indices with the shape of ``values``.
    """
    if n < 1:
        raise ValueError(f"Lookup table must have at least one entry, got {n}")
    arr = np.ascontiguousarray(values, dtype=np.float32)
    return _lut_indices_kernel(arr, int(n)).reshape(arr.shape)
