# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Spatial Filter Bank
===================
Separable 1-D kernels for the two FLIP pipelines and the edge-clamped
convolution that applies them.

1. Contrast sensitivity (CSF) kernels: each opponent channel of YCxCz is
   low-pass filtered by the spatial contrast sensitivity of the human eye,
   modelled as (a sum of) Gaussians in the frequency domain.  Their spatial
   counterparts are Gaussians as well, so each 2-D filter separates into a
   horizontal and a vertical pass.
2. Feature kernels: a Gaussian and its first and second derivatives at a
   scale matched to the visibility of edges and points.

All kernels are sampled and normalised in float32 like the FLIP reference
tool.  Convolution uses clamp-to-edge indexing and float32 accumulation.

Sign convention:
    The passes compute a correlation, ``out[x] = sum_k w[k] * in[x + k - r]``.
    Only the first-derivative kernel is antisymmetric, and FLIP uses it
    through a gradient magnitude, so the sign is immaterial downstream.
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Final, Sequence, Union

import numpy as np
from numba import njit, prange

import loupe_colorengine as _engine
from loupe_colorengine import ArrayFloat
from loupe_image import ColorImage, FloatImage

__all__ = [
    # --- Constants ---
    "CSF_PARAMETERS",
    "FEATURE_WIDTH",

    # --- Kernels ---
    "Kernel",
    "SpatialKernels",
    "FeatureKernels",
    "check_pixels_per_degree",
    "spatial_filter_radius",
    "spatial_kernels",
    "feature_filter_radius",
    "feature_kernels",

    # --- Convolution ---
    "convolve_separable",
    "filter_image",
]

logger = logging.getLogger(__name__)

# --- Constants ---

# Contrast sensitivity of the three YCxCz channels as (a1, b1, a2, b2):
#     CSF(f) = a1 * exp(-b1 * f^2) + a2 * exp(-b2 * f^2)
# Spatially, each term is a * sqrt(pi / b) * exp(-pi^2 * x^2 / b).
CSF_PARAMETERS: Final[dict[str, tuple[float, float, float, float]]] = {
    "Y":  (1.0, 0.0047, 0.0, 1.0e-5),
    "Cx": (1.0, 0.0053, 0.0, 1.0e-5),
    "Cz": (34.1, 0.04, 13.5, 0.025),
}

# Feature detector width in degrees of visual angle; sigma = 0.5 * w * ppd.
FEATURE_WIDTH: Final[float] = 0.082

_PI = np.float32(np.pi)


# =============================================================================
# 1. KERNEL TYPES
# =============================================================================

@dataclass(slots=True, frozen=True, eq=False)
class Kernel:
    """A sampled, odd-length 1-D filter with derivative order 0, 1 or 2."""
    weights: np.ndarray
    order:   int = 0

    def __post_init__(self) -> None:
        w = np.array(self.weights, dtype=np.float32)
        if w.ndim != 1 or w.size % 2 != 1:
            raise ValueError(f"Kernel weights must be 1-D with odd length, got shape {w.shape}")
        if self.order not in (0, 1, 2):
            raise ValueError(f"Kernel order must be 0, 1 or 2, got {self.order}")
        w.flags.writeable = False
        object.__setattr__(self, "weights", w)

    @property
    def radius(self) -> int:
        return (self.weights.size - 1) // 2

    @property
    def width(self) -> int:
        return self.weights.size


@dataclass(slots=True, frozen=True)
class SpatialKernels:
    """CSF kernels for Y, Cx and the two separated Gaussians of Cz."""
    y:   Kernel
    cx:  Kernel
    cz1: Kernel
    cz2: Kernel


@dataclass(slots=True, frozen=True)
class FeatureKernels:
    """Gaussian and derivative-of-Gaussian kernels for edge and point detection."""
    gaussian: Kernel
    first:    Kernel
    second:   Kernel


def check_pixels_per_degree(ppd: float) -> float:
    """Returns ppd as a float, raising ValueError unless it is finite and positive."""
    ppd = float(ppd)
    if not math.isfinite(ppd) or ppd <= 0.0:
        raise ValueError(f"Pixels per degree must be finite and positive, got {ppd}")
    return ppd


# =============================================================================
# 2. CSF KERNELS
# =============================================================================

def spatial_filter_radius(ppd: float) -> int:
    """
    Half-width of the CSF kernels, shared by all three channels.

    Three standard deviations of the widest spatial Gaussian, converted from
    degrees to pixels: ``ceil(3 * sqrt(max_b / (2 pi^2)) * ppd)``.
    """
    ppd = check_pixels_per_degree(ppd)
    max_b = max(max(p[1], p[3]) for p in CSF_PARAMETERS.values())
    return int(math.ceil(3.0 * math.sqrt(max_b / (2.0 * math.pi * math.pi)) * ppd))

def _spatial_gaussian(x: ArrayFloat, a: float, b: float) -> ArrayFloat:
    a32, b32 = np.float32(a), np.float32(b)
    return a32 * np.sqrt(_PI / b32) * np.exp(-_PI * _PI * x * x / b32)

def spatial_kernels(ppd: float) -> SpatialKernels:
    """
    Builds the CSF kernels for a viewing geometry.

    Y and Cx are single Gaussians, normalised to sum 1.  Cz is the sum of two
    Gaussians; each is split into equal horizontal and vertical factors
    ``sqrt(a * sqrt(pi / b)) * exp(-pi^2 x^2 / b)`` and both are scaled by
    ``1 / sqrt(S1^2 + S2^2)``, which makes the summed 2-D filter sum to 1.

    Args:
        ppd: Pixels per degree of visual angle.

    Returns:
        SpatialKernels with four kernels of width ``2 * radius + 1``.
    """
    radius = spatial_filter_radius(ppd)
    x = (np.arange(-radius, radius + 1, dtype=np.float32)) / np.float32(ppd)

    a1, b1, _, _ = CSF_PARAMETERS["Y"]
    k_y = _spatial_gaussian(x, a1, b1)
    k_y /= k_y.sum()

    a1, b1, _, _ = CSF_PARAMETERS["Cx"]
    k_cx = _spatial_gaussian(x, a1, b1)
    k_cx /= k_cx.sum()

    a1, b1, a2, b2 = CSF_PARAMETERS["Cz"]
    k_cz1 = np.sqrt(np.float32(a1) * np.sqrt(_PI / np.float32(b1))) * np.exp(-_PI * _PI * x * x / np.float32(b1))
    k_cz2 = np.sqrt(np.float32(a2) * np.sqrt(_PI / np.float32(b2))) * np.exp(-_PI * _PI * x * x / np.float32(b2))
    s1, s2 = k_cz1.sum(), k_cz2.sum()
    scale = np.float32(1.0) / np.sqrt(s1 * s1 + s2 * s2)
    k_cz1 *= scale
    k_cz2 *= scale

    logger.debug(f"CSF kernels for ppd={ppd}: radius={radius}")
    return SpatialKernels(Kernel(k_y), Kernel(k_cx), Kernel(k_cz1), Kernel(k_cz2))


# =============================================================================
# 3. FEATURE KERNELS
# =============================================================================

def feature_filter_radius(ppd: float, width: float = FEATURE_WIDTH) -> int:
    """Half-width of the feature kernels: ``ceil(3 * sigma)``, ``sigma = 0.5 * width * ppd``."""
    ppd = check_pixels_per_degree(ppd)
    if not width > 0.0:
        raise ValueError(f"Feature width must be positive, got {width}")
    sigma = 0.5 * width * ppd
    return int(math.ceil(3.0 * sigma))

def _normalize_lobes(k: ArrayFloat, name: str, ppd: float) -> ArrayFloat:
    """Scales positive weights to sum 1 and negative weights to sum -1."""
    pos = k > 0.0
    neg = k < 0.0
    pos_sum = k[pos].sum(dtype=np.float32)
    neg_sum = -k[neg].sum(dtype=np.float32)
    out = k.copy()
    if pos_sum > 0.0:
        out[pos] /= pos_sum
    if neg_sum > 0.0:
        out[neg] /= neg_sum
    if not (pos_sum > 0.0 and neg_sum > 0.0):
        warnings.warn(
            f"{name} feature kernel is degenerate at ppd={ppd}: a lobe underflowed "
            "to zero and was left unnormalised.",
            RuntimeWarning,
            stacklevel=3,
        )
    return out

def feature_kernels(ppd: float, width: float = FEATURE_WIDTH) -> FeatureKernels:
    """
    Builds the Gaussian and derivative-of-Gaussian feature kernels.

    With ``x`` in pixels and ``g = exp(-x^2 / (2 sigma^2))``:

    * gaussian: ``g`` normalised to sum 1;
    * first:    ``-x * g``, positive and negative lobes normalised to +1/-1;
    * second:   ``(x^2 / sigma^2 - 1) * g``, lobes normalised likewise.

    Emits ``RuntimeWarning`` when ppd is so small that a derivative lobe
    vanishes in float32.
    """
    radius = feature_filter_radius(ppd, width)
    sigma = np.float32(0.5 * width * ppd)
    x = np.arange(-radius, radius + 1, dtype=np.float32)

    g = np.exp(-(x * x) / (np.float32(2.0) * sigma * sigma))
    dg = -x * g
    ddg = (x * x / (sigma * sigma) - np.float32(1.0)) * g

    gaussian = g / g.sum(dtype=np.float32)
    first = _normalize_lobes(dg, "First-derivative", ppd)
    second = _normalize_lobes(ddg, "Second-derivative", ppd)

    logger.debug(f"Feature kernels for ppd={ppd}: sigma={float(sigma):.4f}, radius={radius}")
    return FeatureKernels(Kernel(gaussian, 0), Kernel(first, 1), Kernel(second, 2))


# =============================================================================
# 4. SEPARABLE CONVOLUTION KERNELS (Numba Optimized)
# =============================================================================
# Planes are (C, H, W); kernel banks are (C, 2r + 1) with row c applied to
# plane c.  Rows and channels are distributed over threads with prange.

@njit(cache=True, fastmath=True, parallel=True)
def _correlate_rows(planes: ArrayFloat, bank: ArrayFloat) -> ArrayFloat:
    n_ch, h, w = planes.shape
    r = (bank.shape[1] - 1) // 2
    out = np.empty((n_ch, h, w), dtype=np.float32)
    for idx in prange(n_ch * h):
        c = idx // h
        y = idx % h
        for x in range(w):
            acc = np.float32(0.0)
            for k in range(bank.shape[1]):
                xx = min(max(x + k - r, 0), w - 1)
                acc += bank[c, k] * planes[c, y, xx]
            out[c, y, x] = acc
    return out

@njit(cache=True, fastmath=True, parallel=True)
def _correlate_cols(planes: ArrayFloat, bank: ArrayFloat) -> ArrayFloat:
    n_ch, h, w = planes.shape
    r = (bank.shape[1] - 1) // 2
    out = np.empty((n_ch, h, w), dtype=np.float32)
    for idx in prange(n_ch * h):
        c = idx // h
        y = idx % h
        for x in range(w):
            acc = np.float32(0.0)
            for k in range(bank.shape[1]):
                yy = min(max(y + k - r, 0), h - 1)
                acc += bank[c, k] * planes[c, yy, x]
            out[c, y, x] = acc
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False, parallel=True)
def _correlate_rows_strict(planes: ArrayFloat, bank: ArrayFloat) -> ArrayFloat:
    """Row pass: strict IEEE 754 variant."""
    n_ch, h, w = planes.shape
    r = (bank.shape[1] - 1) // 2
    out = np.empty((n_ch, h, w), dtype=np.float32)
    for idx in prange(n_ch * h):
        c = idx // h
        y = idx % h
        for x in range(w):
            acc = np.float32(0.0)
            for k in range(bank.shape[1]):
                xx = min(max(x + k - r, 0), w - 1)
                acc += bank[c, k] * planes[c, y, xx]
            out[c, y, x] = acc
    return out

@njit(cache=True, fastmath=False, parallel=True)
def _correlate_cols_strict(planes: ArrayFloat, bank: ArrayFloat) -> ArrayFloat:
    """Column pass: strict IEEE 754 variant."""
    n_ch, h, w = planes.shape
    r = (bank.shape[1] - 1) // 2
    out = np.empty((n_ch, h, w), dtype=np.float32)
    for idx in prange(n_ch * h):
        c = idx // h
        y = idx % h
        for x in range(w):
            acc = np.float32(0.0)
            for k in range(bank.shape[1]):
                yy = min(max(y + k - r, 0), h - 1)
                acc += bank[c, k] * planes[c, yy, x]
            out[c, y, x] = acc
    return out


def _kernel_bank(kernels: Sequence[Union[Kernel, ArrayFloat]]) -> ArrayFloat:
    """Stacks kernels into a (C, 2R + 1) float32 bank, zero-padding shorter ones."""
    rows = [k.weights if isinstance(k, Kernel) else Kernel(k).weights for k in kernels]
    radius = max((row.size - 1) // 2 for row in rows)
    bank = np.zeros((len(rows), 2 * radius + 1), dtype=np.float32)
    for c, row in enumerate(rows):
        pad = radius - (row.size - 1) // 2
        bank[c, pad:pad + row.size] = row
    return bank


# =============================================================================
# 5. PUBLIC CONVOLUTION API
# =============================================================================

def convolve_separable(planes: ArrayFloat,
                       x_kernels: Sequence[Union[Kernel, ArrayFloat]],
                       y_kernels: Sequence[Union[Kernel, ArrayFloat]]) -> ArrayFloat:
    """
    Filters a stack of planes with per-plane separable kernels.

    Plane ``c`` is correlated horizontally with ``x_kernels[c]`` and then
    vertically with ``y_kernels[c]``.  Samples outside the image repeat the
    nearest edge pixel.

    Args:
        planes: (C, H, W) or (H, W) array; converted to float32.
        x_kernels: C horizontal kernels (Kernel or odd-length 1-D arrays).
        y_kernels: C vertical kernels.

    Returns:
        Newly allocated float32 array with the shape of ``planes``.
    """
    arr = np.ascontiguousarray(planes, dtype=np.float32)
    squeeze = arr.ndim == 2
    if squeeze:
        arr = arr[np.newaxis]
    if arr.ndim != 3:
        raise ValueError(f"Expected planes of shape (C, H, W) or (H, W), got {np.shape(planes)}")
    n_ch = arr.shape[0]
    if len(x_kernels) != n_ch or len(y_kernels) != n_ch:
        raise ValueError(
            f"Need one kernel per plane: {n_ch} planes, "
            f"{len(x_kernels)} horizontal and {len(y_kernels)} vertical kernels")

    bank_x = _kernel_bank(x_kernels)
    bank_y = _kernel_bank(y_kernels)
    if _engine.is_strict_ieee():
        out = _correlate_cols_strict(_correlate_rows_strict(arr, bank_x), bank_y)
    else:
        out = _correlate_cols(_correlate_rows(arr, bank_x), bank_y)
    return out[0] if squeeze else out

def filter_image(image: Union[FloatImage, ColorImage],
                 kernel: Kernel,
                 kernel_y: Union[Kernel, None] = None) -> Union[FloatImage, ColorImage]:
    """
    Applies one separable kernel pair to every channel of an image.

    Args:
        image: Source image; left unchanged.
        kernel: Horizontal kernel (also vertical when ``kernel_y`` is None).
        kernel_y: Optional distinct vertical kernel.

    Returns:
        A new image of the same type and size.
    """
    ky = kernel if kernel_y is None else kernel_y
    if isinstance(image, ColorImage):
        planes = np.ascontiguousarray(image.pixels.transpose(2, 0, 1))
        out = convolve_separable(planes, [kernel] * 3, [ky] * 3)
        return ColorImage.from_linear(out.transpose(1, 2, 0))
    if isinstance(image, FloatImage):
        return FloatImage.from_array(convolve_separable(image.pixels, [kernel], [ky]))
    raise TypeError(f"Expected FloatImage or ColorImage, got {type(image).__name__}")
