# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

FLIP Color Engine
=================
Single-precision color primitives for the FLIP perceptual difference
evaluator.  Every transform here matches the reference FLIP tool
constant-for-constant so that error maps agree with published results
within 8-bit rounding.

This module provides:
1. Transfer functions: sRGB EOTF / OETF as Numba kernels, with fast-math
   and strict IEEE 754 variants selectable at runtime.
2. Linear transforms: linear RGB <-> CIE XYZ (D65) using the rational
   coefficients of the FLIP reference implementation.
3. Opponent spaces: XYZ <-> YCxCz (linearised CIELAB) and XYZ <-> CIELAB.
4. Metrics: Hunt adjustment, HyAB distance and the maximum HyAB distance
   used to normalise the FLIP color error.

Storage convention:
    All inputs and outputs are float32 arrays whose last axis holds the
    three color components.  Arrays of any leading shape are accepted, so
    an (H, W, 3) image and a single (3,) color go through the same code.

References:
    - Andersson et al. (2020). "FLIP: A Difference Evaluator for
      Alternating Images". Proc. ACM Comput. Graph. Interact. Tech. 3(2).
    - IEC 61966-2-1:1999 (sRGB Standard)
    - Abasi, Tehran & Fairchild (2020). "Distance metrics for very large
      color differences" (HyAB).
"""

import functools
import numpy as np
import numpy.typing as npt
from numba import njit
from typing import Final, TypeAlias, Callable, Any

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",

    # --- Constants ---
    "REFERENCE_ILLUMINANT",
    "INV_REFERENCE_ILLUMINANT",
    "LAB_DELTA",
    "LAB_EPSILON",
    "M_LINEAR_RGB_TO_XYZ_T",
    "M_XYZ_TO_LINEAR_RGB_T",

    # --- Configuration ---
    "set_strict_ieee",
    "is_strict_ieee",

    # --- Decorators ---
    "handle_shapes",

    # --- Classes ---
    "ColorSpaceEngine",
    "ColorMetrics",

    # --- 8-bit codec ---
    "encode_srgb8",
    "decode_srgb8",
]

# --- Type Aliases ---
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# --- Constants & Pre-Transposed Matrices ---

# D65 reference white as stored by the FLIP reference tool.  The inverse is
# kept as its own rounded constant rather than computed, because the tool
# multiplies by this exact value.
REFERENCE_ILLUMINANT: Final[ArrayFloat] = np.array(
    [0.950428545, 1.000000000, 1.088900371], dtype=np.float32)
INV_REFERENCE_ILLUMINANT: Final[ArrayFloat] = np.array(
    [1.052156925, 1.000000000, 0.918357670], dtype=np.float32)

# Linear RGB -> XYZ (D65).
# Source: https://www.image-engineering.de/library/technotes/958-how-to-convert-between-srgb-and-ciexyz
_M_LINEAR_RGB_TO_XYZ_BASE = np.array([
    [10135552.0 / 24577794.0, 8788810.0 / 24577794.0, 4435075.0 / 24577794.0],
    [2613072.0 / 12288897.0,  8788810.0 / 12288897.0, 887015.0 / 12288897.0],
    [1425312.0 / 73733382.0,  8788810.0 / 73733382.0, 70074185.0 / 73733382.0],
], dtype=np.float32)
# Pre-transposed so that row-vector pixels can be multiplied as ``rgb @ M_T``.
M_LINEAR_RGB_TO_XYZ_T: Final[ArrayFloat] = _M_LINEAR_RGB_TO_XYZ_BASE.T.copy()

# Inverse of the matrix above, rounded to the published nine digits.
_M_XYZ_TO_LINEAR_RGB_BASE = np.array([
    [ 3.241003275, -1.537398934, -0.498615861],
    [-0.969224334,  1.875930071,  0.041554224],
    [ 0.055639423, -0.204011202,  1.057148933],
], dtype=np.float32)
M_XYZ_TO_LINEAR_RGB_T: Final[ArrayFloat] = _M_XYZ_TO_LINEAR_RGB_BASE.T.copy()

# --- CIELAB constants ---
# delta = 6/29 is where f(t) switches from the cube root to its linear tail.
LAB_DELTA: Final[float] = 6.0 / 29.0
LAB_EPSILON: Final[float] = LAB_DELTA * LAB_DELTA * LAB_DELTA  # ~0.008856

# float32 copies for the Numba kernels (globals are frozen at compile time).
_F32_DELTA = np.float32(LAB_DELTA)
_F32_DELTA_CUBE = np.float32(LAB_EPSILON)
_F32_LAB_FACTOR = np.float32(1.0 / (3.0 * LAB_DELTA * LAB_DELTA))
_F32_LAB_FACTOR_INV = np.float32(3.0 * LAB_DELTA * LAB_DELTA)
_F32_LAB_TERM = np.float32(4.0 / 29.0)
_F32_ONE_THIRD = np.float32(1.0 / 3.0)
_F32_INV_GAMMA = np.float32(1.0 / 2.4)
_F32_GAMMA = np.float32(2.4)


# --- Runtime Configuration ---
# When True, Numba kernels use fastmath=False variants that preserve strict
# IEEE 754 semantics (inf / NaN propagation, no FP reassociation).  The
# convolution kernels in ``loupe_filters`` honour the same switch.
#
# Toggle at runtime via:
#     import loupe_colorengine as ce
#     ce.set_strict_ieee(True)   # enable strict mode
#     ce.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    Strict mode is useful when comparing error maps bit-for-bit across
    machines: fast-math lets LLVM reorder the filter accumulations, which
    moves results by a few ULPs.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)

def is_strict_ieee() -> bool:
    """Returns True when the strict IEEE 754 kernels are selected."""
    return _STRICT_IEEE


# =============================================================================
# 1. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Decorator to normalize inputs to contiguous float32 (N, 3) batches.

    Any leading shape is flattened before the call and restored afterwards,
    so images (H, W, 3), pixel lists (N, 3) and single colors (3,) share the
    same kernels.

    Args:
        func: The function to decorate.

    Returns:
        The wrapped function with shape handling.
    """
    @functools.wraps(func)
    def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr)
        if arr.shape[-1:] != (3,):
            raise ValueError(f"Expected last dimension size 3, got shape {arr.shape}")

        flat = np.ascontiguousarray(arr.reshape(-1, 3), dtype=np.float32)
        res = func(flat, *args, **kwargs)
        return res.reshape(arr.shape)
    return wrapper


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# NOTE: fastmath=True allows reassociation and relaxed IEEE compliance.
# The strict variants below are selected by set_strict_ieee(True).

@njit(cache=True, fastmath=True)
def _fast_gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB OETF (linear -> encoded).

    Standard: IEC 61966-2-1

    Performance Note:
        Uses an explicit loop instead of `np.where` to avoid allocating a
        boolean mask array and evaluating the power on the linear segment.
    """
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()

    for i in range(linear.size):
        v = linear_flat[i]
        if v <= np.float32(0.0031308):
            out_flat[i] = np.float32(12.92) * v
        else:
            out_flat[i] = np.float32(1.055) * (v ** _F32_INV_GAMMA) - np.float32(0.055)
    return out

@njit(cache=True, fastmath=True)
def _fast_inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB EOTF (encoded -> linear).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()

    for i in range(srgb.size):
        v = srgb_flat[i]
        if v <= np.float32(0.04045):
            out_flat[i] = v / np.float32(12.92)
        else:
            out_flat[i] = ((v + np.float32(0.055)) / np.float32(1.055)) ** _F32_GAMMA
    return out

@njit(cache=True, fastmath=True)
def _xyz_to_lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    Cube root above (6/29)^3, linear tail t / (3 delta^2) + 4/29 below.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > _F32_DELTA_CUBE:
            out_flat[i] = v ** _F32_ONE_THIRD
        else:
            out_flat[i] = _F32_LAB_FACTOR * v + _F32_LAB_TERM
    return out

@njit(cache=True, fastmath=True)
def _lab_to_xyz_f_inv(t: ArrayFloat) -> ArrayFloat:
    """Inverse of the CIELAB transfer function."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > _F32_DELTA:
            out_flat[i] = v * v * v
        else:
            out_flat[i] = _F32_LAB_FACTOR_INV * (v - _F32_LAB_TERM)
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False)
def _fast_gamma_srgb_strict(linear: ArrayFloat) -> ArrayFloat:
    """sRGB OETF: strict IEEE 754 variant."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        if v <= np.float32(0.0031308):
            out_flat[i] = np.float32(12.92) * v
        else:
            out_flat[i] = np.float32(1.055) * (v ** _F32_INV_GAMMA) - np.float32(0.055)
    return out

@njit(cache=True, fastmath=False)
def _fast_inverse_gamma_srgb_strict(srgb: ArrayFloat) -> ArrayFloat:
    """sRGB EOTF: strict IEEE 754 variant."""
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()
    for i in range(srgb.size):
        v = srgb_flat[i]
        if v <= np.float32(0.04045):
            out_flat[i] = v / np.float32(12.92)
        else:
            out_flat[i] = ((v + np.float32(0.055)) / np.float32(1.055)) ** _F32_GAMMA
    return out

@njit(cache=True, fastmath=False)
def _xyz_to_lab_f_strict(t: ArrayFloat) -> ArrayFloat:
    """Lab f(t): strict IEEE 754 variant."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > _F32_DELTA_CUBE:
            out_flat[i] = v ** _F32_ONE_THIRD
        else:
            out_flat[i] = _F32_LAB_FACTOR * v + _F32_LAB_TERM
    return out

@njit(cache=True, fastmath=False)
def _lab_to_xyz_f_inv_strict(t: ArrayFloat) -> ArrayFloat:
    """Lab f_inv(t): strict IEEE 754 variant."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > _F32_DELTA:
            out_flat[i] = v * v * v
        else:
            out_flat[i] = _F32_LAB_FACTOR_INV * (v - _F32_LAB_TERM)
    return out


# --- Kernel dispatchers ---

def _gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB OETF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_gamma_srgb_strict(linear)
    return _fast_gamma_srgb(linear)

def _inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB EOTF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_inverse_gamma_srgb_strict(srgb)
    return _fast_inverse_gamma_srgb(srgb)

def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f(t) to fast or strict kernel."""
    if _STRICT_IEEE:
        return _xyz_to_lab_f_strict(t)
    return _xyz_to_lab_f(t)

def _lab_f_inv(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f_inv(t) to fast or strict kernel."""
    if _STRICT_IEEE:
        return _lab_to_xyz_f_inv_strict(t)
    return _lab_to_xyz_f_inv(t)


# =============================================================================
# 3. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for the color transforms used by FLIP.

    Architecture Note:
        Core transforms provide both a public ``@handle_shapes`` decorated API
        and an internal ``_raw`` fast-path that assumes contiguous (N, 3)
        float32 input.  Chained pipelines (e.g. ``linear_rgb_to_lab``) call the
        ``_raw`` variants to avoid redundant reshapes at each stage.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, 3) float32)
    # =====================================================================

    @staticmethod
    def _srgb_to_linear_raw(srgb: ArrayFloat) -> ArrayFloat:
        return _inverse_gamma_srgb(srgb)

    @staticmethod
    def _linear_to_srgb_raw(linear: ArrayFloat) -> ArrayFloat:
        return _gamma_srgb(linear)

    @staticmethod
    def _linear_rgb_to_xyz_raw(rgb: ArrayFloat) -> ArrayFloat:
        return np.dot(rgb, M_LINEAR_RGB_TO_XYZ_T)

    @staticmethod
    def _xyz_to_linear_rgb_raw(xyz: ArrayFloat) -> ArrayFloat:
        return np.dot(xyz, M_XYZ_TO_LINEAR_RGB_T)

    @staticmethod
    def _xyz_to_ycxcz_raw(xyz: ArrayFloat) -> ArrayFloat:
        xyz_norm = xyz * INV_REFERENCE_ILLUMINANT
        out = np.empty_like(xyz_norm)
        out[:, 0] = np.float32(116.0) * xyz_norm[:, 1] - np.float32(16.0)
        out[:, 1] = np.float32(500.0) * (xyz_norm[:, 0] - xyz_norm[:, 1])
        out[:, 2] = np.float32(200.0) * (xyz_norm[:, 1] - xyz_norm[:, 2])
        return out

    @staticmethod
    def _ycxcz_to_xyz_raw(ycxcz: ArrayFloat) -> ArrayFloat:
        yy = (ycxcz[:, 0] + np.float32(16.0)) / np.float32(116.0)
        cx = ycxcz[:, 1] / np.float32(500.0)
        cz = ycxcz[:, 2] / np.float32(200.0)

        out = np.empty_like(ycxcz)
        out[:, 0] = yy + cx
        out[:, 1] = yy
        out[:, 2] = yy - cz
        out *= REFERENCE_ILLUMINANT
        return out

    @staticmethod
    def _xyz_to_lab_raw(xyz: ArrayFloat) -> ArrayFloat:
        f_xyz = _lab_f(np.ascontiguousarray(xyz * INV_REFERENCE_ILLUMINANT))

        out = np.empty_like(f_xyz)
        out[:, 0] = np.float32(116.0) * f_xyz[:, 1] - np.float32(16.0)
        out[:, 1] = np.float32(500.0) * (f_xyz[:, 0] - f_xyz[:, 1])
        out[:, 2] = np.float32(200.0) * (f_xyz[:, 1] - f_xyz[:, 2])
        return out

    @staticmethod
    def _lab_to_xyz_raw(lab: ArrayFloat) -> ArrayFloat:
        fy = (lab[:, 0] + np.float32(16.0)) / np.float32(116.0)

        f_xyz = np.empty_like(lab)
        f_xyz[:, 0] = fy + lab[:, 1] / np.float32(500.0)
        f_xyz[:, 1] = fy
        f_xyz[:, 2] = fy - lab[:, 2] / np.float32(200.0)

        xyz = _lab_f_inv(f_xyz)
        xyz *= REFERENCE_ILLUMINANT
        return xyz

    @staticmethod
    def _hunt_adjustment_raw(lab: ArrayFloat) -> ArrayFloat:
        out = lab.copy()
        scale = np.float32(0.01) * lab[:, 0]
        out[:, 1] = scale * lab[:, 1]
        out[:, 2] = scale * lab[:, 2]
        return out

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    @staticmethod
    @handle_shapes
    def srgb_to_linear(srgb: ArrayFloat) -> ArrayFloat:
        """
        Decodes sRGB values in [0, 1] to linear RGB.

        Args:
            srgb: Encoded data, shape (..., 3).

        Returns:
            Linear RGB, float32, same shape.
        """
        return ColorSpaceEngine._srgb_to_linear_raw(srgb)

    @staticmethod
    @handle_shapes
    def linear_to_srgb(linear: ArrayFloat) -> ArrayFloat:
        """
        Encodes linear RGB with the sRGB OETF.

        Negative inputs take the linear segment and stay negative; clamp
        beforehand for display-referred output.
        """
        return ColorSpaceEngine._linear_to_srgb_raw(linear)

    @staticmethod
    @handle_shapes
    def linear_rgb_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
        """Converts linear RGB to CIE XYZ (D65)."""
        return ColorSpaceEngine._linear_rgb_to_xyz_raw(rgb)

    @staticmethod
    @handle_shapes
    def xyz_to_linear_rgb(xyz: ArrayFloat) -> ArrayFloat:
        """Converts CIE XYZ (D65) to linear RGB, without clipping."""
        return ColorSpaceEngine._xyz_to_linear_rgb_raw(xyz)

    @staticmethod
    @handle_shapes
    def xyz_to_ycxcz(xyz: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ to the YCxCz opponent space.

        YCxCz is CIELAB with the cube-root compression removed:
            Y  = 116 * (y / Yn) - 16
            Cx = 500 * (x / Xn - y / Yn)
            Cz = 200 * (y / Yn - z / Zn)
        Being linear in XYZ, it can be filtered by the contrast sensitivity
        functions without introducing non-linear artefacts.
        """
        return ColorSpaceEngine._xyz_to_ycxcz_raw(xyz)

    @staticmethod
    @handle_shapes
    def ycxcz_to_xyz(ycxcz: ArrayFloat) -> ArrayFloat:
        """Converts YCxCz back to XYZ (D65)."""
        return ColorSpaceEngine._ycxcz_to_xyz_raw(ycxcz)

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ to CIELAB (L*a*b*) relative to the FLIP D65 white.

        Args:
            xyz: Input XYZ data, shape (..., 3).

        Returns:
            Lab coordinates.
        """
        return ColorSpaceEngine._xyz_to_lab_raw(xyz)

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab: ArrayFloat) -> ArrayFloat:
        """Converts CIELAB to XYZ (D65)."""
        return ColorSpaceEngine._lab_to_xyz_raw(lab)

    @staticmethod
    @handle_shapes
    def hunt_adjustment(lab: ArrayFloat) -> ArrayFloat:
        """
        Applies the Hunt effect model to CIELAB colors.

        Chroma is perceived as weaker at low luminance, so a* and b* are
        scaled by 0.01 * L*.  L* itself is unchanged.
        """
        return ColorSpaceEngine._hunt_adjustment_raw(lab)

    # --- Convenience pipelines ---

    @staticmethod
    @handle_shapes
    def linear_rgb_to_ycxcz(rgb: ArrayFloat) -> ArrayFloat:
        """Direct conversion linear RGB -> YCxCz."""
        xyz = ColorSpaceEngine._linear_rgb_to_xyz_raw(rgb)
        return ColorSpaceEngine._xyz_to_ycxcz_raw(xyz)

    @staticmethod
    @handle_shapes
    def ycxcz_to_linear_rgb(ycxcz: ArrayFloat) -> ArrayFloat:
        """Direct conversion YCxCz -> linear RGB (unclipped)."""
        xyz = ColorSpaceEngine._ycxcz_to_xyz_raw(ycxcz)
        return ColorSpaceEngine._xyz_to_linear_rgb_raw(xyz)

    @staticmethod
    @handle_shapes
    def srgb_to_ycxcz(srgb: ArrayFloat) -> ArrayFloat:
        """Direct conversion sRGB -> YCxCz."""
        linear = ColorSpaceEngine._srgb_to_linear_raw(srgb)
        xyz = ColorSpaceEngine._linear_rgb_to_xyz_raw(linear)
        return ColorSpaceEngine._xyz_to_ycxcz_raw(xyz)

    @staticmethod
    @handle_shapes
    def linear_rgb_to_lab(rgb: ArrayFloat) -> ArrayFloat:
        """Direct conversion linear RGB -> CIELAB."""
        xyz = ColorSpaceEngine._linear_rgb_to_xyz_raw(rgb)
        return ColorSpaceEngine._xyz_to_lab_raw(xyz)

    @staticmethod
    @handle_shapes
    def linear_rgb_to_hunt_lab(rgb: ArrayFloat) -> ArrayFloat:
        """Linear RGB -> Hunt-adjusted CIELAB, the space FLIP measures in."""
        xyz = ColorSpaceEngine._linear_rgb_to_xyz_raw(rgb)
        lab = ColorSpaceEngine._xyz_to_lab_raw(xyz)
        return ColorSpaceEngine._hunt_adjustment_raw(lab)


# =============================================================================
# 4. METRICS
# =============================================================================

class ColorMetrics:
    @staticmethod
    def hyab(lab1: ArrayFloat, lab2: ArrayFloat) -> ArrayFloat:
        """
        HyAB color distance: city-block on lightness, Euclidean on chroma.

            HyAB = |L1 - L2| + sqrt((a1 - a2)^2 + (b1 - b2)^2)

        Args:
            lab1: Reference colors, shape (..., 3).
            lab2: Sample colors, broadcastable against lab1.

        Returns:
            float32 distances with the broadcast leading shape.
        """
        l1 = np.asarray(lab1, dtype=np.float32)
        l2 = np.asarray(lab2, dtype=np.float32)
        if l1.shape[-1:] != (3,) or l2.shape[-1:] != (3,):
            raise ValueError(f"Inputs must have shape (..., 3), got {l1.shape} and {l2.shape}")

        delta = l1 - l2
        d_l = np.abs(delta[..., 0])
        d_ab = np.sqrt(delta[..., 1] * delta[..., 1] + delta[..., 2] * delta[..., 2])
        return d_l + d_ab

    @staticmethod
    @functools.lru_cache(maxsize=8)
    def max_hyab_distance(qc: float = 0.7) -> float:
        """
        Largest exponentiated HyAB distance between two colors of the RGB cube.

        In Hunt-adjusted CIELAB the pure green and pure blue primaries are the
        furthest apart; FLIP uses their distance, raised to ``qc``, as the
        ``cmax`` normaliser of the color error.
        """
        primaries = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0]], dtype=np.float32)
        hunt_lab = ColorSpaceEngine.linear_rgb_to_hunt_lab(primaries)
        distance = ColorMetrics.hyab(hunt_lab[0], hunt_lab[1])
        return float(np.power(np.float32(distance), np.float32(qc)))


# =============================================================================
# 5. 8-BIT sRGB CODEC
# =============================================================================

def decode_srgb8(data: Any) -> ArrayFloat:
    """
    Decodes 8-bit sRGB code values to linear float32.

    Args:
        data: uint8 array-like of shape (..., 3).

    Returns:
        Linear RGB in [0, 1], float32, same shape.
    """
    encoded = np.asarray(data, dtype=np.uint8).astype(np.float32) / np.float32(255.0)
    return ColorSpaceEngine.srgb_to_linear(encoded)

def encode_srgb8(linear: ArrayFloat) -> np.ndarray:
    """
    Encodes linear RGB to 8-bit sRGB code values.

    Values are clamped to [0, 1] after the OETF and rounded half-up, so a
    decode/encode round trip reproduces each byte within one code value.
    """
    encoded = ColorSpaceEngine.linear_to_srgb(np.clip(linear, 0.0, 1.0))
    encoded = np.clip(encoded, 0.0, 1.0)
    return (encoded * np.float32(255.0) + np.float32(0.5)).astype(np.uint8)
