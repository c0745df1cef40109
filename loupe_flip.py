# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

FLIP Error Engine
=================
Per-pixel perceptual difference between a reference and a test image, as
seen by an observer at a given number of pixels per degree (ppd).

Pipeline:
    1. Both images go linear RGB -> XYZ -> YCxCz.
    2. Color: every YCxCz channel is filtered by its contrast sensitivity
       kernel, converted back to linear RGB, clamped to the display gamut and
       measured in Hunt-adjusted CIELAB with HyAB.  The distance is raised to
       ``qc`` and remapped so that ``pc * cmax`` lands at ``pt``.
    3. Feature: the normalised luminance ``Y / 116 + 16 / 116`` is searched
       for edges (gradient magnitude) and points (second-derivative
       magnitude); their larger absolute difference is raised to ``qf``.
    4. ``E = color ^ (1 - feature)``, clamped to [0, 1].

References:
    - Andersson et al. (2020). "FLIP: A Difference Evaluator for
      Alternating Images". Proc. ACM Comput. Graph. Interact. Tech. 3(2).
"""

import logging
import math
from dataclasses import dataclass
from typing import Final, Optional

import numpy as np

from loupe_colorengine import ArrayFloat, ColorMetrics, ColorSpaceEngine
from loupe_filters import (
    check_pixels_per_degree,
    convolve_separable,
    feature_kernels,
    spatial_kernels,
)
from loupe_image import ColorImage, DimensionMismatchError, FloatImage

__all__ = [
    "DEFAULT_PIXELS_PER_DEGREE",
    "FlipConstants",
    "DEFAULT_FLIP_CONSTANTS",
    "pixels_per_degree",
    "compute_color_difference",
    "compute_feature_difference",
    "flip_error_map",
    "flip",
    "float_image_flip",
]

logger = logging.getLogger(__name__)

# A 0.7 m viewing distance to a 0.7 m wide 3840-pixel display.
DEFAULT_PIXELS_PER_DEGREE: Final[float] = 67.0


@dataclass(slots=True, frozen=True)
class FlipConstants:
    """
    Tuning constants of the FLIP model.

    Attributes:
        qc: Exponent applied to the HyAB color distance.
        qf: Exponent applied to the feature difference.
        pc: Fraction of ``cmax`` where the color remapping changes slope.
        pt: Error value assigned to ``pc * cmax``.
        w:  Feature detector width in degrees of visual angle.
    """
    qc: float = 0.7
    qf: float = 0.5
    pc: float = 0.4
    pt: float = 0.95
    w:  float = 0.082

    def __post_init__(self) -> None:
        if not (self.qc > 0.0 and self.qf > 0.0 and self.w > 0.0):
            raise ValueError(f"qc, qf and w must be positive, got {self.qc}, {self.qf}, {self.w}")
        if not (0.0 < self.pc < 1.0 and 0.0 < self.pt < 1.0):
            raise ValueError(f"pc and pt must lie in (0, 1), got {self.pc}, {self.pt}")


DEFAULT_FLIP_CONSTANTS: Final[FlipConstants] = FlipConstants()


def pixels_per_degree(distance: float, resolution_x: float, monitor_width: float) -> float:
    """
    Pixels per degree of visual angle for a viewing setup.

    Args:
        distance: Observer distance to the display, in meters.
        resolution_x: Horizontal display resolution, in pixels.
        monitor_width: Display width, in meters.
    """
    return distance * (resolution_x / monitor_width) * (math.pi / 180.0)


# =============================================================================
# 1. ARRAY-LEVEL STAGES
# =============================================================================

def _as_linear_rgb(array: ArrayFloat, name: str) -> ArrayFloat:
    arr = np.asarray(array, dtype=np.float32)
    if arr.ndim != 3 or arr.shape[2] != 3 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError(f"{name} must be a non-empty (H, W, 3) array, got shape {arr.shape}")
    return arr

def _check_pair(reference: ArrayFloat, test: ArrayFloat) -> tuple[ArrayFloat, ArrayFloat]:
    ref = _as_linear_rgb(reference, "reference")
    tst = _as_linear_rgb(test, "test")
    if ref.shape != tst.shape:
        raise DimensionMismatchError(
            f"Reference and test sizes differ: {ref.shape[1]}x{ref.shape[0]} vs {tst.shape[1]}x{tst.shape[0]}")
    return ref, tst

def _filtered_hunt_lab(ycxcz: ArrayFloat, ppd: float) -> ArrayFloat:
    """CSF-filters a YCxCz image and returns it in Hunt-adjusted CIELAB."""
    k = spatial_kernels(ppd)
    planes = np.ascontiguousarray(ycxcz.transpose(2, 0, 1)[[0, 1, 2, 2]])
    bank = [k.y, k.cx, k.cz1, k.cz2]
    filtered = convolve_separable(planes, bank, bank)

    out = np.empty_like(ycxcz)
    out[..., 0] = filtered[0]
    out[..., 1] = filtered[1]
    out[..., 2] = filtered[2] + filtered[3]

    linear = np.clip(ColorSpaceEngine.ycxcz_to_linear_rgb(out), 0.0, 1.0)
    return ColorSpaceEngine.linear_rgb_to_hunt_lab(linear)

def _redistribute(delta: ArrayFloat, constants: FlipConstants) -> ArrayFloat:
    cmax = np.float32(ColorMetrics.max_hyab_distance(constants.qc))
    pccmax = np.float32(constants.pc) * cmax
    pt = np.float32(constants.pt)
    low = delta * (pt / pccmax)
    high = pt + ((delta - pccmax) / (cmax - pccmax)) * (np.float32(1.0) - pt)
    return np.where(delta < pccmax, low, high).astype(np.float32)

def _color_difference(ref_ycxcz: ArrayFloat, test_ycxcz: ArrayFloat,
                      ppd: float, constants: FlipConstants) -> ArrayFloat:
    ref_lab = _filtered_hunt_lab(ref_ycxcz, ppd)
    test_lab = _filtered_hunt_lab(test_ycxcz, ppd)
    delta = np.power(ColorMetrics.hyab(ref_lab, test_lab), np.float32(constants.qc))
    return _redistribute(delta, constants)

def _feature_magnitudes(luminance: ArrayFloat, ppd: float, width: float) -> tuple[ArrayFloat, ArrayFloat]:
    """Edge and point strength of a normalised luminance plane."""
    k = feature_kernels(ppd, width)
    planes = np.broadcast_to(luminance, (4,) + luminance.shape)
    # x-derivative, xx-derivative, then smoothed rows for the y-derivatives
    x_bank = [k.first, k.second, k.gaussian, k.gaussian]
    y_bank = [k.gaussian, k.gaussian, k.first, k.second]
    dx, ddx, dy, ddy = convolve_separable(planes, x_bank, y_bank)
    return np.hypot(dx, dy), np.hypot(ddx, ddy)

def _feature_difference(ref_ycxcz: ArrayFloat, test_ycxcz: ArrayFloat,
                        ppd: float, constants: FlipConstants) -> ArrayFloat:
    scale, offset = np.float32(1.0 / 116.0), np.float32(16.0 / 116.0)
    ref_edge, ref_point = _feature_magnitudes(ref_ycxcz[..., 0] * scale + offset, ppd, constants.w)
    test_edge, test_point = _feature_magnitudes(test_ycxcz[..., 0] * scale + offset, ppd, constants.w)

    diff = np.maximum(np.abs(ref_edge - test_edge), np.abs(ref_point - test_point))
    return np.power(diff / np.float32(math.sqrt(2.0)), np.float32(constants.qf))

def compute_color_difference(reference: ArrayFloat, test: ArrayFloat, ppd: float,
                             constants: FlipConstants = DEFAULT_FLIP_CONSTANTS) -> ArrayFloat:
    """
    Color error of two linear RGB images after contrast sensitivity filtering.

    Args:
        reference: (H, W, 3) linear RGB.
        test: (H, W, 3) linear RGB of the same size.
        ppd: Pixels per degree.
        constants: Model constants.

    Returns:
        (H, W) float32 error, 0 for identical images.  Values may exceed 1
        only for distances beyond ``cmax``.
    """
    ppd = check_pixels_per_degree(ppd)
    ref, tst = _check_pair(reference, test)
    return _color_difference(ColorSpaceEngine.linear_rgb_to_ycxcz(ref),
                             ColorSpaceEngine.linear_rgb_to_ycxcz(tst), ppd, constants)

def compute_feature_difference(reference: ArrayFloat, test: ArrayFloat, ppd: float,
                               constants: FlipConstants = DEFAULT_FLIP_CONSTANTS) -> ArrayFloat:
    """Feature (edge and point) error of two linear RGB images, shape (H, W)."""
    ppd = check_pixels_per_degree(ppd)
    ref, tst = _check_pair(reference, test)
    return _feature_difference(ColorSpaceEngine.linear_rgb_to_ycxcz(ref),
                               ColorSpaceEngine.linear_rgb_to_ycxcz(tst), ppd, constants)


# =============================================================================
# 2. ENTRY POINTS
# =============================================================================

def flip_error_map(reference: ArrayFloat, test: ArrayFloat,
                   ppd: float = DEFAULT_PIXELS_PER_DEGREE,
                   constants: FlipConstants = DEFAULT_FLIP_CONSTANTS) -> ArrayFloat:
    """
    FLIP error map of two (H, W, 3) linear RGB arrays.

    Raises:
        DimensionMismatchError: If the arrays differ in shape.
        ValueError: If ppd is not finite and positive.
    """
    ppd = check_pixels_per_degree(ppd)
    ref, tst = _check_pair(reference, test)
    logger.debug(f"FLIP on {ref.shape[1]}x{ref.shape[0]} at ppd={ppd}")

    ref_ycxcz = ColorSpaceEngine.linear_rgb_to_ycxcz(ref)
    test_ycxcz = ColorSpaceEngine.linear_rgb_to_ycxcz(tst)

    color = _color_difference(ref_ycxcz, test_ycxcz, ppd, constants)
    feature = _feature_difference(ref_ycxcz, test_ycxcz, ppd, constants)

    error = np.power(color, np.float32(1.0) - feature)
    return np.clip(error, 0.0, 1.0).astype(np.float32)

def float_image_flip(out: FloatImage, reference: ColorImage, test: ColorImage,
                     ppd: float = DEFAULT_PIXELS_PER_DEGREE,
                     constants: Optional[FlipConstants] = None) -> None:
    """
    Writes the FLIP error map of ``reference`` vs ``test`` into ``out``.

    All three images must share width and height; ``out`` is left untouched
    when they do not.
    """
    if (reference.width, reference.height) != (test.width, test.height) or \
       (out.width, out.height) != (reference.width, reference.height):
        raise DimensionMismatchError(
            f"FLIP needs equal sizes: reference {reference.width}x{reference.height}, "
            f"test {test.width}x{test.height}, output {out.width}x{out.height}")
    error = flip_error_map(reference.pixels, test.pixels, ppd, constants or DEFAULT_FLIP_CONSTANTS)
    out.assign(error)

def flip(reference: ColorImage, test: ColorImage,
         ppd: float = DEFAULT_PIXELS_PER_DEGREE,
         constants: Optional[FlipConstants] = None) -> FloatImage:
    """
    FLIP error map of two images as a new FloatImage.

    Args:
        reference: Reference image.
        test: Test image of the same size.
        ppd: Pixels per degree of visual angle.
        constants: Optional model constants; defaults to the published set.

    Returns:
        FloatImage with values in [0, 1].
    """
    out = FloatImage(reference.width, reference.height)
    float_image_flip(out, reference, test, ppd, constants)
    return out
