# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Image Buffers
=============
Owned, row-major float32 pixel buffers with a top-left origin.

* ``ColorImage`` holds three interleaved channels per pixel in *linear* RGB.
  8-bit data is sRGB-decoded on ingest and sRGB-encoded on readback, so the
  byte round trip is exact within one code value.
* ``FloatImage`` holds one channel per pixel, typically a FLIP error map.

Both types release their storage explicitly with ``free()`` (or by leaving a
``with`` block); any later access raises ``ValueError``.

A flat function surface (``color_image_new``, ``float_image_get_data``, ...)
mirrors the handle-based C interface of the FLIP tool for callers porting
code written against it.
"""

import logging
import numpy as np
from typing import Any, ClassVar, Optional, TypeVar

from loupe_colorengine import ArrayFloat, decode_srgb8, encode_srgb8
from loupe_colormaps import lut_indices, magma_linear

__all__ = [
    # --- Errors ---
    "BufferSizeError",
    "DimensionMismatchError",

    # --- Images ---
    "ColorImage",
    "FloatImage",

    # --- Flat function surface ---
    "color_image_new",
    "color_image_clone",
    "color_image_get_data",
    "color_image_free",
    "float_image_new",
    "float_image_clone",
    "float_image_get_data",
    "float_image_free",
    "color3_color_map",
    "float_copy_float_to_color3",
    "color3_magma_map",
]

logger = logging.getLogger(__name__)

_ImageT = TypeVar("_ImageT", bound="_ImageBuffer")


# =============================================================================
# 1. ERRORS
# =============================================================================

class BufferSizeError(ValueError):
    """A caller-supplied buffer holds fewer elements than the image needs."""

class DimensionMismatchError(ValueError):
    """Two images that must share width and height do not."""


def _check_same_size(a: "_ImageBuffer", b: "_ImageBuffer") -> None:
    if a.width != b.width or a.height != b.height:
        raise DimensionMismatchError(
            f"Image dimensions differ: {a.width}x{a.height} vs {b.width}x{b.height}")


def _flat_source(data: Any, dtype: type) -> np.ndarray:
    """Views bytes-like objects as raw ``dtype`` data; converts everything else."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(memoryview(data).cast("B"), dtype=dtype)
    return np.asarray(data).reshape(-1).astype(dtype, copy=False)


def _flat_target(out: Any, dtype: type) -> np.ndarray:
    """Returns a writable flat view of ``out`` without copying."""
    if isinstance(out, np.ndarray):
        if not out.flags.c_contiguous:
            raise ValueError("Output array must be C-contiguous")
        if out.dtype != dtype:
            raise TypeError(f"Output array must have dtype {np.dtype(dtype).name}, got {out.dtype}")
        return out.reshape(-1)
    return np.frombuffer(memoryview(out).cast("B"), dtype=dtype)


# =============================================================================
# 2. SHARED BUFFER LOGIC
# =============================================================================

class _ImageBuffer:
    """Storage, size validation and lifetime shared by both image variants."""

    __slots__ = ("_pixels",)

    channels: ClassVar[int] = 1

    def __init__(self, width: int, height: int) -> None:
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self._pixels: Optional[np.ndarray] = np.zeros(self._shape_for(width, height), dtype=np.float32)

    @classmethod
    def _shape_for(cls, width: int, height: int) -> tuple[int, ...]:
        if cls.channels == 1:
            return (height, width)
        return (height, width, cls.channels)

    @classmethod
    def _adopt(cls: type[_ImageT], pixels: np.ndarray) -> _ImageT:
        """Wraps an owned float32 array of the right shape without copying."""
        obj = cls.__new__(cls)
        obj._pixels = pixels
        return obj

    def _require(self) -> np.ndarray:
        if self._pixels is None:
            raise ValueError(f"{type(self).__name__} has been released")
        return self._pixels

    def _element_count(self) -> int:
        return self.channels * self.width * self.height

    def _check_capacity(self, available: int, what: str) -> None:
        needed = self._element_count()
        if available < needed:
            raise BufferSizeError(
                f"{what} holds {available} elements, {type(self).__name__} "
                f"{self.width}x{self.height} needs {needed}")

    # --- Properties ---

    @property
    def width(self) -> int:
        return self._require().shape[1]

    @property
    def height(self) -> int:
        return self._require().shape[0]

    @property
    def shape(self) -> tuple[int, ...]:
        """NumPy shape of the pixel array: (H, W) or (H, W, 3)."""
        return self._require().shape

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the float32 pixel array."""
        view = self._require().view()
        view.flags.writeable = False
        return view

    @property
    def released(self) -> bool:
        return self._pixels is None

    def assign(self, values: ArrayFloat) -> None:
        """Overwrites every pixel from an array of shape ``self.shape``."""
        arr = np.asarray(values, dtype=np.float32)
        pixels = self._require()
        if arr.shape != pixels.shape:
            raise DimensionMismatchError(f"Cannot assign shape {arr.shape} to image of shape {pixels.shape}")
        pixels[...] = arr

    # --- Lifetime ---

    def clone(self: _ImageT) -> _ImageT:
        """Returns an independent deep copy."""
        return type(self)._adopt(self._require().copy())

    def free(self) -> None:
        """Releases the pixel storage. Calling it twice is harmless."""
        self._pixels = None

    def __enter__(self: _ImageT) -> _ImageT:
        self._require()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.free()

    def __repr__(self) -> str:
        if self._pixels is None:
            return f"{type(self).__name__}(<released>)"
        return f"{type(self).__name__}(width={self.width}, height={self.height})"


# =============================================================================
# 3. COLOR IMAGE
# =============================================================================

class ColorImage(_ImageBuffer):
    """
    Three-channel image in linear RGB.

    Args:
        width: Image width in pixels (> 0).
        height: Image height in pixels (> 0).
        data: Optional sRGB bytes, interleaved ``R G B`` per pixel, row-major.
            At least ``3 * width * height`` elements are required; trailing
            elements are ignored.

    Raises:
        ValueError: On non-positive dimensions.
        BufferSizeError: If ``data`` is too small.
    """

    __slots__ = ()

    channels: ClassVar[int] = 3

    def __init__(self, width: int, height: int, data: Any = None) -> None:
        super().__init__(width, height)
        if data is not None:
            src = _flat_source(data, np.uint8)
            self._check_capacity(src.size, "Source buffer")
            n = self._element_count()
            self._pixels = decode_srgb8(src[:n].reshape(self.shape))

    @classmethod
    def from_linear(cls, array: ArrayFloat) -> "ColorImage":
        """Adopts a copy of an (H, W, 3) linear RGB array."""
        arr = np.array(array, dtype=np.float32, order="C")
        if arr.ndim != 3 or arr.shape[2] != 3 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"Expected a non-empty (H, W, 3) array, got shape {arr.shape}")
        return cls._adopt(arr)

    @classmethod
    def magma_map(cls) -> "ColorImage":
        """Returns the 256x1 magma lookup table."""
        return cls._adopt(magma_linear().reshape(1, -1, 3))

    def get_data(self, out: Any = None) -> np.ndarray:
        """
        Reads the image back as sRGB bytes.

        Args:
            out: Optional writable uint8 buffer with at least ``3 * w * h``
                elements. The first ``3 * w * h`` are overwritten.

        Returns:
            ``out`` viewed as a flat uint8 array, or a new one.
        """
        encoded = encode_srgb8(self._require()).reshape(-1)
        if out is None:
            return encoded
        target = _flat_target(out, np.uint8)
        self._check_capacity(target.size, "Destination buffer")
        target[:encoded.size] = encoded
        return target

    def to_bytes(self) -> bytes:
        return self.get_data().tobytes()

    def color_map(self, float_image: "FloatImage", lut: "ColorImage") -> None:
        """
        Colors ``float_image`` through the first row of ``lut`` into ``self``.

        Pixel ``v`` takes lookup entry ``min(round(v * 255) mod n, n - 1)``,
        where ``n`` is the width of ``lut``.
        """
        _check_same_size(self, float_image)
        table = lut._require()[0]
        idx = lut_indices(float_image._require(), table.shape[0])
        self._require()[...] = table[idx]

    def copy_float_to_color3(self, float_image: "FloatImage") -> None:
        """
        Writes ``float_image`` into all three channels of ``self``.

        The value is copied as is into the linear channels; no transfer
        function is applied.
        """
        _check_same_size(self, float_image)
        self._require()[...] = float_image._require()[..., np.newaxis]


# =============================================================================
# 4. FLOAT IMAGE
# =============================================================================

class FloatImage(_ImageBuffer):
    """
    Single-channel float32 image.

    Args:
        width: Image width in pixels (> 0).
        height: Image height in pixels (> 0).
        data: Optional float32-convertible values, row-major. Bytes-like
            objects are read as raw native float32.

    Raises:
        ValueError: On non-positive dimensions.
        BufferSizeError: If ``data`` is too small.
    """

    __slots__ = ()

    channels: ClassVar[int] = 1

    def __init__(self, width: int, height: int, data: Any = None) -> None:
        super().__init__(width, height)
        if data is not None:
            src = _flat_source(data, np.float32)
            self._check_capacity(src.size, "Source buffer")
            n = self._element_count()
            self._pixels = src[:n].reshape(self.shape).copy()

    @classmethod
    def from_array(cls, array: ArrayFloat) -> "FloatImage":
        """Adopts a copy of an (H, W) float array."""
        arr = np.array(array, dtype=np.float32, order="C")
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"Expected a non-empty (H, W) array, got shape {arr.shape}")
        return cls._adopt(arr)

    def get_data(self, out: Any = None) -> np.ndarray:
        """Copies the pixels into ``out`` (float32, >= w * h elements) or a new flat array."""
        values = self._require().reshape(-1)
        if out is None:
            return values.copy()
        target = _flat_target(out, np.float32)
        self._check_capacity(target.size, "Destination buffer")
        target[:values.size] = values
        return target

    def apply_color_lut(self, lut: ColorImage) -> ColorImage:
        """Returns a new ColorImage with ``lut`` applied to this image."""
        out = ColorImage(self.width, self.height)
        out.color_map(self, lut)
        return out

    def to_color3(self) -> ColorImage:
        """Returns a new greyscale ColorImage holding this image in every channel."""
        out = ColorImage(self.width, self.height)
        out.copy_float_to_color3(self)
        return out

    def flip(self, reference: ColorImage, test: ColorImage, ppd: float) -> None:
        """Writes the FLIP error map of ``reference`` vs ``test`` into ``self``."""
        from loupe_flip import float_image_flip
        float_image_flip(self, reference, test, ppd)


# =============================================================================
# 5. FLAT FUNCTION SURFACE
# =============================================================================

def color_image_new(width: int, height: int, data: Any = None) -> ColorImage:
    logger.debug(f"Allocating ColorImage {width}x{height} (data={'yes' if data is not None else 'no'})")
    return ColorImage(width, height, data)

def color_image_clone(image: ColorImage) -> ColorImage:
    return image.clone()

def color_image_get_data(image: ColorImage, out: Any = None) -> np.ndarray:
    return image.get_data(out)

def color_image_free(image: ColorImage) -> None:
    image.free()

def float_image_new(width: int, height: int, data: Any = None) -> FloatImage:
    logger.debug(f"Allocating FloatImage {width}x{height} (data={'yes' if data is not None else 'no'})")
    return FloatImage(width, height, data)

def float_image_clone(image: FloatImage) -> FloatImage:
    return image.clone()

def float_image_get_data(image: FloatImage, out: Any = None) -> np.ndarray:
    return image.get_data(out)

def float_image_free(image: FloatImage) -> None:
    image.free()

def color3_color_map(out: ColorImage, float_image: FloatImage, lut: ColorImage) -> None:
    out.color_map(float_image, lut)

def float_copy_float_to_color3(float_image: FloatImage, out: ColorImage) -> None:
    out.copy_float_to_color3(float_image)

def color3_magma_map() -> ColorImage:
    return ColorImage.magma_map()
