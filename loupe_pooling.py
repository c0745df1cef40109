# -*- coding: utf-8 -*-
"""
Loupe: Perceptual error maps for rendered images
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Error Pooling
=============
Summary statistics of FLIP error maps.

``Histogram`` bins values uniformly over a fixed interval.  ``Pool`` wraps a
histogram over [0, 1] together with running aggregates (count, sum, extrema
and where they occurred) and the folded values themselves.

Two percentile flavours are provided, matching the FLIP reference tool:

* ``Pool.get_percentile``: single precision, an exact order statistic of the
  folded values, optionally ranked by error-weighted mass.
* ``Pool.get_weighted_percentile``: double precision, interpolates linearly
  inside the histogram bucket where the error-weighted mass crosses the
  target.
"""

import logging
import math
from typing import Optional, Union

import numpy as np

from loupe_colorengine import ArrayFloat
from loupe_image import FloatImage

__all__ = [
    "Histogram",
    "HistogramView",
    "Pool",
]

logger = logging.getLogger(__name__)

Coordinate = tuple[int, int]


def _image_values(image: Union[FloatImage, ArrayFloat]) -> np.ndarray:
    if isinstance(image, FloatImage):
        return image.pixels
    arr = np.asarray(image, dtype=np.float32)
    if arr.ndim != 2:
        raise ValueError(f"Expected a FloatImage or an (H, W) array, got shape {arr.shape}")
    return arr


# =============================================================================
# 1. HISTOGRAM
# =============================================================================

class Histogram:
    """
    Uniform histogram over ``[min_allowed, max_allowed]``.

    Value ``v`` falls in bucket ``floor((v - min) / (max - min) * n)``;
    values outside the interval are clamped into the first or last bucket and
    NaN counts towards the first.

    Args:
        bucket_count: Number of buckets, at least 1.
        min_allowed: Lower edge of the first bucket.
        max_allowed: Upper edge of the last bucket.
    """

    __slots__ = ("_counts", "_min_allowed", "_max_allowed", "_id_min", "_id_max")

    def __init__(self, bucket_count: int = 100, min_allowed: float = 0.0, max_allowed: float = 1.0) -> None:
        if not (math.isfinite(min_allowed) and math.isfinite(max_allowed)) or max_allowed <= min_allowed:
            raise ValueError(f"Histogram range must be finite and non-empty, got [{min_allowed}, {max_allowed}]")
        self._min_allowed = float(min_allowed)
        self._max_allowed = float(max_allowed)
        self._counts = np.zeros(self._checked_count(bucket_count), dtype=np.int64)
        self._id_min: Optional[int] = None
        self._id_max: Optional[int] = None

    @staticmethod
    def _checked_count(bucket_count: int) -> int:
        n = int(bucket_count)
        if n < 1:
            raise ValueError(f"Bucket count must be at least 1, got {bucket_count}")
        return n

    # --- Geometry ---

    @property
    def size(self) -> int:
        return self._counts.size

    @property
    def min_allowed(self) -> float:
        return self._min_allowed

    @property
    def max_allowed(self) -> float:
        return self._max_allowed

    @property
    def bucket_step(self) -> float:
        return (self._max_allowed - self._min_allowed) / self._counts.size

    def bucket_midpoint(self, bucket_id: int) -> float:
        self._check_id(bucket_id)
        return self._min_allowed + (bucket_id + 0.5) * self.bucket_step

    def midpoints(self) -> np.ndarray:
        """Midpoints of all buckets as float64."""
        return self._min_allowed + (np.arange(self._counts.size) + 0.5) * self.bucket_step

    def _check_id(self, bucket_id: int) -> None:
        if not 0 <= bucket_id < self._counts.size:
            raise IndexError(f"Bucket id {bucket_id} out of range [0, {self._counts.size})")

    def bucket_of(self, value: float) -> int:
        """Bucket index that ``value`` is counted in."""
        n = self._counts.size
        t = (float(value) - self._min_allowed) / (self._max_allowed - self._min_allowed) * n
        if t != t:
            return 0
        return int(min(max(math.floor(t) if math.isfinite(t) else t, 0), n - 1))

    def _buckets_of(self, values: np.ndarray) -> np.ndarray:
        n = self._counts.size
        t = (values.astype(np.float64) - self._min_allowed) / (self._max_allowed - self._min_allowed) * n
        t = np.where(np.isnan(t), 0.0, t)
        return np.clip(np.floor(t), 0, n - 1).astype(np.int64)

    # --- Counts ---

    @property
    def counts(self) -> np.ndarray:
        """Read-only view of the bucket counts."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    @property
    def total_count(self) -> int:
        return int(self._counts.sum())

    @property
    def bucket_id_min(self) -> Optional[int]:
        """Lowest non-empty bucket, or None when empty."""
        return self._id_min

    @property
    def bucket_id_max(self) -> Optional[int]:
        """Highest non-empty bucket, or None when empty."""
        return self._id_max

    def bucket_value_count(self, bucket_id: int) -> int:
        self._check_id(bucket_id)
        return int(self._counts[bucket_id])

    def _mark(self, lo: int, hi: int) -> None:
        self._id_min = lo if self._id_min is None else min(self._id_min, lo)
        self._id_max = hi if self._id_max is None else max(self._id_max, hi)

    # --- Mutation ---

    def include(self, value: float, count: int = 1) -> None:
        """Adds ``count`` occurrences of ``value``."""
        if count < 0:
            raise ValueError(f"Count must be non-negative, got {count}")
        if count == 0:
            return
        b = self.bucket_of(value)
        self._counts[b] += count
        self._mark(b, b)

    def include_image(self, image: Union[FloatImage, ArrayFloat]) -> None:
        """Adds every pixel of a FloatImage or (H, W) array."""
        values = _image_values(image)
        if values.size == 0:
            return
        ids = self._buckets_of(values.reshape(-1))
        self._counts += np.bincount(ids, minlength=self._counts.size)
        self._mark(int(ids.min()), int(ids.max()))

    def clear(self) -> None:
        self._counts[:] = 0
        self._id_min = None
        self._id_max = None

    def resize(self, bucket_count: int) -> None:
        """Changes the number of buckets. All counts are reset."""
        self._counts = np.zeros(self._checked_count(bucket_count), dtype=np.int64)
        self._id_min = None
        self._id_max = None

    def __repr__(self) -> str:
        return (f"Histogram(bucket_count={self.size}, min_allowed={self._min_allowed}, "
                f"max_allowed={self._max_allowed}, total={self.total_count})")


class HistogramView:
    """Read-only facade over a Histogram owned by a Pool."""

    __slots__ = ("_histogram",)

    def __init__(self, histogram: Histogram) -> None:
        self._histogram = histogram

    size = property(lambda self: self._histogram.size)
    min_allowed = property(lambda self: self._histogram.min_allowed)
    max_allowed = property(lambda self: self._histogram.max_allowed)
    bucket_step = property(lambda self: self._histogram.bucket_step)
    bucket_id_min = property(lambda self: self._histogram.bucket_id_min)
    bucket_id_max = property(lambda self: self._histogram.bucket_id_max)
    total_count = property(lambda self: self._histogram.total_count)
    counts = property(lambda self: self._histogram.counts)

    def bucket_of(self, value: float) -> int:
        return self._histogram.bucket_of(value)

    def bucket_value_count(self, bucket_id: int) -> int:
        return self._histogram.bucket_value_count(bucket_id)

    def bucket_midpoint(self, bucket_id: int) -> float:
        return self._histogram.bucket_midpoint(bucket_id)

    def midpoints(self) -> np.ndarray:
        return self._histogram.midpoints()

    def __repr__(self) -> str:
        return f"HistogramView({self._histogram!r})"


# =============================================================================
# 2. POOL
# =============================================================================

class Pool:
    """
    Histogram of error values in [0, 1] plus running aggregates.

    The folded values are kept as well, so that ``get_percentile`` can report
    exact order statistics; they are sorted lazily on the first query after
    an update.

    Invariants while non-empty: ``sum(counts) == values_added`` and
    ``min_value <= mean <= max_value``.  All queries return 0.0 on an empty
    pool.  NaN values are rejected.
    """

    __slots__ = ("_histogram", "_values_added", "_sum", "_min", "_max", "_min_coord", "_max_coord",
                 "_chunks", "_sorted")

    def __init__(self, bucket_count: int = 100) -> None:
        self._histogram = Histogram(bucket_count, 0.0, 1.0)
        self._reset_aggregates()

    @classmethod
    def from_image(cls, image: Union[FloatImage, ArrayFloat], bucket_count: int = 100) -> "Pool":
        pool = cls(bucket_count)
        pool.update_with_image(image)
        return pool

    def _reset_aggregates(self) -> None:
        self._values_added = 0
        self._sum = 0.0
        self._min = math.inf
        self._max = -math.inf
        self._min_coord: Optional[Coordinate] = None
        self._max_coord: Optional[Coordinate] = None
        self._chunks: list[np.ndarray] = []
        self._sorted: Optional[np.ndarray] = None

    def _sorted_values(self) -> np.ndarray:
        if self._sorted is None:
            values = np.concatenate(self._chunks) if self._chunks else np.empty(0, dtype=np.float32)
            values.sort()
            self._chunks = [values]
            self._sorted = values
        return self._sorted

    # --- Histogram access ---

    @property
    def histogram(self) -> HistogramView:
        return HistogramView(self._histogram)

    def unsafe_histogram(self) -> Histogram:
        """
        The mutable histogram backing this pool.

        Including, clearing or resizing through it bypasses the aggregates,
        after which ``values_added``, ``mean`` and the extrema no longer match
        the bucket counts.
        """
        return self._histogram

    # --- Updates ---

    def update(self, value: float, x: Optional[int] = None, y: Optional[int] = None) -> None:
        """Folds one value in; ``(x, y)`` is recorded if it becomes an extremum."""
        v = float(value)
        if math.isnan(v):
            raise ValueError("Cannot pool a NaN error value")
        self._histogram.include(v)
        self._chunks.append(np.array([v], dtype=np.float32))
        self._sorted = None
        self._values_added += 1
        self._sum += v
        coord = None if x is None or y is None else (int(x), int(y))
        if v < self._min:
            self._min = v
            self._min_coord = coord
        if v > self._max:
            self._max = v
            self._max_coord = coord

    def update_with_image(self, image: Union[FloatImage, ArrayFloat]) -> None:
        """Folds every pixel of an error map in, in row-major order."""
        values = _image_values(image)
        if values.size == 0:
            return
        width = values.shape[1]
        flat = values.reshape(-1)
        if np.isnan(flat).any():
            raise ValueError("Cannot pool an error map containing NaN")
        logger.debug(f"Pooling {values.shape[1]}x{values.shape[0]} error map")

        self._histogram.include_image(values)
        self._chunks.append(np.array(flat, dtype=np.float32))
        self._sorted = None
        self._values_added += flat.size
        self._sum += float(flat.sum(dtype=np.float64))

        i_min = int(np.argmin(flat))
        if flat[i_min] < self._min:
            self._min = float(flat[i_min])
            self._min_coord = (i_min % width, i_min // width)
        i_max = int(np.argmax(flat))
        if flat[i_max] > self._max:
            self._max = float(flat[i_max])
            self._max_coord = (i_max % width, i_max // width)

    def clear(self) -> None:
        self._histogram.clear()
        self._reset_aggregates()

    # --- Aggregates ---

    @property
    def values_added(self) -> int:
        return self._values_added

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def min_value(self) -> float:
        return self._min if self._values_added else 0.0

    @property
    def max_value(self) -> float:
        return self._max if self._values_added else 0.0

    @property
    def mean(self) -> float:
        return self._sum / self._values_added if self._values_added else 0.0

    @property
    def min_coord(self) -> Optional[Coordinate]:
        """(x, y) of the first minimum, or None if unknown."""
        return self._min_coord

    @property
    def max_coord(self) -> Optional[Coordinate]:
        """(x, y) of the first maximum, or None if unknown."""
        return self._max_coord

    # --- Percentiles ---

    def get_percentile(self, percent: float, weighted: bool = False) -> float:
        """
        Single-precision percentile over the folded values themselves.

        ``percent`` is clamped to ``[0, 1 - 1 / values_added]`` and the values
        are taken in ascending order.  Unweighted, the result is the value at
        zero-based index ``ceil(p * n)``.  Weighted, each value counts with
        its own magnitude and the result is the first value at which the
        running sum reaches ``p * sum``.
        """
        n = self._values_added
        if n == 0:
            return 0.0
        p = float(np.float32(min(max(float(percent), 0.0), 1.0 - 1.0 / n)))
        values = self._sorted_values()

        if weighted:
            cumulative = np.cumsum(values, dtype=np.float64)
            index = int(np.searchsorted(cumulative, p * cumulative[-1], side="left"))
        else:
            index = math.ceil(p * n)
        return float(values[min(index, n - 1)])

    def get_weighted_percentile(self, percent: float) -> float:
        """
        Double-precision error-weighted percentile.

        Bucket ``i`` carries weight ``count_i * midpoint_i``.  The result lies
        in the first bucket whose cumulative weight exceeds ``p`` times the
        total, interpolated linearly by how far into that bucket's weight the
        target falls.  ``percent`` is clamped to [0, 1].
        """
        if self._values_added == 0:
            return 0.0
        p = min(max(float(percent), 0.0), 1.0)

        hist = self._histogram
        weights = hist.counts.astype(np.float64) * hist.midpoints()
        cumulative = np.cumsum(weights)
        total = cumulative[-1]
        if not total > 0.0:
            return 0.0
        target = p * total

        above = np.flatnonzero(cumulative > target)
        if above.size:
            bucket = int(above[0])
        else:
            bucket = int(np.flatnonzero(weights > 0.0)[-1])
        before = cumulative[bucket] - weights[bucket]
        return hist.min_allowed + (bucket + (target - before) / weights[bucket]) * hist.bucket_step

    def __repr__(self) -> str:
        return (f"Pool(bucket_count={self._histogram.size}, values_added={self._values_added}, "
                f"mean={self.mean:.6f})")

