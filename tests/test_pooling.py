import numpy as np
import pytest

from loupe_image import FloatImage
from loupe_pooling import Histogram, HistogramView, Pool


def test_bucket_of() -> None:
    h = Histogram(10)
    assert [h.bucket_of(v) for v in (0.0, 0.05, 0.15, 0.999, 1.0)] == [0, 0, 1, 9, 9]
    assert h.bucket_of(-0.5) == 0
    assert h.bucket_of(2.0) == 9
    assert h.bucket_of(float("nan")) == 0
    assert h.bucket_of(float("inf")) == 9


def test_histogram_range_and_count_validation() -> None:
    with pytest.raises(ValueError):
        Histogram(0)
    with pytest.raises(ValueError):
        Histogram(10, 1.0, 1.0)
    with pytest.raises(IndexError):
        Histogram(10).bucket_value_count(10)


def test_histogram_geometry() -> None:
    h = Histogram(4, -1.0, 1.0)
    assert h.size == 4
    assert h.bucket_step == pytest.approx(0.5)
    assert h.bucket_midpoint(0) == pytest.approx(-0.75)
    assert h.bucket_midpoint(3) == pytest.approx(0.75)
    assert (h.min_allowed, h.max_allowed) == (-1.0, 1.0)


def test_histogram_include_and_clear() -> None:
    h = Histogram(10)
    assert h.bucket_id_min is None and h.bucket_id_max is None
    h.include(0.35)
    h.include(0.82, count=3)
    h.include(0.5, count=0)
    assert h.total_count == 4
    assert h.bucket_value_count(3) == 1
    assert h.bucket_value_count(8) == 3
    assert (h.bucket_id_min, h.bucket_id_max) == (3, 8)
    with pytest.raises(ValueError):
        h.include(0.5, count=-1)

    h.clear()
    assert h.total_count == 0
    assert h.bucket_id_min is None


def test_histogram_counts_are_read_only() -> None:
    h = Histogram(5)
    with pytest.raises(ValueError):
        h.counts[0] = 3


def test_histogram_resize_resets() -> None:
    h = Histogram(10)
    h.include(0.5)
    h.resize(20)
    assert h.size == 20
    assert h.total_count == 0
    with pytest.raises(ValueError):
        h.resize(0)


def test_image_histogram_consistency(rng: np.random.Generator) -> None:
    values = rng.random((40, 50), dtype=np.float32)
    pool = Pool.from_image(FloatImage.from_array(values))
    assert pool.values_added == 2000
    assert pool.histogram.total_count == 2000
    assert int(pool.histogram.counts.sum()) == pool.values_added
    assert pool.min_value == pytest.approx(float(values.min()))
    assert pool.max_value == pytest.approx(float(values.max()))
    assert pool.min_value <= pool.mean <= pool.max_value
    assert pool.mean == pytest.approx(float(values.astype(np.float64).mean()))

    single = Histogram(100)
    for v in values.reshape(-1):
        single.include(float(v))
    assert np.array_equal(single.counts, pool.histogram.counts)


def test_empty_pool_queries_return_zero() -> None:
    pool = Pool()
    assert pool.values_added == 0
    assert pool.mean == 0.0
    assert pool.min_value == 0.0
    assert pool.max_value == 0.0
    assert pool.get_percentile(0.5) == 0.0
    assert pool.get_percentile(0.5, weighted=True) == 0.0
    assert pool.get_weighted_percentile(0.5) == 0.0
    assert pool.min_coord is None and pool.max_coord is None


def test_two_value_percentiles() -> None:
    pool = Pool(2)
    pool.update(0.1)
    pool.update(0.9)
    assert pool.get_percentile(0.5) == pytest.approx(0.9, abs=1e-6)
    assert pool.get_percentile(0.0) == pytest.approx(0.1, abs=1e-6)
    assert pool.get_percentile(0.05, weighted=True) == pytest.approx(0.1, abs=1e-6)
    assert pool.get_percentile(0.5, weighted=True) == pytest.approx(0.9, abs=1e-6)
    assert pool.get_weighted_percentile(0.5) == pytest.approx(2.0 / 3.0)


def test_percentiles_on_bucket_centres() -> None:
    pool = Pool(10)
    for i in range(10):
        pool.update((i + 0.5) / 10.0)
    assert pool.get_percentile(0.5) == pytest.approx(0.55, abs=1e-6)
    assert pool.get_percentile(1.0) == pytest.approx(0.95, abs=1e-6)
    assert pool.get_percentile(0.0) == pytest.approx(0.05, abs=1e-6)
    assert pool.get_percentile(0.5, weighted=True) == pytest.approx(0.75, abs=1e-6)
    assert pool.get_weighted_percentile(0.5) == pytest.approx(0.7 + 0.05 / 0.75 * 0.1)
    assert pool.get_weighted_percentile(1.0) == pytest.approx(1.0)
    assert pool.get_weighted_percentile(0.0) == pytest.approx(0.0)


@pytest.mark.parametrize("p", [-10000.0, 10000.0])
def test_out_of_range_percentiles_are_clamped(p: float) -> None:
    pool = Pool.from_image(np.linspace(0.0, 1.0, 64).reshape(8, 8))
    low_or_high = pool.get_percentile(p)
    assert 0.0 <= low_or_high <= 1.0
    assert 0.0 <= pool.get_percentile(p, weighted=True) <= 1.0
    assert 0.0 <= pool.get_weighted_percentile(p) <= 1.0


def test_extremum_coordinates() -> None:
    values = np.full((3, 5), 0.5, dtype=np.float32)
    values[1, 3] = 0.9
    values[2, 0] = 0.1
    pool = Pool.from_image(values)
    assert pool.max_coord == (3, 1)
    assert pool.min_coord == (0, 2)

    pool.update(0.95, x=7, y=8)
    assert pool.max_coord == (7, 8)
    assert pool.max_value == pytest.approx(0.95)


def test_update_and_clear() -> None:
    pool = Pool()
    for v in (0.2, 0.4, 0.6):
        pool.update(v)
    assert pool.values_added == 3
    assert pool.sum == pytest.approx(1.2)
    assert pool.mean == pytest.approx(0.4)
    pool.clear()
    assert pool.values_added == 0
    assert pool.histogram.total_count == 0
    assert pool.mean == 0.0


def test_histogram_view_is_read_only() -> None:
    pool = Pool()
    pool.update(0.3)
    view = pool.histogram
    assert isinstance(view, HistogramView)
    assert view.bucket_value_count(30) == 1
    assert view.bucket_midpoint(30) == pytest.approx(0.305)
    assert not hasattr(view, "include")
    assert not hasattr(view, "clear")
    with pytest.raises(AttributeError):
        view.size = 3


def test_unsafe_histogram_bypasses_aggregates() -> None:
    pool = Pool()
    pool.update(0.3)
    pool.unsafe_histogram().include(0.7)
    assert pool.histogram.total_count == 2
    assert pool.values_added == 1


def test_update_with_image_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError):
        Pool().update_with_image(np.zeros((2, 2, 3)))


def _sorted_value_percentile(values: np.ndarray, p: float, weighted: bool) -> float:
    ordered = np.sort(values.reshape(-1).astype(np.float32))
    n = ordered.size
    p = float(np.float32(min(max(p, 0.0), 1.0 - 1.0 / n)))
    if weighted:
        running = np.cumsum(ordered.astype(np.float64))
        index = int(np.argmax(running >= p * running[-1]))
    else:
        index = min(int(np.ceil(p * n)), n - 1)
    return float(ordered[index])


@pytest.mark.parametrize("weighted", [False, True])
def test_percentile_is_an_exact_order_statistic(rng: np.random.Generator, weighted: bool) -> None:
    values = rng.beta(2.0, 5.0, size=(256, 512)).astype(np.float32)
    pool = Pool.from_image(values)
    for p in (0.25, 0.5, 0.75, 0.99):
        assert pool.get_percentile(p, weighted=weighted) == _sorted_value_percentile(values, p, weighted)


def test_weighted_percentile_is_not_limited_to_bucket_midpoints(rng: np.random.Generator) -> None:
    values = rng.beta(2.0, 5.0, size=(64, 64)).astype(np.float32)
    pool = Pool.from_image(values)
    midpoints = pool.histogram.midpoints()
    result = pool.get_percentile(0.5, weighted=True)
    assert np.abs(midpoints - result).min() > 0.0
    assert result in values


def test_percentiles_follow_later_updates() -> None:
    pool = Pool.from_image(np.array([[0.2, 0.4]], dtype=np.float32))
    assert pool.get_percentile(0.0) == pytest.approx(0.2, abs=1e-6)
    pool.update(0.1)
    pool.update_with_image(np.array([[0.05]], dtype=np.float32))
    assert pool.get_percentile(0.0) == pytest.approx(0.05, abs=1e-6)
    assert pool.get_percentile(0.5) == pytest.approx(0.2, abs=1e-6)
    pool.clear()
    assert pool.get_percentile(0.5) == 0.0


def test_nan_values_are_rejected_before_folding() -> None:
    pool = Pool()
    pool.update(0.4)
    values = np.full((2, 3), 0.5, dtype=np.float32)
    values[1, 2] = np.nan
    with pytest.raises(ValueError, match="NaN"):
        pool.update_with_image(values)
    with pytest.raises(ValueError, match="NaN"):
        pool.update(float("nan"))
    assert pool.values_added == 1
    assert pool.histogram.total_count == 1
    assert pool.sum == pytest.approx(0.4)
    assert pool.max_value == pytest.approx(0.4)
