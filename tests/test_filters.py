import numpy as np
import pytest
from scipy.ndimage import correlate1d

import loupe_colorengine as ce
from loupe_filters import (
    CSF_PARAMETERS,
    Kernel,
    convolve_separable,
    feature_filter_radius,
    feature_kernels,
    filter_image,
    spatial_filter_radius,
    spatial_kernels,
)
from loupe_image import ColorImage, FloatImage


def _reference_filter(plane: np.ndarray, kx: np.ndarray, ky: np.ndarray) -> np.ndarray:
    rows = correlate1d(plane.astype(np.float64), kx.astype(np.float64), axis=1, mode="nearest")
    return correlate1d(rows, ky.astype(np.float64), axis=0, mode="nearest")


def test_radii_at_default_viewing_distance() -> None:
    assert spatial_filter_radius(67.0) == 10
    assert feature_filter_radius(67.0) == 9


def test_radius_grows_with_ppd() -> None:
    assert spatial_filter_radius(134.0) > spatial_filter_radius(67.0)
    assert feature_filter_radius(134.0) > feature_filter_radius(67.0)


@pytest.mark.parametrize("ppd", [0.0, -3.0, float("nan"), float("inf")])
def test_invalid_ppd_raises(ppd: float) -> None:
    with pytest.raises(ValueError):
        spatial_kernels(ppd)
    with pytest.raises(ValueError):
        feature_kernels(ppd)


def test_csf_table() -> None:
    assert CSF_PARAMETERS["Cz"] == (34.1, 0.04, 13.5, 0.025)
    assert set(CSF_PARAMETERS) == {"Y", "Cx", "Cz"}


def test_spatial_kernels_are_normalised() -> None:
    k = spatial_kernels(67.0)
    for kernel in (k.y, k.cx, k.cz1, k.cz2):
        assert kernel.radius == 10
        assert kernel.width == 21
        assert kernel.weights.dtype == np.float32
        assert np.allclose(kernel.weights, kernel.weights[::-1])
    assert k.y.weights.sum() == pytest.approx(1.0, abs=1e-5)
    assert k.cx.weights.sum() == pytest.approx(1.0, abs=1e-5)
    s1, s2 = float(k.cz1.weights.sum()), float(k.cz2.weights.sum())
    assert s1 * s1 + s2 * s2 == pytest.approx(1.0, abs=1e-5)


def test_feature_kernels_are_normalised() -> None:
    k = feature_kernels(67.0)
    assert (k.gaussian.order, k.first.order, k.second.order) == (0, 1, 2)
    assert k.gaussian.radius == 9
    assert k.gaussian.weights.sum() == pytest.approx(1.0, abs=1e-5)
    for kernel in (k.first, k.second):
        w = kernel.weights
        assert w[w > 0].sum() == pytest.approx(1.0, abs=1e-5)
        assert w[w < 0].sum() == pytest.approx(-1.0, abs=1e-5)
    assert np.allclose(k.first.weights, -k.first.weights[::-1])
    assert np.allclose(k.second.weights, k.second.weights[::-1])


def test_degenerate_feature_kernels_warn() -> None:
    with pytest.warns(RuntimeWarning, match="degenerate"):
        k = feature_kernels(1.0)
    assert k.first.weights.tolist() == [0.0, 0.0, 0.0]


def test_kernel_validation() -> None:
    with pytest.raises(ValueError, match="odd length"):
        Kernel(np.ones(4))
    with pytest.raises(ValueError, match="order"):
        Kernel(np.ones(3), order=3)
    k = Kernel([0.25, 0.5, 0.25])
    with pytest.raises(ValueError):
        k.weights[0] = 1.0


def test_convolve_matches_edge_clamped_reference(rng: np.random.Generator) -> None:
    planes = rng.random((2, 7, 9), dtype=np.float32)
    kx = [rng.normal(size=5).astype(np.float32), rng.normal(size=3).astype(np.float32)]
    ky = [rng.normal(size=3).astype(np.float32), rng.normal(size=21).astype(np.float32)]
    out = convolve_separable(planes, kx, ky)
    assert out.shape == planes.shape
    assert out.dtype == np.float32
    for c in range(2):
        assert np.allclose(out[c], _reference_filter(planes[c], kx[c], ky[c]), atol=1e-4)


def test_convolve_accepts_single_plane(rng: np.random.Generator) -> None:
    plane = rng.random((6, 5), dtype=np.float32)
    k = spatial_kernels(67.0).y
    out = convolve_separable(plane, [k], [k])
    assert out.shape == (6, 5)
    assert np.allclose(out, _reference_filter(plane, k.weights, k.weights), atol=1e-5)


def test_convolve_kernel_count_mismatch() -> None:
    with pytest.raises(ValueError, match="one kernel per plane"):
        convolve_separable(np.zeros((2, 4, 4), dtype=np.float32), [np.ones(3)], [np.ones(3)])


def test_constant_image_response() -> None:
    plane = np.full((12, 15), 0.7, dtype=np.float32)
    k = feature_kernels(67.0)
    smooth, edge = convolve_separable(np.stack([plane, plane]), [k.gaussian, k.first], [k.gaussian, k.gaussian])
    assert np.allclose(smooth, 0.7, atol=1e-5)
    assert np.allclose(edge, 0.0, atol=1e-5)


def test_strict_ieee_convolution_matches(rng: np.random.Generator) -> None:
    planes = rng.random((1, 10, 10), dtype=np.float32)
    k = spatial_kernels(30.0).cz1
    fast = convolve_separable(planes, [k], [k])
    ce.set_strict_ieee(True)
    try:
        strict = convolve_separable(planes, [k], [k])
    finally:
        ce.set_strict_ieee(False)
    assert np.allclose(fast, strict, atol=1e-5)


def test_filter_image_keeps_type_and_size(rng: np.random.Generator) -> None:
    k = spatial_kernels(67.0).y
    color = ColorImage.from_linear(np.full((5, 8, 3), 0.25))
    out = filter_image(color, k)
    assert isinstance(out, ColorImage)
    assert out.shape == (5, 8, 3)
    assert np.allclose(out.pixels, 0.25, atol=1e-5)

    gray = FloatImage.from_array(rng.random((5, 8)))
    out = filter_image(gray, k, Kernel([0.0, 1.0, 0.0]))
    assert isinstance(out, FloatImage)
    assert np.allclose(out.pixels, _reference_filter(gray.pixels, k.weights, np.array([0.0, 1.0, 0.0])), atol=1e-5)
