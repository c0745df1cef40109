import numpy as np
import pytest

import loupe_image as li
from loupe_colormaps import MAGMA_SRGB
from loupe_image import BufferSizeError, ColorImage, DimensionMismatchError, FloatImage


def test_new_images_are_zero() -> None:
    color = ColorImage(4, 3)
    assert color.shape == (3, 4, 3)
    data = color.get_data()
    assert data.dtype == np.uint8
    assert data.size == 36 and not data.any()

    gray = FloatImage(4, 3)
    assert gray.shape == (3, 4)
    assert not gray.get_data().any()


@pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-2, 3)])
def test_non_positive_size_raises(width: int, height: int) -> None:
    with pytest.raises(ValueError, match="positive"):
        ColorImage(width, height)
    with pytest.raises(ValueError, match="positive"):
        FloatImage(width, height)


def test_byte_roundtrip_within_one_code(rng: np.random.Generator) -> None:
    data = rng.integers(0, 256, size=5 * 4 * 3, dtype=np.uint8)
    img = ColorImage(5, 4, data.tobytes())
    back = img.get_data()
    assert np.abs(back.astype(int) - data.astype(int)).max() <= 1
    assert img.to_bytes() == back.tobytes()


def test_trailing_source_elements_are_ignored() -> None:
    img = ColorImage(1, 1, bytes([10, 20, 30, 40, 50]))
    assert np.abs(img.get_data().astype(int) - [10, 20, 30]).max() <= 1


def test_short_source_buffer_raises() -> None:
    with pytest.raises(BufferSizeError):
        ColorImage(2, 2, bytes(11))
    with pytest.raises(ValueError):
        FloatImage(2, 2, [0.0, 1.0, 2.0])


def test_get_data_into_destination() -> None:
    img = FloatImage(3, 2, np.arange(6, dtype=np.float32))
    out = np.full(8, -1.0, dtype=np.float32)
    img.get_data(out)
    assert out.tolist() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, -1.0, -1.0]

    with pytest.raises(BufferSizeError):
        img.get_data(np.zeros(5, dtype=np.float32))


def test_get_data_into_bytearray() -> None:
    img = ColorImage(2, 1, bytes([0, 128, 255, 255, 128, 0]))
    out = bytearray(6)
    img.get_data(out)
    assert np.abs(np.frombuffer(out, dtype=np.uint8).astype(int) - [0, 128, 255, 255, 128, 0]).max() <= 1
    with pytest.raises(BufferSizeError):
        img.get_data(bytearray(5))


def test_float_data_is_copied_exactly() -> None:
    values = np.array([0.25, -1.5, 7.0, np.inf], dtype=np.float32)
    img = FloatImage(2, 2, values)
    values[0] = 99.0
    assert img.get_data().tolist() == [0.25, -1.5, 7.0, np.inf]
    assert FloatImage(2, 2, np.array([1, 2, 3, 4], dtype=np.float32).tobytes()).get_data().tolist() == [1, 2, 3, 4]


def test_clone_is_independent() -> None:
    img = FloatImage.from_array(np.ones((2, 3)))
    copy = img.clone()
    copy.assign(np.zeros((2, 3)))
    assert img.pixels.sum() == 6.0
    assert copy.pixels.sum() == 0.0


def test_pixels_view_is_read_only() -> None:
    img = ColorImage(2, 2)
    with pytest.raises(ValueError):
        img.pixels[0, 0, 0] = 1.0


def test_assign_checks_shape() -> None:
    with pytest.raises(DimensionMismatchError):
        FloatImage(2, 2).assign(np.zeros((3, 2)))


def test_free_and_context_manager() -> None:
    img = ColorImage(2, 2)
    img.free()
    assert img.released
    with pytest.raises(ValueError, match="released"):
        _ = img.width
    img.free()

    with FloatImage(3, 3) as tmp:
        assert tmp.width == 3
    assert tmp.released


def test_from_linear_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError):
        ColorImage.from_linear(np.zeros((2, 2)))
    with pytest.raises(ValueError):
        FloatImage.from_array(np.zeros((2, 2, 3)))


def test_copy_float_to_color3_broadcasts() -> None:
    gray = FloatImage.from_array(np.array([[0.1, 0.2], [0.3, 0.4]]))
    color = gray.to_color3()
    assert isinstance(color, ColorImage)
    for c in range(3):
        assert np.array_equal(color.pixels[..., c], gray.pixels)


def test_copy_float_to_color3_size_mismatch() -> None:
    with pytest.raises(DimensionMismatchError):
        ColorImage(2, 2).copy_float_to_color3(FloatImage(3, 2))


def test_magma_map_is_256_by_1() -> None:
    lut = ColorImage.magma_map()
    assert (lut.width, lut.height) == (256, 1)
    expected = np.round(np.array(MAGMA_SRGB) * 255.0).astype(int).reshape(-1)
    assert np.abs(lut.get_data().astype(int) - expected).max() <= 1


def test_color_map_picks_table_entries() -> None:
    lut = ColorImage.magma_map()
    errors = FloatImage.from_array(np.array([[0.0, 1.0, 0.5]]))
    mapped = errors.apply_color_lut(lut)
    assert np.array_equal(mapped.pixels[0, 0], lut.pixels[0, 0])
    assert np.array_equal(mapped.pixels[0, 1], lut.pixels[0, 255])
    assert np.array_equal(mapped.pixels[0, 2], lut.pixels[0, 128])


def test_color_map_size_mismatch() -> None:
    with pytest.raises(DimensionMismatchError):
        ColorImage(2, 2).color_map(FloatImage(2, 3), ColorImage.magma_map())


def test_flat_function_surface(rng: np.random.Generator) -> None:
    data = rng.integers(0, 256, size=2 * 3 * 3, dtype=np.uint8)
    img = li.color_image_new(2, 3, data)
    twin = li.color_image_clone(img)
    assert np.array_equal(li.color_image_get_data(img), li.color_image_get_data(twin))
    li.color_image_free(img)
    assert img.released and not twin.released

    errors = li.float_image_new(2, 3, np.linspace(0.0, 1.0, 6))
    assert li.float_image_clone(errors).get_data().tolist() == li.float_image_get_data(errors).tolist()

    out = li.color_image_new(2, 3)
    li.color3_color_map(out, errors, li.color3_magma_map())
    assert out.get_data().any()

    li.float_copy_float_to_color3(errors, out)
    assert np.array_equal(out.pixels[..., 1], errors.pixels)
    li.float_image_free(errors)
    assert errors.released
