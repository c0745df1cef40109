import numpy as np
import pytest

from loupe_image import ColorImage


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20260419)


@pytest.fixture
def srgb_pair(rng: np.random.Generator) -> tuple[ColorImage, ColorImage]:
    """Two 24x16 images that differ by noise and a bright square."""
    ref = rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8)
    test = ref.copy()
    test[4:10, 6:14] = 255
    noise = rng.integers(-20, 21, size=ref.shape)
    test = np.clip(test.astype(np.int64) + noise, 0, 255).astype(np.uint8)
    return ColorImage(24, 16, ref.tobytes()), ColorImage(24, 16, test.tobytes())
