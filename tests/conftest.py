import numpy as np
import pytest


def random_image(rng: np.random.Generator, h: int, w: int, channels: int = 4) -> np.ndarray:
    return rng.integers(0, 256, size=(h, w, channels), dtype=np.uint8)


def random_mask(rng: np.random.Generator, h: int, w: int, density: float = 0.3) -> np.ndarray:
    """(H, W, 4) stroke-layer mask with at least one unmasked pixel."""
    mask = np.zeros((h, w, 4), dtype=np.uint8)
    mask[..., 3] = np.where(rng.random((h, w)) < density, 255, 0)
    mask[0, 0, 3] = 0
    return mask


def rect_mask(h: int, w: int, x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
    """(H, W) 0/255 mask with the rectangle [x0, x1) x [y0, y1) masked."""
    mask = np.zeros((h, w), dtype=np.uint8)
    mask[y0:y1, x0:x1] = 255
    return mask


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
