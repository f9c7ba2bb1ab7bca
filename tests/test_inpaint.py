import numpy as np
import pytest

from conftest import random_image, random_mask, rect_mask
from patchfill.patchmatch import (
    MaskAnalysis,
    PatchMatchConfig,
    initialize_field,
    inpaint,
    reconstruct,
    refine_field,
)

RED = (255, 0, 0, 255)


def test_config_defaults():
    config = PatchMatchConfig()
    assert config.patch_size == 9
    assert config.iterations == 5
    assert config.half_patch == 4


@pytest.mark.parametrize(
    "kwargs", [{"patch_size": 4}, {"patch_size": 0}, {"patch_size": -3}, {"iterations": -1}]
)
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        PatchMatchConfig(**kwargs)


def test_rejects_mismatched_mask():
    image = np.zeros((4, 4, 4), dtype=np.uint8)
    with pytest.raises(ValueError, match="does not match"):
        inpaint(image, np.zeros((4, 5), dtype=np.uint8))


@pytest.mark.parametrize(
    "image",
    [
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4, 2), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.float32),
    ],
)
def test_rejects_unsupported_images(image):
    with pytest.raises(ValueError):
        inpaint(image, np.zeros((4, 4), dtype=np.uint8))


def test_empty_mask_leaves_image_byte_identical(rng):
    image = random_image(rng, 9, 8)
    original = image.copy()
    mask = np.zeros((9, 8, 4), dtype=np.uint8)

    result = inpaint(image, mask, PatchMatchConfig(3, 2), rng)

    assert result is image
    assert (image == original).all()


def test_fully_masked_image_is_a_no_op(rng):
    image = random_image(rng, 5, 5)
    original = image.copy()
    mask = np.full((5, 5), 255, dtype=np.uint8)

    inpaint(image, mask, PatchMatchConfig(3, 2), rng)

    assert (image == original).all()
    assert (mask == 255).all()


@pytest.mark.parametrize("seed", range(5))
def test_fill_invariants_on_random_masks(seed):
    rng = np.random.default_rng(seed)
    image = random_image(rng, 10, 12)
    mask = random_mask(rng, 10, 12, density=0.15 + 0.15 * seed)
    original = image.copy()
    holes = mask[..., 3] != 0

    inpaint(image, mask, PatchMatchConfig(patch_size=3, iterations=2), rng)

    # filled pixels are opaque and their mask entries cleared
    assert (image[holes, 3] == 255).all()
    assert (mask[..., 3] == 0).all()
    # everything outside the hole is untouched
    assert (image[~holes] == original[~holes]).all()


@pytest.mark.parametrize("seed", range(6))
def test_sources_stay_outside_the_hole_through_every_stage(seed):
    rng = np.random.default_rng(100 + seed)
    image = random_image(rng, 9, 9)
    mask = random_mask(rng, 9, 9, density=0.1 + 0.15 * seed)
    analysis = MaskAnalysis(mask)

    def check(*_):
        for x, y in analysis.hole_coords.tolist():
            sx, sy = field.source(x, y)
            assert analysis.is_source(sx, sy)

    field = initialize_field(image, analysis, 1, rng)
    check()
    refine_field(image, field, analysis, 1, 3, rng, on_pass=check)
    reconstruct(image, field, analysis, 1)
    check()


def test_same_seed_same_output(rng):
    image = random_image(rng, 10, 10)
    mask = random_mask(rng, 10, 10, density=0.3)
    config = PatchMatchConfig(patch_size=5, iterations=3)

    a, b = image.copy(), image.copy()
    inpaint(a, mask.copy(), config, np.random.default_rng(42))
    inpaint(b, mask.copy(), config, np.random.default_rng(42))

    assert (a == b).all()


def test_single_hole_in_solid_red():
    image = np.zeros((5, 5, 4), dtype=np.uint8)
    image[:] = RED
    image[2, 2] = (0, 0, 0, 0)
    original = image.copy()
    mask = np.zeros((5, 5, 4), dtype=np.uint8)
    mask[2, 2, 3] = 255

    inpaint(image, mask, PatchMatchConfig(patch_size=3, iterations=1), np.random.default_rng(0))

    assert tuple(image[2, 2]) == RED
    others = np.ones((5, 5), dtype=bool)
    others[2, 2] = False
    assert (image[others] == original[others]).all()
    assert mask[2, 2, 3] == 0


def test_checkerboard_right_column():
    a = (200, 10, 10, 255)
    b = (10, 10, 200, 255)
    image = np.zeros((3, 3, 4), dtype=np.uint8)
    for y in range(3):
        for x in range(3):
            image[y, x] = a if (x + y) % 2 == 0 else b
    original = image.copy()
    mask = rect_mask(3, 3, 2, 0, 3, 3)

    inpaint(image, mask, PatchMatchConfig(patch_size=3, iterations=2), np.random.default_rng(7))

    column = image[:, 2].astype(int)
    assert (column[:, 3] == 255).all()
    assert (column[:, 1] == 10).all()
    assert ((column[:, 0] >= 10) & (column[:, 0] <= 200)).all()
    assert ((column[:, 2] >= 10) & (column[:, 2] <= 200)).all()
    # every fill is a blend of the two colors: R + B stays 210 up to rounding
    assert (np.abs(column[:, 0] + column[:, 2] - 210) <= 1).all()
    assert (image[:, :2] == original[:, :2]).all()
    assert (mask == 0).all()


def test_three_channel_image(rng):
    image = random_image(rng, 8, 8, channels=3)
    original = image.copy()
    mask = rect_mask(8, 8, 3, 3, 5, 5)

    inpaint(image, mask, PatchMatchConfig(3, 1), rng)

    holes = rect_mask(8, 8, 3, 3, 5, 5) != 0
    assert (image[~holes] == original[~holes]).all()
    assert not mask.any()


def test_zero_iterations_still_fills(rng):
    image = random_image(rng, 6, 6)
    mask = rect_mask(6, 6, 2, 2, 4, 4)

    inpaint(image, mask, PatchMatchConfig(patch_size=1, iterations=0), rng)

    assert (image[2:4, 2:4, 3] == 255).all()
    assert not mask.any()


def test_fills_from_surrounding_texture():
    # Flat gray background with a hole: the only available color is gray.
    image = np.full((16, 16, 4), 128, dtype=np.uint8)
    image[..., 3] = 255
    image[6:10, 6:10, :3] = (0, 255, 0)
    mask = rect_mask(16, 16, 6, 6, 10, 10)

    inpaint(image, mask, PatchMatchConfig(patch_size=5, iterations=2), np.random.default_rng(3))

    assert (image[..., :3] == 128).all()
