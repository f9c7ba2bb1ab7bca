"""PatchMatch-based image completion.

Fills the masked region of an image with content copied from the unmasked
region. The four stages run strictly in order:

1. Mask analysis: snapshot of the hole and the list of valid source pixels.
2. Field initialization: each hole pixel gets a random valid source and that
   source's color.
3. Refinement: alternating forward/reverse passes of propagation and random
   search, each pixel's color updated greedily as soon as it improves.
4. Reconstruction: overlapping source patches are averaged into the hole.

Usage:
    rng = np.random.default_rng(0)
    inpaint(image, mask, PatchMatchConfig(patch_size=9, iterations=5), rng)

A fully masked image has no source pixels; ``inpaint`` then returns the image
untouched and leaves the mask as it was. Callers can detect that case by
checking whether any mask entry was cleared.
"""

from dataclasses import dataclass

import numpy as np

from patchfill.patchmatch.field import (
    NearestNeighborField,
    initialize_field,
    patch_distance,
)
from patchfill.patchmatch.mask import MaskAnalysis, clear_holes, hole_mask
from patchfill.patchmatch.reconstruct import reconstruct, vote
from patchfill.patchmatch.refine import refine_field, refine_pass

DEFAULT_PATCH_SIZE = 9
DEFAULT_ITERATIONS = 5


@dataclass(frozen=True)
class PatchMatchConfig:
    """Search parameters.

    Args:
        patch_size: Side of the square patch window. Must be odd and >= 1.
        iterations: Number of refinement passes. Must be >= 0.
    """

    patch_size: int = DEFAULT_PATCH_SIZE
    iterations: int = DEFAULT_ITERATIONS

    def __post_init__(self):
        if self.patch_size < 1 or self.patch_size % 2 == 0:
            raise ValueError(
                f"patch_size must be an odd integer >= 1, got {self.patch_size}"
            )
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")

    @property
    def half_patch(self) -> int:
        return (self.patch_size - 1) // 2


def _check_shapes(image: np.ndarray, mask: np.ndarray) -> None:
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(
            f"Image must have shape (H, W, 3) or (H, W, 4), got {image.shape}"
        )
    if image.dtype != np.uint8:
        raise ValueError(f"Image must be uint8, got {image.dtype}")
    if mask.shape[:2] != image.shape[:2]:
        raise ValueError(
            f"Mask size {mask.shape[1]}x{mask.shape[0]} does not match "
            f"image size {image.shape[1]}x{image.shape[0]}"
        )


def inpaint(
    image: np.ndarray,
    mask: np.ndarray,
    config: PatchMatchConfig | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Fill the masked region of ``image`` in place.

    Args:
        image: (H, W, 4) or (H, W, 3) uint8 buffer. Mutated in place.
        mask: (H, W) or (H, W, 4) mask of the same size. Entries of filled
            pixels are reset to 0.
        config: Search parameters. Defaults to ``PatchMatchConfig()``.
        rng: Random source. Pass a seeded generator for reproducible output.

    Returns:
        ``image`` itself.

    Raises:
        ValueError: If the image or mask has an unsupported shape or dtype.
    """
    _check_shapes(image, mask)
    config = config or PatchMatchConfig()
    rng = rng if rng is not None else np.random.default_rng()

    analysis = MaskAnalysis(mask)
    if not analysis.has_holes or not analysis.has_sources:
        return image

    half = config.half_patch
    field = initialize_field(image, analysis, half, rng)
    refine_field(image, field, analysis, half, config.iterations, rng)
    filled = reconstruct(image, field, analysis, half)
    clear_holes(mask, filled)
    return image


__all__ = [
    "DEFAULT_ITERATIONS",
    "DEFAULT_PATCH_SIZE",
    "MaskAnalysis",
    "NearestNeighborField",
    "PatchMatchConfig",
    "clear_holes",
    "hole_mask",
    "initialize_field",
    "inpaint",
    "patch_distance",
    "reconstruct",
    "refine_field",
    "refine_pass",
    "vote",
]
