"""PatchMatch exemplar inpainting.

Copies patches from the unmasked part of the image into the hole. No model,
no GPU: quality depends on the image containing texture similar to what
should fill the hole. Works best on small holes in repetitive backgrounds.
"""

import numpy as np

from patchfill.inpainters.base import Inpainter
from patchfill.patchmatch import (
    DEFAULT_ITERATIONS,
    DEFAULT_PATCH_SIZE,
    PatchMatchConfig,
    inpaint,
)


class PatchMatchInpainter(Inpainter):
    """Exemplar-based inpainting via PatchMatch."""

    def __init__(
        self,
        patch_size: int = DEFAULT_PATCH_SIZE,
        iterations: int = DEFAULT_ITERATIONS,
        seed: int | None = None,
    ):
        """Initialize the PatchMatch inpainter.

        Args:
            patch_size: Side of the square patch window (odd). Larger patches
                keep more structure but blur fine detail in the averaging step.
            iterations: Number of propagation/random-search passes.
            seed: Seed for the random source. Two inpainters built with the
                same seed produce identical output on identical input.
        """
        self._config = PatchMatchConfig(patch_size=patch_size, iterations=iterations)
        self._rng = np.random.default_rng(seed)

    @property
    def name(self) -> str:
        return f"patchmatch({self._config.patch_size}px, {self._config.iterations} iters)"

    @property
    def config(self) -> PatchMatchConfig:
        return self._config

    def _inpaint(self, image: np.ndarray, mask: np.ndarray) -> np.ndarray:
        return inpaint(image, mask, self._config, self._rng)
