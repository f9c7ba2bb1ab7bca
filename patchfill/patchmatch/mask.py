"""Hole classification for patch-based inpainting.

Two mask conventions are accepted:
    - (H, W) uint8, any non-zero value marks a hole (the 0/255 convention
      used by OpenCV-style tools).
    - (H, W, 4) uint8, a non-zero alpha channel marks a hole (the convention
      used by editor stroke layers, which are painted on a transparent canvas).
"""

import numpy as np


def hole_mask(mask: np.ndarray) -> np.ndarray:
    """Return a boolean (H, W) map, True where the mask marks a hole.

    Raises:
        ValueError: If the mask is neither (H, W) nor (H, W, 4).
    """
    if mask.ndim == 2:
        return mask != 0
    if mask.ndim == 3 and mask.shape[2] == 4:
        return mask[..., 3] != 0
    raise ValueError(
        f"Mask must have shape (H, W) or (H, W, 4), got {mask.shape}"
    )


def clear_holes(mask: np.ndarray, filled: np.ndarray) -> None:
    """Reset the mask entries of filled pixels to zero, in place."""
    if mask.ndim == 2:
        mask[filled] = 0
    else:
        mask[filled, 3] = 0


class MaskAnalysis:
    """Snapshot of the original hole layout.

    The snapshot is taken once, before any pixel is synthesized, so later
    stages can always ask whether a coordinate was a hole *originally*, even
    after the caller's mask has been cleared.
    """

    def __init__(self, mask: np.ndarray):
        self.holes = hole_mask(mask).copy()
        self.height, self.width = self.holes.shape

        ys, xs = np.nonzero(~self.holes)
        self.valid = np.column_stack((xs, ys)).astype(np.intp)

        ys, xs = np.nonzero(self.holes)
        self.hole_coords = np.column_stack((xs, ys)).astype(np.intp)

    @property
    def has_holes(self) -> bool:
        return len(self.hole_coords) > 0

    @property
    def has_sources(self) -> bool:
        return len(self.valid) > 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_masked(self, x: int, y: int) -> bool:
        """True if (x, y) is inside the image and was a hole originally."""
        if not self.in_bounds(x, y):
            return False
        return bool(self.holes[y, x])

    def is_source(self, x: int, y: int) -> bool:
        """True if (x, y) is inside the image and may be copied from."""
        return self.in_bounds(x, y) and not self.holes[y, x]
