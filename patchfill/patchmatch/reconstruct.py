"""Final reconstruction by averaging overlapping source patches."""

import numpy as np

from patchfill.patchmatch.field import NearestNeighborField
from patchfill.patchmatch.mask import MaskAnalysis


def vote(
    buffer: np.ndarray, field: NearestNeighborField, half_patch: int
) -> tuple[np.ndarray, np.ndarray]:
    """Accumulate every pixel's source patch onto its own neighborhood.

    Pixel p matched to source s adds the color at s + d to the cell p + d,
    for every offset d in the patch window where both cells are in bounds.
    Colors are read from the working ``buffer``.

    Returns:
        Tuple of (accumulator, weights): (H, W, 3) float64 color sums and
        (H, W) int contribution counts.
    """
    h, w = field.shape
    ys, xs = np.mgrid[0:h, 0:w]
    src_x = field.sources[..., 0]
    src_y = field.sources[..., 1]

    acc = np.zeros((h, w, 3), dtype=np.float64)
    weights = np.zeros((h, w), dtype=np.int64)
    colors = buffer[..., :3]

    for dy in range(-half_patch, half_patch + 1):
        for dx in range(-half_patch, half_patch + 1):
            tx, ty = xs + dx, ys + dy
            sx, sy = src_x + dx, src_y + dy
            ok = (
                (tx >= 0) & (tx < w) & (ty >= 0) & (ty < h)
                & (sx >= 0) & (sx < w) & (sy >= 0) & (sy < h)
            )
            # p -> p + d is injective, so each target appears at most once here
            acc[ty[ok], tx[ok]] += colors[sy[ok], sx[ok]]
            weights[ty[ok], tx[ok]] += 1

    return acc, weights


def reconstruct(
    buffer: np.ndarray,
    field: NearestNeighborField,
    analysis: MaskAnalysis,
    half_patch: int,
) -> np.ndarray:
    """Replace every hole pixel with the average of the patches covering it.

    Only pixels that were holes originally are written; pixels outside the
    hole keep their exact input values. Written pixels become fully opaque on
    four-channel buffers.

    Returns:
        Boolean (H, W) map of the pixels that were filled.
    """
    acc, weights = vote(buffer, field, half_patch)
    filled = analysis.holes & (weights > 0)

    averaged = acc[filled] / weights[filled][:, None]
    buffer[filled, :3] = np.clip(np.rint(averaged), 0, 255).astype(buffer.dtype)
    if buffer.shape[2] == 4:
        buffer[filled, 3] = 255
    return filled
