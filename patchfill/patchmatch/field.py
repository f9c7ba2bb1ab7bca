"""Nearest-neighbor field and the patch distance it is scored with."""

import math

import numpy as np

from patchfill.patchmatch.mask import MaskAnalysis


class NearestNeighborField:
    """Per-pixel source coordinate plus the patch error of that match.

    Attributes:
        sources: (H, W, 2) int array, ``sources[y, x] == (source_x, source_y)``.
        errors: (H, W) float array of patch distances.
    """

    def __init__(self, height: int, width: int):
        ys, xs = np.mgrid[0:height, 0:width]
        self.sources = np.stack((xs, ys), axis=-1).astype(np.intp)
        self.errors = np.zeros((height, width), dtype=np.float64)

    @property
    def shape(self) -> tuple[int, int]:
        return self.errors.shape

    def source(self, x: int, y: int) -> tuple[int, int]:
        sx, sy = self.sources[y, x]
        return int(sx), int(sy)

    def assign(self, x: int, y: int, sx: int, sy: int, error: float) -> None:
        self.sources[y, x] = (sx, sy)
        self.errors[y, x] = error


def patch_distance(
    buffer: np.ndarray, ax: int, ay: int, bx: int, by: int, half_patch: int
) -> float:
    """Mean squared color distance between the patches centered at a and b.

    Only offsets that land inside the image on *both* sides are compared; each
    compared cell contributes the sum of squared differences over the three
    color channels. Returns ``math.inf`` when no cell is comparable.

    The comparison reads ``buffer`` as it currently is, so cells of the hole
    that have already been synthesized take part with their synthetic color.
    """
    h, w = buffer.shape[:2]
    x0 = max(-half_patch, -ax, -bx)
    x1 = min(half_patch, w - 1 - ax, w - 1 - bx)
    y0 = max(-half_patch, -ay, -by)
    y1 = min(half_patch, h - 1 - ay, h - 1 - by)
    if x0 > x1 or y0 > y1:
        return math.inf

    a = buffer[ay + y0 : ay + y1 + 1, ax + x0 : ax + x1 + 1, :3].astype(np.int32)
    b = buffer[by + y0 : by + y1 + 1, bx + x0 : bx + x1 + 1, :3].astype(np.int32)
    diff = a - b
    count = (x1 - x0 + 1) * (y1 - y0 + 1)
    return float(np.sum(diff * diff)) / count


def initialize_field(
    buffer: np.ndarray,
    analysis: MaskAnalysis,
    half_patch: int,
    rng: np.random.Generator,
) -> NearestNeighborField:
    """Build the starting field and seed the hole with random source colors.

    Every hole pixel, in raster order, draws one valid coordinate uniformly at
    random; its color is copied into ``buffer`` straight away (alpha forced
    opaque on four-channel buffers). Errors are computed only after the whole
    hole is seeded, so each one sees the fully seeded neighborhood.
    """
    field = NearestNeighborField(analysis.height, analysis.width)
    has_alpha = buffer.shape[2] == 4

    for x, y in analysis.hole_coords:
        sx, sy = analysis.valid[rng.integers(len(analysis.valid))]
        field.sources[y, x] = (sx, sy)
        buffer[y, x, :3] = buffer[sy, sx, :3]
        if has_alpha:
            buffer[y, x, 3] = 255

    for x, y in analysis.hole_coords:
        sx, sy = field.sources[y, x]
        field.errors[y, x] = patch_distance(buffer, x, y, sx, sy, half_patch)

    return field
