"""PatchMatch refinement: propagation and random search over the hole.

Passes alternate between forward raster order (top-left to bottom-right) and
reverse raster order. Propagation reads neighbors that were already visited in
the current pass, so the order is part of the algorithm, not a detail.
"""

import math

import numpy as np

from patchfill.patchmatch.field import NearestNeighborField, patch_distance
from patchfill.patchmatch.mask import MaskAnalysis

# (dx, dy) of the neighbors already visited in each scan direction.
_FORWARD_NEIGHBORS = ((-1, 0), (0, -1))
_REVERSE_NEIGHBORS = ((1, 0), (0, 1))


def refine_field(
    buffer: np.ndarray,
    field: NearestNeighborField,
    analysis: MaskAnalysis,
    half_patch: int,
    iterations: int,
    rng: np.random.Generator,
    on_pass=None,
) -> None:
    """Run ``iterations`` refinement passes, updating ``field`` and ``buffer``.

    Args:
        on_pass: Optional callback invoked as ``on_pass(index, field)`` after
            each completed pass.
    """
    for i in range(iterations):
        refine_pass(buffer, field, analysis, half_patch, rng, reverse=i % 2 == 1)
        if on_pass is not None:
            on_pass(i, field)


def refine_pass(
    buffer: np.ndarray,
    field: NearestNeighborField,
    analysis: MaskAnalysis,
    half_patch: int,
    rng: np.random.Generator,
    reverse: bool = False,
) -> None:
    """Visit every hole pixel once in forward or reverse raster order."""
    coords = analysis.hole_coords[::-1] if reverse else analysis.hole_coords
    neighbors = _REVERSE_NEIGHBORS if reverse else _FORWARD_NEIGHBORS
    radius0 = float(max(analysis.width, analysis.height))

    for x, y in coords.tolist():
        best_x, best_y = field.source(x, y)
        best_dist = field.errors[y, x]

        # Propagation
        for dx, dy in neighbors:
            nx, ny = x + dx, y + dy
            if not analysis.in_bounds(nx, ny):
                continue
            nsx, nsy = field.source(nx, ny)
            px, py = nsx - dx, nsy - dy
            if analysis.is_source(px, py):
                dist = patch_distance(buffer, x, y, px, py, half_patch)
                if dist < best_dist:
                    best_x, best_y, best_dist = px, py, dist

        # Random search, centered on the current best source
        radius = radius0
        while radius > 1:
            rx = math.floor(best_x + (rng.random() * 2 - 1) * radius)
            ry = math.floor(best_y + (rng.random() * 2 - 1) * radius)
            if analysis.is_source(rx, ry):
                dist = patch_distance(buffer, x, y, rx, ry, half_patch)
                if dist < best_dist:
                    best_x, best_y, best_dist = rx, ry, dist
            radius /= 2

        field.assign(x, y, best_x, best_y, best_dist)
        buffer[y, x, :3] = buffer[best_y, best_x, :3]
