"""Batch processing for directories.

One shared mask is applied to every image in the input directory. This fits
scans, screenshots or renders that share a layout, where the same region
needs filling in every frame. Images must match the mask size; mismatches are
resized by the inpainter with a warning.
"""

import shutil
import time
from pathlib import Path

import numpy as np

from patchfill.inpainters.base import Inpainter
from patchfill.utils import list_images, load_image, mask_stats, save_image


def inpaint_batch(
    input_path: Path,
    output_path: Path,
    mask: np.ndarray,
    inpainter: Inpainter,
) -> None:
    """Inpaint every image in a directory with a shared mask.

    Args:
        input_path: Directory of input images.
        output_path: Output directory. Created if missing; files keep their names.
        mask: Shared mask. Never mutated; each image gets its own copy.
        inpainter: Inpainter instance.
    """
    total_t0 = time.time()

    image_paths = list_images(input_path)
    if not image_paths:
        raise FileNotFoundError(f"No image files found in {input_path}")
    n = len(image_paths)
    print(f"  Source: directory ({n} images)")

    out_dir = Path(output_path)
    out_dir.mkdir(parents=True, exist_ok=True)

    n_masked, _, pct = mask_stats(mask)
    if n_masked == 0:
        print("  Mask is empty. Copying originals.")
        for i, p in enumerate(image_paths):
            shutil.copy2(p, out_dir / p.name)
            print(f"  [{i + 1}/{n}] {p.name} (copied)")
        return

    print(f"\n  Inpainting {n} images with shared mask ({pct:.1f}% masked)...")
    for i, p in enumerate(image_paths):
        t0 = time.time()
        image = load_image(p)
        result = inpainter.inpaint(image, mask.copy())
        save_image(result, out_dir / p.name)
        elapsed = time.time() - t0
        print(f"  [{i + 1}/{n}] {p.name} ({elapsed:.1f}s)")

    total_elapsed = time.time() - total_t0
    print(
        f"\n  Batch complete: {n} images in {total_elapsed:.1f}s "
        f"({total_elapsed / n:.1f}s/image avg)"
    )
