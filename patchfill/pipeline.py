"""Pipeline orchestration: loads images and masks, runs an inpainter."""

import time
from pathlib import Path

import numpy as np

from patchfill.inpainters import INPAINTERS, get_inpainter
from patchfill.inpainters.base import Inpainter
from patchfill.utils import (
    dilate_mask,
    load_image,
    load_mask,
    make_comparison,
    mask_stats,
    save_image,
)


class Pipeline:
    """Runs an inpainter on images loaded from disk.

    Usage:
        pipeline = Pipeline(inpainter="patchmatch", inpainter_kwargs={"seed": 0})
        result = pipeline.run("input.png", "mask.png", "output.png")

        # Accept a pre-built instance:
        pipeline = Pipeline(inpainter=my_inpainter)
    """

    def __init__(
        self,
        inpainter: str | Inpainter = "patchmatch",
        inpainter_kwargs: dict | None = None,
    ):
        if isinstance(inpainter, Inpainter):
            self._inpainter = inpainter
        else:
            self._inpainter = get_inpainter(inpainter, **(inpainter_kwargs or {}))

    @property
    def inpainter(self) -> Inpainter:
        return self._inpainter

    def _run_inpaint(
        self, image: np.ndarray, mask: np.ndarray
    ) -> tuple[np.ndarray, float]:
        """Run inpainting on a loaded image with a mask.

        Returns:
            Tuple of (result, elapsed_seconds).
        """
        print(f"  Inpainting with {self._inpainter.name}...")
        t0 = time.time()
        result = self._inpainter.inpaint(image, mask)
        elapsed = time.time() - t0
        print(f"  Inpainting done in {elapsed:.1f}s")
        return result, elapsed

    # --- Public API ---

    def inpaint(self, image_path: str | Path, mask: np.ndarray) -> np.ndarray:
        """Run inpainting with a provided mask.

        Args:
            image_path: Path to input image.
            mask: Mask array. Mutated: filled entries are cleared.

        Returns:
            Inpainted BGRA image array.
        """
        image = load_image(image_path)
        result, _ = self._run_inpaint(image, mask)
        return result

    def run(
        self,
        image_path: str | Path,
        mask_path: str | Path,
        output_path: str | Path | None = None,
        dilate: int = 0,
    ) -> np.ndarray:
        """Load an image and a mask, inpaint, and optionally save the result.

        Args:
            image_path: Path to input image.
            mask_path: Path to the mask image.
            output_path: Path to save the result. If None, result is not saved.
            dilate: Grow the hole by this many pixels before inpainting.

        Returns:
            Inpainted BGRA image array.
        """
        image = load_image(image_path)
        mask = dilate_mask(load_mask(mask_path), dilate)

        n_masked, _, pct = mask_stats(mask)
        print(f"  Mask covers {pct:.1f}% of image ({n_masked} pixels)")

        if n_masked == 0:
            print("  Mask is empty, skipping inpainting.")
            if output_path:
                save_image(image, output_path)
            return image

        result, _ = self._run_inpaint(image, mask)

        remaining, _, _ = mask_stats(mask)
        if remaining == n_masked:
            print("  Nothing was filled: the mask leaves no pixels to copy from.")

        if output_path:
            save_image(result, output_path)
            print(f"  Result saved to {output_path}")

        return result


def compare(
    image_path: str | Path,
    mask_path: str | Path,
    output_dir: str | Path,
    inpainter_kwargs: dict[str, dict] | None = None,
    dilate: int = 0,
) -> None:
    """Run every registered inpainter on an image and produce a comparison.

    Args:
        image_path: Path to input image.
        mask_path: Path to the mask image.
        output_dir: Directory to save results.
        inpainter_kwargs: Per-inpainter kwargs, keyed by inpainter name.
        dilate: Grow the hole by this many pixels before inpainting.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    inpainter_kwargs = inpainter_kwargs or {}
    image = load_image(image_path)
    mask = dilate_mask(load_mask(mask_path), dilate)

    results = []

    for name in INPAINTERS:
        print(f"\n--- {name} ---")
        try:
            inpainter = get_inpainter(name, **inpainter_kwargs.get(name, {}))

            # Inpainters work in place, so each one gets its own copies
            t0 = time.time()
            result = inpainter.inpaint(image.copy(), mask.copy())
            print(f"  Inpainting: {time.time() - t0:.1f}s")

            save_image(result, output_dir / f"result_{name}.png")
            results.append((name, result))
        except Exception as exc:
            print(f"  ERROR: {name} failed: {exc}")
            print(f"  Skipping {name}.")

    # Save comparison grid
    print("\nGenerating comparison grid...")
    comparison = make_comparison(image, mask, results)
    save_image(comparison, output_dir / "comparison.png")
    print(f"Comparison saved to {output_dir / 'comparison.png'}")
