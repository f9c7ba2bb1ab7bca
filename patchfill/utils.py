"""Utility functions for image I/O, mask handling, and comparison output."""

from pathlib import Path

import cv2
import numpy as np

from patchfill.patchmatch.mask import hole_mask

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tiff", ".tif"}

# Formats written without an alpha channel.
_NO_ALPHA = {".jpg", ".jpeg", ".bmp"}


def mask_stats(mask: np.ndarray) -> tuple[int, int, float]:
    """Compute basic statistics about a mask.

    Args:
        mask: (H, W) mask with non-zero = hole, or (H, W, 4) mask with
            non-zero alpha = hole.

    Returns:
        Tuple of (n_masked, total, percentage).
        - n_masked: number of hole pixels.
        - total: total number of pixels (H * W).
        - percentage: n_masked / total * 100.
    """
    n_masked = int(np.count_nonzero(hole_mask(mask)))
    total = mask.shape[0] * mask.shape[1]
    pct = n_masked / total * 100 if total > 0 else 0.0
    return n_masked, total, pct


def dilate_mask(mask: np.ndarray, px: int) -> np.ndarray:
    """Grow the hole of a mask by a given number of pixels.

    Uses an elliptical structuring element for smooth expansion. Stroke masks
    drawn by hand tend to hug the object too tightly; a few pixels of margin
    keep its halo out of the patch sources.

    Args:
        mask: Mask in either convention.
        px: Number of pixels to dilate by. If <= 0, mask is returned unchanged.

    Returns:
        (H, W) uint8 mask, values 0 or 255 (or the input, if px <= 0).
    """
    if px <= 0:
        return mask
    binary = hole_mask(mask).astype(np.uint8) * 255
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (px * 2 + 1, px * 2 + 1))
    return cv2.dilate(binary, kernel, iterations=1)


def list_images(directory: str | Path) -> list[Path]:
    """List image files in a directory, sorted by name.

    Args:
        directory: Path to directory.

    Returns:
        Sorted list of image file paths.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    images = [
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    ]
    images.sort(key=lambda p: p.name)
    return images


def to_bgra(image: np.ndarray) -> np.ndarray:
    """Convert a grayscale, BGR or BGRA image to BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    return image


def load_image(path: str | Path) -> np.ndarray:
    """Load an image from disk.

    Args:
        path: Path to the image file.

    Returns:
        Image as numpy array, shape (H, W, 4), dtype uint8, BGRA format.
        Images without alpha get a fully opaque alpha channel.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be read as an image.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not read image: {path}")
    if image.dtype != np.uint8:
        raise ValueError(f"Only 8-bit images are supported, got {image.dtype}: {path}")
    return to_bgra(image)


def save_image(image: np.ndarray, path: str | Path) -> None:
    """Save an image to disk.

    Args:
        image: Image array (BGRA, BGR or grayscale).
        path: Output path. Parent directories are created if needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image.ndim == 3 and image.shape[2] == 4 and path.suffix.lower() in _NO_ALPHA:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    ok = cv2.imwrite(str(path), image)
    if not ok:
        raise IOError(f"Failed to write image: {path}")


def load_mask(path: str | Path) -> np.ndarray:
    """Load a mask from disk.

    Files with an alpha channel are read as stroke layers: the hole is
    wherever alpha is non-zero. Other files are read as grayscale: the hole
    is wherever the value is non-zero.

    Args:
        path: Path to the mask image.

    Returns:
        (H, W, 4) uint8 for files with alpha, (H, W) uint8 otherwise.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mask not found: {path}")
    mask = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if mask is None:
        raise ValueError(f"Could not read mask: {path}")
    if mask.ndim == 3 and mask.shape[2] == 4:
        return mask
    if mask.ndim == 3:
        mask = cv2.cvtColor(mask, cv2.COLOR_BGR2GRAY)
    return mask


def overlay_mask(
    image: np.ndarray, mask: np.ndarray, color=(0, 0, 255), alpha=0.4
) -> np.ndarray:
    """Overlay a mask on an image for visualization.

    Hole pixels are tinted with the given color.

    Args:
        image: Input image, BGRA or BGR.
        mask: Mask in either convention, same size as the image.
        color: BGR color to tint the masked regions.
        alpha: Opacity of the tint overlay.

    Returns:
        BGR visualization image with mask overlay.
    """
    vis = to_bgra(image)[..., :3].copy()
    holes = hole_mask(mask)
    overlay = np.full_like(vis, color, dtype=np.uint8)
    vis[holes] = cv2.addWeighted(vis, 1 - alpha, overlay, alpha, 0)[holes]
    return vis


def make_comparison(
    original: np.ndarray,
    mask: np.ndarray,
    results: list[tuple[str, np.ndarray]],
    max_width: int = 800,
) -> np.ndarray:
    """Create a side-by-side comparison image.

    Produces a grid: [original | mask | result1 | result2 | ...]

    Args:
        original: Original input image.
        mask: The mask every result was produced from.
        results: List of (inpainter_name, inpainted_result) tuples.
        max_width: Maximum width for each panel. Images are scaled down if wider.

    Returns:
        BGR comparison image as numpy array.
    """
    h, w = original.shape[:2]

    # Compute scale factor to fit panels in max_width
    scale = min(1.0, max_width / w)
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))

    def panel(image: np.ndarray, label: str) -> np.ndarray:
        bgr = to_bgra(image)[..., :3]
        return _add_label(cv2.resize(bgr, (new_w, new_h)), label)

    panels = [
        panel(original, "Original"),
        panel(overlay_mask(original, mask), "Mask"),
    ]
    for name, inpainted in results:
        panels.append(panel(inpainted, f"Result: {name}"))

    # Stack horizontally if 3 or fewer panels, otherwise in a grid
    if len(panels) <= 3:
        return np.hstack(panels)
    rows = []
    for i in range(0, len(panels), 3):
        row_panels = panels[i : i + 3]
        # Pad the last row if needed
        while len(row_panels) < 3:
            row_panels.append(np.zeros_like(panels[0]))
        rows.append(np.hstack(row_panels))
    return np.vstack(rows)


def _add_label(image: np.ndarray, label: str) -> np.ndarray:
    """Add a text label to the top of an image."""
    h, w = image.shape[:2]
    label_height = 30
    labeled = np.zeros((h + label_height, w, 3), dtype=np.uint8)
    labeled[label_height:, :] = image

    # Draw label background
    labeled[:label_height, :] = (40, 40, 40)

    # Draw text
    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = 0.5
    thickness = 1
    text_size = cv2.getTextSize(label, font, font_scale, thickness)[0]
    text_x = (w - text_size[0]) // 2
    text_y = (label_height + text_size[1]) // 2
    cv2.putText(
        labeled, label, (text_x, text_y), font, font_scale, (255, 255, 255), thickness
    )
    return labeled
