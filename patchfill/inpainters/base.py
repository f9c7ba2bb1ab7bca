"""Base class for inpainters."""

from abc import ABC, abstractmethod

import cv2
import numpy as np

from patchfill.patchmatch.mask import clear_holes, hole_mask


class Inpainter(ABC):
    """Abstract base class for inpainters.

    Every inpainter honors the same contract, so callers can switch between
    them by name:
        - image: (H, W, 4) BGRA or (H, W, 3) BGR, dtype uint8.
        - mask: (H, W) with non-zero = hole, or (H, W, 4) with non-zero
          alpha = hole.
        - result: the image with every hole pixel filled and, on four-channel
          images, made opaque. Mask entries of filled pixels are reset to 0.

    Subclasses implement ``_inpaint``; ``inpaint`` conforms the mask first.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this inpainter."""
        ...

    @abstractmethod
    def _inpaint(self, image: np.ndarray, mask: np.ndarray) -> np.ndarray: ...

    def inpaint(self, image: np.ndarray, mask: np.ndarray) -> np.ndarray:
        conformed = self._conform_mask(mask, image)
        if conformed is mask:
            return self._inpaint(image, mask)

        holes = hole_mask(conformed)
        result = self._inpaint(image, conformed)
        # Carry the filled state back onto the caller's mask
        filled = (holes & ~hole_mask(conformed)).astype(np.uint8)
        mask_h, mask_w = mask.shape[:2]
        filled = cv2.resize(filled, (mask_w, mask_h), interpolation=cv2.INTER_NEAREST)
        clear_holes(mask, filled.astype(bool))
        return result

    @staticmethod
    def _conform_mask(mask: np.ndarray, image: np.ndarray) -> np.ndarray:
        img_h, img_w = image.shape[:2]
        mask_h, mask_w = mask.shape[:2]
        if (mask_h, mask_w) == (img_h, img_w):
            return mask
        print(
            f"  Warning: mask size ({mask_w}x{mask_h}) differs from image "
            f"({img_w}x{img_h}), resizing mask to match."
        )
        return cv2.resize(mask, (img_w, img_h), interpolation=cv2.INTER_NEAREST)
