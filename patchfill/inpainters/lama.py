"""LaMa (Large Mask Inpainting) neural inpainter.

Runs a pre-trained TorchScript LaMa model. The model is external: this module
only builds the request tensors, reads the response tensor back, and blends
the result into the hole.

Request:
    image: float32 (1, 3, S, S), RGB, values 0-1.
    mask: float32 (1, 1, S, S), 1 = hole, 0 = keep.
with S = 512, the standard LaMa training size. The input is resized to S x S
regardless of its aspect ratio and the output resized back.

Response:
    (1, 3, S, S), either uint8 0-255 or float. Exported LaMa models disagree on
    the float range, so it is detected from the first samples: any magnitude
    above 1 means 0-255, otherwise 0-1.

Only hole pixels are taken from the model output; everything else keeps its
original value, since the resize round trip softens the whole frame.
"""

from pathlib import Path

import cv2
import numpy as np

from patchfill.inpainters.base import Inpainter
from patchfill.patchmatch.mask import clear_holes, hole_mask

# Side of the square the model runs at.
_MODEL_SIZE = 512

# Number of response values inspected to guess the output range.
_RANGE_SAMPLE = 1000

# TorchScript exports of LaMa are ~200MB; anything under this is a broken download.
_MIN_MODEL_BYTES = 1024 * 1024


def encode_request(
    image: np.ndarray, holes: np.ndarray, size: int = _MODEL_SIZE
) -> tuple[np.ndarray, np.ndarray]:
    """Build the model input tensors.

    Args:
        image: (H, W, 3) RGB uint8.
        holes: (H, W) bool, True = hole.
        size: Side of the square model input.

    Returns:
        Tuple of (image_tensor, mask_tensor), NCHW float32.
    """
    resized = cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)
    image_t = resized.astype(np.float32).transpose(2, 0, 1)[None] / 255.0

    # INTER_AREA keeps any hole that covers part of a model pixel
    mask_small = cv2.resize(
        holes.astype(np.float32), (size, size), interpolation=cv2.INTER_AREA
    )
    mask_t = (mask_small > 0).astype(np.float32)[None, None]
    return image_t, mask_t


def output_is_unit_range(output: np.ndarray) -> bool:
    """Guess whether a model response is in 0-1 (True) or 0-255 (False)."""
    if output.dtype == np.uint8:
        return False
    sample = np.abs(output.reshape(-1)[:_RANGE_SAMPLE].astype(np.float64))
    return not np.any(sample > 1.0)


def decode_response(output: np.ndarray, width: int, height: int) -> np.ndarray:
    """Convert the model response to an (H, W, 3) RGB uint8 image.

    Args:
        output: (1, 3, S, S) or (3, S, S) array, uint8 or float.
        width: Original image width.
        height: Original image height.
    """
    output = np.asarray(output)
    if output.ndim == 4:
        output = output[0]

    values = output.astype(np.float32)
    if output_is_unit_range(output):
        values = values * 255.0
    rgb = np.clip(np.rint(values), 0, 255).astype(np.uint8).transpose(1, 2, 0)
    rgb = np.ascontiguousarray(rgb)
    return cv2.resize(rgb, (width, height), interpolation=cv2.INTER_LINEAR)


class _TorchScriptRunner:
    """Adapts a TorchScript LaMa module to numpy in, numpy out."""

    def __init__(self, module, device):
        self._module = module
        self._device = device

    def __call__(self, image_t: np.ndarray, mask_t: np.ndarray) -> np.ndarray:
        import torch

        image = torch.from_numpy(image_t).to(self._device)
        mask = torch.from_numpy(mask_t).to(self._device)
        with torch.inference_mode():
            result = self._module(image, mask)
        return result.detach().cpu().numpy()


class LamaInpainter(Inpainter):
    """LaMa neural inpainter."""

    def __init__(
        self,
        device: str | None = None,
        model_path: str | Path | None = None,
        model_size: int = _MODEL_SIZE,
    ):
        """Initialize the LaMa inpainter.

        Args:
            device: Device to run inference on ('cuda', 'cpu', or None for auto).
            model_path: Local TorchScript LaMa model. If None, the model is
                fetched and cached by `simple-lama-inpainting`.
            model_size: Side of the square the model runs at.
        """
        self._device = device
        self._model_path = Path(model_path) if model_path is not None else None
        self._model_size = model_size
        self._model = None

    @property
    def name(self) -> str:
        return "lama"

    def _load_model(self):
        """Lazy-load the LaMa model on first use."""
        if self._model is not None:
            return
        import torch

        if self._device is None:
            device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        else:
            device = torch.device(self._device)

        if self._model_path is not None:
            _check_model_file(self._model_path)
            module = torch.jit.load(str(self._model_path), map_location=device)
            module.eval()
        else:
            from simple_lama_inpainting import SimpleLama

            module = SimpleLama(device=device).model
        self._model = _TorchScriptRunner(module, device)

    def _inpaint(self, image: np.ndarray, mask: np.ndarray) -> np.ndarray:
        holes = hole_mask(mask)
        if not holes.any():
            return image

        self._load_model()

        h, w = image.shape[:2]
        code = cv2.COLOR_BGRA2RGB if image.shape[2] == 4 else cv2.COLOR_BGR2RGB
        image_rgb = cv2.cvtColor(image, code)

        image_t, mask_t = encode_request(image_rgb, holes, self._model_size)
        output = self._model(image_t, mask_t)
        result_bgr = cv2.cvtColor(decode_response(output, w, h), cv2.COLOR_RGB2BGR)

        image[holes, :3] = result_bgr[holes]
        if image.shape[2] == 4:
            image[holes, 3] = 255
        clear_holes(mask, holes)
        return image


def _check_model_file(path: Path) -> None:
    if not path.is_file():
        raise FileNotFoundError(f"LaMa model not found: {path}")
    size = path.stat().st_size
    if size < _MIN_MODEL_BYTES:
        raise ValueError(
            f"LaMa model file is too small ({size} bytes), it is probably a "
            f"truncated download: {path}"
        )
