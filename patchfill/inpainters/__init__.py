"""Inpainter registry."""

from patchfill.inpainters.base import Inpainter
from patchfill.inpainters.patchmatch import PatchMatchInpainter
from patchfill.inpainters.lama import LamaInpainter

INPAINTERS: dict[str, type[Inpainter]] = {
    "patchmatch": PatchMatchInpainter,
    "lama": LamaInpainter,
}


def get_inpainter(name: str, **kwargs) -> Inpainter:
    """Instantiate an inpainter by name."""
    if name not in INPAINTERS:
        available = ", ".join(INPAINTERS.keys())
        raise ValueError(f"Unknown inpainter '{name}'. Available: {available}")
    return INPAINTERS[name](**kwargs)


__all__ = [
    "Inpainter",
    "INPAINTERS",
    "get_inpainter",
    "PatchMatchInpainter",
    "LamaInpainter",
]
