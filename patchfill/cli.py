"""Command-line interface for patchfill."""

import argparse
import shutil
import sys
import time
from pathlib import Path

from patchfill.patchmatch import DEFAULT_ITERATIONS, DEFAULT_PATCH_SIZE


def _formatter(prog: str) -> argparse.HelpFormatter:
    width = shutil.get_terminal_size().columns
    return argparse.HelpFormatter(prog, max_help_position=40, width=width)


def _require_exists(path: Path, label: str = "Input") -> None:
    if not path.exists():
        print(f"Error: {label} not found: {path}", file=sys.stderr)
        sys.exit(1)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-m", "--mask", required=True, help="Mask image (alpha or 0/255).")
    parser.add_argument(
        "--dilate",
        type=int,
        default=0,
        metavar="PX",
        help="Grow the mask by PX pixels before inpainting (default: 0).",
    )
    parser.add_argument(
        "--patch-size",
        type=int,
        default=DEFAULT_PATCH_SIZE,
        help=f"PatchMatch patch size, odd (default: {DEFAULT_PATCH_SIZE}).",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"PatchMatch refinement passes (default: {DEFAULT_ITERATIONS}).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="PatchMatch random seed, for reproducible output (default: random).",
    )
    parser.add_argument(
        "--device",
        default=None,
        help="LaMa device: 'cuda', 'cpu', or auto (default: auto).",
    )
    parser.add_argument(
        "--model",
        default=None,
        metavar="PATH",
        help="Local TorchScript LaMa model (default: download).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchfill",
        description="Fill masked image regions from their surroundings.",
        formatter_class=_formatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_inp = sub.add_parser(
        "inpaint",
        help="Inpaint an image (or a directory) with a mask.",
        usage="%(prog)s [OPTIONS] -m MASK input output",
        formatter_class=_formatter,
    )
    p_inp.add_argument("input", help="Image or directory of images.")
    p_inp.add_argument("output", help="Output image, or directory for batch input.")
    p_inp.add_argument(
        "--method",
        choices=["patchmatch", "lama"],
        default="patchmatch",
        help="Inpainting method (default: patchmatch).",
    )
    _add_common_options(p_inp)
    p_inp._positionals.title = "arguments"

    p_cmp = sub.add_parser(
        "compare",
        help="Run every method on one image and save a comparison grid.",
        usage="%(prog)s [OPTIONS] -m MASK input output_dir",
        formatter_class=_formatter,
    )
    p_cmp.add_argument("input", help="Input image.")
    p_cmp.add_argument("output_dir", help="Directory for results and comparison.png.")
    _add_common_options(p_cmp)
    p_cmp._positionals.title = "arguments"

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "inpaint":
        _cmd_inpaint(args)
    elif args.command == "compare":
        _cmd_compare(args)


def _inpainter_kwargs(args) -> dict[str, dict]:
    return {
        "patchmatch": {
            "patch_size": args.patch_size,
            "iterations": args.iterations,
            "seed": args.seed,
        },
        "lama": {"device": args.device, "model_path": args.model},
    }


def _cmd_inpaint(args):
    from patchfill.inpainters import get_inpainter

    input_path = Path(args.input)
    mask_path = Path(args.mask)
    output_path = Path(args.output)

    _require_exists(input_path, "Input")
    _require_exists(mask_path, "Mask file")

    print(f"Input:  {input_path}")
    print(f"Mask:   {mask_path}")
    print(f"Output: {output_path}")

    try:
        inpainter = get_inpainter(args.method, **_inpainter_kwargs(args)[args.method])
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if input_path.is_dir():
        from patchfill.batch import inpaint_batch
        from patchfill.utils import dilate_mask, load_mask

        mask = dilate_mask(load_mask(mask_path), args.dilate)
        inpaint_batch(
            input_path=input_path,
            output_path=output_path,
            mask=mask,
            inpainter=inpainter,
        )
    else:
        from patchfill.pipeline import Pipeline

        t0 = time.time()
        Pipeline(inpainter=inpainter).run(
            input_path, mask_path, output_path, dilate=args.dilate
        )
        print(f"  Total: {time.time() - t0:.1f}s")

    print("Done.")


def _cmd_compare(args):
    from patchfill.pipeline import compare

    input_path = Path(args.input)
    mask_path = Path(args.mask)

    _require_exists(input_path, "Input")
    _require_exists(mask_path, "Mask file")

    print(f"Input: {input_path}")
    print(f"Mask:  {mask_path}")

    compare(
        input_path,
        mask_path,
        Path(args.output_dir),
        inpainter_kwargs=_inpainter_kwargs(args),
        dilate=args.dilate,
    )
    print("Done.")


if __name__ == "__main__":
    main()
