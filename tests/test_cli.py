import numpy as np
import pytest

from conftest import random_image, rect_mask
from patchfill import pipeline
from patchfill.cli import build_parser, main
from patchfill.inpainters import PatchMatchInpainter
from patchfill.utils import load_image, save_image

FAST = ["--patch-size", "3", "--iterations", "1", "--seed", "0"]


@pytest.fixture
def files(tmp_path, rng):
    save_image(random_image(rng, 10, 10), tmp_path / "in.png")
    save_image(rect_mask(10, 10, 3, 3, 6, 6), tmp_path / "mask.png")
    return tmp_path


def test_parser_defaults():
    args = build_parser().parse_args(["inpaint", "a.png", "b.png", "-m", "m.png"])
    assert args.method == "patchmatch"
    assert args.patch_size == 9
    assert args.iterations == 5
    assert args.seed is None
    assert args.dilate == 0


def test_parser_requires_mask():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["inpaint", "a.png", "b.png"])


def test_inpaint_single_image(files, capsys):
    main(["inpaint", str(files / "in.png"), str(files / "out.png"), "-m", str(files / "mask.png"), *FAST])

    result = load_image(files / "out.png")
    assert (result[3:6, 3:6, 3] == 255).all()
    assert "Done." in capsys.readouterr().out


def test_inpaint_directory(files, rng):
    src = files / "src"
    save_image(random_image(rng, 10, 10), src / "one.png")

    main(["inpaint", str(src), str(files / "out"), "-m", str(files / "mask.png"), *FAST])

    assert (files / "out" / "one.png").exists()


def test_missing_input_exits(files, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["inpaint", str(files / "nope.png"), str(files / "out.png"), "-m", str(files / "mask.png")])
    assert exc.value.code == 1
    assert "Input not found" in capsys.readouterr().err


def test_even_patch_size_exits(files, capsys):
    with pytest.raises(SystemExit) as exc:
        main([
            "inpaint", str(files / "in.png"), str(files / "out.png"),
            "-m", str(files / "mask.png"), "--patch-size", "4",
        ])
    assert exc.value.code == 1
    assert "patch_size" in capsys.readouterr().err


def test_compare(files, monkeypatch):
    monkeypatch.setattr(pipeline, "INPAINTERS", {"patchmatch": PatchMatchInpainter})

    main(["compare", str(files / "in.png"), str(files / "cmp"), "-m", str(files / "mask.png"), *FAST])

    assert (files / "cmp" / "comparison.png").exists()
    assert np.any(load_image(files / "cmp" / "result_patchmatch.png"))
