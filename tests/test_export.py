"""Tests for file export helpers and the command line."""

import json

import numpy as np
import pytest
from PIL import Image

from halftonelab import Params, Shape, export_filename, generate, render, render_image, save_png, save_svg
from halftonelab.__main__ import main, parse_size
from halftonelab.halftone import resolve_layout


class TestFilenames:

    def test_plain(self):
        assert export_filename(500, "png") == "halftone-pattern-500.png"

    def test_scaled(self):
        assert export_filename(42, "png", scale=3) == "halftone-pattern-42-3x.png"

    def test_svg(self):
        assert export_filename(7, "svg") == "halftone-pattern-7.svg"


class TestRenderImage:

    def test_matches_buffer(self, params):
        img = render_image(30, 20, params)
        assert img.mode == "RGBA"
        assert img.size == (30, 20)
        assert np.array_equal(np.asarray(img), render(30, 20, params))

    def test_scaled_export_keeps_line_width_in_pixels(self, params):
        img = render_image(30, 20, params, scale=2)
        assert img.size == (60, 40)
        scaled = params.replace(halftone={"frequency": params.halftone.frequency * 2})
        assert np.array_equal(np.asarray(img), render(60, 40, scaled))
        assert resolve_layout(60, 40, scaled.halftone).period == resolve_layout(30, 20, params.halftone).period

    def test_rejects_bad_scale(self, params):
        with pytest.raises(ValueError):
            render_image(10, 10, params, scale=0)


class TestFiles:

    def test_save_png(self, tmp_path, params):
        out = save_png(str(tmp_path / "a.png"), 24, 16, params)
        with Image.open(out) as img:
            assert img.size == (24, 16)
            assert img.mode == "RGBA"

    def test_save_svg(self, tmp_path, params):
        out = save_svg(str(tmp_path / "a.svg"), 24, 16, params)
        text = open(out, encoding="utf-8").read()
        assert text.startswith("<svg")

    def test_generate_into_directory(self, tmp_path):
        out = generate(str(tmp_path), 20, 20, Params().replace(noise={"seed": 3}), scale=2)
        assert out.endswith("halftone-pattern-3-2x.png")

    def test_generate_svg_into_directory(self, tmp_path):
        out = generate(str(tmp_path), 20, 20, svg=True, scale=2)
        assert out.endswith("halftone-pattern-500.svg")


class TestCli:

    def test_parse_size(self):
        assert parse_size("120x80") == (120, 80)

    @pytest.mark.parametrize("bad", ["120", "0x10", "axb"])
    def test_parse_size_rejects(self, bad):
        import argparse
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(bad)

    def test_png(self, tmp_path, capsys):
        out = tmp_path / "p.png"
        assert main(["--out", str(out), "--size", "32x24", "--seed", "9", "--shape", "circle"]) == 0
        assert capsys.readouterr().out.strip() == str(out)
        with Image.open(out) as img:
            assert img.size == (32, 24)

    def test_svg_with_params_file(self, tmp_path, capsys):
        cfg = tmp_path / "look.json"
        cfg.write_text(json.dumps({"halftone": {"shape": "dither", "transparent": True}}))
        assert main(["--out", str(tmp_path), "--size", "16x16", "--params", str(cfg), "--svg"]) == 0
        out = capsys.readouterr().out.strip()
        assert out.endswith("halftone-pattern-500.svg")
        assert "<svg" in open(out, encoding="utf-8").read()

    def test_bad_params_file_exits(self, tmp_path):
        cfg = tmp_path / "bad.json"
        cfg.write_text(json.dumps({"halftone": {"shape": "hexagon"}}))
        with pytest.raises(SystemExit):
            main(["--out", str(tmp_path / "x.png"), "--params", str(cfg)])

    @pytest.mark.parametrize("data", [
        {"noise": {"scale": None}},
        {"noise": {"seed": [1]}},
        {"halftone": {"fg_color": 123}},
        {"halftone": {"invert": "sometimes"}},
    ])
    def test_bad_value_types_exit_with_usage_error(self, tmp_path, capsys, data):
        cfg = tmp_path / "bad.json"
        cfg.write_text(json.dumps(data))
        with pytest.raises(SystemExit) as excinfo:
            main(["--out", str(tmp_path / "x.png"), "--params", str(cfg)])
        assert excinfo.value.code == 2
        assert "error:" in capsys.readouterr().err

    def test_missing_params_file_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--out", str(tmp_path / "x.png"), "--params", str(tmp_path / "nope.json")])

    def test_shape_override(self, tmp_path):
        out = tmp_path / "d.png"
        main(["--out", str(out), "--size", "16x16", "--shape", "dither"])
        expected = render(16, 16, Params().replace(halftone={"shape": Shape.DITHER}))
        with Image.open(out) as img:
            assert np.array_equal(np.asarray(img), expected)
