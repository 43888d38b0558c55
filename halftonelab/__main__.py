"""
Command line
------------
$ python -m halftonelab --out /tmp/demo.png --size 1200x800 \
    --params look.json --seed 7 --shape circle --scale 2

$ python -m halftonelab --out /tmp/ --svg --shape dither
"""

import argparse
import logging
from typing import Optional, Sequence, Tuple

from .export import generate
from .params import Params, RenderMode, Shape, SourceMode, load_params


def parse_size(s: str) -> Tuple[int, int]:
    if "x" not in s.lower():
        raise argparse.ArgumentTypeError("Size must be like 1200x800")
    a, b = s.lower().split("x")
    try:
        w, h = int(a), int(b)
    except ValueError:
        raise argparse.ArgumentTypeError("Size must be like 1200x800") from None
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError("Width and height must be positive")
    return (w, h)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="halftonelab", description="Render procedural halftone patterns to PNG or SVG")
    ap.add_argument("--out", required=True, help="Output file, or a directory to name the file automatically")
    ap.add_argument("--size", type=parse_size, default=(1200, 800), help="WIDTHxHEIGHT (e.g., 1200x800)")
    ap.add_argument("--params", default=None, help="Path to a JSON parameter file")
    ap.add_argument("--seed", type=int, default=None, help="Override the noise seed")
    ap.add_argument("--shape", default=None, choices=[s.value for s in Shape])
    ap.add_argument("--render-mode", default=None, choices=[m.value for m in RenderMode])
    ap.add_argument("--source-mode", default=None, choices=[m.value for m in SourceMode])
    ap.add_argument("--scale", type=int, default=1, help="PNG export multiplier (1-4 are typical)")
    ap.add_argument("--svg", action="store_true", help="Write an SVG instead of a PNG")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.scale < 1:
        ap.error("--scale must be >= 1")

    try:
        params = load_params(args.params) if args.params else Params()
        overrides = {}
        if args.seed is not None:
            overrides["noise"] = {"seed": args.seed}
        if args.shape:
            overrides["halftone"] = {"shape": Shape(args.shape)}
        if args.render_mode:
            overrides["render_mode"] = RenderMode(args.render_mode)
        if args.source_mode:
            overrides["source_mode"] = SourceMode(args.source_mode)
        params = params.replace(**overrides)
    except (OSError, ValueError) as e:
        ap.error(str(e))

    width, height = args.size
    out = generate(args.out, width, height, params, svg=args.svg, scale=args.scale)
    print(out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
