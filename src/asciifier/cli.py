import argparse
import logging
import sys
from pathlib import Path

from asciifier.charsets import CHARSETS, DEFAULT_CHARSET
from asciifier.engine import Asciifier, RenderOptions
from asciifier.errors import AsciifierError
from asciifier.source import DEFAULT_THRESHOLD, load_image, save_image


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Redraw an image as a mosaic of font glyphs")
    parser.add_argument("font", help="Path to a TrueType/OpenType font")
    parser.add_argument("image", help="Path to input image")
    parser.add_argument("-o", "--output", default="out.png", help="Output image path (default: out.png)")
    parser.add_argument(
        "-r",
        "--charset",
        default=DEFAULT_CHARSET,
        choices=sorted(CHARSETS),
        help=f"Character repertoire to draw with (default: {DEFAULT_CHARSET})",
    )
    parser.add_argument("-s", "--size", type=_positive_int, default=24, help="Font size in points (default: 24)")
    parser.add_argument("-c", "--colour", action="store_true", default=False, help="Tint glyphs with the tile colour")
    threshold = parser.add_mutually_exclusive_group()
    threshold.add_argument(
        "-t",
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD,
        help=f"Binarise the greyscale source at this luminance fraction (default: {DEFAULT_THRESHOLD})",
    )
    threshold.add_argument(
        "--no-threshold",
        dest="threshold",
        action="store_const",
        const=None,
        help="Match against the plain greyscale source",
    )
    parser.add_argument("-j", "--workers", type=_positive_int, default=None, help="Worker threads (default: auto)")
    parser.add_argument("--text", action="store_true", help="Also print the chosen characters to stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s: %(message)s")

    for path in (Path(args.font), Path(args.image)):
        if not path.exists():
            print(f"File not found: {path}", file=sys.stderr)
            return 1

    options = RenderOptions(
        charset=args.charset,
        font_size=args.size,
        colour=args.colour,
        threshold=args.threshold,
        workers=args.workers,
    )
    try:
        engine = Asciifier.from_font(args.font, options)
        result = engine.render(load_image(args.image))
    except AsciifierError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        save_image(result.image, args.output)
    except (OSError, ValueError) as e:
        print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
        return 1
    if args.text:
        print("\n".join(result.chars))
    return 0
