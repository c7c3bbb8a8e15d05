import argparse
import logging
import sys

from pdf2img import convert
from pdf2img.resource_limits import ResourceLimits


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the first page of a PDF file to a PNG image"
    )
    parser.add_argument("input", metavar="INPUT", type=str, help="Input PDF file path")
    parser.add_argument(
        "output",
        metavar="PATH",
        type=str,
        nargs="?",
        default=None,
        help="Output file or directory. Default: next to the input file.",
    )
    parser.add_argument(
        "--max-pixel-dimension",
        metavar="PIXELS",
        type=int,
        default=None,
        help="Maximum width or height of the rendered image. Default: 4000",
    )
    parser.add_argument(
        "--timeout",
        metavar="SECONDS",
        type=int,
        default=None,
        help="Timeout for each render attempt in seconds. Default: no timeout",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    return parser.parse_args()


def main() -> None:
    """Main function to render a PDF page to PNG."""
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))
    limits = ResourceLimits.default()
    if args.max_pixel_dimension is not None:
        limits.max_pixel_dimension = args.max_pixel_dimension
    if args.timeout is not None:
        limits.render_timeout = args.timeout
    result = convert(args.input, args.output, limits=limits)
    if result.error is not None:
        print(result.error, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
