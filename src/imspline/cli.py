"""Command-line driver: homographic transformation of an image.

Usage::

    imspline "h11 h12 h13; h21 h22 h23; h31 h32 h33" in out \\
        [order boundary eps larger geometry]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence

from .boundary import parse_boundary
from .config import DEFAULT_ORDER, MAX_ORDER, validate_order
from .exceptions import ImsplineError
from .geometry import parse_geometry
from .homography import parse_homography
from .io import read_image, write_image
from .logger import setup_logger
from .precision import fix_precision, validate_precision
from .transform import warp_homography

_DESCRIPTION = "Homographic transformation of an image using B-spline interpolation."

_EPILOG = """\
boundary extensions: constant, periodic, hsymmetric (default), wsymmetric;
any prefix is accepted.
geometry: wxh, wxh+x0+y0 (use - for negative offsets), auto or center.
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser of the ``imspline`` command."""
    parser = argparse.ArgumentParser(
        prog="imspline",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "homography",
        help='9 matrix coefficients ("h11 h12 h13; h21 h22 h23; h31 h32 h33")',
    )
    parser.add_argument("input", help="filename of the input image")
    parser.add_argument("output", help="filename of the output image")
    parser.add_argument(
        "order",
        nargs="?",
        type=int,
        default=DEFAULT_ORDER,
        help=f"order of interpolation, between 0 and {MAX_ORDER} (default {DEFAULT_ORDER})",
    )
    parser.add_argument(
        "boundary", nargs="?", default="hsymmetric", help="boundary extension"
    )
    parser.add_argument(
        "eps",
        nargs="?",
        type=float,
        default=6.0,
        help="relative precision; eps >= 1 means 10^-eps (default 6)",
    )
    parser.add_argument(
        "larger",
        nargs="?",
        type=int,
        choices=(0, 1),
        default=0,
        help="compute on the exact (0, default) or a larger (1) domain",
    )
    parser.add_argument("geometry", nargs="?", default=None, help="area of the output")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    parser.add_argument(
        "--log-file", action="store_true", help="also write the log to logs/imspline_<date>.log"
    )
    return parser


def run(args: argparse.Namespace) -> None:
    """Execute a parsed command line.

    Raises:
        ImsplineError: On invalid parameters or unreadable/unwritable images.
    """
    log = setup_logger(
        level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file
    )

    order = validate_order(args.order)
    boundary = parse_boundary(args.boundary)
    eps = validate_precision(fix_precision(args.eps))
    H = parse_homography(args.homography)

    image = read_image(args.input)
    _, height, width = image.shape
    log.debug("Read %s: %dx%d, %d channel(s)", args.input, width, height, image.shape[0])

    geometry = None
    if args.geometry is not None:
        geometry = parse_geometry(args.geometry, width, height, H)

    t0 = time.perf_counter()
    warped = warp_homography(image, H, order, boundary, eps, bool(args.larger), geometry)
    log.info("interpolation: %.3f s", time.perf_counter() - t0)

    write_image(args.output, warped)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``imspline`` command.

    Args:
        argv (Sequence[str] | None): Arguments without the program name;
            defaults to ``sys.argv[1:]``.

    Returns:
        int: Exit status, 0 on success and 1 on failure. Malformed command
        lines exit with status 2 through :mod:`argparse`.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        run(args)
    except ImsplineError as exc:
        print(f"imspline: error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
