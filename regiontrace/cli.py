"""Command line interface for regiontrace."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from regiontrace.display import save_image
from regiontrace.raster_ingest import ingest
from regiontrace.session import CommandDispatcher, SessionState, run_command_loop
from regiontrace.types import KERNELS, ImageLoadError, SegmentationError, TraceConfig


def parse_tolerance(text: str) -> Tuple[int, ...]:
    """Parse a comma-separated tolerance such as ``50,50,50``."""
    try:
        values = tuple(int(v.strip()) for v in text.split(','))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid tolerance: {text}")
    if any(v < 0 for v in values):
        raise argparse.ArgumentTypeError(f"Tolerance must be non-negative: {text}")
    return values


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='regiontrace',
        description='Grow colour regions from seed points and trace their perimeters',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  regiontrace photo.png
  regiontrace photo.png --upper-bound 30,30,30 --step-diff 3,3,3
  regiontrace photo.png --kernel fixed --display-to overlay.png
        """,
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path'
    )

    parser.add_argument(
        '--upper-bound',
        type=parse_tolerance,
        default=(50, 50, 50),
        help='Maximal per-channel difference from the seed colour (default: 50,50,50)'
    )

    parser.add_argument(
        '--step-diff',
        type=parse_tolerance,
        default=(5, 5, 5),
        help='Maximal per-channel difference between adjacent pixels (default: 5,5,5)'
    )

    parser.add_argument(
        '--kernel',
        choices=KERNELS,
        default='gaussian',
        help='Perimeter smoothing kernel (default: gaussian)'
    )

    parser.add_argument(
        '--display-to',
        type=str,
        default=None,
        help='Write the "display" overlay to this image file instead of opening a window'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log pipeline progress'
    )

    return parser


def main(args: Optional[list] = None, stdin=None, stdout=None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])
        stdin: Command source (defaults to sys.stdin)
        stdout: Command output (defaults to sys.stdout)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        result = ingest(parsed.input)
    except (FileNotFoundError, ImageLoadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        config = TraceConfig(
            upper_bound=parsed.upper_bound,
            step_diff=parsed.step_diff,
            smoothing_kernel=parsed.kernel
        )
    except SegmentationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    viewer = None
    if parsed.display_to:
        display_path = Path(parsed.display_to)
        viewer = lambda image, title: save_image(image, display_path)

    state = SessionState(image=result.image, config=config)
    dispatcher = CommandDispatcher(viewer=viewer, output=stdout)
    run_command_loop(state, dispatcher, stdin=stdin)

    return 0


if __name__ == '__main__':
    sys.exit(main())
