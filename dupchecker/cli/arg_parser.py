"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
similar image checker command-line interface.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..scanner import available_extractors
from ..user_config import get_user_config


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Defaults for threshold and extractor come from the user configuration.
    """
    config = get_user_config()

    parser = argparse.ArgumentParser(
        description='Find visually similar image pairs in a directory',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/photos
      Rank similar pairs at the default threshold

  %(prog)s /path/to/photos --threshold 0.95
      Only report near-identical pairs

  %(prog)s /path/to/photos --extractor pixels
      Compare grayscale thumbnails instead of perceptual hashes

  %(prog)s /path/to/photos --export pairs.csv --export-format csv
      Export ranked pairs to CSV for external review

  %(prog)s /path/to/photos --reveal 1
      Show the second image of the top pair in the file browser

Only the files directly inside the directory are scanned.
        """
    )

    parser.add_argument(
        'directory',
        type=Path,
        nargs='?',
        default=None,
        help='Directory to scan for similar images'
    )

    parser.add_argument(
        '-t', '--threshold',
        type=float,
        default=config.default_threshold,
        help=f'Similarity threshold (0-1, higher=stricter). Default: {config.default_threshold}'
    )

    parser.add_argument(
        '-x', '--extractor',
        choices=available_extractors(),
        default=config.default_extractor,
        help=f'Feature extraction backend. Default: {config.default_extractor}'
    )

    parser.add_argument(
        '--reveal',
        type=int,
        metavar='RANK',
        help='After the scan, reveal image B of the pair at this rank (1-based)'
    )

    parser.add_argument(
        '-e', '--export',
        type=Path,
        help='Export results to file'
    )

    parser.add_argument(
        '--export-format',
        choices=['txt', 'csv'],
        default='txt',
        help='Export format. Default: txt'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars (useful for piping output)'
    )

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Examples:
        >>> args = parse_arguments(['/path/to/photos', '--threshold', '0.9'])
        >>> args.threshold
        0.9
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
]
