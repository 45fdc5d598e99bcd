"""
Report formatting and display for the CLI interface.

Provides functions to format and print ranked similar pairs in a
human-readable format.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..models import SimilarPair, ScanSnapshot


def _print_section_header(title: str) -> None:
    """Print a section header with divider lines."""
    print("\n" + "-" * 70)
    print(title)
    print("-" * 70)


def _format_image_line(label: str, pair: SimilarPair, which: str) -> str:
    record = pair.image_a if which == 'a' else pair.image_b
    dimensions = record.dimensions
    resolution = f"{dimensions[0]}x{dimensions[1]}" if dimensions else "?x?"
    return f"  [{label}] {record.source_path}\n       {resolution} | {record.file_size_formatted}"


def print_pair_report(
    pairs: Sequence[SimilarPair],
    snapshot: Optional[ScanSnapshot] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Print the ranked similar pair list.

    Args:
        pairs: Pairs in ranked order
        snapshot: Final scan snapshot for the summary line
        logger: Optional logger for the summary
    """
    if not pairs:
        print("\nNo similar images found.")
    else:
        _print_section_header(f"SIMILAR PAIRS ({len(pairs):,})")
        for rank, pair in enumerate(pairs, 1):
            print(f"\n#{rank} {pair.description}")
            print(_format_image_line('A', pair, 'a'))
            print(_format_image_line('B', pair, 'b'))

    if snapshot is not None and logger is not None:
        logger.info(snapshot.message)


__all__ = ['print_pair_report']
