"""
Export functionality for Image Dup Checker.

Provides functions to export ranked similar pairs to TXT and CSV files.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence, TextIO

from ..models import SimilarPair


def _export_txt(pairs: Sequence[SimilarPair], file_handle: TextIO) -> None:
    """Export similar pairs to TXT format."""
    file_handle.write("SIMILAR IMAGE REPORT\n")
    file_handle.write("=" * 70 + "\n")

    for rank, pair in enumerate(pairs, 1):
        file_handle.write(f"\nPair {rank} ({pair.description}):\n")
        file_handle.write(f"  {pair.image_a.source_path}\n")
        file_handle.write(f"  {pair.image_b.source_path}\n")


def _export_csv(pairs: Sequence[SimilarPair], file_handle: TextIO) -> None:
    """
    Export similar pairs to CSV format.

    Notes:
        CSV includes: rank, similarity, path_a, path_b
    """
    writer = csv.writer(file_handle)
    writer.writerow(['rank', 'similarity', 'path_a', 'path_b'])
    for rank, pair in enumerate(pairs, 1):
        writer.writerow([
            rank,
            f"{pair.similarity:.6f}",
            pair.image_a.source_path,
            pair.image_b.source_path,
        ])


def export_results(
    pairs: Sequence[SimilarPair],
    output_path: Path,
    export_format: str = 'txt',
) -> None:
    """
    Export ranked similar pairs to a file.

    Args:
        pairs: Pairs in ranked order
        output_path: Path to output file
        export_format: Export format ('txt' or 'csv'). Default: 'txt'

    Raises:
        ValueError: If export_format is not 'txt' or 'csv'
        OSError: If file cannot be written
    """
    if export_format not in ('txt', 'csv'):
        raise ValueError(f"Unsupported export format: {export_format}. Use 'txt' or 'csv'.")

    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        if export_format == 'txt':
            _export_txt(pairs, f)
        else:
            _export_csv(pairs, f)


__all__ = ['export_results']
