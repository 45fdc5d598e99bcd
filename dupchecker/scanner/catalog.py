"""
Catalog loading module for the scanner package.

Turns a directory into the ordered list of decodable images, each with a
thumbnail rendered once at load time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from ..config import THUMBNAIL_SIZE
from ..credentials import AccessProvider, scoped_access
from ..errors import AccessDenied, DirectoryAccessError, ScanCancelled
from ..models import ImageRecord
from .dependencies import Image, _logger
from .file_discovery import find_image_files


def load_image(filepath: str | Path) -> Optional[Image.Image]:
    """
    Decode an image file fully into memory.

    Returns:
        The decoded image, or None if the file cannot be decoded
    """
    try:
        with Image.open(filepath) as img:
            # Force load to detect truncated/corrupt images early
            img.load()
            return img.copy()
    except Exception as e:
        _logger.debug(f"Could not decode {filepath}: {e}")
        return None


def create_thumbnail(image: Image.Image, size: tuple[int, int] = THUMBNAIL_SIZE) -> Image.Image:
    """
    Render a fixed-size, aspect-preserving thumbnail.

    The image is scaled to fit inside ``size`` and centered on a
    transparent canvas of exactly that size.
    """
    source = image if image.mode in ('RGB', 'RGBA') else image.convert('RGBA')
    scaled = source.copy()
    scaled.thumbnail(size, Image.Resampling.LANCZOS)

    canvas = Image.new('RGBA', size, (0, 0, 0, 0))
    offset = ((size[0] - scaled.width) // 2, (size[1] - scaled.height) // 2)
    canvas.paste(scaled, offset)
    return canvas


def load_catalog(
    directory: str | Path,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    cancel_check: Optional[Callable[[], bool]] = None,
    access_provider: Optional[AccessProvider] = None,
    thumbnail_size: tuple[int, int] = THUMBNAIL_SIZE,
) -> list[ImageRecord]:
    """
    Load every decodable image directly inside a directory.

    Args:
        directory: Directory to scan
        progress_callback: Optional callback(processed, total) after each file
        cancel_check: Optional callable returning True when the scan should stop
        access_provider: Provider for scoped filesystem access
        thumbnail_size: Size of the thumbnail attached to each record

    Returns:
        ImageRecord list in catalog order (index 0..n-1)

    Raises:
        DirectoryAccessError: If the directory cannot be accessed or listed
        ScanCancelled: If cancel_check returns True
    """
    try:
        with scoped_access(directory, access_provider):
            filepaths = find_image_files(directory)
    except AccessDenied as e:
        raise DirectoryAccessError(str(directory), str(e))

    total = len(filepaths)
    _logger.info(f"Found {total:,} candidate images in {directory}")

    records: list[ImageRecord] = []
    skipped = 0

    for processed, filepath in enumerate(filepaths, 1):
        if cancel_check and cancel_check():
            raise ScanCancelled(f"Catalog load cancelled after {processed - 1} files")

        record = None
        try:
            with scoped_access(filepath, access_provider):
                image = load_image(filepath)
                if image is not None:
                    record = ImageRecord(
                        source_path=filepath,
                        index=len(records),
                        thumbnail=create_thumbnail(image, thumbnail_size),
                    )
        except AccessDenied as e:
            _logger.debug(f"Skipping {filepath}: {e}")
        except Exception as e:
            _logger.debug(f"Could not render thumbnail for {filepath}: {e}")

        if record is None:
            skipped += 1
        else:
            records.append(record)

        if progress_callback:
            progress_callback(processed, total)

    if skipped:
        _logger.info(f"Skipped {skipped:,} files that could not be decoded")

    return records


__all__ = ['load_image', 'create_thumbnail', 'load_catalog']
