"""
File discovery module for the scanner package.

Provides functionality to enumerate the image files directly inside one
directory, with HEIC support detection.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..config import IMAGE_EXTENSIONS, HEIF_EXTENSIONS
from ..errors import DirectoryAccessError
from .dependencies import HAS_HEIF_SUPPORT


def supported_extensions() -> set[str]:
    """Return the extensions this installation can decode."""
    if HAS_HEIF_SUPPORT:
        return set(IMAGE_EXTENSIONS)
    return {ext for ext in IMAGE_EXTENSIONS if ext not in HEIF_EXTENSIONS}


def is_supported_image(path: str | Path) -> bool:
    """Check a file name against the supported extensions (case-insensitive)."""
    return Path(path).suffix.lower() in supported_extensions()


def find_image_files(directory: str | Path) -> list[str]:
    """
    Find the image files directly inside a directory.

    Args:
        directory: Directory to enumerate (subdirectories are not visited)

    Returns:
        Absolute file paths as strings, sorted by file name

    Raises:
        DirectoryAccessError: If the directory cannot be opened or listed
    """
    root = Path(directory)
    extensions = supported_extensions()

    try:
        with os.scandir(root) as entries:
            images = []
            for entry in entries:
                try:
                    if not entry.is_file():
                        continue
                except OSError:
                    continue
                if Path(entry.name).suffix.lower() in extensions:
                    images.append(os.path.abspath(entry.path))
    except FileNotFoundError:
        raise DirectoryAccessError(str(directory), "directory not found")
    except NotADirectoryError:
        raise DirectoryAccessError(str(directory), "path is not a directory")
    except PermissionError:
        raise DirectoryAccessError(str(directory), "permission denied")
    except OSError as e:
        raise DirectoryAccessError(str(directory), str(e))

    images.sort(key=lambda p: os.path.basename(p))
    return images


__all__ = ['find_image_files', 'is_supported_image', 'supported_extensions']
