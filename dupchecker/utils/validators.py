"""
Input validation for Image Dup Checker.

Provides validators for scan parameters and path containment checks.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Optional

from ..scanner import available_extractors


def validate_path_in_directory(filepath: str, base_directory: str) -> bool:
    """
    Validate that a file path is within the expected base directory.

    Examples:
        >>> validate_path_in_directory('/home/user/photos/img.jpg', '/home/user/photos')
        True
        >>> validate_path_in_directory('/etc/passwd', '/home/user/photos')
        False
    """
    try:
        file_resolved = Path(filepath).resolve()
        base_resolved = Path(base_directory).resolve()
        return str(file_resolved).startswith(str(base_resolved) + os.sep) or \
               str(file_resolved) == str(base_resolved)
    except (OSError, RuntimeError):
        return False


def validate_directory(directory: str) -> tuple[bool, str]:
    """
    Validate that a directory path is usable as a scan request.

    Only the shape of the request is checked here; whether the directory
    can actually be listed is decided by the scan itself, which reports a
    DirectoryAccessError.

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_directory('photos')
        (False, 'Directory must be an absolute path')
    """
    if not directory:
        return False, "Directory path is required"

    if not os.path.isabs(directory):
        return False, "Directory must be an absolute path"

    return True, ""


def validate_threshold(threshold) -> tuple[bool, str]:
    """
    Validate that a similarity threshold is a number in [0, 1].

    Examples:
        >>> validate_threshold(0.85)
        (True, '')
        >>> validate_threshold(85)
        (False, 'Threshold must be between 0 and 1')
    """
    if isinstance(threshold, bool):
        return False, "Threshold must be a number"
    try:
        threshold = float(threshold)
    except (ValueError, TypeError):
        return False, "Threshold must be a number"
    if math.isnan(threshold) or not 0.0 <= threshold <= 1.0:
        return False, "Threshold must be between 0 and 1"
    return True, ""


def validate_scan_params(
    directory: str,
    threshold: Optional[float] = None,
    extractor: Optional[str] = None,
) -> tuple[bool, str]:
    """
    Validate all scan parameters.

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_scan_params('/home/user/photos', threshold=0.9)
        (True, '')
    """
    is_valid, error = validate_directory(directory)
    if not is_valid:
        return False, error

    if threshold is not None:
        is_valid, error = validate_threshold(threshold)
        if not is_valid:
            return False, error

    if extractor is not None and extractor not in available_extractors():
        return False, f"Unknown extractor: {extractor}"

    return True, ""


__all__ = [
    'validate_path_in_directory',
    'validate_directory',
    'validate_threshold',
    'validate_scan_params',
]
