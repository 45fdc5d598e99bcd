"""
Reveal-in-file-browser action for Image Dup Checker.

The item action on a similar pair shows the chosen image in the system
file browser so the user can decide what to do with it there. Files are
never deleted or moved here, and the catalog and results stay untouched.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from .config import BOOKMARK_KEY
from .credentials import (
    AccessProvider,
    CredentialStore,
    DirectoryCredential,
    scoped_access,
)
from .errors import AccessDenied, CredentialError, RevealActionFailed
from .models import ImageRecord
from .utils.platform import open_in_file_browser
from .utils.validators import validate_path_in_directory

_logger = logging.getLogger(__name__)

Launcher = Callable[[str], None]


def remember_directory(directory: str | Path, store: Optional[CredentialStore] = None) -> bytes:
    """
    Persist the folder credential for a directory the user picked.

    Returns:
        The stored credential blob
    """
    store = store or CredentialStore()
    blob = DirectoryCredential.create(directory)
    store.save(BOOKMARK_KEY, blob)
    _logger.debug(f"Stored folder credential for {directory}")
    return blob


def reveal_image(
    record: ImageRecord,
    store: Optional[CredentialStore] = None,
    launcher: Optional[Launcher] = None,
    provider: Optional[AccessProvider] = None,
) -> str:
    """
    Show an image in the system file browser.

    Args:
        record: Catalog record of the image to reveal
        store: Credential store holding the folder credential
        launcher: Callable that opens the file browser (default: platform command)
        provider: Provider for scoped filesystem access

    Returns:
        The path that was revealed

    Raises:
        RevealActionFailed: If the credential is missing or cannot be
            resolved, access cannot be acquired, the file lies outside the
            credentialed folder or no longer exists, or the file browser
            cannot be launched
    """
    store = store or CredentialStore()
    launcher = launcher or open_in_file_browser
    path = record.source_path

    blob = store.load(BOOKMARK_KEY)
    if blob is None:
        raise RevealActionFailed("No folder credential stored; pick the folder again")

    try:
        folder, is_stale = DirectoryCredential.resolve(blob)
    except CredentialError as e:
        raise RevealActionFailed(str(e))

    if is_stale:
        _logger.warning(f"Folder credential for {folder} is stale")

    try:
        with scoped_access(folder, provider):
            if not validate_path_in_directory(path, str(folder)):
                raise RevealActionFailed(f"{path} is outside the credentialed folder {folder}")
            if not os.path.isfile(path):
                raise RevealActionFailed(f"File no longer exists: {path}")
            try:
                launcher(path)
            except OSError as e:
                raise RevealActionFailed(f"Could not open file browser: {e}")
    except AccessDenied as e:
        raise RevealActionFailed(f"Cannot access folder {folder}: {e}")

    _logger.info(f"Revealed {path}")
    return path


__all__ = ['remember_directory', 'reveal_image']
