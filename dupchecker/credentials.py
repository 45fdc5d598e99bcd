"""
Folder credentials and scoped filesystem access.

A credential is an opaque blob saved when the user picks a folder and
resolved later when an item action needs that folder again. Every
filesystem touch that needs the credential runs inside ``scoped_access``,
which acquires access for the duration of one operation and always
releases it, including on error paths.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from .errors import AccessDenied, CredentialError

_logger = logging.getLogger(__name__)

CREDENTIAL_VERSION = 1


class AccessProvider:
    """Grants and revokes access to filesystem locations."""

    def acquire(self, path: Path) -> None:
        raise NotImplementedError

    def release(self, path: Path) -> None:
        raise NotImplementedError


class FilesystemAccessProvider(AccessProvider):
    """
    Access provider backed by plain permission checks.

    Acquiring verifies the location exists and is readable; releasing has
    nothing to revoke on platforms without sandboxed file access.
    """

    def acquire(self, path: Path) -> None:
        if not os.path.exists(path):
            raise AccessDenied(f"Location does not exist: {path}")
        if not os.access(path, os.R_OK):
            raise AccessDenied(f"Location is not readable (permission denied): {path}")
        _logger.debug(f"Acquired access to {path}")

    def release(self, path: Path) -> None:
        _logger.debug(f"Released access to {path}")


_default_provider = FilesystemAccessProvider()


def get_access_provider() -> AccessProvider:
    """Get the process-wide default AccessProvider."""
    return _default_provider


@contextmanager
def scoped_access(path: str | Path, provider: Optional[AccessProvider] = None) -> Iterator[Path]:
    """
    Hold access to a location for the duration of a ``with`` block.

    Raises:
        AccessDenied: If access cannot be acquired (nothing is released then)
    """
    provider = provider or get_access_provider()
    location = Path(path)
    provider.acquire(location)
    try:
        yield location
    finally:
        provider.release(location)


class DirectoryCredential:
    """Creates and resolves opaque folder credentials."""

    @staticmethod
    def create(directory: str | Path) -> bytes:
        """Build the credential blob for an absolute directory path."""
        directory = os.path.abspath(str(directory))
        payload = {
            'version': CREDENTIAL_VERSION,
            'path': directory,
            'created': datetime.now().isoformat(),
        }
        return base64.urlsafe_b64encode(json.dumps(payload).encode('utf-8'))

    @staticmethod
    def resolve(blob: bytes) -> tuple[Path, bool]:
        """
        Resolve a credential blob back to its directory.

        Returns:
            Tuple of (directory path, is_stale); a credential is stale when
            the directory it names no longer exists

        Raises:
            CredentialError: If the blob is malformed
        """
        try:
            payload = json.loads(base64.urlsafe_b64decode(blob).decode('utf-8'))
            directory = Path(payload['path'])
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError,
                KeyError, TypeError, ValueError) as e:
            raise CredentialError(f"Malformed folder credential: {e}")

        if payload.get('version') != CREDENTIAL_VERSION:
            raise CredentialError(f"Unsupported credential version: {payload.get('version')}")

        return directory, not directory.is_dir()


class CredentialStore:
    """
    Persists opaque credential blobs by key in a small JSON file.

    The blobs are stored base64-encoded; the store never interprets them.
    """

    def __init__(self, path: Optional[str | Path] = None):
        if path is None:
            from .user_config import get_user_config
            path = get_user_config().credentials_file
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            _logger.warning(f"Could not read credential store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f)

    def save(self, key: str, blob: bytes) -> None:
        """Store a blob under a key, replacing any previous one."""
        with self._lock:
            data = self._read()
            data[key] = base64.b64encode(blob).decode('ascii')
            try:
                self._write(data)
            except OSError as e:
                raise CredentialError(f"Could not save credential '{key}': {e}")

    def load(self, key: str) -> Optional[bytes]:
        """Return the blob stored under a key, or None."""
        with self._lock:
            encoded = self._read().get(key)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded)
        except (binascii.Error, ValueError) as e:
            _logger.warning(f"Stored credential '{key}' is corrupt: {e}")
            return None

    def delete(self, key: str) -> bool:
        """Remove a stored blob. Returns True if one was removed."""
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            try:
                self._write(data)
            except OSError as e:
                raise CredentialError(f"Could not delete credential '{key}': {e}")
            return True


__all__ = [
    'AccessProvider',
    'FilesystemAccessProvider',
    'get_access_provider',
    'scoped_access',
    'DirectoryCredential',
    'CredentialStore',
]
