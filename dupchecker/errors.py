"""
Exception types for Image Dup Checker.

Scan-level failures abort a scan, per-image failures only exclude that image,
and side-channel failures only affect the action that raised them.
"""


class DupCheckerError(Exception):
    """Base class for all Image Dup Checker errors."""


class DirectoryAccessError(DupCheckerError):
    """The scan directory could not be opened or enumerated."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot access directory {directory}: {reason}")


class ExtractionUnavailable(DupCheckerError):
    """No feature vector could be produced for an image (non-fatal)."""


class RevealActionFailed(DupCheckerError):
    """The reveal-in-file-browser action could not complete."""


class CredentialError(DupCheckerError):
    """A persisted folder credential is missing or cannot be resolved."""


class AccessDenied(DupCheckerError):
    """Scoped access to a filesystem location could not be acquired."""


class ScanCancelled(DupCheckerError):
    """The running scan was superseded or cancelled."""
