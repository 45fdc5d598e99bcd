"""
Configuration constants for Image Dup Checker.

This module contains all configurable settings including:
- Supported image extensions
- Similarity and thumbnail defaults
- Credential store location
"""

import os

# Supported image extensions (matched case-insensitively)
IMAGE_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.heic', '.tiff', '.gif', '.bmp',
}

# Extensions that need pillow-heif to decode
HEIF_EXTENSIONS = {'.heic'}

# Default cosine similarity threshold (0-1)
# Higher = stricter matching
DEFAULT_THRESHOLD = 0.85

# Thumbnails are rendered once per image at load time
THUMBNAIL_SIZE = (200, 200)

# Feature extraction backend used when none is requested
DEFAULT_EXTRACTOR = 'phash'

# pHash size for the default extractor (16 -> 256-dimension vectors)
DEFAULT_HASH_SIZE = 16

# Side length of the grayscale grid used by the pixel extractor
DEFAULT_PIXEL_GRID = 16

# Progress scale: loading fills [0, 0.5), comparing fills [0.5, 1.0]
LOAD_PHASE_SHARE = 0.5

# Well-known key of the persisted folder credential
BOOKMARK_KEY = 'SelectedFolderBookmark'

# Persisted folder credentials (opaque blobs keyed by name)
CREDENTIALS_FILE = os.path.join(os.path.expanduser('~'), '.dupchecker_credentials.json')
