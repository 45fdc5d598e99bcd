"""
Image Dup Checker
=================
Finds pairs of visually near-duplicate images in a directory, ranked by
similarity.

Features:
- Pluggable feature extraction (perceptual hash or pixel embedding)
- Exact all-pairs cosine similarity with a configurable threshold
- Live progress reporting with stale-scan protection
- Reveal-in-file-browser item action
- JSON API for a presentation layer
- CLI for automation
"""

__version__ = "1.0.0"

from .models import ImageRecord, SimilarPair, ScanSnapshot
from .config import IMAGE_EXTENSIONS, DEFAULT_THRESHOLD
from .errors import (
    DupCheckerError,
    DirectoryAccessError,
    ExtractionUnavailable,
    RevealActionFailed,
)
from .scanner import (
    find_image_files,
    load_catalog,
    get_extractor,
    extract_features,
    cosine_similarity,
    find_similar_pairs,
)
from .state import ScanState, scan_state
from .reveal import reveal_image, remember_directory

__all__ = [
    "ImageRecord",
    "SimilarPair",
    "ScanSnapshot",
    "IMAGE_EXTENSIONS",
    "DEFAULT_THRESHOLD",
    "DupCheckerError",
    "DirectoryAccessError",
    "ExtractionUnavailable",
    "RevealActionFailed",
    "find_image_files",
    "load_catalog",
    "get_extractor",
    "extract_features",
    "cosine_similarity",
    "find_similar_pairs",
    "ScanState",
    "scan_state",
    "reveal_image",
    "remember_directory",
]
