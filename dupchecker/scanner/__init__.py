"""
Scanner package for Image Dup Checker.

Provides the similarity pipeline: catalog loading, feature extraction and
pairwise comparison.

Public API:
- find_image_files: Enumerate supported images directly inside a directory
- load_catalog: Decode images into ImageRecords with thumbnails
- get_extractor: Create a feature extraction backend by name
- extract_features: Extract vectors for a whole catalog
- cosine_similarity: Clamped cosine similarity of two vectors
- find_similar_pairs: All pairs at or above a threshold, ranked
- has_heif_support: Check if HEIC support is available
"""

from __future__ import annotations

from .file_discovery import find_image_files, is_supported_image, supported_extensions
from .catalog import load_image, create_thumbnail, load_catalog
from .features import (
    FeatureVector,
    ExtractionFailure,
    FeatureExtractor,
    PerceptualHashExtractor,
    PixelEmbeddingExtractor,
    MemoizedExtractor,
    available_extractors,
    get_extractor,
    extract_features,
)
from .similarity import (
    clamp_similarity,
    cosine_similarity,
    count_comparisons,
    iter_candidate_pairs,
    find_similar_pairs,
)

# Import dependencies for has_heif_support function
from .dependencies import HAS_HEIF_SUPPORT


def has_heif_support() -> bool:
    """Check if HEIC support is available."""
    return HAS_HEIF_SUPPORT


# Public API exports
__all__ = [
    # File discovery
    'find_image_files',
    'is_supported_image',
    'supported_extensions',
    # Catalog
    'load_image',
    'create_thumbnail',
    'load_catalog',
    # Feature extraction
    'FeatureVector',
    'ExtractionFailure',
    'FeatureExtractor',
    'PerceptualHashExtractor',
    'PixelEmbeddingExtractor',
    'MemoizedExtractor',
    'available_extractors',
    'get_extractor',
    'extract_features',
    # Similarity
    'clamp_similarity',
    'cosine_similarity',
    'count_comparisons',
    'iter_candidate_pairs',
    'find_similar_pairs',
    # Feature detection
    'has_heif_support',
]
