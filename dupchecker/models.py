"""
Data models for Image Dup Checker.

Contains dataclasses for image records, similar pairs and scan snapshots.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from PIL import Image


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


def format_percent(value: float, decimals: int = 1) -> str:
    """
    Format a 0-1 ratio as a percentage.

    Examples:
        >>> format_percent(0.973)
        '97.3%'
    """
    return f"{value * 100:.{decimals}f}%"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, eq=False)
class ImageRecord:
    """
    A decoded image in the scan catalog.

    Attributes:
        source_path: Absolute path to the image file
        index: Position in catalog order (canonical pair ordering)
        thumbnail: Aspect-preserving rendering made once at load time
        id: Unique identifier assigned at creation

    Descriptive metadata (dimensions, file size, creation time) is read
    from disk on demand and is None when it cannot be resolved.
    """
    source_path: str
    index: int
    thumbnail: Optional[Image.Image] = field(default=None, repr=False)
    id: str = field(default_factory=_new_id)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, ImageRecord):
            return False
        return self.id == other.id

    @property
    def filename(self) -> str:
        """Return just the filename portion of the path."""
        return os.path.basename(self.source_path)

    @property
    def dimensions(self) -> Optional[tuple[int, int]]:
        """Return (width, height) read from the file header."""
        try:
            with Image.open(self.source_path) as img:
                return img.size
        except Exception:
            return None

    @property
    def file_size(self) -> Optional[int]:
        try:
            return os.path.getsize(self.source_path)
        except OSError:
            return None

    @property
    def creation_time(self) -> Optional[datetime]:
        """Return the birth time where the platform has one, else ctime."""
        try:
            stat = os.stat(self.source_path)
        except OSError:
            return None
        timestamp = getattr(stat, 'st_birthtime', None) or stat.st_ctime
        return datetime.fromtimestamp(timestamp)

    @property
    def file_size_formatted(self) -> str:
        """Return human-readable file size."""
        size = self.file_size
        return format_size(size) if size is not None else "Unknown"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        dimensions = self.dimensions
        created = self.creation_time
        return {
            'id': self.id,
            'index': self.index,
            'path': self.source_path,
            'filename': self.filename,
            'width': dimensions[0] if dimensions else None,
            'height': dimensions[1] if dimensions else None,
            'file_size': self.file_size,
            'file_size_formatted': self.file_size_formatted,
            'creation_time': created.isoformat() if created else None,
        }


@dataclass(frozen=True, eq=False)
class SimilarPair:
    """
    Two catalog images whose feature vectors are near-duplicates.

    Attributes:
        image_a: Record with the lower catalog index
        image_b: Record with the higher catalog index
        similarity: Cosine similarity in [0, 1]
        id: Unique identifier for this pair instance
    """
    image_a: ImageRecord
    image_b: ImageRecord
    similarity: float
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if self.image_a.id == self.image_b.id:
            raise ValueError("An image cannot be paired with itself")
        if self.image_a.index > self.image_b.index:
            raise ValueError("image_a must precede image_b in catalog order")
        if not 0.0 <= self.similarity <= 1.0:
            raise ValueError(f"Similarity out of range: {self.similarity}")

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, SimilarPair):
            return False
        return self.id == other.id

    @property
    def key(self) -> tuple[str, str]:
        """Canonical identity of the unordered pair."""
        return (self.image_a.id, self.image_b.id)

    @property
    def similarity_percent(self) -> float:
        return round(self.similarity * 100, 1)

    @property
    def description(self) -> str:
        return f"Similarity: {format_percent(self.similarity)}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'image_a': self.image_a.to_dict(),
            'image_b': self.image_b.to_dict(),
            'similarity': self.similarity,
            'similarity_percent': self.similarity_percent,
            'description': self.description,
        }


@dataclass(frozen=True)
class ScanSnapshot:
    """
    Immutable view of the scan state at one instant.

    Observers only ever receive snapshots, so they never see a results
    list from one scan next to the progress of another.
    """
    generation: int = 0
    status: str = 'idle'  # idle, loading, extracting, comparing, complete, error, cancelled
    stage: str = 'idle'
    is_processing: bool = False
    progress: float = 0.0
    directory: str = ''
    threshold: float = 0.0
    catalog: tuple = ()
    results: tuple = ()
    error: Optional[str] = None
    error_type: Optional[str] = None
    message: str = ''
    total_files: int = 0
    loaded: int = 0
    extraction_failures: int = 0
    total_comparisons: int = 0
    comparisons_done: int = 0
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    def to_status_dict(self) -> dict[str, Any]:
        """Return current status for API response."""
        return {
            'generation': self.generation,
            'status': self.status,
            'stage': self.stage,
            'is_processing': self.is_processing,
            'progress': self.progress,
            'message': self.message,
            'directory': self.directory,
            'threshold': self.threshold,
            'total_files': self.total_files,
            'loaded': self.loaded,
            'catalog_count': len(self.catalog),
            'extraction_failures': self.extraction_failures,
            'total_comparisons': self.total_comparisons,
            'comparisons_done': self.comparisons_done,
            'has_results': len(self.results) > 0,
            'pair_count': len(self.results),
            'error': self.error,
            'error_type': self.error_type,
            'started_at': self.started_at,
            'finished_at': self.finished_at,
        }
