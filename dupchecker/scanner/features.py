"""
Feature extraction module for the scanner package.

Wraps pluggable extraction backends behind a single contract: given an
image record, return a fixed-length feature vector or an
``ExtractionFailure``. The similarity engine never sees backend internals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from ..config import DEFAULT_EXTRACTOR, DEFAULT_HASH_SIZE, DEFAULT_PIXEL_GRID
from ..errors import ExtractionUnavailable, ScanCancelled
from ..models import ImageRecord
from .dependencies import np, Image, imagehash, _logger

FeatureVector = np.ndarray


@dataclass(frozen=True)
class ExtractionFailure:
    """Signals that no vector could be produced for an image."""
    image_id: str
    reason: str


ExtractionResult = Union[FeatureVector, ExtractionFailure]


class FeatureExtractor:
    """
    Base class for feature extraction backends.

    Subclasses implement ``compute``; callers use ``extract``, which never
    raises and never mutates the record.
    """

    name = 'base'

    def compute(self, image: Image.Image) -> np.ndarray:
        """Return the raw feature vector for a decoded RGB or L image."""
        raise NotImplementedError

    def decode(self, record: ImageRecord) -> Image.Image:
        """
        Image to extract features from.

        Catalog records carry the thumbnail rendered at load time; its
        transparent padding is cropped off so only image content is
        compared. Records without a thumbnail are decoded from disk.
        """
        if record.thumbnail is not None:
            return self._thumbnail_content(record.thumbnail)
        try:
            with Image.open(record.source_path) as img:
                img.load()
                if img.mode not in ('RGB', 'L'):
                    img = img.convert('RGB')
                else:
                    img = img.copy()
                return img
        except Exception as e:
            raise ExtractionUnavailable(f"Cannot decode for extraction: {e}")

    @staticmethod
    def _thumbnail_content(thumbnail: Image.Image) -> Image.Image:
        bbox = thumbnail.getchannel('A').getbbox() if thumbnail.mode == 'RGBA' else None
        if thumbnail.mode == 'RGBA' and bbox is None:
            raise ExtractionUnavailable("Thumbnail has no visible content")
        content = thumbnail.crop(bbox) if bbox else thumbnail
        return content.convert('RGB')

    def extract(self, record: ImageRecord) -> ExtractionResult:
        """
        Produce the feature vector for one image.

        Returns:
            A read-only 1-D float64 array, or ExtractionFailure on any error
        """
        try:
            image = self.decode(record)
            raw = self.compute(image)
            vector = np.array(raw, dtype=np.float64).ravel()
            if vector.size == 0:
                raise ExtractionUnavailable("Extractor returned an empty vector")
            if not np.all(np.isfinite(vector)):
                raise ExtractionUnavailable("Extractor returned non-finite values")
        except ExtractionUnavailable as e:
            _logger.debug(f"Feature extraction failed for {record.source_path}: {e}")
            return ExtractionFailure(record.id, str(e))
        except Exception as e:
            _logger.debug(f"Feature extractor error for {record.source_path}: {e}")
            return ExtractionFailure(record.id, f"Extractor error: {e}")

        vector.setflags(write=False)
        return vector


class PerceptualHashExtractor(FeatureExtractor):
    """
    pHash bits as a +1/-1 vector.

    The cosine of two such vectors is ``1 - 2 * hamming / bits``, so the
    similarity threshold maps directly onto a maximum Hamming distance.
    """

    name = 'phash'

    def __init__(self, hash_size: int = DEFAULT_HASH_SIZE):
        self.hash_size = hash_size

    def compute(self, image: Image.Image) -> np.ndarray:
        phash = imagehash.phash(image, hash_size=self.hash_size)
        bits = np.asarray(phash.hash, dtype=np.float64).ravel()
        return bits * 2.0 - 1.0


class PixelEmbeddingExtractor(FeatureExtractor):
    """
    Mean-centered grayscale grid.

    Cosine similarity of two centered vectors is their Pearson correlation.
    A flat image centers to all zeros, which the engine scores as 0.
    """

    name = 'pixels'

    def __init__(self, grid: int = DEFAULT_PIXEL_GRID):
        self.grid = grid

    def compute(self, image: Image.Image) -> np.ndarray:
        small = image.convert('L').resize((self.grid, self.grid), Image.Resampling.BILINEAR)
        pixels = np.asarray(small, dtype=np.float64).ravel()
        return pixels - pixels.mean()


_EXTRACTORS: dict[str, type[FeatureExtractor]] = {
    PerceptualHashExtractor.name: PerceptualHashExtractor,
    PixelEmbeddingExtractor.name: PixelEmbeddingExtractor,
}


def available_extractors() -> list[str]:
    return sorted(_EXTRACTORS)


def get_extractor(name: str = DEFAULT_EXTRACTOR, **kwargs) -> FeatureExtractor:
    """
    Create an extraction backend by name.

    Raises:
        ValueError: If the name is not registered
    """
    try:
        extractor_class = _EXTRACTORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown extractor: {name}. Choose from: {', '.join(available_extractors())}"
        )
    return extractor_class(**kwargs)


class MemoizedExtractor:
    """
    Per-scan cache in front of an extractor.

    The backend runs at most once per image id. Create a new instance for
    every scan; results are never shared across scans.
    """

    def __init__(self, extractor: FeatureExtractor):
        self.extractor = extractor
        self._results: dict[str, ExtractionResult] = {}

    def extract(self, record: ImageRecord) -> ExtractionResult:
        if record.id not in self._results:
            self._results[record.id] = self.extractor.extract(record)
        return self._results[record.id]

    def __len__(self) -> int:
        return len(self._results)


def extract_features(
    records: list[ImageRecord],
    extractor: FeatureExtractor | MemoizedExtractor,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> tuple[dict[str, FeatureVector], list[ExtractionFailure]]:
    """
    Extract vectors for a whole catalog.

    Args:
        records: Catalog records in order
        extractor: Backend (wrapped in a fresh MemoizedExtractor if bare)
        progress_callback: Optional callback(done, total) after each image
        cancel_check: Optional callable returning True when the scan should stop

    Returns:
        Tuple of ({image id: vector}, failures)

    Raises:
        ScanCancelled: If cancel_check returns True
    """
    if not isinstance(extractor, MemoizedExtractor):
        extractor = MemoizedExtractor(extractor)

    vectors: dict[str, FeatureVector] = {}
    failures: list[ExtractionFailure] = []
    total = len(records)

    for done, record in enumerate(records, 1):
        if cancel_check and cancel_check():
            raise ScanCancelled(f"Feature extraction cancelled after {done - 1} images")

        result = extractor.extract(record)
        if isinstance(result, ExtractionFailure):
            failures.append(result)
        else:
            vectors[record.id] = result

        if progress_callback:
            progress_callback(done, total)

    if failures:
        _logger.info(f"{len(failures):,} images excluded from comparison (no feature vector)")

    return vectors, failures


__all__ = [
    'FeatureVector',
    'ExtractionFailure',
    'FeatureExtractor',
    'PerceptualHashExtractor',
    'PixelEmbeddingExtractor',
    'MemoizedExtractor',
    'available_extractors',
    'get_extractor',
    'extract_features',
]
