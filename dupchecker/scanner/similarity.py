"""
Similarity module for the scanner package.

Exact pairwise cosine similarity over every unordered pair of images that
produced a feature vector. Brute force O(n^2 * d); collections this tool
targets are small enough that an approximate index is not worth its
recall loss.
"""

from __future__ import annotations

import math
from typing import Callable, Iterator, Optional

from ..config import DEFAULT_THRESHOLD
from ..errors import ScanCancelled
from ..models import ImageRecord, SimilarPair
from .dependencies import np, _logger


def clamp_similarity(raw: float) -> float:
    """
    Clamp a raw cosine value into [0, 1].

    Negative cosine counts as "not similar" and float overshoot past 1.0
    is folded back; NaN maps to 0.
    """
    raw = float(raw)
    if math.isnan(raw):
        return 0.0
    return max(0.0, min(1.0, raw))


def _cosine(a: np.ndarray, b: np.ndarray, norm_a: float, norm_b: float) -> float:
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return clamp_similarity(float(np.dot(a, b)) / (norm_a * norm_b))


def cosine_similarity(a, b) -> float:
    """
    Cosine similarity of two vectors, clamped to [0, 1].

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise ValueError(f"Vector lengths differ: {a.size} != {b.size}")
    return _cosine(a, b, float(np.linalg.norm(a)), float(np.linalg.norm(b)))


def count_comparisons(n: int) -> int:
    """Number of unordered pairs among n items."""
    return n * (n - 1) // 2 if n > 1 else 0


def iter_candidate_pairs(
    records: list[ImageRecord],
    vectors: dict[str, np.ndarray],
) -> Iterator[tuple[ImageRecord, ImageRecord]]:
    """
    Yield every unordered pair of records that both have a vector.

    Pairs come out in catalog order: (i, j) with i < j.
    """
    candidates = sorted(
        (r for r in records if r.id in vectors),
        key=lambda r: r.index,
    )
    for i in range(len(candidates)):
        for j in range(i + 1, len(candidates)):
            yield candidates[i], candidates[j]


def find_similar_pairs(
    records: list[ImageRecord],
    vectors: dict[str, np.ndarray],
    threshold: float = DEFAULT_THRESHOLD,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> list[SimilarPair]:
    """
    Find all image pairs at or above a similarity threshold.

    Args:
        records: Catalog records
        vectors: Map of image id to feature vector (failed images absent)
        threshold: Minimum similarity to keep a pair (inclusive)
        progress_callback: Optional callback(done, total) after each comparison
        cancel_check: Optional callable returning True when the scan should stop

    Returns:
        SimilarPair list sorted by similarity, highest first; equal scores
        keep the order in which they were found

    Raises:
        ScanCancelled: If cancel_check returns True
    """
    n = sum(1 for r in records if r.id in vectors)
    total = count_comparisons(n)

    norms = {
        image_id: float(np.linalg.norm(vector))
        for image_id, vector in vectors.items()
    }

    pairs: list[SimilarPair] = []
    done = 0

    for image_a, image_b in iter_candidate_pairs(records, vectors):
        if cancel_check and cancel_check():
            raise ScanCancelled(f"Comparison cancelled after {done:,} of {total:,} pairs")

        similarity = _cosine(
            vectors[image_a.id],
            vectors[image_b.id],
            norms[image_a.id],
            norms[image_b.id],
        )
        if similarity >= threshold:
            pairs.append(SimilarPair(image_a=image_a, image_b=image_b, similarity=similarity))

        done += 1
        if progress_callback:
            progress_callback(done, total)

    _logger.info(
        f"Compared {done:,} pairs among {n:,} images, "
        f"{len(pairs):,} at or above {threshold:.2f}"
    )

    # sorted() is stable, also with reverse=True
    return sorted(pairs, key=lambda p: p.similarity, reverse=True)


__all__ = [
    'clamp_similarity',
    'cosine_similarity',
    'count_comparisons',
    'iter_candidate_pairs',
    'find_similar_pairs',
]
