"""
Scan orchestration for Image Dup Checker.

Provides the ScanOrchestrator class that runs one scan (catalog loading,
feature extraction, pairwise comparison) on a background worker and
publishes progress and results through ScanState.
"""

from __future__ import annotations

import time
import logging
import threading
from typing import Optional

from ..config import DEFAULT_THRESHOLD, LOAD_PHASE_SHARE, THUMBNAIL_SIZE
from ..credentials import AccessProvider
from ..errors import DirectoryAccessError, ScanCancelled
from ..models import ImageRecord
from ..scanner import (
    load_catalog,
    extract_features,
    find_similar_pairs,
    count_comparisons,
    get_extractor,
    FeatureExtractor,
    MemoizedExtractor,
)
from ..state import ScanState
from ..utils import formatters

# Module logger
_logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Maps phase counters onto the overall [0, 1] progress scale.

    Loading fills [0, 0.5) and comparing fills [0.5, 1.0]. Messages are
    refreshed at most every 0.5 seconds; progress values are published on
    every call.
    """

    def __init__(self, scan_state: ScanState, generation: int):
        self.scan_state = scan_state
        self.generation = generation
        self.last_message_update = 0.0
        self.phase_start_time = time.time()
        self.scan_start_time = self.phase_start_time

    def check_cancelled(self) -> bool:
        """Check whether this scan has been superseded or cancelled."""
        return not self.scan_state.is_current(self.generation)

    def start_phase(self) -> None:
        self.phase_start_time = time.time()
        self.last_message_update = 0.0

    def _message_due(self, current: int, total: int) -> bool:
        now = time.time()
        if current == total or now - self.last_message_update >= 0.5:
            self.last_message_update = now
            return True
        return False

    def _rate_suffix(self, current: int, total: int) -> str:
        elapsed = time.time() - self.phase_start_time
        rate = current / elapsed if elapsed > 0 else 0
        if rate <= 0 or current >= total:
            return ''
        eta = formatters.format_time_estimate((total - current) / rate)
        return f' ({formatters.format_number(int(rate))}/sec, ~{eta} remaining)'

    def update_load_progress(self, processed: int, total: int) -> None:
        """
        Publish load-phase progress after one file.

        The last file completes the phase; its 0.5 is published by the
        next phase, so load-phase values stay below 0.5.
        """
        if total <= 0 or processed >= total:
            return
        details = {'total_files': total}
        if self._message_due(processed, total):
            details['message'] = (
                f'Loading images: {formatters.format_number(processed)}/'
                f'{formatters.format_number(total)}{self._rate_suffix(processed, total)}'
            )
        self.scan_state.publish_progress(
            self.generation,
            LOAD_PHASE_SHARE * processed / total,
            **details,
        )

    def update_extraction_progress(self, done: int, total: int) -> None:
        """Extraction runs at the phase boundary; only the message moves."""
        if self._message_due(done, total):
            self.scan_state.publish_progress(
                self.generation,
                LOAD_PHASE_SHARE,
                message=(
                    f'Extracting features: {formatters.format_number(done)}/'
                    f'{formatters.format_number(total)}{self._rate_suffix(done, total)}'
                ),
            )

    def update_comparison_progress(self, done: int, total: int) -> None:
        """Publish compare-phase progress after one comparison."""
        if total <= 0:
            return
        details = {'comparisons_done': done}
        if self._message_due(done, total):
            details['message'] = (
                f'Comparing images: {formatters.format_number(done)}/'
                f'{formatters.format_number(total)}{self._rate_suffix(done, total)}'
            )
        self.scan_state.publish_progress(
            self.generation,
            LOAD_PHASE_SHARE + (1.0 - LOAD_PHASE_SHARE) * done / total,
            **details,
        )


class ScanOrchestrator:
    """
    Orchestrates one complete scan.

    ``start`` claims a scan generation on the calling thread, so scans
    are ordered by request, and runs the pipeline on a daemon thread.
    ``run`` does the same work inline.
    """

    def __init__(
        self,
        scan_state: ScanState,
        directory: str,
        threshold: float = DEFAULT_THRESHOLD,
        extractor: Optional[FeatureExtractor] = None,
        access_provider: Optional[AccessProvider] = None,
        thumbnail_size: tuple[int, int] = THUMBNAIL_SIZE,
    ):
        """
        Initialize the scan orchestrator.

        Args:
            scan_state: Shared scan state object
            directory: Directory to scan
            threshold: Minimum similarity for a pair to be reported
            extractor: Feature extraction backend (default: pHash)
            access_provider: Provider for scoped filesystem access
            thumbnail_size: Size of the thumbnail rendered per image
        """
        self.scan_state = scan_state
        self.directory = directory
        self.threshold = threshold
        self.extractor = extractor or get_extractor()
        self.access_provider = access_provider
        self.thumbnail_size = thumbnail_size
        self.generation: Optional[int] = None
        self.thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        """Begin the scan and run it on a background thread."""
        self.generation = self.scan_state.begin_scan(self.directory, self.threshold)
        self.thread = threading.Thread(
            target=self._execute,
            args=(self.generation,),
            name=f'scan-{self.generation}',
            daemon=True,
        )
        self.thread.start()
        return self.thread

    def run(self) -> None:
        """Begin the scan and run it on the calling thread."""
        self.generation = self.scan_state.begin_scan(self.directory, self.threshold)
        self._execute(self.generation)

    def _execute(self, generation: int) -> None:
        tracker = ProgressTracker(self.scan_state, generation)
        try:
            records = self._load_catalog(tracker)
            if not records:
                self.scan_state.publish_results(
                    generation, [],
                    message='No images found in directory',
                )
                return

            vectors, failure_count = self._extract_features(records, tracker)
            pairs = self._compare(records, vectors, tracker)
            self._finalize(generation, records, vectors, failure_count, pairs, tracker)

        except ScanCancelled as e:
            _logger.info(f"Scan generation {generation} stopped: {e}")
        except DirectoryAccessError as e:
            _logger.error(str(e))
            self.scan_state.abort(generation, e)
        except Exception as e:
            _logger.exception(f"Scan error: {e}")
            self.scan_state.abort(generation, e)

    def _load_catalog(self, tracker: ProgressTracker) -> list[ImageRecord]:
        """Phase 1: enumerate and decode images."""
        tracker.start_phase()
        records = load_catalog(
            self.directory,
            progress_callback=tracker.update_load_progress,
            cancel_check=tracker.check_cancelled,
            access_provider=self.access_provider,
            thumbnail_size=self.thumbnail_size,
        )
        if tracker.check_cancelled():
            raise ScanCancelled("Superseded after catalog load")
        return records

    def _extract_features(self, records: list[ImageRecord], tracker: ProgressTracker):
        """Phase 2: publish the catalog, then one vector per image (memoized for this scan only)."""
        tracker.start_phase()
        self.scan_state.publish_catalog(
            tracker.generation,
            records,
            progress=LOAD_PHASE_SHARE,
            stage='extracting',
            message=f'Extracting features from {formatters.format_number(len(records))} images...',
        )
        vectors, failures = extract_features(
            records,
            MemoizedExtractor(self.extractor),
            progress_callback=tracker.update_extraction_progress,
            cancel_check=tracker.check_cancelled,
        )
        for failure in failures:
            _logger.debug(f"Excluded from comparison: {failure.image_id} ({failure.reason})")
        return vectors, len(failures)

    def _compare(self, records: list[ImageRecord], vectors: dict, tracker: ProgressTracker):
        """Phase 3: all-pairs cosine similarity."""
        total = count_comparisons(len(vectors))
        if total == 0:
            return []

        tracker.start_phase()
        self.scan_state.publish_progress(
            tracker.generation,
            LOAD_PHASE_SHARE,
            stage='comparing',
            total_comparisons=total,
            message=(
                f'Comparing {formatters.format_number(len(vectors))} images '
                f'({formatters.format_number(total)} comparisons)...'
            ),
        )
        return find_similar_pairs(
            records,
            vectors,
            threshold=self.threshold,
            progress_callback=tracker.update_comparison_progress,
            cancel_check=tracker.check_cancelled,
        )

    def _finalize(self, generation, records, vectors, failure_count, pairs, tracker) -> None:
        """Phase 4: publish the sorted pair list in one step."""
        total = count_comparisons(len(vectors))
        elapsed = formatters.format_time_estimate(time.time() - tracker.scan_start_time)

        summary = (
            f'Found {formatters.format_number(len(pairs))} similar pairs '
            f'among {formatters.format_number(len(records))} images'
        )
        if failure_count:
            summary += f' • {formatters.format_number(failure_count)} images could not be analyzed'
        summary += f' • Finished in {elapsed}'

        accepted = self.scan_state.publish_results(
            generation,
            pairs,
            extraction_failures=failure_count,
            total_comparisons=total,
            comparisons_done=total,
            message=summary,
        )
        if accepted:
            _logger.info(summary)
        else:
            _logger.info(f"Discarded results of superseded scan generation {generation}")


def start_scan(
    scan_state: ScanState,
    directory: str,
    threshold: float = DEFAULT_THRESHOLD,
    extractor: Optional[FeatureExtractor] = None,
    thumbnail_size: tuple[int, int] = THUMBNAIL_SIZE,
) -> ScanOrchestrator:
    """Start a background scan and return its orchestrator."""
    orchestrator = ScanOrchestrator(
        scan_state=scan_state,
        directory=directory,
        threshold=threshold,
        extractor=extractor,
        thumbnail_size=thumbnail_size,
    )
    orchestrator.start()
    return orchestrator


__all__ = ['ScanOrchestrator', 'ProgressTracker', 'start_scan']
