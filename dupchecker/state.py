"""
State management for Image Dup Checker.

ScanState is the single place scan progress and results are published.
The background worker writes through its publish methods, tagging every
call with the scan generation it belongs to; readers only ever receive
immutable ScanSnapshot objects.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from .models import ScanSnapshot

_logger = logging.getLogger(__name__)

Observer = Callable[[ScanSnapshot], None]


class ScanState:
    """
    Thread-safe holder of the current scan.

    Only one scan is active at a time. ``begin_scan`` supersedes any
    running scan by bumping the generation; publishes carrying an older
    generation are dropped, so a superseded scan can never overwrite the
    state of a later one.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._observers: list[Observer] = []
        self._generation = 0
        self._snapshot = ScanSnapshot()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def snapshot(self) -> ScanSnapshot:
        """Return the current immutable snapshot."""
        with self._lock:
            return self._snapshot

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def is_processing(self) -> bool:
        return self.snapshot().is_processing

    @property
    def progress(self) -> float:
        return self.snapshot().progress

    @property
    def catalog(self) -> tuple:
        return self.snapshot().catalog

    @property
    def results(self) -> tuple:
        return self.snapshot().results

    def is_current(self, generation: int) -> bool:
        """Check whether a generation still belongs to the active scan."""
        with self._lock:
            return generation == self._generation and self._snapshot.is_processing

    def find_image(self, image_id: str):
        """Look up a catalog record by id, or None."""
        for record in self.snapshot().catalog:
            if record.id == image_id:
                return record
        return None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> None:
        """Call observer with a snapshot after every accepted publish."""
        with self._lock:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _commit(self, snapshot: ScanSnapshot) -> None:
        # Caller holds the lock; observers run under it so they see
        # snapshots in publish order
        self._snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                _logger.exception("Scan state observer failed")

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def begin_scan(self, directory: str, threshold: float) -> int:
        """
        Start a new scan, superseding any running one.

        Returns:
            The generation token the new scan must publish with
        """
        with self._lock:
            if self._snapshot.is_processing:
                _logger.info(f"Superseding scan generation {self._generation}")
            self._generation += 1
            self._commit(ScanSnapshot(
                generation=self._generation,
                status='loading',
                stage='loading',
                is_processing=True,
                progress=0.0,
                directory=directory,
                threshold=threshold,
                message='Scanning for image files...',
                started_at=datetime.now().isoformat(),
            ))
            return self._generation

    def _accept(self, generation: int, action: str) -> bool:
        if generation != self._generation or not self._snapshot.is_processing:
            _logger.debug(
                f"Dropped stale {action} from generation {generation} "
                f"(current {self._generation})"
            )
            return False
        return True

    def publish_progress(
        self,
        generation: int,
        progress: float,
        stage: Optional[str] = None,
        **details,
    ) -> bool:
        """
        Publish progress for a running scan.

        Progress never moves backwards within a scan; lower values keep
        the previous one. Extra keyword arguments update snapshot fields
        such as ``message`` or ``comparisons_done``.

        Returns:
            True if the publish was accepted
        """
        with self._lock:
            if not self._accept(generation, 'progress'):
                return False
            current = self._snapshot
            changes = dict(details)
            changes['progress'] = max(current.progress, min(1.0, float(progress)))
            if stage is not None:
                changes['stage'] = stage
                changes['status'] = stage
            self._commit(replace(current, **changes))
            return True

    def publish_catalog(
        self,
        generation: int,
        records,
        progress: Optional[float] = None,
        stage: Optional[str] = None,
        **details,
    ) -> bool:
        """
        Replace the catalog of a running scan in one step.

        Optional progress and stage land in the same snapshot, so the
        catalog and the phase that follows it appear together.
        """
        with self._lock:
            if not self._accept(generation, 'catalog'):
                return False
            current = self._snapshot
            changes = dict(details, catalog=tuple(records), loaded=len(records))
            if progress is not None:
                changes['progress'] = max(current.progress, min(1.0, float(progress)))
            if stage is not None:
                changes['stage'] = stage
                changes['status'] = stage
            self._commit(replace(current, **changes))
            return True

    def publish_results(self, generation: int, pairs, **details) -> bool:
        """
        Publish the final pair list and finish the scan.

        Results, progress 1.0 and the idle flag land in the same snapshot.
        """
        with self._lock:
            if not self._accept(generation, 'results'):
                return False
            self._commit(replace(
                self._snapshot,
                results=tuple(pairs),
                progress=1.0,
                is_processing=False,
                status='complete',
                stage='complete',
                finished_at=datetime.now().isoformat(),
                **details,
            ))
            return True

    def abort(self, generation: int, error: BaseException) -> bool:
        """
        Fail a running scan.

        Clears the catalog and results, records exactly one error and
        returns the state to idle at progress 1.0.
        """
        with self._lock:
            if not self._accept(generation, 'abort'):
                return False
            self._commit(replace(
                self._snapshot,
                catalog=(),
                results=(),
                progress=1.0,
                is_processing=False,
                status='error',
                stage='error',
                error=str(error),
                error_type=type(error).__name__,
                message=f'Error: {error}',
                finished_at=datetime.now().isoformat(),
            ))
            return True

    def cancel(self) -> bool:
        """
        Cancel the running scan.

        The generation is bumped so the worker's in-flight publishes are
        discarded. Returns False if no scan was running.
        """
        with self._lock:
            if not self._snapshot.is_processing:
                return False
            self._generation += 1
            self._commit(replace(
                self._snapshot,
                generation=self._generation,
                catalog=(),
                results=(),
                progress=1.0,
                is_processing=False,
                status='cancelled',
                stage='cancelled',
                message='Scan cancelled by user',
                finished_at=datetime.now().isoformat(),
            ))
            return True

    def reset(self) -> None:
        """Return to the idle state, invalidating any running scan."""
        with self._lock:
            self._generation += 1
            self._commit(ScanSnapshot(generation=self._generation))

    # ------------------------------------------------------------------
    # API helpers
    # ------------------------------------------------------------------

    def to_status_dict(self) -> dict:
        """Return current status for API response."""
        return self.snapshot().to_status_dict()

    def to_results_dict(self) -> dict:
        """Return pair data for API response."""
        snapshot = self.snapshot()
        return {
            'generation': snapshot.generation,
            'directory': snapshot.directory,
            'threshold': snapshot.threshold,
            'is_processing': snapshot.is_processing,
            'pairs': [pair.to_dict() for pair in snapshot.results],
        }


# Global state instance for the application
scan_state = ScanState()
