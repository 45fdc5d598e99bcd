"""
Unit tests for ScanState publishing and generation handling.
"""

import pytest

from dupchecker.errors import DirectoryAccessError
from dupchecker.models import SimilarPair
from dupchecker.state import ScanState


@pytest.fixture
def state():
    return ScanState()


@pytest.fixture
def snapshots(state):
    """Every snapshot the state publishes, in order."""
    seen = []
    state.subscribe(seen.append)
    return seen


class TestBeginScan:
    """Test begin_scan function."""

    def test_initial_state(self, state):
        snapshot = state.snapshot()
        assert snapshot.status == 'idle'
        assert not state.is_processing

    def test_begin(self, state):
        generation = state.begin_scan("/photos", 0.9)
        snapshot = state.snapshot()
        assert snapshot.generation == generation
        assert snapshot.is_processing
        assert snapshot.progress == 0.0
        assert snapshot.directory == "/photos"
        assert snapshot.threshold == 0.9

    def test_generations_increase(self, state):
        first = state.begin_scan("/a", 0.9)
        second = state.begin_scan("/b", 0.9)
        assert second > first
        assert state.is_current(second)
        assert not state.is_current(first)

    def test_begin_clears_previous_results(self, state, make_records):
        a, b = make_records("a", "b")
        generation = state.begin_scan("/a", 0.9)
        state.publish_results(generation, [SimilarPair(a, b, 1.0)])
        state.begin_scan("/a", 0.9)
        assert state.results == ()
        assert state.catalog == ()


class TestPublishing:
    """Test progress, catalog and result publishing."""

    def test_progress_never_decreases(self, state):
        generation = state.begin_scan("/a", 0.9)
        state.publish_progress(generation, 0.3)
        state.publish_progress(generation, 0.2)
        assert state.progress == 0.3

    def test_progress_capped(self, state):
        generation = state.begin_scan("/a", 0.9)
        state.publish_progress(generation, 1.7)
        assert state.progress == 1.0

    def test_stage_and_details(self, state):
        generation = state.begin_scan("/a", 0.9)
        state.publish_progress(generation, 0.5, stage='comparing', total_comparisons=3)
        snapshot = state.snapshot()
        assert snapshot.stage == 'comparing'
        assert snapshot.status == 'comparing'
        assert snapshot.total_comparisons == 3

    def test_catalog_with_progress_in_one_snapshot(self, state, snapshots, make_records):
        records = make_records("a", "b")
        generation = state.begin_scan("/a", 0.9)
        state.publish_catalog(generation, records, progress=0.5, stage='extracting')
        last = snapshots[-1]
        assert last.catalog == tuple(records)
        assert last.loaded == 2
        assert last.progress == 0.5
        assert last.stage == 'extracting'
        assert len(snapshots) == 2

    def test_results_finish_scan_atomically(self, state, snapshots, make_records):
        """Results, progress 1.0 and the idle flag arrive together."""
        a, b = make_records("a", "b")
        generation = state.begin_scan("/a", 0.9)
        state.publish_results(generation, [SimilarPair(a, b, 1.0)])
        last = snapshots[-1]
        assert len(last.results) == 1
        assert last.progress == 1.0
        assert not last.is_processing
        assert last.status == 'complete'
        assert all(s.results == () for s in snapshots[:-1])

    def test_find_image(self, state, make_records):
        records = make_records("a", "b")
        generation = state.begin_scan("/a", 0.9)
        state.publish_catalog(generation, records)
        assert state.find_image(records[1].id) is records[1]
        assert state.find_image("missing") is None


class TestStalePublishes:
    """Publishes from superseded or finished scans are dropped."""

    def test_superseded_progress_dropped(self, state):
        old = state.begin_scan("/a", 0.9)
        state.begin_scan("/b", 0.9)
        assert state.publish_progress(old, 0.4) is False
        assert state.progress == 0.0

    def test_superseded_results_dropped(self, state, make_records):
        a, b = make_records("a", "b")
        old = state.begin_scan("/a", 0.9)
        state.begin_scan("/b", 0.9)
        assert state.publish_results(old, [SimilarPair(a, b, 1.0)]) is False
        assert state.results == ()
        assert state.is_processing

    def test_publish_after_completion_dropped(self, state):
        generation = state.begin_scan("/a", 0.9)
        state.publish_results(generation, [])
        assert state.publish_progress(generation, 0.2, stage='comparing') is False
        assert state.snapshot().status == 'complete'

    def test_superseded_abort_dropped(self, state):
        old = state.begin_scan("/a", 0.9)
        state.begin_scan("/b", 0.9)
        assert state.abort(old, RuntimeError("boom")) is False
        assert state.snapshot().error is None


class TestAbortAndCancel:
    """Test abort, cancel and reset."""

    def test_abort(self, state, make_records):
        generation = state.begin_scan("/missing", 0.9)
        state.publish_catalog(generation, make_records("a"))
        state.abort(generation, DirectoryAccessError("/missing", "directory not found"))
        snapshot = state.snapshot()
        assert snapshot.status == 'error'
        assert snapshot.error_type == 'DirectoryAccessError'
        assert "directory not found" in snapshot.error
        assert snapshot.catalog == ()
        assert snapshot.results == ()
        assert snapshot.progress == 1.0
        assert not snapshot.is_processing

    def test_cancel(self, state):
        generation = state.begin_scan("/a", 0.9)
        assert state.cancel() is True
        snapshot = state.snapshot()
        assert snapshot.status == 'cancelled'
        assert not snapshot.is_processing
        assert state.publish_progress(generation, 0.5) is False

    def test_cancel_when_idle(self, state):
        assert state.cancel() is False

    def test_reset(self, state):
        generation = state.begin_scan("/a", 0.9)
        state.reset()
        assert state.snapshot().status == 'idle'
        assert not state.is_current(generation)


class TestObservers:
    """Test observer notification."""

    def test_failing_observer_does_not_block_others(self, state, snapshots):
        def broken(snapshot):
            raise RuntimeError("observer bug")

        state.subscribe(broken)
        generation = state.begin_scan("/a", 0.9)
        state.publish_progress(generation, 0.1)
        assert [s.progress for s in snapshots] == [0.0, 0.1]

    def test_unsubscribe(self, state, snapshots):
        state.unsubscribe(snapshots.append)
        state.begin_scan("/a", 0.9)
        assert snapshots == []

    def test_results_dict(self, state, make_records):
        a, b = make_records("a", "b")
        generation = state.begin_scan("/a", 0.9)
        state.publish_results(generation, [SimilarPair(a, b, 0.95)])
        data = state.to_results_dict()
        assert data['threshold'] == 0.9
        assert [p['similarity'] for p in data['pairs']] == [0.95]
