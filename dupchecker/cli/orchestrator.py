"""
CLI workflow orchestration for Image Dup Checker.

Provides the CLIOrchestrator class that runs one scan on the calling
thread, shows progress, prints the ranked report and runs the optional
export and reveal actions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from ..api.orchestrator import ScanOrchestrator
from ..errors import CredentialError, RevealActionFailed
from ..models import ScanSnapshot
from ..reveal import remember_directory, reveal_image
from ..scanner import get_extractor
from ..scanner.dependencies import HAS_TQDM, _tqdm_class
from ..state import ScanState
from ..user_config import get_user_config
from ..utils import validators
from ..utils.exporters import export_results
from .arg_parser import parse_arguments
from .interactive import prompt_for_directory, confirm_reveal
from .reporting import print_pair_report


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class _ProgressBar:
    """tqdm bar driven by scan snapshots (percent scale)."""

    def __init__(self):
        self.bar: Optional[Any] = None
        if HAS_TQDM and _tqdm_class is not None:
            self.bar = _tqdm_class(total=100, desc="Scanning", unit="%", ncols=80)

    def __call__(self, snapshot: ScanSnapshot) -> None:
        if self.bar is None:
            return
        target = int(snapshot.progress * 100)
        if target > self.bar.n:
            self.bar.update(target - self.bar.n)
        self.bar.set_description(snapshot.stage.capitalize())

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()


class CLIOrchestrator:
    """
    Orchestrates the CLI scanning workflow.

    Manages the lifecycle from argument parsing through the scan,
    reporting, export and reveal.
    """

    def __init__(self, argv=None, scan_state: Optional[ScanState] = None):
        """Initialize the orchestrator."""
        self.argv = argv
        self.scan_state = scan_state or ScanState()
        self.logger = None
        self.args = None
        self.snapshot: Optional[ScanSnapshot] = None

    def run(self) -> int:
        """
        Execute the complete CLI workflow.

        Returns:
            Exit code (0 for success, 1 for error)
        """
        self.args = parse_arguments(self.argv)
        self.logger = setup_logging(self.args.verbose)

        if self.args.directory is None:
            self.args.directory = prompt_for_directory()

        exit_code = self._validate_phase()
        if exit_code != 0:
            return exit_code

        exit_code = self._scan_phase()
        if exit_code != 0:
            return exit_code

        self._report_phase()

        if self.args.reveal is not None:
            return self._reveal_phase()

        return 0

    def _validate_phase(self) -> int:
        """Check arguments before scanning."""
        directory = str(Path(self.args.directory).expanduser().resolve())
        self.args.directory = Path(directory)

        is_valid, error = validators.validate_scan_params(
            directory=directory,
            threshold=self.args.threshold,
            extractor=self.args.extractor,
        )
        if not is_valid:
            self.logger.error(error)
            return 1
        return 0

    def _scan_phase(self) -> int:
        """Run the scan on this thread with a progress bar."""
        config = get_user_config()
        options = config.extractor_options() if self.args.extractor == config.default_extractor else {}

        try:
            remember_directory(self.args.directory)
        except CredentialError as e:
            self.logger.warning(f"Could not store folder credential: {e}")

        progress_bar = _ProgressBar() if not self.args.no_progress else None
        if progress_bar is not None:
            self.scan_state.subscribe(progress_bar)

        self.logger.info(
            f"Scanning {self.args.directory} (threshold={self.args.threshold}, "
            f"extractor={self.args.extractor})"
        )
        try:
            ScanOrchestrator(
                scan_state=self.scan_state,
                directory=str(self.args.directory),
                threshold=self.args.threshold,
                extractor=get_extractor(self.args.extractor, **options),
                thumbnail_size=config.thumbnail_size,
            ).run()
        finally:
            if progress_bar is not None:
                self.scan_state.unsubscribe(progress_bar)
                progress_bar.close()

        self.snapshot = self.scan_state.snapshot()
        if self.snapshot.status == 'error':
            self.logger.error(self.snapshot.error)
            return 1
        return 0

    def _report_phase(self) -> None:
        """Print the ranked report and export it if requested."""
        pairs = self.snapshot.results
        print_pair_report(pairs, self.snapshot, self.logger)

        if self.args.export:
            export_results(pairs, self.args.export, self.args.export_format)
            self.logger.info(f"Results exported to: {self.args.export}")

    def _reveal_phase(self) -> int:
        """Reveal image B of the requested pair."""
        pairs = self.snapshot.results
        rank = self.args.reveal
        if not 1 <= rank <= len(pairs):
            self.logger.error(f"No pair at rank {rank} ({len(pairs)} pairs found)")
            return 1

        record = pairs[rank - 1].image_b
        if not confirm_reveal(record.filename):
            self.logger.info("Aborted.")
            return 0

        try:
            reveal_image(record)
        except RevealActionFailed as e:
            self.logger.error(f"Could not reveal {record.source_path}: {e}")
            return 1
        return 0


__all__ = ['CLIOrchestrator', 'setup_logging']
