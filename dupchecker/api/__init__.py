"""
API package for Image Dup Checker.

Provides Flask routes and scan orchestration for the web interface.
"""

from __future__ import annotations

from .routes import api
from .orchestrator import ScanOrchestrator, ProgressTracker, start_scan

__all__ = ['api', 'ScanOrchestrator', 'ProgressTracker', 'start_scan']
