"""
Utilities package for Image Dup Checker.

Provides:
- formatters: Human-readable formatting for numbers, percentages and sizes
- validators: Input validation for scan parameters
- platform: System file browser integration
- exporters: Export similar pairs to files
"""

from __future__ import annotations

# Import submodules for convenient access
from . import formatters
from . import validators
from . import platform
from . import exporters

# Export commonly used functions
from .formatters import format_number, format_percent, format_time_estimate, format_size
from .validators import (
    validate_path_in_directory,
    validate_directory,
    validate_threshold,
    validate_scan_params,
)
from .platform import reveal_command, open_in_file_browser
from .exporters import export_results

__all__ = [
    # Submodules
    'formatters',
    'validators',
    'platform',
    'exporters',
    # Formatters
    'format_number',
    'format_percent',
    'format_time_estimate',
    'format_size',
    # Validators
    'validate_path_in_directory',
    'validate_directory',
    'validate_threshold',
    'validate_scan_params',
    # Platform
    'reveal_command',
    'open_in_file_browser',
    # Exporters
    'export_results',
]
