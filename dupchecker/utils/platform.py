"""
Platform-specific file browser integration for Image Dup Checker.

Provides the command that shows a file in the system file browser, which
varies by platform.
"""

from __future__ import annotations

import logging
import platform as platform_module
import subprocess
from pathlib import Path
from typing import Optional

_logger = logging.getLogger(__name__)


def reveal_command(path: str | Path, system: Optional[str] = None) -> list[str]:
    """
    Build the command that reveals a file in the system file browser.

    Args:
        path: File to reveal
        system: Platform name as returned by platform.system() (default: current)

    Returns:
        Command argument list

    Examples:
        >>> reveal_command('/photos/a.jpg', system='Darwin')
        ['open', '-R', '/photos/a.jpg']
        >>> reveal_command('/photos/a.jpg', system='Linux')
        ['xdg-open', '/photos']

    Notes:
        - macOS and Windows select the file inside its folder
        - Other platforms open the containing folder
    """
    system = system or platform_module.system()
    path = str(path)

    if system == 'Darwin':
        return ['open', '-R', path]
    if system == 'Windows':
        return ['explorer', f'/select,{path}']
    return ['xdg-open', str(Path(path).parent)]


def open_in_file_browser(path: str | Path) -> None:
    """
    Reveal a file in the system file browser.

    Raises:
        OSError: If the file browser command cannot be launched
    """
    command = reveal_command(path)
    _logger.debug(f"Launching file browser: {command}")
    subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


__all__ = [
    'reveal_command',
    'open_in_file_browser',
]
