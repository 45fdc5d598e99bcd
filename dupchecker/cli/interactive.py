"""
Interactive prompts for the CLI interface.

Provides functions for user interaction including directory selection
and reveal confirmation.
"""

from __future__ import annotations

from pathlib import Path


def prompt_for_directory() -> Path:
    """
    Interactively prompt user for a directory to scan.

    Returns:
        Absolute Path of the chosen directory

    Notes:
        - Loops until an existing directory is provided
        - Handles quoted paths (strips quotes)
    """
    print("\n" + "=" * 50)
    print("  IMAGE DUP CHECKER")
    print("=" * 50)

    while True:
        dir_input = input("\nEnter the directory path to scan: ").strip()
        if not dir_input:
            print("Please enter a valid path.")
            continue

        # Handle quotes around path (common when copy-pasting)
        dir_input = dir_input.strip('"\'')
        directory = Path(dir_input).expanduser()

        if directory.is_dir():
            return directory.resolve()
        print(f"Directory not found: {directory}")
        print("Please try again.")


def confirm_reveal(filename: str) -> bool:
    """
    Ask before opening the file browser on a file.

    Returns:
        True if user confirms (types 'y'), False otherwise
    """
    confirm = input(f"\nOpen '{filename}' in the file browser? [y/N]: ")
    return confirm.strip().lower() == 'y'


__all__ = [
    'prompt_for_directory',
    'confirm_reveal',
]
