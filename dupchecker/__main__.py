"""
Allow running the package with: python -m dupchecker

By default, runs the CLI. Use the 'gui' subcommand for the API server.

Examples:
    python -m dupchecker /path/to/photos     # CLI scan
    python -m dupchecker cli /path/to/photos # CLI scan (explicit)
    python -m dupchecker gui                 # API server
    python -m dupchecker config --init       # Create example config file
"""

import sys


def main():
    if len(sys.argv) > 1 and sys.argv[1] == 'gui':
        # Remove 'gui' from argv so argparse in app.py doesn't see it
        sys.argv.pop(1)
        from .app import main as gui_main
        gui_main()
    elif len(sys.argv) > 1 and sys.argv[1] == 'config':
        sys.argv.pop(1)
        from .user_config import get_user_config

        config = get_user_config()

        if '--init' in sys.argv or '-i' in sys.argv:
            if config.create_example_config():
                print("Created example configuration file at:")
                print(f"  {config.config_file_path}")
                print("\nEdit this file to customize Image Dup Checker settings.")
            else:
                print("Failed to create configuration file.")
                sys.exit(1)
        else:
            print(f"Configuration file: {config.config_file_path}")
            if config.config_file_path.exists():
                print("Status: found")
            else:
                print("Status: not found (using defaults)")
                print("\nRun 'python -m dupchecker config --init' to create one.")

            print("\nCurrent settings:")
            print(f"  default_threshold: {config.default_threshold}")
            print(f"  default_extractor: {config.default_extractor}")
            print(f"  hash_size: {config.hash_size}")
            print(f"  thumbnail_size: {config.thumbnail_size}")
            print(f"  credentials_file: {config.credentials_file}")
    else:
        if len(sys.argv) > 1 and sys.argv[1] == 'cli':
            sys.argv.pop(1)
        from .cli import main as cli_main
        sys.exit(cli_main())


if __name__ == '__main__':
    main()
