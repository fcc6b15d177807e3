"""Main entry point for the portal CLI.

Usage:
    python -m portal --help
    portal --help  # If installed via pip
"""

from portal.cli import main

if __name__ == "__main__":
    main()
