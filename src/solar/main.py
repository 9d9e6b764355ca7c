"""Main entry point for the planet catalog CLI.

Usage:
    python -m solar.main --help
    solar --help  # If installed via pip/uv
"""

from solar.cli import main

if __name__ == "__main__":
    main()
