"""CLI entry point for configuration introspection.

Usage:
    python -m grocer_client.config
    python -m grocer_client.config --check
    python -m grocer_client.config --json
"""

import sys

from .introspection import main

if __name__ == "__main__":
    sys.exit(main())
