"""Entry point for running paperkeeper as a module or installed script.

Usage:
    paperkeeper <command> ... / python -m paperkeeper <command> ...
"""

import sys


def run() -> None:
    """Entry point: dispatch to the CLI and exit with its status."""
    from paperkeeper.cli import main

    sys.exit(main())


if __name__ == "__main__":
    run()
