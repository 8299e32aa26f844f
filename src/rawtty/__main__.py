"""
rawtty CLI entry point.

Usage:
    python -m rawtty size
    python -m rawtty keys
"""

from rawtty.cli import main

if __name__ == "__main__":
    main()
