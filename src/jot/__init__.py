"""jot - a tiny timestamped journal with boolean search."""

__version__ = "1.5.1"
