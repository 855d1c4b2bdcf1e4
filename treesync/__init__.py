"""One-way directory tree synchronization."""

__version__ = "1.0.0"
