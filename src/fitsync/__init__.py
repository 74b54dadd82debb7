"""fitsync: offline-first fitness coaching client."""

__version__ = "0.1.0"
