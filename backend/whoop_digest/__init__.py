"""WHOOP Digest: calendar-aligned WHOOP summaries."""

__version__ = "1.0.0"
