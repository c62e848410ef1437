"""Label hierarchy and release distribution backend."""

__version__ = "1.0.0"
