"""Future You life simulator core."""

__version__ = "1.0.0"
