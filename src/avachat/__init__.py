"""Chat proxy for the Ava marketing advisor widget, with website analysis."""

__version__ = "0.1.0"
