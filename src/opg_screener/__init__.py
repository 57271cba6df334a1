"""Opening-price gap screener."""

__version__ = "0.1.0"
