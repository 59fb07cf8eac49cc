"""Multi-site recipe search aggregator."""

__version__ = "0.1.0"
