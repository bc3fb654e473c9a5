"""Ad campaign CSV normalization and aggregation."""

__version__ = "0.1.0"
