"""ClipBatch - batch orchestration for per-clip media analysis."""

__version__ = "0.1.0"
