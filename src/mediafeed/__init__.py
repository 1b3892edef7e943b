"""Media feed core: partitioned document storage, uploads and ranked feeds."""

__version__ = "0.1.0"
