"""MemoryStream: a per-user encrypted memory vault with relevance-ranked search."""

__version__ = "1.0.0"
