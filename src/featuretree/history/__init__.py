"""Git history index and ticket membership test."""

from featuretree.history.index import GitHistoryIndex

__all__ = ["GitHistoryIndex"]
