"""Git history extraction."""

from featuretree.extraction.git_history import GitHistoryReader, normalize_subjects

__all__ = ["GitHistoryReader", "normalize_subjects"]
