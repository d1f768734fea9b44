"""Data models for tickets, configuration and the feature tree."""

from featuretree.models.config import BranchConfig, ProfileConfig, Settings, load_settings
from featuretree.models.issue import Projection, RawIssue

__all__ = [
    "RawIssue",
    "Projection",
    "BranchConfig",
    "ProfileConfig",
    "Settings",
    "load_settings",
]
