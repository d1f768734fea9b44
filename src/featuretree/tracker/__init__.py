"""Issue tracker access and caching."""

from featuretree.tracker.base import BaseIssueTracker
from featuretree.tracker.cache import IssueCache
from featuretree.tracker.jira_tracker import JiraTracker, issue_from_payload

__all__ = [
    "BaseIssueTracker",
    "IssueCache",
    "JiraTracker",
    "issue_from_payload",
]
