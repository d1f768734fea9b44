"""Base class for issue trackers."""

from abc import ABC, abstractmethod
from typing import List

from featuretree.models import RawIssue


class BaseIssueTracker(ABC):
    """Abstract base class for issue tracker adapters."""

    @abstractmethod
    async def search(self, query: str, max_results: int = 500) -> List[RawIssue]:
        """Run a query and return the matching issues.

        Args:
            query: Tracker query (JQL for Jira)
            max_results: Maximum number of issues to return

        Returns:
            Issues in the order the tracker returned them

        Raises:
            TrackerError: If the query fails
        """
        pass

    @abstractmethod
    async def fetch_by_key(self, key: str) -> RawIssue:
        """Fetch a single issue.

        Args:
            key: Ticket key

        Returns:
            The issue

        Raises:
            FetchFailure: If the issue does not exist or the call is rejected
        """
        pass
