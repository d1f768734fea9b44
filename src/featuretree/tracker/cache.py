"""Process-wide cache of every issue seen during a run."""

from typing import Dict, Iterable, Optional

import structlog

from featuretree.errors import FetchFailure, TrackerError
from featuretree.models import RawIssue
from featuretree.tracker.base import BaseIssueTracker

logger = structlog.get_logger(__name__)


class IssueCache:
    """Keyed store of raw issues, filled from search results and on-demand fetches.

    Entries are never evicted. Storing a key again replaces the previous value,
    so the most recently seen payload wins.
    """

    def __init__(self, tracker: Optional[BaseIssueTracker] = None) -> None:
        """Initialize cache.

        Args:
            tracker: Tracker used to fetch issues missing from the cache
        """
        self.tracker = tracker
        self._issues: Dict[str, RawIssue] = {}

        # Stats
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: object) -> bool:
        return key in self._issues

    def __len__(self) -> int:
        return len(self._issues)

    def put(self, issue: RawIssue) -> None:
        """Store an issue, replacing any earlier value for its key."""
        self._issues[issue.key] = issue

    def put_many(self, issues: Iterable[RawIssue]) -> None:
        """Store a batch of issues."""
        for issue in issues:
            self.put(issue)

    def get(self, key: str) -> Optional[RawIssue]:
        """Get a cached issue, or None if it was never seen."""
        return self._issues.get(key)

    async def resolve(self, key: str) -> RawIssue:
        """Get an issue from the cache, fetching and caching it on a miss.

        Args:
            key: Ticket key

        Returns:
            The issue

        Raises:
            FetchFailure: If the issue is not cached and cannot be fetched
        """
        issue = self._issues.get(key)
        if issue is not None:
            self.hits += 1
            return issue

        self.misses += 1
        if self.tracker is None:
            raise FetchFailure(key)

        logger.debug("fetching issue", key=key)
        try:
            issue = await self.tracker.fetch_by_key(key)
        except FetchFailure:
            raise
        except TrackerError as e:
            raise FetchFailure(key, e) from e

        self.put(issue)
        return issue

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "issues": len(self._issues),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }
