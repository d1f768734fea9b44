"""Profile runs: query the tracker, match against git history, build the feature tree."""

from datetime import datetime
from typing import Callable, Iterable, List, Optional

import structlog
from pydantic import BaseModel, Field

from featuretree.extraction import GitHistoryReader
from featuretree.history import GitHistoryIndex
from featuretree.models import ProfileConfig, RawIssue, Settings
from featuretree.tracker import BaseIssueTracker, IssueCache
from featuretree.tree import Diagnostic, FeatureForest, FeatureTreeBuilder

logger = structlog.get_logger(__name__)

TicketCallback = Callable[[RawIssue, bool], None]


class ProfileReport(BaseModel):
    """Outcome of one profile run."""

    name: str = Field(..., description="Profile name")
    query: str = Field(..., description="Query the batch came from")
    generated_at: datetime = Field(default_factory=datetime.now, description="When the run finished")
    forest: FeatureForest = Field(default_factory=FeatureForest, description="Assembled feature tree")
    total: int = Field(0, description="Tickets returned by the query")
    matched: int = Field(0, description="Tickets found in git history")
    placed: int = Field(0, description="Matched tickets present in the tree")
    diagnostics: List[Diagnostic] = Field(default_factory=list, description="Dropped or degraded tickets")


class FeatureReportRunner:
    """Runs report profiles against one tracker and one set of branches.

    The issue cache and history index are shared by every profile of the run;
    each profile gets a fresh forest.
    """

    def __init__(
        self,
        settings: Settings,
        tracker: Optional[BaseIssueTracker],
        cache: Optional[IssueCache] = None,
        index: Optional[GitHistoryIndex] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            settings: Application settings
            tracker: Tracker used for searches and single-issue fetches
            cache: Optional pre-filled issue cache
            index: Optional pre-built history index
        """
        self.settings = settings
        self.tracker = tracker
        self.cache = cache if cache is not None else IssueCache(tracker)
        self.index = index if index is not None else GitHistoryIndex()

    def load_history(self, readers: Optional[Iterable[GitHistoryReader]] = None) -> GitHistoryIndex:
        """Index commit subjects from every branch.

        Args:
            readers: Branch readers; by default one per configured branch

        Returns:
            The shared history index
        """
        if readers is None:
            readers = [GitHistoryReader(branch) for branch in self.settings.branches]

        for reader in readers:
            logger.info("processing branch", branch=reader.config.name, path=str(reader.config.path))
            self.index.add_subjects(reader.read_subjects(self.settings.ignore_patterns))

        logger.info("history indexed", tokens=len(self.index))
        return self.index

    async def run_profile(
        self, profile: ProfileConfig, on_ticket: Optional[TicketCallback] = None
    ) -> ProfileReport:
        """Run a single profile.

        Args:
            profile: Profile to run
            on_ticket: Called with each ticket and whether it was found in history

        Returns:
            ProfileReport with the finished forest

        Raises:
            TrackerError: If the batch search fails
        """
        max_results = profile.max_results or self.settings.max_results
        logger.info("querying tracker", profile=profile.name, query=profile.query)
        issues = await self.tracker.search(profile.query, max_results=max_results)

        logger.info("caching issues", profile=profile.name, count=len(issues))
        self.cache.put_many(issues)

        builder = FeatureTreeBuilder(self.cache)
        matched = []
        for issue in issues:
            found = self.index.is_in_history(issue.key)
            if found:
                matched.append(issue.key)
                await builder.add_issue(issue)
            if on_ticket is not None:
                on_ticket(issue, found)

        logger.info(
            "feature tree built",
            profile=profile.name,
            matched=len(matched),
            total=len(issues),
            dropped=len(builder.diagnostics),
        )
        return ProfileReport(
            name=profile.name,
            query=profile.query,
            forest=builder.forest,
            total=len(issues),
            matched=len(matched),
            placed=sum(1 for key in matched if builder.forest.contains(key)),
            diagnostics=builder.diagnostics,
        )

    async def run(
        self, names: Optional[List[str]] = None, on_ticket: Optional[TicketCallback] = None
    ) -> List[ProfileReport]:
        """Run profiles in configuration order.

        Args:
            names: Only run these profiles; all configured profiles by default
            on_ticket: Per-ticket callback passed to each profile run

        Returns:
            One report per profile

        Raises:
            KeyError: If a requested profile is not configured
        """
        profiles = (
            [self.settings.get_profile(name) for name in names]
            if names
            else list(self.settings.profiles)
        )

        reports = []
        for profile in profiles:
            reports.append(await self.run_profile(profile, on_ticket=on_ticket))
        return reports
