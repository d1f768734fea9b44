"""Feature tree assembly: places each ticket under its epic, story or parent task."""

from typing import List, Optional, Set

import structlog
from pydantic import BaseModel, Field

from featuretree.errors import (
    CyclicLineage,
    FeatureTreeError,
    FetchFailure,
    MalformedLineage,
    UnsupportedIssueType,
)
from featuretree.models import Projection, RawIssue
from featuretree.tracker.cache import IssueCache
from featuretree.tree.node import FeatureForest, FeatureNode, insert_once

logger = structlog.get_logger(__name__)


class Diagnostic(BaseModel):
    """A ticket that was dropped from, or only partially represented in, the tree."""

    key: str = Field(..., description="Ticket key")
    kind: str = Field(..., description="Error kind, e.g. MalformedLineage")
    message: str = Field(..., description="Reason")


class FeatureTreeBuilder:
    """Builds a FeatureForest from tickets, resolving ancestors through the cache.

    Every placement is idempotent: a key already present at its destination is
    left untouched, so adding the same ticket twice gives the same forest as
    adding it once.
    """

    def __init__(self, cache: IssueCache, forest: Optional[FeatureForest] = None) -> None:
        """Initialize the builder.

        Args:
            cache: Issue cache used to resolve parents and epics
            forest: Forest to fill; a new empty one by default
        """
        self.cache = cache
        self.forest = forest if forest is not None else FeatureForest()
        self.diagnostics: List[Diagnostic] = []

    async def add_issue(self, issue: RawIssue) -> Optional[FeatureNode]:
        """Place a ticket found in history into the forest.

        Errors are reported as diagnostics and never propagate.

        Returns:
            The ticket's slot, or None if it was dropped
        """
        try:
            if issue.is_story:
                return await self.add_story(issue)
            if issue.is_task_family:
                return await self.add_task(issue)
            raise UnsupportedIssueType(
                issue.key,
                f"is a {issue.type}, neither a task nor a story; it should not have committed code",
            )
        except FeatureTreeError as e:
            self._report(issue.key, e)
            return None

    async def add_epic(self, epic_key: str) -> FeatureNode:
        """Get the node for an epic, creating and resolving it on first use.

        The node is reserved before the epic is fetched and filled in place
        afterwards. If the fetch fails the node stays without fields but can
        still hold children.
        """
        node = self.forest.epics.get(epic_key)
        if node is not None:
            return node

        node = FeatureNode()
        self.forest.epics[epic_key] = node

        try:
            epic = await self.cache.resolve(epic_key)
        except FetchFailure as e:
            self._report(epic_key, e)
            return node

        node.fields = Projection.from_issue(epic)
        return node

    async def add_story(self, issue: RawIssue) -> FeatureNode:
        """Place a story under its epic, or in the stories bucket if it has none."""
        projection = Projection.from_issue(issue)
        if issue.epic_link_key:
            epic = await self._epic_of(issue)
            return epic.insert(issue.key, projection)

        return insert_once(self.forest.stories, issue.key, projection)

    async def add_task(self, issue: RawIssue, _lineage: Optional[Set[str]] = None) -> FeatureNode:
        """Place a task under its parent chain, its epic, or the tasks bucket.

        Raises:
            MalformedLineage: If an ancestor is neither a story nor a task
            CyclicLineage: If the parent chain loops
            FetchFailure: If an ancestor cannot be resolved
        """
        lineage = set() if _lineage is None else _lineage
        if issue.key in lineage:
            raise CyclicLineage(issue.key, "parent chain leads back to this ticket")
        lineage.add(issue.key)

        projection = Projection.from_issue(issue)

        if issue.parent_key:
            parent = await self.cache.resolve(issue.parent_key)
            if parent.is_story:
                slot = await self.add_story(parent)
            elif parent.is_task_family:
                slot = await self.add_task(parent, lineage)
            else:
                raise MalformedLineage(
                    issue.key,
                    f"has a parent {parent.key} ({parent.type}) which is neither a story nor a task",
                )
            return slot.insert(issue.key, projection)

        if issue.epic_link_key:
            epic = await self._epic_of(issue)
            return epic.insert(issue.key, projection)

        return insert_once(self.forest.tasks, issue.key, projection)

    async def _epic_of(self, issue: RawIssue) -> FeatureNode:
        if issue.epic_link_key == issue.key:
            raise CyclicLineage(issue.key, "epic link points to the ticket itself")
        return await self.add_epic(issue.epic_link_key)

    def _report(self, key: str, error: FeatureTreeError) -> None:
        logger.warning("ticket not fully placed", key=key, kind=error.kind, reason=str(error))
        self.diagnostics.append(Diagnostic(key=key, kind=error.kind, message=str(error)))
