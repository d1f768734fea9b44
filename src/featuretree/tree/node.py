"""Feature tree nodes and the three-bucket forest."""

from typing import Any, Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, Field

from featuretree.models import Projection
from featuretree.tree.ordering import natural_order

FIELDS = "fields"

EPICS = "EPICS"
STORIES = "STORIES W/O EPIC"
TASKS = "TASKS W/O STORY"


class FeatureNode(BaseModel):
    """A ticket slot in the tree: its own projection plus nested children.

    Epic placeholders and buckets may have no projection of their own.
    """

    fields: Optional[Projection] = Field(None, description="Display fields of the ticket itself")
    children: Dict[str, "FeatureNode"] = Field(default_factory=dict, description="Child slots by key")

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def __getitem__(self, key: str) -> "FeatureNode":
        return self.children[key]

    def __len__(self) -> int:
        return len(self.children)

    def insert(self, key: str, projection: Projection) -> "FeatureNode":
        """Insert a child slot unless the key is already present.

        Returns:
            The slot stored under the key
        """
        return insert_once(self.children, key, projection)

    def walk(self) -> Iterator[Tuple[str, "FeatureNode"]]:
        """Yield every descendant slot, depth first, in natural key order."""
        for key in natural_order(self.children):
            child = self.children[key]
            yield key, child
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        """Render as nested dicts with the own projection under ``fields``."""
        data: Dict[str, Any] = {}
        if self.fields is not None:
            data[FIELDS] = self.fields.model_dump()
        for key in natural_order(self.children):
            data[key] = self.children[key].to_dict()
        return data


def insert_once(slots: Dict[str, FeatureNode], key: str, projection: Projection) -> FeatureNode:
    """Store a new slot for ``key`` in ``slots`` if there is none yet."""
    if key not in slots:
        slots[key] = FeatureNode(fields=projection)
    return slots[key]


class FeatureForest(BaseModel):
    """Tickets grouped under epics, or under stories and tasks lacking one."""

    epics: Dict[str, FeatureNode] = Field(default_factory=dict, description="Epic key to epic node")
    stories: Dict[str, FeatureNode] = Field(default_factory=dict, description="Stories without an epic")
    tasks: Dict[str, FeatureNode] = Field(default_factory=dict, description="Tasks without story or epic")

    def buckets(self) -> Dict[str, Dict[str, FeatureNode]]:
        return {EPICS: self.epics, STORIES: self.stories, TASKS: self.tasks}

    def walk(self) -> Iterator[Tuple[str, FeatureNode]]:
        """Yield every slot in the forest, bucket by bucket."""
        for bucket in self.buckets().values():
            for key in natural_order(bucket):
                yield key, bucket[key]
                yield from bucket[key].walk()

    def contains(self, key: str) -> bool:
        """Check whether a ticket key appears anywhere in the forest."""
        return any(found == key for found, _ in self.walk())

    def to_dict(self) -> Dict[str, Any]:
        """Render the three buckets as nested dicts."""
        return {
            name: {key: bucket[key].to_dict() for key in natural_order(bucket)}
            for name, bucket in self.buckets().items()
        }
