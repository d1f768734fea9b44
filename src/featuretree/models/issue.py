"""Data models for tracker issues."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

EPIC = "Epic"
STORY = "Story"
TASK_FAMILY = ("Task", "Technical Task")


class RawIssue(BaseModel):
    """Minimal, validated view of an issue as returned by the tracker."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Ticket key (PROJECT-NUMBER)")
    type: str = Field(..., description="Issue type name: Epic, Story, Task, Technical Task, ...")
    status: str = Field(..., description="Status name")
    summary: str = Field("", description="One line summary")
    parent_key: Optional[str] = Field(None, description="Key of the parent issue, if any")
    epic_link_key: Optional[str] = Field(None, description="Key of the linked epic, if any")

    @property
    def is_epic(self) -> bool:
        return self.type == EPIC

    @property
    def is_story(self) -> bool:
        return self.type == STORY

    @property
    def is_task_family(self) -> bool:
        return self.type in TASK_FAMILY


class Projection(BaseModel):
    """Display fields kept for an issue placed in the feature tree."""

    model_config = ConfigDict(frozen=True)

    summary: str = Field("", description="One line summary")
    status: str = Field(..., description="Status name")
    type: str = Field(..., description="Issue type name")

    @classmethod
    def from_issue(cls, issue: RawIssue) -> "Projection":
        """Project a raw issue down to its display fields."""
        return cls(summary=issue.summary, status=issue.status, type=issue.type)
