"""Error kinds raised while reconciling tickets with git history."""

from typing import Optional


class FeatureTreeError(Exception):
    """Base class for errors tied to a single ticket."""

    kind = "FeatureTreeError"

    def __init__(self, key: str, message: str) -> None:
        """Initialize the error.

        Args:
            key: Ticket key the error is about
            message: Human readable reason
        """
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message


class TrackerError(FeatureTreeError):
    """Issue tracker call failed or returned something unusable."""

    kind = "TrackerError"


class FetchFailure(TrackerError):
    """Single-issue lookup failed."""

    kind = "FetchFailure"

    def __init__(self, key: str, cause: Optional[BaseException] = None) -> None:
        reason = f"could not fetch issue ({cause})" if cause else "could not fetch issue"
        super().__init__(key, reason)
        self.cause = cause


class MalformedIssue(TrackerError):
    """Tracker payload is missing fields the tree needs."""

    kind = "MalformedIssue"


class MalformedLineage(FeatureTreeError):
    """A parent is neither a story nor a task."""

    kind = "MalformedLineage"


class UnsupportedIssueType(FeatureTreeError):
    """Top-level issue is neither a story nor a task."""

    kind = "UnsupportedIssueType"


class CyclicLineage(FeatureTreeError):
    """Parent chain leads back to a ticket already on the chain."""

    kind = "CyclicLineage"
