"""Jira issue tracker adapter."""

import asyncio
from typing import Any, Dict, List, Optional

from jira import JIRA
from jira.exceptions import JIRAError
from requests.exceptions import RequestException

from featuretree.errors import FetchFailure, MalformedIssue, TrackerError
from featuretree.models import RawIssue
from featuretree.tracker.base import BaseIssueTracker

DEFAULT_EPIC_LINK_FIELD = "customfield_12821"


def issue_from_payload(
    payload: Dict[str, Any], epic_link_field: str = DEFAULT_EPIC_LINK_FIELD
) -> RawIssue:
    """Convert a Jira REST issue payload into a RawIssue.

    Args:
        payload: Issue JSON as returned by the REST API
        epic_link_field: Custom field holding the epic link

    Returns:
        RawIssue object

    Raises:
        MalformedIssue: If key, type or status are missing
    """
    key = payload.get("key")
    if not key:
        raise MalformedIssue("<unknown>", "payload has no key")

    fields = payload.get("fields") or {}
    try:
        issue_type = fields["issuetype"]["name"]
        status = fields["status"]["name"]
    except (KeyError, TypeError) as e:
        raise MalformedIssue(key, f"missing field {e}") from e

    parent = fields.get("parent")
    parent_key = parent.get("key") if isinstance(parent, dict) else None

    # Epic link is a plain key on Jira Server, an object on some Cloud tenants
    epic_link = fields.get(epic_link_field)
    if isinstance(epic_link, dict):
        epic_link = epic_link.get("key")

    return RawIssue(
        key=key,
        type=issue_type,
        status=status,
        summary=fields.get("summary") or "",
        parent_key=parent_key,
        epic_link_key=epic_link or None,
    )


class JiraTracker(BaseIssueTracker):
    """Jira tracker backed by the ``jira`` client library."""

    def __init__(
        self,
        server: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        epic_link_field: str = DEFAULT_EPIC_LINK_FIELD,
        client: Optional[JIRA] = None,
    ) -> None:
        """Initialize the Jira tracker.

        Args:
            server: Jira base URL
            username: Login name
            password: Password or API token
            epic_link_field: Custom field holding the epic link
            client: Optional pre-configured JIRA client
        """
        self.server = server
        self.epic_link_field = epic_link_field
        if client is None:
            basic_auth = (username, password) if username else None
            client = JIRA(server=server, basic_auth=basic_auth)
        self.client = client

    async def search(self, query: str, max_results: int = 500) -> List[RawIssue]:
        """Run a JQL query."""
        try:
            result = await asyncio.to_thread(
                self.client.search_issues, query, maxResults=max_results, json_result=True
            )
        except JIRAError as e:
            raise TrackerError(query, f"search failed ({e.status_code}: {e.text})") from e
        except RequestException as e:
            raise TrackerError(query, f"search failed ({e})") from e

        return [
            issue_from_payload(payload, self.epic_link_field)
            for payload in result.get("issues", [])
        ]

    async def fetch_by_key(self, key: str) -> RawIssue:
        """Fetch one issue by key."""
        try:
            issue = await asyncio.to_thread(self.client.issue, key)
        except (JIRAError, RequestException) as e:
            raise FetchFailure(key, e) from e

        return issue_from_payload(issue.raw, self.epic_link_field)
