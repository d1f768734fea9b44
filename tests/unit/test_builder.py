"""Tests for feature tree assembly."""

from unittest.mock import MagicMock

import pytest
import requests

from featuretree.errors import FetchFailure
from featuretree.models import RawIssue
from featuretree.tracker import IssueCache, JiraTracker
from featuretree.tree import FeatureTreeBuilder


def _occurrences(forest, key):
    return sum(1 for found, _ in forest.walk() if found == key)


def _issue(key, type="Task", parent=None, epic=None, status="Open"):
    return RawIssue(
        key=key,
        type=type,
        status=status,
        summary=f"Summary of {key}",
        parent_key=parent,
        epic_link_key=epic,
    )


@pytest.fixture
def remote_issues():
    """Issues only reachable through the tracker, not in the search batch."""
    return {}


@pytest.fixture
def tracker(remote_issues):
    """Create mock tracker serving issues from remote_issues."""

    async def fetch_by_key(key):
        if key not in remote_issues:
            raise FetchFailure(key)
        return remote_issues[key]

    tracker = MagicMock()
    tracker.fetch_by_key = MagicMock(side_effect=fetch_by_key)
    return tracker


@pytest.fixture
def cache(tracker):
    return IssueCache(tracker)


@pytest.fixture
def builder(cache):
    return FeatureTreeBuilder(cache)


@pytest.mark.asyncio
async def test_orphan_task_goes_to_tasks_bucket(builder):
    """Test task with no parent and no epic lands in the tasks bucket."""
    await builder.add_issue(_issue("PROJ-1"))

    assert list(builder.forest.tasks) == ["PROJ-1"]
    assert builder.forest.tasks["PROJ-1"].fields.summary == "Summary of PROJ-1"
    assert builder.forest.stories == {}
    assert builder.forest.epics == {}
    assert _occurrences(builder.forest, "PROJ-1") == 1


@pytest.mark.asyncio
async def test_orphan_story_goes_to_stories_bucket(builder):
    """Test story with no epic lands in the stories bucket."""
    await builder.add_issue(_issue("PROJ-2", type="Story"))

    assert list(builder.forest.stories) == ["PROJ-2"]
    assert builder.forest.tasks == {}
    assert _occurrences(builder.forest, "PROJ-2") == 1


@pytest.mark.asyncio
async def test_technical_task_is_task_family(builder):
    """Test technical tasks are placed like tasks."""
    await builder.add_issue(_issue("PROJ-3", type="Technical Task"))

    assert "PROJ-3" in builder.forest.tasks


@pytest.mark.asyncio
async def test_story_with_epic(builder, cache, remote_issues):
    """Test story is nested under its epic, which is fetched on demand."""
    remote_issues["EPIC-1"] = _issue("EPIC-1", type="Epic", status="In Progress")

    await builder.add_issue(_issue("PROJ-4", type="Story", epic="EPIC-1"))

    epic = builder.forest.epics["EPIC-1"]
    assert epic.fields.type == "Epic"
    assert epic.fields.status == "In Progress"
    assert "PROJ-4" in epic
    assert builder.forest.stories == {}
    assert "EPIC-1" in cache


@pytest.mark.asyncio
async def test_epic_fetch_failure_leaves_placeholder(builder):
    """Test a failing epic lookup keeps a field-less epic that still gets children."""
    await builder.add_issue(_issue("PROJ-5", type="Story", epic="EPIC-404"))
    await builder.add_issue(_issue("PROJ-6", epic="EPIC-404"))

    epic = builder.forest.epics["EPIC-404"]
    assert epic.fields is None
    assert "PROJ-5" in epic
    assert "PROJ-6" in epic
    assert "fields" not in builder.forest.to_dict()["EPICS"]["EPIC-404"]

    # Degraded epic is reported once, children are not dropped
    assert [(d.key, d.kind) for d in builder.diagnostics] == [("EPIC-404", "FetchFailure")]


@pytest.mark.asyncio
async def test_epic_resolved_once(builder, tracker, remote_issues):
    """Test sibling tickets share one epic node and one fetch."""
    remote_issues["EPIC-1"] = _issue("EPIC-1", type="Epic")

    await builder.add_issue(_issue("PROJ-1", type="Story", epic="EPIC-1"))
    await builder.add_issue(_issue("PROJ-2", type="Story", epic="EPIC-1"))
    await builder.add_issue(_issue("PROJ-3", epic="EPIC-1"))

    assert tracker.fetch_by_key.call_count == 1
    assert sorted(builder.forest.epics["EPIC-1"].children) == ["PROJ-1", "PROJ-2", "PROJ-3"]


@pytest.mark.asyncio
async def test_ancestor_chain(builder, cache, remote_issues):
    """Test task -> task -> story -> epic chain is nested all the way down."""
    remote_issues["E1"] = _issue("E1", type="Epic")
    remote_issues["T1"] = _issue("T1", type="Story", epic="E1")
    cache.put(_issue("T2", parent="T1"))

    await builder.add_issue(_issue("T3", parent="T2"))

    epic = builder.forest.epics["E1"]
    assert epic["T1"].fields.type == "Story"
    assert epic["T1"]["T2"].fields.type == "Task"
    assert epic["T1"]["T2"]["T3"].fields.summary == "Summary of T3"
    assert builder.forest.stories == {}
    assert builder.forest.tasks == {}
    assert builder.diagnostics == []


@pytest.mark.asyncio
async def test_task_with_parent_story_without_epic(builder, cache):
    """Test subtask of an epic-less story is nested under the story bucket entry."""
    cache.put(_issue("PROJ-1", type="Story"))

    await builder.add_issue(_issue("PROJ-2", parent="PROJ-1"))

    assert "PROJ-2" in builder.forest.stories["PROJ-1"]


@pytest.mark.asyncio
async def test_task_parent_takes_precedence_over_epic(builder, cache, remote_issues):
    """Test a task with a parent ignores its own epic link."""
    remote_issues["EPIC-1"] = _issue("EPIC-1", type="Epic")
    cache.put(_issue("PROJ-1", type="Story"))

    await builder.add_issue(_issue("PROJ-2", parent="PROJ-1", epic="EPIC-1"))

    assert "PROJ-2" in builder.forest.stories["PROJ-1"]
    assert builder.forest.epics == {}


@pytest.mark.asyncio
async def test_idempotent_insertion(builder, cache, remote_issues):
    """Test adding the same tickets twice gives the same forest as adding once."""
    remote_issues["E1"] = _issue("E1", type="Epic")
    cache.put(_issue("S1", type="Story", epic="E1"))
    issues = [
        _issue("T1", parent="S1"),
        _issue("T2"),
        _issue("S2", type="Story"),
        _issue("T3", epic="E1"),
    ]

    for issue in issues:
        await builder.add_issue(issue)
    once = builder.forest.to_dict()

    for issue in issues:
        await builder.add_issue(issue)

    assert builder.forest.to_dict() == once
    for key in ["T1", "T2", "S2", "T3", "S1"]:
        assert _occurrences(builder.forest, key) == 1


@pytest.mark.asyncio
async def test_existing_slot_not_overwritten(builder):
    """Test re-adding a key keeps the first stored projection."""
    await builder.add_issue(_issue("PROJ-1", status="Open"))
    await builder.add_issue(_issue("PROJ-1", status="Closed"))

    assert builder.forest.tasks["PROJ-1"].fields.status == "Open"


@pytest.mark.asyncio
async def test_parent_is_epic_is_malformed(builder, cache):
    """Test task whose parent is an epic is dropped with a diagnostic."""
    cache.put(_issue("EPIC-1", type="Epic"))

    result = await builder.add_issue(_issue("T", parent="EPIC-1"))

    assert result is None
    assert not builder.forest.contains("T")
    assert builder.forest.epics == {}
    assert len(builder.diagnostics) == 1
    assert builder.diagnostics[0].key == "T"
    assert builder.diagnostics[0].kind == "MalformedLineage"
    assert "T" in builder.diagnostics[0].message


@pytest.mark.asyncio
async def test_malformed_ancestor_truncates_whole_chain(builder, cache):
    """Test no partial write when a deeper ancestor is malformed."""
    cache.put(_issue("BUG-1", type="Bug"))
    cache.put(_issue("T2", parent="BUG-1"))

    await builder.add_issue(_issue("T3", parent="T2"))

    assert not builder.forest.contains("T2")
    assert not builder.forest.contains("T3")
    assert builder.diagnostics[0].key == "T3"


@pytest.mark.asyncio
async def test_unsupported_issue_type(builder):
    """Test top-level epics and bugs are ignored with a diagnostic."""
    await builder.add_issue(_issue("EPIC-1", type="Epic"))
    await builder.add_issue(_issue("BUG-1", type="Bug"))

    assert builder.forest.to_dict() == {
        "EPICS": {},
        "STORIES W/O EPIC": {},
        "TASKS W/O STORY": {},
    }
    assert [d.kind for d in builder.diagnostics] == ["UnsupportedIssueType"] * 2


@pytest.mark.asyncio
async def test_parent_fetch_failure_drops_ticket(builder):
    """Test task whose parent cannot be fetched is dropped, not fatal."""
    result = await builder.add_issue(_issue("PROJ-1", parent="GONE-1"))

    assert result is None
    assert not builder.forest.contains("PROJ-1")
    assert builder.diagnostics[0].key == "PROJ-1"
    assert builder.diagnostics[0].kind == "FetchFailure"


@pytest.mark.asyncio
async def test_cyclic_parent_chain(builder, cache):
    """Test parent cycles are reported instead of recursing forever."""
    cache.put(_issue("T1", parent="T2"))
    cache.put(_issue("T2", parent="T1"))

    result = await builder.add_issue(cache.get("T1"))

    assert result is None
    assert not builder.forest.contains("T1")
    assert not builder.forest.contains("T2")
    assert builder.diagnostics[0].key == "T1"
    assert builder.diagnostics[0].kind == "CyclicLineage"


@pytest.mark.asyncio
async def test_self_parent(builder, cache):
    """Test a ticket that is its own parent is reported as cyclic."""
    issue = _issue("T1", parent="T1")
    cache.put(issue)

    await builder.add_issue(issue)

    assert builder.diagnostics[0].kind == "CyclicLineage"
    assert not builder.forest.contains("T1")


@pytest.mark.asyncio
async def test_self_epic_link(builder):
    """Test a story linked to itself as epic is reported as cyclic."""
    await builder.add_issue(_issue("S1", type="Story", epic="S1"))

    assert builder.diagnostics[0].kind == "CyclicLineage"
    assert builder.forest.epics == {}


@pytest.fixture
def unreachable_jira_builder():
    """Create builder whose Jira client fails with connection errors."""
    client = MagicMock()
    client.issue.side_effect = requests.exceptions.ConnectionError("reset")
    tracker = JiraTracker("https://jira.example.com", client=client)
    return FeatureTreeBuilder(IssueCache(tracker))


@pytest.mark.asyncio
async def test_parent_connection_error_drops_ticket(unreachable_jira_builder):
    """Test a transport error resolving a parent drops only that ticket."""
    builder = unreachable_jira_builder

    result = await builder.add_issue(_issue("T1", parent="GONE-1"))

    assert result is None
    assert not builder.forest.contains("T1")
    assert [(d.key, d.kind) for d in builder.diagnostics] == [("T1", "FetchFailure")]


@pytest.mark.asyncio
async def test_epic_connection_error_leaves_placeholder(unreachable_jira_builder):
    """Test a transport error resolving an epic keeps a field-less epic node."""
    builder = unreachable_jira_builder

    await builder.add_issue(_issue("S1", type="Story", epic="EPIC-1"))

    epic = builder.forest.epics["EPIC-1"]
    assert epic.fields is None
    assert "S1" in epic
    assert [(d.key, d.kind) for d in builder.diagnostics] == [("EPIC-1", "FetchFailure")]
