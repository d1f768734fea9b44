"""Export of feature trees as JSON and tab-separated feature reports."""

import csv
import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from featuretree.runner import ProfileReport
from featuretree.tree import FeatureForest, FeatureNode, natural_order

CSV_HEADER = ["Epic", "Element/Feature", "Key", "Status", "Subtasks"]
NO_EPIC = "none"


def sanitize(text: str) -> str:
    """Replace tabs so text can live in a tab-separated cell."""
    return text.replace("\t", " ")


def _status(node: FeatureNode) -> str:
    return node.fields.status if node.fields else ""


def _row(key: str, node: FeatureNode, epic_cell: str) -> List[str]:
    fields = node.fields
    feature = f"[{fields.type}] → {sanitize(fields.summary)}" if fields else ""
    subtasks = ":".join(
        f"{child_key}({_status(node.children[child_key])})"
        for child_key in natural_order(node.children)
    )
    return [epic_cell, feature, key, _status(node), subtasks]


def _epic_label(epic_key: str, epic: FeatureNode) -> str:
    if epic.fields is None:
        return epic_key
    return f"{epic_key}: {sanitize(epic.fields.summary)}"


def forest_to_rows(forest: FeatureForest) -> Iterator[List[str]]:
    """Yield report rows: epic children first, then stories and tasks without epic.

    Only the first row of an epic names the epic; its later rows leave the
    epic cell empty.
    """
    for epic_key in natural_order(forest.epics):
        epic = forest.epics[epic_key]
        epic_cell = _epic_label(epic_key, epic)
        for key in natural_order(epic.children):
            yield _row(key, epic.children[key], epic_cell)
            epic_cell = ""

    for bucket in (forest.stories, forest.tasks):
        for key in natural_order(bucket):
            yield _row(key, bucket[key], NO_EPIC)


def report_to_dict(report: ProfileReport) -> Dict:
    """Render a profile report with its tree and diagnostics."""
    return {
        "profile": report.name,
        "query": report.query,
        "generated_at": report.generated_at.isoformat(),
        "total": report.total,
        "matched": report.matched,
        "placed": report.placed,
        "tree": report.forest.to_dict(),
        "diagnostics": [diagnostic.model_dump() for diagnostic in report.diagnostics],
    }


def _output_path(report: ProfileReport, directory: Path, suffix: str) -> Path:
    stamp = report.generated_at.strftime("%Y%m%d-%H%M%S")
    return Path(directory) / f"{report.name}-{stamp}{suffix}"


def write_json(report: ProfileReport, directory: Path, path: Optional[Path] = None) -> Path:
    """Write the report tree as JSON.

    Args:
        report: Profile report
        directory: Output directory, created if missing
        path: Explicit file path, overriding the timestamped default

    Returns:
        Path of the written file
    """
    path = path or _output_path(report, directory, ".json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report_to_dict(report), f, indent=2, ensure_ascii=False)
    return path


def write_csv(report: ProfileReport, directory: Path, path: Optional[Path] = None) -> Path:
    """Write the tab-separated feature report.

    Args:
        report: Profile report
        directory: Output directory, created if missing
        path: Explicit file path, overriding the timestamped default

    Returns:
        Path of the written file
    """
    path = path or _output_path(report, directory, ".csv")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(CSV_HEADER)
        writer.writerows(forest_to_rows(report.forest))
    return path
