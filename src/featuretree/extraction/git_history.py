"""Commit subject extraction from Git branches."""

from typing import Iterable, List, Optional

import git
import structlog
from git import Repo

from featuretree.models import BranchConfig
from featuretree.models.config import DEFAULT_IGNORE_PATTERNS

logger = structlog.get_logger(__name__)


def normalize_subjects(
    subjects: Iterable[str], ignore_patterns: Optional[List[str]] = None
) -> List[str]:
    """Uppercase, filter, deduplicate and sort commit subject lines.

    Args:
        subjects: Raw commit subject lines
        ignore_patterns: Lines containing any of these (case-insensitive) are dropped

    Returns:
        Sorted list of unique uppercased subject lines
    """
    if ignore_patterns is None:
        ignore_patterns = DEFAULT_IGNORE_PATTERNS
    patterns = [pattern.upper() for pattern in ignore_patterns]

    lines = set()
    for subject in subjects:
        line = subject.strip().upper()
        if not line:
            continue
        if any(pattern in line for pattern in patterns):
            continue
        lines.add(line)

    return sorted(lines)


class GitHistoryReader:
    """Reads commit subjects from a local branch checkout."""

    def __init__(self, config: BranchConfig) -> None:
        """Initialize the reader.

        Args:
            config: Branch configuration

        Raises:
            ValueError: If repository path is invalid
        """
        self.config = config
        if not config.path.exists():
            raise ValueError(f"Repository path does not exist: {config.path}")

        try:
            self.repo = Repo(config.path)
        except git.exc.InvalidGitRepositoryError as e:
            raise ValueError(f"Invalid Git repository: {config.path}") from e

    def sync(self) -> None:
        """Check out the configured branch and pull it from the configured remote."""
        logger.info("checking out branch", branch=self.config.name, path=str(self.config.path))
        self.repo.git.checkout(self.config.name)

        logger.info("pulling branch", branch=self.config.name, remote=self.config.remote)
        self.repo.remote(self.config.remote).pull(self.config.name)

    def list_subjects(self, ref_from: Optional[str] = None, ref_to: Optional[str] = None) -> List[str]:
        """List the subject line of every commit in a ref range.

        Args:
            ref_from: Start of the range (exclusive); empty means the whole history
            ref_to: End of the range (inclusive)

        Returns:
            Subject lines, newest commit first

        Raises:
            ValueError: If a ref cannot be resolved
        """
        ref_from = self.config.ref_from if ref_from is None else ref_from
        ref_to = ref_to or self.config.ref_to
        rev = f"{ref_from}..{ref_to}" if ref_from else ref_to

        try:
            return [commit.summary for commit in self.repo.iter_commits(rev)]
        except git.exc.GitCommandError as e:
            raise ValueError(f"Invalid commit range: {rev}") from e

    def read_subjects(self, ignore_patterns: Optional[List[str]] = None) -> List[str]:
        """Read and normalize the configured range, syncing first if enabled.

        Args:
            ignore_patterns: Subject patterns to drop

        Returns:
            Normalized subject lines ready for indexing
        """
        if self.config.sync:
            self.sync()

        subjects = self.list_subjects()
        lines = normalize_subjects(subjects, ignore_patterns)
        logger.info(
            "read commit subjects",
            branch=self.config.name,
            commits=len(subjects),
            lines=len(lines),
        )
        return lines
