"""Index of commit subjects used to decide whether a ticket made it into git."""

from typing import Dict, Iterable, Iterator, Tuple


class GitHistoryIndex:
    """Maps the first token of each commit subject to all subjects starting with it.

    Subjects are expected to be normalized (uppercased, deduplicated). Indexing
    more branches merges into the same mapping.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries.items())

    def get(self, token: str) -> str:
        """Get the concatenated subjects for a token, or an empty string."""
        return self._entries.get(token, "")

    def add_subject(self, line: str) -> None:
        """Index a single subject line under its first token.

        A line without a space is indexed under the empty token, so only the
        substring scan can match it.
        """
        line = line.strip()
        if not line:
            return

        token = line[: line.index(" ")] if " " in line else ""
        if token in self._entries:
            self._entries[token] = self._entries[token] + " " + line
        else:
            self._entries[token] = line

    def add_subjects(self, lines: Iterable[str]) -> None:
        """Index a sequence of subject lines."""
        for line in lines:
            self.add_subject(line)

    def is_in_history(self, key: str) -> bool:
        """Check whether a ticket key is referenced by any indexed subject.

        The key matches if it is the first token of a subject, or if it occurs
        anywhere (as a plain substring) in the indexed text.

        Args:
            key: Ticket key, e.g. "PROJ-1"

        Returns:
            True if the ticket is referenced
        """
        if key in self._entries:
            return True

        return any(key in text for text in self._entries.values())
