"""Natural ordering of ticket keys: by project, then numerically."""

from typing import Iterable, List, Tuple


def natural_key(key: str) -> Tuple[str, int, int, str]:
    """Sort key for a PROJECT-NUMBER ticket key.

    Keys with a non-numeric suffix sort after the numbered keys of their
    project. A key without a dash is treated as a bare project name.
    """
    project, sep, suffix = key.rpartition("-")
    if not sep:
        return (key, 0, 0, "")
    if suffix.isdecimal():
        return (project, 0, int(suffix), "")
    return (project, 1, 0, suffix)


def natural_order(keys: Iterable[str]) -> List[str]:
    """Order ticket keys by project prefix, then by numeric suffix.

    Accepts any iterable of keys, including a mapping keyed by ticket key.

    Example:
        >>> natural_order(["PROJ-10", "PROJ-2", "ABC-1", "PROJ-1"])
        ['ABC-1', 'PROJ-1', 'PROJ-2', 'PROJ-10']
    """
    return sorted(keys, key=natural_key)
