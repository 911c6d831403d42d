"""Helpers for slash-delimited hierarchical object names.

Example:
    "Level/Props/Door" is a descendant of "Level" at depth 2.
"""

from collections.abc import Iterable
from typing import NamedTuple

SEPARATOR = "/"


class AncestorMatch(NamedTuple):
    """Result of find_ancestor."""

    ancestor: str
    depth: int


def is_descendant(name: str, ancestor: str) -> bool:
    """Return True if ``name`` lies strictly below ``ancestor``."""
    return name.startswith(ancestor + SEPARATOR)


def parent_path(name: str) -> str | None:
    """Return the parent of ``name``, or None for a root name.

    Example:
        "A/B/C" -> "A/B"
    """
    head, sep, _ = name.rpartition(SEPARATOR)
    return head if sep else None


def get_highest_nodes(names: Iterable[str]) -> set[str]:
    """Return the names that are not a descendant of another given name.

    Args:
        names: Hierarchical names

    Returns:
        The roots of the given name set

    Example:
        {"A", "A/B", "C"} -> {"A", "C"}
    """
    # After sorting, every ancestor precedes its descendants
    roots: set[str] = set()
    for name in sorted(set(names)):
        if not any(is_descendant(name, root) for root in roots):
            roots.add(name)
    return roots


def find_ancestor(candidate_roots: Iterable[str], name: str) -> AncestorMatch | None:
    """Find the candidate root that ``name`` equals or descends from.

    Args:
        candidate_roots: Hierarchical names to test against
        name: The name to locate

    Returns:
        The matching root and how many levels below it ``name`` sits,
        or None if ``name`` is not under any candidate
    """
    for root in candidate_roots:
        if name == root:
            return AncestorMatch(root, 0)
        if is_descendant(name, root):
            remainder = name[len(root) + 1:]
            return AncestorMatch(root, remainder.count(SEPARATOR) + 1)
    return None
