"""
Searching a materialised tree by name.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from sftpdash.tree.types import DirectoryItem


def filter_tree(items: Iterable[DirectoryItem], query: str) -> list[DirectoryItem]:
    """
    Case-insensitive name filter that keeps the path to every match.

    An item survives if its own name contains ``query`` or any descendant's
    does; survivors are copies whose children are filtered the same way.
    A directory matching by name keeps its whole subtree. An empty query
    keeps everything.
    """
    needle = query.lower()
    result = []
    for item in items:
        kept = _filter_item(item, needle)
        if kept is not None:
            result.append(kept)
    return result


def _filter_item(item: DirectoryItem, needle: str) -> DirectoryItem | None:
    if needle in item.name.lower():
        return _copy(item)
    children = [kept for child in item.children if (kept := _filter_item(child, needle)) is not None]
    if children:
        return DirectoryItem(name=item.name, path=item.path, is_directory=item.is_directory, children=children)
    return None


def _copy(item: DirectoryItem) -> DirectoryItem:
    return DirectoryItem(
        name=item.name,
        path=item.path,
        is_directory=item.is_directory,
        children=[_copy(child) for child in item.children],
    )


def iter_files(items: Iterable[DirectoryItem]) -> Iterator[DirectoryItem]:
    """Every file item below ``items``, depth-first in listing order."""
    for item in items:
        for node in item.walk():
            if not node.is_directory:
                yield node
