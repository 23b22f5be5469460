"""
Remote directory tree model.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class DirectoryItem:
    """One file or directory in a materialised remote tree."""

    name: str
    path: str
    is_directory: bool
    children: list[DirectoryItem] = field(default_factory=list)

    def walk(self) -> Iterator[DirectoryItem]:
        """Yield this item and every descendant, depth-first, in listing order."""
        stack = [self]
        while stack:
            item = stack.pop()
            yield item
            stack.extend(reversed(item.children))

    def count(self) -> int:
        """Number of descendants (this item excluded)."""
        return sum(1 for _ in self.walk()) - 1

    def find(self, path: str) -> DirectoryItem | None:
        for item in self.walk():
            if item.path == path:
                return item
        return None
