"""
Remote directory trees.
"""

from sftpdash.tree.builder import DirectoryTreeBuilder, join_remote
from sftpdash.tree.search import filter_tree, iter_files
from sftpdash.tree.types import DirectoryItem

__all__ = [
    "DirectoryItem",
    "DirectoryTreeBuilder",
    "filter_tree",
    "iter_files",
    "join_remote",
]
