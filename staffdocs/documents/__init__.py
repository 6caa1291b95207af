"""
staffdocs Documents — records, folder tree, upload routing, inheritance.

Design refs:
    Folder tree: build → filter → index, rebuilt per resolution pass
    Upload routing: filename owner heuristic + "unassigned" system folder
    Inheritance: a document's floor follows its folder on upload and move

tree and service depend on staffdocs.security.visibility, which depends on
the records here; import them from their modules directly.
"""

from staffdocs.documents.inheritance import inherited_min_role_level, move_document
from staffdocs.documents.models import (
    Actor,
    Document,
    DocumentSource,
    Folder,
    FolderTreeNode,
    RepositorySnapshot,
    RoutingDecision,
    RoutingMode,
    StaffDirectoryEntry,
)
from staffdocs.documents.routing import UploadRouter, route

__all__ = [
    "Actor",
    "Document",
    "DocumentSource",
    "Folder",
    "FolderTreeNode",
    "RepositorySnapshot",
    "RoutingDecision",
    "RoutingMode",
    "StaffDirectoryEntry",
    "UploadRouter",
    "inherited_min_role_level",
    "move_document",
    "route",
]
