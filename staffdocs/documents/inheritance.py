"""
staffdocs Folder Inheritance — A document's floor follows its folder.

Whenever a document is placed in a folder (upload or move), its
min_role_level is recomputed from the destination:

    min_role_level := target_folder.min_role_level   (folder chosen)
                   := roles.base_level               (no folder / root)

folder_id and min_role_level are always returned together in one updated
record, so the caller can persist them in a single atomic update.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from staffdocs.documents.models import Document, Folder
from staffdocs.engine.errors import StaffDocsValidationError
from staffdocs.security.roles import RoleTable, default_role_table

logger = logging.getLogger("staffdocs.documents.inheritance")


def find_folder(folders: Iterable[Folder], folder_id: Optional[str]) -> Optional[Folder]:
    """First folder with ``folder_id`` in a flat collection, or None."""
    if folder_id is None:
        return None
    for folder in folders:
        if folder.id == folder_id:
            return folder
    return None


def inherited_min_role_level(
    target_folder: Optional[Folder],
    roles: RoleTable = default_role_table,
) -> int:
    """Visibility floor a document receives from its destination."""
    if target_folder is None:
        return roles.base_level
    return target_folder.min_role_level


def resolve_target_folder(
    folders: Iterable[Folder],
    target_folder_id: Optional[str],
) -> Optional[Folder]:
    """
    Look up a destination folder; None means the root.

    Raises:
        StaffDocsValidationError: the id is not in the snapshot.
    """
    if target_folder_id is None:
        return None
    folder = find_folder(folders, target_folder_id)
    if folder is None:
        raise StaffDocsValidationError(
            f"Target folder '{target_folder_id}' does not exist",
            object_ref=f"folders:{target_folder_id}",
            field="folder_id",
            value=target_folder_id,
        )
    return folder


def move_document(
    document: Document,
    target_folder_id: Optional[str],
    folders: Iterable[Folder],
    roles: RoleTable = default_role_table,
) -> Document:
    """
    Relocate ``document``; returns a copy with folder_id and the inherited
    min_role_level updated together.
    """
    target = resolve_target_folder(folders, target_folder_id)
    level = inherited_min_role_level(target, roles)
    logger.debug(
        f"Move document {document.id}: {document.folder_id} -> {target_folder_id} (level {level})"
    )
    return document.model_copy(update={"folder_id": target_folder_id, "min_role_level": level})


def is_consistent(
    document: Document,
    folders: Iterable[Folder],
    roles: RoleTable = default_role_table,
) -> bool:
    """True when the stored floor equals what the current folder would give."""
    folder = find_folder(folders, document.folder_id)
    if document.folder_id is not None and folder is None:
        return False
    return document.min_role_level == inherited_min_role_level(folder, roles)


def toggle_lock(document: Document) -> Document:
    """Flip the self-hide flag."""
    return document.model_copy(update={"is_locked": not document.is_locked})


def set_min_role_level(document: Document, level: int) -> Document:
    """Explicit per-document floor, independent of the folder's."""
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise StaffDocsValidationError(
            f"min_role_level must be a non-negative integer, got {level!r}",
            object_ref=f"documents:{document.id}",
            field="min_role_level",
            value=level,
        )
    return document.model_copy(update={"min_role_level": level})
