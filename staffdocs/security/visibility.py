"""
staffdocs Visibility Predicates — Folder and document access decisions.

Document decision order (must not be rearranged):

    1. admin tier            → allow (total override, locks included)
    2. below document floor  → deny
    3. below folder floor    → deny (document and folder floors combine by AND)
    4. locked + own document → deny (applies to the manager tier too)
    5. manager tier          → allow
    6. base tier             → allow only own documents

Folder decision:

    manager tier and above → role floor only
    base tier              → role floor AND (no owner OR owner is the actor)

The require_* helpers gate mutating operations: they raise
StaffDocsSecurityError and leave a security entry in the audit log.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from staffdocs.documents.models import Actor, Document, Folder
from staffdocs.engine.errors import StaffDocsSecurityError
from staffdocs.engine.logging import log, log_access_denied
from staffdocs.security.roles import RoleTable, default_role_table

logger = logging.getLogger("staffdocs.security.visibility")


def can_view_document(
    actor: Actor,
    document: Document,
    parent_folder: Optional[Folder] = None,
    roles: RoleTable = default_role_table,
) -> bool:
    """Whether ``actor`` may see ``document`` (optionally inside ``parent_folder``)."""
    level = actor.role_level

    if roles.is_admin(level):
        return True

    if level < document.min_role_level:
        return False

    if parent_folder is not None and level < parent_folder.min_role_level:
        return False

    if document.is_locked and document.staff_id == actor.id:
        return False

    if roles.is_manager(level):
        return True

    return document.staff_id == actor.id


def can_view_folder(
    actor: Actor,
    folder: Folder,
    roles: RoleTable = default_role_table,
) -> bool:
    """Whether ``actor`` may see ``folder`` (its subtree is a separate question)."""
    level = actor.role_level

    if roles.is_manager(level):
        return level >= folder.min_role_level

    if level < folder.min_role_level:
        return False
    return folder.owner_staff_id is None or folder.owner_staff_id == actor.id


def _deny(
    actor: Actor,
    object_type: str,
    object_id: Optional[str],
    operation: str,
    message: str,
    required_level: Optional[int] = None,
) -> StaffDocsSecurityError:
    log(log_access_denied(
        object_type=object_type,
        object_id=object_id,
        actor_id=actor.id,
        role_level=actor.role_level,
        operation=operation,
        required_level=required_level,
        reason=message,
    ))
    logger.info(f"Denied {operation} on {object_type}:{object_id} for actor {actor.id}: {message}")
    return StaffDocsSecurityError(
        message,
        object_ref=f"{object_type}:{object_id}" if object_id else object_type,
        actor_id=actor.id,
        role_level=actor.role_level,
        required_level=required_level,
        operation=operation,
    )


def require_document_access(
    actor: Actor,
    document: Document,
    parent_folder: Optional[Folder] = None,
    roles: RoleTable = default_role_table,
    operation: str = "view",
) -> None:
    """Raise StaffDocsSecurityError unless ``actor`` can view ``document``."""
    if can_view_document(actor, document, parent_folder, roles):
        return
    required = document.min_role_level
    if parent_folder is not None:
        required = max(required, parent_folder.min_role_level)
    raise _deny(
        actor, "documents", document.id, operation,
        f"Document '{document.file_name or document.id}' is not visible to this actor",
        required_level=required,
    )


def require_folder_access(
    actor: Actor,
    folder: Folder,
    roles: RoleTable = default_role_table,
    operation: str = "view",
) -> None:
    """Raise StaffDocsSecurityError unless ``actor`` can view ``folder``."""
    if can_view_folder(actor, folder, roles):
        return
    raise _deny(
        actor, "folders", folder.id, operation,
        f"Folder '{folder.name or folder.id}' is not visible to this actor",
        required_level=folder.min_role_level,
    )


def require_manage(
    actor: Actor,
    target: Union[Document, Folder, None] = None,
    roles: RoleTable = default_role_table,
    operation: str = "manage",
) -> None:
    """
    Management operations (move, lock, level change, folder edits) are
    reserved for the admin tier.
    """
    if roles.is_admin(actor.role_level):
        return
    if isinstance(target, Document):
        object_type = "documents"
    elif isinstance(target, Folder):
        object_type = "folders"
    else:
        object_type = "system"
    raise _deny(
        actor, object_type, target.id if target is not None else None, operation,
        f"'{operation}' requires the admin tier",
        required_level=roles.admin_level,
    )
