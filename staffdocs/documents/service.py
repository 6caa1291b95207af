"""
staffdocs Document Service — One resolution session over one snapshot.

Handles:
- Visible folder tree per actor (build → filter), with visible document counts
- Tree index and breadcrumbs over the visible tree
- Visible document listing with folder and text filters
- Upload routing against the session's staff directory and folders
- Admin-tier management: move (with level inheritance), lock toggle,
  per-document level override, folder deletion guard

Every operation is derived from the snapshot handed to the constructor;
nothing is cached between calls and nothing is written back. Mutations
return updated records for the caller to persist.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from staffdocs.documents.inheritance import (
    move_document,
    set_min_role_level,
    toggle_lock,
)
from staffdocs.documents.models import (
    Actor,
    Document,
    Folder,
    FolderTreeNode,
    RepositorySnapshot,
    RoutingDecision,
    RoutingMode,
)
from staffdocs.documents.routing import UploadRouter
from staffdocs.documents.tree import TreeIndex, build_forest, filter_folders_by_permission
from staffdocs.engine.config import RoutingConfig, StaffDocsConfig
from staffdocs.engine.errors import StaffDocsRecordError, StaffDocsValidationError
from staffdocs.engine.logging import log, log_document_moved
from staffdocs.security.roles import RoleTable, default_role_table
from staffdocs.security.visibility import (
    can_view_document,
    require_document_access,
    require_folder_access,
    require_manage,
)

logger = logging.getLogger("staffdocs.documents.service")


class DocumentService:
    """
    Resolver facade used by the UI/API layer.

    Instantiated per snapshot; cheap to build, so callers create a fresh one
    whenever the underlying folder/document set changes.
    """

    def __init__(
        self,
        snapshot: RepositorySnapshot,
        roles: Optional[RoleTable] = None,
        settings: Optional[RoutingConfig] = None,
    ):
        self._snapshot = snapshot
        self._roles = roles or default_role_table
        self._settings = settings or RoutingConfig()
        self._folders: Dict[str, Folder] = {f.id: f for f in snapshot.folders}
        self._documents: Dict[str, Document] = {
            d.id: d for d in snapshot.documents if d.id is not None
        }

    @classmethod
    def from_config(cls, snapshot: RepositorySnapshot, config: StaffDocsConfig) -> "DocumentService":
        return cls(snapshot, roles=RoleTable.from_config(config.roles), settings=config.routing)

    @property
    def roles(self) -> RoleTable:
        return self._roles

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------

    def get_folder(self, folder_id: str) -> Folder:
        folder = self._folders.get(folder_id)
        if folder is None:
            raise StaffDocsRecordError(
                f"Folder '{folder_id}' not found",
                record_type="folder", record_id=folder_id, operation="get",
            )
        return folder

    def _find_document(self, document_id: str, operation: str) -> Document:
        document = self._documents.get(document_id)
        if document is None:
            raise StaffDocsRecordError(
                f"Document '{document_id}' not found",
                record_type="document", record_id=document_id, operation=operation,
            )
        return document

    def _parent_folder(self, document: Document) -> Optional[Folder]:
        if document.folder_id is None:
            return None
        return self._folders.get(document.folder_id)

    # -------------------------------------------------------------------
    # Read paths
    # -------------------------------------------------------------------

    def can_view(self, actor: Actor, document: Document) -> bool:
        """Document visibility evaluated against its current parent folder."""
        return can_view_document(actor, document, self._parent_folder(document), self._roles)

    def get_document(self, actor: Actor, document_id: str) -> Document:
        """Fetch one document, enforcing visibility."""
        document = self._find_document(document_id, "get")
        require_document_access(actor, document, self._parent_folder(document), self._roles)
        return document

    def visible_documents(
        self,
        actor: Actor,
        folder_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Document]:
        """
        Documents ``actor`` may see, in snapshot order.

        folder_id narrows to documents directly in that folder (the folder
        itself must be visible). search is a case-insensitive substring match
        on file_name or staff_name.
        """
        if folder_id is not None:
            self._require_listable(actor, folder_id)

        docs = [d for d in self._snapshot.documents if self.can_view(actor, d)]

        if folder_id is not None:
            docs = [d for d in docs if d.folder_id == folder_id]

        if search:
            needle = search.lower()
            docs = [
                d for d in docs
                if needle in d.file_name.lower() or needle in d.staff_name.lower()
            ]
        return docs

    def _require_listable(self, actor: Actor, folder_id: str) -> None:
        """
        A folder is listable only when every folder from its root down to it
        is visible; a denied ancestor hides the whole subtree.
        """
        self.get_folder(folder_id)
        full = TreeIndex.build(build_forest(self._snapshot.folders))
        for folder in full.breadcrumbs(folder_id):
            require_folder_access(actor, folder, self._roles, operation="list")

    def folder_tree(self, actor: Actor) -> List[FolderTreeNode]:
        """The actor's visible forest; document_count only counts visible documents."""
        visible_docs = [d for d in self._snapshot.documents if self.can_view(actor, d)]
        forest = build_forest(self._snapshot.folders, visible_docs)
        return filter_folders_by_permission(forest, actor, self._roles)

    def tree_index(self, actor: Actor) -> TreeIndex:
        return TreeIndex.build(self.folder_tree(actor))

    def breadcrumbs(self, actor: Actor, folder_id: str) -> List[FolderTreeNode]:
        """Root → folder path within the visible tree; empty if not visible."""
        return self.tree_index(actor).breadcrumbs(folder_id)

    # -------------------------------------------------------------------
    # Upload routing
    # -------------------------------------------------------------------

    def router(self) -> UploadRouter:
        return UploadRouter(
            self._snapshot.staff, self._snapshot.folders,
            roles=self._roles, settings=self._settings,
        )

    def route_upload(
        self,
        file_name: str,
        explicit_folder_id: Optional[str] = None,
        mode: RoutingMode = RoutingMode.AUTO,
    ) -> RoutingDecision:
        return self.router().route(file_name, explicit_folder_id, mode)

    # -------------------------------------------------------------------
    # Management (admin tier)
    # -------------------------------------------------------------------

    def move_document(
        self,
        actor: Actor,
        document_id: str,
        target_folder_id: Optional[str],
    ) -> Document:
        """
        Relocate a document; the returned record carries the new folder_id
        and the inherited min_role_level, to be persisted in one update.
        """
        document = self._find_document(document_id, "move")
        require_manage(actor, document, self._roles, operation="move")
        moved = move_document(document, target_folder_id, self._snapshot.folders, self._roles)
        log(log_document_moved(
            document_id=document.id,
            actor_id=actor.id,
            from_folder_id=document.folder_id,
            to_folder_id=moved.folder_id,
            min_role_level=moved.min_role_level,
        ))
        logger.info(
            f"Document {document.id} moved {document.folder_id} -> {moved.folder_id} "
            f"(min_role_level {document.min_role_level} -> {moved.min_role_level})"
        )
        return moved

    def toggle_lock(self, actor: Actor, document_id: str) -> Document:
        document = self._find_document(document_id, "lock")
        require_manage(actor, document, self._roles, operation="lock")
        return toggle_lock(document)

    def set_document_level(self, actor: Actor, document_id: str, level: int) -> Document:
        document = self._find_document(document_id, "set_level")
        require_manage(actor, document, self._roles, operation="set_level")
        return set_min_role_level(document, level)

    def ensure_folder_deletable(self, actor: Actor, folder_id: str) -> Folder:
        """
        Gate a folder deletion. System folders are never deletable.

        Returns the folder so the caller can proceed.
        """
        folder = self.get_folder(folder_id)
        require_manage(actor, folder, self._roles, operation="delete")
        if folder.is_system:
            raise StaffDocsValidationError(
                f"System folder '{folder.name or folder.id}' cannot be deleted",
                object_ref=f"folders:{folder.id}",
                field="is_system",
                value=True,
            )
        return folder

    def __repr__(self) -> str:
        return (
            f"<DocumentService folders={len(self._snapshot.folders)} "
            f"documents={len(self._snapshot.documents)} staff={len(self._snapshot.staff)}>"
        )
