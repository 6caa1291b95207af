"""
staffdocs Snapshot Repository — Load snapshots, persist resolver output.

Usage:
    session_factory = init_db("sqlite:///staffdocs.db", create_tables=True)
    repo = SnapshotRepository(session_factory)
    repo.ensure_system_folders()
    snapshot = repo.load_snapshot()
    ...
    repo.apply_move(service.move_document(actor, doc_id, folder_id))

apply_move() writes folder_id and min_role_level in one UPDATE inside one
transaction, so readers never observe a stale level/folder pairing.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import create_engine, select, update
from sqlalchemy.orm import sessionmaker

from staffdocs.db.base import Base
from staffdocs.db.models import DocumentRow, FolderRow, ProfileRow, RoleRow
from staffdocs.documents.models import (
    Document,
    DocumentSource,
    Folder,
    RepositorySnapshot,
    StaffDirectoryEntry,
)
from staffdocs.engine.config import StaffDocsConfig
from staffdocs.engine.errors import StaffDocsRecordError
from staffdocs.engine.logging import log, log_system_event
from staffdocs.security.roles import RoleTable, default_role_table

logger = logging.getLogger("staffdocs.db.repository")


def init_db(db_url: str, create_tables: bool = False, echo: bool = False) -> sessionmaker:
    """
    Create an engine and return a session factory bound to it.

    Args:
        db_url: SQLAlchemy URL (sqlite:///..., postgresql://...).
        create_tables: Run Base.metadata.create_all() — dev / tests only.
        echo: Log SQL statements.
    """
    engine = create_engine(db_url, echo=echo)
    if create_tables:
        Base.metadata.create_all(engine)
        logger.info(f"Created staffdocs tables on {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(bind=engine, expire_on_commit=False)


def _folder_from_row(row: FolderRow) -> Folder:
    return Folder(
        id=row.id,
        name=row.name,
        parent_id=row.parent_id,
        owner_staff_id=row.owner_staff_id,
        min_role_level=row.min_role_level,
        is_system=row.is_system,
        system_type=row.system_type,
    )


def _document_from_row(row: DocumentRow) -> Document:
    return Document(
        id=row.id,
        file_name=row.file_name,
        staff_name=row.staff_name,
        staff_id=row.staff_id,
        folder_id=row.folder_id,
        min_role_level=row.min_role_level,
        is_locked=row.is_locked,
        source=DocumentSource(row.source),
    )


class SnapshotRepository:
    """Reads flat snapshots and writes back resolver decisions."""

    def __init__(self, session_factory: sessionmaker, roles: Optional[RoleTable] = None):
        self._session_factory = session_factory
        self._roles = roles or default_role_table

    @classmethod
    def from_config(cls, config: StaffDocsConfig, create_tables: bool = False) -> "SnapshotRepository":
        """Engine from the ``database:`` section, role levels from ``roles:``."""
        session_factory = init_db(config.database.url, create_tables=create_tables, echo=config.database.echo)
        return cls(session_factory, roles=RoleTable.from_config(config.roles))

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    def load_snapshot(self) -> RepositorySnapshot:
        """
        Folders by name, documents newest first, staff in directory order
        (creation time, then id).
        """
        with self._session_factory() as session:
            folders = session.scalars(select(FolderRow).order_by(FolderRow.name, FolderRow.id)).all()
            documents = session.scalars(
                select(DocumentRow).order_by(DocumentRow.created_at.desc(), DocumentRow.id)
            ).all()
            staff = session.scalars(
                select(ProfileRow).order_by(ProfileRow.created_at, ProfileRow.id)
            ).all()
            return RepositorySnapshot(
                folders=[_folder_from_row(r) for r in folders],
                documents=[_document_from_row(r) for r in documents],
                staff=[StaffDirectoryEntry(id=r.id, name=r.name) for r in staff],
            )

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------

    def seed_roles(self) -> int:
        """Insert the configured role rows that are missing. Returns rows added."""
        added = 0
        with self._session_factory() as session, session.begin():
            existing = set(session.scalars(select(RoleRow.name)).all())
            for role in self._roles.roles:
                if role.name not in existing:
                    session.add(RoleRow(name=role.name, label=role.label, level=role.level))
                    added += 1
        return added

    def save_staff(self, entry: StaffDirectoryEntry, email: Optional[str] = None) -> None:
        with self._session_factory() as session, session.begin():
            session.merge(ProfileRow(id=entry.id, name=entry.name, email=email))

    def save_folder(self, folder: Folder) -> Folder:
        """Insert or update a folder record."""
        with self._session_factory() as session, session.begin():
            session.merge(FolderRow(
                id=folder.id,
                name=folder.name,
                parent_id=folder.parent_id,
                owner_staff_id=folder.owner_staff_id,
                min_role_level=folder.min_role_level,
                is_system=folder.is_system,
                system_type=folder.system_type,
            ))
        return folder

    def save_document(self, document: Document, uploaded_by: Optional[str] = None) -> Document:
        """
        Insert or update a document record. Drafts (id=None) get a new UUID.
        Returns the stored record.
        """
        if document.id is None:
            document = document.model_copy(update={"id": str(uuid.uuid4())})
        with self._session_factory() as session, session.begin():
            session.merge(DocumentRow(
                id=document.id,
                file_name=document.file_name,
                staff_name=document.staff_name,
                staff_id=document.staff_id,
                folder_id=document.folder_id,
                min_role_level=document.min_role_level,
                is_locked=document.is_locked,
                source=document.source.value,
                uploaded_by=uploaded_by,
            ))
        return document

    def apply_move(self, document: Document) -> None:
        """
        Persist a move: folder_id and min_role_level in a single UPDATE.

        Raises:
            StaffDocsRecordError: the document does not exist.
        """
        with self._session_factory() as session, session.begin():
            result = session.execute(
                update(DocumentRow)
                .where(DocumentRow.id == document.id)
                .values(folder_id=document.folder_id, min_role_level=document.min_role_level)
            )
            if result.rowcount == 0:
                raise StaffDocsRecordError(
                    f"Document '{document.id}' not found",
                    record_type="document", record_id=document.id, operation="move",
                )
        logger.info(
            f"Persisted move of {document.id} to {document.folder_id} "
            f"(min_role_level={document.min_role_level})"
        )

    def ensure_system_folders(
        self,
        system_type: str = "unassigned",
        name: str = "Unassigned",
    ) -> Folder:
        """Create the catch-all routing folder at system init if missing."""
        with self._session_factory() as session, session.begin():
            row = session.scalars(
                select(FolderRow).where(
                    FolderRow.is_system.is_(True), FolderRow.system_type == system_type
                )
            ).first()
            if row is None:
                row = FolderRow(
                    id=str(uuid.uuid4()),
                    name=name,
                    parent_id=None,
                    min_role_level=self._roles.base_level,
                    is_system=True,
                    system_type=system_type,
                )
                session.add(row)
                session.flush()
                log(log_system_event("system_folder_created", details={"id": row.id, "system_type": system_type}))
                logger.info(f"Created system folder '{name}' ({system_type})")
            return _folder_from_row(row)
