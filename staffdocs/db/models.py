"""
staffdocs Tables — SQLAlchemy models backing a RepositorySnapshot.

Tables:
1. roles      — role tiers (static reference data)
2. profiles   — staff accounts; (id, name) pairs form the staff directory
3. folders    — folder forest with role floor / owner scope / system flag
4. documents  — document metadata; file bytes live elsewhere
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
)

from staffdocs.db.base import Base, TimestampMixin
from staffdocs.security.roles import STAFF_LEVEL


class RoleRow(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    label = Column(String(100), nullable=False)
    level = Column(Integer, nullable=False)


class ProfileRow(Base, TimestampMixin):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    name = Column(String(200), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=True)


class FolderRow(Base, TimestampMixin):
    __tablename__ = "folders"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False, default="")
    parent_id = Column(String(36), ForeignKey("folders.id", ondelete="CASCADE"), nullable=True)
    owner_staff_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    min_role_level = Column(Integer, nullable=False, default=STAFF_LEVEL)
    is_system = Column(Boolean, nullable=False, default=False)
    system_type = Column(String(50), nullable=True)
    created_by = Column(String(36), nullable=True)

    __table_args__ = (
        Index("idx_folders_parent", "parent_id"),
    )


class DocumentRow(Base, TimestampMixin):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    file_name = Column(String(255), nullable=False, default="")
    file_path = Column(String(500), nullable=True)
    staff_name = Column(String(200), nullable=False, default="")
    staff_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    folder_id = Column(String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    min_role_level = Column(Integer, nullable=False, default=STAFF_LEVEL)
    is_locked = Column(Boolean, nullable=False, default=False)
    source = Column(String(10), nullable=False, default="admin")
    uploaded_by = Column(String(36), nullable=True)

    __table_args__ = (
        CheckConstraint("source IN ('admin', 'staff')", name="ck_documents_source"),
        Index("idx_documents_folder", "folder_id"),
        Index("idx_documents_staff", "staff_id"),
    )
