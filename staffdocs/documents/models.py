"""
staffdocs Records — Pydantic shapes the resolver reads and returns.

Folder / Document / StaffDirectoryEntry are raw records as fetched from the
persistence collaborator. They are frozen: the resolver never mutates them,
every update returns a copy.

FolderTreeNode is the hierarchy-augmented view of a Folder (children +
document_count). It is a separate type from Folder and is rebuilt from the
flat records on every resolution pass.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from staffdocs.security.roles import STAFF_LEVEL


class DocumentSource(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class RoutingMode(str, Enum):
    AUTO = "auto"        # unmatched owners go to the "unassigned" system folder
    FOLDER = "folder"    # explicit destination folder chosen by the uploader
    ROOT = "root"        # explicitly no folder


class Actor(BaseModel):
    """The acting identity, resolved by the auth collaborator."""

    model_config = ConfigDict(frozen=True)

    id: str
    role_level: int
    name: Optional[str] = None


class StaffDirectoryEntry(BaseModel):
    """Staff member as used for upload owner matching."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Folder(BaseModel):
    """
    Flat folder record.

    Visibility axes:
    - min_role_level: role floor shared by everyone at or above it
    - owner_staff_id: personal folder; base-tier actors other than the owner
      never see it (manager/admin tiers ignore it)
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    parent_id: Optional[str] = Field(default=None, description="Parent folder id; None for roots")
    owner_staff_id: Optional[str] = Field(default=None, description="Owner for personal folders")
    min_role_level: int = Field(default=STAFF_LEVEL, description="Role floor")
    is_system: bool = Field(default=False, description="Created by system init; never deletable")
    system_type: Optional[str] = Field(default=None, description="e.g. 'unassigned'")


class FolderTreeNode(Folder):
    """A Folder with its materialized children and direct document count."""

    children: List["FolderTreeNode"] = Field(default_factory=list)
    document_count: int = 0

    def to_folder(self) -> Folder:
        """Strip the hierarchy back to the raw record."""
        return Folder(**self.model_dump(exclude={"children", "document_count"}))


class Document(BaseModel):
    """
    Document metadata.

    staff_id is the authoritative owner link; staff_name is only a display
    label and may not match any staff record. is_locked hides the document
    from its own owner (admins still see it).
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(default=None, description="None for drafts not yet persisted")
    file_name: str = ""
    staff_name: str = ""
    staff_id: Optional[str] = None
    folder_id: Optional[str] = None
    min_role_level: int = STAFF_LEVEL
    is_locked: bool = False
    source: DocumentSource = DocumentSource.ADMIN


class RoutingDecision(BaseModel):
    """Where an uploaded file goes, and with which visibility floor."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    owner_candidate_name: str
    resolved_staff_id: Optional[str] = None
    staff_label: str
    target_folder_id: Optional[str] = None
    inherited_min_role_level: int
    mode: RoutingMode = RoutingMode.AUTO

    @property
    def is_resolved(self) -> bool:
        return self.resolved_staff_id is not None


class RepositorySnapshot(BaseModel):
    """Flat collections handed over by the persistence collaborator."""

    folders: List[Folder] = Field(default_factory=list)
    documents: List[Document] = Field(default_factory=list)
    staff: List[StaffDirectoryEntry] = Field(default_factory=list)


FolderTreeNode.model_rebuild()
