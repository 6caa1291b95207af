"""
staffdocs Upload Router — Decide owner, folder and floor for an upload.

Owner detection is a filename heuristic: "Yamada_Payslip.pdf" belongs to
the staff member named exactly "Yamada". The candidate name is everything
before the first delimiter, or the extension-less filename when there is
no delimiter.

Destination:
    FOLDER mode  → the folder the uploader picked
    ROOT mode    → no folder
    AUTO mode    → unmatched owners go to the "unassigned" system folder
                   (when it exists); matched owners go to the root

The document's floor is inherited from the destination. An unmatched name is
an expected outcome, never an error.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from staffdocs.documents.inheritance import inherited_min_role_level, resolve_target_folder
from staffdocs.documents.models import (
    Document,
    DocumentSource,
    Folder,
    RoutingDecision,
    RoutingMode,
    StaffDirectoryEntry,
)
from staffdocs.engine.config import RoutingConfig
from staffdocs.engine.errors import StaffDocsValidationError
from staffdocs.engine.logging import log, log_upload_routed
from staffdocs.security.roles import RoleTable, default_role_table

logger = logging.getLogger("staffdocs.documents.routing")


def extract_owner_name(file_name: str, delimiter: str = "_") -> str:
    """
    Candidate owner name from a filename.

    "Yamada_Payslip.pdf" → "Yamada"; "randomfile.pdf" → "randomfile".
    Directory components (from folder drops) are ignored.
    """
    base = os.path.basename(file_name.replace("\\", "/"))
    if delimiter in base:
        return base.split(delimiter, 1)[0]
    return os.path.splitext(base)[0]


def resolve_staff(
    name: str,
    staff_directory: Iterable[StaffDirectoryEntry],
) -> Optional[StaffDirectoryEntry]:
    """
    Exact, case-sensitive name match. Duplicate names resolve to the first
    entry in directory order.
    """
    if not name:
        return None
    matches = [entry for entry in staff_directory if entry.name == name]
    if not matches:
        return None
    if len(matches) > 1:
        logger.debug(
            f"Ambiguous staff name '{name}' matches {[m.id for m in matches]}; using {matches[0].id}"
        )
    return matches[0]


def find_unassigned_folder(
    folders: Iterable[Folder],
    system_type: str = "unassigned",
) -> Optional[Folder]:
    """The system catch-all folder, if the snapshot has one."""
    for folder in folders:
        if folder.is_system and folder.system_type == system_type:
            return folder
    return None


def route(
    file_name: str,
    staff_directory: Iterable[StaffDirectoryEntry],
    folders: Iterable[Folder] = (),
    explicit_folder_id: Optional[str] = None,
    mode: RoutingMode = RoutingMode.AUTO,
    roles: RoleTable = default_role_table,
    settings: Optional[RoutingConfig] = None,
) -> RoutingDecision:
    """
    Route one upload.

    Args:
        file_name: Uploaded filename (may include a relative path).
        staff_directory: Staff snapshot used for owner matching.
        folders: Flat (unfiltered) folder snapshot.
        explicit_folder_id: Manual destination; forces FOLDER mode.
        mode: AUTO (default) or ROOT when no explicit folder is given.

    Raises:
        StaffDocsValidationError: explicit_folder_id is not in the snapshot.
    """
    settings = settings or RoutingConfig()
    folders = list(folders)

    candidate = extract_owner_name(file_name, settings.owner_delimiter)
    staff = resolve_staff(candidate, staff_directory)
    resolved_staff_id = staff.id if staff else None

    if explicit_folder_id is not None:
        mode = RoutingMode.FOLDER
        target = resolve_target_folder(folders, explicit_folder_id)
    elif mode == RoutingMode.FOLDER:
        raise StaffDocsValidationError(
            "RoutingMode.FOLDER requires explicit_folder_id",
            object_ref=f"upload:{file_name}",
            field="explicit_folder_id",
        )
    elif mode == RoutingMode.AUTO and resolved_staff_id is None:
        target = find_unassigned_folder(folders, settings.unassigned_system_type)
    else:
        target = None

    return RoutingDecision(
        file_name=file_name,
        owner_candidate_name=candidate,
        resolved_staff_id=resolved_staff_id,
        staff_label=candidate or settings.unassigned_label,
        target_folder_id=target.id if target else None,
        inherited_min_role_level=inherited_min_role_level(target, roles),
        mode=mode,
    )


def draft_document(
    decision: RoutingDecision,
    source: DocumentSource = DocumentSource.ADMIN,
    document_id: Optional[str] = None,
) -> Document:
    """The Document record a create request sends to persistence."""
    return Document(
        id=document_id,
        file_name=os.path.basename(decision.file_name.replace("\\", "/")),
        staff_name=decision.staff_label,
        staff_id=decision.resolved_staff_id,
        folder_id=decision.target_folder_id,
        min_role_level=decision.inherited_min_role_level,
        is_locked=False,
        source=source,
    )


class UploadRouter:
    """
    Routes a batch of uploads against one staff/folder snapshot.

    Each decision is also written to the routing audit log (when audit
    logging is initialized).
    """

    def __init__(
        self,
        staff_directory: Iterable[StaffDirectoryEntry],
        folders: Iterable[Folder],
        roles: Optional[RoleTable] = None,
        settings: Optional[RoutingConfig] = None,
    ):
        self._staff = tuple(staff_directory)
        self._folders = tuple(folders)
        self._roles = roles or default_role_table
        self._settings = settings or RoutingConfig()

    @property
    def unassigned_folder(self) -> Optional[Folder]:
        return find_unassigned_folder(self._folders, self._settings.unassigned_system_type)

    def route(
        self,
        file_name: str,
        explicit_folder_id: Optional[str] = None,
        mode: RoutingMode = RoutingMode.AUTO,
    ) -> RoutingDecision:
        decision = route(
            file_name,
            self._staff,
            self._folders,
            explicit_folder_id=explicit_folder_id,
            mode=mode,
            roles=self._roles,
            settings=self._settings,
        )
        log(log_upload_routed(
            file_name=decision.file_name,
            owner_candidate_name=decision.owner_candidate_name,
            resolved_staff_id=decision.resolved_staff_id,
            target_folder_id=decision.target_folder_id,
            inherited_min_role_level=decision.inherited_min_role_level,
            mode=decision.mode.value,
        ))
        if not decision.is_resolved:
            logger.info(
                f"No staff match for '{decision.owner_candidate_name}' ({file_name}); "
                f"target folder {decision.target_folder_id}"
            )
        return decision

    def route_many(
        self,
        file_names: Iterable[str],
        explicit_folder_id: Optional[str] = None,
        mode: RoutingMode = RoutingMode.AUTO,
    ) -> List[RoutingDecision]:
        """Route several uploads with the same destination choice."""
        return [self.route(name, explicit_folder_id, mode) for name in file_names]

    def __repr__(self) -> str:
        return f"<UploadRouter staff={len(self._staff)} folders={len(self._folders)}>"
