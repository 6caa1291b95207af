"""
staffdocs Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v

Fixture repository:

    f-payroll (10)
    ├── f-payroll-2024 (10)
    └── f-payroll-mgr (50)
        └── f-mgr-child (10)
    f-personal-u1 (10, owner u1)
    f-personal-u2 (10, owner u2)
    f-admin (100)
    f-unassigned (50, system "unassigned")
"""

from __future__ import annotations

from typing import List

import pytest

from staffdocs.documents.models import (
    Actor,
    Document,
    Folder,
    RepositorySnapshot,
    StaffDirectoryEntry,
)
from staffdocs.documents.service import DocumentService
from staffdocs.documents.tree import build_forest


# ---------------------------------------------------------------------------
# Global state — config cache and audit logger are module singletons
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset global singletons between tests."""
    import staffdocs.engine.config as cfg_mod
    import staffdocs.engine.logging as log_mod

    cfg_mod.reset_config()
    log_mod.shutdown_logging()
    yield
    cfg_mod.reset_config()
    log_mod.shutdown_logging()


@pytest.fixture
def audit_logger(tmp_path):
    """Initialize the global audit logger under tmp_path."""
    from staffdocs.engine.logging import init_logging

    return init_logging(str(tmp_path / "logs"))


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------

@pytest.fixture
def staff_actor() -> Actor:
    return Actor(id="u1", role_level=10, name="Yamada")


@pytest.fixture
def other_staff_actor() -> Actor:
    return Actor(id="u2", role_level=10, name="Suzuki")


@pytest.fixture
def manager_actor() -> Actor:
    return Actor(id="m1", role_level=50, name="Manager")


@pytest.fixture
def admin_actor() -> Actor:
    return Actor(id="a1", role_level=100, name="Admin")


# ---------------------------------------------------------------------------
# Repository records
# ---------------------------------------------------------------------------

@pytest.fixture
def folders() -> List[Folder]:
    return [
        Folder(id="f-payroll", name="Payroll"),
        Folder(id="f-payroll-2024", name="2024", parent_id="f-payroll"),
        Folder(id="f-payroll-mgr", name="Reviews", parent_id="f-payroll", min_role_level=50),
        Folder(id="f-mgr-child", name="Drafts", parent_id="f-payroll-mgr"),
        Folder(id="f-personal-u1", name="Yamada", owner_staff_id="u1"),
        Folder(id="f-personal-u2", name="Suzuki", owner_staff_id="u2"),
        Folder(id="f-admin", name="Contracts", min_role_level=100),
        Folder(
            id="f-unassigned", name="Unassigned", min_role_level=50,
            is_system=True, system_type="unassigned",
        ),
    ]


@pytest.fixture
def documents() -> List[Document]:
    return [
        Document(id="d1", file_name="Yamada_Payslip.pdf", staff_name="Yamada",
                 staff_id="u1", folder_id="f-payroll-2024"),
        Document(id="d2", file_name="Yamada_Review.pdf", staff_name="Yamada",
                 staff_id="u1", folder_id="f-payroll-mgr", min_role_level=50),
        Document(id="d3", file_name="Suzuki_Payslip.pdf", staff_name="Suzuki",
                 staff_id="u2", folder_id="f-payroll-2024"),
        Document(id="d4", file_name="Yamada_Warning.pdf", staff_name="Yamada",
                 staff_id="u1", folder_id="f-personal-u1", is_locked=True),
        Document(id="d5", file_name="Manager_Note.pdf", staff_name="Manager",
                 staff_id="m1", folder_id=None, is_locked=True),
        Document(id="d6", file_name="randomfile.pdf", staff_name="randomfile",
                 staff_id=None, folder_id="f-unassigned", min_role_level=50),
        Document(id="d7", file_name="Contract_2024.pdf", staff_name="Contract",
                 staff_id=None, folder_id="f-admin", min_role_level=100),
    ]


@pytest.fixture
def staff_directory() -> List[StaffDirectoryEntry]:
    return [
        StaffDirectoryEntry(id="u1", name="Yamada"),
        StaffDirectoryEntry(id="u2", name="Suzuki"),
        StaffDirectoryEntry(id="u3", name="Tanaka"),
        StaffDirectoryEntry(id="u4", name="Yamada"),
    ]


@pytest.fixture
def snapshot(folders, documents, staff_directory) -> RepositorySnapshot:
    return RepositorySnapshot(folders=folders, documents=documents, staff=staff_directory)


@pytest.fixture
def forest(folders):
    return build_forest(folders)


@pytest.fixture
def service(snapshot) -> DocumentService:
    return DocumentService(snapshot)


@pytest.fixture
def snapshot_file(tmp_path):
    """The fixture repository written as a YAML snapshot file."""
    path = tmp_path / "snapshot.yaml"
    path.write_text(
        "folders:\n"
        "  - {id: f-payroll, name: Payroll}\n"
        "  - {id: f-payroll-2024, name: '2024', parent_id: f-payroll}\n"
        "  - {id: f-payroll-mgr, name: Reviews, parent_id: f-payroll, min_role_level: 50}\n"
        "  - {id: f-personal-u1, name: Yamada, owner_staff_id: u1}\n"
        "  - {id: f-unassigned, name: Unassigned, min_role_level: 50,"
        " is_system: true, system_type: unassigned}\n"
        "documents:\n"
        "  - {id: d1, file_name: Yamada_Payslip.pdf, staff_name: Yamada,"
        " staff_id: u1, folder_id: f-payroll-2024}\n"
        "  - {id: d2, file_name: Yamada_Review.pdf, staff_name: Yamada,"
        " staff_id: u1, folder_id: f-payroll-mgr, min_role_level: 50}\n"
        "  - {id: d3, file_name: Suzuki_Payslip.pdf, staff_name: Suzuki,"
        " staff_id: u2, folder_id: f-payroll-2024}\n"
        "staff:\n"
        "  - {id: u1, name: Yamada}\n"
        "  - {id: u2, name: Suzuki}\n",
        encoding="utf-8",
    )
    return path
