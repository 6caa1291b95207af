"""Unit tests for staffdocs.documents.service — Resolver facade over one snapshot."""

import pytest

from staffdocs.documents.models import Actor, RepositorySnapshot, RoutingMode
from staffdocs.documents.service import DocumentService
from staffdocs.engine.config import StaffDocsConfig
from staffdocs.engine.errors import (
    StaffDocsRecordError,
    StaffDocsSecurityError,
    StaffDocsValidationError,
)


def _ids(items):
    return [i.id for i in items]


class TestVisibleDocuments:

    def test_staff(self, service, staff_actor):
        assert _ids(service.visible_documents(staff_actor)) == ["d1"]

    def test_other_staff(self, service, other_staff_actor):
        assert _ids(service.visible_documents(other_staff_actor)) == ["d3"]

    def test_manager(self, service, manager_actor):
        assert _ids(service.visible_documents(manager_actor)) == ["d1", "d2", "d3", "d4", "d6"]

    def test_admin(self, service, admin_actor):
        assert _ids(service.visible_documents(admin_actor)) == ["d1", "d2", "d3", "d4", "d5", "d6", "d7"]

    def test_folder_filter(self, service, manager_actor):
        assert _ids(service.visible_documents(manager_actor, folder_id="f-payroll-2024")) == ["d1", "d3"]

    def test_folder_filter_hidden_folder(self, service, staff_actor):
        with pytest.raises(StaffDocsSecurityError):
            service.visible_documents(staff_actor, folder_id="f-payroll-mgr")

    def test_folder_filter_under_hidden_parent(self, service, staff_actor, audit_logger):
        """f-mgr-child passes on its own but sits below a manager-only folder."""
        assert service.breadcrumbs(staff_actor, "f-mgr-child") == []
        with pytest.raises(StaffDocsSecurityError) as exc_info:
            service.visible_documents(staff_actor, folder_id="f-mgr-child")
        assert exc_info.value.object_ref == "folders:f-payroll-mgr"
        entries = audit_logger.query("folders", "security")
        assert entries[0]["operation"] == "list"

    def test_folder_filter_under_visible_parent(self, service, manager_actor):
        assert service.visible_documents(manager_actor, folder_id="f-mgr-child") == []

    def test_folder_filter_unknown_folder(self, service, staff_actor):
        with pytest.raises(StaffDocsRecordError) as exc_info:
            service.visible_documents(staff_actor, folder_id="nope")
        assert exc_info.value.record_type == "folder"

    def test_search_file_name(self, service, manager_actor):
        assert _ids(service.visible_documents(manager_actor, search="payslip")) == ["d1", "d3"]

    def test_search_staff_name(self, service, manager_actor):
        assert _ids(service.visible_documents(manager_actor, search="SUZUKI")) == ["d3"]

    def test_search_respects_visibility(self, service, staff_actor):
        assert _ids(service.visible_documents(staff_actor, search="yamada")) == ["d1"]

    def test_lock_scenario_through_service(self, snapshot, staff_actor, manager_actor, admin_actor):
        service = DocumentService(snapshot)
        locked = service.toggle_lock(admin_actor, "d1")
        relocked = DocumentService(snapshot.model_copy(update={
            "documents": [locked if d.id == "d1" else d for d in snapshot.documents],
        }))
        assert "d1" not in _ids(relocked.visible_documents(staff_actor))
        assert "d1" in _ids(relocked.visible_documents(manager_actor))
        assert "d1" in _ids(relocked.visible_documents(admin_actor))


class TestGetDocument:

    def test_allowed(self, service, staff_actor):
        assert service.get_document(staff_actor, "d1").file_name == "Yamada_Payslip.pdf"

    def test_denied(self, service, staff_actor):
        with pytest.raises(StaffDocsSecurityError):
            service.get_document(staff_actor, "d3")

    def test_parent_folder_floor_applies(self, service, staff_actor):
        with pytest.raises(StaffDocsSecurityError) as exc_info:
            service.get_document(staff_actor, "d2")
        assert exc_info.value.required_level == 50

    def test_missing(self, service, admin_actor):
        with pytest.raises(StaffDocsRecordError):
            service.get_document(admin_actor, "nope")

    def test_can_view(self, service, manager_actor):
        doc = service.get_document(manager_actor, "d4")
        assert service.can_view(manager_actor, doc) is True


class TestFolderTree:

    def test_staff_tree(self, service, staff_actor):
        forest = service.folder_tree(staff_actor)
        assert _ids(forest) == ["f-payroll", "f-personal-u1"]
        assert forest[0].children[0].document_count == 1

    def test_counts_only_visible_documents(self, service, manager_actor):
        index = service.tree_index(manager_actor)
        assert index.get("f-payroll-2024").document_count == 2
        assert index.get("f-payroll-mgr").document_count == 1
        assert index.get("f-personal-u1").document_count == 1
        assert index.get("f-unassigned").document_count == 1
        assert index.get("f-admin") is None

    def test_breadcrumbs(self, service, manager_actor, staff_actor):
        assert _ids(service.breadcrumbs(manager_actor, "f-mgr-child")) == [
            "f-payroll", "f-payroll-mgr", "f-mgr-child",
        ]
        assert service.breadcrumbs(staff_actor, "f-mgr-child") == []


class TestRouting:

    def test_route_upload(self, service):
        decision = service.route_upload("randomfile.pdf")
        assert decision.target_folder_id == "f-unassigned"
        assert decision.inherited_min_role_level == 50

    def test_route_upload_root(self, service):
        decision = service.route_upload("randomfile.pdf", mode=RoutingMode.ROOT)
        assert decision.target_folder_id is None

    def test_router_uses_settings(self, snapshot):
        config = StaffDocsConfig(routing={"unassigned_system_type": "inbox"})
        service = DocumentService.from_config(snapshot, config)
        assert service.router().unassigned_folder is None


class TestManagement:

    def test_move_by_admin(self, service, admin_actor):
        moved = service.move_document(admin_actor, "d1", "f-payroll-mgr")
        assert moved.folder_id == "f-payroll-mgr"
        assert moved.min_role_level == 50

    def test_move_to_root(self, service, admin_actor):
        moved = service.move_document(admin_actor, "d7", None)
        assert moved.folder_id is None
        assert moved.min_role_level == 10

    def test_move_is_audited(self, service, admin_actor, audit_logger):
        service.move_document(admin_actor, "d1", "f-admin")
        entries = audit_logger.query("documents", "execution")
        assert entries[0]["event"] == "document_moved"
        assert entries[0]["from_folder_id"] == "f-payroll-2024"
        assert entries[0]["to_folder_id"] == "f-admin"
        assert entries[0]["min_role_level"] == 100

    def test_move_by_manager_denied(self, service, manager_actor):
        with pytest.raises(StaffDocsSecurityError):
            service.move_document(manager_actor, "d1", "f-payroll")

    def test_move_unknown_target(self, service, admin_actor):
        with pytest.raises(StaffDocsValidationError):
            service.move_document(admin_actor, "d1", "nope")

    def test_move_unknown_document(self, service, admin_actor):
        with pytest.raises(StaffDocsRecordError):
            service.move_document(admin_actor, "nope", None)

    def test_toggle_lock(self, service, admin_actor, staff_actor):
        assert service.toggle_lock(admin_actor, "d4").is_locked is False
        with pytest.raises(StaffDocsSecurityError):
            service.toggle_lock(staff_actor, "d1")

    def test_set_document_level(self, service, admin_actor):
        assert service.set_document_level(admin_actor, "d1", 70).min_role_level == 70
        with pytest.raises(StaffDocsValidationError):
            service.set_document_level(admin_actor, "d1", -5)

    def test_ensure_folder_deletable(self, service, admin_actor):
        assert service.ensure_folder_deletable(admin_actor, "f-payroll").id == "f-payroll"

    def test_system_folder_not_deletable(self, service, admin_actor):
        with pytest.raises(StaffDocsValidationError) as exc_info:
            service.ensure_folder_deletable(admin_actor, "f-unassigned")
        assert exc_info.value.field == "is_system"

    def test_folder_delete_requires_admin(self, service, manager_actor):
        with pytest.raises(StaffDocsSecurityError):
            service.ensure_folder_deletable(manager_actor, "f-payroll")

    def test_snapshot_not_mutated(self, service, admin_actor, staff_actor):
        service.move_document(admin_actor, "d1", "f-admin")
        assert _ids(service.visible_documents(staff_actor)) == ["d1"]


class TestConstruction:

    def test_from_config_custom_roles(self, snapshot):
        config = StaffDocsConfig(roles={
            "staff": {"level": 10, "label": "Staff"},
            "manager": {"level": 40, "label": "Lead"},
            "admin": {"level": 90, "label": "Owner"},
        })
        service = DocumentService.from_config(snapshot, config)
        assert service.roles.manager_level == 40
        lead = Actor(id="m2", role_level=40)
        assert "d3" in _ids(service.visible_documents(lead))

    def test_empty_snapshot(self, staff_actor):
        service = DocumentService(RepositorySnapshot())
        assert service.folder_tree(staff_actor) == []
        assert service.visible_documents(staff_actor) == []

    def test_repr(self, service):
        assert repr(service) == "<DocumentService folders=8 documents=7 staff=4>"
