"""Unit tests for staffdocs.engine.errors — Error hierarchy & serialization."""

import json

import pytest

from staffdocs.engine.errors import (
    StaffDocsConfigError,
    StaffDocsError,
    StaffDocsIntegrityError,
    StaffDocsRecordError,
    StaffDocsSecurityError,
    StaffDocsValidationError,
)


class TestStaffDocsError:
    """Base error class tests."""

    def test_basic_creation(self):
        err = StaffDocsError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "StaffDocsError"
        assert err.object_ref is None
        assert err.context == {}

    def test_context_kept(self):
        err = StaffDocsError("fail", object_ref="documents:d1", operation="move")
        assert err.object_ref == "documents:d1"
        assert err.context["operation"] == "move"

    def test_to_dict(self):
        d = StaffDocsError("fail", object_ref="folders:f1", extra=42).to_dict()
        assert d["error_type"] == "StaffDocsError"
        assert d["message"] == "fail"
        assert d["object_ref"] == "folders:f1"
        assert d["context"] == {"extra": "42"}
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(StaffDocsError("fail").to_json())
        assert parsed["message"] == "fail"

    def test_repr(self):
        assert repr(StaffDocsError("fail", object_ref="x")) == "StaffDocsError: fail | object_ref=x"
        assert repr(StaffDocsError("fail")) == "StaffDocsError: fail"


class TestSubclasses:

    @pytest.mark.parametrize("cls", [
        StaffDocsSecurityError,
        StaffDocsIntegrityError,
        StaffDocsValidationError,
        StaffDocsRecordError,
        StaffDocsConfigError,
    ])
    def test_hierarchy(self, cls):
        err = cls("x")
        assert isinstance(err, StaffDocsError)
        assert err.error_type == cls.__name__

    def test_security_fields(self):
        err = StaffDocsSecurityError("denied", actor_id="u1", role_level=10, required_level=50)
        d = err.to_dict()
        assert (d["actor_id"], d["role_level"], d["required_level"]) == ("u1", 10, 50)

    def test_integrity_folder_ids(self):
        err = StaffDocsIntegrityError("cycle", folder_ids=("a", "b"))
        assert err.folder_ids == ["a", "b"]
        assert err.to_dict()["folder_ids"] == ["a", "b"]

    def test_integrity_without_ids(self):
        assert StaffDocsIntegrityError("cycle").folder_ids == []

    def test_validation_fields(self):
        err = StaffDocsValidationError("bad", field="folder_id", value="nope")
        assert err.value == "nope"
        assert err.to_dict()["field"] == "folder_id"

    def test_record_fields(self):
        err = StaffDocsRecordError("missing", record_type="document", record_id="d9", operation="get")
        d = err.to_dict()
        assert (d["record_type"], d["record_id"], d["operation"]) == ("document", "d9", "get")

    def test_json_serializable(self):
        err = StaffDocsSecurityError("denied", actor_id="u1", role_level=10)
        assert json.loads(err.to_json())["actor_id"] == "u1"
