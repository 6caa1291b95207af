"""
staffdocs Error Hierarchy — Structured exceptions for the resolver.

Every error carries a free-form context dict and serializes to JSON so it
can be written to the audit log or returned by an API layer unchanged.

Hierarchy:
    StaffDocsError
    ├── StaffDocsSecurityError    — Actor denied access to a folder/document
    ├── StaffDocsIntegrityError   — Malformed folder forest (cycle, duplicate id)
    ├── StaffDocsValidationError  — Invalid caller input (unknown target folder, bad level)
    ├── StaffDocsRecordError      — Record lookup failed
    └── StaffDocsConfigError      — Invalid staffdocs.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class StaffDocsError(Exception):
    """
    Base error for all staffdocs failures.
    All context is kept on the instance and serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.object_ref: Optional[str] = context.get("object_ref")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "object_ref": self.object_ref,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k != "object_ref"
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.object_ref:
            parts.append(f"object_ref={self.object_ref}")
        return " | ".join(parts)


class StaffDocsSecurityError(StaffDocsError):
    """
    Access denied. Includes the acting identity, its role level and the
    level (if any) the target required.
    """

    def __init__(self, message: str, **context: Any):
        self.actor_id: Optional[str] = context.get("actor_id")
        self.role_level: Optional[int] = context.get("role_level")
        self.required_level: Optional[int] = context.get("required_level")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["actor_id"] = self.actor_id
        d["role_level"] = self.role_level
        d["required_level"] = self.required_level
        return d


class StaffDocsIntegrityError(StaffDocsError):
    """
    The supplied folder records do not form a forest.
    ``folder_ids`` lists the folders involved (cycle members or duplicates).
    """

    def __init__(self, message: str, **context: Any):
        self.folder_ids: List[str] = list(context.get("folder_ids") or [])
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["folder_ids"] = self.folder_ids
        return d


class StaffDocsValidationError(StaffDocsError):
    """Caller input rejected before it reaches persistence."""

    def __init__(self, message: str, **context: Any):
        self.field: Optional[str] = context.get("field")
        self.value: Any = context.get("value")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        return d


class StaffDocsRecordError(StaffDocsError):
    """Record lookup failed (unknown document / folder id)."""

    def __init__(self, message: str, **context: Any):
        self.record_type: Optional[str] = context.get("record_type")
        self.record_id: Optional[str] = context.get("record_id")
        self.operation: Optional[str] = context.get("operation")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["record_type"] = self.record_type
        d["record_id"] = self.record_id
        d["operation"] = self.operation
        return d


class StaffDocsConfigError(StaffDocsError):
    """Configuration error — invalid staffdocs.yaml."""
    pass
