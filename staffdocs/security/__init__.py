"""
staffdocs Security — role hierarchy and visibility predicates.

The predicates live in ``staffdocs.security.visibility``; they are not
re-exported here because they depend on the record models.
"""

from staffdocs.security.roles import (
    ADMIN_LEVEL,
    MANAGER_LEVEL,
    STAFF_LEVEL,
    Role,
    RoleName,
    RoleTable,
    default_role_table,
    has_permission,
)

__all__ = [
    "ADMIN_LEVEL",
    "MANAGER_LEVEL",
    "STAFF_LEVEL",
    "Role",
    "RoleName",
    "RoleTable",
    "default_role_table",
    "has_permission",
]
