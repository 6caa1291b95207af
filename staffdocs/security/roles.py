"""
staffdocs Role Model — Ordered role tiers compared by numeric level.

Three canonical tiers are used by the visibility shortcuts:

    staff   = 10   (base tier — own documents only)
    manager = 50   (sees every folder/document whose floor it clears)
    admin   = 100  (total override, including locked documents)

Folder and document floors are stored as raw integers, so the level space is
open: a folder may require 30 and a custom role may sit at 70. All checks are
"at least" comparisons; equality grants access.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("staffdocs.security.roles")

STAFF_LEVEL = 10
MANAGER_LEVEL = 50
ADMIN_LEVEL = 100


class RoleName(str, Enum):
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"


class Role(BaseModel):
    """Static reference data — one row of the roles table."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, description="Primary key in the roles table")
    name: str = Field(description="Role name (staff / manager / admin or custom)")
    label: str = Field(description="Human-readable label")
    level: int = Field(description="Privilege rank; higher is more privileged")


def has_permission(role_level: int, required_level: int) -> bool:
    """True when ``role_level`` clears ``required_level``."""
    return role_level >= required_level


class RoleTable:
    """
    Lookup over the canonical tiers plus any custom roles.

    The canonical three must always be present; they drive the tier
    shortcuts in the visibility predicate.
    """

    def __init__(self, roles: List[Role]):
        self._by_name: Dict[str, Role] = {r.name: r for r in roles}
        missing = [n.value for n in RoleName if n.value not in self._by_name]
        if missing:
            raise ValueError(f"RoleTable is missing canonical roles: {missing}")
        self._roles = sorted(roles, key=lambda r: r.level)

    @classmethod
    def from_config(cls, roles_config) -> "RoleTable":
        """Build from a ``RolesConfig`` (the ``roles:`` section of staffdocs.yaml)."""
        return cls([
            Role(name=RoleName.STAFF.value, label=roles_config.staff.label, level=roles_config.staff.level),
            Role(name=RoleName.MANAGER.value, label=roles_config.manager.label, level=roles_config.manager.level),
            Role(name=RoleName.ADMIN.value, label=roles_config.admin.label, level=roles_config.admin.level),
        ])

    def level(self, role: Union[Role, RoleName, str, int]) -> int:
        """Numeric level of a role, role name or raw level."""
        if isinstance(role, Role):
            return role.level
        if isinstance(role, bool):
            raise TypeError("role level cannot be a bool")
        if isinstance(role, int):
            return role
        name = role.value if isinstance(role, RoleName) else role
        if name not in self._by_name:
            raise KeyError(f"Unknown role '{name}'. Known: {list(self._by_name)}")
        return self._by_name[name].level

    def get(self, name: str) -> Optional[Role]:
        return self._by_name.get(name)

    @property
    def roles(self) -> List[Role]:
        """All roles ordered by level, lowest first."""
        return list(self._roles)

    @property
    def base_level(self) -> int:
        return self._by_name[RoleName.STAFF.value].level

    @property
    def manager_level(self) -> int:
        return self._by_name[RoleName.MANAGER.value].level

    @property
    def admin_level(self) -> int:
        return self._by_name[RoleName.ADMIN.value].level

    def is_admin(self, role_level: int) -> bool:
        return role_level >= self.admin_level

    def is_manager(self, role_level: int) -> bool:
        """Manager tier or above (admins included)."""
        return role_level >= self.manager_level

    def tier_of(self, role_level: int) -> RoleName:
        """
        Highest canonical tier a level clears.
        Levels below the base tier still map to the base tier.
        """
        if self.is_admin(role_level):
            return RoleName.ADMIN
        if self.is_manager(role_level):
            return RoleName.MANAGER
        return RoleName.STAFF

    def label_for_level(self, min_role_level: int) -> Optional[str]:
        """
        Badge text for a folder/document floor; None for base-tier floors.
        """
        if min_role_level >= self.admin_level:
            return f"{self._by_name[RoleName.ADMIN.value].label} only"
        if min_role_level >= self.manager_level:
            return f"{self._by_name[RoleName.MANAGER.value].label} and above"
        return None

    def __repr__(self) -> str:
        levels = ", ".join(f"{r.name}={r.level}" for r in self._roles)
        return f"<RoleTable {levels}>"


DEFAULT_ROLES = [
    Role(id=1, name=RoleName.STAFF.value, label="Staff", level=STAFF_LEVEL),
    Role(id=2, name=RoleName.MANAGER.value, label="Manager", level=MANAGER_LEVEL),
    Role(id=3, name=RoleName.ADMIN.value, label="Administrator", level=ADMIN_LEVEL),
]

# Global default table (canonical 10 / 50 / 100)
default_role_table = RoleTable(DEFAULT_ROLES)
