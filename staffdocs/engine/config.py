"""
staffdocs Configuration — Load and validate staffdocs.yaml.

Usage:
    from staffdocs.engine.config import load_config, get_config
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from staffdocs.engine.errors import StaffDocsConfigError

logger = logging.getLogger("staffdocs.engine.config")

CONFIG_FILENAME = "staffdocs.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for staffdocs.yaml
# ---------------------------------------------------------------------------

class RoleConfig(BaseModel):
    level: int
    label: str


class RolesConfig(BaseModel):
    staff: RoleConfig = RoleConfig(level=10, label="Staff")
    manager: RoleConfig = RoleConfig(level=50, label="Manager")
    admin: RoleConfig = RoleConfig(level=100, label="Administrator")

    @model_validator(mode="after")
    def validate_ordering(self) -> "RolesConfig":
        if not (self.staff.level < self.manager.level < self.admin.level):
            raise ValueError(
                "role levels must be strictly increasing staff < manager < admin, got "
                f"{self.staff.level}/{self.manager.level}/{self.admin.level}"
            )
        return self


class RoutingConfig(BaseModel):
    owner_delimiter: str = "_"
    unassigned_system_type: str = "unassigned"
    unassigned_label: str = "Unassigned"

    @field_validator("owner_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"owner_delimiter must be a single character, got '{v}'")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".staffdocs/logs"
    audit: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"logging level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return upper


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///staffdocs.db"
    echo: bool = False


class StaffDocsConfig(BaseModel):
    """Root model for staffdocs.yaml."""
    roles: RolesConfig = RolesConfig()
    routing: RoutingConfig = RoutingConfig()
    logging: LoggingConfig = LoggingConfig()
    database: DatabaseConfig = DatabaseConfig()


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[StaffDocsConfig] = None


def _find_config_file() -> Optional[Path]:
    """Walk up from the CWD looking for staffdocs.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Optional[str] = None) -> StaffDocsConfig:
    """
    Load and validate staffdocs.yaml.

    Args:
        config_path: Explicit path to the file. If None, auto-discovers.

    Returns:
        Validated StaffDocsConfig instance (defaults when no file exists).

    Raises:
        StaffDocsConfigError: unreadable YAML or a failed validation.
    """
    global _config

    path = Path(config_path) if config_path else _find_config_file()
    if path is None or not path.exists():
        _config = StaffDocsConfig()
        return _config

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise StaffDocsConfigError(
            f"Could not parse {path}: {e}", object_ref=str(path)
        ) from e

    if not isinstance(raw, dict):
        raise StaffDocsConfigError(
            f"{path} must contain a mapping at the top level", object_ref=str(path)
        )

    try:
        _config = StaffDocsConfig(**raw)
    except ValidationError as e:
        raise StaffDocsConfigError(
            f"Invalid configuration in {path}: {e}", object_ref=str(path)
        ) from e

    logger.debug(f"Loaded configuration from {path}")
    return _config


def get_config() -> StaffDocsConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached config (tests, reloads)."""
    global _config
    _config = None
