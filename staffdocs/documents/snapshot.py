"""
staffdocs Snapshot Files — Load a RepositorySnapshot from YAML or JSON.

Layout:

    folders:
      - {id: f-root, name: Payroll, min_role_level: 10}
    documents:
      - {id: d1, file_name: Yamada_Payslip.pdf, staff_name: Yamada, staff_id: u1, folder_id: f-root}
    staff:
      - {id: u1, name: Yamada}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from staffdocs.documents.models import RepositorySnapshot
from staffdocs.engine.errors import StaffDocsValidationError

logger = logging.getLogger("staffdocs.documents.snapshot")


def load_snapshot_file(path: Union[str, Path]) -> RepositorySnapshot:
    """
    Read and validate a snapshot file (``.json`` or YAML).

    Raises:
        FileNotFoundError: the file does not exist.
        StaffDocsValidationError: unparsable content or invalid records.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise StaffDocsValidationError(
                f"Could not parse snapshot {path}: {e}", object_ref=str(path)
            ) from e

    raw = raw or {}
    if not isinstance(raw, dict):
        raise StaffDocsValidationError(
            f"Snapshot {path} must contain a mapping at the top level", object_ref=str(path)
        )

    try:
        snapshot = RepositorySnapshot(**raw)
    except ValidationError as e:
        raise StaffDocsValidationError(
            f"Invalid snapshot {path}: {e}",
            object_ref=str(path),
            validation_errors=e.errors(),
        ) from e

    logger.debug(
        f"Loaded snapshot {path}: {len(snapshot.folders)} folders, "
        f"{len(snapshot.documents)} documents, {len(snapshot.staff)} staff"
    )
    return snapshot
