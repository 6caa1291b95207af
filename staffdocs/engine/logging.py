"""
staffdocs Audit Logging — Structured JSON-lines audit trail.

Implements:
- LogEntry: one structured record bound to an object type + category
- FileLogger: per-object-type, per-category files with daily rotation
- Entry builders for access denials, routing decisions, moves, integrity faults
- A module-level logger that callers opt into with init_logging()

Files: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

The resolver itself never requires logging to be initialized: log() is a
no-op until init_logging() has been called.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("staffdocs.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "documents": ["execution", "security"],
    "folders": ["execution", "security"],
    "routing": ["execution"],
    "system": ["execution", "security"],
}


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.
    Files rotate daily: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = ".staffdocs/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        self.write_batch([entry])

    def write_batch(self, entries: List[LogEntry]) -> None:
        """Write several entries, grouping by file path."""
        grouped: Dict[str, List[LogEntry]] = defaultdict(list)
        for entry in entries:
            file_path = str(self._resolve_path(entry.object_type, entry.category))
            grouped[file_path].append(entry)

        for file_path, batch in grouped.items():
            with self._file_locks[file_path]:
                with open(file_path, "a", encoding="utf-8") as f:
                    for entry in batch:
                        f.write(entry.to_json())
                        f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        if object_type not in OBJECT_TYPE_CATEGORIES:
            object_type = "system"
        if category not in OBJECT_TYPE_CATEGORIES[object_type]:
            category = "execution"
        today = date.today().isoformat()
        return self._log_dir / object_type / category / f"{today}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        object_type: str,
        category: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Read entries back, newest file first.

        Args:
            object_type: e.g. "documents", "routing".
            category: "execution" or "security".
            start_date: Earliest date to include (defaults to 7 days ago).
            end_date: Latest date to include (defaults to today).
            filters: Exact-match key/value pairs on top-level entry keys.
            limit: Max number of entries to return.
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date - timedelta(days=7)

        log_base = self._log_dir / object_type / category
        if not log_base.exists():
            return []

        results: List[Dict[str, Any]] = []
        current = end_date
        while current >= start_date and len(results) < limit:
            file_path = log_base / f"{current.isoformat()}.jsonl"
            if file_path.exists():
                results.extend(self._read_jsonl(file_path, filters, limit - len(results)))
            current -= timedelta(days=1)
        return results[:limit]

    @staticmethod
    def _read_jsonl(
        path: Path,
        filters: Optional[Dict[str, Any]],
        remaining: int,
    ) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
                    if len(entries) >= remaining:
                        break
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(
    event: str,
    level: str,
    object_ref: str,
    actor_id: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "object_ref": object_ref,
    }
    if actor_id is not None:
        entry["actor_id"] = actor_id
    entry.update(extra)
    return entry


def log_access_denied(
    object_type: str,
    object_id: Optional[str],
    actor_id: str,
    role_level: int,
    operation: str,
    required_level: Optional[int] = None,
    reason: Optional[str] = None,
) -> LogEntry:
    """Build a security entry for a denied view / management operation."""
    data = _base_entry(
        event="access_denied",
        level="WARNING",
        object_ref=f"{object_type}:{object_id}" if object_id else object_type,
        actor_id=actor_id,
        role_level=role_level,
        operation=operation,
    )
    if required_level is not None:
        data["required_level"] = required_level
    if reason:
        data["reason"] = reason
    return LogEntry(object_type if object_type in OBJECT_TYPE_CATEGORIES else "system", "security", data)


def log_upload_routed(
    file_name: str,
    owner_candidate_name: str,
    resolved_staff_id: Optional[str],
    target_folder_id: Optional[str],
    inherited_min_role_level: int,
    mode: str,
) -> LogEntry:
    """Build an execution entry describing one routing decision."""
    data = _base_entry(
        event="upload_routed",
        level="INFO" if resolved_staff_id else "WARNING",
        object_ref=f"upload:{file_name}",
        owner_candidate_name=owner_candidate_name,
        resolved_staff_id=resolved_staff_id,
        target_folder_id=target_folder_id,
        inherited_min_role_level=inherited_min_role_level,
        mode=mode,
    )
    return LogEntry("routing", "execution", data)


def log_document_moved(
    document_id: Optional[str],
    actor_id: str,
    from_folder_id: Optional[str],
    to_folder_id: Optional[str],
    min_role_level: int,
) -> LogEntry:
    """Build an execution entry for a relocation (folder + inherited level)."""
    data = _base_entry(
        event="document_moved",
        level="INFO",
        object_ref=f"documents:{document_id}",
        actor_id=actor_id,
        from_folder_id=from_folder_id,
        to_folder_id=to_folder_id,
        min_role_level=min_role_level,
    )
    return LogEntry("documents", "execution", data)


def log_integrity_fault(message: str, folder_ids: List[str]) -> LogEntry:
    """Build a security entry for a malformed folder forest."""
    data = _base_entry(
        event="integrity_fault",
        level="ERROR",
        object_ref="folders",
        message=message,
        folder_ids=folder_ids,
    )
    return LogEntry("folders", "security", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event entry (startup, seeding, config changes)."""
    data = _base_entry(event=event, level=level, object_ref="system")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global Logger Singleton
# ---------------------------------------------------------------------------

_global_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = ".staffdocs/logs") -> FileLogger:
    """Initialize the global audit logger."""
    global _global_logger
    _global_logger = FileLogger(log_dir=log_dir)
    return _global_logger


def get_file_logger() -> Optional[FileLogger]:
    return _global_logger


def log(entry: LogEntry) -> bool:
    """
    Write an entry through the global audit logger.

    Returns:
        True if written, False if audit logging is not initialized.
    """
    if _global_logger is None:
        return False
    try:
        _global_logger.write(entry)
    except OSError as e:
        logger.error(f"Audit log write failed: {e}")
        return False
    return True


def shutdown_logging() -> None:
    """Detach the global audit logger."""
    global _global_logger
    _global_logger = None
