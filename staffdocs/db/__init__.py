"""
staffdocs Database — Reference SQLAlchemy adapter for snapshots and moves.

The resolver never imports this package; it only consumes the
RepositorySnapshot this adapter produces.
"""

from staffdocs.db.base import Base
from staffdocs.db.repository import SnapshotRepository, init_db

__all__ = ["Base", "SnapshotRepository", "init_db"]
