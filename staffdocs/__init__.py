"""
staffdocs — Staff document repository visibility & routing resolver.

The resolver is pure: callers hand it snapshots (folders, documents, staff
directory) plus an acting identity, and it returns derived views:

    - which folders / documents the actor may see
    - the pruned folder tree and its id / breadcrumb index
    - where an uploaded file should land and at which role level

Persistence, authentication and file transport stay with the caller.
"""

__version__ = "1.0.0"
__all__ = ["engine", "security", "documents", "db"]
