"""
staffdocs CLI — Inspect a snapshot the way the resolver sees it.

Commands:
- staffdocs route   — Routing decisions for one or more upload filenames
- staffdocs tree    — Visible folder tree for an actor
- staffdocs docs    — Visible documents for an actor
- staffdocs check   — Folder integrity report (cycles, orphans)

All commands read a YAML/JSON snapshot (folders / documents / staff) and
the optional staffdocs.yaml for role levels and routing settings.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from staffdocs.documents.models import Actor, RoutingMode
from staffdocs.documents.service import DocumentService
from staffdocs.documents.snapshot import load_snapshot_file
from staffdocs.documents.tree import find_folder_cycles, find_orphans, flatten_forest
from staffdocs.engine.config import load_config
from staffdocs.engine.errors import StaffDocsError
from staffdocs.engine.logging import init_logging

logger = logging.getLogger("staffdocs.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="staffdocs",
        description="staffdocs — staff document visibility & routing resolver",
    )
    parser.add_argument("--config", help="Path to staffdocs.yaml (default: auto-discover)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # staffdocs route
    route_parser = subparsers.add_parser("route", help="Route upload filenames")
    route_parser.add_argument("files", nargs="+", help="Upload filenames")
    route_parser.add_argument("--snapshot", required=True, help="Snapshot file (YAML or JSON)")
    target = route_parser.add_mutually_exclusive_group()
    target.add_argument("--folder", help="Explicit destination folder id")
    target.add_argument("--root", action="store_true", help="Place at the root (no folder)")

    # staffdocs tree / docs
    for name, help_text in (("tree", "Show the visible folder tree"), ("docs", "List visible documents")):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--snapshot", required=True, help="Snapshot file (YAML or JSON)")
        p.add_argument("--actor-id", required=True, help="Acting identity id")
        p.add_argument("--level", type=int, required=True, help="Actor role level")
        if name == "docs":
            p.add_argument("--folder", help="Only documents directly in this folder")
            p.add_argument("--search", help="Case-insensitive file/staff name filter")

    # staffdocs check
    check_parser = subparsers.add_parser("check", help="Check folder integrity")
    check_parser.add_argument("--snapshot", required=True, help="Snapshot file (YAML or JSON)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
        logging.basicConfig(level=config.logging.level, format="%(levelname)s %(name)s: %(message)s")
        if config.logging.audit:
            init_logging(config.logging.directory)
        snapshot = load_snapshot_file(args.snapshot)
        service = DocumentService.from_config(snapshot, config)

        if args.command == "route":
            return cmd_route(service, args)
        elif args.command == "tree":
            return cmd_tree(service, args)
        elif args.command == "docs":
            return cmd_docs(service, args)
        elif args.command == "check":
            return cmd_check(snapshot, args)
    except (StaffDocsError, FileNotFoundError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


def cmd_route(service: DocumentService, args: argparse.Namespace) -> int:
    """Print one JSON decision per filename."""
    mode = RoutingMode.ROOT if args.root else RoutingMode.AUTO
    router = service.router()
    decisions = router.route_many(args.files, explicit_folder_id=args.folder, mode=mode)
    print(json.dumps([d.model_dump(mode="json") for d in decisions], indent=2, ensure_ascii=False))
    return 0


def cmd_tree(service: DocumentService, args: argparse.Namespace) -> int:
    actor = Actor(id=args.actor_id, role_level=args.level)
    forest = service.folder_tree(actor)
    if not forest:
        print("(no visible folders)")
        return 0
    for node, depth in flatten_forest(forest):
        badge = service.roles.label_for_level(node.min_role_level)
        extras = []
        if node.document_count:
            extras.append(f"{node.document_count} docs")
        if node.owner_staff_id:
            extras.append(f"owner={node.owner_staff_id}")
        if badge:
            extras.append(badge)
        suffix = f"  ({', '.join(extras)})" if extras else ""
        print(f"{'  ' * depth}{node.name or node.id} [{node.id}]{suffix}")
    return 0


def cmd_docs(service: DocumentService, args: argparse.Namespace) -> int:
    actor = Actor(id=args.actor_id, role_level=args.level)
    docs = service.visible_documents(actor, folder_id=args.folder, search=args.search)
    for doc in docs:
        lock = " [locked]" if doc.is_locked else ""
        print(f"{doc.id}\t{doc.file_name}\t{doc.staff_name}\t{doc.folder_id or '-'}{lock}")
    print(f"{len(docs)} document(s)")
    return 0


def cmd_check(snapshot, args: argparse.Namespace) -> int:
    """Report cycles (fatal) and orphans (treated as roots)."""
    cycles = find_folder_cycles(snapshot.folders)
    orphans = find_orphans(snapshot.folders)

    for folder in orphans:
        print(f"⚠ orphan folder {folder.id}: parent {folder.parent_id} not found (shown as root)")
    for cycle in cycles:
        print(f"✗ parent cycle among folders: {', '.join(cycle)}")

    if cycles:
        return 1
    print(f"✓ {len(snapshot.folders)} folders OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
