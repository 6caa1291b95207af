"""
staffdocs Folder Tree — Forest assembly, permission pruning and indexing.

Three canonical walks, shared by every caller:

- build_forest(): flat Folder records → FolderTreeNode forest
- filter_folders_by_permission(): structure-preserving prune for one actor
- TreeIndex.build(): id → node and id → ancestor chain (breadcrumbs)

Malformed input never hangs a walk:
- a parent_id that is not in the supplied set makes the folder a root
- folders on (or hanging below) a parent cycle raise StaffDocsIntegrityError
- a node id reached twice within one walk raises StaffDocsIntegrityError
- a node deeper than the number of nodes visited so far raises
  StaffDocsIntegrityError

Every walk uses an explicit stack, so folder depth is not limited by the
interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from staffdocs.documents.models import Actor, Document, Folder, FolderTreeNode
from staffdocs.engine.errors import StaffDocsIntegrityError
from staffdocs.engine.logging import log, log_integrity_fault
from staffdocs.security.roles import RoleTable, default_role_table
from staffdocs.security.visibility import can_view_folder

logger = logging.getLogger("staffdocs.documents.tree")


def _integrity_fault(message: str, folder_ids: Iterable[str]) -> StaffDocsIntegrityError:
    ids = sorted(set(folder_ids))
    log(log_integrity_fault(message, ids))
    logger.error(f"{message}: {ids}")
    return StaffDocsIntegrityError(message, object_ref="folders", folder_ids=ids)


def _parent_graph(folders: List[Folder]) -> "nx.DiGraph":
    """child → parent edges for every folder whose parent is in the set."""
    known = {f.id for f in folders}
    graph = nx.DiGraph()
    graph.add_nodes_from(known)
    for f in folders:
        if f.parent_id is not None and f.parent_id in known:
            graph.add_edge(f.id, f.parent_id)
    return graph


def find_folder_cycles(folders: List[Folder]) -> List[List[str]]:
    """Every parent cycle among the flat records (empty for a valid forest)."""
    return [sorted(cycle) for cycle in nx.simple_cycles(_parent_graph(folders))]


def find_orphans(folders: List[Folder]) -> List[Folder]:
    """Folders whose parent_id points outside the supplied set."""
    known = {f.id for f in folders}
    return [f for f in folders if f.parent_id is not None and f.parent_id not in known]


# ---------------------------------------------------------------------------
# Forest assembly
# ---------------------------------------------------------------------------

def build_forest(
    folders: List[Folder],
    documents: Optional[List[Document]] = None,
) -> List[FolderTreeNode]:
    """
    Assemble the folder forest from flat records.

    Children keep input order. document_count counts the supplied documents
    whose folder_id is the node itself (not its descendants).

    Raises:
        StaffDocsIntegrityError: duplicate folder ids, or parent cycles.
    """
    id_counts = Counter(f.id for f in folders)
    duplicates = [fid for fid, n in id_counts.items() if n > 1]
    if duplicates:
        raise _integrity_fault("Duplicate folder ids in snapshot", duplicates)

    known = set(id_counts)
    doc_counts = Counter(d.folder_id for d in documents or [] if d.folder_id is not None)

    children_of: Dict[str, List[Folder]] = {}
    roots: List[Folder] = []
    for folder in folders:
        if folder.parent_id is None:
            roots.append(folder)
        elif folder.parent_id not in known:
            logger.debug(f"Folder {folder.id} has unknown parent {folder.parent_id}; treating as root")
            roots.append(folder)
        else:
            children_of.setdefault(folder.parent_id, []).append(folder)

    # Pre-order placement, then nodes are built children-first in reverse.
    order: List[Folder] = []
    placed: Set[str] = set()
    stack: List[Folder] = list(reversed(roots))
    while stack:
        folder = stack.pop()
        placed.add(folder.id)
        order.append(folder)
        stack.extend(reversed(children_of.get(folder.id, [])))

    built: Dict[str, FolderTreeNode] = {}
    for folder in reversed(order):
        built[folder.id] = FolderTreeNode(
            **folder.model_dump(exclude={"children", "document_count"}),
            children=[built[child.id] for child in children_of.get(folder.id, [])],
            document_count=doc_counts.get(folder.id, 0),
        )
    forest = [built[root.id] for root in roots]

    if len(placed) != len(known):
        unreachable = [f for f in folders if f.id not in placed]
        graph = _parent_graph(unreachable)
        try:
            cycle = [edge[0] for edge in nx.find_cycle(graph)]
        except nx.NetworkXNoCycle:
            cycle = [f.id for f in unreachable]
        raise _integrity_fault("Folder parent cycle detected", cycle)

    return forest


# ---------------------------------------------------------------------------
# Permission filter
# ---------------------------------------------------------------------------

def _visit(node: FolderTreeNode, seen: Set[str], depth: int = 0) -> None:
    """
    Record a node for this walk. A repeated id, or a depth deeper than the
    number of nodes visited so far, means the forest is not a forest.
    """
    if node.id in seen:
        raise _integrity_fault("Folder reached twice while walking the tree", [node.id])
    if depth > len(seen):
        raise _integrity_fault("Folder nested deeper than the folders visited", [node.id])
    seen.add(node.id)


def filter_folders_by_permission(
    forest: List[FolderTreeNode],
    actor: Actor,
    roles: RoleTable = default_role_table,
) -> List[FolderTreeNode]:
    """
    Prune ``forest`` to what ``actor`` may see.

    A denied folder drops its whole subtree, even children that would pass
    on their own. Kept nodes are fresh copies whose children are the
    filtered original children, in the original order. The input is not
    modified, and filtering twice with the same actor changes nothing.
    """
    seen: Set[str] = set()
    visible: List[FolderTreeNode] = []

    stack: List[Tuple[FolderTreeNode, int]] = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        _visit(node, seen, depth)
        if not can_view_folder(actor, node, roles):
            logger.debug(f"Pruned folder {node.id} for actor {actor.id}")
            continue
        visible.append(node)
        stack.extend((child, depth + 1) for child in reversed(node.children))

    # Copies are made children-first so each parent can take its kept children.
    kept: Dict[str, FolderTreeNode] = {}
    for node in reversed(visible):
        kept[node.id] = node.model_copy(update={
            "children": [kept[c.id] for c in node.children if c.id in kept],
        })
    return [kept[node.id] for node in forest if node.id in kept]


def flatten_forest(forest: List[FolderTreeNode]) -> List[Tuple[FolderTreeNode, int]]:
    """Pre-order (node, depth) listing, e.g. for a move-target picker."""
    result: List[Tuple[FolderTreeNode, int]] = []
    seen: Set[str] = set()

    stack: List[Tuple[FolderTreeNode, int]] = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        _visit(node, seen, depth)
        result.append((node, depth))
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return result


# ---------------------------------------------------------------------------
# Tree index
# ---------------------------------------------------------------------------

class TreeIndex:
    """
    O(1) lookups over one (usually filtered) forest.

    Rebuilt from scratch whenever the forest changes; there is no partial
    invalidation.
    """

    def __init__(
        self,
        roots: List[FolderTreeNode],
        by_id: Dict[str, FolderTreeNode],
        ancestor_chain: Dict[str, List[FolderTreeNode]],
    ):
        self._roots = roots
        self._by_id = by_id
        self._ancestor_chain = ancestor_chain

    @classmethod
    def build(cls, forest: List[FolderTreeNode]) -> "TreeIndex":
        """Index ``forest`` in a single pre-order traversal."""
        by_id: Dict[str, FolderTreeNode] = {}
        chains: Dict[str, List[FolderTreeNode]] = {}
        seen: Set[str] = set()

        stack: List[Tuple[FolderTreeNode, List[FolderTreeNode]]] = [
            (node, []) for node in reversed(forest)
        ]
        while stack:
            node, parents = stack.pop()
            _visit(node, seen, len(parents))
            chain = parents + [node]
            by_id[node.id] = node
            chains[node.id] = chain
            for child in reversed(node.children):
                stack.append((child, chain))

        return cls(list(forest), by_id, chains)

    @property
    def roots(self) -> List[FolderTreeNode]:
        return list(self._roots)

    def get(self, folder_id: Optional[str]) -> Optional[FolderTreeNode]:
        if folder_id is None:
            return None
        return self._by_id.get(folder_id)

    def __contains__(self, folder_id: object) -> bool:
        return folder_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def breadcrumbs(self, folder_id: Optional[str]) -> List[FolderTreeNode]:
        """Root → folder chain (inclusive); empty when the folder is not indexed."""
        if folder_id is None:
            return []
        return list(self._ancestor_chain.get(folder_id, []))

    def descendant_ids(self, folder_id: str) -> List[str]:
        """Ids strictly below ``folder_id``, pre-order."""
        node = self._by_id.get(folder_id)
        if node is None:
            return []
        return [n.id for n, _ in flatten_forest(node.children)]

    def __repr__(self) -> str:
        return f"<TreeIndex roots={len(self._roots)} folders={len(self._by_id)}>"
