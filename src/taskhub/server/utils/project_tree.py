"""
Builds and filters the project parent/child hierarchy.
"""

from typing import Callable, Dict, List, Optional

ProjectNode = Dict


def build_project_tree(projects: List[dict]) -> List[ProjectNode]:
    """
    Arrange flat project dicts into a forest.

    A project whose parent is missing from the input becomes a root.
    Siblings are ordered by ``created_at``.
    """
    nodes: Dict[str, ProjectNode] = {p["id"]: {**p, "children": []} for p in projects}
    roots: List[ProjectNode] = []

    for node in nodes.values():
        parent_id = node.get("parent_id")
        parent = nodes.get(parent_id) if parent_id and parent_id != node["id"] else None
        if parent is not None:
            parent["children"].append(node)
        else:
            roots.append(node)

    _sort_by_created_at(roots)
    return roots


def _sort_by_created_at(nodes: List[ProjectNode]) -> None:
    nodes.sort(key=lambda n: n.get("created_at") or 0)
    for node in nodes:
        _sort_by_created_at(node["children"])


def prune_project_tree(
    roots: List[ProjectNode], predicate: Callable[[ProjectNode], bool]
) -> List[ProjectNode]:
    """Keep nodes that match the predicate or have a matching descendant."""
    kept: List[ProjectNode] = []
    for node in roots:
        children = prune_project_tree(node["children"], predicate)
        if predicate(node) or children:
            kept.append({**node, "children": children})
    return kept


def make_project_filter(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
) -> Optional[Callable[[ProjectNode], bool]]:
    """Build a node predicate from tree filters, or None when no filter is active."""
    if not (status or priority or search):
        return None
    needle = search.lower() if search else None

    def predicate(node: ProjectNode) -> bool:
        if status and node.get("status") != status:
            return False
        if priority and node.get("priority") != priority:
            return False
        if needle:
            haystack = f"{node.get('name') or ''} {node.get('description') or ''}".lower()
            if needle not in haystack:
                return False
        return True

    return predicate
