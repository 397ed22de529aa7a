# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category hierarchy builder for HomeFin.

The backend exposes cash-flow items (categories) through a "hierarchy"
endpoint whose response shape is not reliable. Depending on the backend
version it returns:

- a list of nodes, each possibly carrying its own ``children`` list,
- an object wrapping that list under ``items``, ``children`` or ``results``,
- a single node.

This module turns any of these shapes into one canonical structure: a
forest of ``CashFlowItemNode`` objects rooted at the items without a
(valid) parent.

Pipeline
--------
1. ``decode_hierarchy_payload``: decode the polymorphic response into a
   list of raw node dicts. This is the only place that knows about the
   wrapper shapes.
2. ``normalize_node``: map each raw node to a canonical node with
   defaults applied (placeholder name, None code / include_in_budget).
3. ``build_hierarchy``:
   - if any node already has non-empty ``children``, the listing is
     pre-nested and is returned as mapped (children mapped recursively),
   - otherwise the flat listing is linked by ``parent`` id.

Linking rules (flat listings)
-----------------------------
- a node whose parent exists in the listing is appended to that parent's
  children, in input order;
- a node without parent is a root;
- a node whose parent id is absent from the listing (dangling reference)
  is promoted to root instead of being dropped;
- a node referencing itself as parent is promoted to root as well;
- nodes caught in a longer parent cycle are not reachable from any root:
  the first of them (in input order) is detached from its parent and
  promoted to root, which breaks the cycle.

Every input node therefore appears exactly once in the output forest.
Nothing here performs I/O or raises on malformed input: unknown shapes
give an empty forest.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .models import _opt_str

DEFAULT_UNTITLED_LABEL = "Untitled"

WRAPPER_KEYS = ("items", "children", "results")


@dataclass
class CashFlowItemNode:
    """
    A cash-flow item with its materialized children.

    ``children`` contains exactly the nodes whose ``parent`` is this node's
    ``id`` (except for nodes promoted to root, see module docstring). Nodes
    are derived client-side and never sent back to the backend.
    """

    id: str
    name: str
    code: Optional[str] = None
    parent: Optional[str] = None
    include_in_budget: Optional[bool] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted: bool = False
    children: list["CashFlowItemNode"] = field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        """Return the node as a raw record, without ``children``."""
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "parent": self.parent,
            "include_in_budget": self.include_in_budget,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted": self.deleted,
        }


def decode_hierarchy_payload(payload: Any) -> list[Mapping[str, Any]]:
    """
    Decode the hierarchy endpoint response into a list of raw nodes.

    Rules (first match wins):

    - list           -> its mapping elements (other elements are ignored),
    - mapping with an ``id`` key -> a single node,
    - mapping with a list under ``items``, ``children`` or ``results``
      (checked in that order) -> the elements of that list,
    - anything else  -> empty list.
    """
    if isinstance(payload, list):
        return [node for node in payload if isinstance(node, Mapping)]

    if isinstance(payload, Mapping):
        if "id" in payload:
            return [payload]
        for key in WRAPPER_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return [node for node in value if isinstance(node, Mapping)]

    return []


def normalize_node(
    raw: Mapping[str, Any], untitled_label: str = DEFAULT_UNTITLED_LABEL
) -> CashFlowItemNode:
    """
    Map a raw node into a canonical CashFlowItemNode.

    Defaults: missing name -> ``untitled_label``; missing code or
    include_in_budget -> None; empty parent -> None. Nested ``children``
    (when present as a list) are normalized recursively.
    """
    include = raw.get("include_in_budget")
    raw_children = raw.get("children")
    children = []
    if isinstance(raw_children, list):
        children = [
            normalize_node(child, untitled_label)
            for child in raw_children
            if isinstance(child, Mapping)
        ]

    name = raw.get("name")
    return CashFlowItemNode(
        id=str(raw.get("id", "")),
        name=str(name) if name not in (None, "") else untitled_label,
        code=_opt_str(raw.get("code")),
        parent=_opt_str(raw.get("parent")),
        include_in_budget=None if include is None else bool(include),
        created_at=_opt_str(raw.get("created_at")),
        updated_at=_opt_str(raw.get("updated_at")),
        deleted=bool(raw.get("deleted")),
        children=children,
    )


def _link_flat(nodes: list[CashFlowItemNode]) -> list[CashFlowItemNode]:
    """Link a flat list of nodes into a forest (see module docstring)."""
    by_id: dict[str, CashFlowItemNode] = {}
    for node in nodes:
        node.children = []
        # Duplicate ids: the first occurrence receives the children.
        by_id.setdefault(node.id, node)

    roots: list[CashFlowItemNode] = []
    parent_of: dict[int, CashFlowItemNode] = {}
    for node in nodes:
        parent = by_id.get(node.parent) if node.parent is not None else None
        if parent is None or parent is node:
            roots.append(node)
            continue
        parent.children.append(node)
        parent_of[id(node)] = parent

    # Nodes trapped in parent cycles are unreachable from the roots.
    reached: set[int] = set()

    def _mark(start: CashFlowItemNode) -> None:
        stack = [start]
        while stack:
            current = stack.pop()
            if id(current) in reached:
                continue
            reached.add(id(current))
            stack.extend(current.children)

    for root in roots:
        _mark(root)

    for node in nodes:
        if id(node) in reached:
            continue
        parent = parent_of[id(node)]
        parent.children = [child for child in parent.children if child is not node]
        roots.append(node)
        _mark(node)

    return roots


def build_hierarchy(
    payload: Any, untitled_label: str = DEFAULT_UNTITLED_LABEL
) -> list[CashFlowItemNode]:
    """
    Build the category forest from a hierarchy endpoint response.

    Parameters
    ----------
    payload:
        Decoded JSON body: list of nodes, wrapper object or single node.
        Flat listings produced by ``flatten_hierarchy`` are accepted too.
    untitled_label:
        Name given to nodes without a name.

    Returns
    -------
    list[CashFlowItemNode]
        Root nodes, each transitively holding its descendants. Empty input
        (or an unknown shape) gives an empty list.
    """
    nodes = [
        normalize_node(raw, untitled_label) for raw in decode_hierarchy_payload(payload)
    ]

    if any(node.children for node in nodes):
        return nodes

    return _link_flat(nodes)


def iter_nodes(forest: Iterable[CashFlowItemNode]) -> Iterator[CashFlowItemNode]:
    """Yield every node of the forest in pre-order."""
    for node in forest:
        yield node
        yield from iter_nodes(node.children)


def iter_edges(
    forest: Iterable[CashFlowItemNode], parent_id: Optional[str] = None
) -> Iterator[tuple[str, Optional[str]]]:
    """
    Yield ``(node_id, parent_id)`` pairs as materialized by the tree.

    Roots yield ``parent_id=None`` whatever their ``parent`` field says.
    """
    for node in forest:
        yield node.id, parent_id
        yield from iter_edges(node.children, node.id)


def iter_with_depth(
    forest: Iterable[CashFlowItemNode], depth: int = 0
) -> Iterator[tuple[int, CashFlowItemNode]]:
    """Yield ``(depth, node)`` pairs in pre-order, roots at depth 0."""
    for node in forest:
        yield depth, node
        yield from iter_with_depth(node.children, depth + 1)


def flatten_hierarchy(forest: Iterable[CashFlowItemNode]) -> list[dict[str, Any]]:
    """
    Flatten a forest into raw records (pre-order, without ``children``).

    Children are recorded with the id of the node they hang under, so that
    pre-nested listings whose children lack a ``parent`` field survive the
    round trip. Feeding the result back into ``build_hierarchy`` rebuilds
    the same tree.
    """
    records: list[dict[str, Any]] = []

    def _walk(nodes: Iterable[CashFlowItemNode], parent_id: Optional[str]) -> None:
        for node in nodes:
            record = node.to_record()
            if parent_id is not None:
                record["parent"] = parent_id
            records.append(record)
            _walk(node.children, node.id)

    _walk(forest, None)
    return records
