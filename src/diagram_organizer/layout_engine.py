"""
Automatic layered layout for node/edge collections.

Implements the Sugiyama framework (the algorithm behind Graphviz 'dot'),
used by the routing suggestion and the clear-flow preset:
- Cycle removal by reversing DFS back-edges
- Longest-path layer assignment
- Virtual nodes for edges spanning several layers
- Barycenter crossing reduction, multi-pass
- Coordinate assignment with per-rank centering

Only positions change. Group nodes and nodes of unknown size keep their
other fields; groups are returned exactly as given.
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Optional, Protocol

from diagram_organizer.models import DiagramEdge, DiagramNode, Point


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutOptions:
    """Options for the layered layout."""
    direction: str = "TB"          # TB, BT, LR, RL
    node_spacing: float = 40       # Space between nodes in the same rank
    rank_spacing: float = 60       # Space between ranks

    # Dimensions used when a node declares no size
    default_width: float = 180
    default_height: float = 60

    # Algorithm tuning
    barycenter_iterations: int = 4

    # Starting position
    start_x: float = 50
    start_y: float = 50


@dataclass
class LayoutResult:
    nodes: list[DiagramNode] = field(default_factory=list)


class AutoLayout(Protocol):
    """Signature of an automatic layout subroutine."""

    def __call__(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        options: LayoutOptions,
    ) -> LayoutResult: ...


# ---------------------------------------------------------------------------
# Sugiyama Layered Layout
# ---------------------------------------------------------------------------

@dataclass
class _Node:
    """Internal node representation for layout algorithms."""
    id: str
    width: float
    height: float
    rank: int = 0       # Layer assignment
    order: float = 0    # Position within layer
    x: float = 0
    y: float = 0
    is_virtual: bool = False  # Virtual nodes for long edges


def layout_graph(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Lay out visible nodes in ranks following edge direction.

    Steps:
    1. Cycle removal (reverse back-edges)
    2. Layer assignment (longest path)
    3. Virtual node insertion for long edges
    4. Crossing minimization (barycenter heuristic, multi-pass)
    5. Coordinate assignment

    Args:
        nodes: Current nodes; groups are passed through untouched.
        edges: Current edges; dangling edges and self-loops are ignored.
        options: Spacing and direction.

    Returns:
        LayoutResult holding a new list of nodes in the input order.
    """
    opts = options or LayoutOptions()

    # Collect nodes in input order so the result is deterministic
    order: list[str] = []
    work: dict[str, _Node] = {}
    for node in nodes:
        if not node.is_visible or node.id in work:
            continue
        w = node.size.width if node.size else opts.default_width
        h = node.size.height if node.size else opts.default_height
        work[node.id] = _Node(id=node.id, width=w, height=h)
        order.append(node.id)

    if not work:
        return LayoutResult(nodes=[dataclasses.replace(n) for n in nodes])

    adj: dict[str, list[str]] = defaultdict(list)
    edge_list: list[tuple[str, str]] = []
    for edge in edges:
        s, t = edge.source, edge.target
        if s == t or s not in work or t not in work:
            continue
        if t not in adj[s]:
            adj[s].append(t)
            edge_list.append((s, t))

    # --- Step 1: Cycle removal ---
    back_edges = _find_back_edges(order, adj)
    effective_adj: dict[str, list[str]] = defaultdict(list)
    effective_rev: dict[str, list[str]] = defaultdict(list)
    for s, t in edge_list:
        if (s, t) in back_edges:
            s, t = t, s
        effective_adj[s].append(t)
        effective_rev[t].append(s)

    # --- Step 2: Layer assignment (longest path from sources) ---
    ranks = _assign_ranks_longest_path(order, effective_adj, effective_rev)
    for node_id, rank in ranks.items():
        work[node_id].rank = rank

    # --- Step 3: Virtual nodes for long edges ---
    virtual_count = 0
    expanded: list[tuple[str, str]] = []
    for s in order:
        for t in effective_adj.get(s, []):
            span = ranks[t] - ranks[s]
            if span <= 1:
                expanded.append((s, t))
                continue
            prev = s
            for r in range(ranks[s] + 1, ranks[t]):
                vname = f"__virtual_{virtual_count}"
                virtual_count += 1
                work[vname] = _Node(id=vname, width=1, height=1, rank=r, is_virtual=True)
                expanded.append((prev, vname))
                prev = vname
            expanded.append((prev, t))

    # --- Step 4: Crossing minimization ---
    by_rank: dict[int, list[str]] = defaultdict(list)
    for node_id, node in work.items():
        by_rank[node.rank].append(node_id)

    exp_adj: dict[str, list[str]] = defaultdict(list)
    exp_rev: dict[str, list[str]] = defaultdict(list)
    for s, t in expanded:
        exp_adj[s].append(t)
        exp_rev[t].append(s)

    max_rank = max(by_rank)
    for rank_nodes in by_rank.values():
        for i, node_id in enumerate(rank_nodes):
            work[node_id].order = float(i)

    for _ in range(opts.barycenter_iterations):
        for r in range(1, max_rank + 1):
            _barycenter_sort(by_rank[r], work, exp_rev)
        for r in range(max_rank - 1, -1, -1):
            _barycenter_sort(by_rank[r], work, exp_adj)

    # --- Step 5: Coordinate assignment ---
    _assign_coordinates(by_rank, work, opts)

    laid_out: list[DiagramNode] = []
    for node in nodes:
        placed = work.get(node.id)
        if node.is_visible and placed is not None:
            laid_out.append(dataclasses.replace(node, position=Point(placed.x, placed.y)))
        else:
            laid_out.append(dataclasses.replace(node))
    return LayoutResult(nodes=laid_out)


def _find_back_edges(
    all_nodes: list[str],
    adj: dict[str, list[str]],
) -> set[tuple[str, str]]:
    """Find back-edges in a directed graph using iterative DFS."""
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {n: WHITE for n in all_nodes}
    back_edges: set[tuple[str, str]] = set()

    for start in all_nodes:
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        stack: list[tuple[str, int]] = [(start, 0)]
        while stack:
            u, idx = stack[-1]
            neighbors = adj.get(u, [])
            if idx < len(neighbors):
                stack[-1] = (u, idx + 1)
                v = neighbors[idx]
                if color[v] == GRAY:
                    back_edges.add((u, v))
                elif color[v] == WHITE:
                    color[v] = GRAY
                    stack.append((v, 0))
            else:
                color[u] = BLACK
                stack.pop()

    return back_edges


def _assign_ranks_longest_path(
    all_nodes: list[str],
    adj: dict[str, list[str]],
    rev_adj: dict[str, list[str]],
) -> dict[str, int]:
    """Assign ranks using longest path from sources (graph must be acyclic)."""
    ranks: dict[str, int] = {}
    sources = [n for n in all_nodes if not rev_adj.get(n)]

    queue = deque(sources)
    for s in sources:
        ranks[s] = 0

    while queue:
        node = queue.popleft()
        for child in adj.get(node, []):
            new_rank = ranks[node] + 1
            if child not in ranks or ranks[child] < new_rank:
                ranks[child] = new_rank
                queue.append(child)

    for n in all_nodes:
        ranks.setdefault(n, 0)
    return ranks


def _barycenter_sort(
    rank_nodes: list[str],
    nodes: dict[str, _Node],
    neighbor_adj: dict[str, list[str]],
) -> None:
    """Sort nodes in a rank by barycenter of their neighbors."""
    barycenters: dict[str, float] = {}
    for node_id in rank_nodes:
        neighbor_orders = [nodes[n].order for n in neighbor_adj.get(node_id, [])]
        if neighbor_orders:
            barycenters[node_id] = sum(neighbor_orders) / len(neighbor_orders)
        else:
            barycenters[node_id] = nodes[node_id].order

    # Stable sort: ties keep their current order
    rank_nodes.sort(key=lambda n: barycenters[n])
    for i, node_id in enumerate(rank_nodes):
        nodes[node_id].order = float(i)


def _assign_coordinates(
    by_rank: dict[int, list[str]],
    nodes: dict[str, _Node],
    opts: LayoutOptions,
) -> None:
    """Assign x, y coordinates based on rank and order."""
    vertical = opts.direction in ("TB", "BT")

    def extent(node_id: str) -> float:
        node = nodes[node_id]
        return node.width if vertical else node.height

    # Widest rank, for centering the others
    max_rank_extent = 0.0
    for rank_nodes in by_rank.values():
        real = [n for n in rank_nodes if not nodes[n].is_virtual]
        if real:
            total = sum(extent(n) for n in real) + (len(real) - 1) * opts.node_spacing
            max_rank_extent = max(max_rank_extent, total)

    # Cumulative offsets so all nodes in a rank share a baseline
    rank_offsets: dict[int, float] = {}
    reverse = opts.direction in ("BT", "RL")
    cumulative = opts.start_y if vertical else opts.start_x
    for r in sorted(by_rank, reverse=reverse):
        rank_offsets[r] = cumulative
        real = [nodes[n] for n in by_rank[r] if not nodes[n].is_virtual]
        if vertical:
            depth = max((n.height for n in real), default=opts.default_height)
        else:
            depth = max((n.width for n in real), default=opts.default_width)
        cumulative += depth + opts.rank_spacing

    for rank, rank_nodes in by_rank.items():
        real = [n for n in rank_nodes if not nodes[n].is_virtual]
        total = sum(extent(n) for n in real) + max(len(real) - 1, 0) * opts.node_spacing
        start = (opts.start_x if vertical else opts.start_y) + (max_rank_extent - total) / 2
        cursor = start
        for node_id in rank_nodes:
            node = nodes[node_id]
            if vertical:
                node.x, node.y = cursor, rank_offsets[rank]
            else:
                node.x, node.y = rank_offsets[rank], cursor
            if not node.is_virtual:
                cursor += extent(node_id) + opts.node_spacing
