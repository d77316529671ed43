"""
Layout metrics calculator.

Derives the fixed set of quality measures from a node/edge collection.
Every function here is pure and total: empty or degenerate input yields
zeroed defaults, never an exception.
"""

from __future__ import annotations

from typing import Optional

from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.geometry import (
    bounding_box,
    distance,
    edge_segment,
    segments_intersect,
    visible_nodes,
)
from diagram_organizer.models import DiagramEdge, DiagramNode, LayoutMetrics, Point


def compute_metrics(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    config: Optional[OrganizerConfig] = None,
) -> LayoutMetrics:
    """Compute all layout metrics for the given collections."""
    cfg = config or DEFAULT_CONFIG
    crossings = count_edge_crossings(nodes, edges)
    density = node_density(nodes, cfg)
    return LayoutMetrics(
        node_count=len(visible_nodes(nodes)),
        edge_count=len(edges),
        edge_crossings=crossings,
        node_density=density,
        average_node_spacing=average_node_spacing(nodes),
        visual_complexity=visual_complexity(nodes, edges, cfg, crossings, density),
        aspect_ratio=aspect_ratio(nodes, cfg),
    )


def node_positions(nodes: list[DiagramNode]) -> dict[str, Point]:
    """Map node id → position; the first node wins on duplicate ids."""
    positions: dict[str, Point] = {}
    for node in nodes:
        positions.setdefault(node.id, node.position)
    return positions


def count_edge_crossings(nodes: list[DiagramNode], edges: list[DiagramEdge]) -> int:
    """Count pairwise intersections of straight source→target segments.

    Edges with an endpoint that names no node are skipped. Quadratic in
    the number of edges.
    """
    positions = node_positions(nodes)
    segments = [s for s in (edge_segment(e, positions) for e in edges) if s is not None]
    crossings = 0
    for i, (p1, p2) in enumerate(segments):
        for p3, p4 in segments[i + 1:]:
            if segments_intersect(p1, p2, p3, p4):
                crossings += 1
    return crossings


def node_density(nodes: list[DiagramNode], config: Optional[OrganizerConfig] = None) -> float:
    """Visible nodes per normalized area unit; 0 below two visible nodes.

    A zero-area box (all nodes on one line or point) is floored at one
    area unit so the result stays finite.
    """
    cfg = config or DEFAULT_CONFIG
    visible = visible_nodes(nodes)
    if len(visible) < 2:
        return 0.0
    area = max(bounding_box(visible, cfg).area, 1.0)
    return len(visible) / (area / cfg.density_scale)


def average_node_spacing(nodes: list[DiagramNode]) -> float:
    """Mean pairwise Euclidean distance among visible node positions."""
    visible = visible_nodes(nodes)
    if len(visible) < 2:
        return 0.0
    total = 0.0
    pairs = 0
    for i, a in enumerate(visible):
        for b in visible[i + 1:]:
            total += distance(a.position, b.position)
            pairs += 1
    return total / pairs


def visual_complexity(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    config: Optional[OrganizerConfig] = None,
    crossings: Optional[int] = None,
    density: Optional[float] = None,
) -> float:
    """Heuristic 0..100 clutter score.

    Weighted sum of crossings, density, distinct edge kinds and the node
    count above the allowance. The weights are a tuning choice.
    """
    cfg = config or DEFAULT_CONFIG
    if crossings is None:
        crossings = count_edge_crossings(nodes, edges)
    if density is None:
        density = node_density(nodes, cfg)
    edge_kinds = {e.kind or "default" for e in edges}
    excess = max(0, len(visible_nodes(nodes)) - cfg.node_allowance)

    score = (
        crossings * cfg.crossing_weight
        + density * cfg.density_weight
        + len(edge_kinds) * cfg.edge_kind_weight
        + excess * cfg.node_excess_weight
    )
    return float(min(cfg.complexity_cap, max(0.0, score)))


def aspect_ratio(nodes: list[DiagramNode], config: Optional[OrganizerConfig] = None) -> float:
    """Bounding-box width / height; 1 for a zero-height box."""
    bounds = bounding_box(nodes, config)
    if bounds.height == 0:
        return 1.0
    return bounds.width / bounds.height
