"""
Apply a layout suggestion to node/edge collections.

Produces new collections; the inputs are never modified. Nodes the
suggestion does not mention come back with equal values.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Optional

from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.models import (
    DiagramEdge,
    DiagramNode,
    EdgeRouting,
    LayoutSuggestion,
    Point,
    Size,
)


def apply_suggestion(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    suggestion: LayoutSuggestion,
    config: Optional[OrganizerConfig] = None,
) -> tuple[list[DiagramNode], list[DiagramEdge]]:
    """Return (nodes, edges) with the suggestion's recipe applied.

    Positions are replaced, style overrides are merged over the existing
    style bag, and edge routing (when present) rewrites every edge's kind
    and offset. Applying the same suggestion twice gives the same result
    as applying it once.
    """
    cfg = config or DEFAULT_CONFIG
    impl = suggestion.implementation

    new_nodes: list[DiagramNode] = []
    for node in nodes:
        new_nodes.append(_apply_to_node(
            node,
            impl.node_positions.get(node.id),
            impl.style_changes.get(node.id),
        ))

    if impl.edge_routing is None:
        new_edges = [copy.deepcopy(e) for e in edges]
    else:
        new_edges = [_route_edge(e, impl.edge_routing, cfg) for e in edges]
    return new_nodes, new_edges


def _apply_to_node(
    node: DiagramNode,
    position: Optional[Point],
    style_change: Optional[dict[str, Any]],
) -> DiagramNode:
    updated = copy.deepcopy(node)
    if position is not None:
        updated.position = Point(position.x, position.y)
    if style_change:
        updated.style = {**updated.style, **copy.deepcopy(style_change)}
        width = style_change.get("width")
        height = style_change.get("height")
        if _is_number(width) and _is_number(height):
            updated.size = Size(float(width), float(height))
    return updated


def _route_edge(edge: DiagramEdge, routing: EdgeRouting, cfg: OrganizerConfig) -> DiagramEdge:
    offset = cfg.curved_edge_offset if routing.offset_strategy == "intelligent" else 0
    return dataclasses.replace(
        edge,
        kind="curved" if routing.style == "curved" else "straight",
        style=copy.deepcopy(edge.style),
        data={**copy.deepcopy(edge.data), "offset": offset},
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
