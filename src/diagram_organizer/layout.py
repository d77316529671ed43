"""
Placement helpers that compute new node positions without touching nodes.

These back the spacing and grouping suggestions and the compact-grid
preset:
- Square grid in existing node order
- Per-kind clusters, each on its own small grid
"""

from __future__ import annotations

import math
from typing import Optional

from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.geometry import visible_nodes
from diagram_organizer.models import DiagramNode, Point


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

def grid_positions(
    nodes: list[DiagramNode],
    config: Optional[OrganizerConfig] = None,
) -> dict[str, Point]:
    """Lay visible nodes on a square grid in their existing order.

    The column count is ceil(sqrt(n)); cells are ``grid_cell`` apart and
    the grid starts at (``grid_margin``, ``grid_margin``).
    """
    cfg = config or DEFAULT_CONFIG
    visible = visible_nodes(nodes)
    if not visible:
        return {}
    columns = math.ceil(math.sqrt(len(visible)))
    positions: dict[str, Point] = {}
    for i, node in enumerate(visible):
        row = i // columns
        col = i % columns
        positions[node.id] = Point(
            col * cfg.grid_cell + cfg.grid_margin,
            row * cfg.grid_cell + cfg.grid_margin,
        )
    return positions


# ---------------------------------------------------------------------------
# Clusters
# ---------------------------------------------------------------------------

def group_by_kind(nodes: list[DiagramNode]) -> dict[str, list[str]]:
    """Kinds shared by two or more visible nodes, in first-seen order."""
    by_kind: dict[str, list[str]] = {}
    for node in visible_nodes(nodes):
        by_kind.setdefault(node.kind or "default", []).append(node.id)
    return {kind: ids for kind, ids in by_kind.items() if len(ids) > 1}


def grouped_positions(
    groups: list[list[str]],
    config: Optional[OrganizerConfig] = None,
) -> dict[str, Point]:
    """Place each group on its own small grid, groups offset diagonally."""
    cfg = config or DEFAULT_CONFIG
    positions: dict[str, Point] = {}
    for group_index, ids in enumerate(groups):
        base_x = group_index * cfg.group_offset_x
        base_y = group_index * cfg.group_offset_y
        for i, node_id in enumerate(ids):
            positions[node_id] = Point(
                base_x + (i % cfg.group_columns) * cfg.group_cell,
                base_y + (i // cfg.group_columns) * cfg.group_cell,
            )
    return positions
