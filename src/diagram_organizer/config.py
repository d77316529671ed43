"""
Tuning table for the layout organizer.

Every threshold, weight and placement constant used by the metrics,
detectors and suggestion rules lives here. The values are policy chosen by
hand, not measured quantities; swap a config instance to retune them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class OrganizerConfig:
    """Configuration for layout analysis and suggestion generation."""
    # Metrics
    density_scale: float = 10000          # Area units per density unit
    default_bounds_width: float = 1000    # Box used when nothing is visible
    default_bounds_height: float = 800

    # Visual complexity weights (heuristic score, clamped to 0..100)
    crossing_weight: float = 10
    density_weight: float = 20
    edge_kind_weight: float = 5
    node_excess_weight: float = 2
    node_allowance: int = 10
    complexity_cap: float = 100

    # Issue thresholds
    crossing_issue: int = 5
    crossing_high: int = 10
    overlap_distance: float = 100
    overlap_high_count: int = 3
    spacing_issue: float = 80
    spacing_high: float = 50
    complexity_issue: float = 70
    complexity_high: float = 85
    aspect_max: float = 3
    aspect_min: float = 0.3

    # Strength thresholds
    strength_spacing: float = 120
    strength_complexity: float = 30
    strength_aspect_min: float = 0.8
    strength_aspect_max: float = 1.5
    strength_max_nodes: int = 8

    # Spacing rule
    spacing_trigger: float = 100
    grid_cell: float = 200
    grid_margin: float = 100
    predicted_spacing: float = 150
    spacing_complexity_gain: float = 15

    # Routing rule
    routing_trigger: int = 3
    routing_node_spacing: float = 80
    routing_rank_spacing: float = 100
    routing_crossing_gain: int = 5
    routing_complexity_gain: float = 20
    curved_edge_offset: float = 20

    # Grouping rule
    group_cell: float = 150
    group_columns: int = 2
    group_offset_x: float = 300
    group_offset_y: float = 200
    grouping_complexity_gain: float = 10

    # Hierarchy rule
    central_min_degree: int = 2
    emphasis_min_width: float = 100
    emphasis_width: float = 250
    emphasis_height: float = 120

    # Controller
    history_limit: int = 5

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = OrganizerConfig()
