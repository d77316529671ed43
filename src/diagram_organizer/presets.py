"""
Pre-built layout suggestions for one-click arrangements.

The catalog is fixed: a compact grid and a clear top-to-bottom flow. No
thresholds are checked, so presets are offered for any diagram.
"""

from __future__ import annotations

from typing import Optional

from diagram_organizer.analysis import analyze_layout
from diagram_organizer.models import (
    DiagramEdge,
    DiagramNode,
    EdgeRouting,
    Impact,
    LayoutState,
    LayoutSuggestion,
    SuggestionImplementation,
    SuggestionType,
)
from diagram_organizer.suggestions import SuggestionGenerator


def get_presets(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    generator: Optional[SuggestionGenerator] = None,
) -> list[LayoutSuggestion]:
    """Return the preset catalog computed for the given collections."""
    gen = generator or SuggestionGenerator()
    analysis = analyze_layout(nodes, edges, gen.config)
    before = LayoutState(analysis.metrics, analysis.issues)
    after = LayoutState(analysis.metrics)

    return [
        LayoutSuggestion(
            id="preset-compact",
            title="Compact Grid",
            description="Arranges nodes in a tight grid to save space",
            type=SuggestionType.GROUPING,
            impact=Impact.HIGH,
            estimated_improvement=50,
            before_state=before,
            after_state=after,
            implementation=SuggestionImplementation(
                node_positions=gen.spacing_positions(nodes),
            ),
            source="preset",
        ),
        LayoutSuggestion(
            id="preset-flow",
            title="Clear Flow",
            description="Optimizes for top-to-bottom flow with minimal crossings",
            type=SuggestionType.ROUTING,
            impact=Impact.HIGH,
            estimated_improvement=40,
            before_state=before,
            after_state=after,
            implementation=SuggestionImplementation(
                node_positions=gen.routing_positions(nodes, edges),
                edge_routing=EdgeRouting(style="curved", offset_strategy="intelligent"),
            ),
            source="preset",
        ),
    ]
