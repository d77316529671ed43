"""
Layout suggestion generator.

Each rule inspects the current collections and, when its trigger holds,
emits a self-contained LayoutSuggestion: a recipe of new positions and
style/routing overrides plus a predicted before/after state.

Predicted after-states are algebraic adjustments of the measured metrics
(e.g. "complexity drops by 15"), not a re-measurement of the transformed
layout. Treat them as estimates.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Optional

from diagram_organizer.analysis import analyze_layout
from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.layout import group_by_kind, grid_positions, grouped_positions
from diagram_organizer.layout_engine import AutoLayout, LayoutOptions, layout_graph
from diagram_organizer.models import (
    DiagramEdge,
    DiagramNode,
    EdgeRouting,
    Impact,
    IssueType,
    LayoutMetrics,
    LayoutState,
    LayoutSuggestion,
    Point,
    SuggestionImplementation,
    SuggestionType,
    VisualIssue,
)
from diagram_organizer.semantics import classify_label
from diagram_organizer.styles import SEMANTIC_STYLES, KindColor, emphasis_style


class SuggestionGenerator:
    """Produces candidate layout suggestions for one node/edge collection.

    The first suggestion returned is the one callers treat as the default
    "best" candidate.
    """

    def __init__(
        self,
        config: Optional[OrganizerConfig] = None,
        auto_layout: Optional[AutoLayout] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.auto_layout = auto_layout or layout_graph

    def generate(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
    ) -> list[LayoutSuggestion]:
        analysis = analyze_layout(nodes, edges, self.config)
        before = LayoutState(analysis.metrics, analysis.issues)

        rules: list[Callable[..., Optional[LayoutSuggestion]]] = [
            self._spacing,
            self._routing,
            self._grouping,
            self._hierarchy,
            self._style_consistency,
            self._semantic_styling,
        ]
        suggestions: list[LayoutSuggestion] = []
        for rule in rules:
            suggestion = rule(nodes, edges, before)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions

    # -- positions shared with the presets --

    def spacing_positions(self, nodes: list[DiagramNode]) -> dict[str, Point]:
        return grid_positions(nodes, self.config)

    def routing_positions(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
    ) -> dict[str, Point]:
        """Positions from the auto-layout subroutine, top to bottom."""
        options = LayoutOptions(
            direction="TB",
            node_spacing=self.config.routing_node_spacing,
            rank_spacing=self.config.routing_rank_spacing,
        )
        result = self.auto_layout(nodes, edges, options)
        return {n.id: n.position for n in result.nodes if n.is_visible}

    # -- rules --

    def _spacing(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        m = before.metrics
        # undersized input (fewer than two visible nodes) has no spacing to fix
        if m.node_count < 2 or m.average_node_spacing >= self.config.spacing_trigger:
            return None
        after = dataclasses.replace(
            m,
            average_node_spacing=self.config.predicted_spacing,
            visual_complexity=_floor(m.visual_complexity - self.config.spacing_complexity_gain),
        )
        return LayoutSuggestion(
            id="spacing-improvement",
            title="Improve Node Spacing",
            description=(
                "Increase spacing between nodes to improve readability "
                "and reduce visual clutter"
            ),
            type=SuggestionType.SPACING,
            impact=Impact.MEDIUM,
            estimated_improvement=25,
            before_state=before,
            after_state=_predict(after, before.issues, IssueType.POOR_SPACING),
            implementation=SuggestionImplementation(
                node_positions=self.spacing_positions(nodes),
            ),
        )

    def _routing(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        m = before.metrics
        if m.edge_crossings <= self.config.routing_trigger:
            return None
        after = dataclasses.replace(
            m,
            edge_crossings=max(0, m.edge_crossings - self.config.routing_crossing_gain),
            visual_complexity=_floor(m.visual_complexity - self.config.routing_complexity_gain),
        )
        return LayoutSuggestion(
            id="routing-optimization",
            title="Optimize Edge Routing",
            description="Reduce edge crossings by applying smart routing algorithms",
            type=SuggestionType.ROUTING,
            impact=Impact.HIGH,
            estimated_improvement=40,
            before_state=before,
            after_state=_predict(after, before.issues, IssueType.EDGE_CROSSING),
            implementation=SuggestionImplementation(
                node_positions=self.routing_positions(nodes, edges),
                edge_routing=EdgeRouting(style="curved", offset_strategy="intelligent"),
            ),
        )

    def _grouping(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        groups = group_by_kind(nodes)
        if not groups:
            return None
        m = before.metrics
        after = dataclasses.replace(
            m,
            visual_complexity=_floor(m.visual_complexity - self.config.grouping_complexity_gain),
        )
        return LayoutSuggestion(
            id="grouping-improvement",
            title="Group Related Nodes",
            description=(
                "Group similar nodes together to improve visual hierarchy "
                "and organization"
            ),
            type=SuggestionType.GROUPING,
            impact=Impact.MEDIUM,
            estimated_improvement=30,
            before_state=before,
            after_state=_predict(after, before.issues, IssueType.UNCLEAR_FLOW),
            implementation=SuggestionImplementation(
                node_positions=grouped_positions(list(groups.values()), self.config),
            ),
        )

    def _hierarchy(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        central = find_central_node(nodes, edges, self.config.central_min_degree)
        if central is None:
            return None
        width = central.declared_width
        if width is not None and width >= self.config.emphasis_min_width:
            return None
        label = central.label or central.id
        return LayoutSuggestion(
            id="hierarchy-emphasis",
            title="Emphasize Central Node",
            description=(
                f'Node "{label}" appears central to the graph. '
                "Consider increasing its size or prominence."
            ),
            type=SuggestionType.HIERARCHY,
            impact=Impact.MEDIUM,
            estimated_improvement=20,
            before_state=before,
            after_state=LayoutState(before.metrics),
            implementation=SuggestionImplementation(
                style_changes={
                    central.id: emphasis_style(
                        self.config.emphasis_width, self.config.emphasis_height,
                    ),
                },
                description=f"Make node {central.id} larger and more distinct.",
            ),
        )

    def _style_consistency(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        style_issues = [i for i in before.issues if i.type is IssueType.STYLE_CONSISTENCY]
        if not style_issues:
            return None
        kinds = {n.id: n.kind for n in nodes}
        changes: dict[str, dict] = {}
        for issue in style_issues:
            for node_id in issue.affected_nodes:
                color = KindColor.for_kind(kinds.get(node_id, "default"))
                changes[node_id] = {"backgroundColor": color}
        return LayoutSuggestion(
            id="style-consistency",
            title="Fix Style Inconsistencies",
            description=(
                "Detected nodes of the same type with different colors. "
                "Standardize them for consistency."
            ),
            type=SuggestionType.STYLE,
            impact=Impact.LOW,
            estimated_improvement=15,
            before_state=LayoutState(before.metrics, tuple(style_issues)),
            after_state=LayoutState(before.metrics),
            implementation=SuggestionImplementation(
                style_changes=changes,
                description="Apply consistent colors to node types.",
            ),
        )

    def _semantic_styling(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        before: LayoutState,
    ) -> Optional[LayoutSuggestion]:
        changes: dict[str, dict] = {}
        for node in nodes:
            if not node.is_visible:
                continue
            role = classify_label(node.label)
            if role is None:
                continue
            style = SEMANTIC_STYLES[role.value]
            # Already styled for its role
            if node.style.get("backgroundColor") == style.fill:
                continue
            changes[node.id] = style.to_style()
        if not changes:
            return None
        return LayoutSuggestion(
            id="node-optimization",
            title="Optimize Node Views",
            description=(
                f"Found {len(changes)} nodes where visual style can better match "
                "their semantic meaning (Decisions, Actions, Data)."
            ),
            type=SuggestionType.NODE_COLOR_SEMANTIC,
            impact=Impact.MEDIUM,
            estimated_improvement=25,
            before_state=before,
            after_state=LayoutState(before.metrics),
            implementation=SuggestionImplementation(
                style_changes=changes,
                description="Apply semantic styling to nodes based on their content.",
            ),
        )


def find_central_node(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    min_degree: int = 2,
) -> Optional[DiagramNode]:
    """Node with the highest in+out degree, if that degree exceeds *min_degree*.

    Ties go to the id that reached the maximum first in edge order. A
    winner that names no node yields None.
    """
    degrees: dict[str, int] = {}
    for edge in edges:
        degrees[edge.source] = degrees.get(edge.source, 0) + 1
        degrees[edge.target] = degrees.get(edge.target, 0) + 1
    if not degrees:
        return None

    central_id = ""
    best = -1
    for node_id, degree in degrees.items():
        if degree > best:
            best, central_id = degree, node_id
    if best <= min_degree:
        return None
    return next((n for n in nodes if n.id == central_id), None)


def _floor(value: float) -> float:
    return max(0.0, value)


def _predict(
    metrics: LayoutMetrics,
    issues: tuple[VisualIssue, ...],
    resolved: IssueType,
) -> LayoutState:
    return LayoutState(metrics, tuple(i for i in issues if i.type is not resolved))
