"""
Issue and strength detection.

Thresholds the layout metrics, plus the structural overlap and style
checks, into typed findings. Strengths mirror the same metrics and are
used for reporting only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.geometry import distance, visible_nodes
from diagram_organizer.metrics import compute_metrics
from diagram_organizer.models import (
    DiagramEdge,
    DiagramNode,
    IssueType,
    LayoutMetrics,
    Severity,
    VisualIssue,
)


@dataclass(frozen=True)
class LayoutAnalysis:
    metrics: LayoutMetrics
    issues: tuple[VisualIssue, ...]
    strengths: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "strengths": list(self.strengths),
        }


def analyze_layout(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    config: Optional[OrganizerConfig] = None,
) -> LayoutAnalysis:
    """Metrics, issues and strengths in one pass."""
    cfg = config or DEFAULT_CONFIG
    metrics = compute_metrics(nodes, edges, cfg)
    return LayoutAnalysis(
        metrics=metrics,
        issues=tuple(detect_issues(nodes, edges, cfg, metrics)),
        strengths=tuple(detect_strengths(nodes, edges, cfg, metrics)),
    )


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

def detect_issues(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    config: Optional[OrganizerConfig] = None,
    metrics: Optional[LayoutMetrics] = None,
) -> list[VisualIssue]:
    """Layout issues followed by style-consistency issues."""
    cfg = config or DEFAULT_CONFIG
    m = metrics or compute_metrics(nodes, edges, cfg)
    issues: list[VisualIssue] = []

    if m.edge_crossings > cfg.crossing_issue:
        issues.append(VisualIssue(
            type=IssueType.EDGE_CROSSING,
            severity=Severity.HIGH if m.edge_crossings > cfg.crossing_high else Severity.MEDIUM,
            description=(
                f"High number of edge crossings ({m.edge_crossings}) "
                "makes diagram difficult to follow"
            ),
            suggested_fix="Apply routing optimization to minimize edge intersections",
        ))

    overlapping = detect_overlapping_nodes(nodes, cfg)
    if overlapping:
        issues.append(VisualIssue(
            type=IssueType.OVERLAP,
            severity=Severity.HIGH if len(overlapping) >= cfg.overlap_high_count else Severity.MEDIUM,
            description=f"{len(overlapping)} nodes are overlapping or too close",
            affected_nodes=tuple(overlapping),
            suggested_fix="Increase spacing between nodes",
        ))

    # Spacing is 0 with fewer than two visible nodes; nothing to space.
    if m.node_count >= 2 and m.average_node_spacing < cfg.spacing_issue:
        issues.append(VisualIssue(
            type=IssueType.POOR_SPACING,
            severity=Severity.HIGH if m.average_node_spacing < cfg.spacing_high else Severity.MEDIUM,
            description="Nodes are too close together, reducing readability",
            suggested_fix="Increase overall node spacing",
        ))

    if m.visual_complexity > cfg.complexity_issue:
        issues.append(VisualIssue(
            type=IssueType.UNCLEAR_FLOW,
            severity=Severity.HIGH if m.visual_complexity > cfg.complexity_high else Severity.MEDIUM,
            description="High visual complexity makes the diagram hard to understand",
            suggested_fix="Simplify layout by grouping related nodes and reducing crossings",
        ))

    if m.aspect_ratio > cfg.aspect_max or m.aspect_ratio < cfg.aspect_min:
        issues.append(VisualIssue(
            type=IssueType.INEFFICIENT_LAYOUT,
            severity=Severity.MEDIUM,
            description="Diagram has poor aspect ratio, consider reorienting layout",
            suggested_fix="Switch to horizontal layout or reorganize node positions",
        ))

    issues.extend(detect_style_issues(nodes))
    return issues


def detect_overlapping_nodes(
    nodes: list[DiagramNode],
    config: Optional[OrganizerConfig] = None,
) -> list[str]:
    """Ids of visible nodes closer than the overlap distance to another.

    Ids are de-duplicated and keep first-seen order.
    """
    cfg = config or DEFAULT_CONFIG
    visible = visible_nodes(nodes)
    seen: dict[str, None] = {}
    for i, a in enumerate(visible):
        for b in visible[i + 1:]:
            if distance(a.position, b.position) < cfg.overlap_distance:
                seen.setdefault(a.id)
                seen.setdefault(b.id)
    return list(seen)


def detect_style_issues(nodes: list[DiagramNode]) -> list[VisualIssue]:
    """One issue per node kind whose members use more than one fill color."""
    by_kind: dict[str, tuple[set[str], list[str]]] = {}
    for node in visible_nodes(nodes):
        colors, ids = by_kind.setdefault(node.kind or "default", (set(), []))
        colors.add(node.fill_color)
        ids.append(node.id)

    issues: list[VisualIssue] = []
    for kind, (colors, ids) in by_kind.items():
        if len(colors) > 1:
            issues.append(VisualIssue(
                type=IssueType.STYLE_CONSISTENCY,
                severity=Severity.LOW,
                description=f"Nodes of type '{kind}' have inconsistent colors",
                affected_nodes=tuple(ids),
                suggested_fix="Standardize color for this node type",
            ))
    return issues


# ---------------------------------------------------------------------------
# Strengths
# ---------------------------------------------------------------------------

def detect_strengths(
    nodes: list[DiagramNode],
    edges: list[DiagramEdge],
    config: Optional[OrganizerConfig] = None,
    metrics: Optional[LayoutMetrics] = None,
) -> list[str]:
    cfg = config or DEFAULT_CONFIG
    m = metrics or compute_metrics(nodes, edges, cfg)
    strengths: list[str] = []

    if m.edge_crossings == 0:
        strengths.append("Clean layout with no edge crossings")
    if m.average_node_spacing > cfg.strength_spacing:
        strengths.append("Good spacing between nodes for readability")
    if m.visual_complexity < cfg.strength_complexity:
        strengths.append("Low visual complexity makes diagram easy to understand")
    if cfg.strength_aspect_min <= m.aspect_ratio <= cfg.strength_aspect_max:
        strengths.append("Well-proportioned diagram layout")
    if m.node_count <= cfg.strength_max_nodes:
        strengths.append("Appropriate number of nodes for clear communication")
    return strengths
