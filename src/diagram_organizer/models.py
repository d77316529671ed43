"""
Core model classes for diagram layout analysis.

Provides typed nodes and edges (the diagram collections owned by a store)
plus the immutable value objects the organizer derives from them: metrics,
issues, suggestions and snapshots.
"""

from __future__ import annotations

import copy
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class IssueType(Enum):
    EDGE_CROSSING = "edge-crossing"
    OVERLAP = "overlap"
    POOR_SPACING = "poor-spacing"
    UNCLEAR_FLOW = "unclear-flow"
    INEFFICIENT_LAYOUT = "inefficient-layout"
    STYLE_CONSISTENCY = "style-consistency"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Impact(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SuggestionType(Enum):
    SPACING = "spacing"
    GROUPING = "grouping"
    ROUTING = "routing"
    HIERARCHY = "hierarchy"
    STYLE = "style"
    NODE_SHAPE = "node-shape"
    NODE_COLOR_SEMANTIC = "node-color-semantic"


class OrganizerState(Enum):
    """Lifecycle states of the interaction controller."""
    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    APPLIED = "applied"


GROUP_KIND = "group"


# ---------------------------------------------------------------------------
# Diagram collections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass
class DiagramNode:
    """A diagram vertex: position, optional size, label and a style bag."""
    id: str
    kind: str = "default"
    position: Point = field(default_factory=lambda: Point(0, 0))
    size: Optional[Size] = None
    label: str = ""
    style: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_visible(self) -> bool:
        """Groups are layout containers and take no part in geometry."""
        return self.kind != GROUP_KIND

    @property
    def fill_color(self) -> str:
        color = self.style.get("backgroundColor") or self.data.get("color")
        return str(color) if color else "default"

    @property
    def declared_width(self) -> Optional[float]:
        width = self.style.get("width")
        if isinstance(width, (int, float)) and not isinstance(width, bool):
            return float(width)
        if self.size is not None:
            return self.size.width
        return None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.kind,
            "position": self.position.to_dict(),
            "data": {**self.data, "label": self.label},
            "style": dict(self.style),
        }
        if self.size is not None:
            out["width"] = self.size.width
            out["height"] = self.size.height
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> DiagramNode:
        """Build a node from a React-Flow style dict.

        ``type`` and ``kind`` are both accepted for the kind tag, and the
        label may live at the top level or under ``data.label``.
        """
        data = dict(raw.get("data") or {})
        label = raw.get("label", data.pop("label", ""))
        pos = raw.get("position") or {}
        size = None
        if "width" in raw and "height" in raw:
            size = Size(float(raw["width"]), float(raw["height"]))
        elif isinstance(raw.get("size"), dict):
            size = Size(float(raw["size"]["width"]), float(raw["size"]["height"]))
        return cls(
            id=str(raw["id"]),
            kind=str(raw.get("kind") or raw.get("type") or "default"),
            position=Point(float(pos.get("x", 0)), float(pos.get("y", 0))),
            size=size,
            label=str(label or ""),
            style=dict(raw.get("style") or {}),
            data=data,
        )


@dataclass
class DiagramEdge:
    """A directed connection between two node ids."""
    source: str
    target: str
    id: str = ""
    kind: Optional[str] = None
    style: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"{self.source}->{self.target}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "style": dict(self.style),
            "data": dict(self.data),
        }
        if self.kind is not None:
            out["type"] = self.kind
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> DiagramEdge:
        kind = raw.get("kind", raw.get("type"))
        return cls(
            source=str(raw["source"]),
            target=str(raw["target"]),
            id=str(raw.get("id") or ""),
            kind=str(kind) if kind is not None else None,
            style=dict(raw.get("style") or {}),
            data=dict(raw.get("data") or {}),
        )


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of node positions."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height


# ---------------------------------------------------------------------------
# Derived value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutMetrics:
    node_count: int = 0
    edge_count: int = 0
    edge_crossings: int = 0
    node_density: float = 0.0
    average_node_spacing: float = 0.0
    visual_complexity: float = 0.0
    aspect_ratio: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "edgeCrossings": self.edge_crossings,
            "nodeDensity": self.node_density,
            "averageNodeSpacing": self.average_node_spacing,
            "visualComplexity": self.visual_complexity,
            "aspectRatio": self.aspect_ratio,
        }


@dataclass(frozen=True)
class VisualIssue:
    type: IssueType
    severity: Severity
    description: str
    affected_nodes: tuple[str, ...] = ()
    affected_edges: tuple[str, ...] = ()
    suggested_fix: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
        }
        if self.affected_nodes:
            out["affectedNodes"] = list(self.affected_nodes)
        if self.affected_edges:
            out["affectedEdges"] = list(self.affected_edges)
        if self.suggested_fix:
            out["suggestedFix"] = self.suggested_fix
        return out


@dataclass(frozen=True)
class LayoutState:
    """Metrics plus issues, either measured or predicted."""
    metrics: LayoutMetrics
    issues: tuple[VisualIssue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass(frozen=True)
class EdgeRouting:
    style: str = "curved"               # curved | straight
    offset_strategy: str = "intelligent"

    def to_dict(self) -> dict[str, str]:
        return {"style": self.style, "offsetStrategy": self.offset_strategy}


@dataclass(frozen=True)
class SuggestionImplementation:
    """The replayable recipe: new positions, styles and edge routing."""
    node_positions: dict[str, Point] = field(default_factory=dict)
    edge_routing: Optional[EdgeRouting] = None
    style_changes: dict[str, dict[str, Any]] = field(default_factory=dict)
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "nodePositions": {k: p.to_dict() for k, p in self.node_positions.items()},
        }
        if self.edge_routing is not None:
            out["edgeRouting"] = self.edge_routing.to_dict()
        if self.style_changes:
            out["styleChanges"] = copy.deepcopy(self.style_changes)
        if self.description:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class LayoutSuggestion:
    id: str
    title: str
    description: str
    type: SuggestionType
    impact: Impact
    estimated_improvement: float
    before_state: LayoutState
    after_state: LayoutState
    implementation: SuggestionImplementation
    source: str = "local"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "impact": self.impact.value,
            "estimatedImprovement": self.estimated_improvement,
            "beforeState": self.before_state.to_dict(),
            "afterState": self.after_state.to_dict(),
            "implementation": self.implementation.to_dict(),
            "source": self.source,
        }


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Snapshot:
    """An immutable copy of both diagram collections at a point in time."""
    nodes: tuple[DiagramNode, ...]
    edges: tuple[DiagramEdge, ...]
    name: str = ""
    taken_at: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: _uid())

    @classmethod
    def capture(
        cls,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        name: str = "",
    ) -> Snapshot:
        return cls(
            nodes=tuple(copy.deepcopy(nodes)),
            edges=tuple(copy.deepcopy(edges)),
            name=name,
        )

    def restore_nodes(self) -> list[DiagramNode]:
        """Fresh copies, so later store writes never reach the snapshot."""
        return copy.deepcopy(list(self.nodes))

    def restore_edges(self) -> list[DiagramEdge]:
        return copy.deepcopy(list(self.edges))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "timestamp": self.taken_at,
            "nodeCount": len(self.nodes),
            "edgeCount": len(self.edges),
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _uid() -> str:
    return uuid.uuid4().hex[:12]
