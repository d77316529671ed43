"""
Plane geometry helpers shared by the metrics and the detectors.

Positions are treated as points; node sizes play no part in these tests.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.models import Bounds, DiagramEdge, DiagramNode, Point


def ccw(a: Point, b: Point, c: Point) -> bool:
    """True when a → b → c turns counter-clockwise."""
    return (c.y - a.y) * (b.x - a.x) > (b.y - a.y) * (c.x - a.x)


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Check whether segment p1-p2 crosses segment p3-p4.

    Each segment's endpoints must lie on opposite sides of the other.
    Collinear segments never count; segments sharing an endpoint may,
    depending on their orientation.
    """
    return (
        ccw(p1, p3, p4) != ccw(p2, p3, p4)
        and ccw(p1, p2, p3) != ccw(p1, p2, p4)
    )


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def visible_nodes(nodes: Iterable[DiagramNode]) -> list[DiagramNode]:
    return [n for n in nodes if n.is_visible]


def bounding_box(
    nodes: Iterable[DiagramNode],
    config: Optional[OrganizerConfig] = None,
) -> Bounds:
    """Bounding box of visible node positions.

    An empty diagram gets the configured default box instead of an
    empty or negative one.
    """
    cfg = config or DEFAULT_CONFIG
    visible = visible_nodes(nodes)
    if not visible:
        return Bounds(0, 0, cfg.default_bounds_width, cfg.default_bounds_height)
    xs = [n.position.x for n in visible]
    ys = [n.position.y for n in visible]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def edge_segment(
    edge: DiagramEdge,
    positions: dict[str, Point],
) -> Optional[tuple[Point, Point]]:
    """Straight source→target segment, or None for a dangling edge."""
    src = positions.get(edge.source)
    tgt = positions.get(edge.target)
    if src is None or tgt is None:
        return None
    return src, tgt
