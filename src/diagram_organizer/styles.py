"""
Style builder and canonical palettes for diagram nodes.

Provides a fluent API to compose node style bags (the CSS-like dicts the
canvas renders) and the fixed color/shape catalogs used by the style
suggestions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# ---------------------------------------------------------------------------
# Style builder
# ---------------------------------------------------------------------------

class StyleBuilder:
    """Fluent builder for node style dicts."""

    def __init__(self, base: dict[str, Any] | None = None) -> None:
        self._parts: dict[str, Any] = dict(base or {})

    # -- appearance --

    def background(self, color: str) -> StyleBuilder:
        self._parts["backgroundColor"] = color
        return self

    def border(self, color: str, width: int = 1, line: str = "solid") -> StyleBuilder:
        self._parts["border"] = f"{width}px {line} {color}"
        return self

    def border_radius(self, radius: str) -> StyleBuilder:
        self._parts["borderRadius"] = radius
        return self

    def shape(self, name: str) -> StyleBuilder:
        self._parts["shape"] = name
        return self

    def font_size(self, size: str) -> StyleBuilder:
        self._parts["fontSize"] = size
        return self

    def bold(self, on: bool = True) -> StyleBuilder:
        self._parts["fontWeight"] = "bold" if on else "normal"
        return self

    # -- geometry --

    def size(self, width: float, height: float) -> StyleBuilder:
        self._parts["width"] = width
        self._parts["height"] = height
        return self

    # -- build --

    def build(self) -> dict[str, Any]:
        return dict(self._parts)


# ---------------------------------------------------------------------------
# Kind colors (style consistency)
# ---------------------------------------------------------------------------

class KindColor:
    """Canonical fill color per node kind."""

    DATABASE = "#0ea5e9"  # sky 500
    SERVICE = "#8b5cf6"   # violet 500
    CLIENT = "#f59e0b"    # amber 500
    DEFAULT = "#64748b"   # slate 500

    @classmethod
    def for_kind(cls, kind: str) -> str:
        return {
            "database": cls.DATABASE,
            "service": cls.SERVICE,
            "client": cls.CLIENT,
        }.get(kind, cls.DEFAULT)


# ---------------------------------------------------------------------------
# Semantic node styles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SemanticStyle:
    """Canonical look for a semantic node role."""
    shape: str
    fill: str
    stroke: str
    radius: str

    def to_style(self) -> dict[str, Any]:
        return (
            StyleBuilder()
            .shape(self.shape)
            .background(self.fill)
            .border(self.stroke)
            .border_radius(self.radius)
            .build()
        )


SEMANTIC_STYLES: dict[str, SemanticStyle] = {
    "decision": SemanticStyle("diamond", "#fcd34d", "#d97706", "4px"),    # amber
    "action": SemanticStyle("rect", "#a78bfa", "#7c3aed", "8px"),         # violet
    "data": SemanticStyle("cylinder", "#38bdf8", "#0284c7", "12px"),      # sky
    "startEnd": SemanticStyle("pill", "#4ade80", "#16a34a", "999px"),     # green
    "concept": SemanticStyle("rect", "#e2e8f0", "#64748b", "6px"),        # slate
}


def emphasis_style(width: float, height: float) -> dict[str, Any]:
    """Overrides that make a central node larger and bolder."""
    return StyleBuilder().size(width, height).font_size("1.2em").bold().build()
