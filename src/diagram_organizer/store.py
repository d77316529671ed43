"""
Diagram store: the single source of truth for node and edge collections.

The organizer only talks to the DiagramStore protocol. Writes replace a
whole collection at once; readers never see a partially updated list.
"""

from __future__ import annotations

import copy
import threading
from typing import Optional, Protocol

from diagram_organizer.models import DiagramEdge, DiagramNode


class DiagramStore(Protocol):
    def get_nodes(self) -> list[DiagramNode]: ...

    def get_edges(self) -> list[DiagramEdge]: ...

    def set_nodes(self, nodes: list[DiagramNode]) -> None: ...

    def set_edges(self, edges: list[DiagramEdge]) -> None: ...


class InMemoryDiagramStore:
    """Process-local store; collections are copied in and out under a lock."""

    def __init__(
        self,
        nodes: Optional[list[DiagramNode]] = None,
        edges: Optional[list[DiagramEdge]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._nodes: list[DiagramNode] = copy.deepcopy(list(nodes or []))
        self._edges: list[DiagramEdge] = copy.deepcopy(list(edges or []))

    def get_nodes(self) -> list[DiagramNode]:
        with self._lock:
            return copy.deepcopy(self._nodes)

    def get_edges(self) -> list[DiagramEdge]:
        with self._lock:
            return copy.deepcopy(self._edges)

    def set_nodes(self, nodes: list[DiagramNode]) -> None:
        replacement = copy.deepcopy(list(nodes))
        with self._lock:
            self._nodes = replacement

    def set_edges(self, edges: list[DiagramEdge]) -> None:
        replacement = copy.deepcopy(list(edges))
        with self._lock:
            self._edges = replacement
