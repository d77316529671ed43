"""
Diagram Organizer MCP Server — analyze and tidy node/edge diagrams via
Model Context Protocol.

Exposes 4 tools that let an LLM agent score a diagram's layout, get
concrete repositioning/styling suggestions, and preview, confirm or undo
them safely.

Tools:
  1. diagram      — lifecycle: load, get, list, delete
  2. analyze      — read-only: metrics, issues, strengths
  3. organize     — one-shot flow: start, confirm, undo, close, status
  4. suggestions  — listing flow: list, presets, preview, confirm, cancel,
                    apply_preset, snapshot, history, restore
"""

from __future__ import annotations

import json
import logging
import os
import threading
from functools import lru_cache
from typing import Any

from mcp.server.fastmcp import FastMCP

from diagram_organizer.advisors import ChatCompletionsAdvisor
from diagram_organizer.config import DEFAULT_CONFIG
from diagram_organizer.controller import OrganizerController
from diagram_organizer.models import DiagramEdge, DiagramNode
from diagram_organizer.store import InMemoryDiagramStore
from diagram_organizer.validation import (
    ValidationError,
    validate_action,
    validate_edges,
    validate_non_empty_string,
    validate_nodes,
    _DIAGRAM_ACTIONS,
    _ORGANIZE_ACTIONS,
    _SUGGESTION_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging: suppress routine FastMCP INFO messages that clients show
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("diagram-organizer")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "diagram-organizer",
    instructions=(
        "MCP server that analyzes node/edge diagram layouts and proposes\n"
        "improvements.\n\n"
        "=== ONLY 4 TOOLS — use the 'action' parameter to pick the operation ===\n\n"
        "1. diagram(action, ...) — lifecycle: load (nodes + edges), get, list, delete.\n"
        "2. analyze(diagram_name) — metrics, issues and strengths.\n"
        "3. organize(action, ...) — start picks the best suggestion; confirm\n"
        "   applies it; undo reverts it; close keeps the result.\n"
        "4. suggestions(action, ...) — list all suggestions, preview one live,\n"
        "   confirm or cancel it, apply a preset, manage snapshots.\n\n"
        "=== RULES ===\n"
        "- Nodes use {id, type, position: {x, y}, width?, height?, data: {label}, style}.\n"
        "- Edges use {id?, source, target, type?, style?, data?}.\n"
        "- Nodes of type 'group' are containers and ignored by the metrics.\n"
        "- Only one suggestion can be previewed at a time; confirm or cancel it\n"
        "  before previewing another.\n"
        "- Predicted after-states are estimates, not measurements.\n"
    ),
)

# In-memory registry: diagram name -> controller (each owns its store).
# Guarded by _organizers_lock for thread-safety.
_organizers: dict[str, OrganizerController] = {}
_organizers_lock = threading.Lock()


@lru_cache(maxsize=1)
def _shared_advisor() -> ChatCompletionsAdvisor | None:
    """One advisor (and one HTTP client) per process, or None when unset."""
    return ChatCompletionsAdvisor.from_env()


def _make_controller(store: InMemoryDiagramStore) -> OrganizerController:
    timeout = os.getenv("ORGANIZER_ADVISOR_TIMEOUT")
    return OrganizerController(
        store,
        advisor=_shared_advisor(),
        advisor_timeout=float(timeout) if timeout else None,
    )


def _get(diagram_name: str) -> OrganizerController:
    name = validate_non_empty_string(diagram_name, "diagram_name")
    with _organizers_lock:
        ctl = _organizers.get(name)
    if ctl is None:
        raise ValidationError(f"diagram '{name}' not found.")
    return ctl


def _collections(ctl: OrganizerController) -> dict[str, Any]:
    return {
        "nodes": [n.to_dict() for n in ctl.store.get_nodes()],
        "edges": [e.to_dict() for e in ctl.store.get_edges()],
    }


def _status(ctl: OrganizerController) -> dict[str, Any]:
    return {
        "state": ctl.state.value,
        "active": ctl.active.to_dict() if ctl.active else None,
        "previewing": ctl.previewing,
        "hasSnapshot": ctl.has_snapshot,
    }


# ===================================================================
# RESOURCES
# ===================================================================

@mcp.resource("organizer://config/thresholds")
def thresholds() -> str:
    """Return the thresholds and weights used by the analysis."""
    return json.dumps(DEFAULT_CONFIG.to_dict(), indent=2)


# ===================================================================
# TOOL 1: diagram
# ===================================================================

@mcp.tool()
def diagram(
    action: str,
    name: str = "",
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
) -> str:
    """Diagram lifecycle.

    Actions:
      load    — Store nodes and edges under a name (replaces any existing
                diagram of that name). Params: name, nodes, edges.
      get     — Return the current nodes and edges. Params: name.
      list    — List loaded diagram names.
      delete  — Forget a diagram. Params: name.

    Returns:
        JSON data or confirmation message.
    """
    try:
        action = validate_action(action, "diagram", _DIAGRAM_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "list":
        with _organizers_lock:
            return json.dumps(sorted(_organizers))

    try:
        key = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "load":
        try:
            raw_nodes = validate_nodes(nodes or [])
            raw_edges = validate_edges(edges or [])
        except ValidationError as exc:
            return f"Error: {exc.message}"
        store = InMemoryDiagramStore(
            [DiagramNode.from_dict(n) for n in raw_nodes],
            [DiagramEdge.from_dict(e) for e in raw_edges],
        )
        with _organizers_lock:
            _organizers[key] = _make_controller(store)
        logger.debug("Loaded diagram %s (%d nodes, %d edges)", key, len(raw_nodes), len(raw_edges))
        return f"Diagram '{key}' loaded with {len(raw_nodes)} nodes and {len(raw_edges)} edges."

    if action == "delete":
        with _organizers_lock:
            removed = _organizers.pop(key, None)
        if removed is None:
            return f"Error: diagram '{key}' not found."
        return f"Diagram '{key}' deleted."

    # get
    try:
        ctl = _get(key)
    except ValidationError as exc:
        return f"Error: {exc.message}"
    return json.dumps(_collections(ctl))


# ===================================================================
# TOOL 2: analyze
# ===================================================================

@mcp.tool()
def analyze(diagram_name: str) -> str:
    """Analyze a diagram's layout.

    Returns:
        JSON with metrics, issues and strengths.
    """
    try:
        ctl = _get(diagram_name)
    except ValidationError as exc:
        return f"Error: {exc.message}"
    return json.dumps(ctl.analyze().to_dict())


# ===================================================================
# TOOL 3: organize
# ===================================================================

@mcp.tool()
async def organize(action: str, diagram_name: str = "") -> str:
    """One-shot organize flow.

    Actions:
      start    — Analyze and pick the best suggestion (idle → ready).
      confirm  — Apply the picked suggestion, keeping an undo snapshot.
      undo     — Revert the applied suggestion (applied → ready).
      close    — Return to idle; an applied suggestion is kept.
      status   — Current state, active suggestion and snapshot flag.

    Returns:
        JSON status; "ok" is false when the request did not fit the state.
    """
    try:
        action = validate_action(action, "organize", _ORGANIZE_ACTIONS)
        ctl = _get(diagram_name)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    ok = True
    if action == "start":
        ok = await ctl.organize() is not None
    elif action == "confirm":
        ok = ctl.confirm()
    elif action == "undo":
        ok = ctl.undo()
    elif action == "close":
        ctl.reset()
    return json.dumps({"ok": ok, **_status(ctl)})


# ===================================================================
# TOOL 4: suggestions
# ===================================================================

@mcp.tool()
async def suggestions(
    action: str,
    diagram_name: str = "",
    suggestion_id: str = "",
    snapshot_id: str = "",
    name: str = "",
) -> str:
    """Suggestion listing, preview and history.

    Actions:
      list          — Generate suggestions (hidden while previewing).
      presets       — Instant preset layouts (compact grid, clear flow).
      preview       — Apply a listed suggestion or preset live.
                      Params: suggestion_id.
      confirm       — Keep the previewed change.
      cancel        — Revert the previewed change exactly.
      apply_preset  — Preview a preset. Params: suggestion_id.
      snapshot      — Save the current diagram in history. Params: name.
      history       — List saved snapshots (newest first, at most 5).
      restore       — Restore a saved snapshot. Params: snapshot_id.

    Returns:
        JSON results; "ok" is false when the request did not fit the state.
    """
    try:
        action = validate_action(action, "suggestions", _SUGGESTION_ACTIONS)
        ctl = _get(diagram_name)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "list":
        if ctl.previewing is None:
            await ctl.load_suggestions()
        return json.dumps([s.to_dict() for s in ctl.visible_suggestions()])

    if action == "presets":
        return json.dumps([s.to_dict() for s in ctl.presets()])

    if action == "history":
        return json.dumps([s.to_dict() for s in ctl.history])

    if action == "snapshot":
        try:
            label = validate_non_empty_string(name, "name")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps(ctl.take_snapshot(label).to_dict())

    if action in ("preview", "apply_preset"):
        try:
            sid = validate_non_empty_string(suggestion_id, "suggestion_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        ok = ctl.preview(sid) if action == "preview" else ctl.apply_preset(sid)
    elif action == "confirm":
        ok = ctl.confirm_preview()
    elif action == "cancel":
        ok = ctl.cancel_preview()
    else:
        try:
            sid = validate_non_empty_string(snapshot_id, "snapshot_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        ok = ctl.restore_snapshot(sid)
    return json.dumps({"ok": ok, **_status(ctl)})


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
