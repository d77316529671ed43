"""Tests for the MCP server tools (4-tool architecture)."""

import asyncio
import json

from diagram_organizer.server import (
    _organizers,
    _shared_advisor,
    analyze,
    diagram,
    organize,
    suggestions,
    thresholds,
)


NODES = [
    {"id": "a", "type": "default", "position": {"x": 0, "y": 0}, "data": {"label": "Start"}},
    {"id": "b", "type": "default", "position": {"x": 20, "y": 0}, "data": {"label": "Send Invoice"}},
    {"id": "c", "type": "default", "position": {"x": 40, "y": -10}, "data": {"label": "Paid?"}},
]
EDGES = [{"source": "a", "target": "b"}, {"source": "b", "target": "c"}]


def setup_function() -> None:
    """Clear diagrams and the cached advisor between tests."""
    _organizers.clear()
    _shared_advisor.cache_clear()


def _load(name: str = "flow") -> None:
    result = diagram(action="load", name=name, nodes=NODES, edges=EDGES)
    assert "loaded with 3 nodes and 2 edges" in result


# ===================================================================
# diagram
# ===================================================================


def test_load_get_list_delete() -> None:
    _load()
    data = json.loads(diagram(action="get", name="flow"))
    assert [n["id"] for n in data["nodes"]] == ["a", "b", "c"]
    assert data["nodes"][0]["data"]["label"] == "Start"
    assert data["edges"][0]["id"] == "a->b"

    assert json.loads(diagram(action="list")) == ["flow"]
    assert "deleted" in diagram(action="delete", name="flow")
    assert json.loads(diagram(action="list")) == []
    assert diagram(action="delete", name="flow").startswith("Error:")


def test_load_rejects_bad_nodes() -> None:
    result = diagram(action="load", name="bad", nodes=[{"id": "a"}])
    assert result.startswith("Error:")
    assert "position" in result
    assert json.loads(diagram(action="list")) == []


def test_load_rejects_bad_size() -> None:
    for size in ({"width": 10}, {"width": "wide", "height": 1}, "big"):
        node = {"id": "a", "position": {"x": 0, "y": 0}, "size": size}
        result = diagram(action="load", name="bad", nodes=[node])
        assert result.startswith("Error:")
        assert "size" in result
    assert json.loads(diagram(action="list")) == []


def test_loads_share_one_advisor(monkeypatch) -> None:
    monkeypatch.setenv("ORGANIZER_ADVISOR_URL", "http://localhost:11434/v1")
    _shared_advisor.cache_clear()
    _load("one")
    _load("two")
    _load("one")
    advisor = _organizers["one"].advisor
    assert advisor is not None
    assert _organizers["two"].advisor is advisor


def test_unknown_action() -> None:
    result = diagram(action="explode", name="x")
    assert result.startswith("Error:")
    assert "Valid actions" in result


def test_missing_diagram() -> None:
    assert analyze(diagram_name="ghost").startswith("Error:")
    assert diagram(action="get", name="ghost").startswith("Error:")


# ===================================================================
# analyze
# ===================================================================


def test_analyze() -> None:
    _load()
    out = json.loads(analyze(diagram_name="flow"))
    assert out["metrics"]["nodeCount"] == 3
    assert out["metrics"]["edgeCrossings"] == 0
    assert "overlap" in [i["type"] for i in out["issues"]]
    assert "Clean layout with no edge crossings" in out["strengths"]


# ===================================================================
# organize
# ===================================================================


def test_organize_flow() -> None:
    _load()
    status = json.loads(asyncio.run(organize(action="start", diagram_name="flow")))
    assert status["ok"]
    assert status["state"] == "ready"
    assert status["active"]["id"] == "spacing-improvement"

    status = json.loads(asyncio.run(organize(action="confirm", diagram_name="flow")))
    assert status["state"] == "applied"
    assert status["hasSnapshot"]
    moved = json.loads(diagram(action="get", name="flow"))["nodes"][0]
    assert moved["position"] == {"x": 100, "y": 100}

    status = json.loads(asyncio.run(organize(action="undo", diagram_name="flow")))
    assert status["state"] == "ready"
    restored = json.loads(diagram(action="get", name="flow"))["nodes"][0]
    assert restored["position"] == {"x": 0, "y": 0}

    status = json.loads(asyncio.run(organize(action="close", diagram_name="flow")))
    assert status["state"] == "idle"
    assert status["active"] is None


def test_organize_invalid_transition_reports_not_ok() -> None:
    _load()
    status = json.loads(asyncio.run(organize(action="confirm", diagram_name="flow")))
    assert status["ok"] is False
    assert status["state"] == "idle"


# ===================================================================
# suggestions
# ===================================================================


def test_list_preview_cancel() -> None:
    _load()
    before = diagram(action="get", name="flow")
    listed = json.loads(asyncio.run(suggestions(action="list", diagram_name="flow")))
    ids = [s["id"] for s in listed]
    assert ids == ["spacing-improvement", "grouping-improvement", "node-optimization"]
    assert listed[0]["afterState"]["metrics"]["averageNodeSpacing"] == 150

    status = json.loads(asyncio.run(suggestions(
        action="preview", diagram_name="flow", suggestion_id="node-optimization",
    )))
    assert status["ok"]
    assert status["previewing"] == "node-optimization"
    styled = json.loads(diagram(action="get", name="flow"))["nodes"]
    assert styled[2]["style"]["shape"] == "diamond"

    visible = json.loads(asyncio.run(suggestions(action="list", diagram_name="flow")))
    assert [s["id"] for s in visible] == ["node-optimization"]

    status = json.loads(asyncio.run(suggestions(action="cancel", diagram_name="flow")))
    assert status["ok"]
    assert diagram(action="get", name="flow") == before


def test_confirm_preview_and_history() -> None:
    _load()
    asyncio.run(suggestions(action="list", diagram_name="flow"))
    asyncio.run(suggestions(action="preview", diagram_name="flow", suggestion_id="spacing-improvement"))
    status = json.loads(asyncio.run(suggestions(action="confirm", diagram_name="flow")))
    assert status["ok"]

    history = json.loads(asyncio.run(suggestions(action="history", diagram_name="flow")))
    assert history[0]["name"] == "Before Improve Node Spacing"
    assert history[0]["nodeCount"] == 3

    status = json.loads(asyncio.run(suggestions(
        action="restore", diagram_name="flow", snapshot_id=history[0]["id"],
    )))
    assert status["ok"]
    first = json.loads(diagram(action="get", name="flow"))["nodes"][0]
    assert first["position"] == {"x": 0, "y": 0}


def test_presets_and_apply_preset() -> None:
    _load()
    presets = json.loads(asyncio.run(suggestions(action="presets", diagram_name="flow")))
    assert [p["id"] for p in presets] == ["preset-compact", "preset-flow"]

    status = json.loads(asyncio.run(suggestions(
        action="apply_preset", diagram_name="flow", suggestion_id="preset-compact",
    )))
    assert status["ok"]
    assert status["previewing"] == "preset-compact"


def test_snapshot_requires_name() -> None:
    _load()
    assert asyncio.run(suggestions(action="snapshot", diagram_name="flow")).startswith("Error:")
    snap = json.loads(asyncio.run(suggestions(action="snapshot", diagram_name="flow", name="v1")))
    assert snap["name"] == "v1"
    assert snap["edgeCount"] == 2


def test_preview_requires_id() -> None:
    _load()
    result = asyncio.run(suggestions(action="preview", diagram_name="flow"))
    assert result.startswith("Error:")
    assert "suggestion_id" in result


def test_thresholds_resource() -> None:
    config = json.loads(thresholds())
    assert config["crossing_issue"] == 5
    assert config["overlap_distance"] == 100
    assert config["history_limit"] == 5
