"""Tests for the organizer state machine."""

import asyncio
import logging

from diagram_organizer.controller import OrganizerController
from diagram_organizer.models import DiagramEdge, DiagramNode, OrganizerState, Point
from diagram_organizer.store import InMemoryDiagramStore


def _crowded_store() -> InMemoryDiagramStore:
    nodes = [
        DiagramNode("a", position=Point(0, 0), label="Start"),
        DiagramNode("b", position=Point(20, 0), label="Send Invoice"),
        DiagramNode("c", position=Point(40, 10), label="Paid?"),
    ]
    edges = [DiagramEdge("a", "b"), DiagramEdge("b", "c")]
    return InMemoryDiagramStore(nodes, edges)


def _tidy_store() -> InMemoryDiagramStore:
    return InMemoryDiagramStore([DiagramNode("only", position=Point(10, 10))])


def _snapshot(store):
    return store.get_nodes(), store.get_edges()


# ===================================================================
# organize → confirm → undo
# ===================================================================


class TestOrganizeFlow:
    def test_organize_picks_first_suggestion(self) -> None:
        ctl = OrganizerController(_crowded_store())
        assert ctl.state is OrganizerState.IDLE
        active = asyncio.run(ctl.organize())
        assert active is not None
        assert active.id == "spacing-improvement"
        assert ctl.state is OrganizerState.READY
        assert ctl.active is active

    def test_nothing_to_suggest_returns_to_idle(self) -> None:
        ctl = OrganizerController(_tidy_store())
        assert asyncio.run(ctl.organize()) is None
        assert ctl.state is OrganizerState.IDLE

    def test_confirm_then_undo(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        asyncio.run(ctl.organize())

        assert ctl.confirm()
        assert ctl.state is OrganizerState.APPLIED
        assert ctl.has_snapshot
        assert _snapshot(store) != original
        assert store.get_nodes()[0].position == Point(100, 100)

        assert ctl.undo()
        assert ctl.state is OrganizerState.READY
        assert not ctl.has_snapshot
        assert _snapshot(store) == original

    def test_invalid_transitions_are_noops(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        assert not ctl.confirm()
        assert not ctl.undo()

        asyncio.run(ctl.organize())
        assert not ctl.undo()
        assert ctl.confirm()
        assert not ctl.confirm()
        assert asyncio.run(ctl.organize()) is None
        assert ctl.state is OrganizerState.APPLIED
        assert ctl.undo()
        assert not ctl.undo()
        assert _snapshot(store) == original

    def test_reset_keeps_applied_result(self) -> None:
        store = _crowded_store()
        ctl = OrganizerController(store)
        asyncio.run(ctl.organize())
        ctl.confirm()
        applied = _snapshot(store)

        ctl.reset()
        assert ctl.state is OrganizerState.IDLE
        assert ctl.active is None
        assert not ctl.has_snapshot
        assert _snapshot(store) == applied

    def test_analyze(self) -> None:
        analysis = OrganizerController(_crowded_store()).analyze()
        assert analysis.metrics.node_count == 3
        assert analysis.issues


# ===================================================================
# Advisor
# ===================================================================


class TestAdvisor:
    def test_advisor_suggestions_are_appended(self) -> None:
        async def advisor(nodes, edges, metrics):
            assert metrics.node_count == 3
            return [{"id": "spacing-improvement", "title": "Extra", "description": "more"}]

        ctl = OrganizerController(_crowded_store(), advisor=advisor)
        suggestions = asyncio.run(ctl.generate_suggestions())
        assert suggestions[0].source == "local"
        assert suggestions[-1].source == "advisor"
        assert suggestions[-1].title == "Extra"
        assert suggestions[-1].id.startswith("ai-")

    def test_advisor_failure_keeps_local_suggestions(self, caplog) -> None:
        async def advisor(nodes, edges, metrics):
            raise RuntimeError("model offline")

        caplog.set_level(logging.WARNING, logger="diagram-organizer")
        ctl = OrganizerController(_crowded_store(), advisor=advisor)
        suggestions = asyncio.run(ctl.generate_suggestions())
        assert suggestions
        assert all(s.source == "local" for s in suggestions)
        assert "model offline" in caplog.text

    def test_advisor_timeout(self, caplog) -> None:
        async def advisor(nodes, edges, metrics):
            await asyncio.sleep(5)
            return []

        caplog.set_level(logging.WARNING, logger="diagram-organizer")
        ctl = OrganizerController(_crowded_store(), advisor=advisor, advisor_timeout=0.01)
        active = asyncio.run(ctl.organize())
        assert active.id == "spacing-improvement"
        assert ctl.state is OrganizerState.READY
        assert "TimeoutError" in caplog.text

    def test_advisor_only_suggestions(self) -> None:
        async def advisor(nodes, edges, metrics):
            return [{"title": "Add a legend", "description": "Explain the colors"}]

        ctl = OrganizerController(_tidy_store(), advisor=advisor)
        active = asyncio.run(ctl.organize())
        assert active.title == "Add a legend"
        assert ctl.state is OrganizerState.READY


class TestConcurrency:
    def test_second_organize_is_ignored_while_analyzing(self) -> None:
        async def scenario():
            gate = asyncio.Event()

            async def advisor(nodes, edges, metrics):
                await gate.wait()
                return []

            ctl = OrganizerController(_crowded_store(), advisor=advisor)
            first = asyncio.create_task(ctl.organize())
            await asyncio.sleep(0)
            assert ctl.state is OrganizerState.ANALYZING
            assert await ctl.organize() is None
            gate.set()
            return ctl, await first

        ctl, active = asyncio.run(scenario())
        assert active is not None
        assert ctl.state is OrganizerState.READY

    def test_reset_during_analysis_discards_result(self) -> None:
        async def scenario():
            gate = asyncio.Event()

            async def advisor(nodes, edges, metrics):
                await gate.wait()
                return []

            ctl = OrganizerController(_crowded_store(), advisor=advisor)
            first = asyncio.create_task(ctl.organize())
            await asyncio.sleep(0)
            ctl.reset()
            gate.set()
            return ctl, await first

        ctl, active = asyncio.run(scenario())
        assert active is None
        assert ctl.state is OrganizerState.IDLE
        assert ctl.active is None


# ===================================================================
# Listing, preview, history
# ===================================================================


class TestPreview:
    def test_preview_then_cancel_restores_exactly(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        suggestions = asyncio.run(ctl.load_suggestions())
        assert len(suggestions) >= 2

        assert ctl.preview("node-optimization")
        assert _snapshot(store) != original
        assert ctl.previewing == "node-optimization"
        assert [s.id for s in ctl.visible_suggestions()] == ["node-optimization"]

        assert ctl.cancel_preview()
        assert _snapshot(store) == original
        assert ctl.previewing is None
        assert len(ctl.visible_suggestions()) == len(suggestions)

    def test_only_one_preview_at_a_time(self) -> None:
        ctl = OrganizerController(_crowded_store())
        asyncio.run(ctl.load_suggestions())
        assert ctl.preview("spacing-improvement")
        assert not ctl.preview("node-optimization")
        assert ctl.preview("spacing-improvement")
        assert ctl.previewing == "spacing-improvement"

    def test_repeated_preview_keeps_first_snapshot(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        asyncio.run(ctl.load_suggestions())
        ctl.preview("spacing-improvement")
        ctl.preview("spacing-improvement")
        ctl.cancel_preview()
        assert _snapshot(store) == original

    def test_unknown_suggestion(self) -> None:
        ctl = OrganizerController(_crowded_store())
        asyncio.run(ctl.load_suggestions())
        assert not ctl.preview("nope")
        assert not ctl.cancel_preview()
        assert not ctl.confirm_preview()

    def test_confirm_preview_records_history(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        asyncio.run(ctl.load_suggestions())

        assert ctl.preview("spacing-improvement")
        assert ctl.confirm_preview()
        assert ctl.previewing is None
        assert "spacing-improvement" not in [s.id for s in ctl.pending]
        assert ctl.history[0].name == "Before Improve Node Spacing"
        assert ctl.history[0].restore_nodes() == original[0]

    def test_listing_is_frozen_while_previewing(self) -> None:
        ctl = OrganizerController(_crowded_store())
        asyncio.run(ctl.load_suggestions())
        ctl.preview("spacing-improvement")
        listed = asyncio.run(ctl.load_suggestions())
        assert [s.id for s in listed] == ["spacing-improvement"]

    def test_preview_blocked_while_applied(self) -> None:
        ctl = OrganizerController(_crowded_store())
        asyncio.run(ctl.organize())
        asyncio.run(ctl.load_suggestions())
        ctl.confirm()
        assert not ctl.preview("node-optimization")

    def test_organize_blocked_while_previewing(self) -> None:
        ctl = OrganizerController(_crowded_store())
        asyncio.run(ctl.load_suggestions())
        ctl.preview("spacing-improvement")
        assert asyncio.run(ctl.organize()) is None
        assert ctl.state is OrganizerState.IDLE


class TestPresets:
    def test_apply_preset_previews(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        assert [p.id for p in ctl.presets()] == ["preset-compact", "preset-flow"]

        assert ctl.apply_preset("preset-flow")
        assert ctl.previewing == "preset-flow"
        assert all(e.kind == "curved" for e in store.get_edges())
        assert ctl.cancel_preview()
        assert _snapshot(store) == original

    def test_unknown_preset(self) -> None:
        assert not OrganizerController(_crowded_store()).apply_preset("preset-nope")


class TestHistory:
    def test_history_is_bounded_newest_first(self) -> None:
        ctl = OrganizerController(_crowded_store())
        for i in range(7):
            ctl.take_snapshot(f"snap {i}")
        assert [s.name for s in ctl.history] == [f"snap {i}" for i in range(6, 1, -1)]

    def test_restore_snapshot(self) -> None:
        store = _crowded_store()
        original = _snapshot(store)
        ctl = OrganizerController(store)
        saved = ctl.take_snapshot("checkpoint")

        store.set_nodes([DiagramNode("other")])
        assert ctl.restore_snapshot(saved.id)
        assert _snapshot(store) == original
        assert not ctl.restore_snapshot("missing")

    def test_restore_blocked_while_previewing(self) -> None:
        ctl = OrganizerController(_crowded_store())
        saved = ctl.take_snapshot("checkpoint")
        asyncio.run(ctl.load_suggestions())
        ctl.preview("spacing-improvement")
        assert not ctl.restore_snapshot(saved.id)
