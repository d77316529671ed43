"""
Interaction controller for organizing a diagram.

Drives analyze → suggest → confirm/undo and the preview/confirm/cancel
flow over a DiagramStore, holding the snapshots needed to roll back.
This is the only component that writes to the store.

States: idle → analyzing → ready → applied, with undo going applied →
ready and reset returning to idle from anywhere. Previewing is a separate
sub-mode for the multi-suggestion listing. Requests that do not fit the
current state are ignored and reported as False/None.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from diagram_organizer.advisors import SuggestionAdvisor, normalize_advice
from diagram_organizer.analysis import LayoutAnalysis, analyze_layout
from diagram_organizer.applier import apply_suggestion
from diagram_organizer.config import DEFAULT_CONFIG, OrganizerConfig
from diagram_organizer.models import LayoutSuggestion, OrganizerState, Snapshot
from diagram_organizer.presets import get_presets
from diagram_organizer.store import DiagramStore
from diagram_organizer.suggestions import SuggestionGenerator

logger = logging.getLogger("diagram-organizer")


class OrganizerController:
    """State machine over one diagram store."""

    def __init__(
        self,
        store: DiagramStore,
        generator: Optional[SuggestionGenerator] = None,
        advisor: Optional[SuggestionAdvisor] = None,
        config: Optional[OrganizerConfig] = None,
        advisor_timeout: Optional[float] = None,
    ) -> None:
        self.store = store
        self.config = config or (generator.config if generator else DEFAULT_CONFIG)
        self.generator = generator or SuggestionGenerator(self.config)
        self.advisor = advisor
        self.advisor_timeout = advisor_timeout

        self._state = OrganizerState.IDLE
        self._active: Optional[LayoutSuggestion] = None
        self._snapshot: Optional[Snapshot] = None
        self._pending: list[LayoutSuggestion] = []
        self._presets: list[LayoutSuggestion] = []
        self._previewing: Optional[LayoutSuggestion] = None
        self._history: list[Snapshot] = []
        self._run = 0

    # -- read-only views --

    @property
    def state(self) -> OrganizerState:
        return self._state

    @property
    def active(self) -> Optional[LayoutSuggestion]:
        return self._active

    @property
    def pending(self) -> tuple[LayoutSuggestion, ...]:
        return tuple(self._pending)

    @property
    def previewing(self) -> Optional[str]:
        return self._previewing.id if self._previewing else None

    @property
    def has_snapshot(self) -> bool:
        return self._snapshot is not None

    @property
    def history(self) -> tuple[Snapshot, ...]:
        """Named snapshots, newest first."""
        return tuple(self._history)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self) -> LayoutAnalysis:
        return analyze_layout(self.store.get_nodes(), self.store.get_edges(), self.config)

    async def generate_suggestions(self) -> list[LayoutSuggestion]:
        """Local suggestions followed by any advisor suggestions.

        Advisor failures (errors, timeouts, bad payloads) are logged and
        contribute nothing; the local suggestions are still returned.
        """
        nodes = self.store.get_nodes()
        edges = self.store.get_edges()
        suggestions = self.generator.generate(nodes, edges)
        if self.advisor is None:
            return suggestions

        metrics = suggestions[0].before_state.metrics if suggestions else self.analyze().metrics
        try:
            records = await asyncio.wait_for(
                self.advisor(nodes, edges, metrics), timeout=self.advisor_timeout,
            )
        except Exception as exc:
            logger.warning("Advisor suggestions unavailable: %s", str(exc) or type(exc).__name__)
            return suggestions

        taken = {s.id for s in suggestions}
        return suggestions + normalize_advice(records, metrics, taken)

    # ------------------------------------------------------------------
    # Organize / confirm / undo
    # ------------------------------------------------------------------

    async def organize(self) -> Optional[LayoutSuggestion]:
        """Analyze and pick the best suggestion as the active candidate.

        Ignored while another organize is in flight, while a suggestion
        is applied, or while previewing.
        """
        if self._state in (OrganizerState.ANALYZING, OrganizerState.APPLIED):
            logger.debug("organize ignored in state %s", self._state.value)
            return None
        if self._previewing is not None:
            logger.debug("organize ignored while previewing %s", self._previewing.id)
            return None

        self._run += 1
        run = self._run
        self._state = OrganizerState.ANALYZING
        self._active = None
        try:
            suggestions = await self.generate_suggestions()
        except Exception as exc:
            logger.warning("Suggestion generation failed: %s", exc)
            if run == self._run:
                self._state = OrganizerState.IDLE
            return None

        if run != self._run or self._state is not OrganizerState.ANALYZING:
            # reset() happened while waiting
            return None
        if not suggestions:
            self._state = OrganizerState.IDLE
            return None
        self._active = suggestions[0]
        self._state = OrganizerState.READY
        return self._active

    def confirm(self) -> bool:
        """Apply the active candidate, keeping a snapshot for undo."""
        if self._state is not OrganizerState.READY or self._active is None:
            logger.debug("confirm ignored in state %s", self._state.value)
            return False
        if self._previewing is not None or self._snapshot is not None:
            logger.debug("confirm ignored while a snapshot is held")
            return False

        self._snapshot = self._capture("Before " + self._active.title)
        self._write(self._active)
        self._state = OrganizerState.APPLIED
        return True

    def undo(self) -> bool:
        """Restore the pre-apply snapshot and return to ready."""
        if self._state is not OrganizerState.APPLIED or self._snapshot is None:
            logger.debug("undo ignored in state %s", self._state.value)
            return False
        self._restore(self._snapshot)
        self._snapshot = None
        self._state = OrganizerState.READY
        return True

    def reset(self) -> None:
        """Return to idle, keeping whatever is in the store."""
        self._run += 1
        self._snapshot = None
        self._active = None
        self._previewing = None
        self._state = OrganizerState.IDLE

    # ------------------------------------------------------------------
    # Suggestion listing and preview
    # ------------------------------------------------------------------

    async def load_suggestions(self) -> list[LayoutSuggestion]:
        """Regenerate the pending list (not while previewing)."""
        if self._previewing is not None:
            logger.debug("load_suggestions ignored while previewing")
            return self.visible_suggestions()
        self._pending = await self.generate_suggestions()
        return list(self._pending)

    def visible_suggestions(self) -> list[LayoutSuggestion]:
        """Pending suggestions; only the previewed one while previewing."""
        if self._previewing is not None:
            return [self._previewing]
        return list(self._pending)

    def presets(self) -> list[LayoutSuggestion]:
        self._presets = get_presets(
            self.store.get_nodes(), self.store.get_edges(), self.generator,
        )
        return list(self._presets)

    def preview(self, suggestion_id: str) -> bool:
        """Apply a pending suggestion or preset live, keeping a snapshot.

        Only one suggestion can be previewed at a time. Previewing the
        same one again reuses the held snapshot.
        """
        if self._state in (OrganizerState.ANALYZING, OrganizerState.APPLIED):
            logger.debug("preview ignored in state %s", self._state.value)
            return False
        if self._previewing is not None and self._previewing.id != suggestion_id:
            logger.debug("preview of %s ignored; %s is being previewed",
                         suggestion_id, self._previewing.id)
            return False
        suggestion = self._find(suggestion_id)
        if suggestion is None:
            logger.debug("preview ignored; unknown suggestion %s", suggestion_id)
            return False

        if self._snapshot is None:
            self._snapshot = self._capture("Before " + suggestion.title)
        self._write(suggestion)
        self._previewing = suggestion
        return True

    def apply_preset(self, preset_id: str) -> bool:
        """Preview a preset computed from the current diagram."""
        self.presets()
        return self.preview(preset_id)

    def confirm_preview(self) -> bool:
        """Keep the previewed change and drop it from the pending list."""
        if self._previewing is None or self._snapshot is None:
            logger.debug("confirm_preview ignored; nothing previewed")
            return False
        self._remember(self._snapshot)
        done = self._previewing.id
        self._pending = [s for s in self._pending if s.id != done]
        self._snapshot = None
        self._previewing = None
        return True

    def cancel_preview(self) -> bool:
        """Put the diagram back exactly as it was before the preview."""
        if self._previewing is None or self._snapshot is None:
            logger.debug("cancel_preview ignored; nothing previewed")
            return False
        self._restore(self._snapshot)
        self._snapshot = None
        self._previewing = None
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def take_snapshot(self, name: str) -> Snapshot:
        snapshot = self._capture(name)
        self._remember(snapshot)
        return snapshot

    def restore_snapshot(self, snapshot_id: str) -> bool:
        """Write a history entry back to the store (not while previewing)."""
        if self._previewing is not None:
            logger.debug("restore ignored while previewing")
            return False
        snapshot = next((s for s in self._history if s.id == snapshot_id), None)
        if snapshot is None:
            logger.debug("restore ignored; unknown snapshot %s", snapshot_id)
            return False
        self._restore(snapshot)
        return True

    # -- helpers --

    def _find(self, suggestion_id: str) -> Optional[LayoutSuggestion]:
        for s in self._pending + self._presets:
            if s.id == suggestion_id:
                return s
        return None

    def _capture(self, name: str) -> Snapshot:
        return Snapshot.capture(self.store.get_nodes(), self.store.get_edges(), name)

    def _remember(self, snapshot: Snapshot) -> None:
        self._history = [snapshot, *self._history][: self.config.history_limit]

    def _write(self, suggestion: LayoutSuggestion) -> None:
        nodes, edges = apply_suggestion(
            self.store.get_nodes(), self.store.get_edges(), suggestion, self.config,
        )
        self.store.set_nodes(nodes)
        self.store.set_edges(edges)

    def _restore(self, snapshot: Snapshot) -> None:
        self.store.set_nodes(snapshot.restore_nodes())
        self.store.set_edges(snapshot.restore_edges())
