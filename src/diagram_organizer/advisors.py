"""External suggestion sources ("advisors").

An advisor is any async callable that looks at the diagram and returns
suggestion-shaped records. Advisors compute no geometry, so their records
are normalized here into LayoutSuggestions carrying the current metrics
as placeholder before/after states.
"""

from __future__ import annotations

import json
import logging
import os
import re
import uuid
from typing import Any, Optional, Protocol

import httpx

from diagram_organizer.models import (
    DiagramEdge,
    DiagramNode,
    Impact,
    LayoutMetrics,
    LayoutState,
    LayoutSuggestion,
    SuggestionImplementation,
    SuggestionType,
)

logger = logging.getLogger("diagram-organizer.advisors")


VISUAL_ANALYSIS_PROMPT = """You are a Visualization and UX Expert specialized in node-graph diagrams.
Your task is to analyze the provided graph structure and metrics to suggest specific improvements for layout, grouping, and visual clarity.

Return ONLY a strictly valid JSON object. Do not include markdown formatting.

EXPECTED JSON FORMAT:
{
  "analysis": {
    "suggestions": [
      {
        "id": "unique-id",
        "title": "Short title",
        "description": "Detailed explanation",
        "type": "spacing" | "grouping" | "routing" | "hierarchy" | "style",
        "impact": "high" | "medium" | "low",
        "fix_strategy": "algorithmic_spacing" | "algorithmic_routing" | "group_nodes" | "unknown"
      }
    ],
    "summary": {
       "critique": "Overall analysis",
       "score": 0-100
    }
  }
}"""


class SuggestionAdvisor(Protocol):
    async def __call__(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        metrics: LayoutMetrics,
    ) -> list[dict[str, Any]]: ...


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_advice(
    records: Any,
    metrics: LayoutMetrics,
    taken_ids: Optional[set[str]] = None,
) -> list[LayoutSuggestion]:
    """Turn raw advisor records into suggestions.

    Records without a title or description, or with an unknown type or
    impact, are dropped. Ids that are missing or already taken are
    replaced with a generated ``ai-`` id.
    """
    if not isinstance(records, list):
        logger.warning("Advisor returned %s instead of a list; ignoring it", type(records).__name__)
        return []

    used = set(taken_ids or ())
    state = LayoutState(metrics)
    out: list[LayoutSuggestion] = []
    for raw in records:
        if not isinstance(raw, dict):
            logger.warning("Skipping advisor record of type %s", type(raw).__name__)
            continue
        title = raw.get("title")
        description = raw.get("description")
        if not isinstance(title, str) or not isinstance(description, str):
            logger.warning("Skipping advisor record without title/description: %r", raw)
            continue
        try:
            s_type = SuggestionType(raw.get("type") or "style")
            impact = Impact(raw.get("impact") or "low")
        except ValueError as exc:
            logger.warning("Skipping advisor record %r: %s", title, exc)
            continue

        sid = raw.get("id")
        if not isinstance(sid, str) or not sid or sid in used:
            sid = f"ai-{uuid.uuid4().hex[:9]}"
        used.add(sid)

        strategy = raw.get("fix_strategy")
        out.append(LayoutSuggestion(
            id=sid,
            title=title,
            description=description,
            type=s_type,
            impact=impact,
            estimated_improvement=0,
            before_state=state,
            after_state=state,
            implementation=SuggestionImplementation(
                description=strategy if isinstance(strategy, str) else None,
            ),
            source="advisor",
        ))
    return out


# ---------------------------------------------------------------------------
# Chat-completions advisor
# ---------------------------------------------------------------------------

class ChatCompletionsAdvisor:
    """
    Advisor backed by an OpenAI-compatible ``/chat/completions`` endpoint.

    Uses httpx for async HTTP. The model is sent the diagram's labels and
    metrics and asked for suggestion records in JSON.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = 60.0,
        temperature: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize ChatCompletionsAdvisor.

        Args:
            base_url: API base URL, e.g. http://localhost:11434/v1
            model: Model name sent with each request
            api_key: Bearer token, if the endpoint needs one
            timeout: Per-request timeout in seconds (None = no timeout)
            temperature: Sampling temperature
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.temperature = temperature
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_env(cls) -> Optional[ChatCompletionsAdvisor]:
        """Build from ORGANIZER_ADVISOR_* variables; None when no URL is set."""
        base_url = os.getenv("ORGANIZER_ADVISOR_URL")
        if not base_url:
            return None
        return cls(
            base_url=base_url,
            model=os.getenv("ORGANIZER_ADVISOR_MODEL", "llama3"),
            api_key=os.getenv("ORGANIZER_ADVISOR_API_KEY") or None,
            timeout=float(os.getenv("ORGANIZER_ADVISOR_TIMEOUT", "60")),
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy init)."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ChatCompletionsAdvisor:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def __call__(
        self,
        nodes: list[DiagramNode],
        edges: list[DiagramEdge],
        metrics: LayoutMetrics,
    ) -> list[dict[str, Any]]:
        """Ask the model for suggestions.

        Raises:
            httpx.HTTPError: On transport or status errors
            ValueError: If the reply is not the expected JSON
        """
        context = {
            "nodeCount": len(nodes),
            "edgeCount": len(edges),
            "nodeLabels": [n.label or n.id for n in nodes],
            "metrics": metrics.to_dict(),
        }
        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": VISUAL_ANALYSIS_PROMPT},
                {
                    "role": "user",
                    "content": (
                        "ANALYZE THIS DIAGRAM LAYOUT:\n"
                        f"{json.dumps(context, indent=2)}\n\n"
                        "Provide visual improvement suggestions."
                    ),
                },
            ],
        }

        client = await self._get_client()
        response = await client.post("/chat/completions", json=payload)
        response.raise_for_status()

        content = response.json()["choices"][0]["message"]["content"]
        return parse_advice(content)


def parse_advice(content: str) -> list[dict[str, Any]]:
    """Extract the suggestion list from a model reply.

    Accepts ``analysis.suggestions``, ``visualAnalysis.suggestions`` or a
    top-level ``suggestions`` key, with or without markdown fences.
    """
    text = re.sub(r"^```(?:json)?\s*", "", content.strip())
    text = re.sub(r"\s*```$", "", text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"advisor reply is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("advisor reply is not a JSON object")

    analysis = data.get("analysis") or data.get("visualAnalysis") or data
    suggestions = analysis.get("suggestions") if isinstance(analysis, dict) else None
    if suggestions is None:
        return []
    if not isinstance(suggestions, list):
        raise ValueError("advisor 'suggestions' is not a list")
    return suggestions
