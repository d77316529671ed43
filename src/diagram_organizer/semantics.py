"""
Heuristic semantic classification of node labels.

Maps label text to a role (decision, data, startEnd, action, concept) so
a node can be given its role's canonical look. First matching rule wins.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class NodeRole(Enum):
    DECISION = "decision"
    DATA = "data"
    START_END = "startEnd"
    ACTION = "action"
    CONCEPT = "concept"


_DECISION_PREFIXES = ("is ", "check ")
_DECISION_WORDS = ("approve", "review")
_DATA_WORDS = ("data", "database", "store", "json", "record")
_TERMINALS = {"start", "end", "begin", "stop", "finish"}
ACTION_VERBS = (
    "create", "update", "delete", "process", "calculate",
    "send", "receive", "generate", "publish", "edit",
)


def classify_label(label: Optional[str]) -> Optional[NodeRole]:
    """Guess a node's role from its label, case-insensitively.

    Returns None for an empty label. Anything unmatched is a concept.
    """
    text = (label or "").lower()
    if not text:
        return None

    if (
        "?" in text
        or text.startswith(_DECISION_PREFIXES)
        or any(w in text for w in _DECISION_WORDS)
    ):
        return NodeRole.DECISION
    if any(w in text for w in _DATA_WORDS):
        return NodeRole.DATA
    if text in _TERMINALS:
        return NodeRole.START_END
    if any(v in text for v in ACTION_VERBS):
        return NodeRole.ACTION
    return NodeRole.CONCEPT
