"""Tests for semantic label classification."""

import pytest

from diagram_organizer.semantics import NodeRole, classify_label


@pytest.mark.parametrize("label, role", [
    ("Approve Request?", NodeRole.DECISION),
    ("Is user logged in", NodeRole.DECISION),
    ("check inventory", NodeRole.DECISION),
    ("Code Review", NodeRole.DECISION),
    ("User Database", NodeRole.DATA),
    ("Write JSON", NodeRole.DATA),
    ("Start", NodeRole.START_END),
    ("finish", NodeRole.START_END),
    ("Send Invoice", NodeRole.ACTION),
    ("Generate Report", NodeRole.ACTION),
    ("Customer", NodeRole.CONCEPT),
])
def test_classify_label(label: str, role: NodeRole) -> None:
    assert classify_label(label) is role


def test_empty_label_has_no_role() -> None:
    assert classify_label("") is None
    assert classify_label(None) is None


def test_decision_wins_over_data() -> None:
    assert classify_label("Is the data valid?") is NodeRole.DECISION


def test_terminal_words_must_match_exactly() -> None:
    # "start" inside a longer label is not a terminal
    assert classify_label("Start engine") is NodeRole.CONCEPT
