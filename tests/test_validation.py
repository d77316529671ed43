"""Tests for input validation in the MCP server tools."""

import pytest

from diagram_organizer.validation import (
    ValidationError,
    validate_action,
    validate_dict,
    validate_edge_dict,
    validate_edges,
    validate_list,
    validate_node_dict,
    validate_nodes,
    validate_non_empty_string,
    validate_number,
    _DIAGRAM_ACTIONS,
    _SUGGESTION_ACTIONS,
)


def _node(**overrides) -> dict:
    node = {"id": "a", "position": {"x": 0, "y": 0}}
    node.update(overrides)
    return node


# ===================================================================
# Unit tests for primitive validators
# ===================================================================


class TestValidateNonEmptyString:
    def test_valid(self) -> None:
        assert validate_non_empty_string("hello", "f") == "hello"

    def test_strips_whitespace(self) -> None:
        assert validate_non_empty_string("  hi  ", "f") == "hi"

    def test_empty_string(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string("", "field")

    def test_not_a_string(self) -> None:
        with pytest.raises(ValidationError, match="non-empty"):
            validate_non_empty_string(123, "field")


class TestValidateNumber:
    def test_valid_int(self) -> None:
        assert validate_number(5, "n") == 5.0

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must be a number"):
            validate_number(True, "n")

    def test_range(self) -> None:
        with pytest.raises(ValidationError, match=">="):
            validate_number(-1, "n", min_val=0)
        with pytest.raises(ValidationError, match="<="):
            validate_number(11, "n", max_val=10)


class TestContainers:
    def test_list(self) -> None:
        assert validate_list([1], "l", min_length=1) == [1]
        with pytest.raises(ValidationError, match="must be a list"):
            validate_list("x", "l")
        with pytest.raises(ValidationError, match="at least 1"):
            validate_list([], "l", min_length=1)

    def test_dict(self) -> None:
        assert validate_dict({}, "d") == {}
        with pytest.raises(ValidationError, match="dict/object"):
            validate_dict([], "d")


class TestValidateAction:
    def test_case_insensitive(self) -> None:
        assert validate_action("  LoAd ", "diagram", _DIAGRAM_ACTIONS) == "load"
        assert validate_action("apply_preset", "suggestions", _SUGGESTION_ACTIONS) == "apply_preset"

    def test_missing(self) -> None:
        with pytest.raises(ValidationError, match="requires an 'action'"):
            validate_action("", "diagram", _DIAGRAM_ACTIONS)

    def test_unknown_lists_choices(self) -> None:
        with pytest.raises(ValidationError, match="delete, get, list, load"):
            validate_action("save", "diagram", _DIAGRAM_ACTIONS)


# ===================================================================
# Node / edge dicts
# ===================================================================


class TestNodeDict:
    def test_minimal(self) -> None:
        validate_node_dict(_node(), 0)

    def test_full(self) -> None:
        validate_node_dict(_node(
            type="service", width=120, height=60,
            style={"backgroundColor": "#fff"}, data={"label": "Billing"},
        ), 0)

    def test_nested_size(self) -> None:
        validate_node_dict(_node(size={"width": 80, "height": 40.5}), 0)

    @pytest.mark.parametrize("node, message", [
        ("a", "must be a dict"),
        ({"position": {"x": 0, "y": 0}}, "missing required key 'id'"),
        (_node(id=""), "'id' must be a non-empty string"),
        ({"id": "a"}, "'position'"),
        (_node(position={"x": "1", "y": 0}), "position.x' must be a number, got str"),
        (_node(position={"x": 1}), "position.y' must be a number, got NoneType"),
        (_node(type=3), "'type' must be a string"),
        (_node(width=0, height=10), "nodes\\[0\\].width' must be > 0"),
        (_node(width=10), "given together"),
        (_node(style="red"), "style' must be a dict"),
        (_node(size=[10, 10]), "size' must be a dict"),
        (_node(size={"width": 10}), "size.height' must be a number"),
        (_node(size={"width": "wide", "height": 1}), "size.width' must be a number"),
        (_node(size={"width": 10, "height": -1}), "size.height' must be > 0"),
    ])
    def test_invalid(self, node, message) -> None:
        with pytest.raises(ValidationError, match=message):
            validate_node_dict(node, 0)

    def test_duplicate_ids(self) -> None:
        with pytest.raises(ValidationError, match="duplicate id 'a'"):
            validate_nodes([_node(), _node()])


class TestEdgeDict:
    def test_dangling_is_allowed(self) -> None:
        validate_edges([{"source": "a", "target": "nowhere"}])

    @pytest.mark.parametrize("edge, message", [
        (None, "must be a dict"),
        ({"target": "b"}, "missing required key 'source'"),
        ({"source": "a", "target": ""}, "'target' must be a non-empty string"),
        ({"source": "a", "target": "b", "id": 4}, "'id' must be a string"),
        ({"source": "a", "target": "b", "data": []}, "edges\\[0\\].data' must be a dict"),
    ])
    def test_invalid(self, edge, message) -> None:
        with pytest.raises(ValidationError, match=message):
            validate_edge_dict(edge, 0)
