"""
Input validation for the organizer's MCP tool parameters.

Provides reusable validators that produce clear error messages for all
parameters received from agent callers.
"""

from __future__ import annotations

from typing import Any


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a numeric value and optional range."""
    if not _is_number(value):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


# ---------------------------------------------------------------------------
# Tool actions
# ---------------------------------------------------------------------------

_DIAGRAM_ACTIONS = {"LOAD", "GET", "LIST", "DELETE"}
_ORGANIZE_ACTIONS = {"START", "CONFIRM", "UNDO", "CLOSE", "STATUS"}
_SUGGESTION_ACTIONS = {
    "LIST", "PRESETS", "PREVIEW", "CONFIRM", "CANCEL",
    "APPLY_PRESET", "SNAPSHOT", "HISTORY", "RESTORE",
}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


# ---------------------------------------------------------------------------
# Node / edge dict validators
# ---------------------------------------------------------------------------

def _validate_positive(value: Any, field_name: str) -> float:
    val = validate_number(value, field_name)
    if val <= 0:
        raise ValidationError(f"'{field_name}' must be > 0, got {val}.")
    return val


def validate_node_dict(n: Any, index: int) -> None:
    """Validate a single node dict from the nodes list.

    Everything ``DiagramNode.from_dict`` reads is checked here, so a node
    that passes can always be built.
    """
    if not isinstance(n, dict):
        raise ValidationError(f"Node at index {index} must be a dict/object.")
    if "id" not in n:
        raise ValidationError(f"Node at index {index} missing required key 'id'.")
    if not isinstance(n["id"], str) or not n["id"].strip():
        raise ValidationError(f"Node at index {index}: 'id' must be a non-empty string.")
    where = f"nodes[{index}]"

    pos = n.get("position")
    if not isinstance(pos, dict):
        raise ValidationError(f"Node at index {index} missing required object 'position'.")
    for axis in ("x", "y"):
        validate_number(pos.get(axis), f"{where}.position.{axis}")

    for key in ("type", "kind", "label"):
        if n.get(key) is not None and not isinstance(n[key], str):
            raise ValidationError(f"Node at index {index}: '{key}' must be a string.")

    for key in ("width", "height"):
        if key in n:
            _validate_positive(n[key], f"{where}.{key}")
    if ("width" in n) != ("height" in n):
        raise ValidationError(f"Node at index {index}: 'width' and 'height' must be given together.")
    if n.get("size") is not None:
        size = validate_dict(n["size"], f"{where}.size")
        for key in ("width", "height"):
            _validate_positive(size.get(key), f"{where}.size.{key}")

    for key in ("style", "data"):
        if n.get(key) is not None:
            validate_dict(n[key], f"{where}.{key}")


def validate_edge_dict(e: Any, index: int) -> None:
    """Validate a single edge dict from the edges list.

    Dangling endpoints are allowed; the analysis skips them.
    """
    if not isinstance(e, dict):
        raise ValidationError(f"Edge at index {index} must be a dict/object.")
    for key in ("source", "target"):
        if key not in e:
            raise ValidationError(f"Edge at index {index} missing required key '{key}'.")
        if not isinstance(e[key], str) or not e[key].strip():
            raise ValidationError(f"Edge at index {index}: '{key}' must be a non-empty string.")
    for key in ("id", "type", "kind"):
        if e.get(key) is not None and not isinstance(e[key], str):
            raise ValidationError(f"Edge at index {index}: '{key}' must be a string.")
    for key in ("style", "data"):
        if e.get(key) is not None:
            validate_dict(e[key], f"edges[{index}].{key}")


def validate_nodes(value: Any) -> list[dict]:
    """Validate the nodes list, including id uniqueness."""
    nodes = validate_list(value, "nodes")
    seen: set[str] = set()
    for i, n in enumerate(nodes):
        validate_node_dict(n, i)
        if n["id"] in seen:
            raise ValidationError(f"Node at index {i}: duplicate id '{n['id']}'.")
        seen.add(n["id"])
    return nodes


def validate_edges(value: Any) -> list[dict]:
    edges = validate_list(value, "edges")
    for i, e in enumerate(edges):
        validate_edge_dict(e, i)
    return edges
