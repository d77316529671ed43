"""Tests for the style builder and palettes."""

from diagram_organizer.styles import (
    SEMANTIC_STYLES,
    KindColor,
    StyleBuilder,
    emphasis_style,
)


def test_builder_chain() -> None:
    style = (
        StyleBuilder()
        .background("#ffffff")
        .border("#000000", width=2, line="dashed")
        .border_radius("8px")
        .font_size("14px")
        .bold()
        .build()
    )
    assert style == {
        "backgroundColor": "#ffffff",
        "border": "2px dashed #000000",
        "borderRadius": "8px",
        "fontSize": "14px",
        "fontWeight": "bold",
    }


def test_builder_keeps_base_and_copies() -> None:
    base = {"color": "red"}
    builder = StyleBuilder(base).shape("pill")
    built = builder.build()
    assert built == {"color": "red", "shape": "pill"}
    built["color"] = "blue"
    assert base == {"color": "red"}
    assert builder.build()["color"] == "red"


def test_kind_colors() -> None:
    assert KindColor.for_kind("database") == "#0ea5e9"
    assert KindColor.for_kind("service") == "#8b5cf6"
    assert KindColor.for_kind("client") == "#f59e0b"
    assert KindColor.for_kind("queue") == "#64748b"


def test_semantic_style_to_style() -> None:
    style = SEMANTIC_STYLES["decision"].to_style()
    assert style == {
        "shape": "diamond",
        "backgroundColor": "#fcd34d",
        "border": "1px solid #d97706",
        "borderRadius": "4px",
    }


def test_every_role_has_a_style() -> None:
    assert set(SEMANTIC_STYLES) == {"decision", "action", "data", "startEnd", "concept"}
    assert SEMANTIC_STYLES["startEnd"].shape == "pill"
    assert SEMANTIC_STYLES["data"].shape == "cylinder"


def test_emphasis_style() -> None:
    assert emphasis_style(250, 120) == {
        "width": 250,
        "height": 120,
        "fontSize": "1.2em",
        "fontWeight": "bold",
    }
