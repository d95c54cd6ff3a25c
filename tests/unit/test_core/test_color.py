"""
Unit tests for color helpers.
"""

from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from rich.text import Text

from terminal_brief.core.color import (
    THEMES,
    bold_text,
    color_bold_text,
    color_text,
    theme_colors,
)


class TestColorText:
    """Tests for markup helpers."""

    def test_color_text(self):
        assert color_text("green", "ok") == "[green]ok[/green]"

    def test_unknown_color_falls_back_to_white(self):
        assert color_text("chartreuse", "x") == "[white]x[/white]"

    def test_bold_variants(self):
        assert bold_text("Hi") == "[bold]Hi[/bold]"
        assert color_bold_text("yellow", "System") == "[bold yellow]System[/bold yellow]"

    def test_brackets_are_escaped(self):
        """Markup in user text renders literally."""
        markup = color_text("blue", "[WIP] fix [red]bug")
        assert Text.from_markup(markup).plain == "[WIP] fix [red]bug"


class TestThemes:
    """Tests for theme palettes."""

    def test_every_theme_has_all_roles(self):
        roles = set(THEMES["default"])
        for palette in THEMES.values():
            assert set(palette) == roles

    def test_unknown_theme_falls_back_to_default(self):
        assert theme_colors("neon") == THEMES["default"]

    def test_returns_a_copy(self):
        palette = theme_colors("dark")
        palette["error"] = "blue"
        assert THEMES["dark"]["error"] == "red"
