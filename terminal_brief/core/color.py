"""
Color and formatting helpers for terminal-brief.

Fragments are built as rich markup strings; the formatter renders them to the
terminal at the end. Any text that did not come from us is escaped so a PR
title like "[WIP] fix" is printed literally.
"""

from typing import Dict

from rich.markup import escape

COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

THEMES: Dict[str, Dict[str, str]] = {
    "default": {
        "primary": "blue",
        "secondary": "green",
        "accent": "yellow",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "cyan",
        "muted": "white",
    },
    "light": {
        "primary": "blue",
        "secondary": "cyan",
        "accent": "magenta",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "black",
    },
    "dark": {
        "primary": "cyan",
        "secondary": "blue",
        "accent": "magenta",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "cyan",
        "muted": "white",
    },
    "pastel": {
        "primary": "magenta",
        "secondary": "cyan",
        "accent": "yellow",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "black",
    },
}


def _style(color: str) -> str:
    return color if color in COLOR_NAMES else "white"


def color_text(color: str, text: str) -> str:
    """Wrap text in a color tag. Unknown colors fall back to white."""
    style = _style(color)
    return f"[{style}]{escape(text)}[/{style}]"


def bold_text(text: str) -> str:
    """Wrap text in a bold tag."""
    return f"[bold]{escape(text)}[/bold]"


def color_bold_text(color: str, text: str) -> str:
    """Wrap text in a bold color tag."""
    style = f"bold {_style(color)}"
    return f"[{style}]{escape(text)}[/{style}]"


def theme_colors(theme: str) -> Dict[str, str]:
    """
    Get the semantic palette for a color theme.

    Args:
        theme: Theme name (default, light, dark, pastel)

    Returns:
        Mapping of role (primary, warning, ...) to color name
    """
    return dict(THEMES.get(theme, THEMES["default"]))
