"""
Interactive configuration editor for terminal-brief.

Walks the user through each configuration section with Rich prompts and
writes config.json on save. Cancelling (Ctrl-C or end of input) exits
cleanly without saving.
"""

import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Optional, Tuple

from rich.console import Console
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from terminal_brief.core.config import (
    BriefConfig,
    CHOICES,
    MODULE_NAMES,
    SECTIONS,
    load_config,
    save_config,
)

logger = logging.getLogger(__name__)

MENU = [
    ("user", "User settings"),
    ("weather", "Weather location and display"),
    ("github", "GitHub token and pull request queries"),
    ("linear", "Linear API key and teams"),
    ("system", "System information"),
    ("cache", "Cache durations"),
    ("performance", "Performance"),
    ("display", "Display preferences"),
    ("modules", "Enabled modules"),
    ("save", "Save and exit"),
    ("exit", "Exit without saving"),
]

SECRET_FIELDS = {"personal_token", "api_key"}


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


def _split_list(text: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def prompt_main_menu(console: Console) -> str:
    """Show the section menu and return the chosen key."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="cyan")
    table.add_column()
    for key, description in MENU:
        table.add_row(key, description)

    console.print()
    console.print("[bold]terminal-brief configuration[/bold]")
    console.print(table)
    return Prompt.ask("Section", choices=[key for key, _ in MENU],
                      default="save", console=console)


def prompt_field(console: Console, section: str, name: str,
                 current: Any, default: Any) -> Any:
    """
    Ask for one field, typed by the field's default value.

    Args:
        console: Console to prompt on
        section: Section name (for enumerated choices)
        name: Field name
        current: Current value, offered as the answer's default
        default: The field's default, which defines its type

    Returns:
        The new value (the current value if the answer was invalid)
    """
    label = _label(name)
    choices = CHOICES.get((section, name))

    if isinstance(default, bool):
        return Confirm.ask(label, default=current, console=console)

    if isinstance(default, (int, float)):
        prompt_cls = IntPrompt if isinstance(default, int) else FloatPrompt
        value = prompt_cls.ask(label, default=current, console=console)
        if value < 0:
            console.print(f"[yellow]{label} cannot be negative, keeping {current}[/yellow]")
            return current
        return value

    if isinstance(default, tuple):
        answer = Prompt.ask(f"{label} (comma separated)", default=", ".join(current),
                            console=console)
        return _split_list(answer)

    if choices:
        return Prompt.ask(label, choices=list(choices), default=current, console=console)

    if name in SECRET_FIELDS:
        hint = "set, enter to keep" if current else "not set"
        answer = Prompt.ask(f"{label} ({hint})", default="", password=True,
                            show_default=False, console=console)
        return answer or current

    answer = Prompt.ask(label, default=current or "", console=console)
    if default is None and not answer:
        return None
    return answer


def edit_section(console: Console, config: BriefConfig, section: str) -> BriefConfig:
    """Prompt for every field of one section and return the updated config."""
    cls = SECTIONS[section]
    defaults = cls()
    current = getattr(config, section)

    console.print(f"\n[bold cyan]{_label(section)}[/bold cyan]")
    values = {
        f.name: prompt_field(console, section, f.name,
                             getattr(current, f.name), getattr(defaults, f.name))
        for f in fields(cls)
    }
    return replace(config, **{section: replace(current, **values)})


def edit_modules(console: Console, config: BriefConfig) -> BriefConfig:
    """Prompt for the ordered list of enabled modules."""
    console.print("\n[bold cyan]Enabled modules[/bold cyan]")
    console.print(f"[dim]Available: {', '.join(MODULE_NAMES)}[/dim]")
    answer = Prompt.ask("Modules in display order (comma separated)",
                        default=", ".join(config.enabled_modules), console=console)

    modules = []
    for name in _split_list(answer):
        if name not in MODULE_NAMES:
            console.print(f"[yellow]Unknown module ignored: {name}[/yellow]")
        elif name not in modules:
            modules.append(name)
    return replace(config, enabled_modules=tuple(modules))


def run_config_command(config_dir: Optional[Path] = None,
                       console: Optional[Console] = None) -> int:
    """
    Run the interactive editor.

    Args:
        config_dir: Directory holding config.json
        console: Console to prompt on

    Returns:
        Process exit code: 0 on save, exit or cancellation; 1 on error
    """
    console = console or Console()
    try:
        # Credentials from the environment stay out of the file
        config = load_config(config_dir, apply_env=False)
        while True:
            choice = prompt_main_menu(console)
            if choice == "save":
                path = save_config(config, config_dir)
                console.print(f"[green]✓[/green] Saved configuration to {path}")
                return 0
            if choice == "exit":
                console.print("[dim]Exited without saving[/dim]")
                return 0
            if choice == "modules":
                config = edit_modules(console, config)
            else:
                config = edit_section(console, config, choice)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Configuration cancelled[/yellow]")
        return 0
    except Exception as e:
        logger.debug("Configuration editor failed", exc_info=True)
        console.print(f"[red]Error in configuration menu: {e}[/red]")
        return 1
