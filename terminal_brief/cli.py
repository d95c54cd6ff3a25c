#!/usr/bin/env python3
"""
terminal-brief - Command Line Interface
Prints the startup dashboard, or edits its configuration with `config`.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from terminal_brief.commands import run_config_command
from terminal_brief.core import BriefConfig, Cache, HttpClient, load_config
from terminal_brief.core.logging_setup import setup_logging
from terminal_brief.dashboard import DashboardFormatter, WelcomeAggregator, WelcomeResult
from terminal_brief.modules import build_default_registry

# Initialize CLI app and console
app = typer.Typer(
    help="terminal-brief - your terminal startup dashboard",
    invoke_without_command=True,
    add_completion=False,
)

console = Console(highlight=False, emoji=False)
logger = logging.getLogger("terminal_brief.cli")


async def run_brief(config: BriefConfig, refresh: bool = False) -> WelcomeResult:
    """
    Build the dashboard for one invocation.

    Creates the shared cache and HTTP client, registers the built-in modules
    and runs them through the aggregator.

    Args:
        config: Loaded configuration
        refresh: Ignore cached API data and refetch everything

    Returns:
        WelcomeResult with the composed text
    """
    cache = Cache(config.get_cache_dir(), refresh=refresh)
    cache.ensure_directory()

    http = HttpClient()
    try:
        registry = build_default_registry(cache, http)
        aggregator = WelcomeAggregator(registry, config)
        return await aggregator.aggregate()
    finally:
        await http.close()


def show_dashboard(config_dir: Optional[Path], verbose: bool, refresh: bool) -> None:
    """Load configuration, build the dashboard and print it."""
    setup_logging("DEBUG" if verbose else "WARNING")

    try:
        config = load_config(config_dir)
    except Exception as e:
        logger.error("Failed to load configuration, using defaults: %s", e)
        config = BriefConfig()

    if not verbose:
        setup_logging(config.display.log_level)
    logger.debug("Enabled modules in config: %s", ", ".join(config.enabled_modules))

    try:
        result = asyncio.run(run_brief(config, refresh=refresh))
    except Exception as e:
        logger.error("Failed to build the dashboard: %s", e)
        return

    formatter = DashboardFormatter(console)
    formatter.render(result, show_metrics=config.performance.show_metrics)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", help="Directory holding config.json "
                                   "(default: ~/.config/terminal-brief)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Refetch all API data"),
):
    """
    Show the startup dashboard

    Run without a command to print the dashboard:
    - Greeting and system information
    - Current weather
    - GitHub pull requests
    - Stalled Linear issues
    """
    ctx.obj = {"config_dir": config_dir, "verbose": verbose}
    if ctx.invoked_subcommand is None:
        show_dashboard(config_dir, verbose, refresh=no_cache)


@app.command("config")
def config_command(ctx: typer.Context):
    """
    Edit the configuration interactively

    Example:
      terminal-brief config
    """
    options = ctx.obj or {}
    setup_logging("DEBUG" if options.get("verbose") else "WARNING")
    exit_code = run_config_command(options.get("config_dir"), console)
    raise typer.Exit(exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
