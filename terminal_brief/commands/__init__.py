"""
Subcommands for terminal-brief.
"""

from .config_menu import run_config_command

__all__ = ['run_config_command']
