"""
Base Module for terminal-brief
Defines the abstract base class shared by every dashboard module.

The dashboard is assembled from independent modules where:
- Each module owns one information source (system, weather, GitHub, ...)
- Modules share a common lifecycle: setup -> display -> cleanup
- Setup resolves identities once per process and keeps them as module state
- A module missing credentials stays usable in a degraded state and says so
"""

from abc import ABC, abstractmethod
from typing import Optional

from terminal_brief.core.cache import Cache
from terminal_brief.core.color import color_bold_text, color_text, theme_colors
from terminal_brief.core.config import BriefConfig
from terminal_brief.core.http import HttpClient
from terminal_brief.core.logging_setup import get_module_logger

BULLET = "▶"
ARROW = "↳"


class BriefModule(ABC):
    """
    Abstract base class for all dashboard modules.

    Provides common functionality for:
    - Cache and HTTP access
    - Per-module logging
    - Consistent fragment headers and degraded-state messages

    Subclasses must implement:
    - setup(): Resolve whatever the module needs before display
    - display(): Produce the module's text fragment

    Design Pattern: Template Method
    - The orchestrator drives the lifecycle
    - Subclasses provide the data fetching and formatting
    """

    name: str = ""

    def __init__(self, cache: Optional[Cache] = None, http: Optional[HttpClient] = None):
        """
        Initialize the base module.

        Args:
            cache: Shared TTL cache for remote results
            http: Shared async HTTP client
        """
        self.cache = cache
        self.http = http
        self.logger = get_module_logger(self.name)

    @abstractmethod
    async def setup(self, config: BriefConfig) -> None:
        """
        Prepare the module. Called once per process, before display.

        Implementations log a warning and leave the module unconfigured when
        credentials or identities are missing instead of raising.
        """

    @abstractmethod
    async def display(self, config: BriefConfig) -> str:
        """
        Produce this module's fragment of the dashboard.

        Returns:
            Rich markup text; an empty string contributes nothing
        """

    async def cleanup(self) -> None:
        """Release module resources. Override if the module holds any."""
        self.logger.debug("%s module cleaned up", self.name)

    def bullet(self, config: BriefConfig) -> str:
        return color_bold_text(theme_colors(config.display.color_theme)["info"], BULLET)

    def header(self, config: BriefConfig, title: str) -> str:
        """Format the '▶ Title:' lead-in of a fragment."""
        return f"{self.bullet(config)} {color_bold_text('white', title)}"

    def not_configured(self, config: BriefConfig, label: str, reason: str) -> str:
        """Format the one-line fragment shown in the degraded state."""
        warning = theme_colors(config.display.color_theme)["warning"]
        icon = "⚠️ " if config.display.use_emojis else ""
        return f"{self.bullet(config)} {label}: {color_text(warning, icon + reason)}"

    def failure(self, config: BriefConfig, label: str, reason: str) -> str:
        """Format the one-line fragment shown when a whole module fetch failed."""
        error = theme_colors(config.display.color_theme)["error"]
        return f"{self.bullet(config)} {label}: {color_text(error, reason)}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
