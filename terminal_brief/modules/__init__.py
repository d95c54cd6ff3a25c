"""
Module Layer for terminal-brief

Each module owns one information source and contributes one fragment of the
dashboard through the shared setup/display/cleanup lifecycle.

Architecture Overview:
- BriefModule: Abstract base class defining the module interface
- ModuleRegistry: Name -> module mapping, resolved against enabled_modules
- SystemModule: Load, memory, disk, battery and uptime
- GreetingModule: Time-of-day greeting
- WeatherModule: Current conditions from Open-Meteo
- GitHubModule: Pull requests awaiting review, authored, or mentioning you
- LinearStalledModule: In-progress Linear issues that stopped moving

Usage:
    from terminal_brief.core import Cache, HttpClient
    from terminal_brief.modules import build_default_registry

    registry = build_default_registry(Cache(cache_dir), HttpClient())
    modules = registry.get_enabled_modules(config)
"""

from terminal_brief.core.cache import Cache
from terminal_brief.core.http import HttpClient

from .base import BriefModule
from .registry import ModuleRegistry
from .system import SystemModule
from .greeting import GreetingModule
from .weather import WeatherModule
from .github import GitHubModule
from .linear_stalled import LinearStalledModule


def build_default_registry(cache: Cache, http: HttpClient) -> ModuleRegistry:
    """
    Create a registry holding every built-in module.

    Args:
        cache: Shared TTL cache
        http: Shared async HTTP client

    Returns:
        Populated ModuleRegistry
    """
    registry = ModuleRegistry()
    for module_cls in (SystemModule, GreetingModule, WeatherModule,
                       GitHubModule, LinearStalledModule):
        registry.register(module_cls(cache=cache, http=http))
    return registry


__all__ = [
    'BriefModule',
    'ModuleRegistry',
    'SystemModule',
    'GreetingModule',
    'WeatherModule',
    'GitHubModule',
    'LinearStalledModule',
    'build_default_registry',
]
