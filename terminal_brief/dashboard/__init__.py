"""
Dashboard module for terminal-brief.

Provides module orchestration and Rich rendering for the welcome dashboard.
"""

from .aggregator import WelcomeAggregator, WelcomeResult
from .formatter import DashboardFormatter

__all__ = [
    # Aggregator
    'WelcomeAggregator',
    'WelcomeResult',
    # Formatter
    'DashboardFormatter',
]
