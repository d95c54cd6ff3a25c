"""
Core module for terminal-brief.
Contains configuration, the TTL cache, HTTP access and presentation helpers.
"""

from .cache import Cache, CacheResult
from .config import BriefConfig, load_config, save_config
from .errors import ApiError, BriefError, ConfigError
from .http import HttpClient
from .timing import Timings

__all__ = [
    'Cache',
    'CacheResult',
    'BriefConfig',
    'load_config',
    'save_config',
    'ApiError',
    'BriefError',
    'ConfigError',
    'HttpClient',
    'Timings',
]
