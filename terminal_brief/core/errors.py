"""
Exception types for terminal-brief.

Remote failures are reported as ApiError so modules can catch them at the
section that issued the request. Cache plumbing never raises.
"""

from typing import Optional


class BriefError(Exception):
    """Base class for all terminal-brief errors."""


class ConfigError(BriefError):
    """Configuration could not be persisted."""


class ApiError(BriefError):
    """
    A remote API call failed.

    Attributes:
        status: HTTP status code, if the server answered
        url: URL of the failed request
    """

    def __init__(self, message: str, status: Optional[int] = None,
                 url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (HTTP {self.status})"
        return base
