"""
Async HTTP access for terminal-brief modules.

One aiohttp session is shared by every module for the lifetime of an
invocation and closed by the CLI once the dashboard has been printed.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from .errors import ApiError

logger = logging.getLogger(__name__)

USER_AGENT = "terminal-brief"


class HttpClient:
    """
    JSON-over-HTTP client with a lazily created aiohttp session.

    Every failure (transport error, timeout, non-2xx status, undecodable body)
    is raised as ApiError so callers only need one except clause.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(self, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[aiohttp.ClientSession] = None):
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_session = True
        return self._session

    async def request_json(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a request and decode the JSON response.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query string parameters
            headers: Extra request headers
            payload: JSON body

        Returns:
            Decoded JSON body

        Raises:
            ApiError: On any transport, status or decoding failure
        """
        session = await self._get_session()
        logger.debug("%s %s", method, url)
        try:
            async with session.request(method, url, params=params,
                                       headers=headers, json=payload) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ApiError(
                        f"{method} {url} failed: {response.reason} {body[:200]}".strip(),
                        status=response.status,
                        url=url,
                    )
                return await response.json(content_type=None)
        except ApiError:
            raise
        except asyncio.TimeoutError as e:
            raise ApiError(f"{method} {url} timed out", url=url) from e
        except aiohttp.ClientError as e:
            raise ApiError(f"{method} {url} failed: {e}", url=url) from e
        except ValueError as e:
            raise ApiError(f"{method} {url} returned invalid JSON: {e}", url=url) from e

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Any:
        """GET url and return the decoded JSON body."""
        return await self.request_json("GET", url, params=params, headers=headers)

    async def post_json(self, url: str, payload: Dict[str, Any],
                        headers: Optional[Dict[str, str]] = None) -> Any:
        """POST a JSON payload and return the decoded JSON body."""
        return await self.request_json("POST", url, headers=headers, payload=payload)

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
