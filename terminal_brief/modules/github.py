"""
GitHub module for terminal-brief.
Shows open pull requests awaiting your review, authored by you, or mentioning you.

Each query is a separate section: if one search fails, the others still render
and the failed one shows a "Failed to fetch" line in place of its list.
"""

import hashlib
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from terminal_brief.core.color import color_bold_text, color_text, theme_colors
from terminal_brief.core.config import BriefConfig, GitHubConfig
from terminal_brief.core.errors import ApiError
from .base import ARROW, BriefModule


@dataclass(frozen=True)
class PullRequestQuery:
    """One issue-search query and how its results are shown."""
    key: str
    qualifier: str
    title: str
    label: str
    title_color: str
    arrow_color: str
    separator: str


REVIEW_QUERY = PullRequestQuery("review", "review-requested", "PRs awaiting your review",
                                "review requests", "yellow", "blue", " #")
CREATED_QUERY = PullRequestQuery("created", "author", "Your open PRs", "created PRs",
                                 "blue", "green", "/")
MENTIONS_QUERY = PullRequestQuery("mentions", "mentions", "PR mentions", "PR mentions",
                                  "magenta", "yellow", "/")


@dataclass
class SectionResult:
    """Outcome of one search: counts and item lines, or a failure."""
    query: PullRequestQuery
    count: int = 0
    items: Optional[List[str]] = None
    failed: bool = False


def get_token(config: GitHubConfig) -> Optional[str]:
    """Resolve the API token from config, then the environment."""
    return (config.personal_token
            or os.environ.get("GITHUB_PERSONAL_TOKEN")
            or os.environ.get("GITHUB_TOKEN"))


def repo_name_from_url(url: str) -> str:
    """'https://api.github.com/repos/owner/repo' -> 'repo'."""
    return url.rstrip("/").split("/")[-1]


def review_count_color(count: int) -> str:
    if count > 3:
        return "red"
    elif count > 0:
        return "yellow"
    return "green"


class GitHubModule(BriefModule):
    """Pull request summary for the authenticated GitHub user."""

    name = "github"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    async def _fetch_username(self, api_url: str) -> str:
        data = await self.http.get_json(f"{api_url}/user", headers=self._headers())
        return data["login"]

    async def _search(self, api_url: str, qualifier: str, per_page: int) -> Dict[str, Any]:
        params = {
            "q": f"is:open is:pr {qualifier}:{self.username}",
            "per_page": per_page,
        }
        data = await self.http.get_json(f"{api_url}/search/issues", params=params,
                                        headers=self._headers())
        # Keep only what the fragment needs so cache records stay small
        return {
            "total_count": data["total_count"],
            "items": [
                {
                    "title": item["title"],
                    "number": item["number"],
                    "repository_url": item["repository_url"],
                }
                for item in data["items"]
            ],
        }

    async def setup(self, config: BriefConfig) -> None:
        self.token = get_token(config.github)
        self.username = config.github.username

        if not self.token:
            self.logger.warning(
                "GitHub token not configured. GitHub information will not be available."
            )
            return

        if not self.username:
            digest = hashlib.sha256(self.token.encode()).hexdigest()[:12]
            try:
                self.username = await self.cache.request_with_cache(
                    f"github_user_{digest}",
                    config.cache.github_duration,
                    lambda: self._fetch_username(config.github.api_url),
                )
            except (ApiError, KeyError, TypeError) as e:
                self.logger.warning("Could not fetch GitHub username: %s", e)

        if not self.username:
            self.logger.warning("GitHub username not configured or could not be fetched.")

    async def _run_query(self, config: BriefConfig, query: PullRequestQuery) -> SectionResult:
        settings = config.github
        try:
            data = await self.cache.request_with_cache(
                f"github_{query.key}_{self.username}",
                config.cache.github_duration,
                lambda: self._search(settings.api_url, query.qualifier, settings.max_prs),
            )
            items = [
                f"{repo_name_from_url(item['repository_url'])}{query.separator}"
                f"{item['number']}: {item['title']}"
                for item in data["items"]
            ]
            return SectionResult(query, count=int(data["total_count"]), items=items)
        except (ApiError, KeyError, TypeError, ValueError) as e:
            self.logger.warning("Failed to fetch %s: %s", query.label, e)
            return SectionResult(query, failed=True)

    async def display(self, config: BriefConfig) -> str:
        if not self.token or not self.username:
            return self.not_configured(config, "GitHub", "GitHub API not configured")

        settings = config.github
        emojis = config.display.use_emojis
        enabled = []
        if settings.show_assigned_prs:
            enabled.append(REVIEW_QUERY)
        if settings.show_created_prs:
            enabled.append(CREATED_QUERY)
        if settings.show_mentions:
            enabled.append(MENTIONS_QUERY)

        results = [await self._run_query(config, query) for query in enabled]

        # Summary line
        message = self.header(config, "GitHub:")
        error_color = theme_colors(config.display.color_theme)["error"]
        parts = []
        for result in results:
            count_text = "?" if result.failed else str(result.count)
            if result.query is REVIEW_QUERY:
                icon = "🔍 " if emojis else ""
                color = error_color if result.failed else review_count_color(result.count)
                count = color_bold_text(color, f"{count_text} PRs")
                parts.append(f"{icon}{count} awaiting your review")
            elif result.query is CREATED_QUERY:
                icon = "📤 " if emojis else ""
                color = error_color if result.failed else "blue"
                parts.append(f"{icon}{color_text(color, count_text)} created by you")
            else:
                icon = "💬 " if emojis else ""
                color = error_color if result.failed else "magenta"
                parts.append(f"{icon}{color_text(color, count_text)} mentions")
        if parts:
            message += " " + " | ".join(parts)

        # Details
        for result in results:
            query = result.query
            if result.failed:
                message += f"\n  {color_text('red', f'Failed to fetch {query.label}')}"
                continue
            if not result.items:
                continue
            message += f"\n  {color_bold_text(query.title_color, query.title + ':')}"
            for item in result.items:
                message += f"\n    {color_text(query.arrow_color, ARROW)} {color_text('white', item)}"

        return message + "\n"
