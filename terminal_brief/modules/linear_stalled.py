"""
Linear stalled-issue module for terminal-brief.
Lists in-progress issues that have not moved for a number of business days.

Setup resolves the configured team names to Linear team ids. Display renders
one block per team; a failed fetch only affects that team's block.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser
from dateutil.rrule import DAILY, FR, MO, TH, TU, WE, rrule

from terminal_brief.core.color import color_bold_text, color_text
from terminal_brief.core.config import BriefConfig, LinearConfig
from terminal_brief.core.errors import ApiError
from .base import ARROW, BriefModule

TEAMS_QUERY = """
query Teams {
  teams(first: 250) {
    nodes { id name }
  }
}
"""

ISSUES_QUERY = """
query TeamIssues($teamId: String!, $states: [String!]) {
  team(id: $teamId) {
    issues(first: 100, filter: { state: { name: { in: $states } } }) {
      nodes { identifier title startedAt }
    }
  }
}
"""

WEEKDAYS = (MO, TU, WE, TH, FR)


def add_business_days(start: datetime, days: int) -> datetime:
    """
    Add business days (Mon-Fri) to a datetime, keeping its time of day.

    Args:
        start: Starting point
        days: Number of weekdays to advance

    Returns:
        The datetime of the days-th weekday after start
    """
    if days <= 0:
        return start
    rule = rrule(DAILY, byweekday=WEEKDAYS, dtstart=start + timedelta(days=1), count=days)
    return list(rule)[-1]


def find_stalled_issues(issues: List[Dict[str, Any]], days_stalled: int,
                        now: datetime) -> List[Dict[str, Any]]:
    """
    Select the issues stuck longer than days_stalled business days.

    An issue is stalled once at least one full day has passed since its
    business-day deadline. Issues that never started are ignored.

    Args:
        issues: Issue nodes from the Linear API
        days_stalled: Allowed business days since the issue started
        now: Current time (timezone-aware)

    Returns:
        List of dicts with identifier, title and days_stalled
        (calendar days since start)
    """
    stalled = []
    for issue in issues:
        if not issue.get("startedAt"):
            continue
        started = date_parser.isoparse(issue["startedAt"])
        if started.tzinfo is None:
            started = started.replace(tzinfo=timezone.utc)
        deadline = add_business_days(started, days_stalled)
        if (now - deadline).days > 0:
            stalled.append({
                "identifier": issue["identifier"],
                "title": issue["title"],
                "days_stalled": (now - started).days,
            })
    return stalled


def team_cache_key(team_name: str) -> str:
    return "linear_stalled_" + re.sub(r"\s+", "_", team_name).lower()


def issue_url(settings: LinearConfig, team_name: str, issue: Dict[str, Any]) -> str:
    """'Dev Ops', OPS-1 -> '<base_url>dev-ops/issue/OPS-1'."""
    slug = re.sub(r"\s+", "-", team_name.lower())
    return f"{settings.base_url}{slug}/issue/{issue['identifier']}"


class LinearStalledModule(BriefModule):
    """Stalled issues across the configured Linear teams."""

    name = "linear_stalled"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, **kwargs):
        super().__init__(**kwargs)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.api_key: Optional[str] = None
        self.team_ids: Dict[str, str] = {}

    async def _graphql(self, settings: LinearConfig, query: str,
                       variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        data = await self.http.post_json(
            settings.api_url, payload, headers={"Authorization": self.api_key}
        )
        if data.get("errors"):
            message = "; ".join(e.get("message", "unknown error") for e in data["errors"])
            raise ApiError(f"Linear API error: {message}", url=settings.api_url)
        return data["data"]

    async def _fetch_teams(self, settings: LinearConfig) -> Dict[str, str]:
        """Get every team visible to the API key, keyed by lowercased name."""
        data = await self._graphql(settings, TEAMS_QUERY)
        return {team["name"].lower(): team["id"] for team in data["teams"]["nodes"]}

    async def _find_team_id(self, settings: LinearConfig, team_name: str) -> Optional[str]:
        teams = await self._fetch_teams(settings)
        return teams.get(team_name.lower())

    async def _fetch_stalled(self, settings: LinearConfig, team_name: str) -> List[Dict[str, Any]]:
        team_id = self.team_ids.get(team_name)
        if team_id is None:
            team_id = await self._find_team_id(settings, team_name)
            if team_id is None:
                return []
            self.team_ids[team_name] = team_id

        data = await self._graphql(settings, ISSUES_QUERY, {
            "teamId": team_id,
            "states": list(settings.states),
        })
        team = data.get("team")
        if not team:
            return []
        return find_stalled_issues(team["issues"]["nodes"], settings.days_stalled, self.clock())

    async def setup(self, config: BriefConfig) -> None:
        settings = config.linear
        self.api_key = settings.api_key
        self.team_ids = {}
        if not self.api_key:
            self.logger.warning("Linear API key not set. Linear module will be disabled.")
            return

        try:
            teams = await self._fetch_teams(settings)
        except (ApiError, KeyError, TypeError) as e:
            self.logger.warning("Error fetching Linear teams: %s", e)
            return

        for team_name in settings.team_names:
            team_id = teams.get(team_name.lower())
            if team_id:
                self.team_ids[team_name] = team_id
            else:
                self.logger.warning("Linear team not found: %s", team_name)

    async def display(self, config: BriefConfig) -> str:
        if not self.api_key:
            return self.not_configured(config, "Linear", "Linear API not configured")

        settings = config.linear
        output = self.header(config, "Linear Stalled Issues:")

        for team_name in settings.team_names:
            output += f"\n  {color_bold_text('blue', team_name)}"
            try:
                stalled = await self.cache.request_with_cache(
                    team_cache_key(team_name),
                    config.cache.linear_duration,
                    lambda: self._fetch_stalled(settings, team_name),
                )
            except (ApiError, KeyError, TypeError, ValueError) as e:
                self.logger.warning("Failed to fetch stalled issues for %s: %s", team_name, e)
                output += f"\n    {color_text('red', 'Failed to fetch issues')}"
                continue

            if not stalled:
                output += f"\n    {color_text('green', '✔ No stalled issues!')}"
                continue

            for issue in stalled:
                days = issue["days_stalled"]
                days_color = "red" if days > 7 else "magenta"
                output += (f"\n    {color_text('yellow', ARROW)} "
                           f"{color_bold_text('white', issue['title'])} "
                           f"({color_text(days_color, f'{days} days')})")
                output += f"\n      {color_text('blue', issue_url(settings, team_name, issue))}"

        return output + "\n"

    async def cleanup(self) -> None:
        self.team_ids = {}
        await super().cleanup()
