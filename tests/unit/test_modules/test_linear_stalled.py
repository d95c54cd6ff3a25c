"""
Unit tests for the Linear stalled-issue module.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from rich.text import Text

from terminal_brief.core.cache import Cache
from terminal_brief.core.config import BriefConfig, LinearConfig
from terminal_brief.core.errors import ApiError
from terminal_brief.modules.linear_stalled import (
    LinearStalledModule,
    add_business_days,
    find_stalled_issues,
    issue_url,
    team_cache_key,
)

API = "https://api.linear.app/graphql"

# Thursday
NOW = datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class FakeLinear:
    """Answers the teams query and per-team issue queries."""

    def __init__(self, teams=None, issues=None, errors=None):
        self.teams = teams if teams is not None else [{"id": "team-app", "name": "Application"}]
        self.issues = issues or {}
        self.errors = errors or {}
        self.calls = []

    async def post_json(self, url, payload, headers=None):
        self.calls.append((url, payload, headers))
        variables = payload.get("variables") or {}
        if "teamId" not in variables:
            if "teams" in self.errors:
                raise self.errors["teams"]
            return {"data": {"teams": {"nodes": self.teams}}}
        team_id = variables["teamId"]
        if team_id in self.errors:
            error = self.errors[team_id]
            if isinstance(error, Exception):
                raise error
            return {"errors": [{"message": error}]}
        return {"data": {"team": {"issues": {"nodes": self.issues.get(team_id, [])}}}}


def plain(markup):
    return Text.from_markup(markup).plain


def make_config(**linear):
    linear.setdefault("api_key", "lin_api_test")
    linear.setdefault("team_names", ("Application",))
    return BriefConfig(linear=LinearConfig(**linear))


@pytest.fixture
def cache(tmp_path):
    return Cache(tmp_path)


class TestBusinessDays:
    """Tests for business-day arithmetic."""

    def test_within_week(self):
        assert add_business_days(utc(2024, 3, 11, 9), 3) == utc(2024, 3, 14, 9)

    def test_skips_weekend(self):
        """Friday plus three business days is Wednesday."""
        assert add_business_days(utc(2024, 3, 1, 10), 3) == utc(2024, 3, 6, 10)

    def test_from_saturday(self):
        assert add_business_days(utc(2024, 3, 9, 10), 1) == utc(2024, 3, 11, 10)

    def test_zero_days(self):
        start = utc(2024, 3, 9, 10)
        assert add_business_days(start, 0) == start


class TestFindStalledIssues:
    """Tests for the stalled-issue rule."""

    def test_issue_past_deadline_is_stalled(self):
        """Started Friday, three business days -> Wednesday; stalled by Thursday noon."""
        issues = [{"identifier": "APP-1", "title": "Old", "startedAt": "2024-03-08T10:00:00.000Z"}]
        stalled = find_stalled_issues(issues, 3, NOW)
        assert stalled == [{"identifier": "APP-1", "title": "Old", "days_stalled": 6}]

    def test_less_than_a_day_past_deadline_is_not_stalled(self):
        """Deadline Wednesday 14:00; Thursday noon is under a full day later."""
        issues = [{"identifier": "APP-2", "title": "Recent", "startedAt": "2024-03-08T14:00:00Z"}]
        assert find_stalled_issues(issues, 3, NOW) == []

    def test_recent_issue_is_not_stalled(self):
        issues = [{"identifier": "APP-3", "title": "New", "startedAt": "2024-03-13T09:00:00Z"}]
        assert find_stalled_issues(issues, 3, NOW) == []

    def test_unstarted_issue_is_ignored(self):
        issues = [{"identifier": "APP-4", "title": "Never", "startedAt": None}]
        assert find_stalled_issues(issues, 3, NOW) == []

    def test_naive_timestamp_treated_as_utc(self):
        issues = [{"identifier": "APP-5", "title": "Naive", "startedAt": "2024-03-01T10:00:00"}]
        assert find_stalled_issues(issues, 3, NOW)[0]["days_stalled"] == 13


class TestHelpers:
    """Tests for keys and URLs."""

    def test_team_cache_key(self):
        assert team_cache_key("Dev Ops") == "linear_stalled_dev_ops"

    def test_issue_url_built_from_team(self):
        issue = {"identifier": "OPS-1"}
        assert issue_url(LinearConfig(), "Dev Ops", issue) == "https://linear.app/dev-ops/issue/OPS-1"


class TestSetup:
    """Tests for team resolution."""

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_requests(self, cache):
        http = FakeLinear()
        module = LinearStalledModule(cache=cache, http=http)
        config = BriefConfig()
        await module.setup(config)
        text = plain(await module.display(config))

        assert http.calls == []
        assert text.startswith("▶ Linear: ")
        assert text.endswith("Linear API not configured")

    @pytest.mark.asyncio
    async def test_resolves_team_ids_case_insensitively(self, cache):
        http = FakeLinear(teams=[{"id": "t1", "name": "application"}, {"id": "t2", "name": "Security"}])
        module = LinearStalledModule(cache=cache, http=http)
        await module.setup(make_config(team_names=("Application", "Security", "Missing")))

        assert module.team_ids == {"Application": "t1", "Security": "t2"}
        assert http.calls[0][2] == {"Authorization": "lin_api_test"}

    @pytest.mark.asyncio
    async def test_teams_listed_once_for_all_names(self, cache):
        """One teams query resolves every configured team."""
        http = FakeLinear(teams=[{"id": "t1", "name": "Application"},
                                 {"id": "t2", "name": "Security"},
                                 {"id": "t3", "name": "Dev Ops"}])
        module = LinearStalledModule(cache=cache, http=http)
        await module.setup(make_config(team_names=("Application", "Security", "Dev Ops")))

        assert module.team_ids == {"Application": "t1", "Security": "t2", "Dev Ops": "t3"}
        assert len(http.calls) == 1

    @pytest.mark.asyncio
    async def test_team_lookup_error_is_logged(self, cache):
        http = FakeLinear(errors={"teams": ApiError("unauthorized", status=401)})
        module = LinearStalledModule(cache=cache, http=http)
        await module.setup(make_config())
        assert module.team_ids == {}

    @pytest.mark.asyncio
    async def test_cleanup_forgets_teams(self, cache):
        module = LinearStalledModule(cache=cache, http=FakeLinear())
        await module.setup(make_config())
        await module.cleanup()
        assert module.team_ids == {}


class TestDisplay:
    """Tests for the rendered fragment."""

    @pytest.mark.asyncio
    async def test_lists_stalled_issues(self, cache):
        http = FakeLinear(issues={"team-app": [
            {"identifier": "APP-1", "title": "Old", "startedAt": "2024-03-01T10:00:00Z"},
            {"identifier": "APP-2", "title": "Fresh", "startedAt": "2024-03-13T10:00:00Z"},
        ]})
        module = LinearStalledModule(clock=lambda: NOW, cache=cache, http=http)
        config = make_config()
        await module.setup(config)
        text = await module.display(config)

        assert text.endswith("\n")
        assert plain(text).rstrip("\n").split("\n") == [
            "▶ Linear Stalled Issues:",
            "  Application",
            "    ↳ Old (13 days)",
            "      https://linear.app/application/issue/APP-1",
        ]
        _, payload, _ = http.calls[-1]
        assert payload["variables"] == {"teamId": "team-app", "states": ["In Progress", "In Review"]}

    @pytest.mark.asyncio
    async def test_no_stalled_issues(self, cache):
        module = LinearStalledModule(clock=lambda: NOW, cache=cache, http=FakeLinear())
        config = make_config()
        await module.setup(config)
        lines = plain(await module.display(config)).rstrip("\n").split("\n")
        assert lines[-1] == "    ✔ No stalled issues!"

    @pytest.mark.asyncio
    async def test_failed_team_does_not_hide_others(self, cache):
        http = FakeLinear(
            teams=[{"id": "t1", "name": "Application"}, {"id": "t2", "name": "Security"}],
            issues={"t2": [{"identifier": "SEC-1", "title": "Audit",
                            "startedAt": "2024-03-01T10:00:00Z"}]},
            errors={"t1": "Rate limited"},
        )
        module = LinearStalledModule(clock=lambda: NOW, cache=cache, http=http)
        config = make_config(team_names=("Application", "Security"))
        await module.setup(config)
        lines = plain(await module.display(config)).rstrip("\n").split("\n")

        assert lines == [
            "▶ Linear Stalled Issues:",
            "  Application",
            "    Failed to fetch issues",
            "  Security",
            "    ↳ Audit (13 days)",
            "      https://linear.app/security/issue/SEC-1",
        ]
        assert cache.get(team_cache_key("Application"), 60).found is False

    @pytest.mark.asyncio
    async def test_stalled_list_is_cached(self, cache):
        http = FakeLinear()
        module = LinearStalledModule(clock=lambda: NOW, cache=cache, http=http)
        config = make_config()
        await module.setup(config)
        await module.display(config)
        await module.display(config)

        issue_queries = [c for c in http.calls if "teamId" in (c[1].get("variables") or {})]
        assert len(issue_queries) == 1
        assert cache.get("linear_stalled_application", 60).value == []
