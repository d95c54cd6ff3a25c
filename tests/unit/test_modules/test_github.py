"""
Unit tests for the GitHub module.
"""

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from rich.text import Text

from terminal_brief.core.cache import Cache
from terminal_brief.core.config import BriefConfig, DisplayConfig, GitHubConfig
from terminal_brief.core.errors import ApiError
from terminal_brief.modules.github import (
    GitHubModule,
    get_token,
    repo_name_from_url,
    review_count_color,
)

API = "https://api.github.com"


def search_result(*items, total=None):
    return {
        "total_count": len(items) if total is None else total,
        "items": [
            {
                "title": title,
                "number": number,
                "repository_url": f"{API}/repos/acme/{repo}",
                "html_url": f"https://github.com/acme/{repo}/pull/{number}",
            }
            for repo, number, title in items
        ],
    }


class FakeGitHub:
    """Answers /user and /search/issues by qualifier."""

    def __init__(self, login="octocat", searches=None, user_error=None):
        self.login = login
        self.searches = searches or {}
        self.user_error = user_error
        self.calls = []

    async def get_json(self, url, params=None, headers=None):
        self.calls.append((url, params, headers))
        if url == f"{API}/user":
            if self.user_error:
                raise self.user_error
            return {"login": self.login}
        qualifier = params["q"].split()[-1].split(":")[0]
        response = self.searches.get(qualifier, search_result())
        if isinstance(response, Exception):
            raise response
        return response


def plain(markup):
    return Text.from_markup(markup).plain


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GITHUB_PERSONAL_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def cache(tmp_path):
    return Cache(tmp_path)


def make_config(**github):
    github.setdefault("personal_token", "ghp_test")
    return BriefConfig(github=GitHubConfig(**github))


class TestHelpers:
    """Tests for pure helpers."""

    def test_repo_name_from_url(self):
        assert repo_name_from_url(f"{API}/repos/acme/widgets") == "widgets"

    @pytest.mark.parametrize("count,color", [(0, "green"), (1, "yellow"), (3, "yellow"), (4, "red")])
    def test_review_count_color(self, count, color):
        assert review_count_color(count) == color

    def test_get_token_prefers_config(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        assert get_token(GitHubConfig(personal_token="ghp_cfg")) == "ghp_cfg"
        assert get_token(GitHubConfig()) == "ghp_env"


class TestSetup:
    """Tests for token and username resolution."""

    @pytest.mark.asyncio
    async def test_missing_token_makes_no_requests(self, cache):
        http = FakeGitHub()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(BriefConfig())

        assert http.calls == []
        text = plain(await module.display(BriefConfig()))
        assert text.startswith("▶ GitHub: ")
        assert text.endswith("GitHub API not configured")

    @pytest.mark.asyncio
    async def test_username_fetched_and_cached(self, cache):
        http = FakeGitHub(login="octocat")
        config = make_config()
        await GitHubModule(cache=cache, http=http).setup(config)
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)

        assert module.username == "octocat"
        assert [url for url, _, _ in http.calls].count(f"{API}/user") == 1
        assert http.calls[0][2]["Authorization"] == "token ghp_test"

    @pytest.mark.asyncio
    async def test_configured_username_skips_lookup(self, cache):
        http = FakeGitHub()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(make_config(username="hubot"))

        assert module.username == "hubot"
        assert http.calls == []

    @pytest.mark.asyncio
    async def test_username_lookup_failure_degrades(self, cache):
        http = FakeGitHub(user_error=ApiError("Bad credentials", status=401))
        module = GitHubModule(cache=cache, http=http)
        config = make_config(show_created_prs=True)
        await module.setup(config)

        assert module.username is None
        text = plain(await module.display(config))
        assert text.startswith("▶ GitHub: ")
        assert text.endswith("GitHub API not configured")


class TestDisplay:
    """Tests for the rendered fragment."""

    @pytest.mark.asyncio
    async def test_review_requests(self, cache):
        http = FakeGitHub(searches={
            "review-requested": search_result(("widgets", 42, "Add [WIP] caching")),
        })
        config = make_config()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        text = await module.display(config)

        assert text.endswith("\n")
        lines = plain(text).rstrip("\n").split("\n")
        assert lines[0] == "▶ GitHub: 🔍 1 PRs awaiting your review"
        assert lines[1] == "  PRs awaiting your review:"
        assert lines[2] == "    ↳ widgets #42: Add [WIP] caching"

    @pytest.mark.asyncio
    async def test_search_query_and_limit(self, cache):
        http = FakeGitHub()
        config = make_config(max_prs=2)
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        await module.display(config)

        url, params, _ = http.calls[-1]
        assert url == f"{API}/search/issues"
        assert params == {"q": "is:open is:pr review-requested:octocat", "per_page": 2}

    @pytest.mark.asyncio
    async def test_all_sections_without_emojis(self, cache):
        http = FakeGitHub(searches={
            "review-requested": search_result(),
            "author": search_result(("api", 7, "Fix auth"), ("web", 9, "New page")),
            "mentions": search_result(("docs", 3, "Typos")),
        })
        config = BriefConfig(
            github=GitHubConfig(personal_token="ghp_test", show_created_prs=True, show_mentions=True),
            display=DisplayConfig(use_emojis=False),
        )
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        lines = plain(await module.display(config)).rstrip("\n").split("\n")

        assert lines[0] == ("▶ GitHub: 0 PRs awaiting your review | 2 created by you"
                            " | 1 mentions")
        assert lines[1:] == [
            "  Your open PRs:",
            "    ↳ api/7: Fix auth",
            "    ↳ web/9: New page",
            "  PR mentions:",
            "    ↳ docs/3: Typos",
        ]

    @pytest.mark.asyncio
    async def test_total_count_can_exceed_items(self, cache):
        http = FakeGitHub(searches={
            "review-requested": search_result(("widgets", 1, "One"), total=12),
        })
        config = make_config()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        assert plain(await module.display(config)).startswith("▶ GitHub: 🔍 12 PRs")

    @pytest.mark.asyncio
    async def test_failed_section_does_not_hide_others(self, cache):
        http = FakeGitHub(searches={
            "review-requested": ApiError("rate limited", status=403),
            "author": search_result(("api", 7, "Fix auth")),
        })
        config = make_config(show_created_prs=True)
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        lines = plain(await module.display(config)).rstrip("\n").split("\n")

        assert lines[0] == "▶ GitHub: 🔍 ? PRs awaiting your review | 📤 1 created by you"
        assert lines[1] == "  Failed to fetch review requests"
        assert lines[2:] == ["  Your open PRs:", "    ↳ api/7: Fix auth"]

    @pytest.mark.asyncio
    async def test_failed_review_count_is_not_green(self, cache):
        """An unknown review count uses the theme's error color."""
        http = FakeGitHub(searches={"review-requested": ApiError("rate limited", status=403)})
        config = make_config()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        summary = (await module.display(config)).split("\n")[0]

        assert "[bold red]? PRs[/bold red]" in summary
        assert "[bold green]" not in summary

    @pytest.mark.asyncio
    async def test_failed_created_count_uses_error_color(self, cache):
        http = FakeGitHub(searches={"author": ApiError("boom", status=500)})
        config = make_config(show_assigned_prs=False, show_created_prs=True)
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        summary = (await module.display(config)).split("\n")[0]

        assert "[red]?[/red] created by you" in summary

    @pytest.mark.asyncio
    async def test_search_results_are_cached(self, cache):
        http = FakeGitHub(searches={"review-requested": search_result(("w", 1, "One"))})
        config = make_config()
        module = GitHubModule(cache=cache, http=http)
        await module.setup(config)
        await module.display(config)
        await module.display(config)

        searches = [c for c in http.calls if c[0].endswith("/search/issues")]
        assert len(searches) == 1
        assert cache.get("github_review_octocat", 60).value["items"] == [
            {"title": "One", "number": 1, "repository_url": f"{API}/repos/acme/w"}
        ]
