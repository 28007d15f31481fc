"""
Tests for the per-provider profile fetchers.
"""

import json

import httpx
import pytest

from connectors.errors import ProfileFetchError
from connectors.profiles import (
    DatadogProfileFetcher,
    GenericProfileFetcher,
    GitHubProfileFetcher,
    GoogleProfileFetcher,
    GraphQLProfileFetcher,
    LinkedInProfileFetcher,
    MixpanelProfileFetcher,
    SlackProfileFetcher,
    TelegramProfileFetcher,
    TikTokProfileFetcher,
    TwilioProfileFetcher,
    TwitterProfileFetcher,
    YouTubeProfileFetcher,
    default_profile_fetchers,
)
from connectors.registry import ProviderRegistry


def _http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestResponseMapping:
    def test_github(self):
        profile = GitHubProfileFetcher("https://api.github.com/user").parse(
            {"id": 42, "login": "octocat", "name": None, "email": "mona@example.com"}
        )
        assert profile.id == "42"
        assert profile.name == "octocat"
        assert profile.username == "octocat"
        assert profile.email == "mona@example.com"

    def test_google_drive_about(self):
        profile = GoogleProfileFetcher("https://drive.test").parse(
            {"user": {"emailAddress": "a@gmail.com", "displayName": "Ada"}}
        )
        assert profile.id == "a@gmail.com"
        assert profile.name == "Ada"

    def test_gmail_profile(self):
        profile = GoogleProfileFetcher("https://gmail.test").parse({"emailAddress": "a@gmail.com"})
        assert profile.id == profile.email == "a@gmail.com"

    def test_slack(self):
        profile = SlackProfileFetcher("https://slack.test").parse(
            {"ok": True, "user": {"id": "U1", "name": "ada", "email": "ada@corp.test"}}
        )
        assert (profile.id, profile.username, profile.email) == ("U1", "ada", "ada@corp.test")

    def test_tiktok(self):
        profile = TikTokProfileFetcher("https://tiktok.test").parse(
            {"data": {"user": {"open_id": "open-1", "display_name": "ada"}}}
        )
        assert profile.id == "open-1"

    def test_linkedin(self):
        profile = LinkedInProfileFetcher("https://linkedin.test").parse(
            {"id": "li-1", "localizedFirstName": "Ada", "localizedLastName": "Lovelace"}
        )
        assert profile.name == "Ada Lovelace"

    def test_generic_fallbacks(self):
        profile = GenericProfileFetcher("https://x.test").parse(
            {"user_id": 7, "display_name": "Seven", "login": "seven"}
        )
        assert (profile.id, profile.name, profile.username) == ("7", "Seven", "seven")

    def test_generic_with_root(self):
        profile = GenericProfileFetcher("https://x.test", root="user").parse(
            {"user": {"id": "v-1", "username": "ada", "email": "ada@x.test"}}
        )
        assert (profile.id, profile.name, profile.email) == ("v-1", "ada", "ada@x.test")

    def test_twitter(self):
        profile = TwitterProfileFetcher("https://twitter.test").parse(
            {"data": {"id": "2244994945", "name": "Ada", "username": "ada"}}
        )
        assert (profile.id, profile.name, profile.username) == ("2244994945", "Ada", "ada")

    def test_youtube(self):
        profile = YouTubeProfileFetcher("https://youtube.test").parse(
            {"items": [{"id": "UC123", "snippet": {"title": "Ada Codes", "customUrl": "@ada"}}]}
        )
        assert (profile.id, profile.name, profile.username) == ("UC123", "Ada Codes", "@ada")

    def test_datadog(self):
        profile = DatadogProfileFetcher("https://datadog.test").parse(
            {
                "data": {
                    "id": "dd-1",
                    "type": "users",
                    "attributes": {"name": "Ada", "handle": "ada@x.test", "email": "ada@x.test"},
                }
            }
        )
        assert (profile.id, profile.name, profile.email) == ("dd-1", "Ada", "ada@x.test")

    def test_mixpanel(self):
        profile = MixpanelProfileFetcher("https://mixpanel.test").parse(
            {"status": "ok", "results": {"user_id": 77, "user_name": "Ada", "user_email": "a@x.test"}}
        )
        assert (profile.id, profile.name, profile.email) == ("77", "Ada", "a@x.test")

    def test_twilio(self):
        profile = TwilioProfileFetcher("https://twilio.test").parse(
            {"accounts": [{"sid": "AC123", "friendly_name": "Ada's account"}]}
        )
        assert (profile.id, profile.name) == ("AC123", "Ada's account")

    def test_telegram(self):
        profile = TelegramProfileFetcher("https://telegram.test/bot").parse(
            {"ok": True, "result": {"id": 123456, "first_name": "Helper", "username": "helper_bot"}}
        )
        assert (profile.id, profile.name, profile.username) == ("123456", "Helper", "helper_bot")


class TestFetch:
    @pytest.mark.asyncio
    async def test_sends_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 42, "login": "octocat"})

        fetcher = GitHubProfileFetcher("https://api.github.com/user")
        profile = await fetcher.fetch("github", "tok1", _http(handler))

        assert profile.id == "42"
        assert seen[0].headers["authorization"] == "Bearer tok1"

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        fetcher = GitHubProfileFetcher("https://api.github.com/user")
        with pytest.raises(ProfileFetchError) as exc_info:
            await fetcher.fetch("github", "tok1", _http(lambda r: httpx.Response(401)))
        assert exc_info.value.provider_id == "github"

    @pytest.mark.asyncio
    async def test_missing_id_raises(self):
        fetcher = GitHubProfileFetcher("https://api.github.com/user")
        with pytest.raises(ProfileFetchError):
            await fetcher.fetch("github", "tok1", _http(lambda r: httpx.Response(200, json={"login": "x"})))

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises(self):
        fetcher = SlackProfileFetcher("https://slack.test")
        with pytest.raises(ProfileFetchError):
            await fetcher.fetch("slack", "tok1", _http(lambda r: httpx.Response(200, json={"ok": False})))

    @pytest.mark.asyncio
    async def test_graphql_posts_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"viewer": {"id": "lin-1", "name": "Ada"}}})

        fetcher = GraphQLProfileFetcher("https://api.linear.app/graphql", "viewer")
        profile = await fetcher.fetch("linear", "tok1", _http(handler))

        assert profile.id == "lin-1"
        assert seen[0].method == "POST"
        assert "viewer" in json.loads(seen[0].content)["query"]

    @pytest.mark.asyncio
    async def test_telegram_puts_token_in_path(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True, "result": {"id": 1, "username": "b"}})

        fetcher = TelegramProfileFetcher("https://api.telegram.org/bot")
        await fetcher.fetch("telegram", "123:abc", _http(handler))

        assert str(seen[0].url) == "https://api.telegram.org/bot123:abc/getMe"
        assert "authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_empty_channel_list_raises(self):
        fetcher = YouTubeProfileFetcher("https://youtube.test")
        with pytest.raises(ProfileFetchError):
            await fetcher.fetch("youtube", "tok1", _http(lambda r: httpx.Response(200, json={"items": []})))


# One realistic "who am I" body per provider.
SAMPLE_BODIES = {
    "instagram": {"id": "17841400000", "username": "ada", "account_type": "BUSINESS"},
    "tiktok": {"data": {"user": {"open_id": "open-1", "display_name": "ada"}}},
    "linkedin": {"id": "li-1", "localizedFirstName": "Ada", "localizedLastName": "Lovelace"},
    "pinterest": {"id": "549755885175", "username": "ada", "account_type": "BUSINESS"},
    "snapchat": {"request_status": "SUCCESS", "me": {"id": "snap-1", "display_name": "Ada"}},
    "reddit": {"id": "abc12", "name": "ada"},
    "youtube": {"items": [{"id": "UC123", "snippet": {"title": "Ada Codes"}}]},
    "twitter": {"data": {"id": "2244994945", "name": "Ada", "username": "ada"}},
    "facebook": {"id": "10158", "name": "Ada Lovelace", "email": "ada@x.test"},
    "gmail": {"emailAddress": "ada@gmail.com", "messagesTotal": 10},
    "google-drive": {"user": {"emailAddress": "ada@gmail.com", "displayName": "Ada"}},
    "google-calendar": {"user": {"emailAddress": "ada@gmail.com", "displayName": "Ada"}},
    "google-sheets": {"user": {"emailAddress": "ada@gmail.com", "displayName": "Ada"}},
    "google-docs": {"user": {"emailAddress": "ada@gmail.com", "displayName": "Ada"}},
    "slack": {"ok": True, "user": {"id": "U1", "name": "ada", "email": "ada@corp.test"}},
    "notion": {"object": "user", "id": "notion-1", "name": "Ada", "type": "person"},
    "trello": {"id": "5abbe4b7", "fullName": "Ada Lovelace", "username": "ada"},
    "linear": {"data": {"viewer": {"id": "lin-1", "name": "Ada", "email": "ada@x.test"}}},
    "github": {"id": 42, "login": "octocat", "name": "Mona"},
    "gitlab": {"id": 1, "username": "ada", "name": "Ada", "email": "ada@x.test"},
    "vercel": {"user": {"id": "vc-1", "username": "ada", "email": "ada@x.test"}},
    "railway": {"data": {"me": {"id": "rw-1", "name": "Ada", "email": "ada@x.test"}}},
    "datadog": {"data": {"id": "dd-1", "type": "users", "attributes": {"handle": "ada@x.test"}}},
    "sentry": {"id": "1", "name": "Ada", "username": "ada", "email": "ada@x.test"},
    "mixpanel": {"status": "ok", "results": {"user_id": 77, "user_email": "ada@x.test"}},
    "amplitude": {"userData": {"user_id": "amp-1", "properties": {}}},
    "stripe": {"id": "acct_1", "object": "account", "email": "ada@x.test"},
    "paypal": {"user_id": "https://www.paypal.com/webapps/auth/identity/user/abc", "name": "Ada"},
    "telegram": {"ok": True, "result": {"id": 123456, "first_name": "Helper", "username": "helper_bot"}},
    "sendgrid": {"username": "ada", "user_id": 1234},
    "twilio": {"accounts": [{"sid": "AC123", "friendly_name": "Ada"}]},
}


def test_every_provider_has_a_fetcher():
    registry = ProviderRegistry.from_environment({})
    assert set(default_profile_fetchers()) == set(registry.list_ids())
    assert set(SAMPLE_BODIES) == set(registry.list_ids())


@pytest.mark.asyncio
@pytest.mark.parametrize("provider_id", sorted(SAMPLE_BODIES))
async def test_every_provider_maps_its_sample_body(provider_id):
    fetcher = default_profile_fetchers()[provider_id]
    body = SAMPLE_BODIES[provider_id]

    profile = await fetcher.fetch(
        provider_id, "tok1", _http(lambda request: httpx.Response(200, json=body))
    )
    assert profile.id
