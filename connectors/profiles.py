"""
Profile fetchers — ask a provider who an access token belongs to.

Each provider answers "who am I" with its own JSON shape. A
``ProfileFetcher`` subclass knows one shape and maps it onto
``AccountProfile``; ``default_profile_fetchers`` wires one per provider id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from connectors.errors import ProfileFetchError
from connectors.models import AccountProfile


def _str_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class ProfileFetcher(ABC):
    """GET a profile endpoint with the bearer token and map the response."""

    def __init__(self, endpoint: str, timeout: float = 10.0) -> None:
        self.endpoint = endpoint
        self._timeout = timeout

    async def fetch(
        self,
        provider_id: str,
        access_token: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> AccountProfile:
        """
        Return the account behind ``access_token``.

        Raises ``ProfileFetchError`` on HTTP failure or when the response
        carries no account id.
        """
        try:
            resp = await self._send(access_token, http_client)
            resp.raise_for_status()
            data = resp.json()
            profile = self.parse(data)
        except httpx.HTTPError as exc:
            raise ProfileFetchError(provider_id, exc) from exc
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise ProfileFetchError(provider_id, f"unexpected profile response: {exc!r}") from exc

        if not profile.id:
            raise ProfileFetchError(provider_id, "profile response has no account id")
        return profile

    async def _send(
        self, access_token: str, http_client: Optional[httpx.AsyncClient]
    ) -> httpx.Response:
        if http_client is not None:
            return await self._request(http_client, access_token)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._request(client, access_token)

    async def _request(self, client: httpx.AsyncClient, access_token: str) -> httpx.Response:
        return await client.get(
            self.endpoint,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    @abstractmethod
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        ...


class GenericProfileFetcher(ProfileFetcher):
    """
    Best-effort mapping for providers with a flat ``/me`` response.

    ``root`` names the key the user object sits under when the provider
    wraps it (``{"user": {...}}``).
    """

    def __init__(self, endpoint: str, timeout: float = 10.0, root: Optional[str] = None) -> None:
        super().__init__(endpoint, timeout)
        self.root = root

    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        if self.root is not None:
            data = data[self.root]
        return AccountProfile(
            id=_str_or_none(data.get("id") or data.get("user_id")) or "",
            name=_str_or_none(
                data.get("name")
                or data.get("display_name")
                or data.get("fullName")
                or data.get("username")
            ),
            username=_str_or_none(data.get("username") or data.get("login")),
            email=_str_or_none(data.get("email")),
        )


class GitHubProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        return AccountProfile(
            id=_str_or_none(data.get("id")) or "",
            name=_str_or_none(data.get("name") or data.get("login")),
            username=_str_or_none(data.get("login")),
            email=_str_or_none(data.get("email")),
        )


class GoogleProfileFetcher(ProfileFetcher):
    """Gmail's ``profile`` and Drive's ``about`` both identify the user by email."""

    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data.get("user") or {}
        email = _str_or_none(user.get("emailAddress") or data.get("emailAddress"))
        return AccountProfile(
            id=email or "",
            name=_str_or_none(user.get("displayName") or data.get("displayName")),
            username=email,
            email=email,
        )


class SlackProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data["user"]
        return AccountProfile(
            id=_str_or_none(user.get("id")) or "",
            name=_str_or_none(user.get("name")),
            username=_str_or_none(user.get("name")),
            email=_str_or_none(user.get("email")),
        )


class InstagramProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        return AccountProfile(
            id=_str_or_none(data.get("id")) or "",
            name=_str_or_none(data.get("username")),
            username=_str_or_none(data.get("username")),
        )


class TikTokProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data["data"]["user"]
        return AccountProfile(
            id=_str_or_none(user.get("open_id")) or "",
            name=_str_or_none(user.get("display_name")),
            username=_str_or_none(user.get("display_name")),
        )


class LinkedInProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        first = data.get("localizedFirstName") or ""
        last = data.get("localizedLastName") or ""
        return AccountProfile(
            id=_str_or_none(data.get("id")) or "",
            name=_str_or_none(f"{first} {last}".strip()),
            username=_str_or_none(data.get("vanityName")),
        )


class TwitterProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data["data"]
        return AccountProfile(
            id=_str_or_none(user.get("id")) or "",
            name=_str_or_none(user.get("name") or user.get("username")),
            username=_str_or_none(user.get("username")),
        )


class YouTubeProfileFetcher(ProfileFetcher):
    """``channels?mine=true`` lists the token owner's channel first."""

    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        channel = data["items"][0]
        snippet = channel.get("snippet") or {}
        return AccountProfile(
            id=_str_or_none(channel.get("id")) or "",
            name=_str_or_none(snippet.get("title")),
            username=_str_or_none(snippet.get("customUrl")),
        )


class DatadogProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data["data"]
        attributes = user.get("attributes") or {}
        return AccountProfile(
            id=_str_or_none(user.get("id")) or "",
            name=_str_or_none(attributes.get("name") or attributes.get("handle")),
            username=_str_or_none(attributes.get("handle")),
            email=_str_or_none(attributes.get("email")),
        )


class MixpanelProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        user = data["results"]
        return AccountProfile(
            id=_str_or_none(user.get("user_id")) or "",
            name=_str_or_none(user.get("user_name")),
            email=_str_or_none(user.get("user_email")),
        )


class TwilioProfileFetcher(ProfileFetcher):
    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        account = data["accounts"][0]
        return AccountProfile(
            id=_str_or_none(account.get("sid")) or "",
            name=_str_or_none(account.get("friendly_name")),
        )


class TelegramProfileFetcher(ProfileFetcher):
    """The Bot API takes the token in the path: ``<endpoint><token>/getMe``."""

    async def _request(self, client: httpx.AsyncClient, access_token: str) -> httpx.Response:
        return await client.get(
            f"{self.endpoint}{access_token}/getMe",
            headers={"Accept": "application/json"},
        )

    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        bot = data["result"]
        return AccountProfile(
            id=_str_or_none(bot.get("id")) or "",
            name=_str_or_none(bot.get("first_name") or bot.get("username")),
            username=_str_or_none(bot.get("username")),
        )


class GraphQLProfileFetcher(ProfileFetcher):
    """POST a ``{ <root> { id name email } }`` query (Linear, Railway)."""

    def __init__(self, endpoint: str, root: str, timeout: float = 10.0) -> None:
        super().__init__(endpoint, timeout)
        self.root = root

    async def _request(self, client: httpx.AsyncClient, access_token: str) -> httpx.Response:
        return await client.post(
            self.endpoint,
            json={"query": f"{{ {self.root} {{ id name email }} }}"},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    def parse(self, data: Dict[str, Any]) -> AccountProfile:
        node = data["data"][self.root]
        return AccountProfile(
            id=_str_or_none(node.get("id")) or "",
            name=_str_or_none(node.get("name")),
            email=_str_or_none(node.get("email")),
        )


_DRIVE_ABOUT = "https://www.googleapis.com/drive/v3/about?fields=user"


def default_profile_fetchers(timeout: float = 10.0) -> Dict[str, ProfileFetcher]:
    """One fetcher per provider id in ``connectors.providers``."""

    def generic(url: str, root: Optional[str] = None) -> ProfileFetcher:
        return GenericProfileFetcher(url, timeout, root)

    def google(url: str) -> ProfileFetcher:
        return GoogleProfileFetcher(url, timeout)

    return {
        "instagram": InstagramProfileFetcher(
            "https://graph.instagram.com/me?fields=id,username,account_type", timeout
        ),
        "tiktok": TikTokProfileFetcher("https://open.tiktokapis.com/v2/user/info/", timeout),
        "linkedin": LinkedInProfileFetcher("https://api.linkedin.com/v2/me", timeout),
        "pinterest": generic("https://api.pinterest.com/v5/user_account"),
        "snapchat": generic("https://adsapi.snapchat.com/v1/me", root="me"),
        "reddit": generic("https://oauth.reddit.com/api/v1/me"),
        "youtube": YouTubeProfileFetcher(
            "https://www.googleapis.com/youtube/v3/channels?part=snippet&mine=true", timeout
        ),
        "twitter": TwitterProfileFetcher("https://api.twitter.com/2/users/me", timeout),
        "facebook": generic("https://graph.facebook.com/me?fields=id,name,email"),
        "gmail": google("https://www.googleapis.com/gmail/v1/users/me/profile"),
        "google-drive": google(_DRIVE_ABOUT),
        "google-calendar": google(_DRIVE_ABOUT),
        "google-sheets": google(_DRIVE_ABOUT),
        "google-docs": google(_DRIVE_ABOUT),
        "slack": SlackProfileFetcher("https://slack.com/api/users.identity", timeout),
        "notion": generic("https://api.notion.com/v1/users/me"),
        "trello": generic("https://api.trello.com/1/members/me"),
        "linear": GraphQLProfileFetcher("https://api.linear.app/graphql", "viewer", timeout),
        "github": GitHubProfileFetcher("https://api.github.com/user", timeout),
        "gitlab": generic("https://gitlab.com/api/v4/user"),
        "vercel": generic("https://api.vercel.com/v2/user", root="user"),
        "railway": GraphQLProfileFetcher("https://backboard.railway.app/graphql/v2", "me", timeout),
        "datadog": DatadogProfileFetcher("https://api.datadoghq.com/api/v2/current_user", timeout),
        "sentry": generic("https://sentry.io/api/0/users/me/"),
        "mixpanel": MixpanelProfileFetcher("https://mixpanel.com/api/app/me", timeout),
        "amplitude": generic("https://amplitude.com/api/2/userprofile", root="userData"),
        "stripe": generic("https://api.stripe.com/v1/account"),
        "paypal": generic("https://api.paypal.com/v1/identity/oauth2/userinfo"),
        "telegram": TelegramProfileFetcher("https://api.telegram.org/bot", timeout),
        "sendgrid": generic("https://api.sendgrid.com/v3/user/username"),
        "twilio": TwilioProfileFetcher("https://api.twilio.com/2010-04-01/Accounts.json", timeout),
    }
