"""
Static OAuth provider table.

Each entry names the environment variables that hold its client
credentials; they are resolved once, when ``load_providers`` runs.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from connectors.models import ProviderConfig

logger = logging.getLogger(__name__)

_GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# ── All known providers — registration order is listing order ────────────

_PROVIDERS: List[Dict[str, Any]] = [
    # Social media
    {
        "id": "instagram",
        "display_name": "Instagram",
        "authorization_endpoint": "https://api.instagram.com/oauth/authorize",
        "token_endpoint": "https://api.instagram.com/oauth/access_token",
        "scope": "user_profile,user_media,instagram_basic,instagram_content_publish,"
        "instagram_manage_comments,instagram_manage_insights",
        "client_id_env": "INSTAGRAM_CLIENT_ID",
        "client_secret_env": "INSTAGRAM_CLIENT_SECRET",
    },
    {
        "id": "tiktok",
        "display_name": "TikTok",
        "authorization_endpoint": "https://www.tiktok.com/auth/authorize/",
        "token_endpoint": "https://open-api.tiktok.com/oauth/access_token/",
        "scope": "user.info.basic,video.list,video.upload",
        "client_id_env": "TIKTOK_CLIENT_KEY",
        "client_secret_env": "TIKTOK_CLIENT_SECRET",
    },
    {
        "id": "linkedin",
        "display_name": "LinkedIn",
        "authorization_endpoint": "https://www.linkedin.com/oauth/v2/authorization",
        "token_endpoint": "https://www.linkedin.com/oauth/v2/accessToken",
        "scope": "r_liteprofile,r_emailaddress,w_member_social,r_organization_social,"
        "w_organization_social",
        "client_id_env": "LINKEDIN_CLIENT_ID",
        "client_secret_env": "LINKEDIN_CLIENT_SECRET",
    },
    {
        "id": "pinterest",
        "display_name": "Pinterest",
        "authorization_endpoint": "https://www.pinterest.com/oauth/",
        "token_endpoint": "https://api.pinterest.com/v5/oauth/token",
        "scope": "boards:read,boards:write,pins:read,pins:write,user_accounts:read",
        "client_id_env": "PINTEREST_APP_ID",
        "client_secret_env": "PINTEREST_APP_SECRET",
    },
    {
        "id": "snapchat",
        "display_name": "Snapchat",
        "authorization_endpoint": "https://accounts.snapchat.com/login/oauth2/authorize",
        "token_endpoint": "https://accounts.snapchat.com/login/oauth2/access_token",
        "scope": "snapchat-marketing-api",
        "client_id_env": "SNAPCHAT_CLIENT_ID",
        "client_secret_env": "SNAPCHAT_CLIENT_SECRET",
    },
    {
        "id": "reddit",
        "display_name": "Reddit",
        "authorization_endpoint": "https://www.reddit.com/api/v1/authorize",
        "token_endpoint": "https://www.reddit.com/api/v1/access_token",
        "scope": "identity,edit,flair,history,modconfig,modflair,modlog,modposts,modwiki,"
        "mysubreddits,privatemessages,read,report,save,submit,subscribe,vote,"
        "wikiedit,wikiread",
        "client_id_env": "REDDIT_CLIENT_ID",
        "client_secret_env": "REDDIT_CLIENT_SECRET",
        "extra_authorize_params": {"duration": "permanent"},  # gets refresh_token
    },
    {
        "id": "youtube",
        "display_name": "YouTube",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/youtube "
        "https://www.googleapis.com/auth/youtube.upload "
        "https://www.googleapis.com/auth/youtubepartner",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    {
        "id": "twitter",
        "display_name": "Twitter",
        "authorization_endpoint": "https://twitter.com/i/oauth2/authorize",
        "token_endpoint": "https://api.twitter.com/2/oauth2/token",
        "scope": "tweet.read,tweet.write,users.read,follows.read,follows.write,offline.access",
        "client_id_env": "TWITTER_CLIENT_ID",
        "client_secret_env": "TWITTER_CLIENT_SECRET",
    },
    {
        "id": "facebook",
        "display_name": "Facebook",
        "authorization_endpoint": "https://www.facebook.com/v18.0/dialog/oauth",
        "token_endpoint": "https://graph.facebook.com/v18.0/oauth/access_token",
        "scope": "pages_manage_posts,pages_read_engagement,pages_manage_metadata,"
        "pages_read_user_content,pages_manage_ads",
        "client_id_env": "FACEBOOK_APP_ID",
        "client_secret_env": "FACEBOOK_APP_SECRET",
    },
    # Google services
    {
        "id": "gmail",
        "display_name": "Gmail",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/gmail.modify "
        "https://www.googleapis.com/auth/gmail.compose "
        "https://www.googleapis.com/auth/gmail.send",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    {
        "id": "google-drive",
        "display_name": "Google Drive",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/drive",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    {
        "id": "google-calendar",
        "display_name": "Google Calendar",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/calendar",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    {
        "id": "google-sheets",
        "display_name": "Google Sheets",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/spreadsheets",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    {
        "id": "google-docs",
        "display_name": "Google Docs",
        "authorization_endpoint": _GOOGLE_AUTH_URL,
        "token_endpoint": _GOOGLE_TOKEN_URL,
        "scope": "https://www.googleapis.com/auth/documents",
        "client_id_env": "GOOGLE_CLIENT_ID",
        "client_secret_env": "GOOGLE_CLIENT_SECRET",
    },
    # Productivity
    {
        "id": "slack",
        "display_name": "Slack",
        "authorization_endpoint": "https://slack.com/oauth/v2/authorize",
        "token_endpoint": "https://slack.com/api/oauth.v2.access",
        "scope": "channels:read,channels:write,chat:write,files:read,files:write,users:read",
        "client_id_env": "SLACK_CLIENT_ID",
        "client_secret_env": "SLACK_CLIENT_SECRET",
    },
    {
        "id": "notion",
        "display_name": "Notion",
        "authorization_endpoint": "https://api.notion.com/v1/oauth/authorize",
        "token_endpoint": "https://api.notion.com/v1/oauth/token",
        "scope": "read_content,update_content,insert_content",
        "client_id_env": "NOTION_CLIENT_ID",
        "client_secret_env": "NOTION_CLIENT_SECRET",
        "extra_authorize_params": {"owner": "user"},
    },
    {
        "id": "trello",
        "display_name": "Trello",
        "authorization_endpoint": "https://trello.com/1/authorize",
        "token_endpoint": "https://trello.com/1/OAuthGetAccessToken",
        "scope": "read,write,account",
        "client_id_env": "TRELLO_API_KEY",
        "client_secret_env": "TRELLO_API_SECRET",
    },
    {
        "id": "linear",
        "display_name": "Linear",
        "authorization_endpoint": "https://linear.app/oauth/authorize",
        "token_endpoint": "https://api.linear.app/oauth/token",
        "scope": "read,write",
        "client_id_env": "LINEAR_CLIENT_ID",
        "client_secret_env": "LINEAR_CLIENT_SECRET",
    },
    # Development
    {
        "id": "github",
        "display_name": "GitHub",
        "authorization_endpoint": "https://github.com/login/oauth/authorize",
        "token_endpoint": "https://github.com/login/oauth/access_token",
        "scope": "repo,user,admin:org,workflow",
        "client_id_env": "GITHUB_CLIENT_ID",
        "client_secret_env": "GITHUB_CLIENT_SECRET",
    },
    {
        "id": "gitlab",
        "display_name": "GitLab",
        "authorization_endpoint": "https://gitlab.com/oauth/authorize",
        "token_endpoint": "https://gitlab.com/oauth/token",
        "scope": "api,read_user,write_repository",
        "client_id_env": "GITLAB_CLIENT_ID",
        "client_secret_env": "GITLAB_CLIENT_SECRET",
    },
    {
        "id": "vercel",
        "display_name": "Vercel",
        "authorization_endpoint": "https://vercel.com/oauth/authorize",
        "token_endpoint": "https://api.vercel.com/v2/oauth/access_token",
        "scope": "deployments,projects",
        "client_id_env": "VERCEL_CLIENT_ID",
        "client_secret_env": "VERCEL_CLIENT_SECRET",
    },
    {
        "id": "railway",
        "display_name": "Railway",
        "authorization_endpoint": "https://railway.app/oauth/authorize",
        "token_endpoint": "https://railway.app/oauth/token",
        "scope": "read,write",
        "client_id_env": "RAILWAY_CLIENT_ID",
        "client_secret_env": "RAILWAY_CLIENT_SECRET",
    },
    # Monitoring
    {
        "id": "datadog",
        "display_name": "Datadog",
        "authorization_endpoint": "https://app.datadoghq.com/oauth2/v1/authorize",
        "token_endpoint": "https://app.datadoghq.com/oauth2/v1/token",
        "scope": "metrics_read,metrics_write,logs_read,logs_write",
        "client_id_env": "DATADOG_CLIENT_ID",
        "client_secret_env": "DATADOG_CLIENT_SECRET",
    },
    {
        "id": "sentry",
        "display_name": "Sentry",
        "authorization_endpoint": "https://sentry.io/oauth/authorize/",
        "token_endpoint": "https://sentry.io/oauth/token/",
        "scope": "project:read,project:write,event:read",
        "client_id_env": "SENTRY_CLIENT_ID",
        "client_secret_env": "SENTRY_CLIENT_SECRET",
    },
    # Analytics
    {
        "id": "mixpanel",
        "display_name": "Mixpanel",
        "authorization_endpoint": "https://mixpanel.com/oauth/authorize",
        "token_endpoint": "https://mixpanel.com/oauth/access_token",
        "scope": "read,write",
        "client_id_env": "MIXPANEL_CLIENT_ID",
        "client_secret_env": "MIXPANEL_CLIENT_SECRET",
    },
    {
        "id": "amplitude",
        "display_name": "Amplitude",
        "authorization_endpoint": "https://amplitude.com/oauth/authorize",
        "token_endpoint": "https://amplitude.com/oauth/token",
        "scope": "read,write",
        "client_id_env": "AMPLITUDE_CLIENT_ID",
        "client_secret_env": "AMPLITUDE_CLIENT_SECRET",
    },
    # Finance
    {
        "id": "stripe",
        "display_name": "Stripe",
        "authorization_endpoint": "https://connect.stripe.com/oauth/authorize",
        "token_endpoint": "https://connect.stripe.com/oauth/token",
        "scope": "read_write",
        "client_id_env": "STRIPE_CLIENT_ID",
        "client_secret_env": "STRIPE_CLIENT_SECRET",
    },
    {
        "id": "paypal",
        "display_name": "PayPal",
        "authorization_endpoint": "https://www.paypal.com/signin/authorize",
        "token_endpoint": "https://api.paypal.com/v1/oauth2/token",
        "scope": "openid,profile,email",
        "client_id_env": "PAYPAL_CLIENT_ID",
        "client_secret_env": "PAYPAL_CLIENT_SECRET",
    },
    # Communication
    {
        "id": "telegram",
        "display_name": "Telegram",
        "authorization_endpoint": "https://oauth.telegram.org/auth",
        "token_endpoint": "https://oauth.telegram.org/auth/request",
        "scope": "bot",
        "client_id_env": "TELEGRAM_BOT_TOKEN",
        "client_secret_env": "TELEGRAM_BOT_TOKEN",
    },
    {
        "id": "sendgrid",
        "display_name": "SendGrid",
        "authorization_endpoint": "https://sendgrid.com/oauth/authorize",
        "token_endpoint": "https://api.sendgrid.com/v3/oauth/token",
        "scope": "mail.send,mail.batch.send",
        "client_id_env": "SENDGRID_CLIENT_ID",
        "client_secret_env": "SENDGRID_CLIENT_SECRET",
    },
    {
        "id": "twilio",
        "display_name": "Twilio",
        "authorization_endpoint": "https://www.twilio.com/authorize",
        "token_endpoint": "https://api.twilio.com/oauth/token",
        "scope": "sms,voice",
        "client_id_env": "TWILIO_CLIENT_ID",
        "client_secret_env": "TWILIO_CLIENT_SECRET",
    },
]


def load_providers(environ: Optional[Mapping[str, str]] = None) -> List[ProviderConfig]:
    """
    Build a ``ProviderConfig`` for every entry in the table.

    Missing credentials are tolerated here; the provider stays listed and
    fails with ``MissingCredentialsError`` on first use.
    """
    env = os.environ if environ is None else environ
    providers: List[ProviderConfig] = []
    for entry in _PROVIDERS:
        fields = {k: v for k, v in entry.items() if not k.endswith("_env")}
        provider = ProviderConfig(
            **fields,
            client_id=env.get(entry["client_id_env"]) or None,
            client_secret=env.get(entry["client_secret_env"]) or None,
        )
        if not provider.is_configured:
            logger.debug(
                "Provider %s has no credentials (%s / %s)",
                provider.id,
                entry["client_id_env"],
                entry["client_secret_env"],
            )
        providers.append(provider)
    return providers
