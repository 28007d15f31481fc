"""
Application settings loaded from environment variables.

Provider client credentials are not listed here: each provider entry in
``connectors.providers`` names its own environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── OAuth flow ───────────────────────────────────────────────────────
    oauth_redirect_base: str = "http://localhost:8000"  # base URL for OAuth callbacks
    oauth_success_redirect: str = "/dashboard"           # where the callback sends the browser
    oauth_state_secret: str = ""                         # HMAC secret for state; empty = unsigned
    oauth_state_max_age_seconds: int = 0                 # 0 disables the state age check

    # ── Outbound HTTP ────────────────────────────────────────────────────
    http_timeout_seconds: float = 10.0

    # ── Security Secrets ─────────────────────────────────────────────────
    jwt_secret: str = "change-me-jwt-secret-key"   # HMAC secret for bearer tokens
    jwt_expiry_seconds: int = 604800                # 7 days

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def callback_url(self, provider: str) -> str:
        """Default redirect URI registered with ``provider``."""
        return f"{self.oauth_redirect_base.rstrip('/')}/api/v1/connectors/{provider}/callback"


config = Settings()
