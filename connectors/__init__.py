"""
connectors — OAuth connection and token-lifecycle core.

Provides:
  • a registry of OAuth provider endpoints / credentials
  • an opaque state codec for the authorization redirect
  • code → token and refresh-token exchange
  • an in-memory, multi-account connection store
  • ``ConnectionManager``, which hands out valid access tokens and
    refreshes them on demand

Per-service API clients only ever need
``ConnectionManager.get_valid_access_token``.
"""
