"""
ProviderRegistry — lookup of OAuth provider configuration by id.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from connectors.errors import MissingCredentialsError, UnknownProviderError
from connectors.models import ProviderConfig
from connectors.providers import load_providers

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Immutable, ordered registry of provider configs."""

    def __init__(self, providers: Iterable[ProviderConfig]) -> None:
        self._providers: Dict[str, ProviderConfig] = {}
        for provider in providers:
            if provider.id in self._providers:
                raise ValueError(f"Duplicate provider id: {provider.id}")
            self._providers[provider.id] = provider

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ProviderRegistry":
        """Build the registry from the static table, reading credentials from ``environ``."""
        registry = cls(load_providers(environ))
        configured = registry.list_configured()
        logger.info(
            "Provider registry loaded: %d providers, %d configured",
            len(registry),
            len(configured),
        )
        missing = [p for p in registry.list_ids() if p not in configured]
        if missing:
            logger.warning(
                "Providers without client_id/secret (will fail on use): %s",
                ", ".join(missing),
            )
        return registry

    def __len__(self) -> int:
        return len(self._providers)

    def has(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def get(self, provider_id: str) -> ProviderConfig:
        """Return the provider config, or raise ``UnknownProviderError``."""
        try:
            return self._providers[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    def get_configured(self, provider_id: str) -> ProviderConfig:
        """Like ``get`` but also require client credentials."""
        provider = self.get(provider_id)
        if not provider.is_configured:
            raise MissingCredentialsError(provider_id)
        return provider

    def list_ids(self) -> List[str]:
        """Provider ids in registration order."""
        return list(self._providers)

    def list_configured(self) -> List[str]:
        return [p.id for p in self._providers.values() if p.is_configured]

    def list_providers(self) -> List[Dict[str, object]]:
        """Return info about all providers (no secrets)."""
        return [
            {
                "provider": p.id,
                "display_name": p.display_name,
                "configured": p.is_configured,
            }
            for p in self._providers.values()
        ]
