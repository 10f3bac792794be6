"""
Provider registry: provider key -> constructed adapter.

Adapters are built lazily from PROVIDER_FACTORIES and memoized, so credential checks
run once per process.
"""

import logging
from datetime import date
from typing import Callable

import httpx

from ratekeeper.cache import CacheBackend
from ratekeeper.config import Settings
from ratekeeper.errors import DisabledProvider, ProviderNotFound
from ratekeeper.models import ProviderInfo, ProviderKey
from ratekeeper.providers import PROVIDER_FACTORIES, BaseRateProvider
from ratekeeper.repository import RateRepository

logger = logging.getLogger(__name__)

PROVIDERS_CACHE_KEY = "providers"


class ProviderRegistry:
    """
    Resolves provider keys to adapter instances and lists active providers.

    Args:
        settings: Application settings (credentials, disabled list, cache TTL)
        client: Shared HTTP client handed to every adapter
        cache: Backend for the provider listing
        repository: Used to report the earliest stored date per provider
        factories: Key -> adapter class map
        today: Clock for adapters that distinguish "latest" from "historical"
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        cache: CacheBackend,
        repository: RateRepository,
        factories: dict[ProviderKey, type[BaseRateProvider]] | None = None,
        today: Callable[[], date] = date.today
    ):
        self.settings = settings
        self.client = client
        self.cache = cache
        self.repository = repository
        self.factories = PROVIDER_FACTORIES if factories is None else factories
        self._today = today
        self._instances: dict[ProviderKey, BaseRateProvider] = {}

    def get(self, key: str | ProviderKey) -> BaseRateProvider:
        """
        Return the adapter for a provider key.

        Raises:
            ProviderNotFound: unknown key
            DisabledProvider: switched off, inactive or missing credentials
        """
        try:
            provider_key = ProviderKey(key)
        except ValueError:
            raise ProviderNotFound(str(key)) from None
        if provider_key not in self.factories:
            raise ProviderNotFound(provider_key.value)

        if provider_key.value in self.settings.disabled_providers:
            raise DisabledProvider("Provider disabled by configuration", provider_key.value)

        provider = self._instances.get(provider_key)
        if provider is None:
            provider = self.factories[provider_key](self.client, self.settings, today=self._today)
            self._instances[provider_key] = provider

        if not provider.is_active:
            raise DisabledProvider("Provider is not active", provider_key.value)
        return provider

    def active_providers(self) -> list[BaseRateProvider]:
        """Every provider that can currently be used, in catalog order."""
        providers = []
        for key in self.factories:
            try:
                providers.append(self.get(key))
            except DisabledProvider as e:
                logger.info(f"Skipping provider {key.value}: {e}")
        return providers

    async def list_all(self, force_refresh: bool = False) -> list[ProviderInfo]:
        """Metadata of active providers, cached for providers_cache_ttl seconds."""
        if force_refresh:
            self.cache.delete(PROVIDERS_CACHE_KEY)
        else:
            cached = self.cache.get(PROVIDERS_CACHE_KEY)
            if cached is not None:
                return cached

        listing = []
        for provider in self.active_providers():
            listing.append(
                ProviderInfo(
                    key=provider.service_key,
                    home_page=provider.home_page,
                    description=provider.description,
                    base_currency=provider.base_currency,
                    currencies=provider.available_currencies,
                    min_date=await self.repository.min_date(provider.provider_id),
                )
            )

        self.cache.set(PROVIDERS_CACHE_KEY, listing, ttl=self.settings.providers_cache_ttl)
        logger.info(f"Cached {len(listing)} active providers")
        return listing
