"""
Provider registry tests.
"""

import asyncio
from datetime import date

import pytest
from conftest import Stack, make_settings

from ratekeeper.errors import DisabledProvider, ProviderNotFound
from ratekeeper.models import ProviderKey
from ratekeeper.providers import PROVIDER_FACTORIES
from ratekeeper.registry import PROVIDERS_CACHE_KEY, ProviderRegistry


class TestProviderRegistry:
    def setup_method(self):
        self.stack = Stack()
        self.registry = self.stack.registry

    def test_get_by_string_and_enum(self):
        provider = self.registry.get("cbr")
        assert provider is self.registry.get(ProviderKey.CBR)
        assert provider.provider_id == 1

    def test_unknown_key(self):
        with pytest.raises(ProviderNotFound):
            self.registry.get("nope")

    def test_key_without_factory(self):
        with pytest.raises(ProviderNotFound):
            self.registry.get("ecb")

    def test_inactive_provider(self):
        with pytest.raises(DisabledProvider):
            self.registry.get("abstract_api")

    def test_administratively_disabled(self):
        stack = Stack(disabled_providers=["cbr"])
        with pytest.raises(DisabledProvider):
            stack.registry.get("cbr")

    def test_list_all_skips_inactive(self):
        listing = asyncio.run(self.registry.list_all())
        assert [info.key for info in listing] == ["cbr", "fred"]
        assert listing[0].base_currency == "RUB"
        assert listing[0].currencies == ["USD", "EUR"]
        assert listing[0].min_date is None

    def test_list_all_is_cached(self):
        first = asyncio.run(self.registry.list_all())
        self.stack.repository.add(date(2026, 2, 9), "USD", "RUB", "78.0", 1)
        assert asyncio.run(self.registry.list_all()) is first

        refreshed = asyncio.run(self.registry.list_all(force_refresh=True))
        assert refreshed[0].min_date == date(2026, 2, 9)
        assert self.stack.cache.get(PROVIDERS_CACHE_KEY) is refreshed

    def test_list_all_ttl(self):
        asyncio.run(self.registry.list_all())
        self.stack.clock.advance(self.stack.settings.providers_cache_ttl)
        assert self.stack.cache.get(PROVIDERS_CACHE_KEY) is None


class TestProviderCatalog:
    def setup_method(self):
        self.registry = ProviderRegistry(
            make_settings(fred_api_key="k"), client=None, cache=Stack().cache, repository=None
        )

    def test_every_key_has_an_adapter(self):
        assert set(PROVIDER_FACTORIES) == set(ProviderKey)
        for key, factory in PROVIDER_FACTORIES.items():
            assert factory.KEY == key

    def test_ids_are_stable(self):
        assert ProviderKey.CBR.provider_id == 1
        assert ProviderKey.ECB.provider_id == 2
        assert ProviderKey.FRANKFURTER.provider_id == 21
        assert ProviderKey.BCB.provider_id == 27

    def test_missing_credentials_disable_provider(self):
        with pytest.raises(DisabledProvider) as exc_info:
            self.registry.get("open_exchange_rates")
        assert str(exc_info.value) == "Provider disabled: Need API key"

    def test_credentialed_provider(self):
        assert self.registry.get("fred").base_currency == "USD"

    def test_active_providers_skip_unconfigured(self):
        keys = {p.service_key for p in self.registry.active_providers()}
        assert {"cbr", "ecb", "frankfurter", "fred", "moex"} <= keys
        assert "open_exchange_rates" not in keys
        assert "currency_layer" not in keys
