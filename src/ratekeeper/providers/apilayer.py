"""
APILayer product family: CurrencyLayer, CoinLayer, Fixer, Currency Data and
ExchangeRatesAPI.

They share the response envelope ({"success": false, "error": {...}} on failure) and
the live/historical endpoint split. Quote-style payloads key rates by currency pair
("USDEUR") and are stripped down to the quoted currency.
"""

from datetime import date
from typing import Any

from ratekeeper.config import Settings
from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date, timestamp_date
from ratekeeper.providers.currencies import CRYPTO_CURRENCIES, WORLD_CURRENCIES
from ratekeeper.providers.http import prepare_url

APILAYER_HOME = "https://apilayer.com"
APILAYER_DESCRIPTION = (
    "APILayer APIs are feature-rich and easy to integrate, offering low latency for an "
    "enhanced developer experience."
)


def check_success(data: Any, provider: str, require_flag: bool = False) -> dict:
    """
    Raise ParseFailure for error envelopes and non-object payloads.

    With require_flag a payload lacking "success": true is also an error.
    """
    if not isinstance(data, dict):
        raise ParseFailure("Expected a JSON object", provider, str(data))
    failed = not data.get("success") if require_flag else data.get("success") is False
    if failed:
        error = data.get("error") or {}
        message = error.get("info") or error.get("message") or f"{provider} request failed"
        raise ParseFailure(message, provider, str(data))
    return data


def strip_quotes(quotes: dict[str, Any], source: str, precision: int) -> dict[str, str]:
    """{"USDEUR": 0.92} -> {"EUR": "0.92000000"}"""
    return {
        pair[len(source):]: round_half_up(value, precision)
        for pair, value in quotes.items()
        if pair.startswith(source)
    }


class CurrencyLayerProvider(BaseRateProvider):
    KEY = ProviderKey.CURRENCY_LAYER
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://apilayer.net"
    DESCRIPTION = "Real-time Exchange Rates & Currency Conversion JSON API"
    CURRENCIES = WORLD_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400
    # Free plan answers 429 to every request
    ACTIVE = False

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.access_key = self.require_credential(settings.currency_layer_access_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.currency_layer_url.rstrip("/")
        params = {"access_key": self.access_key}
        if self.is_today(on):
            url = f"{base_url}/live"
        else:
            url = f"{base_url}/historical"
            params["date"] = on.isoformat()

        data = check_success(
            await self.fetch_json(url, params=params), self.service_key, require_flag=True
        )
        rates = strip_quotes(data.get("quotes", {}), data.get("source", self.base_currency), self.precision)
        return self.result(timestamp_date(data["timestamp"]), rates)


class CoinLayerProvider(BaseRateProvider):
    KEY = ProviderKey.COIN_LAYER
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://coinlayer.com"
    DESCRIPTION = "Real-time and historical crypto currency rates."
    CURRENCIES = CRYPTO_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.access_key = self.require_credential(settings.coin_layer_access_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.coin_layer_url.rstrip("/")
        url = f"{base_url}/live" if self.is_today(on) else f"{base_url}/{on.isoformat()}"
        data = check_success(
            await self.fetch_json(url, params={"access_key": self.access_key, "target": self.base_currency}),
            self.service_key,
            require_flag=True,
        )

        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("rates", {}).items()
        }
        return self.result(timestamp_date(data["timestamp"]), rates)


class ApiLayerFixerProvider(BaseRateProvider):
    KEY = ProviderKey.API_LAYER_FIXER
    BASE_CURRENCY = "EUR"
    HOME_PAGE = APILAYER_HOME
    DESCRIPTION = APILAYER_DESCRIPTION
    CURRENCIES = WORLD_CURRENCIES
    # Free plan
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400 * 31

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.api_layer_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.api_layer_fixer_url.rstrip("/")
        url = f"{base_url}/latest" if self.is_today(on) else f"{base_url}/{on.isoformat()}"
        data = check_success(
            await self.fetch_json(url, headers={"apikey": self.api_key}), self.service_key
        )
        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("rates", {}).items()
        }
        return self.result(parse_date(data.get("date")) or on, rates)


class ApiLayerCurrencyDataProvider(BaseRateProvider):
    KEY = ProviderKey.API_LAYER_CURRENCY_DATA
    BASE_CURRENCY = "USD"
    HOME_PAGE = APILAYER_HOME
    DESCRIPTION = APILAYER_DESCRIPTION
    CURRENCIES = tuple(code for code in WORLD_CURRENCIES if code != "USD")
    # Free plan
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400 * 35

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.api_layer_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = prepare_url(self.settings.api_layer_currency_data_url, on, self.base_currency)
        data = check_success(
            await self.fetch_json(url, headers={"apikey": self.api_key}), self.service_key
        )
        rates = strip_quotes(data.get("quotes", {}), data.get("source", self.base_currency), self.precision)
        return self.result(timestamp_date(data["timestamp"]), rates)


class ExchangeRatesApiProvider(BaseRateProvider):
    KEY = ProviderKey.EXCHANGE_RATES_API
    BASE_CURRENCY = "EUR"
    HOME_PAGE = "https://exchangeratesapi.io"
    DESCRIPTION = "Exchange rate data for 170+ currencies, updated every 60 minutes."
    CURRENCIES = WORLD_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.access_key = self.require_credential(settings.exchange_rates_api_access_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.exchange_rates_api_url.rstrip("/")
        url = f"{base_url}/latest" if self.is_today(on) else f"{base_url}/{on.isoformat()}"
        data = check_success(
            await self.fetch_json(url, params={"access_key": self.access_key}), self.service_key
        )
        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("rates", {}).items()
        }
        return self.result(parse_date(data.get("date")) or on, rates)
