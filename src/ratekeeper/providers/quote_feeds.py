"""
Real-time quote feeds (1Forge, Xignite, CurrencyDataFeed).

They only serve current quotes for a handful of USD pairs; the result date is the
date stamped on the quotes, whatever date was requested.
"""

from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date, timestamp_date

QUOTED_CURRENCIES = ("EUR", "GBP", "JPY", "RUB")


class ForgeProvider(BaseRateProvider):
    KEY = ProviderKey.FORGE
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://1forge.com"
    DESCRIPTION = "Real-time Forex and Crypto API"
    CURRENCIES = QUOTED_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.forge_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        pairs = ",".join(f"{self.base_currency}/{code}" for code in self.CURRENCIES)
        data = await self.fetch_json(self.settings.forge_url, params={"pairs": pairs, "api_key": self.api_key})
        if not isinstance(data, list):
            raise ParseFailure("Failed to parse Forge response", self.service_key, str(data))

        rates: dict[str, str] = {}
        actual = on
        try:
            for item in data:
                # "s": "USD/EUR"
                rates[item["s"][-3:]] = round_half_up(item["p"], self.precision)
                if item.get("t"):
                    actual = timestamp_date(item["t"])
        except (LookupError, TypeError, AttributeError) as e:
            raise ParseFailure(f"Malformed Forge quote: {e!r}", self.service_key, str(data)) from e
        return self.result(actual, rates)


class XigniteProvider(BaseRateProvider):
    KEY = ProviderKey.XIGNITE
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://xignite.com"
    DESCRIPTION = "Global market data delivered on demand."
    CURRENCIES = QUOTED_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.token = self.require_credential(settings.xignite_token)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        params = {
            "Symbols": ",".join(f"{self.base_currency}{code}" for code in self.CURRENCIES),
            "_fields": "Outcome,Message,Symbol,Date,Time,Bid",
            "_Token": self.token,
        }
        data = await self.fetch_json(self.settings.xignite_url, params=params)
        if not isinstance(data, list) or not data or data[0].get("Outcome") != "Success":
            message = data[0].get("Message") if isinstance(data, list) and data else None
            raise ParseFailure(message or "Failed to parse Xignite response", self.service_key, str(data))

        rates: dict[str, str] = {}
        actual = on
        try:
            for item in data:
                rates[item["Symbol"][3:]] = round_half_up(item["Bid"], self.precision)
                actual = parse_date(item.get("Date"), "%m/%d/%Y") or actual
        except (LookupError, TypeError, AttributeError) as e:
            raise ParseFailure(f"Malformed Xignite quote: {e!r}", self.service_key, str(data)) from e
        return self.result(actual, rates)


class CurrencyDataFeedProvider(BaseRateProvider):
    KEY = ProviderKey.CURRENCY_DATA_FEED
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://currencydatafeed.com"
    DESCRIPTION = "Real-time FX and crypto rates, historical data and a currency converter."
    CURRENCIES = QUOTED_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.token = self.require_credential(settings.currency_data_feed_token)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        params = {
            "token": self.token,
            "currency": ",".join(f"{self.base_currency}/{code}" for code in self.CURRENCIES),
        }
        data = await self.fetch_json(self.settings.currency_data_feed_url, params=params)
        if not isinstance(data, dict) or not data.get("status"):
            raise ParseFailure("Failed to parse CurrencyDataFeed response", self.service_key, str(data))

        rates: dict[str, str] = {}
        actual = on
        try:
            for item in data.get("currency", []):
                # "currency": "USD/EUR", "date": "2025-02-20 10:00:00"
                rates[item["currency"][4:]] = round_half_up(item["value"], self.precision)
                actual = parse_date(str(item.get("date", ""))[:10]) or actual
        except (LookupError, TypeError, AttributeError) as e:
            raise ParseFailure(f"Malformed CurrencyDataFeed quote: {e!r}", self.service_key, str(data)) from e
        return self.result(actual, rates)
