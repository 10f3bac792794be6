"""
Binance spot prices against USDT.

Today: one ticker call for every symbol. History: one daily kline per symbol, closing
price at index 4. Symbols that fail are skipped and the partial result is kept.
"""

import json
import logging
from datetime import date, datetime, timezone

from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import LimitExceeded, ProviderError
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider

logger = logging.getLogger(__name__)


class BinanceProvider(BaseRateProvider):
    KEY = ProviderKey.BINANCE
    BASE_CURRENCY = "USDT"
    HOME_PAGE = "https://www.binance.com"
    DESCRIPTION = (
        "Binance is a cryptocurrency exchange that provides a platform for trading "
        "various cryptocurrencies."
    )
    CURRENCIES = (
        "BTC", "ETH", "BNB", "SOL", "XRP", "ADA", "DOT", "DOGE", "LTC", "LINK", "TRX", "MATIC",
        "BCH", "ETC",
    )
    REQUEST_DELAY = 1

    async def get_rates_by_date(self, on: date) -> RatesResult:
        if self.is_today(on):
            return await self._latest_rates(on)
        return await self._historical_rates(on)

    async def _latest_rates(self, on: date) -> RatesResult:
        symbols = [f"{code}{self.base_currency}" for code in self.CURRENCIES]
        data = await self.fetch_json(
            f"{self.settings.binance_url.rstrip('/')}/api/v3/ticker/price",
            params={"symbols": json.dumps(symbols, separators=(",", ":"))},
        )
        rates: dict[str, str] = {}
        for item in data:
            code = item["symbol"][: -len(self.base_currency)]
            rates[code] = round_half_up(item["price"], self.precision)
        return self.result(on, rates)

    async def _historical_rates(self, on: date) -> RatesResult:
        start_time = int(datetime(on.year, on.month, on.day, tzinfo=timezone.utc).timestamp()) * 1000
        url = f"{self.settings.binance_url.rstrip('/')}/api/v3/klines"

        rates: dict[str, str] = {}
        skipped: list[str] = []
        for code in self.CURRENCIES:
            params = {
                "symbol": f"{code}{self.base_currency}",
                "interval": "1d",
                "startTime": start_time,
                "limit": 1,
            }
            try:
                data = await self.fetch_json(url, params=params)
                if data:
                    rates[code] = round_half_up(str(data[0][4]), self.precision)
            except LimitExceeded:
                raise
            except (ProviderError, LookupError, TypeError) as e:
                logger.warning(f"Binance: skipping {code} for {on}: {e}")
                skipped.append(code)

        if skipped:
            logger.warning(f"Binance: partial result for {on}, skipped {skipped}")
        return self.result(on, rates)
