"""
Moscow Exchange (MOEX ISS) currency fixings against RUB.

Today: weighted average prices from the SELT rates statistics. History: one request per
security on the CETS board, WAPRICE with CLOSE as fallback.
"""

import logging
from datetime import date

from ratekeeper.decimal_math import compare, is_numeric, round_half_up
from ratekeeper.errors import LimitExceeded, ProviderError
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider

logger = logging.getLogger(__name__)

SECID_MAP = {
    "USD000UTSTOM": "USD",
    "EUR_RUB__TOM": "EUR",
    "CNYRUB_TOM": "CNY",
    "KZTRUB_TOM": "KZT",
    "BYNRUB_TOM": "BYN",
    "TRYRUB_TOM": "TRY",
    "HKDRUB_TOM": "HKD",
}


def _column_rows(table: dict) -> list[dict]:
    """Turn an ISS {columns, data} table into a list of dicts."""
    columns = table.get("columns", [])
    return [dict(zip(columns, row)) for row in table.get("data", [])]


class MOEXProvider(BaseRateProvider):
    KEY = ProviderKey.MOEX
    BASE_CURRENCY = "RUB"
    HOME_PAGE = "https://www.moex.com"
    DESCRIPTION = "Moscow Exchange (MOEX) market data."
    CURRENCIES = tuple(SECID_MAP.values())
    REQUEST_DELAY = 1

    async def get_rates_by_date(self, on: date) -> RatesResult:
        if self.is_today(on):
            return await self._latest_rates(on)
        return await self._historical_rates(on)

    async def _latest_rates(self, on: date) -> RatesResult:
        url = f"{self.settings.moex_url.rstrip('/')}/statistics/engines/currency/markets/selt/rates.json"
        data = await self.fetch_json(url)

        rates: dict[str, str] = {}
        for row in _column_rows(data.get("wap_rates", {})):
            currency = SECID_MAP.get(row.get("secid"))
            if currency and is_numeric(row.get("price")):
                rates[currency] = round_half_up(row["price"], self.precision)
        return self.result(on, rates)

    async def _historical_rates(self, on: date) -> RatesResult:
        base_url = self.settings.moex_url.rstrip("/")
        params = {"from": on.isoformat(), "till": on.isoformat()}

        rates: dict[str, str] = {}
        skipped: list[str] = []
        for secid, currency in SECID_MAP.items():
            url = f"{base_url}/history/engines/currency/markets/selt/boards/CETS/securities/{secid}.json"
            try:
                data = await self.fetch_json(url, params=params)
            except LimitExceeded:
                raise
            except ProviderError as e:
                logger.warning(f"MOEX: skipping {secid} for {on}: {e}")
                skipped.append(currency)
                continue

            rows = _column_rows(data.get("history", {}))
            if not rows:
                continue
            price = rows[0].get("WAPRICE")
            if price is None:
                price = rows[0].get("CLOSE")
            if is_numeric(price) and compare(price, "0", self.precision) != 0:
                rates[currency] = round_half_up(price, self.precision)

        if skipped:
            logger.warning(f"MOEX: partial result for {on}, skipped {skipped}")
        return self.result(on, rates)
