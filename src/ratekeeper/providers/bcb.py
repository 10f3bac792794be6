"""
Banco Central do Brasil PTAX (OData).

One call per currency. The closing bulletin ("Fechamento PTAX") is preferred, the last
bulletin of the day otherwise. Failed currencies are skipped.
"""

import logging
from datetime import date

from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import LimitExceeded, ProviderError
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider

logger = logging.getLogger(__name__)

CLOSING_BULLETIN = "Fechamento PTAX"


class BCBProvider(BaseRateProvider):
    KEY = ProviderKey.BCB
    BASE_CURRENCY = "BRL"
    HOME_PAGE = "https://www.bcb.gov.br"
    DESCRIPTION = "Central Bank of Brazil (BCB) provides official exchange rates for Brazilian Real."
    CURRENCIES = ("AUD", "CAD", "CHF", "DKK", "EUR", "GBP", "JPY", "NOK", "SEK", "USD")
    REQUEST_DELAY = 1

    def url_for(self, currency: str, on: date) -> str:
        quoted = f"{on:%m-%d-%Y}"
        if currency == "USD":
            endpoint = f"DollarRateDate(dataCotacao=@dataCotacao)?@dataCotacao='{quoted}'&$format=json"
        else:
            endpoint = (
                "ExchangeRateDate(moeda=@moeda,dataCotacao=@dataCotacao)"
                f"?@moeda='{currency}'&@dataCotacao='{quoted}'&$format=json"
            )
        return f"{self.settings.bcb_url.rstrip('/')}/{endpoint}"

    @staticmethod
    def pick_value(currency: str, items: list[dict]):
        if currency == "USD":
            return items[0].get("cotacaoVenda")
        for item in items:
            if item.get("tipoBoletim") == CLOSING_BULLETIN:
                return item.get("cotacaoVenda")
        return items[-1].get("cotacaoVenda")

    async def get_rates_by_date(self, on: date) -> RatesResult:
        rates: dict[str, str] = {}
        skipped: list[str] = []
        for currency in self.CURRENCIES:
            try:
                data = await self.fetch_json(self.url_for(currency, on))
            except LimitExceeded:
                raise
            except ProviderError as e:
                logger.warning(f"BCB: skipping {currency} for {on}: {e}")
                skipped.append(currency)
                continue

            items = data.get("value") or []
            if not items:
                continue
            value = self.pick_value(currency, items)
            if value is not None:
                rates[currency] = round_half_up(value, self.precision)

        if skipped:
            logger.warning(f"BCB: partial result for {on}, skipped {skipped}")
        return self.result(on, rates)
