"""
Bank of Canada Valet API (FX_RATES_DAILY group).

Each observation holds the date under "d" and one FX{CUR}CAD series per currency.
"""

from datetime import date

from ratekeeper.decimal_math import round_half_up
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.http import prepare_url


class BankOfCanadaProvider(BaseRateProvider):
    KEY = ProviderKey.BANK_OF_CANADA
    BASE_CURRENCY = "CAD"
    HOME_PAGE = "https://www.bankofcanada.ca"
    DESCRIPTION = "Official exchange rates from the Bank of Canada."
    CURRENCIES = (
        "AUD", "BRL", "CNY", "EUR", "HKD", "INR", "IDR", "JPY", "MXN", "NZD", "NOK", "PEN", "RUB",
        "SAR", "SGD", "ZAR", "KRW", "SEK", "CHF", "TWD", "TRY", "GBP", "USD",
    )
    REQUEST_DELAY = 1

    async def get_rates_by_date(self, on: date) -> RatesResult:
        data = await self.fetch_json(prepare_url(self.settings.bank_of_canada_url, on, self.base_currency))
        observations = data.get("observations") or []
        if not observations:
            return self.result(on)

        observation = observations[0]
        actual = parse_date(observation.get("d")) or on
        rates: dict[str, str] = {}
        for key, value in observation.items():
            if key.startswith("FX") and key.endswith("CAD") and isinstance(value, dict):
                rates[key[2:-3]] = round_half_up(value["v"], self.precision)
        return self.result(actual, rates)
