"""
Czech National Bank daily fixing (pipe-separated text).

    20.02.2025 #36
    země|měna|množství|kód|kurz
    Austrálie|dolar|1|AUD|15,224
"""

from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.currencies import ECB_CURRENCIES


class CNBProvider(BaseRateProvider):
    KEY = ProviderKey.CNB
    BASE_CURRENCY = "CZK"
    HOME_PAGE = "https://www.cnb.cz"
    DESCRIPTION = "Czech National Bank"
    CURRENCIES = tuple(sorted(set(ECB_CURRENCIES) - {"CZK"} | {"EUR", "XDR"}))

    async def get_rates_by_date(self, on: date) -> RatesResult:
        content = await self.fetch_text(self.settings.cnb_url, params={"date": f"{on:%d.%m.%Y}"})
        lines = content.splitlines()
        if not lines:
            return self.result(on)

        actual = parse_date(lines[0].split(" ")[0], "%d.%m.%Y") or on

        rates: dict[str, str] = {}
        for line in lines[2:]:
            parts = line.strip().split("|")
            if len(parts) < 5:
                continue
            amount, code, rate = parts[2], parts[3], parts[4]
            rates[code] = div(rate, amount, self.precision)
        return self.result(actual, rates)
