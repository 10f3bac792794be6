"""
Ratekeeper Data Providers Module

PROVIDER_FACTORIES is the single dispatch table from provider key to adapter class.
"""

from ratekeeper.models import ProviderKey
from ratekeeper.providers.abstract_api import AbstractApiProvider
from ratekeeper.providers.apilayer import (
    ApiLayerCurrencyDataProvider,
    ApiLayerFixerProvider,
    CoinLayerProvider,
    CurrencyLayerProvider,
    ExchangeRatesApiProvider,
)
from ratekeeper.providers.bank_of_canada import BankOfCanadaProvider
from ratekeeper.providers.banxico import BanxicoProvider
from ratekeeper.providers.base import BaseRateProvider
from ratekeeper.providers.bcb import BCBProvider
from ratekeeper.providers.binance import BinanceProvider
from ratekeeper.providers.bnb import BNBProvider
from ratekeeper.providers.cbr import CBRProvider
from ratekeeper.providers.cbrt import CBRTProvider
from ratekeeper.providers.cnb import CNBProvider
from ratekeeper.providers.ecb import ECBProvider
from ratekeeper.providers.fast_forex import FastForexProvider
from ratekeeper.providers.frankfurter import FrankfurterProvider
from ratekeeper.providers.fred import FREDProvider
from ratekeeper.providers.moex import MOEXProvider
from ratekeeper.providers.nbg import NBGProvider
from ratekeeper.providers.nbr import NBRProvider
from ratekeeper.providers.nbu import NBUProvider
from ratekeeper.providers.open_exchange_rates import OpenExchangeRatesProvider
from ratekeeper.providers.quote_feeds import CurrencyDataFeedProvider, ForgeProvider, XigniteProvider
from ratekeeper.providers.rcb import RCBProvider

PROVIDER_FACTORIES: dict[ProviderKey, type[BaseRateProvider]] = {
    ProviderKey.CBR: CBRProvider,
    ProviderKey.ECB: ECBProvider,
    ProviderKey.NBR: NBRProvider,
    ProviderKey.CBRT: CBRTProvider,
    ProviderKey.CNB: CNBProvider,
    ProviderKey.RCB: RCBProvider,
    ProviderKey.BNB: BNBProvider,
    ProviderKey.NBU: NBUProvider,
    ProviderKey.NBG: NBGProvider,
    ProviderKey.OPEN_EXCHANGE_RATES: OpenExchangeRatesProvider,
    ProviderKey.CURRENCY_LAYER: CurrencyLayerProvider,
    ProviderKey.COIN_LAYER: CoinLayerProvider,
    ProviderKey.API_LAYER_FIXER: ApiLayerFixerProvider,
    ProviderKey.API_LAYER_CURRENCY_DATA: ApiLayerCurrencyDataProvider,
    ProviderKey.EXCHANGE_RATES_API: ExchangeRatesApiProvider,
    ProviderKey.FAST_FOREX: FastForexProvider,
    ProviderKey.FORGE: ForgeProvider,
    ProviderKey.XIGNITE: XigniteProvider,
    ProviderKey.CURRENCY_DATA_FEED: CurrencyDataFeedProvider,
    ProviderKey.ABSTRACT_API: AbstractApiProvider,
    ProviderKey.FRANKFURTER: FrankfurterProvider,
    ProviderKey.BANK_OF_CANADA: BankOfCanadaProvider,
    ProviderKey.BINANCE: BinanceProvider,
    ProviderKey.FRED: FREDProvider,
    ProviderKey.MOEX: MOEXProvider,
    ProviderKey.BANXICO: BanxicoProvider,
    ProviderKey.BCB: BCBProvider,
}

__all__ = [
    "BaseRateProvider",
    "PROVIDER_FACTORIES",
    "AbstractApiProvider",
    "ApiLayerCurrencyDataProvider",
    "ApiLayerFixerProvider",
    "BankOfCanadaProvider",
    "BanxicoProvider",
    "BCBProvider",
    "BinanceProvider",
    "BNBProvider",
    "CBRProvider",
    "CBRTProvider",
    "CNBProvider",
    "CoinLayerProvider",
    "CurrencyDataFeedProvider",
    "CurrencyLayerProvider",
    "ECBProvider",
    "ExchangeRatesApiProvider",
    "FastForexProvider",
    "ForgeProvider",
    "FrankfurterProvider",
    "FREDProvider",
    "MOEXProvider",
    "NBGProvider",
    "NBRProvider",
    "NBUProvider",
    "OpenExchangeRatesProvider",
    "RCBProvider",
    "XigniteProvider",
]
