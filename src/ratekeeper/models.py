"""
Ratekeeper Data Models

Rates travel as decimal strings end to end. Values read back from PostgreSQL arrive as
Decimal and are normalized to strings on the way into the models.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ratekeeper.decimal_math import normalize


# === Enums ===

class ProviderKey(str, Enum):
    """External rate sources. The value is the public provider key."""
    CBR = "cbr"
    ECB = "ecb"
    NBR = "nbr"
    CBRT = "cbrt"
    CNB = "cnb"
    RCB = "rcb"
    BNB = "bnb"
    NBU = "nbu"
    NBG = "nbg"
    OPEN_EXCHANGE_RATES = "open_exchange_rates"
    CURRENCY_LAYER = "currency_layer"
    COIN_LAYER = "coin_layer"
    API_LAYER_FIXER = "api_layer_fixer"
    API_LAYER_CURRENCY_DATA = "api_layer_currency_data"
    EXCHANGE_RATES_API = "exchange_rates_api"
    FAST_FOREX = "fast_forex"
    FORGE = "forge"
    XIGNITE = "xignite"
    CURRENCY_DATA_FEED = "currency_data_feed"
    ABSTRACT_API = "abstract_api"
    FRANKFURTER = "frankfurter"
    BANK_OF_CANADA = "bank_of_canada"
    BINANCE = "binance"
    FRED = "fred"
    MOEX = "moex"
    BANXICO = "banxico"
    BCB = "bcb"

    @property
    def provider_id(self) -> int:
        """Stable numeric id stored with every rate record."""
        return PROVIDER_IDS[self]


PROVIDER_IDS: dict[ProviderKey, int] = {
    key: index for index, key in enumerate(ProviderKey, start=1)
}


class FetchStatus(str, Enum):
    """Outcome of one importer run."""
    ALREADY_EXISTS = "exist"
    EMPTY = "empty"
    SUCCESS = "success"


# === Provider output ===

class RatesResult(BaseModel):
    """
    Rates returned by one provider call.

    `date` is the day the data applies to, which may be earlier than the
    requested day (weekends, holidays).
    """
    provider_id: int
    base_currency: str
    date: date
    rates: dict[str, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.rates


# === Persistence ===

class RateRecord(BaseModel):
    """One persisted rate. Unique on (date, currency, base_currency, provider_id)."""
    date: date
    currency: str
    base_currency: str
    rate: str
    provider_id: int
    created_at: datetime | None = None

    @field_validator("rate", mode="before")
    @classmethod
    def rate_to_string(cls, v):
        """Convert NUMERIC values coming from the database to plain strings."""
        if isinstance(v, (Decimal, int)):
            return normalize(v)
        return v


# === Resolver output ===

class RateResponse(BaseModel):
    """
    Rate for a currency pair on a date.

    A missing diff marks a provisional answer: the previous day is not stored yet.
    """
    rate: str
    date: date
    diff: str | None = None
    date_diff: date | None = None

    @property
    def has_diff(self) -> bool:
        return self.diff is not None


class TimeseriesResponse(BaseModel):
    base_currency: str
    currency: str
    start_date: date
    end_date: date
    rates: dict[date, str] = Field(default_factory=dict)


class ProviderInfo(BaseModel):
    """Public description of an active provider."""
    key: str
    home_page: str
    description: str
    base_currency: str
    currencies: list[str]
    min_date: date | None = None
