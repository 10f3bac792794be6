"""
Ratekeeper Configuration Management

Provider credentials and endpoints come from the environment (or a local .env file).
Components receive a Settings instance explicitly; get_settings() is only used by
the entry points.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Numeric ===
    currency_precision: int = Field(
        default=8,
        description="Fractional digits used for every stored or computed rate"
    )

    # === Provider endpoints ===
    cbr_url: str = Field(
        default="https://www.cbr.ru/scripts/XML_daily.asp?date_req={date:%d/%m/%Y}",
        description="Central Bank of Russia daily XML"
    )
    ecb_url: str = Field(default="https://www.ecb.europa.eu/stats/eurofxref")
    nbr_url: str = Field(default="https://www.bnr.ro")
    cbrt_url: str = Field(default="https://www.tcmb.gov.tr/kurlar")
    cnb_url: str = Field(
        default=(
            "https://www.cnb.cz/cs/financni-trhy/devizovy-trh/kurzy-devizoveho-trhu/"
            "kurzy-devizoveho-trhu/denni_kurz.txt"
        )
    )
    rcb_url: str = Field(default="https://cbu.uz/en/arkhiv-kursov-valyut/json/all/{date:%Y-%m-%d}/")
    bnb_url: str = Field(
        default="https://www.bnb.bg/Statistics/StExternalSector/StExchangeRates/StERForeignCurrencies/index.htm"
    )
    nbu_url: str = Field(
        default="https://bank.gov.ua/NBUStatService/v1/statdirectory/exchange?date={date:%Y%m%d}"
    )
    nbg_url: str = Field(
        default="https://nbg.gov.ge/gw/api/ct/monetarypolicy/currencies/en/json/?date={date:%Y-%m-%d}"
    )
    open_exchange_rates_url: str = Field(default="https://openexchangerates.org/api")
    coin_layer_url: str = Field(default="http://api.coinlayer.com")
    currency_layer_url: str = Field(default="http://apilayer.net/api")
    api_layer_fixer_url: str = Field(default="https://api.apilayer.com/fixer")
    api_layer_currency_data_url: str = Field(
        default="https://api.apilayer.com/currency_data/historical?date={date:%Y-%m-%d}&source={base_currency}"
    )
    exchange_rates_api_url: str = Field(default="http://api.exchangeratesapi.io/v1")
    fast_forex_url: str = Field(default="https://api.fastforex.io")
    forge_url: str = Field(default="https://api.1forge.com/quotes")
    xignite_url: str = Field(
        default="https://globalcurrencies.xignite.com/xGlobalCurrencies.json/GetRealTimeRates"
    )
    currency_data_feed_url: str = Field(default="https://currencydatafeed.com/api/data.php")
    abstract_api_url: str = Field(
        default=(
            "https://exchange-rates.abstractapi.com/v1/historical/"
            "?api_key={api_key}&base={base_currency}&date={date:%Y-%m-%d}"
        )
    )
    frankfurter_url: str = Field(default="https://api.frankfurter.app")
    bank_of_canada_url: str = Field(
        default=(
            "https://www.bankofcanada.ca/valet/observations/group/FX_RATES_DAILY/json"
            "?start_date={date:%Y-%m-%d}&end_date={date:%Y-%m-%d}"
        )
    )
    binance_url: str = Field(default="https://api.binance.com")
    fred_url: str = Field(default="https://api.stlouisfed.org/fred")
    moex_url: str = Field(default="https://iss.moex.com/iss")
    banxico_url: str = Field(
        default=(
            "https://www.banxico.org.mx/SieAPIRest/service/v1/series/{currencies}"
            "/datos/{date:%Y-%m-%d}/{date:%Y-%m-%d}"
        )
    )
    bcb_url: str = Field(default="https://olinda.bcb.gov.br/olinda/servico/PTAX/versao/v1/odata")

    # === Provider credentials (empty = provider disabled) ===
    open_exchange_rates_app_id: str = Field(default="")
    coin_layer_access_key: str = Field(default="")
    currency_layer_access_key: str = Field(default="")
    api_layer_api_key: str = Field(default="", description="Shared by Fixer and Currency Data")
    exchange_rates_api_access_key: str = Field(default="")
    fast_forex_api_key: str = Field(default="")
    forge_api_key: str = Field(default="")
    xignite_token: str = Field(default="")
    currency_data_feed_token: str = Field(default="")
    abstract_api_key: str = Field(default="")
    fred_api_key: str = Field(default="")
    banxico_token: str = Field(default="")

    disabled_providers: list[str] = Field(
        default_factory=list,
        description="Provider keys switched off administratively"
    )

    # === HTTP ===
    http_timeout: float = Field(default=10.0, description="Initial request timeout (seconds)")
    http_timeout_step: float = Field(default=5.0, description="Timeout increment per transport retry")
    http_max_attempts: int = Field(default=4)
    http_retry_wait: float = Field(default=1.0, description="Exponential backoff multiplier (seconds)")

    # === Orchestration ===
    existing_data_window_days: int = Field(default=10)
    max_empty_days: int = Field(
        default=10,
        description="Consecutive empty days after which a backfill chain stops"
    )
    retry_delays_minutes: list[int] = Field(default_factory=lambda: [10, 60, 1440, 10080])
    throttle_margin: int = Field(
        default=10,
        description="Requests left in the window below which tasks get delayed"
    )

    # === Caches ===
    providers_cache_ttl: int = Field(default=3600)
    timeseries_cache_ttl: int = Field(default=86400)
    rate_cache_ttl: int | None = Field(default=None)

    # === Database Configuration ===
    database_host: str = Field(default="localhost")
    database_port: int = Field(default=5432)
    database_name: str = Field(default="ratekeeper")
    database_user: str = Field(default="ratekeeper")
    database_password: str = Field(default="")
    database_ssl_mode: str = Field(default="prefer")

    # === Scheduler Configuration ===
    scheduler_cron_hour: int = Field(default=12, description="Daily dispatch hour")
    scheduler_cron_minute: int = Field(default=0, description="Daily dispatch minute")
    scheduler_timezone: str = Field(default="UTC")

    # === Logging ===
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
