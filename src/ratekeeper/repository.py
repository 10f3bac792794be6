"""
Rate persistence.

Records are insert-only: a provider's value for a day is authoritative once written,
so duplicate inserts are dropped by the unique index instead of overwriting.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date

from asyncpg import Pool

from ratekeeper.database import get_connection
from ratekeeper.models import RateRecord

logger = logging.getLogger(__name__)


class RateRepository(ABC):
    """Storage operations used by the importer and the resolver."""

    @abstractmethod
    async def insert_rates_if_absent(
        self,
        on: date,
        provider_id: int,
        base_currency: str,
        rates: dict[str, str]
    ) -> int:
        """
        Insert one row per currency, ignoring rows that already exist.

        Returns:
            Number of rows actually inserted.
        """

    @abstractmethod
    async def find_recent_records(
        self,
        provider_id: int,
        currency: str,
        base_currency: str,
        max_date: date,
        limit: int = 2
    ) -> list[RateRecord]:
        """Latest records at or before max_date, newest first."""

    @abstractmethod
    async def find_records_in_range(
        self,
        provider_id: int,
        currency: str,
        base_currency: str,
        start: date,
        end: date
    ) -> list[RateRecord]:
        """Records within [start, end], oldest first."""

    @abstractmethod
    async def record_exists(self, provider_id: int, base_currency: str, on: date) -> bool:
        pass

    @abstractmethod
    async def min_date(self, provider_id: int | None = None) -> date | None:
        pass

    async def find_date_map(
        self,
        provider_id: int,
        currency: str,
        base_currency: str,
        start: date,
        end: date
    ) -> dict[date, str]:
        """Date -> rate for one pair, in date order."""
        records = await self.find_records_in_range(provider_id, currency, base_currency, start, end)
        return {record.date: record.rate for record in records}


class PostgresRateRepository(RateRepository):
    """RateRepository on the exchange_rate table."""

    def __init__(self, pool: Pool):
        self.pool = pool

    async def insert_rates_if_absent(
        self,
        on: date,
        provider_id: int,
        base_currency: str,
        rates: dict[str, str]
    ) -> int:
        if not rates:
            return 0
        currencies = list(rates)
        values = [rates[code] for code in currencies]
        async with get_connection(self.pool) as conn:
            inserted = await conn.fetch(
                """
                INSERT INTO exchange_rate (date, currency, base_currency, rate, provider_id)
                SELECT $1::date, c.currency, $2::text, c.rate::numeric, $3::smallint
                FROM unnest($4::text[], $5::text[]) AS c(currency, rate)
                ON CONFLICT (date, currency, base_currency, provider_id) DO NOTHING
                RETURNING id
                """,
                on, base_currency, provider_id, currencies, values
            )
        if len(inserted) < len(rates):
            logger.debug(
                f"Skipped {len(rates) - len(inserted)} existing rates "
                f"for provider {provider_id} on {on}"
            )
        return len(inserted)

    async def find_recent_records(
        self,
        provider_id: int,
        currency: str,
        base_currency: str,
        max_date: date,
        limit: int = 2
    ) -> list[RateRecord]:
        async with get_connection(self.pool) as conn:
            rows = await conn.fetch(
                """
                SELECT date, currency, base_currency, rate, provider_id, created_at
                FROM exchange_rate
                WHERE provider_id = $1 AND currency = $2 AND base_currency = $3 AND date <= $4
                ORDER BY date DESC
                LIMIT $5
                """,
                provider_id, currency, base_currency, max_date, limit
            )
        return [RateRecord(**dict(row)) for row in rows]

    async def find_records_in_range(
        self,
        provider_id: int,
        currency: str,
        base_currency: str,
        start: date,
        end: date
    ) -> list[RateRecord]:
        async with get_connection(self.pool) as conn:
            rows = await conn.fetch(
                """
                SELECT date, currency, base_currency, rate, provider_id, created_at
                FROM exchange_rate
                WHERE provider_id = $1 AND currency = $2 AND base_currency = $3
                  AND date BETWEEN $4 AND $5
                ORDER BY date ASC
                """,
                provider_id, currency, base_currency, start, end
            )
        return [RateRecord(**dict(row)) for row in rows]

    async def record_exists(self, provider_id: int, base_currency: str, on: date) -> bool:
        async with get_connection(self.pool) as conn:
            found = await conn.fetchval(
                """
                SELECT EXISTS (
                    SELECT 1 FROM exchange_rate
                    WHERE provider_id = $1 AND base_currency = $2 AND date = $3
                )
                """,
                provider_id, base_currency, on
            )
        return bool(found)

    async def min_date(self, provider_id: int | None = None) -> date | None:
        async with get_connection(self.pool) as conn:
            if provider_id is None:
                return await conn.fetchval("SELECT MIN(date) FROM exchange_rate")
            return await conn.fetchval(
                "SELECT MIN(date) FROM exchange_rate WHERE provider_id = $1",
                provider_id
            )
