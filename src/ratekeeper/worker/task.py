"""
Fetch task value object.

Tasks are immutable: a retry or a backfill step is a new task value.
"""

from datetime import date

from pydantic import BaseModel


class FetchRateTask(BaseModel):
    """
    Fetch one provider's rates for one date.

    load_previous: days still to walk back after this one (backfill chain)
    no_rate: consecutive empty days seen so far in the chain
    retry_count: failed attempts of this very task
    """
    date: date
    provider: str
    load_previous: int = 0
    no_rate: int = 0
    retry_count: int = 0

    model_config = {"frozen": True}

    @property
    def dedup_key(self) -> str:
        return f"fetch-rate-{self.date.isoformat()}-{self.provider}"

    def next_retry(self) -> "FetchRateTask":
        return self.model_copy(update={"retry_count": self.retry_count + 1})

    def moved_to(self, on: date) -> "FetchRateTask":
        """Same chain position, different date (jump over a reporting lag)."""
        return self.model_copy(update={"date": on, "retry_count": 0})

    def backfill(self, on: date, empty: bool) -> "FetchRateTask":
        """Next step of the backfill chain."""
        return FetchRateTask(
            date=on,
            provider=self.provider,
            load_previous=self.load_previous - 1,
            no_rate=self.no_rate + 1 if empty else 0,
        )
