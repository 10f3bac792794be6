"""
Rate Service

Request-level facade over the rate manager: validates parameters, turns missing
or provisional data into fetch tasks and reports whether the answer is final.
"""

import logging
from datetime import date as DateType, timedelta
from typing import Callable, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from ratekeeper.errors import RateNotFound
from ratekeeper.models import ProviderKey, RateResponse, TimeseriesResponse
from ratekeeper.rate_manager import RateManager
from ratekeeper.worker import Backpressure, FetchRateTask, TaskQueue

logger = logging.getLogger(__name__)

# Earliest date any provider can serve
MIN_DATE = DateType(1992, 7, 1)

CURRENCY_PATTERN = r"^[A-Z]{3,5}$"


def _check_date(value: DateType, info: ValidationInfo) -> DateType:
    today = (info.context or {}).get("today") or DateType.today()
    if value > today:
        raise ValueError(f"Date {value} is in the future")
    if value < MIN_DATE:
        raise ValueError(f"Date {value} is before {MIN_DATE}")
    return value


class RateRequest(BaseModel):
    date: DateType | None = None
    currency: str = Field(pattern=CURRENCY_PATTERN)
    base_currency: str = Field(default="EUR", pattern=CURRENCY_PATTERN)
    provider: ProviderKey = ProviderKey.ECB

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: DateType | None, info: ValidationInfo) -> DateType:
        if v is None:
            return (info.context or {}).get("today") or DateType.today()
        return _check_date(v, info)


class TimeseriesRequest(BaseModel):
    start_date: DateType
    end_date: DateType
    currency: str = Field(pattern=CURRENCY_PATTERN)
    base_currency: str = Field(default="EUR", pattern=CURRENCY_PATTERN)
    provider: ProviderKey = ProviderKey.ECB

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v: DateType, info: ValidationInfo) -> DateType:
        return _check_date(v, info)

    @model_validator(mode="after")
    def check_range(self) -> "TimeseriesRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class RateLookup(BaseModel):
    """
    Answer to a rate request.

    "pending" means the data is missing or provisional and a fetch has been queued.
    """
    status: Literal["ok", "pending"]
    response: RateResponse


class RateService:
    def __init__(
        self,
        manager: RateManager,
        queue: TaskQueue,
        backpressure: Backpressure,
        today: Callable[[], DateType] = DateType.today
    ):
        self.manager = manager
        self.queue = queue
        self.backpressure = backpressure
        self._today = today

    async def get_rate(
        self,
        currency: str,
        on: DateType | None = None,
        base_currency: str = "EUR",
        provider: str = ProviderKey.ECB.value
    ) -> RateLookup:
        """
        Raises:
            pydantic.ValidationError: invalid parameters
            ProviderNotFound, DisabledProvider: provider cannot be used
        """
        request = RateRequest.model_validate(
            {"date": on, "currency": currency, "base_currency": base_currency, "provider": provider},
            context={"today": self._today()},
        )
        provider_key = request.provider.value

        try:
            response = await self.manager.get_rate(
                request.date, request.currency, request.base_currency, provider_key
            )
        except RateNotFound as e:
            logger.info(f"{e} Queued fetch of {provider_key} for {request.date}")
            self._enqueue(FetchRateTask(date=request.date, provider=provider_key, load_previous=1))
            return RateLookup(status="pending", response=RateResponse(rate="", date=request.date))

        if response.has_diff:
            return RateLookup(status="ok", response=response)

        if response.date != request.date:
            # Older data stood in (or the day is a holiday not yet mapped); fetch the day itself
            self._enqueue(FetchRateTask(date=request.date, provider=provider_key, load_previous=1))
        else:
            previous = response.date - timedelta(days=1)
            self._enqueue(FetchRateTask(date=previous, provider=provider_key))
        return RateLookup(status="pending", response=response)

    def _enqueue(self, task: FetchRateTask) -> None:
        self.queue.enqueue(task, delay=self.backpressure.delay(task.provider))

    async def get_timeseries(
        self,
        start: DateType,
        end: DateType,
        currency: str,
        base_currency: str = "EUR",
        provider: str = ProviderKey.ECB.value
    ) -> TimeseriesResponse:
        request = TimeseriesRequest.model_validate(
            {
                "start_date": start,
                "end_date": end,
                "currency": currency,
                "base_currency": base_currency,
                "provider": provider,
            },
            context={"today": self._today()},
        )
        return await self.manager.get_timeseries(
            request.start_date,
            request.end_date,
            request.currency,
            request.base_currency,
            request.provider.value,
        )
