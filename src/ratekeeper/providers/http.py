"""
HTTP helpers shared by provider adapters.

Transport failures are retried with tenacity, growing the timeout by a fixed step per
attempt. HTTP 429 is never retried here: it becomes LimitExceeded so the importer can
block the provider.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import date
from decimal import Decimal
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ratekeeper.config import Settings
from ratekeeper.errors import LimitExceeded, ParseFailure, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 86400


def prepare_url(
    template: str,
    on: date,
    base_currency: str = "",
    currencies: str = "",
    api_key: str = ""
) -> str:
    """
    Fill a URL template.

    Placeholders: {date:<strftime format>}, {base_currency}, {currencies}, {api_key}.
    """
    return template.format(
        date=on,
        base_currency=base_currency,
        currencies=currencies,
        api_key=api_key,
    )


def _retry_after(response: httpx.Response) -> int:
    value = response.headers.get("retry-after") or response.headers.get("ratelimit-reset")
    try:
        return int(value) if value else DEFAULT_RETRY_AFTER
    except ValueError:
        return DEFAULT_RETRY_AFTER


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None
) -> httpx.Response:
    """
    GET a URL with transport retries. Non-2xx responses other than 429 are returned
    as they are; callers decide whether a 404 means "no data".

    Raises:
        LimitExceeded: on HTTP 429
        ProviderError: timeout or transport failure after the last attempt
    """
    timeout = settings.http_timeout
    retrying = AsyncRetrying(
        stop=stop_after_attempt(settings.http_max_attempts),
        wait=wait_exponential(multiplier=settings.http_retry_wait, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                timeout = settings.http_timeout + settings.http_timeout_step * (
                    attempt.retry_state.attempt_number - 1
                )
                response = await client.get(url, params=params, headers=headers, timeout=timeout)
    except httpx.TimeoutException as e:
        raise ProviderError(
            message="Request timeout",
            provider=provider,
            error_type="TIMEOUT",
            details={"url": url, "timeout_seconds": timeout}
        ) from e
    except httpx.TransportError as e:
        raise ProviderError(
            message=f"Transport error: {e}",
            provider=provider,
            error_type="TRANSPORT",
            details={"url": url}
        ) from e

    if response.status_code == 429:
        retry_after = _retry_after(response)
        logger.warning(f"{provider} answered 429, retry after {retry_after}s")
        raise LimitExceeded(retry_after, provider)
    return response


def raise_for_status(response: httpx.Response, provider: str) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ProviderError(
            message=f"HTTP error: {e.response.status_code}",
            provider=provider,
            error_type=f"HTTP_{e.response.status_code}",
            details={"url": str(e.request.url)}
        ) from e


def parse_json(response: httpx.Response, provider: str) -> Any:
    """Decode a JSON body keeping every number exact (floats become Decimal)."""
    try:
        return response.json(parse_float=Decimal)
    except ValueError as e:
        raise ParseFailure("Failed to parse JSON response", provider, response.content) from e


def parse_xml(response: httpx.Response, provider: str) -> ET.Element:
    try:
        return ET.fromstring(response.content)
    except ET.ParseError as e:
        raise ParseFailure(f"XML parse error: {e}", provider, response.content) from e


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None
) -> Any:
    response = await fetch(
        client, url, settings=settings, provider=provider, params=params, headers=headers
    )
    raise_for_status(response, provider)
    return parse_json(response, provider)


async def fetch_xml(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None
) -> ET.Element:
    response = await fetch(
        client, url, settings=settings, provider=provider, params=params, headers=headers
    )
    raise_for_status(response, provider)
    return parse_xml(response, provider)


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    provider: str,
    params: dict[str, Any] | None = None
) -> str:
    response = await fetch(client, url, settings=settings, provider=provider, params=params)
    raise_for_status(response, provider)
    return response.text
