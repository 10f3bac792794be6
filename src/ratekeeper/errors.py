"""
Ratekeeper error taxonomy.

Provider-side failures carry the provider key, a short error_type code and free-form
details, so they can be logged and counted without parsing the message.
"""

from datetime import date
from typing import Any


class RateKeeperError(Exception):
    """Base exception for the service."""


class ProviderError(RateKeeperError):
    """Base exception for rate provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        error_type: str = "UNKNOWN",
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.provider = provider
        self.error_type = error_type
        self.details = details or {}


class ParseFailure(ProviderError):
    """Upstream payload is malformed or has an unexpected shape."""

    def __init__(self, message: str, provider: str = "", content: str | bytes = ""):
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        super().__init__(message, provider, "PARSE_ERROR", {"content": content[:2000]})
        self.content = content


class LimitExceeded(ProviderError):
    """Provider reported too many requests (or is still blocked)."""

    def __init__(self, retry_after: int, provider: str = ""):
        super().__init__(
            f"Request limit exceeded, retry after {retry_after}s",
            provider,
            "RATE_LIMIT",
            {"retry_after": retry_after}
        )
        self.retry_after = retry_after


class DisabledProvider(ProviderError):
    """Provider is switched off or lacks credentials."""

    def __init__(self, reason: str, provider: str = ""):
        super().__init__(reason, provider, "DISABLED")
        self.reason = reason


class UnsupportedOperation(ProviderError):
    """Operation is not offered by this source."""

    def __init__(self, operation: str, provider: str = ""):
        super().__init__(f"{operation} is not supported", provider, "UNSUPPORTED")


class ProviderNotFound(RateKeeperError):
    def __init__(self, key: str):
        super().__init__(f"Provider not found: {key}")
        self.key = key


class NoDataAvailable(RateKeeperError):
    """Requested date lies inside the provider's reporting lag."""

    def __init__(self, available_date: date):
        super().__init__(f"Last rate available: {available_date.isoformat()}")
        self.available_date = available_date


class RateNotFound(RateKeeperError):
    def __init__(self, currency: str, base_currency: str):
        super().__init__(f"Rate for {currency}/{base_currency} not exist yet. Try later.")
        self.currency = currency
        self.base_currency = base_currency


class InvalidOperand(RateKeeperError, ValueError):
    """A non-numeric value reached decimal arithmetic."""
