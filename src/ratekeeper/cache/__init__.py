"""
Ratekeeper cache layer.
"""

from ratekeeper.cache.backend import CacheBackend, MemoryCache
from ratekeeper.cache.corrected_day import CorrectedDayCache
from ratekeeper.cache.rate_limit import RateLimitCache
from ratekeeper.cache.rates import RateCache, TimeseriesCache

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "CorrectedDayCache",
    "RateLimitCache",
    "RateCache",
    "TimeseriesCache",
]
