"""
Corrected-day map: requested date -> date the provider actually has data for.

Entries never expire; a provider's past calendar does not change.
"""

from datetime import date

from ratekeeper.cache.backend import CacheBackend


class CorrectedDayCache:
    def __init__(self, backend: CacheBackend):
        self._backend = backend

    @staticmethod
    def _key(provider_id: int, requested: date) -> str:
        return f"skip_{provider_id}_{requested.isoformat()}"

    def set_corrected_day(self, provider_id: int, requested: date, actual: date) -> None:
        self._backend.set(self._key(provider_id, requested), actual.isoformat())

    def get_corrected_day(self, provider_id: int, requested: date) -> date | None:
        value = self._backend.get(self._key(provider_id, requested))
        return date.fromisoformat(value) if value else None

    def resolve(self, provider_id: int, requested: date) -> date:
        """Corrected date if one is recorded, else the requested date."""
        return self.get_corrected_day(provider_id, requested) or requested
