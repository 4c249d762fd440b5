"""Abstract base for catalog fetchers.

A fetcher retrieves the complete remote app catalog in one call. It never
retries and never returns partial results: any failure surfaces as
FetchError. The base class provides shared config access.
"""

from abc import ABC, abstractmethod
from typing import List

from src.api.schemas import AppRecord

DEFAULT_TIMEOUT_SECONDS = 30.0


class BaseCatalogFetcher(ABC):
    """Abstract base class for catalog sources."""

    def __init__(self, config: dict):
        self.config = config
        self.source_name = config.get("source", "unknown")

    @abstractmethod
    async def fetch(self) -> List[AppRecord]:
        """Fetch the full catalog.

        Raises:
            FetchError: on transport failure, non-success status, an
                unparseable body, or when the bounded wait is exceeded.
        """
        ...

    def get_timeout(self) -> float:
        """Get the bounded wait for one fetch, in seconds."""
        return float(self.config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))

    def get_headers(self) -> dict:
        """Get request headers from config."""
        return self.config.get("request_headers", {})
