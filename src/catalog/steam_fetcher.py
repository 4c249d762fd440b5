"""Steam app catalog fetcher.

Fetches the full app list from Steam's ``GetAppList`` endpoint, which
returns ``{"applist": {"apps": [{"appid": ..., "name": ...}, ...]}}``.
Any other shape is treated as a parse failure.
"""

import asyncio
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from src.api.schemas import AppListResponse, AppRecord
from src.catalog.base_fetcher import BaseCatalogFetcher
from src.errors import FetchError, FetchReason
from src.pipeline.normalizer import normalize_entries

logger = logging.getLogger(__name__)

DEFAULT_APPLIST_URL = "https://api.steampowered.com/ISteamApps/GetAppList/v2/"


class SteamCatalogFetcher(BaseCatalogFetcher):
    """Concrete fetcher for the Steam app list."""

    def __init__(self, config: dict, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self.base_url = config.get("base_url", DEFAULT_APPLIST_URL)
        self._transport = transport

    def get_params(self) -> dict:
        api_key = self.config.get("api_key")
        return {"key": api_key} if api_key else {}

    async def _request(self) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.get_timeout(), transport=self._transport) as client:
            logger.info("Fetching app list from %s", self.base_url)
            response = await client.get(self.base_url, headers=self.get_headers(), params=self.get_params())
            response.raise_for_status()
            return response

    async def fetch(self) -> List[AppRecord]:
        ctx = {"url": self.base_url}

        # httpx timeouts are per phase; the deadline covers the whole request
        try:
            response = await asyncio.wait_for(self._request(), self.get_timeout())
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise FetchError(
                f"Timed out after {self.get_timeout():g}s fetching app list",
                FetchReason.TIMEOUT, context=ctx, cause=e,
            ) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"App list request returned HTTP {e.response.status_code}",
                FetchReason.STATUS, status_code=e.response.status_code, context=ctx, cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                f"App list request failed: {e}",
                FetchReason.TRANSPORT, context=ctx, cause=e,
            ) from e

        try:
            payload = AppListResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise FetchError(
                "App list response did not match the expected shape",
                FetchReason.PARSE, context={**ctx, "errors": e.error_count()}, cause=e,
            ) from e

        records = normalize_entries(payload.applist.apps)
        logger.info("%s: fetched %d apps", self.source_name, len(records))
        return records
