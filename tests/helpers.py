"""Test helpers: record builders and a scripted catalog fetcher."""

import asyncio
from typing import List

from src.api.schemas import AppRecord
from src.catalog.base_fetcher import BaseCatalogFetcher


def apps(*pairs) -> List[AppRecord]:
    return [AppRecord(appid=appid, name=name) for appid, name in pairs]


class ScriptedFetcher(BaseCatalogFetcher):
    """Returns (or raises) the queued results in order and counts calls.

    ``started`` is set whenever a fetch begins. When ``gate`` is set, each
    fetch waits on it before returning, which lets a test hold a refresh
    in its fetch phase.
    """

    def __init__(self, *results):
        super().__init__({"source": "test"})
        self.results = list(results)
        self.calls = 0
        self.gate = None
        self.started = asyncio.Event()

    async def fetch(self) -> List[AppRecord]:
        self.calls += 1
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result
