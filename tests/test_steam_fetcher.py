"""Tests for the Steam catalog fetcher and its factory."""

import asyncio
import json

import httpx
import pytest

from src.api.schemas import AppRecord
from src.catalog.fetcher_factory import create_fetcher, load_config
from src.catalog.steam_fetcher import SteamCatalogFetcher
from src.errors import FetchError, FetchReason

URL = "https://catalog.test/applist"


def make_fetcher(handler, **config):
    config = {"source": "steam", "base_url": URL, **config}
    return SteamCatalogFetcher(config, transport=httpx.MockTransport(handler))


def applist(*apps):
    return {"applist": {"apps": [{"appid": a, "name": n} for a, n in apps]}}


class TestFetch:
    @pytest.mark.asyncio
    async def test_parses_apps_in_received_order(self):
        fetcher = make_fetcher(lambda req: httpx.Response(200, json=applist((30, "C"), (10, "A"), (20, ""))))
        records = await fetcher.fetch()
        assert records == [
            AppRecord(appid=30, name="C"),
            AppRecord(appid=10, name="A"),
            AppRecord(appid=20, name=""),
        ]

    @pytest.mark.asyncio
    async def test_duplicate_ids_collapsed(self):
        fetcher = make_fetcher(lambda req: httpx.Response(200, json=applist((1, "a"), (1, "b"))))
        assert await fetcher.fetch() == [AppRecord(appid=1, name="b")]

    @pytest.mark.asyncio
    async def test_empty_catalog_is_not_an_error(self):
        fetcher = make_fetcher(lambda req: httpx.Response(200, json=applist()))
        assert await fetcher.fetch() == []

    @pytest.mark.asyncio
    async def test_sends_headers_and_api_key(self):
        seen = {}

        def handler(request):
            seen["key"] = request.url.params.get("key")
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, json=applist((1, "A")))

        fetcher = make_fetcher(handler, api_key="secret", request_headers={"User-Agent": "tests"})
        await fetcher.fetch()
        assert seen == {"key": "secret", "ua": "tests"}


class TestFetchErrors:
    @pytest.mark.asyncio
    async def test_non_success_status(self):
        fetcher = make_fetcher(lambda req: httpx.Response(503, text="down"))
        with pytest.raises(FetchError) as exc:
            await fetcher.fetch()
        assert exc.value.reason == FetchReason.STATUS
        assert exc.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as exc:
            await make_fetcher(handler).fetch()
        assert exc.value.reason == FetchReason.TRANSPORT

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(FetchError) as exc:
            await make_fetcher(handler, timeout_seconds=0.5).fetch()
        assert exc.value.reason == FetchReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_stalled_response_hits_overall_deadline(self):
        async def handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=applist((1, "A")))

        fetcher = make_fetcher(handler, timeout_seconds=0.05)
        with pytest.raises(FetchError) as exc:
            await asyncio.wait_for(fetcher.fetch(), 5)
        assert exc.value.reason == FetchReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        fetcher = make_fetcher(lambda req: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(FetchError) as exc:
            await fetcher.fetch()
        assert exc.value.reason == FetchReason.PARSE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"apps": []},
        {"applist": {}},
        {"applist": {"apps": [{"appid": "not-a-number", "name": "X"}]}},
        {"applist": {"apps": [{"name": "missing id"}]}},
        {"applist": {"apps": [{"appid": "10", "name": "X"}]}},
        {"applist": {"apps": [{"appid": True, "name": "X"}]}},
        {"applist": {"apps": [{"appid": 10.0, "name": "X"}]}},
        {"applist": {"apps": [{"appid": 10, "name": 5}]}},
        [],
    ])
    async def test_wrong_shape(self, body):
        fetcher = make_fetcher(lambda req: httpx.Response(200, json=body))
        with pytest.raises(FetchError) as exc:
            await fetcher.fetch()
        assert exc.value.reason == FetchReason.PARSE


class TestFetcherFactory:
    def test_loads_bundled_config(self):
        config = load_config("steam")
        assert config["base_url"].startswith("https://")
        assert config["timeout_seconds"] > 0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("APPID_TRACKER_APPLIST_URL", URL)
        monkeypatch.setenv("APPID_TRACKER_FETCH_TIMEOUT", "5")
        monkeypatch.setenv("STEAM_API_KEY", "k")
        fetcher = create_fetcher("steam")
        assert isinstance(fetcher, SteamCatalogFetcher)
        assert fetcher.base_url == URL
        assert fetcher.get_timeout() == 5.0
        assert fetcher.get_params() == {"key": "k"}

    def test_missing_config(self, tmp_path):
        with pytest.raises(ValueError, match="No config found"):
            load_config("steam", configs_dir=str(tmp_path))

    def test_unknown_source(self):
        with pytest.raises(ValueError, match="Unknown catalog source"):
            create_fetcher("itch")

    def test_custom_configs_dir(self, tmp_path, monkeypatch):
        monkeypatch.delenv("APPID_TRACKER_APPLIST_URL", raising=False)
        (tmp_path / "steam.json").write_text(json.dumps({"source": "steam", "base_url": URL}))
        fetcher = create_fetcher("steam", configs_dir=str(tmp_path))
        assert fetcher.base_url == URL
