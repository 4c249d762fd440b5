"""Fetcher factory — builds the catalog fetcher from config.

Loads ``configs/{source}.json`` and applies environment overrides, so the
endpoint, timeout and API key can change without touching code.

Environment variables:
- APPID_TRACKER_APPLIST_URL: override the catalog endpoint
- APPID_TRACKER_FETCH_TIMEOUT: override the bounded wait, in seconds
- STEAM_API_KEY: optional Steam Web API key
"""

import json
import os
import logging
from typing import Optional

import httpx

from src.catalog.base_fetcher import BaseCatalogFetcher
from src.catalog.steam_fetcher import SteamCatalogFetcher

logger = logging.getLogger(__name__)

FETCHER_MAP = {
    "steam": SteamCatalogFetcher,
}

CONFIGS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "configs")


def load_config(source: str, configs_dir: str = CONFIGS_DIR) -> dict:
    """Load configs/{source}.json and apply environment overrides."""
    config_path = os.path.join(configs_dir, f"{source}.json")

    if not os.path.exists(config_path):
        raise ValueError(f"No config found for source '{source}' at {config_path}")

    with open(config_path) as f:
        config = json.load(f)

    if os.environ.get("APPID_TRACKER_APPLIST_URL"):
        config["base_url"] = os.environ["APPID_TRACKER_APPLIST_URL"]
    if os.environ.get("APPID_TRACKER_FETCH_TIMEOUT"):
        config["timeout_seconds"] = float(os.environ["APPID_TRACKER_FETCH_TIMEOUT"])
    if os.environ.get("STEAM_API_KEY"):
        config["api_key"] = os.environ["STEAM_API_KEY"]

    return config


def create_fetcher(
    source: str = "steam",
    configs_dir: str = CONFIGS_DIR,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseCatalogFetcher:
    """Create and return a fetcher instance for the given source."""
    fetcher_class = FETCHER_MAP.get(source)
    if not fetcher_class:
        raise ValueError(f"Unknown catalog source: '{source}'. Available: {list(FETCHER_MAP.keys())}")

    config = load_config(source, configs_dir)
    logger.info("Created %s for source '%s'", fetcher_class.__name__, source)
    return fetcher_class(config, transport=transport)
