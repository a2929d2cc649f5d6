"""Dependency injection for FastAPI routes."""

from functools import lru_cache

from bot.components import BotComponents, build_components
from cli.config import load_config_model
from cli.config_models import BotConfig
from web.line import LineMessagingClient


@lru_cache
def get_config() -> BotConfig:
    """Load config.yaml plus environment overrides once per process."""
    return load_config_model()


@lru_cache
def get_components() -> BotComponents:
    """Process-wide pipeline; the knowledge cache lives as long as the process."""
    return build_components(get_config())


@lru_cache
def get_line_client() -> LineMessagingClient:
    line = get_config().line
    return LineMessagingClient(line.channel_access_token, api_base=line.api_base)


async def close_resources() -> None:
    """Close network clients created by the cached factories."""
    if get_components.cache_info().currsize:
        await get_components().aclose()
        get_components.cache_clear()
    if get_line_client.cache_info().currsize:
        await get_line_client().aclose()
        get_line_client.cache_clear()
