"""Configuration loading: YAML file, then environment overrides."""

import os
from pathlib import Path
from typing import Optional

import yaml

from .config_models import DEFAULT_SESSIONS_DB, BotConfig

# Per-provider model overrides read from the environment
_MODEL_ENV_VARS = {
    "gemini": "GEMINI_MODEL_NAME",
    "groq": "GROQ_MODEL_NAME",
    "openai": "OPENAI_MODEL_NAME",
    "claude": "ANTHROPIC_MODEL_NAME",
}


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "config.yaml",
        Path.home() / ".helpdesk" / "config.yaml",
        Path.home() / "helpdesk" / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def load_config_model(config_path: Optional[Path] = None) -> BotConfig:
    """Load configuration as a validated Pydantic model."""
    base_config = {}

    path = config_path or find_config()
    if path and path.exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

    try:
        config = BotConfig.from_dict(base_config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")

    return apply_env_overrides(config)


def apply_env_overrides(config: BotConfig, environ=None) -> BotConfig:
    """Fill unset values from environment variables.

    Values present in the config file win, except for page ids and
    temperature, which the environment overrides when set.
    """
    env = os.environ if environ is None else environ

    page_ids = env.get("NOTION_PAGE_IDS")
    if page_ids:
        config.knowledge.page_ids = [p.strip() for p in page_ids.split(",") if p.strip()]
    if not config.knowledge.notion_api_key:
        config.knowledge.notion_api_key = env.get("NOTION_API_KEY") or None

    temperature = env.get("AI_TEMPERATURE")
    if temperature:
        try:
            value = float(temperature)
        except ValueError:
            raise ValueError(f"AI_TEMPERATURE must be a number, got {temperature!r}")
        if not 0.0 <= value <= 2.0:
            raise ValueError(f"AI_TEMPERATURE must be 0-2, got {value}")
        config.llm.temperature = value

    for provider in config.llm.providers:
        env_model = env.get(_MODEL_ENV_VARS[provider.name])
        if env_model and not provider.model:
            provider.model = env_model

    if not config.line.channel_secret:
        config.line.channel_secret = env.get("LINE_CHANNEL_SECRET") or None
    if not config.line.channel_access_token:
        config.line.channel_access_token = env.get("LINE_CHANNEL_ACCESS_TOKEN") or None

    home = env.get("HELPDESK_HOME")
    if home and config.paths.sessions_db == DEFAULT_SESSIONS_DB.expanduser():
        config.paths.sessions_db = Path(home).expanduser() / "sessions.db"

    return config
