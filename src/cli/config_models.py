"""Pydantic configuration models for the helpdesk bot."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LLM_PROVIDERS = {"gemini", "groq", "openai", "claude"}


def _expand_env(value: Optional[str]) -> Optional[str]:
    """Resolve a ``${VAR}`` placeholder from the environment."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class ProviderConfig(BaseModel):
    """One entry of the ordered provider chain."""

    name: str
    model: Optional[str] = None  # None = provider default
    api_key: Optional[str] = None  # None = read the provider's env var

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v


def _default_chain() -> list[ProviderConfig]:
    return [ProviderConfig(name="gemini"), ProviderConfig(name="groq")]


class LLMConfig(BaseModel):
    """Generation settings shared by every provider in the chain."""

    temperature: float = 0.0
    timeout_seconds: float = 30.0
    max_tokens: int = 2048
    providers: list[ProviderConfig] = Field(default_factory=_default_chain)

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"temperature must be 0-2, got {v}")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}")
        return v

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, v: list[ProviderConfig]) -> list[ProviderConfig]:
        if not v:
            raise ValueError("At least one LLM provider must be configured")
        return v


class KnowledgeConfig(BaseModel):
    """Notion knowledge base and cache settings."""

    page_ids: list[str] = Field(default_factory=list)
    notion_api_key: Optional[str] = None
    notion_version: str = "2022-06-28"
    ttl_seconds: int = 86400
    tag: str = "notion-data"
    max_concurrency: int = 5
    request_timeout: float = 30.0

    @field_validator("page_ids")
    @classmethod
    def strip_ids(cls, v: list[str]) -> list[str]:
        return [pid.strip() for pid in v if pid and pid.strip()]

    @field_validator("ttl_seconds", "max_concurrency")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v


class PromptConfig(BaseModel):
    """System instruction and user-facing fallback text."""

    persona: str = "a helpful and intelligent AI assistant answering questions from students"
    source_name: str = "the school's Notion documents"
    language: str = "Traditional Chinese (繁體中文)"
    extra_instructions: Optional[str] = None
    apology_message: str = "抱歉，系統目前忙碌中 (AI Service Unavailable)。"
    expose_errors: bool = True


class LineConfig(BaseModel):
    """LINE Messaging API credentials."""

    channel_secret: Optional[str] = None
    channel_access_token: Optional[str] = None
    api_base: str = "https://api.line.me"


DEFAULT_SESSIONS_DB = Path("~/helpdesk/sessions.db")


class PathsConfig(BaseModel):
    """File paths configuration."""

    sessions_db: Path = DEFAULT_SESSIONS_DB

    @model_validator(mode="after")
    def expand_paths(self):
        self.sessions_db = self.sessions_db.expanduser()
        return self


class RetryConfig(BaseModel):
    """Retry/backoff for knowledge-store requests."""

    max_attempts: int = 3
    min_wait: float = 2.0
    max_wait: float = 10.0


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class BotConfig(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    knowledge: KnowledgeConfig = Field(default_factory=KnowledgeConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    line: LineConfig = Field(default_factory=LineConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in secrets."""
        for provider in self.llm.providers:
            provider.api_key = _expand_env(provider.api_key)
        self.knowledge.notion_api_key = _expand_env(self.knowledge.notion_api_key)
        self.line.channel_secret = _expand_env(self.line.channel_secret)
        self.line.channel_access_token = _expand_env(self.line.channel_access_token)
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "BotConfig":
        """Create config from dict, accepting a comma-separated page id string."""
        knowledge = data.get("knowledge")
        if isinstance(knowledge, dict) and isinstance(knowledge.get("page_ids"), str):
            knowledge["page_ids"] = knowledge["page_ids"].split(",")
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
