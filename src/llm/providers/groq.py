"""Groq provider over its OpenAI-compatible endpoint."""

from .openai import OpenAIProvider


class GroqProvider(OpenAIProvider):
    """Groq-hosted open models, called through the openai SDK."""

    provider_name = "groq"
    label = "Groq"
    default_model = "llama-3.1-8b-instant"
    base_url = "https://api.groq.com/openai/v1"
