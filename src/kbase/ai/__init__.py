"""AI helpers: LLM client wrapper and the knowledge base assistant."""

from .assistant import Assistant
from .llm_client import DEFAULT_MODEL, GroqLLMClient, LLMClient, create_client

__all__ = ["Assistant", "DEFAULT_MODEL", "GroqLLMClient", "LLMClient", "create_client"]
