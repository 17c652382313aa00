"""LLM module for the chat assistant using Chat Completions."""

from .chat_client import ChatCompletionClient
from .prompts import get_chat_tools, get_system_prompt

__all__ = ["ChatCompletionClient", "get_chat_tools", "get_system_prompt"]
