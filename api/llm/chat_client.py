"""
Chat completion client for the in-app assistant.

Wraps OpenAI's Chat Completions API with the assistant's system prompts and
tool set. Tool calls are resolved by local stubs in a single hop.
"""

from typing import Any, Dict, List, Optional

import structlog
from openai import AsyncOpenAI, OpenAIError

from api.errors import UpstreamUnavailableError
from api.llm.prompts import get_chat_tools, get_system_prompt
from api.llm.tools import dispatch_tool_call
from api.models import AIResponse
from libs.common.settings import Settings

logger = structlog.get_logger(__name__)

EMPTY_REPLY = "I apologize, but I encountered an error processing your request."


class ChatCompletionClient:
    """Generates assistant replies for chat sessions."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        temperature: float = 0.7,
        context_turns: int = 10,
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.context_turns = context_turns
        if client is None and api_key:
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatCompletionClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
            context_turns=settings.chat_context_turns,
            timeout=settings.openai_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def build_messages(
        self,
        message: str,
        history: List[Dict[str, Any]],
        chat_type: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, str]]:
        """System prompt, the most recent history turns, then the new message."""
        messages = [{"role": "system", "content": get_system_prompt(chat_type, context)}]

        recent = history[-self.context_turns:] if self.context_turns > 0 else []
        for turn in recent:
            role = turn.get("role")
            content = turn.get("content")
            if role in ("user", "assistant") and isinstance(content, str):
                messages.append({"role": role, "content": content})

        messages.append({"role": "user", "content": message})
        return messages

    async def generate_response(
        self,
        message: str,
        history: List[Dict[str, Any]],
        chat_type: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> AIResponse:
        """Ask the model for a reply.

        Raises:
            UpstreamUnavailableError: No API key is configured or the API call failed.
        """
        if not self.is_configured:
            logger.error("OpenAI API key is not configured")
            raise UpstreamUnavailableError("The AI service is currently unavailable")

        messages = self.build_messages(message, history, chat_type, context)

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                tools=get_chat_tools(chat_type),
                tool_choice="auto",
            )
        except OpenAIError as e:
            # Don't log the message body, it may carry the key
            logger.error("OpenAI API error", error_type=type(e).__name__)
            raise UpstreamUnavailableError("The AI service is currently unavailable") from e

        response_message = completion.choices[0].message

        if response_message.tool_calls:
            tool_call = response_message.tool_calls[0]
            return await dispatch_tool_call(tool_call.function.name, tool_call.function.arguments)

        usage = getattr(completion, "usage", None)
        logger.info(
            "Chat completion received",
            model=self.model,
            chat_type=chat_type,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
        return AIResponse(content=response_message.content or EMPTY_REPLY, type="text")
