from __future__ import annotations

from typing import Any

from dedalus_labs import AsyncDedalus, Dedalus
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult

from .. import config


def _message_to_dict(msg: BaseMessage) -> dict[str, Any]:
    role_map = {
        "human": "user",
        "ai": "assistant",
        "system": "system",
    }
    # Multimodal messages keep their content parts (text + image_url) intact.
    return {
        "role": role_map.get(msg.type, msg.type),
        "content": msg.content if isinstance(msg.content, (str, list)) else str(msg.content),
    }


class DedalusChatModel(BaseChatModel):
    """LangChain ChatModel wrapping Dedalus Labs' OpenAI-compatible API.

    ``response_format`` is forwarded verbatim, so callers can request
    ``json_schema`` structured output from providers that support it.
    """

    model_name: str = ""
    temperature: float = 1.0
    max_tokens: int = 4096
    response_format: dict | None = None

    def __init__(self, **kwargs: Any) -> None:
        if not kwargs.get("model_name"):
            kwargs["model_name"] = config.MODEL_NAME
        kwargs.setdefault("temperature", config.TEMPERATURE)
        super().__init__(**kwargs)

    @property
    def _llm_type(self) -> str:
        return "dedalus"

    def _request(self, messages: list[BaseMessage], stop: list[str] | None) -> dict:
        request: dict[str, Any] = {
            "model": self.model_name,
            "messages": [_message_to_dict(m) for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if stop:
            request["stop"] = stop
        if self.response_format:
            request["response_format"] = self.response_format
        return request

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        client = Dedalus()
        response = client.chat.completions.create(**self._request(messages, stop))
        content = response.choices[0].message.content or ""
        return ChatResult(
            generations=[ChatGeneration(message=AIMessage(content=content))]
        )

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        client = AsyncDedalus()
        response = await client.chat.completions.create(**self._request(messages, stop))
        content = response.choices[0].message.content or ""
        return ChatResult(
            generations=[ChatGeneration(message=AIMessage(content=content))]
        )
