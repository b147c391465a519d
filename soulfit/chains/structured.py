"""Shared plumbing for structured (JSON) model calls."""

from __future__ import annotations

import logging
from typing import TypeVar

import pydantic
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.output_parsers import JsonOutputParser

from .. import config
from ..errors import ResponseShapeError, ServiceCallError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def language_instruction() -> str:
    return (
        f"Answer in {config.RESPONSE_LANGUAGE} only, use English words only "
        "when transliterated or for specific names."
    )


def json_schema_format(name: str, model: type[pydantic.BaseModel]) -> dict:
    """Build an OpenAI-style ``response_format`` for a pydantic model."""
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": model.model_json_schema()},
    }


async def invoke_model(
    llm: BaseChatModel,
    messages: list[BaseMessage],
    failure_message: str,
) -> str:
    """Send one request and return the reply text.

    Raises ServiceCallError on transport failure and ResponseShapeError on an
    empty reply.
    """
    try:
        response = await llm.ainvoke(messages)
    except Exception as e:
        logger.exception("Model call failed")
        raise ServiceCallError(failure_message, details=str(e)) from e

    content = response.content if isinstance(response.content, str) else ""
    if not content.strip():
        logger.error("Model returned an empty response")
        raise ResponseShapeError(failure_message, details="Empty response from model")
    return content


def parse_structured(content: str, model: type[ModelT], failure_message: str) -> ModelT:
    """Parse JSON (fenced or bare) and validate it against ``model``."""
    parser = JsonOutputParser(pydantic_object=model)
    try:
        data = parser.parse(content)
        return model.model_validate(data)
    except (OutputParserException, pydantic.ValidationError, TypeError) as e:
        logger.warning(
            "Response failed %s schema (%d chars): %s", model.__name__, len(content), e
        )
        raise ResponseShapeError(failure_message, details=str(e)) from e
