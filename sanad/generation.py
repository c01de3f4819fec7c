"""Structured generation with a hosted chat model."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from .config import config
from .errors import GenerationFailure
from .prompts import render_prompt

if TYPE_CHECKING:
    from .models import GenerationRequest

OutputT = TypeVar("OutputT", bound=BaseModel)

logger = config.get_logger(__name__)


def schema_instruction(output_schema: type[BaseModel]) -> str:
    schema = json.dumps(output_schema.model_json_schema(), ensure_ascii=False)
    return (
        "Respond only with a JSON object that conforms to this JSON schema:\n"
        f"{schema}"
    )


class GenerationService:
    """Runs a rendered prompt against a declared output schema."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            model: Chat model name. If None, uses config.CHAT_MODEL.
            timeout: Request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
            max_retries=0,
        )
        self.model = model or config.CHAT_MODEL

    def generate(
        self,
        request: GenerationRequest,
        output_schema: type[OutputT],
    ) -> OutputT:
        """Generate a response and validate it against ``output_schema``.

        Returns:
            The validated output model.

        Raises:
            GenerationFailure: If the call fails, returns nothing, or returns
                output that does not match the schema.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": schema_instruction(output_schema)},
                    {"role": "user", "content": render_prompt(request)},
                ],
                response_format={"type": "json_object"},
                max_tokens=config.CHAT_MAX_TOKENS,
                temperature=config.CHAT_TEMPERATURE,
            )
        except Exception as e:
            logger.exception("Error calling generation model")
            msg = f"Generation call failed: {e!s}"
            raise GenerationFailure(msg) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            msg = "Generation returned no output"
            raise GenerationFailure(msg)

        try:
            return output_schema.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Generation output failed validation: %s", e)
            msg = f"Generation output does not match {output_schema.__name__}"
            raise GenerationFailure(msg) from e
