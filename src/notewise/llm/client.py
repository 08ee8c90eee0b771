"""OpenAI client wrapper using the Responses API.

Every call goes through :meth:`OpenAIClient.invoke` (or
:meth:`OpenAIClient.invoke_vision` for images). Both make at most one
outbound request and never raise: failures come back as an
:class:`InvocationResult` carrying an :class:`InvocationError`.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Literal, Optional

from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from ..config import Settings
from ..utils import preview

logger = logging.getLogger(__name__)

ResponseFormat = Literal["text", "json"]
ErrorKind = Literal["not_configured", "timeout", "rate_limited", "backend", "unexpected"]


@dataclass(frozen=True)
class PromptSpec:
    """A role-structured prompt ready to send."""

    system_directive: str
    user_payload: str
    response_format: ResponseFormat = "text"
    temperature: float = 0.7


@dataclass(frozen=True)
class InvocationError:
    """Why a call produced no output."""

    kind: ErrorKind
    message: str


NOT_CONFIGURED = InvocationError(
    kind="not_configured",
    message="OpenAI API key not configured.",
)


@dataclass(frozen=True)
class InvocationResult:
    """Raw model output or the error that prevented it."""

    output: Optional[str] = None
    error: Optional[InvocationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_configured(self) -> bool:
        return self.error is not None and self.error.kind == "not_configured"

    @classmethod
    def success(cls, output: str) -> "InvocationResult":
        return cls(output=output)

    @classmethod
    def failure(cls, error: InvocationError) -> "InvocationResult":
        return cls(error=error)


class OpenAIClient:
    """Single choke point between the task layer and the OpenAI API."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.model = settings.openai_model
        self.vision_model = settings.openai_vision_model
        self.client: Optional[AsyncOpenAI] = None
        if settings.is_configured:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.request_timeout,
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def _create(
        self,
        model: str,
        spec: PromptSpec,
        input_content: str | list[dict],
    ) -> InvocationResult:
        """Make exactly one Responses API call and wrap the outcome."""
        if self.client is None:
            logger.warning("[LLM] No API key configured, skipping call")
            return InvocationResult.failure(NOT_CONFIGURED)

        kwargs = {
            "model": model,
            "instructions": spec.system_directive,
            "input": input_content,
            "temperature": spec.temperature,
            "max_output_tokens": self.settings.max_output_tokens,
        }
        if spec.response_format == "json":
            kwargs["text"] = {"format": {"type": "json_object"}}

        logger.debug(
            f"[LLM] Model: {model}, format: {spec.response_format}, temperature: {spec.temperature}"
        )

        try:
            response = await self.client.responses.create(**kwargs)
        except APITimeoutError as e:
            logger.warning(f"[LLM] Request timed out: {e}")
            return InvocationResult.failure(InvocationError("timeout", str(e)))
        except RateLimitError as e:
            logger.warning(f"[LLM] Rate limited: {e}")
            return InvocationResult.failure(InvocationError("rate_limited", str(e)))
        except (APIStatusError, APIConnectionError, APIError) as e:
            logger.error(f"[LLM] API error: {type(e).__name__}: {e}")
            return InvocationResult.failure(InvocationError("backend", str(e)))
        except Exception as e:
            logger.error(f"[LLM] Unexpected error: {type(e).__name__}: {e}")
            return InvocationResult.failure(InvocationError("unexpected", f"{type(e).__name__}: {e}"))

        output = response.output_text or ""
        logger.debug(f"[LLM] Response ({len(output)} chars): {preview(output)}...")
        logger.info(f"[LLM] API call successful ({model})")
        return InvocationResult.success(output)

    async def invoke(self, spec: PromptSpec) -> InvocationResult:
        """Send a text prompt, requesting JSON mode when the prompt asks for it."""
        user_content = spec.user_payload
        # Responses API requires 'json' in input when using json_object format
        if spec.response_format == "json" and "json" not in user_content.lower():
            user_content = f"{user_content}\n\nRespond in JSON format."

        logger.debug(f"[LLM] Input text ({len(user_content)} chars): {preview(user_content)}...")
        return await self._create(self.model, spec, user_content)

    async def invoke_vision(
        self,
        spec: PromptSpec,
        image: bytes | str,
        mime_type: str = "image/jpeg",
    ) -> InvocationResult:
        """Send an image plus the prompt's payload to the vision model.

        Args:
            spec: Prompt whose user payload is sent as the text part
            image: Raw image bytes, or data already base64 encoded
            mime_type: MIME type used in the data URL
        """
        if isinstance(image, bytes):
            image_data = base64.b64encode(image).decode("utf-8")
        else:
            image_data = image

        logger.debug(f"[LLM] Input: image ({len(image_data)} base64 chars), mime: {mime_type}")
        input_content = [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": spec.user_payload},
                    {
                        "type": "input_image",
                        "image_url": f"data:{mime_type};base64,{image_data}",
                    },
                ],
            },
        ]
        return await self._create(self.vision_model, spec, input_content)


def create_llm_client(settings: Settings) -> OpenAIClient:
    """Build the client that task functions receive explicitly."""
    client = OpenAIClient(settings)
    if not client.configured:
        logger.warning("[STARTUP] OPENAI_API_KEY is not set; AI features will return defaults")
    return client
