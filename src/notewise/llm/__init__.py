"""Prompt orchestration: prompt builders, model client and output parsing."""

from .client import (
    NOT_CONFIGURED,
    InvocationError,
    InvocationResult,
    OpenAIClient,
    PromptSpec,
    create_llm_client,
)
from .formatting import normalize_explanation

__all__ = [
    "NOT_CONFIGURED",
    "InvocationError",
    "InvocationResult",
    "OpenAIClient",
    "PromptSpec",
    "create_llm_client",
    "normalize_explanation",
]
