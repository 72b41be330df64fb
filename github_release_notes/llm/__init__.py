"""Text generation clients."""

from .client import ChatCompletionsClient, ModelOutputError, TextGenerationError

__all__ = [
    "ChatCompletionsClient",
    "ModelOutputError",
    "TextGenerationError",
]
