"""Sidekick API Client - transport to the local Ollama server."""

from sidekick.client.ollama_client import (
    DEFAULT_HOST,
    GenerationFrame,
    GenerationRequest,
    ModelInfo,
    OllamaClient,
    OutputFormat,
)

__all__ = [
    "DEFAULT_HOST",
    "GenerationFrame",
    "GenerationRequest",
    "ModelInfo",
    "OllamaClient",
    "OutputFormat",
]
