"""
Ollama API Client - HTTP client for a locally hosted Ollama server.

Two ways of generating:
- Streaming: POST /api/generate with stream=true, the body is
  newline-delimited JSON frames fed one by one to a callback
- Structured: POST /api/generate with stream=false and format=json,
  the body is a single JSON object whose "response" holds the JSON text

Every call is a single attempt. Failures are raised as TransportError
subclasses; retrying is the caller's decision.
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from sidekick.errors import (
    APIStatusError,
    ConnectionFailedError,
    FrameDecodeError,
)

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"

# Called once per non-empty fragment; raising stops the stream.
FragmentCallback = Callable[[str], None]


class OutputFormat(str, Enum):
    """Output constraint for a generation request."""
    NONE = "none"
    JSON = "json"


class GenerationRequest(BaseModel):
    """Request body for /api/generate."""
    model: str
    prompt: str
    system_prompt: str = ""
    temperature: float = 0.0
    streaming: bool = True
    output_format: OutputFormat = OutputFormat.NONE

    def to_payload(self) -> Dict[str, Any]:
        """Wire form; empty optional fields are left out."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "stream": self.streaming,
        }
        if self.system_prompt:
            payload["system"] = self.system_prompt
        if self.temperature:
            payload["temperature"] = self.temperature
        if self.output_format is not OutputFormat.NONE:
            payload["format"] = self.output_format.value
        return payload


class GenerationFrame(BaseModel):
    """One decoded line of a generate response."""
    model: str = ""
    created_at: str = ""
    response: str = ""
    done: bool = False


class ModelInfo(BaseModel):
    """A model installed on the server, as listed by /api/tags."""
    name: str
    modified_at: str = ""
    size: int = 0

    @property
    def size_bytes(self) -> int:
        return self.size

    def human_size(self) -> str:
        """Size formatted for display (e.g. '3.8 GB')."""
        size = float(self.size)
        for unit in ("B", "KB", "MB"):
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} GB"


class ListModelsResponse(BaseModel):
    """Response body of /api/tags."""
    models: List[ModelInfo] = []


class OllamaClient:
    """
    Client for the Ollama generate and tags endpoints.

    Usage:
        with OllamaClient(host, model="codellama:7b") as client:
            client.check_connection()
            client.generate_stream("", prompt, system, 0.7, print)
    """

    def __init__(
        self,
        host: Optional[str] = None,
        model: str = "",
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.host = (host or DEFAULT_HOST).rstrip("/")
        self.model = model
        self._owns_client = http_client is None
        # timeout=None: no client-imposed limit, local generations can be slow
        self._client = http_client or httpx.Client(timeout=timeout)

    def __enter__(self) -> "OllamaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def set_model(self, model: str) -> None:
        self.model = model

    def _url(self, path: str) -> str:
        return f"{self.host}{path}"

    def _resolve_model(self, model: str) -> str:
        return model or self.model

    # ==========================================
    # GENERATION
    # ==========================================

    def generate_stream(
        self,
        model: str,
        prompt: str,
        system_prompt: str,
        temperature: float,
        on_fragment: FragmentCallback,
    ) -> None:
        """
        Stream a completion, calling on_fragment for each text fragment.

        Fragments are delivered in server order, one at a time, before the
        next line is read. An exception raised by on_fragment propagates
        unchanged and closes the connection.

        Args:
            model: Model name (empty uses the client default)
            prompt: Full prompt text
            system_prompt: System prompt (may be empty)
            temperature: Sampling temperature
            on_fragment: Callback receiving each non-empty fragment

        Raises:
            ConnectionFailedError: Server unreachable or connection dropped
            APIStatusError: Non-2xx response
            FrameDecodeError: A stream line was not a valid frame
        """
        request = GenerationRequest(
            model=self._resolve_model(model),
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            streaming=True,
        )
        self._log_request(request)

        fragments = 0
        callback_error: Optional[Exception] = None
        try:
            with self._client.stream(
                "POST",
                self._url("/api/generate"),
                json=request.to_payload(),
            ) as response:
                self._raise_for_status(response, streamed=True)
                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    frame = self._decode_frame(line)
                    if frame.response:
                        fragments += 1
                        try:
                            on_fragment(frame.response)
                        except Exception as e:
                            callback_error = e
                            raise
                    if frame.done:
                        break
        except httpx.HTTPError as e:
            if e is callback_error:
                raise
            raise ConnectionFailedError(f"Failed to stream from Ollama: {e}") from e

        logger.debug(f"Stream finished: {fragments} fragment(s) from {request.model}")

    def generate_structured(
        self,
        model: str,
        prompt: str,
        system_prompt: str,
        temperature: float,
    ) -> str:
        """
        Generate a JSON-constrained completion in one response.

        Returns:
            The "response" text, unmodified. Parsing it as application JSON
            is the caller's job.
        """
        request = GenerationRequest(
            model=self._resolve_model(model),
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            streaming=False,
            output_format=OutputFormat.JSON,
        )
        self._log_request(request)

        try:
            response = self._client.post(
                self._url("/api/generate"),
                json=request.to_payload(),
            )
        except httpx.HTTPError as e:
            raise ConnectionFailedError(f"Failed to send request: {e}") from e

        self._raise_for_status(response)
        frame = self._decode_frame(response.text)
        logger.debug(f"Structured response from {request.model}: {frame.response}")
        return frame.response

    # ==========================================
    # CATALOG
    # ==========================================

    def list_models(self) -> List[ModelInfo]:
        """List the models installed on the server."""
        try:
            response = self._client.get(self._url("/api/tags"))
        except httpx.HTTPError as e:
            raise ConnectionFailedError(f"Failed to connect to Ollama at {self.host}: {e}") from e

        self._raise_for_status(response)
        try:
            data = ListModelsResponse.model_validate_json(response.text)
        except ValidationError as e:
            raise FrameDecodeError(f"Failed to decode models response: {e}", line=response.text) from e
        return data.models

    def check_connection(self) -> None:
        """Raise unless the server is reachable and answers /api/tags."""
        self.list_models()

    # ==========================================
    # HELPERS
    # ==========================================

    @staticmethod
    def _raise_for_status(response: httpx.Response, streamed: bool = False) -> None:
        if response.is_success:
            return
        if streamed:
            response.read()
        raise APIStatusError(
            response.status_code,
            reason=response.reason_phrase,
            body=response.text.strip(),
        )

    @staticmethod
    def _decode_frame(line: str) -> GenerationFrame:
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise FrameDecodeError(f"Failed to parse response: {e}", line=line) from e
        try:
            return GenerationFrame.model_validate(data)
        except ValidationError as e:
            raise FrameDecodeError(f"Unexpected response frame: {e}", line=line) from e

    @staticmethod
    def _log_request(request: GenerationRequest) -> None:
        logger.debug(
            f"Request to Ollama: model={request.model} stream={request.streaming} "
            f"format={request.output_format.value} temperature={request.temperature:.2f} "
            f"system={len(request.system_prompt)} chars prompt={len(request.prompt)} chars"
        )
