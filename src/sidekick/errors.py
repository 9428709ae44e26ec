"""Error types raised by Sidekick components.

Components never log-and-continue: they raise one of these and leave the
decision to retry, re-prompt or abort to the caller.
"""
from __future__ import annotations

from typing import Optional


class SidekickError(Exception):
    """Base class for all Sidekick errors."""


class TransportError(SidekickError):
    """Communication with the model server failed."""


class ConnectionFailedError(TransportError):
    """The server could not be reached or the connection broke mid-request."""


class APIStatusError(TransportError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = "", body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"Ollama API error: {status_code} {reason}".rstrip()
        if body:
            message += f" - {body}"
        super().__init__(message)


class FrameDecodeError(TransportError):
    """A response body or stream line was not valid JSON."""

    def __init__(self, message: str, line: str = ""):
        self.line = line
        super().__init__(message)


class PathSecurityError(SidekickError):
    """A path was rejected because it is empty, absolute or escapes the project root."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


class StructuredOutputError(SidekickError):
    """The model's structured reply could not be decoded."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.raw:
            return f"{base}\nResponse was: {self.raw}"
        return base


class FileMutationError(SidekickError):
    """Writing a file or its backup failed."""

    def __init__(self, message: str, path: str = "", cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(message)


class ConfigError(SidekickError):
    """The configuration file could not be read or parsed."""
