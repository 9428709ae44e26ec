"""Shared fixtures: isolated config dir and a mock Ollama server."""
from __future__ import annotations

import json
from typing import Callable, Dict, List

import httpx
import pytest

from sidekick.client import OllamaClient


@pytest.fixture(autouse=True)
def config_dir(tmp_path_factory, monkeypatch):
    """Point the config directory at a temp dir and clear env overrides."""
    path = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("SIDEKICK_CONFIG_DIR", str(path))
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    monkeypatch.delenv("SIDEKICK_MODEL", raising=False)
    return path


def ndjson(*frames: Dict) -> bytes:
    """Encode frames as a newline-delimited JSON body."""
    return b"".join(json.dumps(frame).encode() + b"\n" for frame in frames)


def stream_body(*fragments: str) -> bytes:
    """A streaming generate body: one frame per fragment, then done."""
    frames = [{"model": "test", "created_at": "", "response": f, "done": False} for f in fragments]
    frames.append({"model": "test", "created_at": "", "response": "", "done": True})
    return ndjson(*frames)


class FakeOllama:
    """
    Scripted Ollama server behind httpx.MockTransport.

    Records every request; answers generate calls from a queue of
    canned responses and tags calls from a model list.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.generate_responses: List[httpx.Response] = []
        self.models = [
            {"name": "codellama:7b", "modified_at": "2024-05-01T10:00:00Z", "size": 3825819519},
        ]

    def queue_stream(self, *fragments: str) -> None:
        self.generate_responses.append(httpx.Response(200, content=stream_body(*fragments)))

    def queue_structured(self, payload: str) -> None:
        body = {"model": "test", "created_at": "", "response": payload, "done": True}
        self.generate_responses.append(httpx.Response(200, json=body))

    def bodies(self) -> List[Dict]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": self.models})
        if request.url.path == "/api/generate":
            return self.generate_responses.pop(0)
        return httpx.Response(404, text="not found")

    def client(self, model: str = "codellama:7b") -> OllamaClient:
        http_client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return OllamaClient("http://ollama.test", model=model, http_client=http_client)


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


def client_for(handler: Callable[[httpx.Request], httpx.Response], model: str = "codellama:7b") -> OllamaClient:
    """OllamaClient wired to a single handler function."""
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return OllamaClient("http://ollama.test", model=model, http_client=http_client)
