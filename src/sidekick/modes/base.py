"""
Mode base class.

A mode turns one user input into one model call (or one structured call
plus file writes) and records both turns in the session.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from sidekick.client.ollama_client import OllamaClient
from sidekick.core.config import Config
from sidekick.core.conversation import Role, build_conversation_context
from sidekick.core.file_context import load_referenced_files
from sidekick.core.session import Session
from sidekick.executor.file_writer import FileWriter
from sidekick.ui.console import SidekickConsole

logger = logging.getLogger(__name__)

# Structured (JSON) calls run cooler than free-form chat
STRUCTURED_TEMPERATURE = 0.3


class Mode:
    """Base class for interaction modes."""

    name = ""
    title = ""
    description = ""
    system_prompt = ""
    spinner_message = "Thinking..."
    render_markdown = True

    def __init__(
        self,
        client: OllamaClient,
        session: Session,
        config: Config,
        ui: SidekickConsole,
        writer: FileWriter,
        persist: bool = True,
    ):
        self.client = client
        self.session = session
        self.config = config
        self.ui = ui
        self.writer = writer
        self.persist = persist

    @property
    def model(self) -> str:
        return self.config.model_for_mode(self.name)

    @property
    def project_root(self) -> Path:
        return Path(self.session.project_root)

    def process_input(self, text: str) -> str:
        """Handle one input and return the assistant's reply text."""
        prompt = self.begin_turn(text)
        response = self.stream_reply(prompt)
        self.finish_turn(response)
        return response

    def begin_turn(self, text: str, exclude: Sequence[str] = ()) -> str:
        """Record the user turn and build the prompt for this call."""
        self.session.set_mode(self.name)
        enhanced = load_referenced_files(
            text, self.project_root, self.session.active_files, exclude=exclude
        )
        self.session.add_message(Role.USER, text)
        return build_conversation_context(self.session.history, enhanced)

    def stream_reply(self, prompt: str) -> str:
        """Stream a free-form reply to the console and return its text."""
        with self.ui.stream(self.title, self.spinner_message, markdown=self.render_markdown) as display:
            self.client.generate_stream(
                self.model,
                prompt,
                self.system_prompt,
                self.config.ollama.temperature,
                display,
            )
        return display.text

    def finish_turn(self, response: str) -> None:
        """Record the assistant turn and save the session."""
        self.session.add_message(Role.ASSISTANT, response)
        if self.persist:
            save_session(self.session, self.ui)


def save_session(session: Session, ui: SidekickConsole) -> bool:
    """Save the session, warning instead of failing when it cannot be written."""
    try:
        session.save()
    except OSError as e:
        ui.print_warning(f"Failed to save session: {e}")
        return False
    return True
