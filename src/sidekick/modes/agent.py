"""Agent mode - multi-step task help that can create files."""
from __future__ import annotations

import logging

from sidekick.core.structured import parse_generated_files
from sidekick.modes.base import STRUCTURED_TEMPERATURE, Mode

logger = logging.getLogger(__name__)

FILES_JSON_PROMPT = """You MUST respond with ONLY a valid JSON array of file objects. No markdown, no explanations, no extra text.

Each object must have exactly these fields:
- "filename": string (the file path relative to the project)
- "content": string (the complete file content)

Example response format:
[{"filename": "test.txt", "content": "hello world"}]

For multiple files:
[{"filename": "index.html", "content": "<!DOCTYPE html>..."}, {"filename": "style.css", "content": "body {...}"}]

Output ONLY the JSON array. Any other text will cause failure."""

FILE_CREATION_HINTS = ("file", "script", "html", "python", "javascript")


def wants_file_creation(text: str) -> bool:
    """Heuristic: the user asks to create something file-shaped."""
    lower = text.lower()
    if "create" not in lower:
        return False
    return "." in text or any(hint in lower for hint in FILE_CREATION_HINTS)


class AgentMode(Mode):
    """Break tasks into steps; create files when asked to."""

    name = "agent"
    title = "Agent"
    description = "Autonomous multi-step task execution and problem solving"
    system_prompt = """You are an autonomous agent assistant capable of multi-step reasoning.

When given a task:
1. Analyze the requirements thoroughly
2. Create a step-by-step execution plan
3. Identify prerequisites, dependencies and likely obstacles
4. Provide clear, actionable guidance

Use markdown: headers (##) for sections, numbered lists for steps,
and fenced code blocks tagged with their language for any code."""

    def process_input(self, text: str) -> str:
        if not wants_file_creation(text):
            return super().process_input(text)

        prompt = self.begin_turn(text)
        logger.debug(f"File creation requested: {text}")

        with self.ui.thinking("Creating files..."):
            payload = self.client.generate_structured(
                self.model, prompt, FILES_JSON_PROMPT, STRUCTURED_TEMPERATURE
            )
        files = parse_generated_files(payload)
        logger.debug(f"Parsed {len(files)} file(s) from structured response")

        results = self.writer.apply_generated(files)
        for result in results:
            self.ui.print_write_result(result)

        created = ", ".join(r.path for r in results)
        response = f"Created {len(results)} file(s): {created}" if results else "No files were created"
        self.finish_turn(response)
        return response
