"""
Edit mode - rewrite a project file under model direction.

When the input names an existing file (or one was edited earlier in the
session), the model returns the complete new content as JSON and the file
is rewritten with a backup. Otherwise the model's suggestions are streamed.
"""
from __future__ import annotations

import logging

from sidekick.core.file_context import detect_file_in_input
from sidekick.core.structured import parse_edit_result
from sidekick.executor.path_guard import resolve_within_root
from sidekick.modes.base import STRUCTURED_TEMPERATURE, Mode

logger = logging.getLogger(__name__)

EDIT_JSON_PROMPT = """You MUST respond with ONLY a valid JSON object. No markdown, no explanations, no extra text.

The object must have exactly these fields:
- filename: string (the file path/name being edited)
- content: string (the COMPLETE modified file content)
- summary: string (brief description of changes made)

Example response format:
{"filename": "index.html", "content": "full content here", "summary": "Reduced animation speed"}

Output ONLY the JSON object. Any other text will cause failure."""


class EditMode(Mode):
    """Edit files, or suggest edits when no file is targeted."""

    name = "edit"
    title = "Edit"
    description = "Edit referenced files with a backup of the previous version"
    system_prompt = """You are an expert code editor assistant helping developers improve their code.

When helping with edits:
1. Understand the context and intent of the change
2. Suggest specific, actionable modifications
3. Consider edge cases and potential issues
4. Provide diffs or clear before/after examples when helpful

The user's message may include file contents loaded from their project.
When you see "File contents:" followed by file content, base your suggestions on it.

Use markdown with fenced code blocks tagged with their language."""

    def process_input(self, text: str) -> str:
        named = detect_file_in_input(text)
        target = named or self.session.last_edited_file
        if not target:
            return super().process_input(text)

        # Raises before anything is recorded if the target leaves the project
        abs_path, rel_path = resolve_within_root(self.project_root, target)
        if named:
            self.session.set_last_edited_file(rel_path)
        if not abs_path.is_file():
            logger.debug(f"Edit target {rel_path} does not exist, suggesting instead")
            return super().process_input(text)

        # The target is sent once, as "Current content" below
        prompt = self.begin_turn(text, exclude=[rel_path])
        current = abs_path.read_text(encoding="utf-8", errors="replace")
        edit_prompt = (
            f"{prompt}\n\n"
            f"File: {rel_path}\n\n"
            f"Current content:\n{current}\n\n"
            f"User request: {text}\n\n"
            "Provide the COMPLETE modified file content."
        )

        with self.ui.thinking(f"Modifying {rel_path}..."):
            payload = self.client.generate_structured(
                self.model, edit_prompt, EDIT_JSON_PROMPT, STRUCTURED_TEMPERATURE
            )
        result = parse_edit_result(payload)

        # The file named by the user is written, not the one the model echoes back
        write_result = self.writer.write(rel_path, result.content)
        self.ui.print_write_result(write_result, result.summary)
        self.session.set_last_edited_file(rel_path)

        response = f"Modified {rel_path}: {result.summary}"
        self.finish_turn(response)
        return response
