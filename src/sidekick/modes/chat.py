"""Conversational modes: ask, plan and cmd. None of them touch files."""
from __future__ import annotations

import platform
import re
from typing import List

from sidekick.modes.base import Mode

FENCED_COMMAND_PATTERN = re.compile(r"```(?:bash|powershell|sh|shell)?\n(.+?)```", re.DOTALL)


class AskMode(Mode):
    """Answer questions without suggesting changes."""

    name = "ask"
    title = "Answer"
    description = "Get information and answers without any changes"
    system_prompt = """You are a helpful information assistant. Provide clear, accurate answers.

The user's message may include file contents loaded from their project.
When you see "File contents:" followed by file content, explain that specific content.

RULES:
1. Never suggest edits, plans or action items
2. Answer the question directly and concisely
3. Explain concepts; use examples only for clarity, never as implementation steps

If asked how to do something, explain what it is and how it works conceptually."""


class PlanMode(Mode):
    """Plan work through short back-and-forth questions."""

    name = "plan"
    title = "Plan"
    description = "Create development plans and break down tasks"
    system_prompt = """You are a software architect helping a developer plan their work through conversation.

CONVERSATION STYLE:
- Ask one or two questions at a time, then wait for answers
- Build understanding gradually; be brief and conversational

RULES:
1. Never provide code, scripts or configuration
2. After several exchanges, summarize your understanding and ask if it is right
3. Only then propose a high-level plan as numbered steps
4. Once the plan is approved, suggest Edit or Agent mode for implementation

Use markdown headers and lists. Keep responses short."""


class CmdMode(Mode):
    """Suggest shell commands. Commands are displayed, never run."""

    name = "cmd"
    title = "Command"
    description = "Get help with commands - generates but never executes"
    spinner_message = "Generating command..."
    render_markdown = False

    @property
    def system_prompt(self) -> str:
        if platform.system() == "Windows":
            os_type, shell, example = "Windows", "PowerShell", "Get-PSDrive -PSProvider FileSystem"
        else:
            os_type, shell, example = "Linux/Unix", "bash", "df -h"
        return (
            "You are a command-line expert. Generate ONLY the exact command to run.\n\n"
            f"USER'S OPERATING SYSTEM: {os_type}\n"
            f"SHELL: {shell}\n\n"
            "OUTPUT FORMAT:\n"
            f"- Only the raw command, ready to paste into a {shell} terminal\n"
            "- No markdown, no code blocks, no explanations\n\n"
            'Example user: "check disk space"\n'
            f"Correct output: {example}\n\n"
            "Output the command only."
        )

    def process_input(self, text: str) -> str:
        response = super().process_input(text)
        commands = extract_commands(response)
        if commands:
            self.ui.print_commands(commands)
        return response


def extract_commands(response: str) -> List[str]:
    """
    Commands from fenced code blocks, or the bare reply.

    The prompt asks for a raw command, so a reply without code fences is
    taken as the command itself.
    """
    commands = [m.strip() for m in FENCED_COMMAND_PATTERN.findall(response) if m.strip()]
    if commands:
        return commands
    bare = response.strip()
    if bare and "```" not in bare:
        return [bare]
    return []
