"""
Sidekick - local AI coding assistant for Ollama.

A small CLI that relays prompts to a locally hosted Ollama server and
streams the reply back to the terminal. In edit and agent modes the model
may also write files, always confined to the project directory and always
with a backup of the previous content.

Architecture:
- Client: HTTP transport to Ollama (streaming NDJSON and structured JSON)
- Executor: path guard and backed-up file writes
- Core: conversation assembly, structured output parsing, session, config
- Modes: ask / plan / edit / agent / cmd interaction loops

Usage:
    sidekick status                   # Check the Ollama server
    sidekick models                   # List installed models
    sidekick run --mode edit          # Interactive mode
    sidekick ask "what is a monad?"   # One-shot question
"""

__version__ = "1.0.0"
__author__ = "Sidekick Team"
