"""Sidekick core modules."""

from sidekick.core.config import Config, get_config_path, load_config
from sidekick.core.conversation import Role, Turn, build_conversation_context
from sidekick.core.session import Session
from sidekick.core.structured import EditResult, GeneratedFile, parse_edit_result, parse_generated_files

__all__ = [
    "Config",
    "EditResult",
    "GeneratedFile",
    "Role",
    "Session",
    "Turn",
    "build_conversation_context",
    "get_config_path",
    "load_config",
    "parse_edit_result",
    "parse_generated_files",
]
