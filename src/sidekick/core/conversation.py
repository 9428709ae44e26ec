"""
Conversation turns and prompt assembly.

Ollama's generate endpoint keeps no memory between calls, so the whole
history is rendered into the prompt on every request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Sequence


class Role(str, Enum):
    """Who spoke a turn."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Turn:
    """One message in a conversation."""
    role: Role
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        timestamp = data.get("timestamp")
        return cls(
            role=Role(data.get("role", "user")),
            content=data.get("content", ""),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(),
        )


ROLE_PREFIXES = {
    Role.USER: "User: ",
    Role.ASSISTANT: "Assistant: ",
}


def build_conversation_context(turns: Sequence[Turn], enhanced_last_user_message: str) -> str:
    """
    Render the history into a single prompt string.

    The most recent user turn is rendered from enhanced_last_user_message
    (typically the input plus loaded file contents) so file bodies never
    end up in the stored history.
    """
    parts = []
    last_user = max(
        (i for i, turn in enumerate(turns) if turn.role == Role.USER), default=-1
    )
    for i, turn in enumerate(turns):
        text = turn.content
        if i == last_user:
            text = enhanced_last_user_message
        parts.append(f"{ROLE_PREFIXES[turn.role]}{text}\n\n")
    return "".join(parts)
