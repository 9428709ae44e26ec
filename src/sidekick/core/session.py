"""Sidekick session state and persistence."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from sidekick.core.config import get_config_dir
from sidekick.core.conversation import Role, Turn

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"


def _new_session_id() -> str:
    return str(time.time_ns())


@dataclass
class Session:
    """
    Conversation state for one project directory.

    Owns the history; the prompt assembler only reads it.
    """

    project_root: str
    id: str = field(default_factory=_new_session_id)
    mode: str = ""
    history: List[Turn] = field(default_factory=list)
    active_files: List[str] = field(default_factory=list)
    last_edited_file: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def _touch(self) -> None:
        self.updated_at = datetime.now()

    def add_message(self, role: Role | str, content: str) -> Turn:
        """Append a turn to the history."""
        turn = Turn(role=Role(role), content=content)
        self.history.append(turn)
        self._touch()
        return turn

    def add_file(self, path: str) -> None:
        if path not in self.active_files:
            self.active_files.append(path)
            self._touch()

    def remove_file(self, path: str) -> None:
        if path in self.active_files:
            self.active_files.remove(path)
            self._touch()

    def set_mode(self, mode: str) -> None:
        self.mode = mode
        self._touch()

    def set_last_edited_file(self, path: str) -> None:
        self.last_edited_file = path
        self._touch()

    def clear_history(self) -> None:
        self.history.clear()
        self._touch()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_root": self.project_root,
            "mode": self.mode,
            "active_files": list(self.active_files),
            "last_edited_file": self.last_edited_file,
            "history": [turn.to_dict() for turn in self.history],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            project_root=data.get("project_root", ""),
            id=data.get("id") or _new_session_id(),
            mode=data.get("mode", ""),
            history=[Turn.from_dict(t) for t in data.get("history", [])],
            active_files=list(data.get("active_files", [])),
            last_edited_file=data.get("last_edited_file", ""),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else datetime.now(),
        )

    def save(self) -> Path:
        """Save the session to the config directory."""
        session_path = get_config_dir() / SESSION_FILE
        session_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        return session_path

    @classmethod
    def load(cls, project_root: str) -> "Session":
        """
        Load the saved session for project_root.

        A missing or unreadable file, or a session saved for another
        project, yields a fresh session.
        """
        session_path = get_config_dir() / SESSION_FILE
        if not session_path.exists():
            return cls(project_root=project_root)

        try:
            data = json.loads(session_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            session = cls.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable session file {session_path}: {e}")
            return cls(project_root=project_root)

        if session.project_root != project_root:
            logger.debug(f"Saved session belongs to {session.project_root}, starting fresh")
            return cls(project_root=project_root)
        return session
