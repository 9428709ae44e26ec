"""Sidekick interaction modes."""

from typing import Dict, Type

from sidekick.modes.agent import AgentMode
from sidekick.modes.base import Mode
from sidekick.modes.chat import AskMode, CmdMode, PlanMode
from sidekick.modes.edit import EditMode

MODES: Dict[str, Type[Mode]] = {
    mode.name: mode
    for mode in (AskMode, PlanMode, EditMode, AgentMode, CmdMode)
}


def get_mode(name: str) -> Type[Mode]:
    """Look up a mode class by name."""
    try:
        return MODES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown mode '{name}'. Choose from: {', '.join(MODES)}") from None


__all__ = ["MODES", "Mode", "AskMode", "PlanMode", "EditMode", "AgentMode", "CmdMode", "get_mode"]
