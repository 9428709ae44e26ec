"""Sidekick CLI UI - Rich terminal interface."""

from sidekick.ui.console import SidekickConsole, StreamDisplay

__all__ = ["SidekickConsole", "StreamDisplay"]
