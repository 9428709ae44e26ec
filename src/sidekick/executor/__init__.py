"""Sidekick Executor - guarded, backed-up local file writes."""

from sidekick.executor.file_writer import BACKUP_SUFFIX, FileWriter, WriteResult, write_with_backup
from sidekick.executor.path_guard import resolve_within_root

__all__ = [
    "BACKUP_SUFFIX",
    "FileWriter",
    "WriteResult",
    "resolve_within_root",
    "write_with_backup",
]
