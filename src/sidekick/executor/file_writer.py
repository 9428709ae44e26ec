"""
File Writer - apply model-generated content to project files.

Each write snapshots the previous content to a sibling '<path>.backup'
before the original is touched. Only the most recent backup is kept.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from sidekick.core.structured import GeneratedFile
from sidekick.errors import FileMutationError, PathSecurityError
from sidekick.executor.path_guard import resolve_within_root

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass
class WriteResult:
    """Result of writing one file."""
    path: str
    absolute_path: str
    bytes_written: int
    backup_path: str = ""
    previous_size: Optional[int] = None
    # The .backup file only holds the latest version, so undo restores from here
    previous_content: Optional[bytes] = field(default=None, repr=False)

    @property
    def created(self) -> bool:
        return self.previous_size is None


def write_with_backup(abs_path: Union[str, Path], content: Union[str, bytes]) -> str:
    """
    Write content to abs_path, backing up any existing file first.

    Args:
        abs_path: Absolute path already validated by the path guard
        content: New content (str is encoded as UTF-8)

    Returns:
        The backup path, or "" if there was no previous file

    Raises:
        FileMutationError: If the backup, directory creation or write fails.
            A failed backup leaves the original untouched.
    """
    if not abs_path:
        raise FileMutationError("path is empty")

    target = Path(abs_path)
    data = content.encode("utf-8") if isinstance(content, str) else content
    backup_path = ""

    if target.is_file():
        backup = target.with_name(target.name + BACKUP_SUFFIX)
        try:
            backup.write_bytes(target.read_bytes())
        except OSError as e:
            raise FileMutationError(
                f"failed to write backup for {target}: {e}", path=str(target), cause=e
            ) from e
        backup_path = str(backup)
        logger.debug(f"Backed up {target} to {backup}")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        raise FileMutationError(
            f"failed to create directories for {target}: a path component is not a directory",
            path=str(target.parent),
            cause=e,
        ) from e
    except OSError as e:
        raise FileMutationError(
            f"failed to create directories for {target}: {e}", path=str(target.parent), cause=e
        ) from e

    try:
        target.write_bytes(data)
    except OSError as e:
        raise FileMutationError(f"failed to write {target}: {e}", path=str(target), cause=e) from e

    return backup_path


class FileWriter:
    """
    Write files inside a project root.

    Every path is checked by the path guard before the filesystem is
    touched. Backups live next to the file they protect.
    """

    def __init__(self, project_root: Union[str, Path]):
        if not str(project_root):
            raise PathSecurityError("project root is empty")
        self.project_root = Path(project_root)
        self.history: List[WriteResult] = []

    def write(self, user_path: str, content: str) -> WriteResult:
        """
        Write full content to a project-relative path.

        Raises:
            PathSecurityError: If the path is outside the project root
            FileMutationError: If the write fails
        """
        abs_path, rel_path = resolve_within_root(self.project_root, user_path)
        return self._write_resolved(abs_path, rel_path, content)

    def apply_generated(self, files: Iterable[GeneratedFile]) -> List[WriteResult]:
        """
        Write a batch of generated files.

        All filenames are validated before the first write, so a single
        unsafe name rejects the whole batch.
        """
        resolved: List[Tuple[Path, str, str]] = []
        for generated in files:
            abs_path, rel_path = resolve_within_root(self.project_root, generated.filename)
            resolved.append((abs_path, rel_path, generated.content))

        return [self._write_resolved(a, r, c) for a, r, c in resolved]

    def rollback(self, result: WriteResult) -> bool:
        """
        Undo a write by restoring the content the file had before it.

        A file that was newly created is removed. Returns False when
        there is nothing to restore.
        """
        target = Path(result.absolute_path)
        if result.previous_content is not None:
            try:
                target.write_bytes(result.previous_content)
            except OSError as e:
                raise FileMutationError(f"failed to restore {target}: {e}", path=str(target), cause=e) from e
        elif result.created and target.is_file():
            target.unlink()
        else:
            return False

        if result in self.history:
            self.history.remove(result)
        logger.info(f"Rolled back {result.path}")
        return True

    def undo_last(self) -> Optional[WriteResult]:
        """Roll back the most recent write made through this writer."""
        if not self.history:
            return None
        last = self.history[-1]
        return last if self.rollback(last) else None

    def _write_resolved(self, abs_path: Path, rel_path: str, content: str) -> WriteResult:
        previous_content = None
        if abs_path.is_file():
            try:
                previous_content = abs_path.read_bytes()
            except OSError as e:
                raise FileMutationError(f"failed to read {abs_path}: {e}", path=str(abs_path), cause=e) from e
        previous_size = len(previous_content) if previous_content is not None else None
        backup_path = write_with_backup(abs_path, content)

        result = WriteResult(
            path=rel_path,
            absolute_path=str(abs_path),
            bytes_written=len(content.encode("utf-8")),
            backup_path=backup_path,
            previous_size=previous_size,
            previous_content=previous_content,
        )
        self.history.append(result)
        logger.info(f"Wrote {rel_path} ({result.bytes_written} bytes)")
        return result
