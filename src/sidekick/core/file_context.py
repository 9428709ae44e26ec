"""
File references in user input.

Files named in a prompt (e.g. "explain src/app.py") are read from the
project and appended to the prompt sent to the model. Only the original
text is stored in the session history.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Union

from sidekick.errors import PathSecurityError
from sidekick.executor.path_guard import resolve_within_root

logger = logging.getLogger(__name__)

CONTEXT_EXTENSIONS = (
    "go", "js", "ts", "py", "java", "c", "cpp", "h", "rs", "rb", "php", "cs",
    "swift", "kt", "sh", "bash", "yml", "yaml", "json", "xml", "md", "txt",
)

EDITABLE_EXTENSIONS = (
    ".html", ".js", ".css", ".go", ".py", ".java", ".cpp", ".c", ".h",
    ".txt", ".json", ".xml", ".yml", ".yaml", ".md", ".ts", ".tsx", ".jsx",
    ".php", ".rb", ".rs", ".sh", ".bat",
)

FILE_REFERENCE_PATTERN = re.compile(
    r"(?:^|(?<=\s))([A-Za-z0-9_\-./\\]+\.(?:" + "|".join(CONTEXT_EXTENSIONS) + r"))(?=\s|$)"
)

FILE_CONTENTS_HEADER = "\n\nFile contents:\n"

# Larger files are skipped rather than flooding the prompt
MAX_FILE_SIZE = 200_000


def find_file_references(text: str) -> List[str]:
    """File-like tokens in text, in order of first appearance."""
    seen: List[str] = []
    for match in FILE_REFERENCE_PATTERN.finditer(text):
        name = match.group(1)
        if name not in seen:
            seen.append(name)
    return seen


def load_referenced_files(
    text: str,
    project_root: Union[str, Path],
    extra_files: Iterable[str] = (),
    exclude: Iterable[str] = (),
) -> str:
    """
    Append the contents of files referenced in text, plus extra_files.

    Paths in exclude (normalized, project-relative) are never loaded.

    References that fall outside the project root, do not exist, or
    cannot be read are skipped. Returns text unchanged if nothing loads.
    """
    names = find_file_references(text)
    names += [name for name in extra_files if name not in names]
    excluded = {os.path.normpath(name) for name in exclude}

    sections = []
    for name in names:
        try:
            abs_path, rel_path = resolve_within_root(project_root, name)
        except PathSecurityError as e:
            logger.warning(f"Not loading '{name}': {e}")
            continue
        if rel_path in excluded:
            continue

        if not abs_path.is_file():
            logger.debug(f"Referenced file not found: {rel_path}")
            continue
        if abs_path.stat().st_size > MAX_FILE_SIZE:
            logger.warning(f"Not loading '{rel_path}': larger than {MAX_FILE_SIZE} bytes")
            continue

        try:
            content = abs_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Could not read file '{rel_path}': {e}")
            continue

        sections.append(f"\n--- {rel_path} ---\n{content}\n--- End of {rel_path} ---\n")

    if not sections:
        return text
    return text + FILE_CONTENTS_HEADER + "".join(sections)


def detect_file_in_input(text: str) -> str:
    """First whitespace-separated word ending in an editable extension."""
    for word in text.split():
        word = word.strip("'\"`,;:()")
        if word.endswith(EDITABLE_EXTENSIONS):
            return os.path.normpath(word)
    return ""
