"""
Path Guard - confine user- and model-supplied paths to the project root.

Every write to the project goes through resolve_within_root() first.
The lexical '..' check and the final prefix check on the canonical path
are both kept: symlinks or case-insensitive filesystems can defeat the
lexical check on its own.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple, Union

from sidekick.errors import PathSecurityError


def resolve_within_root(root: Union[str, Path], user_path: str) -> Tuple[Path, str]:
    """
    Resolve a relative path against the project root.

    Args:
        root: Project root directory
        user_path: Relative path supplied by the user or the model

    Returns:
        (absolute path, normalized relative path)

    Raises:
        PathSecurityError: If the path is empty, absolute, or leaves the root
    """
    if not root or not str(root):
        raise PathSecurityError("project root is empty")
    if not user_path:
        raise PathSecurityError("path is empty")
    if os.path.isabs(user_path):
        raise PathSecurityError(f"absolute paths are not allowed: {user_path}", path=user_path)

    clean = os.path.normpath(user_path)
    if clean == os.pardir or clean.startswith(os.pardir + os.sep):
        raise PathSecurityError(f"path escapes project root: {user_path}", path=user_path)
    if clean == os.curdir:
        raise PathSecurityError(f"invalid path: {user_path}", path=user_path)

    root_abs = os.path.realpath(os.path.abspath(root))
    joined = os.path.realpath(os.path.join(root_abs, clean))

    root_with_sep = root_abs if root_abs.endswith(os.sep) else root_abs + os.sep
    if joined != root_abs and not joined.startswith(root_with_sep):
        raise PathSecurityError(
            f"resolved path is outside project root: {user_path}", path=user_path
        )

    return Path(joined), clean
