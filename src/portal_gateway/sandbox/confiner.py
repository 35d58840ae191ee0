"""
portal_gateway.sandbox.confiner

Resolve user-supplied paths inside a fixed root directory.

Responsibilities:
- Canonicalize `root / user_path` with symlinks fully resolved.
- Reject anything whose canonical form is not the root or a descendant of it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


class PathEscapeError(Exception):
    """Raised when a requested path resolves outside the sandbox root."""

    def __init__(self, user_path: str | None) -> None:
        super().__init__("path_escape")
        self.user_path = user_path


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    root: Path
    path: Path

    @property
    def relative(self) -> str:
        # "" for the root itself.
        rel = os.path.relpath(self.path, self.root)
        return "" if rel == os.curdir else Path(rel).as_posix()


class PathConfiner:
    """
    Stateless after construction; safe to share across concurrent requests.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        canonical = os.path.realpath(os.fspath(root))
        self._root = canonical
        self._prefix = canonical if canonical.endswith(os.sep) else canonical + os.sep

    @property
    def root(self) -> Path:
        return Path(self._root)

    def contains(self, canonical: str) -> bool:
        # Separator-terminated prefix so "/ws-evil" never matches "/ws".
        return canonical == self._root or canonical.startswith(self._prefix)

    def resolve(self, user_path: str | None) -> ResolvedPath:
        if not user_path:
            return ResolvedPath(root=self.root, path=self.root)
        if "\x00" in user_path:
            raise PathEscapeError(user_path)

        # An absolute user_path replaces the root here; the prefix check rejects it.
        joined = os.path.join(self._root, user_path)
        try:
            canonical = os.path.realpath(joined)
        except (OSError, ValueError) as e:
            raise PathEscapeError(user_path) from e

        if not self.contains(canonical):
            raise PathEscapeError(user_path)
        return ResolvedPath(root=self.root, path=Path(canonical))


# --- Module Notes -----------------------------------------------------------
# Two confiners exist per process: the workspace root (`services.workspace`) and
# the optional static bundle (`api/routers/web.py`). Neither caches results.
