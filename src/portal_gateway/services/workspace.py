"""
portal_gateway.services.workspace

Read-only workspace browsing (directory listing + bounded text preview).

Responsibilities:
- Route every client path through the `PathConfiner` before touching disk.
- Translate filesystem conditions into `WorkspaceError` codes.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from portal_gateway.sandbox import PathConfiner, PathEscapeError, ResolvedPath


def display_name(name: str) -> str:
    # Undecodable bytes arrive as surrogate escapes, which JSON cannot carry.
    return os.fsencode(name).decode("utf-8", errors="replace")


class WorkspaceError(Exception):
    # codes: path_escape | not_found | is_directory | not_a_directory | not_regular_file
    #        | too_large | filesystem_error
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True, slots=True)
class FileEntry:
    name: str
    is_directory: bool
    path: str

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "isDirectory": self.is_directory, "path": self.path}


@dataclass(frozen=True, slots=True)
class FilePreview:
    name: str
    content: str


class WorkspaceService:
    def __init__(self, *, confiner: PathConfiner, max_view_bytes: int) -> None:
        self._confiner = confiner
        self._max_view_bytes = max_view_bytes

    @property
    def root(self) -> Path:
        return self._confiner.root

    def _resolve(self, user_path: str | None) -> ResolvedPath:
        try:
            return self._confiner.resolve(user_path)
        except PathEscapeError as e:
            raise WorkspaceError("path_escape", "Path is outside the workspace") from e

    def list_dir(self, user_path: str | None) -> tuple[str, list[FileEntry]]:
        target = self._resolve(user_path)
        current = display_name(target.relative)
        prefix = f"{current}/" if current else ""
        try:
            with os.scandir(target.path) as it:
                # Dirent semantics: a symlink to a directory is not reported as one.
                entries = []
                for entry in it:
                    name = display_name(entry.name)
                    entries.append(
                        FileEntry(
                            name=name,
                            is_directory=entry.is_dir(follow_symlinks=False),
                            path=prefix + name,
                        )
                    )
        except FileNotFoundError as e:
            raise WorkspaceError("not_found", "Directory not found") from e
        except NotADirectoryError as e:
            raise WorkspaceError("not_a_directory", "Cannot list a file") from e
        except OSError as e:
            raise WorkspaceError("filesystem_error", e.strerror or str(e)) from e

        entries.sort(key=lambda entry: entry.name)
        return current, entries

    def view_file(self, user_path: str | None) -> FilePreview:
        target = self._resolve(user_path)
        try:
            st = target.path.stat()
            if stat.S_ISDIR(st.st_mode):
                raise WorkspaceError("is_directory", "Cannot view directory content")
            # FIFOs and device nodes would block open() or read() indefinitely.
            if not stat.S_ISREG(st.st_mode):
                raise WorkspaceError("not_regular_file", "Only regular files can be viewed")
            if st.st_size > self._max_view_bytes:
                raise WorkspaceError(
                    "too_large",
                    f"File too large for preview (>{self._max_view_bytes} bytes)",
                )
            with target.path.open("rb") as fh:
                data = fh.read(self._max_view_bytes + 1)
        except FileNotFoundError as e:
            raise WorkspaceError("not_found", "File not found") from e
        except OSError as e:
            raise WorkspaceError("filesystem_error", e.strerror or str(e)) from e

        # The file may have grown between stat() and read().
        if len(data) > self._max_view_bytes:
            raise WorkspaceError(
                "too_large", f"File too large for preview (>{self._max_view_bytes} bytes)"
            )
        return FilePreview(
            name=display_name(target.path.name),
            content=data.decode("utf-8", errors="replace"),
        )


# --- Module Notes -----------------------------------------------------------
# Path confinement happens in `_resolve` before any stat/open; routers never
# join client paths themselves (see `api/routers/workspace.py`).
