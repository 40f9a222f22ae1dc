"""Repository file enumeration.

Pathspec filtering (including ``:!`` exclude magic) is delegated to
``git ls-files`` so vendored and generated paths are excluded exactly the way
``git grep`` would exclude them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from . import git

if TYPE_CHECKING:
    from .context import RunContext

MODE_EXECUTABLE = "100755"
_BINARY_SNIFF_BYTES = 8000


@dataclass(frozen=True)
class TrackedFile:
    path: str
    mode: str
    head: bytes = b""

    @property
    def executable(self) -> bool:
        return self.mode == MODE_EXECUTABLE


def is_binary(data: bytes) -> bool:
    return b"\0" in data[:_BINARY_SNIFF_BYTES]


def read_head(path: Path, size: int = 3) -> bytes:
    with path.open("rb") as handle:
        return handle.read(size)


def _regular_file(repo_root: Path, rel: str) -> Path | None:
    path = repo_root / rel
    if path.is_symlink() or not path.is_file():
        return None
    return path


def list_files(ctx: RunContext, pathspecs: Sequence[str] = ()) -> list[str]:
    """Return repo-relative paths of existing regular files matching ``pathspecs``."""
    return [
        rel
        for rel in git.ls_files(ctx.repo_root, pathspecs, ctx=ctx)
        if _regular_file(ctx.repo_root, rel) is not None
    ]


def read_text_file(repo_root: Path, rel: str) -> str | None:
    path = _regular_file(repo_root, rel)
    if path is None:
        return None
    data = path.read_bytes()
    if is_binary(data):
        return None
    return data.decode("utf-8", errors="replace")


def tracked_files(ctx: RunContext, head_size: int = 3) -> list[TrackedFile]:
    rows: list[TrackedFile] = []
    for mode, rel in git.ls_files_stage(ctx.repo_root, ctx=ctx):
        path = _regular_file(ctx.repo_root, rel)
        if path is None:
            continue
        rows.append(TrackedFile(path=rel, mode=mode, head=read_head(path, head_size)))
    return rows
