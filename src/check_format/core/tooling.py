"""Discovery and version detection for optional external tools."""

from __future__ import annotations

import os
import shutil
from itertools import zip_longest
from pathlib import Path
from typing import Sequence

from .git import parse_version
from .process import run_command


def which(name: str) -> str | None:
    return shutil.which(name)


def find_prefixed_binaries(prefix: str, search_path: str | None = None) -> list[str]:
    """Names of executables on PATH starting with ``prefix``, in PATH order."""
    seen: list[str] = []
    for entry in (search_path if search_path is not None else os.environ.get("PATH", "")).split(os.pathsep):
        directory = Path(entry)
        if not entry or not directory.is_dir():
            continue
        for candidate in sorted(directory.iterdir()):
            if not candidate.name.startswith(prefix) or candidate.name in seen:
                continue
            if candidate.is_file() and os.access(candidate, os.X_OK):
                seen.append(candidate.name)
    return seen


def tool_version(binary: str, args: Sequence[str], cwd: Path) -> tuple[int, ...]:
    res = run_command([binary, *args], cwd)
    return parse_version(res.stdout + "\n" + res.stderr)


def version_at_least(version: Sequence[int], minimum: Sequence[int]) -> bool:
    for have, want in zip_longest(version, minimum, fillvalue=0):
        if have != want:
            return have > want
    return True


def format_version(version: Sequence[int]) -> str:
    return ".".join(str(part) for part in version) or "unknown"
