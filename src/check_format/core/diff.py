"""Minimal unified diff model.

Only what the checks need: which lines a revision range added, per file.
Malformed input is tolerated and simply yields fewer lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_HUNK_RE = re.compile(r"^@@ -\d+(?:,(\d+))? \+\d+(?:,(\d+))? @@")
_DIFF_GIT_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")


@dataclass
class DiffHunk:
    old_count: int
    new_count: int
    added: list[str] = field(default_factory=list)


@dataclass
class FileDiff:
    path: str
    old_path: str = ""
    hunks: list[DiffHunk] = field(default_factory=list)

    @property
    def added_lines(self) -> list[str]:
        return [text for hunk in self.hunks for text in hunk.added]


def _strip_prefix(path: str) -> str:
    path = path.strip()
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def parse_unified_diff(text: str) -> list[FileDiff]:
    files: list[FileDiff] = []
    current: FileDiff | None = None
    hunk: DiffHunk | None = None
    old_left = new_left = 0

    for line in text.split("\n"):
        in_hunk = hunk is not None and (old_left > 0 or new_left > 0)
        if in_hunk and hunk is not None:
            if line.startswith("+"):
                hunk.added.append(line[1:])
                new_left -= 1
                continue
            if line.startswith("-"):
                old_left -= 1
                continue
            if line.startswith(" ") or line == "":
                old_left -= 1
                new_left -= 1
                continue
            if line.startswith("\\"):
                continue

        m = _DIFF_GIT_RE.match(line)
        if m:
            current = FileDiff(path=m.group(2), old_path=m.group(1))
            files.append(current)
            hunk = None
            continue
        if line.startswith("--- ") and not in_hunk:
            if current is None or current.hunks:
                current = FileDiff(path="")
                files.append(current)
                hunk = None
            old = line[4:]
            if old != "/dev/null":
                current.old_path = _strip_prefix(old)
            continue
        if line.startswith("+++ ") and not in_hunk:
            if current is None:
                current = FileDiff(path="")
                files.append(current)
            new = line[4:]
            if new != "/dev/null":
                current.path = _strip_prefix(new)
            elif not current.path:
                current.path = current.old_path
            continue
        h = _HUNK_RE.match(line)
        if h and current is not None:
            hunk = DiffHunk(
                old_count=int(h.group(1)) if h.group(1) is not None else 1,
                new_count=int(h.group(2)) if h.group(2) is not None else 1,
            )
            current.hunks.append(hunk)
            old_left, new_left = hunk.old_count, hunk.new_count
            continue
        if line.startswith("diff ") or line.startswith("index "):
            hunk = None
    return files


def added_lines(text: str) -> list[str]:
    return [line for diff in parse_unified_diff(text) for line in diff.added_lines]
