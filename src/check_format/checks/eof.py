from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..core.files import list_files, read_text_file
from ..core.parallel import map_parallel
from .model import Checker, CheckResult, Violation

if TYPE_CHECKING:
    from ..core.context import RunContext


def check_eof(path: str, text: str) -> list[Violation]:
    # Files without a single non-newline character are not inspected.
    if not text.strip("\r\n"):
        return []
    found: list[Violation] = []
    if not text.endswith("\n"):
        found.append(Violation("EOF_MISSING_NEWLINE", "No newline at end of file", path=path))
    elif text.endswith("\n\n") or text.endswith("\n\r\n"):
        found.append(Violation("EOF_EXTRA_NEWLINE", "Extra trailing newline", path=path))
    if "\r" in text:
        found.append(Violation("EOF_DOS_NEWLINES", "DOS-style newlines", path=path))
    return found


class EofNewlineChecker(Checker):
    check_id = "eof-newline"
    title = "blank lines at end of file"
    hint = "Files must end with exactly one Unix newline."
    needs_pathspec_magic = True

    def __init__(self, pathspecs: Sequence[str]) -> None:
        self.pathspecs = tuple(pathspecs)

    def run(self, ctx: RunContext) -> CheckResult:
        def _scan(rel: str) -> list[Violation]:
            text = read_text_file(ctx.repo_root, rel)
            return [] if text is None else check_eof(rel, text)

        violations: list[Violation] = []
        for found in map_parallel(_scan, list_files(ctx, self.pathspecs), ctx.jobs):
            violations.extend(found)
        return self.outcome(violations)
