from __future__ import annotations

from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Sequence

from ..core import git
from .model import Checker, CheckResult

if TYPE_CHECKING:
    from ..core.context import RunContext


def changelog_reminders(files: Sequence[str], changelog: str, public_surface: Sequence[str]) -> list[str]:
    if changelog in files:
        return []
    return [
        f"{path} was modified. Consider updating {changelog}."
        for path in _unique(files)
        if any(fnmatchcase(path, pattern) for pattern in public_surface)
    ]


def _unique(items: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(items))


def changed_files(ctx: RunContext) -> list[str]:
    files = [*git.staged_names(ctx.repo_root, ctx=ctx), *git.working_changes(ctx.repo_root, ctx=ctx)]
    if not files and git.rev_exists(ctx.repo_root, "HEAD", ctx=ctx):
        files = git.head_commit_files(ctx.repo_root, ctx=ctx)
    return files


class ChangelogChecker(Checker):
    """Reminds about the changelog; never fails the run."""

    check_id = "changelog"
    title = "whether CHANGELOG.md should be updated"

    def __init__(self, changelog: str, public_surface: Sequence[str]) -> None:
        self.changelog = changelog
        self.public_surface = tuple(public_surface)
        self.title = f"whether {changelog} should be updated"

    def run(self, ctx: RunContext) -> CheckResult:
        return self.outcome(warnings=changelog_reminders(changed_files(ctx), self.changelog, self.public_surface))
