from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ...config.loader import AstyleConfig
from ...core import git
from ...core.errors import ToolError
from ...core.files import list_files
from ...core.parallel import batched
from ...core.process import CommandResult
from ...core.tooling import format_version
from ..model import CheckResult, Violation
from .base import ExternalToolChecker

if TYPE_CHECKING:
    from ...core.context import RunContext

FORMATTED_PREFIX = "Formatted"


def parse_astyle_output(unit: Sequence[str], result: CommandResult) -> list[Violation]:
    if result.code != 0:
        raise ToolError("astyle", result.combined_output, result.code)
    rows: list[Violation] = []
    for line in result.stdout_lines:
        if not line.startswith(FORMATTED_PREFIX):
            continue
        path = line[len(FORMATTED_PREFIX) :].strip()
        rows.append(Violation("ASTYLE_REFORMATTED", "reformatted by astyle", path=path))
    return rows


class AstyleChecker(ExternalToolChecker):
    check_id = "astyle"
    title = "coding style"
    hint = "The files have been automatically formatted. Remember to add the files to your commit."
    missing_notice = "You do not have astyle installed so your code style is not being checked!"
    version_args = ("-V",)

    def __init__(self, cfg: AstyleConfig) -> None:
        super().__init__("astyle", [f"--options={cfg.options_file}"], parse_astyle_output)
        self.cfg = cfg
        self.min_version = cfg.min_version

    def gate(self, ctx: RunContext, binary: str) -> str | None:
        version = self.detect_version(ctx, binary)
        if version and version[0] >= self.cfg.min_version[0]:
            return None
        return (
            f"Your astyle version ({format_version(version)}) is too old so skipping coding style checks. "
            f"Please update astyle to at least {format_version(self.cfg.min_version)}"
        )

    def select_files(self, ctx: RunContext) -> list[str]:
        return [
            rel
            for rel in list_files(ctx, self.cfg.pathspecs)
            if not any(part in rel for part in self.cfg.exclude_substrings)
        ]

    def work_units(self, ctx: RunContext, files: list[str]) -> list[list[str]]:
        return batched(files, self.cfg.batch_size)

    def command(self, ctx: RunContext, binary: str, unit: Sequence[str]) -> list[str]:
        args = list(self.args)
        if not ctx.autofix:
            args.append("--dry-run")
        return [binary, *args, *unit]

    def evaluate(self, ctx: RunContext, binary: str, results: list[tuple[list[str], CommandResult]]) -> CheckResult:
        violations: list[Violation] = []
        for unit, result in results:
            violations.extend(self.result_parser(unit, result))
        if not violations:
            return self.outcome()
        details = ""
        hint = self.hint
        if ctx.autofix:
            details = git.working_diff(ctx.repo_root, [row.path for row in violations], ctx=ctx)
        else:
            hint = f"Run astyle --options={self.cfg.options_file} on the listed files."
        return self.outcome(violations, details=details, hint=hint)
