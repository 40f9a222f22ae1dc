from __future__ import annotations

import re
from typing import TYPE_CHECKING, Sequence

from ...config.loader import ShellcheckConfig
from ...core import git
from ...core.diff import parse_unified_diff
from ...core.errors import ToolError
from ...core.files import list_files
from ...core.logging import log_event
from ...core.process import CommandResult
from ...core.tooling import version_at_least
from ..model import CheckResult, Violation
from .base import ExternalToolChecker

if TYPE_CHECKING:
    from ...core.context import RunContext

NO_DIFF_MARKER = "Use another format to see them."
# 0 clean, 1 findings; anything else is a usage or I/O failure.
_FINDINGS_EXIT = 1

_TTY_LOCATION = re.compile(r"^In (?P<path>.+) line (?P<line>\d+):$")
_TTY_FINDING = re.compile(r"\^-*\s*(?P<code>SC\d+)(?:\s+\((?P<severity>\w+)\))?:\s*(?P<message>.*)$")


def parse_tty_output(unit: Sequence[str], text: str) -> list[Violation]:
    rows: list[Violation] = []
    path = unit[0] if unit else ""
    line = 0
    for raw in text.splitlines():
        loc = _TTY_LOCATION.match(raw.strip())
        if loc is not None:
            path, line = loc.group("path"), int(loc.group("line"))
            continue
        found = _TTY_FINDING.search(raw)
        if found is not None:
            rows.append(Violation(f"SHELLCHECK_{found.group('code')}", found.group("message"), path=path, line=line))
    return rows


def parse_diff_output(unit: Sequence[str], text: str) -> list[Violation]:
    rows = [
        Violation("SHELLCHECK_FIXABLE", "shellcheck has an automatic fix for this file", path=row.path)
        for row in parse_unified_diff(text)
        if row.path
    ]
    return rows


def parse_shellcheck_output(unit: Sequence[str], result: CommandResult) -> list[Violation]:
    if result.code == 0:
        return []
    if result.code != _FINDINGS_EXIT:
        raise ToolError("shellcheck", result.combined_output, result.code)
    output = result.combined_output
    rows = parse_tty_output(unit, output) or parse_diff_output(unit, output)
    if not rows:
        rows = [Violation("SHELLCHECK_FINDING", "shellcheck reported problems", path=unit[0] if unit else "")]
    return rows


class ShellcheckChecker(ExternalToolChecker):
    check_id = "shellcheck"
    title = "Bash formatting"
    hint = "Bash formatting errors detected. Please fix them before committing."
    missing_notice = "You do not have shellcheck installed so your Bash style is not being checked!"

    def __init__(self, cfg: ShellcheckConfig) -> None:
        super().__init__("shellcheck", ["-e", ",".join(cfg.excludes)], parse_shellcheck_output)
        self.cfg = cfg
        self.output_format = "tty"
        self.follow_sources = True

    def gate(self, ctx: RunContext, binary: str) -> str | None:
        version = self.detect_version(ctx, binary)
        self.follow_sources = True
        self.output_format = "diff" if version_at_least(version, self.cfg.diff_format_min_version) else "tty"
        return None

    def select_files(self, ctx: RunContext) -> list[str]:
        return list_files(ctx, self.cfg.pathspecs)

    def command(self, ctx: RunContext, binary: str, unit: Sequence[str]) -> list[str]:
        follow = ["-x"] if self.follow_sources else []
        return [binary, *follow, *self.args, "-f", self.output_format, *unit]

    def evaluate(self, ctx: RunContext, binary: str, results: list[tuple[list[str], CommandResult]]) -> CheckResult:
        failing = [(unit, result) for unit, result in results if result.code != 0]
        if not failing:
            return self.outcome()
        output = "\n".join(result.combined_output for _, result in failing) + "\n"
        if self.output_format == "diff" and NO_DIFF_MARKER in output:
            # Some findings have no fix; only tty output shows them all.
            self.output_format = "tty"
            self.follow_sources = False
            failing = self.invoke(ctx, binary, [unit for unit, _ in failing])
            failing = [(unit, result) for unit, result in failing if result.code != 0]
            output = "\n".join(result.combined_output for _, result in failing) + "\n"
        violations: list[Violation] = []
        for unit, result in failing:
            violations.extend(self.result_parser(unit, result))
        warnings: list[str] = []
        hint = self.hint
        if self.output_format == "diff" and self.cfg.autofix and ctx.autofix:
            # git apply needs the unstripped stdout diff.
            patch = "".join(result.stdout for _, result in failing)
            applied = git.apply_patch(ctx.repo_root, patch, ctx=ctx)
            if applied.code == 0:
                hint = "Bash errors were automatically corrected. Please remember to add the changes to your commit."
            else:
                log_event(ctx, "warn", "check", "autofix_failed", check=self.check_id, code=applied.code)
                warnings.append(f"could not apply shellcheck fixes: {applied.combined_output.strip()}")
        return self.outcome(violations, warnings=warnings, details=output, hint=hint)
