from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Sequence

from ...config.loader import ShfmtConfig
from ...core import git
from ...core.diff import parse_unified_diff
from ...core.errors import ToolError, ToolMissingError
from ...core.logging import log_event
from ...core.process import CommandResult
from ...core.tooling import find_prefixed_binaries, format_version, tool_version, version_at_least, which
from ..model import CheckResult, Violation
from .base import ExternalToolChecker, binary_name

if TYPE_CHECKING:
    from ...core.context import RunContext


def _reported_paths(diff: str) -> set[str]:
    paths: set[str] = set()
    for row in parse_unified_diff(diff):
        for path in (row.path, row.old_path):
            if path:
                paths.add(path)
                paths.add(path.removesuffix(".orig"))
    return paths


def parse_shfmt_output(unit: Sequence[str], result: CommandResult) -> list[Violation]:
    if result.code == 0:
        return []
    if not result.stdout.strip():
        # Non-zero exit without a diff means shfmt could not parse a script.
        raise ToolError("shfmt", result.stderr or result.combined_output, result.code)
    reported = _reported_paths(result.stdout)
    rows = [
        Violation("SHFMT_STYLE", "formatting differs from shfmt output", path=rel)
        for rel in unit
        if rel in reported
    ]
    return rows or [Violation("SHFMT_STYLE", "formatting differs from shfmt output")]


class ShfmtChecker(ExternalToolChecker):
    check_id = "shfmt"
    title = "Bash style formatting"
    missing_notice = "shfmt not detected, Bash style formatting check is skipped"

    def __init__(self, cfg: ShfmtConfig) -> None:
        super().__init__("shfmt", cfg.args, parse_shfmt_output)
        self.cfg = cfg
        self.min_version = cfg.min_version

    def locate(self, ctx: RunContext) -> str:
        for name in find_prefixed_binaries(self.tool_name):
            binary = which(name) or name
            version = tool_version(binary, self.version_args, ctx.repo_root)
            if version_at_least(version, self.cfg.min_version):
                return binary
            log_event(
                ctx,
                "debug",
                "check",
                "tool_too_old",
                tool=name,
                version=format_version(version),
                minimum=format_version(self.cfg.min_version),
            )
        raise ToolMissingError(self.tool_name, self.missing_notice)

    def select_files(self, ctx: RunContext) -> list[str]:
        tracked = set(git.ls_files(ctx.repo_root, self.cfg.pathspecs, ctx=ctx))
        changed: list[str] = []
        if git.rev_exists(ctx.repo_root, self.cfg.upstream, ctx=ctx) and git.rev_exists(ctx.repo_root, "HEAD", ctx=ctx):
            changed += git.diff_names(ctx.repo_root, "HEAD", self.cfg.upstream, self.cfg.pathspecs, ctx=ctx)
        else:
            log_event(ctx, "warn", "check", "upstream_missing", check=self.check_id, upstream=self.cfg.upstream)
        changed += git.staged_names(ctx.repo_root, self.cfg.pathspecs, ctx=ctx)
        return sorted({rel for rel in changed if rel in tracked})

    def work_units(self, ctx: RunContext, files: list[str]) -> list[list[str]]:
        return [files]

    def env(self, ctx: RunContext) -> Mapping[str, str] | None:
        return {"SHFMT_NO_EDITORCONFIG": "true"}

    def run(self, ctx: RunContext) -> CheckResult:
        binary = self.locate(ctx)
        files = self.select_files(ctx)
        if not files:
            return self.skip("no changed shell scripts")
        return self.evaluate(ctx, binary, self.invoke(ctx, binary, self.work_units(ctx, files)))

    def evaluate(self, ctx: RunContext, binary: str, results: list[tuple[list[str], CommandResult]]) -> CheckResult:
        patch = ctx.output_dir / f"{binary_name(binary)}.patch"
        violations: list[Violation] = []
        diffs: list[str] = []
        for unit, result in results:
            violations.extend(self.result_parser(unit, result))
            if result.code != 0:
                diffs.append(result.stdout)
        if not violations:
            patch.unlink(missing_ok=True)
            return self.outcome()
        diff = "".join(diffs)
        patch.parent.mkdir(parents=True, exist_ok=True)
        patch.write_text(diff, encoding="utf-8")
        return self.outcome(
            violations,
            details=diff,
            hint=f"Please, review the generated patch at {patch}",
        )
