from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

from ...core.errors import ToolMissingError
from ...core.parallel import map_parallel
from ...core.process import CommandResult, run_command
from ...core.tooling import format_version, tool_version, version_at_least, which
from ..model import Checker, CheckResult, Violation

if TYPE_CHECKING:
    from ...core.context import RunContext

ResultParser = Callable[[Sequence[str], CommandResult], list[Violation]]


class ExternalToolChecker(Checker):
    """Runs a third-party binary over repository files and parses its output.

    Subclasses pick the binary, the files and how files are grouped into
    invocations; invocations run in the worker pool. ``result_parser`` maps
    one invocation (its files and result) to violations and raises
    ``ToolError`` for failures unrelated to formatting.
    """

    missing_notice: str = ""
    version_args: tuple[str, ...] = ("--version",)
    min_version: tuple[int, ...] = ()

    def __init__(self, tool_name: str, args: Sequence[str], result_parser: ResultParser) -> None:
        self.tool_name = tool_name
        self.args = tuple(args)
        self.result_parser = result_parser

    def locate(self, ctx: RunContext) -> str:
        binary = which(self.tool_name)
        if binary is None:
            raise ToolMissingError(self.tool_name, self.missing_notice)
        return binary

    def detect_version(self, ctx: RunContext, binary: str) -> tuple[int, ...]:
        return tool_version(binary, self.version_args, ctx.repo_root)

    def gate(self, ctx: RunContext, binary: str) -> str | None:
        if not self.min_version:
            return None
        version = self.detect_version(ctx, binary)
        if version_at_least(version, self.min_version):
            return None
        return (
            f"{self.tool_name} {format_version(version)} is older than {format_version(self.min_version)}; "
            f"please update {self.tool_name}"
        )

    def select_files(self, ctx: RunContext) -> list[str]:
        raise NotImplementedError

    def work_units(self, ctx: RunContext, files: list[str]) -> list[list[str]]:
        return [[rel] for rel in files]

    def command(self, ctx: RunContext, binary: str, unit: Sequence[str]) -> list[str]:
        return [binary, *self.args, *unit]

    def env(self, ctx: RunContext) -> Mapping[str, str] | None:
        return None

    def invoke(self, ctx: RunContext, binary: str, units: list[list[str]]) -> list[tuple[list[str], CommandResult]]:
        def _one(unit: list[str]) -> tuple[list[str], CommandResult]:
            return unit, run_command(self.command(ctx, binary, unit), ctx.repo_root, env=self.env(ctx), ctx=ctx)

        return map_parallel(_one, units, ctx.jobs)

    def evaluate(self, ctx: RunContext, binary: str, results: list[tuple[list[str], CommandResult]]) -> CheckResult:
        violations: list[Violation] = []
        for unit, result in results:
            violations.extend(self.result_parser(unit, result))
        return self.outcome(violations)

    def run(self, ctx: RunContext) -> CheckResult:
        binary = self.locate(ctx)
        notice = self.gate(ctx, binary)
        if notice:
            return self.skip(notice)
        files = self.select_files(ctx)
        if not files:
            return self.outcome()
        return self.evaluate(ctx, binary, self.invoke(ctx, binary, self.work_units(ctx, files)))


def binary_name(binary: str) -> str:
    return Path(binary).name
