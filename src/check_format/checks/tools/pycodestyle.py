from __future__ import annotations

import re
from typing import TYPE_CHECKING, Sequence

from ...config.loader import PycodestyleConfig
from ...core.errors import ToolError, ToolMissingError
from ...core.files import list_files
from ...core.process import CommandResult
from ...core.tooling import which
from ..model import Violation
from .base import ExternalToolChecker

if TYPE_CHECKING:
    from ...core.context import RunContext

_REPORT_LINE = re.compile(r"^(?P<path>.+?):(?P<line>\d+):(?P<col>\d+): (?P<message>.*)$")


def parse_pycodestyle_output(unit: Sequence[str], result: CommandResult) -> list[Violation]:
    if result.code == 0:
        return []
    rows: list[Violation] = []
    for line in result.stdout_lines:
        m = _REPORT_LINE.match(line)
        if m is None:
            continue
        rows.append(Violation("PYTHON_STYLE", m.group("message"), path=m.group("path"), line=int(m.group("line"))))
    if not rows:
        raise ToolError("pycodestyle", result.combined_output, result.code)
    return rows


class PycodestyleChecker(ExternalToolChecker):
    check_id = "python-style"
    title = "Python style"
    missing_notice = "You do not have pycodestyle or pep8 installed so your Python style is not being checked!"

    def __init__(self, cfg: PycodestyleConfig) -> None:
        super().__init__(cfg.binaries[0] if cfg.binaries else "pycodestyle", cfg.args, parse_pycodestyle_output)
        self.cfg = cfg

    def locate(self, ctx: RunContext) -> str:
        for name in self.cfg.binaries:
            binary = which(name)
            if binary is not None:
                return binary
        raise ToolMissingError(self.tool_name, self.missing_notice)

    def select_files(self, ctx: RunContext) -> list[str]:
        return list_files(ctx, self.cfg.pathspecs)
