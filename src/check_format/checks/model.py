from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from ..core.exit_codes import ERR_CHECKS_FAILED, OK

if TYPE_CHECKING:
    from ..core.context import RunContext

_CODE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


class CheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    ERROR = "error"


@dataclass(frozen=True)
class Violation:
    code: str
    message: str
    path: str = ""
    line: int = 0
    hint: str = ""

    def __post_init__(self) -> None:
        code = str(self.code).strip() or "CHECK_GENERIC"
        if not _CODE_PATTERN.fullmatch(code):
            raise ValueError(f"invalid violation code `{code}`: expected UPPER_SNAKE_CASE")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "line", int(self.line or 0))

    def render(self) -> str:
        if self.path and self.line:
            return f"{self.path}:{self.line}:{self.message}"
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


@dataclass(frozen=True)
class CheckResult:
    id: str
    title: str
    status: CheckStatus
    violations: tuple[Violation, ...] = ()
    warnings: tuple[str, ...] = ()
    details: str = ""
    notice: str = ""
    hint: str = ""
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return self.status in (CheckStatus.FAIL, CheckStatus.ERROR)


@dataclass(frozen=True)
class CheckRunReport:
    rows: tuple[CheckResult, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        return any(row.failed for row in self.rows)

    @property
    def status(self) -> str:
        return "fail" if self.failed else "pass"

    @property
    def exit_code(self) -> int:
        return ERR_CHECKS_FAILED if self.failed else OK

    @property
    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in CheckStatus}
        for row in self.rows:
            counts[row.status.value] += 1
        return {
            "passed": counts["pass"],
            "failed": counts["fail"],
            "skipped": counts["skip"],
            "errors": counts["error"],
            "total": len(self.rows),
            "duration_ms": sum(row.duration_ms for row in self.rows),
        }


class Checker(ABC):
    """One labeled section of the report."""

    check_id: str = ""
    title: str = ""
    hint: str = ""
    # Checks that rely on ":!" pathspec exclusion are skipped on old git.
    needs_pathspec_magic: bool = False

    @abstractmethod
    def run(self, ctx: RunContext) -> CheckResult:
        ...

    def outcome(
        self,
        violations: Iterable[Violation] = (),
        *,
        warnings: Iterable[str] = (),
        details: str = "",
        hint: str | None = None,
    ) -> CheckResult:
        rows = tuple(violations)
        return CheckResult(
            id=self.check_id,
            title=self.title,
            status=CheckStatus.FAIL if rows else CheckStatus.PASS,
            violations=rows,
            warnings=tuple(warnings),
            details=details,
            hint=self.hint if hint is None else hint,
        )

    def skip(self, notice: str) -> CheckResult:
        return CheckResult(id=self.check_id, title=self.title, status=CheckStatus.SKIP, notice=notice)

    def error(self, message: str, details: str = "") -> CheckResult:
        return CheckResult(
            id=self.check_id,
            title=self.title,
            status=CheckStatus.ERROR,
            notice=message,
            details=details,
            hint=self.hint,
        )
