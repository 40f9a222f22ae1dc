from __future__ import annotations

import time
from dataclasses import replace
from typing import TYPE_CHECKING, Callable, Sequence

from ..core.errors import ToolError, ToolMissingError
from ..core.logging import log_event
from ..core.tooling import format_version, version_at_least
from .model import Checker, CheckResult, CheckRunReport, CheckStatus

if TYPE_CHECKING:
    from ..core.context import RunContext


def run_one(ctx: RunContext, checker: Checker) -> CheckResult:
    if checker.needs_pathspec_magic and not version_at_least(ctx.git_version, ctx.config.git_min_version):
        return checker.skip(
            f"git {format_version(ctx.git_version)} does not support pathspec magic; "
            f"need at least {format_version(ctx.config.git_min_version)}"
        )
    try:
        return checker.run(ctx)
    except ToolMissingError as exc:
        return checker.skip(exc.reason)
    except ToolError as exc:
        return checker.error(f"{exc.tool} failed with exit code {exc.code}", exc.output)
    except Exception as exc:
        log_event(ctx, "error", "check", "internal_error", check=checker.check_id, error=str(exc))
        return checker.error(f"internal check error: {exc}")


def run_checks(
    ctx: RunContext,
    checkers: Sequence[Checker],
    on_result: Callable[[CheckResult], None] | None = None,
) -> CheckRunReport:
    """Run checks in order; one check failing never stops the ones after it."""
    rows: list[CheckResult] = []
    for checker in checkers:
        log_event(ctx, "debug", "check", "start", check=checker.check_id)
        start = time.perf_counter()
        result = run_one(ctx, checker)
        result = replace(result, duration_ms=int((time.perf_counter() - start) * 1000))
        if result.status is CheckStatus.SKIP:
            log_event(ctx, "warn", "check", "skipped", check=result.id, notice=result.notice)
        log_event(
            ctx,
            "debug",
            "check",
            "finish",
            check=result.id,
            status=result.status.value,
            violations=len(result.violations),
            duration_ms=result.duration_ms,
        )
        rows.append(result)
        if on_result is not None:
            on_result(result)
    return CheckRunReport(rows=tuple(rows))
