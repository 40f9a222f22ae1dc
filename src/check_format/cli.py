from __future__ import annotations

import argparse
import json
import sys

from . import __version__
from .checks.model import CheckResult
from .checks.registry import default_checkers
from .checks.report import render_json, render_result, render_summary
from .checks.runner import run_checks
from .core.context import RunContext
from .core.errors import ScriptError
from .core.exit_codes import ERR_INTERNAL
from .core.logging import log_event

TOOL_NAME = "check-format"


def _version_string() -> str:
    return f"{TOOL_NAME} {__version__}"


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got `{value}`") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got `{value}`")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Run style and naming convention checks over a git repository.",
    )
    p.add_argument("--version", action="version", version=_version_string())
    p.add_argument("--repo-root", help="repository to check (default: git top-level of the current directory)")
    p.add_argument("--config", help="YAML configuration overriding the bundled defaults")
    p.add_argument("--format", choices=["text", "json"], default="text", help="report format")
    p.add_argument("--jobs", type=_positive_int, default=None, help="worker pool size (default: CPU count)")
    p.add_argument("--no-fix", action="store_true", help="never modify files; report only")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="log every command and check")
    verbosity.add_argument("--quiet", action="store_true", help="log errors only")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines")
    return p


def _error_payload(message: str, code: int) -> str:
    return json.dumps(
        {
            "schema_version": 1,
            "tool": TOOL_NAME,
            "status": "fail",
            "error": {"message": message, "code": code},
        },
        sort_keys=True,
    )


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    try:
        ctx = RunContext.from_args(
            repo_root=ns.repo_root,
            config_path=ns.config,
            output_format=ns.format,
            jobs=ns.jobs,
            autofix=not ns.no_fix,
            verbose=ns.verbose,
            quiet=ns.quiet,
            log_json=ns.log_json,
        )
        log_event(ctx, "info", "cli", "start", repo_root=str(ctx.repo_root), fmt=ctx.output_format, jobs=ctx.jobs)

        def _print_section(result: CheckResult) -> None:
            print(render_result(result), flush=True)

        on_result = _print_section if ctx.output_format == "text" else None
        report = run_checks(ctx, default_checkers(ctx.config), on_result=on_result)
        if ctx.output_format == "json":
            print(render_json(report, run_id=ctx.run_id))
        else:
            print(render_summary(report))
        log_event(ctx, "info", "cli", "finish", status=report.status, **report.summary)
        return report.exit_code
    except ScriptError as exc:
        if ns.format == "json":
            print(_error_payload(str(exc), exc.code), file=sys.stderr)
        else:
            print(str(exc), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        if ns.format == "json":
            print(_error_payload(f"internal error: {exc}", ERR_INTERNAL), file=sys.stderr)
        else:
            print(f"internal error: {exc}", file=sys.stderr)
        return ERR_INTERNAL
