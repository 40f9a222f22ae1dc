from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from .model import CheckResult, CheckRunReport, CheckStatus

REPORT_SCHEMA_PATH = Path(__file__).resolve().parents[1] / "contracts" / "check-run.schema.json"
TOOL_NAME = "check-format"


def render_result(result: CheckResult) -> str:
    """Render one report section, starting with ``Checking <title>...``."""
    head = f"Checking {result.title}..."
    if result.status is CheckStatus.SKIP:
        return f"{head} skipped ({result.notice})"
    lines: list[str] = []
    if result.status is CheckStatus.PASS:
        lines.append(f"{head} OK")
    else:
        lines.append(f"{head} FAILED")
        if result.status is CheckStatus.ERROR and result.notice:
            lines.append(f"  {result.notice}")
        lines.extend(f"  {row.render()}" for row in result.violations)
    lines.extend(f"  warning: {warning}" for warning in result.warnings)
    if result.failed and result.details.strip():
        lines.extend(f"    {line}" for line in result.details.rstrip().splitlines())
    if result.failed and result.hint:
        lines.append(f"  {result.hint}")
    return "\n".join(lines)


def render_summary(report: CheckRunReport) -> str:
    s = report.summary
    return (
        f"summary: passed={s['passed']} failed={s['failed']} skipped={s['skipped']} "
        f"errors={s['errors']} total={s['total']}"
    )


def render_text(report: CheckRunReport) -> str:
    return "\n".join([*(render_result(row) for row in report.rows), render_summary(report)])


def result_as_row(result: CheckResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "title": result.title,
        "status": result.status.value,
        "duration_ms": int(result.duration_ms),
        "violations": [
            {
                "code": item.code,
                "message": item.message,
                "path": item.path,
                "line": item.line,
                "hint": item.hint,
            }
            for item in result.violations
        ],
        "warnings": list(result.warnings),
        "details": result.details,
        "notice": result.notice,
        "hint": result.hint,
    }


def validate_report(payload: dict[str, Any]) -> None:
    schema = json.loads(REPORT_SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(payload, schema)


def build_report_payload(report: CheckRunReport, *, run_id: str = "") -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": 1,
        "tool": TOOL_NAME,
        "kind": "check-run",
        "run_id": run_id,
        "status": report.status,
        "summary": dict(report.summary),
        "rows": [result_as_row(row) for row in report.rows],
    }
    validate_report(payload)
    return payload


def render_json(report: CheckRunReport, *, run_id: str = "") -> str:
    return json.dumps(build_report_payload(report, run_id=run_id), sort_keys=True)
