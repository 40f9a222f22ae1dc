from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from . import git

if TYPE_CHECKING:
    from ..config.loader import CheckerConfig

OutputFormat = Literal["text", "json"]


def default_jobs() -> int:
    return os.cpu_count() or 8


@dataclass(frozen=True)
class RunContext:
    run_id: str
    repo_root: Path
    config: CheckerConfig
    output_format: OutputFormat
    output_dir: Path
    jobs: int
    autofix: bool
    verbose: bool
    quiet: bool
    log_json: bool
    git_version: tuple[int, ...]

    @classmethod
    def from_args(
        cls,
        repo_root: str | None = None,
        config_path: str | None = None,
        output_format: OutputFormat = "text",
        jobs: int | None = None,
        autofix: bool = True,
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        from ..config.loader import load_config

        root = git.find_repo_root(Path(repo_root) if repo_root else None)
        config = load_config(root, Path(config_path) if config_path else None)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        run_id = os.environ.get("RUN_ID") or f"check-format-{stamp}-{os.getpid()}"
        out_dir = os.environ.get("OUTPUT_DIR")
        return cls(
            run_id=run_id,
            repo_root=root,
            config=config,
            output_format=output_format,
            output_dir=Path(out_dir).resolve() if out_dir else root,
            jobs=max(1, jobs or default_jobs()),
            autofix=autofix,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
            git_version=git.git_version(root),
        )
