from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from .errors import ScriptError, ToolError
from .exit_codes import ERR_CONTEXT
from .process import CommandResult, run_command

if TYPE_CHECKING:
    from .context import RunContext

_VERSION_RE = re.compile(r"(\d+(?:\.\d+)*)")


def _git(repo_root: Path, args: Sequence[str], ctx: RunContext | None = None, input_text: str | None = None) -> CommandResult:
    return run_command(["git", *args], repo_root, input_text=input_text, ctx=ctx)


def _git_out(repo_root: Path, args: Sequence[str], ctx: RunContext | None = None) -> str:
    res = _git(repo_root, args, ctx)
    if res.code != 0:
        raise ToolError("git", res.combined_output or f"git {' '.join(args)} failed", res.code)
    return res.stdout


def _split_z(out: str) -> list[str]:
    return [item for item in out.split("\0") if item]


def find_repo_root(start: Path | None = None) -> Path:
    cwd = (start or Path.cwd()).resolve()
    res = run_command(["git", "rev-parse", "--show-toplevel"], cwd)
    if res.code != 0 or not res.stdout.strip():
        detail = res.combined_output or "git rev-parse failed"
        raise ScriptError(f"not inside a git repository: {cwd} ({detail})", ERR_CONTEXT, kind="repo_not_found")
    return Path(res.stdout.strip()).resolve()


def parse_version(text: str) -> tuple[int, ...]:
    m = _VERSION_RE.search(text)
    if not m:
        return ()
    return tuple(int(part) for part in m.group(1).split("."))


def git_version(repo_root: Path) -> tuple[int, ...]:
    return parse_version(_git_out(repo_root, ["--version"]))


def ls_files(
    repo_root: Path,
    pathspecs: Sequence[str] = (),
    ctx: RunContext | None = None,
) -> list[str]:
    args = ["ls-files", "-z", "--cached"]
    if pathspecs:
        args += ["--", *pathspecs]
    return sorted(set(_split_z(_git_out(repo_root, args, ctx))))


def ls_files_stage(repo_root: Path, ctx: RunContext | None = None) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for entry in _split_z(_git_out(repo_root, ["ls-files", "-s", "-z"], ctx)):
        meta, _, path = entry.partition("\t")
        mode = meta.split(" ", 1)[0]
        rows.append((mode, path))
    return rows


def parent_commit(repo_root: Path, rev: str = "HEAD", ctx: RunContext | None = None) -> str | None:
    res = _git(repo_root, ["log", "--pretty=format:%H", "--skip=1", "-n", "1", rev], ctx)
    if res.code != 0:
        raise ToolError("git", res.combined_output, res.code)
    sha = res.stdout.strip()
    return sha or None


def rev_exists(repo_root: Path, rev: str, ctx: RunContext | None = None) -> bool:
    return _git(repo_root, ["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"], ctx).code == 0


def diff_names(
    repo_root: Path,
    base: str,
    head: str,
    pathspecs: Sequence[str] = (),
    ctx: RunContext | None = None,
) -> list[str]:
    args = ["diff", "--name-only", "-z", base, head]
    if pathspecs:
        args += ["--", *pathspecs]
    return _split_z(_git_out(repo_root, args, ctx))


def diff_text(
    repo_root: Path,
    base: str,
    head: str,
    pathspecs: Sequence[str] = (),
    context: int = 0,
    ctx: RunContext | None = None,
) -> str:
    args = ["diff", "--no-color", "--no-ext-diff", f"-U{context}", base, head]
    if pathspecs:
        args += ["--", *pathspecs]
    return _git_out(repo_root, args, ctx)


def staged_names(repo_root: Path, pathspecs: Sequence[str] = (".",), ctx: RunContext | None = None) -> list[str]:
    return _split_z(_git_out(repo_root, ["diff", "--name-only", "-z", "--cached", "--", *pathspecs], ctx))


def working_changes(repo_root: Path, ctx: RunContext | None = None) -> list[str]:
    out = _git_out(repo_root, ["status", "--porcelain", "-z", "--ignore-submodules"], ctx)
    entries = iter(_split_z(out))
    paths: list[str] = []
    for entry in entries:
        status, path = entry[:2], entry[3:]
        # Renames and copies carry their source path as the next entry.
        if "R" in status or "C" in status:
            next(entries, None)
        if status == "??" or not path:
            continue
        paths.append(path)
    return paths


def head_commit_files(repo_root: Path, ctx: RunContext | None = None) -> list[str]:
    return _split_z(_git_out(repo_root, ["diff-tree", "-z", "--root", "--no-commit-id", "--name-only", "-r", "HEAD"], ctx))


def working_diff(repo_root: Path, pathspecs: Sequence[str] = (), ctx: RunContext | None = None) -> str:
    args = ["diff", "--no-color"]
    if pathspecs:
        args += ["--", *pathspecs]
    return _git_out(repo_root, args, ctx)


def apply_patch(repo_root: Path, patch: str, ctx: RunContext | None = None) -> CommandResult:
    return _git(repo_root, ["apply", "-"], ctx, input_text=patch)
