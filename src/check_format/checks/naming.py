"""Reserved-prefix symbol export consistency.

A function whose name carries the project's public-API prefix must be both
declared in a public header and exported from its library's map file.
Signatures are recognized with single-line regexes: a definition split over
several lines is not seen, and only pure ``+`` lines of the header diff count
as declarations.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Collection, Iterable, Sequence

from ..core import git
from ..core.diff import added_lines
from .model import Checker, CheckResult, Violation

if TYPE_CHECKING:
    from ..core.context import RunContext

NOT_EXPORTED = "not exported"
NOT_DECLARED = "not declared"


def _symbol(prefix: str) -> str:
    return rf"{re.escape(prefix)}[A-Za-z0-9_]*"


def _unique(items: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


def declared_symbols(header_diff: str, prefix: str) -> list[str]:
    # Greedy: the last prefixed, call-shaped token on the line is the name.
    regex = re.compile(rf"^.*({_symbol(prefix)})\(")
    return _unique(m.group(1) for line in added_lines(header_diff) if (m := regex.match(line)))


def defined_symbols(source_diff: str, prefix: str) -> list[str]:
    regex = re.compile(rf"({_symbol(prefix)})\(")
    return _unique(m.group(1) for line in added_lines(source_diff) if (m := regex.match(line)))


def exported_symbols(map_text: str, prefix: str) -> frozenset[str]:
    regex = re.compile(rf"^\s*({_symbol(prefix)});")
    return frozenset(m.group(1) for line in map_text.splitlines() if (m := regex.match(line)))


def resolve_map_files(repo_root: Path, rel_path: str, blank_map_file: str) -> tuple[str, ...]:
    directory = (repo_root / rel_path).parent
    if directory.is_dir():
        maps = sorted(p for p in directory.glob("*.map") if p.is_file())
        if maps:
            return tuple(p.relative_to(repo_root).as_posix() for p in maps)
    return (blank_map_file,)


def read_exports(repo_root: Path, map_files: Sequence[str], prefix: str) -> frozenset[str]:
    exports: set[str] = set()
    for rel in map_files:
        path = repo_root / rel
        if path.is_file():
            exports |= exported_symbols(path.read_text(encoding="utf-8", errors="replace"), prefix)
    return frozenset(exports)


@dataclass(frozen=True)
class ChangedSource:
    path: str
    map_files: tuple[str, ...]
    defined: tuple[str, ...]
    exported: frozenset[str]


@dataclass(frozen=True)
class NamingViolation:
    symbol: str
    path: str
    map_files: tuple[str, ...]
    reasons: tuple[str, ...]

    @property
    def code(self) -> str:
        if len(self.reasons) > 1:
            return "NAMING_NOT_EXPORTED_OR_DECLARED"
        return "NAMING_NOT_EXPORTED" if self.reasons[0] == NOT_EXPORTED else "NAMING_NOT_DECLARED"

    def to_violation(self, prefix: str) -> Violation:
        maps = ", ".join(self.map_files)
        return Violation(
            self.code,
            f"function {self.symbol} starts with {prefix} which is reserved for public API functions "
            f"({' and '.join(self.reasons)}; map file: {maps})",
            path=self.path,
            hint=f"Please add this function to its corresponding map file and a public header or remove the {prefix} prefix.",
        )


def find_naming_violations(changes: Sequence[ChangedSource], declared: Collection[str]) -> list[NamingViolation]:
    violations: list[NamingViolation] = []
    for change in changes:
        for symbol in change.defined:
            reasons = []
            if symbol not in change.exported:
                reasons.append(NOT_EXPORTED)
            if symbol not in declared:
                reasons.append(NOT_DECLARED)
            if reasons:
                violations.append(NamingViolation(symbol, change.path, change.map_files, tuple(reasons)))
    return violations


def collect_changes(ctx: RunContext, base: str, head: str) -> list[ChangedSource]:
    naming = ctx.config.naming
    changes: list[ChangedSource] = []
    for rel in git.diff_names(ctx.repo_root, base, head, naming.library_pathspecs, ctx=ctx):
        defined = defined_symbols(git.diff_text(ctx.repo_root, base, head, [rel], ctx=ctx), naming.prefix)
        map_files = resolve_map_files(ctx.repo_root, rel, naming.blank_map_file)
        changes.append(
            ChangedSource(
                path=rel,
                map_files=map_files,
                defined=tuple(defined),
                exported=read_exports(ctx.repo_root, map_files, naming.prefix),
            )
        )
    return changes


class NamingConventionsChecker(Checker):
    check_id = "naming-conventions"
    title = "proper function naming conventions"
    needs_pathspec_magic = True

    def run(self, ctx: RunContext) -> CheckResult:
        naming = ctx.config.naming
        head = "HEAD"
        if not git.rev_exists(ctx.repo_root, head, ctx=ctx):
            return self.skip("repository has no commits yet")
        base = git.parent_commit(ctx.repo_root, head, ctx=ctx)
        if base is None:
            return self.skip("HEAD has no parent commit to compare against")
        header_diff = git.diff_text(ctx.repo_root, base, head, naming.header_pathspecs, ctx=ctx)
        declared = frozenset(declared_symbols(header_diff, naming.prefix))
        found = find_naming_violations(collect_changes(ctx, base, head), declared)
        return self.outcome(
            [item.to_violation(naming.prefix) for item in found],
            hint=(
                f"Please add these functions to their corresponding map file and a public header "
                f"or remove the {naming.prefix} prefix."
            ),
        )
