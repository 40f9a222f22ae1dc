from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Sequence

from ..config.loader import CheckerConfig
from ..core.files import list_files, read_text_file
from ..core.parallel import map_parallel
from .model import Checker, CheckResult, Violation

if TYPE_CHECKING:
    from ..core.context import RunContext


@dataclass(frozen=True)
class PatternRule:
    pattern: str
    pathspecs: tuple[str, ...]
    ignore_case: bool = False
    word: bool = False
    fixed: bool = False

    @cached_property
    def regex(self) -> re.Pattern[str]:
        body = re.escape(self.pattern) if self.fixed else self.pattern
        if self.word:
            body = rf"(?<![A-Za-z0-9_])(?:{body})(?![A-Za-z0-9_])"
        return re.compile(body, re.IGNORECASE if self.ignore_case else 0)


def scan_text(rule: PatternRule, path: str, text: str, code: str) -> list[Violation]:
    """Every line of ``text`` matching ``rule``, as ``path:line:text`` violations.

    Lines break on ``\\n`` only, the way ``git grep`` numbers them.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [
        Violation(code, line.rstrip("\r"), path=path, line=idx)
        for idx, line in enumerate(lines, start=1)
        if rule.regex.search(line)
    ]


class PatternChecker(Checker):
    needs_pathspec_magic = True

    def __init__(self, check_id: str, title: str, code: str, rules: Sequence[PatternRule], hint: str = "") -> None:
        self.check_id = check_id
        self.title = title
        self.code = code
        self.rules = tuple(rules)
        self.hint = hint

    def rules_for(self, ctx: RunContext) -> tuple[PatternRule, ...]:
        return self.rules

    def run(self, ctx: RunContext) -> CheckResult:
        violations: list[Violation] = []
        for rule in self.rules_for(ctx):
            files = list_files(ctx, rule.pathspecs)

            def _scan(rel: str, rule: PatternRule = rule) -> list[Violation]:
                text = read_text_file(ctx.repo_root, rel)
                return [] if text is None else scan_text(rule, rel, text, self.code)

            for found in map_parallel(_scan, files, ctx.jobs):
                violations.extend(found)
        return self.outcome(violations)


class PosixIncludesChecker(PatternChecker):
    """Patterns come from a file in the checked repository, one per line."""

    def __init__(self, pattern_file: str, pathspecs: Sequence[str], stdinc_header: str) -> None:
        super().__init__(
            "posix-includes",
            "POSIX includes",
            "POSIX_INCLUDE",
            (),
            hint=f"POSIX includes detected. Please include {stdinc_header} instead.",
        )
        self.pattern_file = pattern_file
        self.pathspecs = tuple(pathspecs)

    def rules_for(self, ctx: RunContext) -> tuple[PatternRule, ...]:
        path = ctx.repo_root / self.pattern_file
        lines = path.read_text(encoding="utf-8").splitlines()
        return tuple(
            PatternRule(line.strip(), self.pathspecs, ignore_case=True, fixed=True)
            for line in lines
            if line.strip()
        )

    def run(self, ctx: RunContext) -> CheckResult:
        if not (ctx.repo_root / self.pattern_file).is_file():
            return self.skip(f"pattern file {self.pattern_file} not found")
        return super().run(ctx)


def comment_style_checker(config: CheckerConfig) -> PatternChecker:
    section = config.section("comments")
    files = tuple(section["pathspecs"])
    vendored = files + tuple(section["vendored_excludes"])
    return PatternChecker(
        "comment-style",
        "comment style",
        "COMMENT_STYLE",
        (
            PatternRule(r"/\*[^ *\-]", files),
            PatternRule(r"[^ ]\*/", vendored),
            PatternRule(r"^\*", files),
            PatternRule(r"\s//", files),
            PatternRule(r"^//", files),
        ),
        hint="Incorrect comment formatting detected: use /* */ comments with a space after /* and before */.",
    )


def spaces_before_tabs_checker(config: CheckerConfig) -> PatternChecker:
    return PatternChecker(
        "spaces-before-tabs",
        "spaces before tabs",
        "SPACE_BEFORE_TAB",
        (PatternRule(" \t", config.pathspecs("whitespace"), fixed=True),),
        hint="Spaces before tabs detected.",
    )


def output_string_whitespace_checker(config: CheckerConfig) -> PatternChecker:
    return PatternChecker(
        "output-string-whitespace",
        "trailing whitespace in output strings",
        "OUTPUT_STRING_WHITESPACE",
        (PatternRule(' \\n"', config.pathspecs("whitespace", "output_string_pathspecs"), fixed=True),),
        hint="Incorrect trailing whitespace detected: remove the space before \\n.",
    )


def forbidden_functions_checker(config: CheckerConfig) -> PatternChecker:
    section = config.section("forbidden_functions")
    names = "|".join(re.escape(name) for name in section["names"])
    return PatternChecker(
        "forbidden-functions",
        "use of forbidden library functions",
        "FORBIDDEN_FUNCTION",
        (PatternRule(names, tuple(section["pathspecs"]), word=True),),
        hint="Forbidden library functions detected.",
    )


def forbidden_macros_checker(config: CheckerConfig) -> PatternChecker:
    section = config.section("forbidden_macros")
    names = "|".join(re.escape(name) for name in section["names"])
    used = ", ".join(section["names"])
    return PatternChecker(
        "forbidden-cunit-macros",
        "use of forbidden CUnit macros",
        "FORBIDDEN_MACRO",
        (PatternRule(names, tuple(section["pathspecs"]), word=True),),
        hint=f"Forbidden {used} usage detected - use {section['replacement']} instead.",
    )


def posix_includes_checker(config: CheckerConfig) -> PosixIncludesChecker:
    section = config.section("posix")
    return PosixIncludesChecker(section["pattern_file"], section["pathspecs"], section["stdinc_header"])


def include_style_checker(config: CheckerConfig) -> PatternChecker:
    section = config.section("includes")
    prefix = section["quoted_prefix"]
    return PatternChecker(
        "include-style",
        "#include style",
        "INCLUDE_STYLE",
        (PatternRule(f"#include <{prefix}", tuple(section["pathspecs"]), ignore_case=True, fixed=True),),
        hint=f"Incorrect #include syntax. #includes of {prefix} files should use quotes.",
    )
