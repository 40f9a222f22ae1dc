from __future__ import annotations

import pytest

from check_format.checks.model import CheckStatus
from check_format.checks.patterns import (
    PatternRule,
    comment_style_checker,
    forbidden_functions_checker,
    forbidden_macros_checker,
    include_style_checker,
    posix_includes_checker,
    scan_text,
    spaces_before_tabs_checker,
)
from check_format.config.loader import load_config


def _comment_hits(text: str, tmp_path) -> list[int]:
    checker = comment_style_checker(load_config(tmp_path))
    lines: set[int] = set()
    for rule in checker.rules:
        lines.update(v.line for v in scan_text(rule, "a.c", text, "COMMENT_STYLE"))
    return sorted(lines)


def test_comment_style_rules(tmp_path) -> None:
    text = "\n".join(
        [
            "/* good comment */",
            "/*bad start */",
            "/* bad end*/",
            "* stray star",
            "int x; // cpp comment",
            "// leading cpp comment",
            "/**",
            " * doc block",
            " */",
            "/*-",
        ]
    )
    assert _comment_hits(text, tmp_path) == [2, 3, 4, 5, 6]


def test_word_rule_does_not_match_inside_identifiers() -> None:
    rule = PatternRule("strcpy|atoi", ("*.c",), word=True)
    text = "strcpy(a, b);\nspdk_strcpy_pad(a);\nx = atoi(s);\nmy_atoi2(s);\n"
    assert [v.line for v in scan_text(rule, "a.c", text, "FORBIDDEN_FUNCTION")] == [1, 3]


def test_line_numbers_only_break_on_newline() -> None:
    rule = PatternRule("strcpy|atoi", ("*.c",), word=True)
    text = "int a;\x0c\nint b = atoi(s);\r\n\x1cx = 1;\n"
    violations = scan_text(rule, "a.c", text, "FORBIDDEN_FUNCTION")
    assert [(v.line, v.message) for v in violations] == [(2, "int b = atoi(s);")]


def test_fixed_case_insensitive_rule() -> None:
    rule = PatternRule("#include <spdk/", ("*.c",), ignore_case=True, fixed=True)
    violations = scan_text(rule, "a.c", '#INCLUDE <spdk/env.h>\n#include "spdk/env.h"\n', "INCLUDE_STYLE")
    assert [(v.path, v.line) for v in violations] == [("a.c", 1)]
    assert violations[0].render() == "a.c:1:#INCLUDE <spdk/env.h>"


@pytest.mark.integration
def test_forbidden_functions_respect_exclude_pathspecs(git_repo, make_ctx) -> None:
    git_repo.write("lib/foo/foo.c", "int f(void) { return atoi(\"1\"); }\n")
    git_repo.write("lib/rte_vhost/vhost.c", "int g(void) { return atoi(\"2\"); }\n")
    git_repo.write("lib/foo/foo.h", "int atoi(const char *);\n")
    git_repo.commit("sources")
    ctx = make_ctx(git_repo.root)
    result = forbidden_functions_checker(ctx.config).run(ctx)
    assert result.status is CheckStatus.FAIL
    assert [(v.path, v.line) for v in result.violations] == [("lib/foo/foo.c", 1)]


@pytest.mark.integration
def test_cunit_macro_check_ignores_wrapper_header(git_repo, make_ctx) -> None:
    git_repo.write("test/spdk_cunit.h", "#define SPDK_CU_ASSERT_FATAL(x) CU_ASSERT_FATAL(x)\n")
    git_repo.write("test/unit/a_ut.c", "SPDK_CU_ASSERT_FATAL(rc == 0);\nCU_ASSERT_FATAL(rc == 0);\n")
    git_repo.commit("tests")
    ctx = make_ctx(git_repo.root)
    result = forbidden_macros_checker(ctx.config).run(ctx)
    assert [(v.path, v.line) for v in result.violations] == [("test/unit/a_ut.c", 2)]


@pytest.mark.integration
def test_spaces_before_tabs_skip_patches_and_binaries(git_repo, make_ctx) -> None:
    git_repo.write("a.txt", "ok\nbad \tline\n")
    git_repo.write("fix.patch", "bad \tline\n")
    (git_repo.root / "blob.bin").write_bytes(b"\0 \t\0")
    git_repo.commit("files")
    ctx = make_ctx(git_repo.root)
    result = spaces_before_tabs_checker(ctx.config).run(ctx)
    assert [(v.path, v.line) for v in result.violations] == [("a.txt", 2)]


@pytest.mark.integration
def test_posix_includes_use_repository_pattern_file(git_repo, make_ctx) -> None:
    git_repo.write("lib/a.c", "#include <stdio.h>\n#include \"spdk/stdinc.h\"\n")
    git_repo.write("include/spdk/stdinc.h", "#include <stdio.h>\n")
    git_repo.commit("sources")
    ctx = make_ctx(git_repo.root)
    checker = posix_includes_checker(ctx.config)
    skipped = checker.run(ctx)
    assert skipped.status is CheckStatus.SKIP
    git_repo.write("scripts/posix.txt", "<stdio.h>\n")
    git_repo.commit("patterns")
    result = checker.run(ctx)
    assert [(v.path, v.line) for v in result.violations] == [("lib/a.c", 1)]
    assert "spdk/stdinc.h" in result.hint


@pytest.mark.integration
def test_include_style_passes_on_quoted_includes(git_repo, make_ctx) -> None:
    git_repo.write("lib/a.c", '#include "spdk/env.h"\n')
    git_repo.commit("sources")
    ctx = make_ctx(git_repo.root)
    assert include_style_checker(ctx.config).run(ctx).status is CheckStatus.PASS
