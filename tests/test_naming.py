from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from check_format.checks.model import CheckStatus
from check_format.checks.naming import (
    NOT_DECLARED,
    NOT_EXPORTED,
    ChangedSource,
    NamingConventionsChecker,
    declared_symbols,
    defined_symbols,
    exported_symbols,
    find_naming_violations,
    resolve_map_files,
)

HEADER_DIFF = """\
diff --git a/include/spdk/foo.h b/include/spdk/foo.h
--- a/include/spdk/foo.h
+++ b/include/spdk/foo.h
@@ -1,0 +2,3 @@
+int spdk_foo(void);
+struct spdk_thing *spdk_thing_get(struct spdk_thing_opts *opts);
+int other(void);
"""

SOURCE_DIFF = """\
diff --git a/lib/foo/foo.c b/lib/foo/foo.c
--- a/lib/foo/foo.c
+++ b/lib/foo/foo.c
@@ -1,0 +2,4 @@
+spdk_foo(void)
+static int spdk_internal(void)
+ spdk_indented(void)
+spdk_foo(void)
"""

MAP = """\
{
\tglobal:
\tspdk_foo;
\tspdk_bar;
\tlocal: *;
};
"""


def test_declared_symbols_take_last_prefixed_call() -> None:
    assert declared_symbols(HEADER_DIFF, "spdk_") == ["spdk_foo", "spdk_thing_get"]


def test_defined_symbols_are_anchored_and_deduplicated() -> None:
    assert defined_symbols(SOURCE_DIFF, "spdk_") == ["spdk_foo"]


def test_exported_symbols_read_map_entries() -> None:
    assert exported_symbols(MAP, "spdk_") == frozenset({"spdk_foo", "spdk_bar"})


def test_resolve_map_files_falls_back_to_blank_map(tmp_path: Path) -> None:
    (tmp_path / "lib/foo").mkdir(parents=True)
    (tmp_path / "lib/bar").mkdir(parents=True)
    (tmp_path / "lib/foo/spdk_foo.map").write_text(MAP, encoding="utf-8")
    assert resolve_map_files(tmp_path, "lib/foo/foo.c", "mk/spdk_blank.map") == ("lib/foo/spdk_foo.map",)
    assert resolve_map_files(tmp_path, "lib/bar/bar.c", "mk/spdk_blank.map") == ("mk/spdk_blank.map",)


def test_violation_reasons_and_codes() -> None:
    changes = [
        ChangedSource("lib/a/a.c", ("lib/a/a.map",), ("spdk_ok", "spdk_hidden", "spdk_undeclared", "spdk_nowhere"),
                      frozenset({"spdk_ok", "spdk_undeclared"})),
    ]
    found = find_naming_violations(changes, {"spdk_ok", "spdk_hidden"})
    assert [(v.symbol, v.reasons) for v in found] == [
        ("spdk_hidden", (NOT_EXPORTED,)),
        ("spdk_undeclared", (NOT_DECLARED,)),
        ("spdk_nowhere", (NOT_EXPORTED, NOT_DECLARED)),
    ]
    assert [v.code for v in found] == [
        "NAMING_NOT_EXPORTED",
        "NAMING_NOT_DECLARED",
        "NAMING_NOT_EXPORTED_OR_DECLARED",
    ]
    rendered = found[0].to_violation("spdk_")
    assert rendered.path == "lib/a/a.c"
    assert "spdk_hidden" in rendered.message
    assert "lib/a/a.map" in rendered.message


_symbols = st.lists(st.from_regex(r"spdk_[a-z0-9_]{1,8}", fullmatch=True), min_size=1, max_size=8, unique=True)


@given(_symbols, st.data())
def test_symbol_passes_iff_exported_and_declared(defined: list[str], data: st.DataObject) -> None:
    exported = frozenset(data.draw(st.sets(st.sampled_from(defined))))
    declared = frozenset(data.draw(st.sets(st.sampled_from(defined))))
    changes = [ChangedSource("lib/x/x.c", ("lib/x/x.map",), tuple(defined), exported)]
    flagged = {v.symbol: v for v in find_naming_violations(changes, declared)}
    for symbol in defined:
        ok = symbol in exported and symbol in declared
        assert (symbol not in flagged) is ok
        if not ok:
            reasons = flagged[symbol].reasons
            assert (NOT_EXPORTED in reasons) is (symbol not in exported)
            assert (NOT_DECLARED in reasons) is (symbol not in declared)


@given(_symbols, st.data())
def test_naming_analysis_is_idempotent(defined: list[str], data: st.DataObject) -> None:
    exported = frozenset(data.draw(st.sets(st.sampled_from(defined))))
    lines = "".join(f"+{name}(void)\n" for name in defined)
    diff = f"--- a/lib/x/x.c\n+++ b/lib/x/x.c\n@@ -0,0 +1,{len(defined)} @@\n{lines}"
    first = find_naming_violations([ChangedSource("lib/x/x.c", (), tuple(defined_symbols(diff, "spdk_")), exported)], set())
    second = find_naming_violations([ChangedSource("lib/x/x.c", (), tuple(defined_symbols(diff, "spdk_")), exported)], set())
    assert first == second
    assert [v.symbol for v in first] == defined


def _seed(git_repo) -> None:
    git_repo.write("README.md", "base\n")
    git_repo.commit("base")


@pytest.mark.integration
def test_exported_and_declared_function_passes(git_repo, make_ctx) -> None:
    _seed(git_repo)
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo(void)\n{\n\treturn 0;\n}\n")
    git_repo.write("lib/foo/spdk_foo.map", MAP)
    git_repo.write("include/spdk/foo.h", "int spdk_foo(void);\n")
    git_repo.commit("add spdk_foo")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.PASS
    assert result.violations == ()


@pytest.mark.integration
def test_function_missing_from_map_is_flagged(git_repo, make_ctx) -> None:
    _seed(git_repo)
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo(void)\n{\n\treturn 0;\n}\n")
    git_repo.write("include/spdk/foo.h", "int spdk_foo(void);\n")
    git_repo.commit("add spdk_foo")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.FAIL
    assert [(v.code, v.path) for v in result.violations] == [("NAMING_NOT_EXPORTED", "lib/foo/foo.c")]
    assert "mk/spdk_blank.map" in result.violations[0].message


@pytest.mark.integration
def test_function_missing_from_public_header_is_flagged(git_repo, make_ctx) -> None:
    _seed(git_repo)
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo(void)\n{\n\treturn 0;\n}\n")
    git_repo.write("lib/foo/spdk_foo.map", MAP)
    git_repo.commit("add spdk_foo")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.FAIL
    assert [v.code for v in result.violations] == ["NAMING_NOT_DECLARED"]
    assert "spdk_foo" in result.violations[0].message


@pytest.mark.integration
def test_initial_commit_is_skipped(git_repo, make_ctx) -> None:
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo(void)\n{\n}\n")
    git_repo.commit("initial")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.SKIP
    assert "parent" in result.notice


@pytest.mark.integration
def test_repository_without_commits_is_skipped(git_repo, make_ctx) -> None:
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.SKIP


@pytest.mark.integration
def test_map_file_without_the_symbol_is_not_exported_only(git_repo, make_ctx) -> None:
    _seed(git_repo)
    git_repo.write("lib/foo/foo.map", "{\n\tglobal:\n\tspdk_other;\n\tlocal: *;\n};\n")
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo_bar(int x)\n{\n\treturn x;\n}\n")
    git_repo.write("include/spdk/foo.h", "int spdk_foo_bar(int x);\n")
    git_repo.commit("add spdk_foo_bar")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert [(v.code, v.path) for v in result.violations] == [("NAMING_NOT_EXPORTED", "lib/foo/foo.c")]
    assert "lib/foo/foo.map" in result.violations[0].message
    assert "not exported" in result.violations[0].message
    assert "not declared" not in result.violations[0].message


@pytest.mark.integration
def test_header_declaration_on_an_unchanged_line_is_not_declared(git_repo, make_ctx) -> None:
    git_repo.write("include/spdk/foo.h", "int spdk_foo(void);\n\n/* foo */\n")
    git_repo.commit("base")
    git_repo.write("lib/foo/foo.c", "int\nspdk_foo(void)\n{\n\treturn 0;\n}\n")
    git_repo.write("lib/foo/spdk_foo.map", MAP)
    git_repo.write("include/spdk/foo.h", "int spdk_foo(void);\n\n/* foo library */\n")
    git_repo.commit("define spdk_foo")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.FAIL
    assert [(v.code, v.path) for v in result.violations] == [("NAMING_NOT_DECLARED", "lib/foo/foo.c")]


@pytest.mark.integration
@pytest.mark.parametrize(
    "source",
    ["int spdk_foo(void)\n{\n\treturn 0;\n}\n", "static int\n\tspdk_foo(void)\n{\n\treturn 0;\n}\n"],
    ids=["same-line-return-type", "indented"],
)
def test_definition_not_at_line_start_is_not_picked_up(git_repo, make_ctx, source: str) -> None:
    _seed(git_repo)
    git_repo.write("lib/foo/foo.c", source)
    git_repo.commit("add spdk_foo")
    result = NamingConventionsChecker().run(make_ctx(git_repo.root))
    assert result.status is CheckStatus.PASS
    assert result.violations == ()
