from __future__ import annotations

import json

import pytest

from check_format import __version__
from check_format.cli import build_parser, main
from check_format.core.exit_codes import ERR_CONFIG, ERR_CONTEXT


def test_parser_defaults() -> None:
    ns = build_parser().parse_args([])
    assert ns.format == "text"
    assert ns.jobs is None
    assert ns.no_fix is False


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_verbose_and_quiet_are_exclusive() -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--verbose", "--quiet"])
    assert exc.value.code == 2


def _clean_repo(git_repo) -> None:
    git_repo.write("README.md", "project\n")
    git_repo.write("lib/a.c", '#include "spdk/stdinc.h"\n\nint a;\n')
    git_repo.commit("initial")


@pytest.mark.integration
def test_clean_repository_passes(git_repo, no_external_tools, capsys: pytest.CaptureFixture[str]) -> None:
    _clean_repo(git_repo)
    code = main(["--repo-root", str(git_repo.root), "--quiet"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FAILED" not in out
    assert out.splitlines()[0] == "Checking file permissions... OK"
    assert out.splitlines()[-1].startswith("summary: passed=")


@pytest.mark.integration
def test_single_format_violation_fails_one_section(git_repo, no_external_tools, capsys: pytest.CaptureFixture[str]) -> None:
    _clean_repo(git_repo)
    git_repo.write("notes.txt", "trailing blank line\n\n")
    git_repo.commit("notes")
    code = main(["--repo-root", str(git_repo.root), "--quiet"])
    out = capsys.readouterr().out
    assert code == 1
    failed = [line for line in out.splitlines() if line.endswith("FAILED")]
    assert failed == ["Checking blank lines at end of file... FAILED"]
    assert "  notes.txt: Extra trailing newline" in out


@pytest.mark.integration
def test_json_report(git_repo, no_external_tools, capsys: pytest.CaptureFixture[str]) -> None:
    _clean_repo(git_repo)
    code = main(["--repo-root", str(git_repo.root), "--format", "json", "--quiet"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["status"] == "pass"
    ids = [row["id"] for row in payload["rows"]]
    assert ids[:3] == ["permissions", "astyle", "comment-style"]
    assert ids[-1] == "changelog"
    assert len(ids) == 15
    statuses = {row["id"]: row["status"] for row in payload["rows"]}
    assert statuses["astyle"] == "skip"
    assert statuses["posix-includes"] == "skip"


@pytest.mark.integration
def test_outside_repository_is_a_context_error(
    tmp_path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    code = main(["--repo-root", str(tmp_path)])
    assert code == ERR_CONTEXT
    assert "not inside a git repository" in capsys.readouterr().err


@pytest.mark.integration
def test_invalid_config_is_a_config_error(git_repo, capsys: pytest.CaptureFixture[str]) -> None:
    _clean_repo(git_repo)
    (git_repo.root / "bad.yaml").write_text("naming:\n  prefix: [1]\n", encoding="utf-8")
    code = main(["--repo-root", str(git_repo.root), "--config", "bad.yaml", "--format", "json"])
    assert code == ERR_CONFIG
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["error"]["code"] == ERR_CONFIG
