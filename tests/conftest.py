from __future__ import annotations

import os
import shutil
import socket
import subprocess
from pathlib import Path
from typing import Any, Callable

import pytest
from hypothesis import settings

from check_format.config.loader import load_config
from check_format.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration"}

settings.register_profile("check-format", deadline=None, max_examples=75)
settings.load_profile("check-format")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)


class GitRepo:
    """Throw-away repository for tests that need real git plumbing."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def git(self, *args: str) -> str:
        env = {**os.environ, "GIT_CONFIG_NOSYSTEM": "1", "HOME": str(self.root)}
        proc = subprocess.run(
            ["git", "-c", "user.name=check-format", "-c", "user.email=check-format@example.invalid", *args],
            cwd=self.root,
            env=env,
            text=True,
            capture_output=True,
            check=True,
        )
        return proc.stdout

    def write(self, rel: str, text: str, executable: bool = False) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        path.chmod(0o755 if executable else 0o644)
        return path

    def commit(self, message: str = "change") -> None:
        self.git("add", "-A")
        self.git("commit", "--no-verify", "-q", "-m", message)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    root = tmp_path / "repo"
    root.mkdir()
    repo = GitRepo(root)
    repo.git("init", "-q")
    repo.git("config", "core.fileMode", "true")
    return repo


@pytest.fixture
def make_ctx() -> Callable[..., RunContext]:
    def _make(root: Path, **overrides: Any) -> RunContext:
        fields: dict[str, Any] = {
            "run_id": "test-run",
            "repo_root": root,
            "config": load_config(root),
            "output_format": "text",
            "output_dir": root,
            "jobs": 2,
            "autofix": True,
            "verbose": False,
            "quiet": True,
            "log_json": False,
            "git_version": (2, 40, 0),
        }
        fields.update(overrides)
        return RunContext(**fields)

    return _make


@pytest.fixture
def no_external_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    from check_format.checks.tools import base, pycodestyle, shfmt

    monkeypatch.setattr(base, "which", lambda _name: None)
    monkeypatch.setattr(pycodestyle, "which", lambda _name: None)
    monkeypatch.setattr(shfmt, "find_prefixed_binaries", lambda _prefix, search_path=None: [])
