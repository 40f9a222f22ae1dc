from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_CONFIG
from ..core.git import parse_version

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")
SCHEMA_PATH = Path(__file__).with_name("schema.json")
REPO_CONFIG_NAME = ".check-format.yaml"


@dataclass(frozen=True)
class NamingConfig:
    prefix: str
    library_pathspecs: tuple[str, ...]
    header_pathspecs: tuple[str, ...]
    blank_map_file: str


@dataclass(frozen=True)
class AstyleConfig:
    options_file: str
    min_version: tuple[int, ...]
    batch_size: int
    pathspecs: tuple[str, ...]
    exclude_substrings: tuple[str, ...]


@dataclass(frozen=True)
class PycodestyleConfig:
    binaries: tuple[str, ...]
    args: tuple[str, ...]
    pathspecs: tuple[str, ...]


@dataclass(frozen=True)
class ShfmtConfig:
    min_version: tuple[int, ...]
    upstream: str
    pathspecs: tuple[str, ...]
    args: tuple[str, ...]


@dataclass(frozen=True)
class ShellcheckConfig:
    diff_format_min_version: tuple[int, ...]
    autofix: bool
    pathspecs: tuple[str, ...]
    excludes: tuple[str, ...]


@dataclass(frozen=True)
class CheckerConfig:
    """Typed view of the merged defaults + repository configuration."""

    raw: dict[str, Any]
    git_min_version: tuple[int, ...]
    naming: NamingConfig
    astyle: AstyleConfig
    pycodestyle: PycodestyleConfig
    shfmt: ShfmtConfig
    shellcheck: ShellcheckConfig

    def section(self, name: str) -> dict[str, Any]:
        return dict(self.raw[name])

    def pathspecs(self, name: str, key: str = "pathspecs") -> tuple[str, ...]:
        return tuple(self.raw[name][key])


def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(payload: dict[str, Any], source: str) -> None:
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ScriptError(f"invalid configuration in {source} at {location}: {exc.message}", ERR_CONFIG, kind="config_invalid") from exc


def _tuple(items: Any) -> tuple[str, ...]:
    return tuple(str(item) for item in items)


def build_config(payload: dict[str, Any]) -> CheckerConfig:
    tools = payload["tools"]
    naming = payload["naming"]
    return CheckerConfig(
        raw=payload,
        git_min_version=parse_version(payload["git"]["min_version"]),
        naming=NamingConfig(
            prefix=naming["prefix"],
            library_pathspecs=_tuple(naming["library_pathspecs"]),
            header_pathspecs=_tuple(naming["header_pathspecs"]),
            blank_map_file=naming["blank_map_file"],
        ),
        astyle=AstyleConfig(
            options_file=tools["astyle"]["options_file"],
            min_version=parse_version(tools["astyle"]["min_version"]),
            batch_size=int(tools["astyle"]["batch_size"]),
            pathspecs=_tuple(tools["astyle"]["pathspecs"]),
            exclude_substrings=_tuple(tools["astyle"]["exclude_substrings"]),
        ),
        pycodestyle=PycodestyleConfig(
            binaries=_tuple(tools["pycodestyle"]["binaries"]),
            args=_tuple(tools["pycodestyle"]["args"]),
            pathspecs=_tuple(tools["pycodestyle"]["pathspecs"]),
        ),
        shfmt=ShfmtConfig(
            min_version=parse_version(tools["shfmt"]["min_version"]),
            upstream=tools["shfmt"]["upstream"],
            pathspecs=_tuple(tools["shfmt"]["pathspecs"]),
            args=_tuple(tools["shfmt"]["args"]),
        ),
        shellcheck=ShellcheckConfig(
            diff_format_min_version=parse_version(tools["shellcheck"]["diff_format_min_version"]),
            autofix=bool(tools["shellcheck"]["autofix"]),
            pathspecs=_tuple(tools["shellcheck"]["pathspecs"]),
            excludes=_tuple(tools["shellcheck"]["excludes"]),
        ),
    )


def load_config(repo_root: Path, config_path: Path | None = None) -> CheckerConfig:
    payload = load_yaml(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    path = config_path
    if path is None and (repo_root / REPO_CONFIG_NAME).is_file():
        path = repo_root / REPO_CONFIG_NAME
    if path is not None:
        if not path.is_absolute():
            path = repo_root / path
        if not path.is_file():
            raise ScriptError(f"configuration file not found: {path}", ERR_CONFIG, kind="config_missing")
        try:
            override = load_yaml(path) or {}
        except yaml.YAMLError as exc:
            raise ScriptError(f"invalid YAML in {path}: {exc}", ERR_CONFIG, kind="config_invalid") from exc
        if not isinstance(override, dict):
            raise ScriptError(f"{path}: root must be a mapping", ERR_CONFIG, kind="config_invalid")
        payload = merge_config(payload, override)
        source = str(path)
    validate_config(payload, source)
    return build_config(payload)
