from __future__ import annotations

from typing import TYPE_CHECKING, Collection

from ..core.files import TrackedFile, tracked_files
from .model import Checker, CheckResult, Violation

if TYPE_CHECKING:
    from ..core.context import RunContext


def file_extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1]


def check_file_permission(
    tracked: TrackedFile,
    non_executable_extensions: Collection[str],
    shebang: bytes = b"#!/",
) -> Violation | None:
    if file_extension(tracked.path) in non_executable_extensions:
        if tracked.executable:
            return Violation("PERM_EXECUTABLE_CODE_FILE", "is marked executable but is a code file", path=tracked.path)
        return None
    has_shebang = tracked.head[: len(shebang)] == shebang
    if tracked.executable and not has_shebang:
        return Violation("PERM_EXECUTABLE_WITHOUT_SHEBANG", "is marked executable but does not start with a shebang", path=tracked.path)
    if not tracked.executable and has_shebang:
        return Violation("PERM_SHEBANG_NOT_EXECUTABLE", "is not marked executable but starts with a shebang", path=tracked.path)
    return None


class PermissionsChecker(Checker):
    check_id = "permissions"
    title = "file permissions"
    hint = "Only scripts starting with a shebang may carry the executable bit (git update-index --chmod)."

    def run(self, ctx: RunContext) -> CheckResult:
        section = ctx.config.section("permissions")
        shebang = str(section["shebang"]).encode("utf-8")
        non_executable = frozenset(section["non_executable_extensions"])
        violations = []
        for tracked in tracked_files(ctx, head_size=len(shebang)):
            found = check_file_permission(tracked, non_executable, shebang)
            if found is not None:
                violations.append(found)
        return self.outcome(violations)
