from __future__ import annotations

from typing import TYPE_CHECKING

from .changelog import ChangelogChecker
from .eof import EofNewlineChecker
from .model import Checker
from .naming import NamingConventionsChecker
from .patterns import (
    comment_style_checker,
    forbidden_functions_checker,
    forbidden_macros_checker,
    include_style_checker,
    output_string_whitespace_checker,
    posix_includes_checker,
    spaces_before_tabs_checker,
)
from .permissions import PermissionsChecker
from .tools import AstyleChecker, PycodestyleChecker, ShellcheckChecker, ShfmtChecker

if TYPE_CHECKING:
    from ..config.loader import CheckerConfig


def default_checkers(config: CheckerConfig) -> list[Checker]:
    """All checks in report order."""
    changelog = config.section("changelog")
    return [
        PermissionsChecker(),
        AstyleChecker(config.astyle),
        comment_style_checker(config),
        spaces_before_tabs_checker(config),
        output_string_whitespace_checker(config),
        forbidden_functions_checker(config),
        forbidden_macros_checker(config),
        EofNewlineChecker(config.pathspecs("eof")),
        posix_includes_checker(config),
        NamingConventionsChecker(),
        include_style_checker(config),
        PycodestyleChecker(config.pycodestyle),
        ShfmtChecker(config.shfmt),
        ShellcheckChecker(config.shellcheck),
        ChangelogChecker(changelog["file"], changelog["public_surface"]),
    ]

