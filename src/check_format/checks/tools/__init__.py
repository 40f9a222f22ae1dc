from .astyle import AstyleChecker
from .base import ExternalToolChecker
from .pycodestyle import PycodestyleChecker
from .shellcheck import ShellcheckChecker
from .shfmt import ShfmtChecker

__all__ = [
    "AstyleChecker",
    "ExternalToolChecker",
    "PycodestyleChecker",
    "ShellcheckChecker",
    "ShfmtChecker",
]
