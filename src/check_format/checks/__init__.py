from .model import Checker, CheckResult, CheckRunReport, CheckStatus, Violation
from .registry import default_checkers
from .runner import run_checks

__all__ = [
    "CheckResult",
    "CheckRunReport",
    "CheckStatus",
    "Checker",
    "Violation",
    "default_checkers",
    "run_checks",
]
