from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_INTERNAL


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class ToolMissingError(Exception):
    """Raised by an adapter when its external binary is not installed."""

    def __init__(self, tool: str, reason: str = "") -> None:
        super().__init__(reason or f"{tool} is not installed")
        self.tool = tool
        self.reason = reason or f"{tool} is not installed"


class ToolError(Exception):
    """An external tool failed for a reason unrelated to formatting."""

    def __init__(self, tool: str, output: str, code: int = 1) -> None:
        super().__init__(f"{tool} exited with {code}")
        self.tool = tool
        self.output = output
        self.code = code
