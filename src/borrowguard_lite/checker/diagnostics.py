"""Diagnostics emitted by the advisory borrow checker."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"


# Diagnostic codes
PARSE_FAILURE = "BG000"
SHARED_WHILE_EXCLUSIVE = "BG001"
EXCLUSIVE_WHILE_SHARED = "BG002"
EXCLUSIVE_WHILE_EXCLUSIVE = "BG003"
USE_AFTER_MOVE = "BG004"
MOVE_WHILE_BORROWED = "BG005"
UNTRACKED_BORROW = "BG006"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One finding. ``line`` and ``col`` are 1-based."""
    path: str
    line: int
    col: int
    severity: Severity
    code: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self) -> str:
        return (
            f"{self.path}:{self.line}:{self.col}: "
            f"{self.severity.value}: {self.message} [{self.code}]"
        )
