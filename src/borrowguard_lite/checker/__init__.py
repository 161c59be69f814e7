"""Advisory static borrow checker for Python source."""

from borrowguard_lite.checker.config import CheckerConfig
from borrowguard_lite.checker.context import BorrowContext
from borrowguard_lite.checker.diagnostics import Diagnostic, Severity
from borrowguard_lite.checker.visitor import (
    BorrowCheckVisitor,
    check_file,
    check_paths,
    check_source,
    iter_python_files,
)

__all__ = [
    "BorrowCheckVisitor",
    "BorrowContext",
    "CheckerConfig",
    "Diagnostic",
    "Severity",
    "check_file",
    "check_paths",
    "check_source",
    "iter_python_files",
]
