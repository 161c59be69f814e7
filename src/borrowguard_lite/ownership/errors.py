"""Violation kinds for the ownership/borrow protocol.

Every misuse of an Owner or a borrow handle is a contract violation, not
an environmental failure. It is reported immediately, at the call that
broke the rule, by raising BorrowError with a kind from the closed set
below. Callers that care about *which* rule was broken match on
``err.kind`` rather than on the message text.
"""
from __future__ import annotations

from enum import Enum, auto


class BorrowErrorKind(Enum):
    DESTROY_WHILE_BORROWED = auto()
    RELOCATE_SOURCE_WHILE_BORROWED = auto()
    RELOCATE_DESTINATION_WHILE_BORROWED = auto()
    ACQUIRE_EXCLUSIVE_WHILE_BORROWED = auto()
    ACQUIRE_SHARED_WHILE_EXCLUSIVE = auto()
    DIRECT_MUTATING_ACCESS_WHILE_BORROWED = auto()
    DIRECT_READ_ACCESS_WHILE_EXCLUSIVELY_BORROWED = auto()
    RELEASE_UNMATCHED_SHARED_BORROW = auto()
    RELEASE_UNMATCHED_EXCLUSIVE_BORROW = auto()
    USE_OF_EMPTY_OWNER = auto()
    USE_OF_RELEASED_BORROW = auto()


class BorrowError(Exception):
    """Raised when an ownership or borrow rule is violated.

    The failing operation never changes borrow state, so the owner is
    still consistent after the exception is caught.
    """

    def __init__(self, kind: BorrowErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)

    def __repr__(self) -> str:
        return f"BorrowError({self.kind.name}, {str(self)!r})"
