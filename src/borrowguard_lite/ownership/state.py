"""Per-owner borrow bookkeeping.

BorrowState is the tally every acquire/release/close/relocate consults:
an exclusive flag plus a shared-borrow count. The two are mutually
exclusive:

    FREE       exclusive_held=False, shared_count == 0
    SHARED(n)  exclusive_held=False, shared_count == n > 0
    EXCLUSIVE  exclusive_held=True,  shared_count == 0

Transitions:
    FREE      --acquire_shared-->    SHARED(1)
    SHARED(n) --acquire_shared-->    SHARED(n+1)
    SHARED(n) --release_shared-->    SHARED(n-1)   (SHARED(1) -> FREE)
    FREE      --acquire_exclusive--> EXCLUSIVE
    EXCLUSIVE --release_exclusive--> FREE

Everything else is rejected by Owner before it reaches this object.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class BorrowMode(Enum):
    FREE = auto()
    SHARED = auto()
    EXCLUSIVE = auto()


@dataclass(slots=True)
class BorrowState:
    exclusive_held: bool = False
    shared_count: int = 0

    @property
    def mode(self) -> BorrowMode:
        if self.exclusive_held:
            return BorrowMode.EXCLUSIVE
        if self.shared_count > 0:
            return BorrowMode.SHARED
        return BorrowMode.FREE

    def is_free(self) -> bool:
        """True when nothing is borrowed (the only closable/movable state)."""
        return not self.exclusive_held and self.shared_count == 0

    def snapshot(self) -> BorrowState:
        """Independent copy, for before/after comparisons."""
        return BorrowState(self.exclusive_held, self.shared_count)

    def reset(self) -> None:
        self.exclusive_held = False
        self.shared_count = 0

    def describe(self) -> str:
        if self.exclusive_held:
            return "exclusively borrowed"
        if self.shared_count > 0:
            return f"shared-borrowed {self.shared_count} time(s)"
        return "not borrowed"
