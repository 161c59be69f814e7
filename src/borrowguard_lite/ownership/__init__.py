"""Runtime ownership and borrow checking.

Re-exports the public types:
    from borrowguard_lite.ownership import Owner, SharedBorrow, BorrowError
"""
from borrowguard_lite.ownership.errors import BorrowError, BorrowErrorKind
from borrowguard_lite.ownership.handles import ExclusiveBorrow, SharedBorrow
from borrowguard_lite.ownership.owner import Owner, create_owner
from borrowguard_lite.ownership.state import BorrowMode, BorrowState

__all__ = [
    "BorrowError",
    "BorrowErrorKind",
    "BorrowMode",
    "BorrowState",
    "ExclusiveBorrow",
    "Owner",
    "SharedBorrow",
    "create_owner",
]
