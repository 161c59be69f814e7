"""Borrow handles: scoped grants of access to an Owner's resource.

SharedBorrow  -- read-only, counted. Copying a handle takes another unit
                 of shared access; each unit is released exactly once.
ExclusiveBorrow -- read-write, singular. Cannot be copied, only moved with
                 relocate(); the moved-from handle is spent and releasing
                 it does nothing.

A handle exists only if its acquisition succeeded, so construction either
registers the borrow with the owner or raises BorrowError with nothing
changed. Both handles are context managers; the block exit releases the
borrow whether the block finishes, returns early, or raises:

    with owner.borrow_shared() as ref:
        total = sum(ref.value)

After release (or after an exclusive handle was relocated) the handle no
longer grants access and reading through it raises USE_OF_RELEASED_BORROW.

"Read-only" is a protocol, not a wrapper: SharedBorrow.value hands back
the owner's live object, so a mutable resource can still be changed in
place through it (``ref.value.append(x)`` is not caught). What a shared
handle refuses is rebinding the resource (``ref.value = ...``).
"""
from __future__ import annotations

from types import TracebackType
from typing import Generic, TypeVar

from borrowguard_lite.ownership.errors import BorrowError, BorrowErrorKind
from borrowguard_lite.ownership.owner import Owner

T = TypeVar("T")


def _spent(kind: str) -> BorrowError:
    return BorrowError(
        BorrowErrorKind.USE_OF_RELEASED_BORROW,
        f"This {kind} borrow has been released and no longer grants access",
    )


class SharedBorrow(Generic[T]):
    """One unit of shared (read-only) access to an Owner's resource."""

    __slots__ = ("_owner",)

    def __init__(self, owner: Owner[T]) -> None:
        owner.acquire_shared()
        self._owner: Owner[T] | None = owner

    @property
    def owner(self) -> Owner[T] | None:
        return self._owner

    @property
    def is_live(self) -> bool:
        return self._owner is not None

    @property
    def value(self) -> T:
        return self._live_owner()._peek()

    def get(self) -> T:
        return self.value

    def clone(self) -> SharedBorrow[T]:
        """A second, independent shared borrow of the same owner."""
        return SharedBorrow(self._live_owner())

    def reassign(self, other: SharedBorrow[T]) -> None:
        """Point this handle at *other*'s owner.

        The new owner is acquired before the current one is released, so
        if the acquire fails neither owner nor this handle changes.
        """
        if other is self:
            return
        new_owner = other._live_owner()
        new_owner.acquire_shared()
        old_owner = self._owner
        self._owner = new_owner
        if old_owner is not None:
            old_owner.release_shared()

    def release(self) -> None:
        """Give the shared borrow back. Later calls are no-ops."""
        if self._owner is None:
            return
        self._owner.release_shared()
        self._owner = None

    def __enter__(self) -> SharedBorrow[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __copy__(self) -> SharedBorrow[T]:
        return self.clone()

    def __deepcopy__(self, memo: dict) -> SharedBorrow[T]:
        return self.clone()

    def __repr__(self) -> str:
        if self._owner is None:
            return "<SharedBorrow released>"
        return f"<SharedBorrow of {self._owner.label}>"

    def _live_owner(self) -> Owner[T]:
        if self._owner is None:
            raise _spent("shared")
        return self._owner


class ExclusiveBorrow(Generic[T]):
    """Sole read-write access to an Owner's resource. Move-only."""

    __slots__ = ("_owner",)

    def __init__(self, owner: Owner[T]) -> None:
        owner.acquire_exclusive()
        self._owner: Owner[T] | None = owner

    @classmethod
    def _adopt(cls, owner: Owner[T]) -> ExclusiveBorrow[T]:
        # Takes over an already-registered exclusive borrow.
        handle = object.__new__(cls)
        handle._owner = owner
        return handle

    @property
    def owner(self) -> Owner[T] | None:
        return self._owner

    @property
    def is_live(self) -> bool:
        return self._owner is not None

    @property
    def value(self) -> T:
        return self._live_owner()._peek()

    @value.setter
    def value(self, new_value: T) -> None:
        self._live_owner()._store(new_value)

    def get(self) -> T:
        return self.value

    def relocate(self) -> ExclusiveBorrow[T]:
        """Move the borrow into a new handle; this one is left spent."""
        owner = self._live_owner()
        moved = ExclusiveBorrow._adopt(owner)
        self._owner = None
        return moved

    def release(self) -> None:
        """Give the exclusive borrow back. No-op once released or moved."""
        if self._owner is None:
            return
        self._owner.release_exclusive()
        self._owner = None

    def __enter__(self) -> ExclusiveBorrow[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __copy__(self) -> ExclusiveBorrow[T]:
        raise TypeError(
            "ExclusiveBorrow cannot be copied; use relocate() to move it"
        )

    def __deepcopy__(self, memo: dict) -> ExclusiveBorrow[T]:
        return self.__copy__()

    def __repr__(self) -> str:
        if self._owner is None:
            return "<ExclusiveBorrow released>"
        return f"<ExclusiveBorrow of {self._owner.label}>"

    def _live_owner(self) -> Owner[T]:
        if self._owner is None:
            raise _spent("exclusive")
        return self._owner
