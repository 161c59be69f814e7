"""Owner: the single holder of a resource.

An Owner is the only object allowed to release its resource. Access goes
through borrow handles (see handles.py) or through gated direct access:

    owner = Owner(buffer)

    with owner.borrow_shared() as ref:      # any number of these at once
        print(ref.value)

    with owner.borrow_exclusive() as ref:   # only one, and no shared ones
        ref.value.append(1)

    owner.close()                           # fails while anything is borrowed

The owner cannot be copied. Ownership moves with take() (returns a new
Owner) or relocate_to() (fills an existing one); the source is left empty
and any further borrow or access on it raises USE_OF_EMPTY_OWNER.

Every check happens before any mutation, so a call that raises leaves the
BorrowState exactly as it was.

close() is the explicit, fallible destroy. Used as a context manager the
owner closes itself at the end of the block; if the block is already
propagating an exception, a destroy-time violation is logged and the owner
left open rather than replacing the in-flight exception.
"""
from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from borrowguard_lite.ownership.errors import BorrowError, BorrowErrorKind
from borrowguard_lite.ownership.state import BorrowMode, BorrowState

if TYPE_CHECKING:
    from borrowguard_lite.ownership.handles import ExclusiveBorrow, SharedBorrow

log = logging.getLogger(__name__)

T = TypeVar("T")

Finalizer = Callable[[T], None]


class Owner(Generic[T]):
    """Exclusive, move-only container of one resource.

    Args:
        resource: the owned object (must not be None)
        name: label used in error messages and log lines
        finalizer: called with the resource when the owner releases it
            (on close(), or when relocate_to() overwrites the destination)
    """

    __slots__ = ("_resource", "_state", "_name", "_finalizer")

    def __init__(
        self,
        resource: T,
        *,
        name: str | None = None,
        finalizer: Finalizer | None = None,
    ) -> None:
        if resource is None:
            raise ValueError("Owner requires a resource, got None")
        self._resource: T | None = resource
        self._state = BorrowState()
        self._name = name
        self._finalizer = finalizer

    @classmethod
    def create(
        cls,
        resource: T,
        *,
        name: str | None = None,
        finalizer: Finalizer | None = None,
    ) -> Owner[T]:
        """Factory: take ownership of *resource* with a zeroed borrow state."""
        return cls(resource, name=name, finalizer=finalizer)

    # --- introspection ---

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def label(self) -> str:
        if self._name is not None:
            return f"Owner {self._name!r}"
        return f"Owner@{id(self):#x}"

    @property
    def state(self) -> BorrowState:
        """A snapshot of the current borrow state (mutating it does nothing)."""
        return self._state.snapshot()

    @property
    def shared_count(self) -> int:
        return self._state.shared_count

    @property
    def exclusive_held(self) -> bool:
        return self._state.exclusive_held

    @property
    def mode(self) -> BorrowMode:
        return self._state.mode

    @property
    def is_empty(self) -> bool:
        """True once the resource was moved out or released."""
        return self._resource is None

    def __bool__(self) -> bool:
        return self._resource is not None

    def __repr__(self) -> str:
        if self._resource is None:
            return f"<{self.label} empty>"
        return f"<{self.label} {self._state.describe()}>"

    # --- borrow bookkeeping ---

    def acquire_shared(self) -> None:
        """Register one shared borrow. Raises if exclusively borrowed."""
        self._require_resource("borrow")
        if self._state.exclusive_held:
            raise BorrowError(
                BorrowErrorKind.ACQUIRE_SHARED_WHILE_EXCLUSIVE,
                f"Cannot borrow {self.label} as shared: it is exclusively borrowed",
            )
        self._state.shared_count += 1
        log.debug("%s: shared borrow acquired (count=%d)",
                  self.label, self._state.shared_count)

    def release_shared(self) -> None:
        if self._state.shared_count <= 0:
            raise BorrowError(
                BorrowErrorKind.RELEASE_UNMATCHED_SHARED_BORROW,
                f"Cannot release a shared borrow of {self.label}: none is held",
            )
        self._state.shared_count -= 1
        log.debug("%s: shared borrow released (count=%d)",
                  self.label, self._state.shared_count)

    def acquire_exclusive(self) -> None:
        """Register the exclusive borrow. Raises if borrowed in any way."""
        self._require_resource("borrow")
        if not self._state.is_free():
            raise BorrowError(
                BorrowErrorKind.ACQUIRE_EXCLUSIVE_WHILE_BORROWED,
                f"Cannot borrow {self.label} exclusively: it is "
                f"{self._state.describe()}",
            )
        self._state.exclusive_held = True
        log.debug("%s: exclusive borrow acquired", self.label)

    def release_exclusive(self) -> None:
        if not self._state.exclusive_held:
            raise BorrowError(
                BorrowErrorKind.RELEASE_UNMATCHED_EXCLUSIVE_BORROW,
                f"Cannot release the exclusive borrow of {self.label}: "
                f"it is not held",
            )
        self._state.exclusive_held = False
        log.debug("%s: exclusive borrow released", self.label)

    def borrow_shared(self) -> SharedBorrow[T]:
        """Return a new shared handle. Use it as a context manager."""
        from borrowguard_lite.ownership.handles import SharedBorrow

        return SharedBorrow(self)

    def borrow_exclusive(self) -> ExclusiveBorrow[T]:
        """Return the exclusive handle. Use it as a context manager."""
        from borrowguard_lite.ownership.handles import ExclusiveBorrow

        return ExclusiveBorrow(self)

    # --- direct access ---

    def read(self) -> T:
        """Direct read access. Allowed alongside shared borrows."""
        resource = self._require_resource("read")
        if self._state.exclusive_held:
            raise BorrowError(
                BorrowErrorKind.DIRECT_READ_ACCESS_WHILE_EXCLUSIVELY_BORROWED,
                f"Cannot read {self.label} directly: it is exclusively borrowed",
            )
        return resource

    def write(self) -> T:
        """Direct mutating access. Only allowed while nothing is borrowed."""
        resource = self._require_resource("write")
        self._check_mutable()
        return resource

    def replace(self, value: T) -> T:
        """Rebind the owned resource to *value* and return the old one.

        Same gate as write(). The old resource is handed back to the
        caller, not finalized.
        """
        resource = self._require_resource("write")
        self._check_mutable()
        if value is None:
            raise ValueError("Owner requires a resource, got None")
        self._resource = value
        return resource

    # --- lifecycle ---

    def close(self) -> None:
        """Release the resource. Raises DESTROY_WHILE_BORROWED if borrowed.

        Closing an empty owner is a no-op. A failed close changes nothing:
        outstanding handles stay valid and the owner can be closed later.
        """
        if self._resource is None:
            return
        if not self._state.is_free():
            raise BorrowError(
                BorrowErrorKind.DESTROY_WHILE_BORROWED,
                f"Cannot close {self.label} while it is {self._state.describe()}",
            )
        resource = self._resource
        self._resource = None
        log.debug("%s: closed", self.label)
        self._finalize(resource, self._finalizer)

    def take(self) -> Owner[T]:
        """Move the resource into a new Owner; this one becomes empty."""
        if not self._state.is_free():
            raise BorrowError(
                BorrowErrorKind.RELOCATE_SOURCE_WHILE_BORROWED,
                f"Cannot move out of {self.label} while it is "
                f"{self._state.describe()}",
            )
        resource = self._require_resource("move out of")
        moved: Owner[T] = type(self)(
            resource, name=self._name, finalizer=self._finalizer,
        )
        self._resource = None
        log.debug("%s: ownership moved to a new owner", self.label)
        return moved

    def relocate_to(self, destination: Owner[T]) -> None:
        """Move the resource into *destination*, releasing what it held.

        The destination is checked before the source. Relocating an owner
        onto itself is a no-op.
        """
        if destination is self:
            return
        if not destination._state.is_free():
            raise BorrowError(
                BorrowErrorKind.RELOCATE_DESTINATION_WHILE_BORROWED,
                f"Cannot move into {destination.label} while it is "
                f"{destination._state.describe()}",
            )
        if not self._state.is_free():
            raise BorrowError(
                BorrowErrorKind.RELOCATE_SOURCE_WHILE_BORROWED,
                f"Cannot move out of {self.label} while it is "
                f"{self._state.describe()}",
            )
        resource = self._require_resource("move out of")
        previous = destination._resource
        previous_finalizer = destination._finalizer

        destination._resource = resource
        destination._finalizer = self._finalizer
        destination._state.reset()
        self._resource = None
        self._state.reset()
        log.debug("%s: ownership moved to %s", self.label, destination.label)

        if previous is not None:
            self._finalize(previous, previous_finalizer)

    def __enter__(self) -> Owner[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
            return
        try:
            self.close()
        except BorrowError as err:
            log.error("%s left open during exception unwinding: %s",
                      self.label, err)

    def __copy__(self) -> Owner[T]:
        raise TypeError(
            "Owner cannot be copied; use take() or relocate_to() to move it"
        )

    def __deepcopy__(self, memo: dict) -> Owner[T]:
        return self.__copy__()

    # --- internals used by the borrow handles ---

    def _peek(self) -> T:
        return self._require_resource("access")

    def _store(self, value: T) -> None:
        if value is None:
            raise ValueError("Owner requires a resource, got None")
        self._require_resource("write")
        self._resource = value

    def _require_resource(self, action: str) -> T:
        if self._resource is None:
            raise BorrowError(
                BorrowErrorKind.USE_OF_EMPTY_OWNER,
                f"Cannot {action} {self.label}: it no longer owns a resource",
            )
        return self._resource

    def _check_mutable(self) -> None:
        if not self._state.is_free():
            raise BorrowError(
                BorrowErrorKind.DIRECT_MUTATING_ACCESS_WHILE_BORROWED,
                f"Cannot access {self.label} for writing: it is "
                f"{self._state.describe()}",
            )

    @staticmethod
    def _finalize(resource: T, finalizer: Finalizer | None) -> None:
        if finalizer is not None:
            finalizer(resource)


def create_owner(
    resource: T,
    *,
    name: str | None = None,
    finalizer: Finalizer | None = None,
) -> Owner[T]:
    """Take ownership of *resource*. Same as Owner.create()."""
    return Owner.create(resource, name=name, finalizer=finalizer)
