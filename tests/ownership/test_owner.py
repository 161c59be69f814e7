"""Tests for Owner: bookkeeping, gated access, close and relocation.

Every failing call is also checked to leave the borrow state untouched.
"""
from __future__ import annotations

import copy
import logging

import pytest

from borrowguard_lite.ownership import (
    BorrowError,
    BorrowErrorKind,
    BorrowMode,
    BorrowState,
    Owner,
    create_owner,
)


def _raises_kind(kind: BorrowErrorKind, func, *args):
    with pytest.raises(BorrowError) as info:
        func(*args)
    assert info.value.kind is kind
    return info.value


# --- construction ---

def test_create_owner():
    owner = Owner.create(42)
    assert owner.read() == 42
    assert owner.state == BorrowState()
    assert owner.mode is BorrowMode.FREE
    assert bool(owner)
    assert not owner.is_empty


def test_create_owner_function():
    owner = create_owner("cfg", name="settings")
    assert owner.name == "settings"
    assert owner.label == "Owner 'settings'"
    assert "not borrowed" in repr(owner)


def test_unnamed_label_uses_identity():
    owner = Owner(1)
    assert owner.name is None
    assert owner.label.startswith("Owner@0x")


def test_none_resource_rejected():
    with pytest.raises(ValueError, match="None"):
        Owner(None)


def test_state_property_is_a_snapshot(owner):
    snap = owner.state
    snap.shared_count = 7
    assert owner.shared_count == 0


# --- shared bookkeeping ---

def test_shared_round_trip(owner):
    before = owner.state
    owner.acquire_shared()
    owner.acquire_shared()
    assert owner.shared_count == 2
    assert owner.mode is BorrowMode.SHARED
    owner.release_shared()
    owner.release_shared()
    assert owner.state == before


def test_acquire_shared_while_exclusive(owner):
    owner.acquire_exclusive()
    before = owner.state
    err = _raises_kind(BorrowErrorKind.ACQUIRE_SHARED_WHILE_EXCLUSIVE,
                       owner.acquire_shared)
    assert "buffer" in str(err)
    assert owner.state == before


def test_release_unmatched_shared(owner):
    _raises_kind(BorrowErrorKind.RELEASE_UNMATCHED_SHARED_BORROW,
                 owner.release_shared)
    assert owner.state == BorrowState()


# --- exclusive bookkeeping ---

def test_exclusive_round_trip(owner):
    owner.acquire_exclusive()
    assert owner.exclusive_held is True
    assert owner.mode is BorrowMode.EXCLUSIVE
    owner.release_exclusive()
    assert owner.state == BorrowState()


def test_acquire_exclusive_while_shared(owner):
    owner.acquire_shared()
    before = owner.state
    with pytest.raises(BorrowError, match="shared-borrowed 1") as info:
        owner.acquire_exclusive()
    assert info.value.kind is BorrowErrorKind.ACQUIRE_EXCLUSIVE_WHILE_BORROWED
    assert owner.state == before


def test_acquire_exclusive_twice(owner):
    owner.acquire_exclusive()
    with pytest.raises(BorrowError, match="exclusively borrowed") as info:
        owner.acquire_exclusive()
    assert info.value.kind is BorrowErrorKind.ACQUIRE_EXCLUSIVE_WHILE_BORROWED
    assert owner.state == BorrowState(exclusive_held=True)


def test_release_unmatched_exclusive(owner):
    _raises_kind(BorrowErrorKind.RELEASE_UNMATCHED_EXCLUSIVE_BORROW,
                 owner.release_exclusive)
    assert owner.state == BorrowState()


# --- direct access ---

def test_read_coexists_with_shared(owner):
    owner.acquire_shared()
    assert owner.read() == [1, 2, 3]


def test_read_blocked_while_exclusive(owner):
    owner.acquire_exclusive()
    _raises_kind(BorrowErrorKind.DIRECT_READ_ACCESS_WHILE_EXCLUSIVELY_BORROWED,
                 owner.read)
    assert owner.state == BorrowState(exclusive_held=True)


def test_write_when_free(owner):
    owner.write().append(4)
    assert owner.read() == [1, 2, 3, 4]


def test_write_blocked_while_shared(owner):
    owner.acquire_shared()
    _raises_kind(BorrowErrorKind.DIRECT_MUTATING_ACCESS_WHILE_BORROWED,
                 owner.write)
    assert owner.shared_count == 1


def test_write_blocked_while_exclusive(owner):
    owner.acquire_exclusive()
    _raises_kind(BorrowErrorKind.DIRECT_MUTATING_ACCESS_WHILE_BORROWED,
                 owner.write)


def test_replace(owner):
    old = owner.replace([9])
    assert old == [1, 2, 3]
    assert owner.read() == [9]


def test_replace_blocked_while_borrowed(owner):
    owner.acquire_shared()
    _raises_kind(BorrowErrorKind.DIRECT_MUTATING_ACCESS_WHILE_BORROWED,
                 owner.replace, [0])
    assert owner.read() == [1, 2, 3]


def test_replace_with_none(owner):
    with pytest.raises(ValueError):
        owner.replace(None)
    assert owner.read() == [1, 2, 3]


# --- close ---

def test_close_runs_finalizer_once():
    released = []
    owner = Owner([1], finalizer=released.append)
    owner.close()
    assert released == [[1]]
    assert owner.is_empty
    assert not owner
    assert "empty" in repr(owner)
    owner.close()
    assert released == [[1]]


def test_close_while_borrowed_changes_nothing():
    released = []
    owner = Owner([1], finalizer=released.append)
    owner.acquire_shared()
    err = _raises_kind(BorrowErrorKind.DESTROY_WHILE_BORROWED, owner.close)
    assert "shared-borrowed 1" in str(err)
    assert owner.shared_count == 1
    assert not owner.is_empty
    assert released == []
    owner.release_shared()
    owner.close()
    assert released == [[1]]


def test_close_while_exclusive(owner):
    owner.acquire_exclusive()
    _raises_kind(BorrowErrorKind.DESTROY_WHILE_BORROWED, owner.close)
    assert owner.exclusive_held


def test_context_manager_closes():
    released = []
    with Owner("res", finalizer=released.append) as owner:
        assert owner.read() == "res"
    assert owner.is_empty
    assert released == ["res"]


def test_context_manager_reports_outstanding_borrow():
    with pytest.raises(BorrowError) as info:
        with Owner(1) as owner:
            handle = owner.borrow_shared()
    assert info.value.kind is BorrowErrorKind.DESTROY_WHILE_BORROWED
    assert handle.is_live
    assert owner.shared_count == 1
    assert not owner.is_empty


def test_context_manager_does_not_mask_exception(caplog):
    with caplog.at_level(logging.ERROR):
        with pytest.raises(RuntimeError, match="boom"):
            with Owner(1, name="guarded") as owner:
                owner.acquire_shared()
                raise RuntimeError("boom")
    assert not owner.is_empty
    assert owner.shared_count == 1
    assert "left open" in caplog.text
    assert "guarded" in caplog.text


def test_context_manager_closes_free_owner_on_exception():
    released = []
    with pytest.raises(KeyError):
        with Owner(1, finalizer=released.append):
            raise KeyError("k")
    assert released == [1]


# --- moves ---

def test_take_moves_resource():
    released = []
    source = Owner([1], name="a", finalizer=released.append)
    moved = source.take()
    assert moved.read() == [1]
    assert moved.name == "a"
    assert moved.state == BorrowState()
    assert source.is_empty
    source.close()
    assert released == []
    moved.close()
    assert released == [[1]]


def test_take_while_borrowed(owner):
    owner.acquire_shared()
    _raises_kind(BorrowErrorKind.RELOCATE_SOURCE_WHILE_BORROWED, owner.take)
    assert owner.shared_count == 1
    assert owner.read() == [1, 2, 3]


def test_empty_owner_refuses_use(owner):
    owner.take()
    for op in [owner.read, owner.write, owner.borrow_shared,
               owner.borrow_exclusive, owner.take,
               owner.acquire_shared, owner.acquire_exclusive]:
        _raises_kind(BorrowErrorKind.USE_OF_EMPTY_OWNER, op)
    assert owner.state == BorrowState()
    owner.close()


def test_relocate_to_releases_destination_resource():
    released = []
    source = Owner([1])
    destination = Owner([2], finalizer=released.append)
    source.relocate_to(destination)
    assert destination.read() == [1]
    assert destination.state == BorrowState()
    assert released == [[2]]
    assert source.is_empty


def test_relocate_carries_source_finalizer():
    released = []
    source = Owner("a", finalizer=released.append)
    destination = Owner("b")
    source.relocate_to(destination)
    destination.close()
    assert released == ["a"]


def test_relocate_into_empty_destination(owner):
    destination = Owner(0)
    destination.take()
    owner.relocate_to(destination)
    assert destination.read() == [1, 2, 3]
    assert owner.is_empty


def test_relocate_source_borrowed(owner):
    destination = Owner(0)
    owner.acquire_shared()
    _raises_kind(BorrowErrorKind.RELOCATE_SOURCE_WHILE_BORROWED,
                 owner.relocate_to, destination)
    assert owner.shared_count == 1
    assert owner.read() == [1, 2, 3]
    assert destination.read() == 0


def test_relocate_destination_borrowed(owner):
    destination = Owner(0)
    destination.acquire_exclusive()
    _raises_kind(BorrowErrorKind.RELOCATE_DESTINATION_WHILE_BORROWED,
                 owner.relocate_to, destination)
    assert destination.exclusive_held
    assert not owner.is_empty


def test_relocate_checks_destination_first(owner):
    destination = Owner(0)
    owner.acquire_shared()
    destination.acquire_shared()
    _raises_kind(BorrowErrorKind.RELOCATE_DESTINATION_WHILE_BORROWED,
                 owner.relocate_to, destination)


def test_relocate_to_self_is_noop(owner):
    owner.relocate_to(owner)
    assert owner.read() == [1, 2, 3]


def test_relocate_from_empty_owner(owner):
    owner.take()
    _raises_kind(BorrowErrorKind.USE_OF_EMPTY_OWNER,
                 owner.relocate_to, Owner(0))


def test_owner_cannot_be_copied(owner):
    with pytest.raises(TypeError, match="take"):
        copy.copy(owner)
    with pytest.raises(TypeError, match="take"):
        copy.deepcopy(owner)
