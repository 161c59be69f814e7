"""Naming convention the advisory checker pattern-matches against.

The checker has no type information. It recognises owners and borrows
purely by the names used in the source, so projects that wrap or rename
the runtime API can teach it their names here.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CheckerConfig:
    # Calls that construct an owner: Owner(...), Owner.create(...), pkg.Owner(...)
    owner_types: frozenset[str] = frozenset({"Owner"})
    # Plain factory functions returning an owner: create_owner(...)
    owner_factories: frozenset[str] = frozenset({"create_owner"})
    shared_methods: frozenset[str] = frozenset({"borrow_shared"})
    exclusive_methods: frozenset[str] = frozenset({"borrow_exclusive"})
    # owner.take() moves the resource into the assignment target
    take_methods: frozenset[str] = frozenset({"take"})
    # src.relocate_to(dst) moves the resource from src into dst
    relocate_methods: frozenset[str] = frozenset({"relocate_to"})
    # handle.release() ends a borrow before its scope does
    release_methods: frozenset[str] = frozenset({"release"})
    report_untracked: bool = False

    def with_names(
        self,
        owner_types: list[str] | None = None,
        shared_methods: list[str] | None = None,
        exclusive_methods: list[str] | None = None,
    ) -> CheckerConfig:
        """Return a copy with extra names added to the given sets."""
        return CheckerConfig(
            owner_types=self.owner_types | frozenset(owner_types or ()),
            owner_factories=self.owner_factories,
            shared_methods=self.shared_methods | frozenset(shared_methods or ()),
            exclusive_methods=(
                self.exclusive_methods | frozenset(exclusive_methods or ())
            ),
            take_methods=self.take_methods,
            relocate_methods=self.relocate_methods,
            release_methods=self.release_methods,
            report_untracked=self.report_untracked,
        )
