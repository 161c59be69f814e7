"""Per-unit analysis state for the advisory borrow checker.

BorrowContext approximates each owner's BorrowState while the visitor
walks one module. It is deliberately conservative and purely lexical:

  - An owner is identified by its *declaration*: the name plus the
    line/column where it was bound. Rebinding the same name creates a
    new declaration; the old one is no longer reachable by name.
  - Entering a scope (function, lambda, class body, ``with`` block)
    snapshots the whole table. Leaving the scope restores the snapshot,
    which drops every borrow and declaration made inside it. That is the
    approximation of "handles are released when their scope ends".
  - A borrow bound to a name can be ended early with ``name.release()``.

One context is built per analysed unit and thrown away afterwards, so
nothing leaks between files.
"""
from __future__ import annotations

import ast
from dataclasses import dataclass, field

from borrowguard_lite.checker import diagnostics as codes
from borrowguard_lite.checker.diagnostics import Diagnostic, Severity

DeclKey = tuple[str, int, int]


@dataclass(slots=True)
class StaticBorrowState:
    exclusive: bool = False
    shared: int = 0
    moved: bool = False

    def copy(self) -> StaticBorrowState:
        return StaticBorrowState(self.exclusive, self.shared, self.moved)


@dataclass(frozen=True, slots=True)
class HandleBinding:
    owner_key: DeclKey
    exclusive: bool


@dataclass(slots=True)
class _Frame:
    bindings: dict[str, DeclKey] = field(default_factory=dict)
    states: dict[DeclKey, StaticBorrowState] = field(default_factory=dict)
    handles: dict[str, HandleBinding] = field(default_factory=dict)

    def copy(self) -> _Frame:
        return _Frame(
            bindings=dict(self.bindings),
            states={k: s.copy() for k, s in self.states.items()},
            handles=dict(self.handles),
        )


class BorrowContext:
    """Symbol table plus collected diagnostics for one source unit."""

    def __init__(self, path: str, report_untracked: bool = False) -> None:
        self.path = path
        self.report_untracked = report_untracked
        self.diagnostics: list[Diagnostic] = []
        self._current = _Frame()
        self._stack: list[_Frame] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter_scope(self) -> None:
        self._stack.append(self._current.copy())

    def exit_scope(self) -> None:
        if self._stack:
            self._current = self._stack.pop()

    # --- declarations ---

    def track(self, name: str, node: ast.AST) -> DeclKey:
        """Start tracking *name* as a freshly constructed owner."""
        key: DeclKey = (name, getattr(node, "lineno", 0), getattr(node, "col_offset", 0))
        self._current.bindings[name] = key
        self._current.states[key] = StaticBorrowState()
        self._current.handles.pop(name, None)
        return key

    def forget(self, name: str) -> None:
        """*name* was rebound to something that is not an owner or handle."""
        self._current.bindings.pop(name, None)
        self._current.handles.pop(name, None)

    def lookup(self, name: str) -> DeclKey | None:
        return self._current.bindings.get(name)

    def state_of(self, name: str) -> StaticBorrowState | None:
        key = self.lookup(name)
        if key is None:
            return None
        return self._current.states.get(key)

    def is_tracked(self, name: str) -> bool:
        return name in self._current.bindings

    # --- borrows ---

    def record_shared(self, name: str, node: ast.AST) -> DeclKey | None:
        state = self._usable_state(name, node)
        if state is None:
            return None
        state.shared += 1
        if state.exclusive:
            self.report(
                node, Severity.ERROR, codes.SHARED_WHILE_EXCLUSIVE,
                f"Cannot borrow '{name}' as shared while it is exclusively borrowed",
            )
        return self.lookup(name)

    def record_exclusive(self, name: str, node: ast.AST) -> DeclKey | None:
        state = self._usable_state(name, node)
        if state is None:
            return None
        if state.shared > 0:
            self.report(
                node, Severity.ERROR, codes.EXCLUSIVE_WHILE_SHARED,
                f"Cannot borrow '{name}' exclusively while it is shared-borrowed",
            )
        elif state.exclusive:
            self.report(
                node, Severity.ERROR, codes.EXCLUSIVE_WHILE_EXCLUSIVE,
                f"Cannot borrow '{name}' exclusively while it is already "
                f"exclusively borrowed",
            )
        state.exclusive = True
        return self.lookup(name)

    def record_move(self, name: str, node: ast.AST) -> None:
        """Mark *name* as moved out."""
        state = self._usable_state(name, node)
        if state is None:
            return
        if state.shared > 0 or state.exclusive:
            self.report(
                node, Severity.ERROR, codes.MOVE_WHILE_BORROWED,
                f"Cannot move out of '{name}' while it is borrowed",
            )
        state.moved = True

    def record_move_into(self, name: str, node: ast.AST) -> None:
        state = self.state_of(name)
        if state is None:
            return
        if state.shared > 0 or state.exclusive:
            self.report(
                node, Severity.ERROR, codes.MOVE_WHILE_BORROWED,
                f"Cannot move into '{name}' while it is borrowed",
            )
            return
        state.moved = False

    def bind_handle(self, name: str, owner_key: DeclKey, exclusive: bool) -> None:
        self._current.bindings.pop(name, None)
        self._current.handles[name] = HandleBinding(owner_key, exclusive)

    def release_handle(self, name: str) -> None:
        handle = self._current.handles.pop(name, None)
        if handle is None:
            return
        state = self._current.states.get(handle.owner_key)
        if state is None:
            return
        if handle.exclusive:
            state.exclusive = False
        elif state.shared > 0:
            state.shared -= 1

    # --- reporting ---

    def report(self, node: ast.AST, severity: Severity, code: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(
            path=self.path,
            line=getattr(node, "lineno", 1),
            col=getattr(node, "col_offset", 0) + 1,
            severity=severity,
            code=code,
            message=message,
        ))

    def _usable_state(self, name: str, node: ast.AST) -> StaticBorrowState | None:
        state = self.state_of(name)
        if state is None:
            if self.report_untracked:
                self.report(
                    node, Severity.NOTE, codes.UNTRACKED_BORROW,
                    f"Variable '{name}' is not being tracked",
                )
            return None
        if state.moved:
            self.report(
                node, Severity.ERROR, codes.USE_AFTER_MOVE,
                f"Use of '{name}' after its ownership was moved",
            )
            return None
        return state
