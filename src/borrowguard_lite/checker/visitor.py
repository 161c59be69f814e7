"""Advisory, best-effort borrow checking of Python source.

The runtime model in borrowguard_lite.ownership catches every violation
when it happens. This module tries to spot the obvious ones earlier, by
reading the source without running it:

    o = Owner(data)
    r = o.borrow_shared()
    w = o.borrow_exclusive()     # BG002: exclusive while shared-borrowed

It only knows what the naming convention in CheckerConfig tells it: a
call of an owner type bound to a variable starts tracking that variable,
and calls of the borrow methods on a tracked variable count as borrows.
Scoping is approximated lexically (see context.py). Findings are
diagnostics only; nothing here affects how the checked program runs,
and a clean report proves nothing.
"""
from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Iterable, Iterator

from borrowguard_lite.checker import diagnostics as codes
from borrowguard_lite.checker.config import CheckerConfig
from borrowguard_lite.checker.context import BorrowContext
from borrowguard_lite.checker.diagnostics import Diagnostic, Severity

log = logging.getLogger(__name__)


def _terminal_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _method_call(node: ast.expr) -> tuple[str, str] | None:
    """Return (receiver, method) for calls shaped like ``name.method(...)``."""
    if not isinstance(node, ast.Call):
        return None
    func = node.func
    if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
        return func.value.id, func.attr
    return None


class BorrowCheckVisitor(ast.NodeVisitor):
    """Walks one module, feeding owner and borrow events into a context."""

    def __init__(self, context: BorrowContext, config: CheckerConfig | None = None) -> None:
        self.context = context
        self.config = config or CheckerConfig()

    # --- scopes ---

    def visit_FunctionDef(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        for decorator in node.decorator_list:
            self.visit(decorator)
        self._visit_defaults(node.args)
        self.context.enter_scope()
        self._forget_args(node.args)
        for stmt in node.body:
            self.visit(stmt)
        self.context.exit_scope()

    visit_AsyncFunctionDef = visit_FunctionDef

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self._visit_defaults(node.args)
        self.context.enter_scope()
        self._forget_args(node.args)
        self.visit(node.body)
        self.context.exit_scope()

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        for expr in [*node.decorator_list, *node.bases]:
            self.visit(expr)
        for keyword in node.keywords:
            self.visit(keyword.value)
        self.context.enter_scope()
        for stmt in node.body:
            self.visit(stmt)
        self.context.exit_scope()

    def visit_With(self, node: ast.With | ast.AsyncWith) -> None:
        self.context.enter_scope()
        for item in node.items:
            self.visit(item.context_expr)
            if item.optional_vars is not None:
                self._bind(item.optional_vars, item.context_expr)
        for stmt in node.body:
            self.visit(stmt)
        self.context.exit_scope()

    visit_AsyncWith = visit_With

    # --- bindings ---

    def visit_Assign(self, node: ast.Assign) -> None:
        self.visit(node.value)
        for target in node.targets:
            self._bind(target, node.value)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if node.value is None:
            return
        self.visit(node.value)
        self._bind(node.target, node.value)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        self.visit(node.value)
        self._forget_names(node.target)

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self.visit(node.value)
        self._bind(node.target, node.value)

    def visit_For(self, node: ast.For | ast.AsyncFor) -> None:
        self.visit(node.iter)
        self._forget_names(node.target)
        for stmt in [*node.body, *node.orelse]:
            self.visit(stmt)

    visit_AsyncFor = visit_For

    def visit_Delete(self, node: ast.Delete) -> None:
        for target in node.targets:
            self._forget_names(target)

    # --- borrow events ---

    def visit_Call(self, node: ast.Call) -> None:
        call = _method_call(node)
        if call is not None:
            self._record_method_call(call[0], call[1], node)
        self.generic_visit(node)

    def _record_method_call(self, receiver: str, method: str, node: ast.Call) -> None:
        cfg = self.config
        ctx = self.context
        if method in cfg.shared_methods:
            ctx.record_shared(receiver, node)
        elif method in cfg.exclusive_methods:
            ctx.record_exclusive(receiver, node)
        elif method in cfg.take_methods:
            if ctx.is_tracked(receiver):
                ctx.record_move(receiver, node)
        elif method in cfg.relocate_methods:
            if ctx.is_tracked(receiver):
                if node.args and isinstance(node.args[0], ast.Name):
                    ctx.record_move_into(node.args[0].id, node)
                ctx.record_move(receiver, node)
        elif method in cfg.release_methods:
            ctx.release_handle(receiver)

    # --- helpers ---

    def _bind(self, target: ast.expr, value: ast.expr) -> None:
        if isinstance(target, ast.Name):
            self._bind_name(target.id, target, value)
        elif isinstance(target, (ast.Tuple, ast.List, ast.Starred)):
            self._forget_names(target)
        # attribute and subscript targets rebind no variable

    def _bind_name(self, name: str, target: ast.Name, value: ast.expr) -> None:
        ctx = self.context
        cfg = self.config
        if self._is_owner_construction(value):
            ctx.track(name, target)
            return
        call = _method_call(value)
        if call is not None:
            receiver, method = call
            if method in cfg.take_methods and ctx.is_tracked(receiver):
                ctx.track(name, target)
                return
            if method in cfg.shared_methods or method in cfg.exclusive_methods:
                key = ctx.lookup(receiver)
                state = ctx.state_of(receiver)
                if key is not None and state is not None and not state.moved:
                    ctx.bind_handle(name, key, method in cfg.exclusive_methods)
                    return
        ctx.forget(name)

    def _is_owner_construction(self, value: ast.expr) -> bool:
        if not isinstance(value, ast.Call):
            return False
        cfg = self.config
        func = value.func
        name = _terminal_name(func)
        if name in cfg.owner_types or name in cfg.owner_factories:
            return True
        # Owner.create(...) / pkg.Owner.create(...)
        return (
            isinstance(func, ast.Attribute)
            and func.attr == "create"
            and _terminal_name(func.value) in cfg.owner_types
        )

    def _forget_names(self, target: ast.AST) -> None:
        for node in ast.walk(target):
            if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
                self.context.forget(node.id)

    def _forget_args(self, args: ast.arguments) -> None:
        params = [*args.posonlyargs, *args.args, *args.kwonlyargs]
        if args.vararg is not None:
            params.append(args.vararg)
        if args.kwarg is not None:
            params.append(args.kwarg)
        for param in params:
            self.context.forget(param.arg)

    def _visit_defaults(self, args: ast.arguments) -> None:
        for default in args.defaults:
            self.visit(default)
        for default in args.kw_defaults:
            if default is not None:
                self.visit(default)


def check_source(
    source: str | bytes,
    path: str = "<string>",
    config: CheckerConfig | None = None,
) -> list[Diagnostic]:
    """Check one module's source. Never raises on bad input.

    Bytes are decoded by the parser, honouring any PEP 263 coding line.
    """
    config = config or CheckerConfig()
    try:
        tree = ast.parse(source, filename=path)
    except SyntaxError as err:
        return [Diagnostic(
            path=path,
            line=err.lineno or 1,
            col=err.offset or 1,
            severity=Severity.ERROR,
            code=codes.PARSE_FAILURE,
            message=f"Cannot parse source: {err.msg}",
        )]
    context = BorrowContext(path, report_untracked=config.report_untracked)
    BorrowCheckVisitor(context, config).visit(tree)
    log.debug("%s: %d diagnostic(s)", path, len(context.diagnostics))
    return context.diagnostics


def check_file(path: str | Path, config: CheckerConfig | None = None) -> list[Diagnostic]:
    path = Path(path)
    try:
        source = path.read_bytes()
    except OSError as err:
        log.warning("Cannot read %s: %s", path, err)
        return [Diagnostic(
            path=str(path),
            line=1,
            col=1,
            severity=Severity.ERROR,
            code=codes.PARSE_FAILURE,
            message=f"Cannot read file: {err}",
        )]
    return check_source(source, str(path), config)


def iter_python_files(paths: Iterable[str | Path]) -> Iterator[Path]:
    """Expand directories into the ``*.py`` files below them."""
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            yield from sorted(path.rglob("*.py"))
        else:
            yield path


def check_paths(
    paths: Iterable[str | Path],
    config: CheckerConfig | None = None,
) -> list[Diagnostic]:
    results: list[Diagnostic] = []
    for path in iter_python_files(paths):
        results.extend(check_file(path, config))
    return results
