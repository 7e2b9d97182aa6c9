"""Animation routers: named callables or restricted inline lambdas.

Inline routers are zero-argument Python lambdas such as ``lambda: "idle"``.
The source is checked against a whitelist of constant expression nodes and
evaluated without builtins: it cannot name variables, read attributes or
call functions, so it never sees the entity it is attached to. Routers that
need the entity are registered by name on the loader instead.
"""

from __future__ import annotations

import ast
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from xmlforge.errors import DefinitionError

if TYPE_CHECKING:
    from lxml.etree import _Element

_ALLOWED_NODES: tuple[type[ast.AST], ...] = (
    ast.Expression,
    ast.Lambda,
    ast.arguments,
    ast.arg,
    ast.Constant,
    ast.Load,
    ast.IfExp,
    ast.Compare,
    ast.BoolOp,
    ast.UnaryOp,
    ast.BinOp,
    ast.Tuple,
    ast.List,
    ast.And,
    ast.Or,
    ast.Not,
    ast.USub,
    ast.Add,
    ast.Sub,
    ast.Div,
    ast.Eq,
    ast.NotEq,
    ast.Lt,
    ast.LtE,
    ast.Gt,
    ast.GtE,
    ast.In,
    ast.NotIn,
    ast.Is,
    ast.IsNot,
)


@dataclass(frozen=True)
class AnimationRouter:
    """Selects an animation name; ``takes_host`` routers receive the entity."""

    func: Callable[..., str]
    takes_host: bool

    def bind(self, host: Any) -> Callable[[], str]:
        if self.takes_host:
            return lambda: self.func(host)
        return self.func


def compile_inline_router(source: str, *, node: _Element | None = None) -> AnimationRouter:
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        msg = f"Invalid animation router: {exc.msg}"
        raise DefinitionError(msg, node=node) from None

    lambda_node = tree.body
    if not isinstance(lambda_node, ast.Lambda):
        msg = "Animation router must be a lambda expression"
        raise DefinitionError(msg, node=node)

    arguments = lambda_node.args
    if (
        arguments.posonlyargs
        or arguments.vararg
        or arguments.kwonlyargs
        or arguments.kwarg
        or arguments.defaults
        or arguments.args
    ):
        msg = "Inline animation router takes no arguments"
        raise DefinitionError(msg, node=node)

    for child in ast.walk(tree):
        if not isinstance(child, _ALLOWED_NODES):
            msg = f"Animation router may not contain {type(child).__name__}"
            raise DefinitionError(msg, node=node)

    code = compile(tree, "<animation-router>", "eval")
    func = eval(code, {"__builtins__": {}}, {})  # noqa: S307
    return AnimationRouter(func=func, takes_host=False)


def named_router(func: Callable[..., str]) -> AnimationRouter:
    """Wrap a registered router; callables with a parameter receive the entity."""
    try:
        takes_host = bool(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        takes_host = False
    return AnimationRouter(func=func, takes_host=takes_host)
