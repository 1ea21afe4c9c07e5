"""Debug rendering of AST nodes: rich trees, plain-text dumps and JSON dicts."""

import io
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from .ast import IdentifierNode


def _is_node(value: Any) -> bool:
    return is_dataclass(value) and not isinstance(value, type)


def _is_inline(value: Any) -> bool:
    return not _is_node(value) or isinstance(value, IdentifierNode)


def _inline(value: Any) -> str:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, IdentifierNode):
        return value.name
    return repr(value)


def _label(node: Any) -> str:
    parts = [f"[bold]{type(node).__name__}[/bold]"]
    for f in fields(node):
        value = getattr(node, f.name)
        if value is None or value == () or value is False:
            continue
        if _is_inline(value) and not isinstance(value, (tuple, list)):
            parts.append(f"{f.name}={escape(_inline(value))}")
    return " ".join(parts)


def render_tree(node: Any, tree: Tree | None = None) -> Tree:
    """Build a ``rich.tree.Tree`` mirroring the node's structure."""
    branch = Tree(_label(node)) if tree is None else tree.add(_label(node))
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, (tuple, list)):
            if not value:
                continue
            group = branch.add(f"[dim]{f.name}[/dim]")
            for item in value:
                if _is_node(item) and not isinstance(item, IdentifierNode):
                    render_tree(item, group)
                else:
                    group.add(escape(_inline(item)))
        elif _is_node(value) and not isinstance(value, IdentifierNode):
            group = branch.add(f"[dim]{f.name}[/dim]")
            render_tree(value, group)
    return branch


def dump_tree(node: Any, width: int = 100) -> str:
    """Render the tree as plain text."""
    console = Console(file=io.StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(render_tree(node))
    return console.file.getvalue()


def to_dict(node: Any) -> Any:
    """Convert a node to JSON-ready data; each node carries its class name."""
    if isinstance(node, Enum):
        return node.value
    if _is_node(node):
        data = {"node": type(node).__name__}
        for f in fields(node):
            data[f.name] = to_dict(getattr(node, f.name))
        return data
    if isinstance(node, (tuple, list)):
        return [to_dict(item) for item in node]
    return node
