"""
AST nodes for templates.

The tree exists in two phases:

- unresolved: straight out of the parser, may still reference other files
  through Include / Extends nodes;
- resolved: produced only by the resolver, file references are inlined and
  Extends has become a Base wrapper.

Container nodes are generic over the type of their children, and the two
phase aliases (UnresolvedNode / ResolvedNode) list which variants each phase
admits. Include and Extends are absent from ResolvedNode, so a type checker
rejects a file reference anywhere in a resolved tree; Template additionally
verifies this at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from .expr import Expression, expr_to_dict

N = TypeVar("N")


@dataclass(frozen=True)
class TemplateNode:
    """Base class for all template AST nodes."""

    def __str__(self) -> str:
        return self._to_source()

    def _to_source(self) -> str:
        raise NotImplementedError


def _join(nodes: Iterable[TemplateNode]) -> str:
    return "".join(str(n) for n in nodes)


def _quote(path: str) -> str:
    return f"'{path}'" if '"' in path else f'"{path}"'


# ---- Phase-independent leaves ----

@dataclass(frozen=True)
class Literal(TemplateNode):
    """Raw output text."""
    text: str

    def _to_source(self) -> str:
        return self.text


@dataclass(frozen=True)
class Eval(TemplateNode):
    """Expression to substitute: {{ expr }}"""
    expr: Expression

    def _to_source(self) -> str:
        return f"{{{{ {self.expr} }}}}"


@dataclass(frozen=True)
class Raw(TemplateNode):
    """Verbatim text from {% raw %}...{% endraw %}."""
    text: str

    def _to_source(self) -> str:
        return f"{{% raw %}}{self.text}{{% endraw %}}"


@dataclass(frozen=True)
class Super(TemplateNode):
    """Placeholder for the parent block's body: {{ super() }}"""

    def _to_source(self) -> str:
        return "{{ super() }}"


@dataclass(frozen=True)
class Comment(TemplateNode):
    """Template comment, kept for fidelity and never rendered."""
    text: str

    def _to_source(self) -> str:
        return f"{{#{self.text}#}}"


# ---- Containers (generic over the phase of their children) ----

@dataclass(frozen=True)
class Condition(TemplateNode, Generic[N]):
    """{% if cond %}then{% else %}else_body{% endif %}"""
    cond: Expression
    then: Tuple[N, ...]
    else_body: Optional[Tuple[N, ...]] = None

    def _to_source(self) -> str:
        out = f"{{% if {self.cond} %}}{_join(self.then)}"
        if self.else_body is not None:
            out += f"{{% else %}}{_join(self.else_body)}"
        return out + "{% endif %}"


@dataclass(frozen=True)
class Foreach(TemplateNode, Generic[N]):
    """{% for binder in iterable %}body{% else %}else_body{% endfor %}"""
    binder: str
    iterable: Expression
    body: Tuple[N, ...]
    else_body: Optional[Tuple[N, ...]] = None

    def _to_source(self) -> str:
        out = f"{{% for {self.binder} in {self.iterable} %}}{_join(self.body)}"
        if self.else_body is not None:
            out += f"{{% else %}}{_join(self.else_body)}"
        return out + "{% endfor %}"


@dataclass(frozen=True)
class Block(TemplateNode, Generic[N]):
    """
    Named overridable region: {% block name %}body{% endblock %}

    defined_in_base records whether the declaring file had not (yet) declared
    itself a child via extends when the block was opened. The parser never
    produces scoped=True; the flag exists for the renderer and is printed.
    """
    defined_in_base: bool
    name: str
    scoped: bool
    body: Tuple[N, ...]

    def _to_source(self) -> str:
        scoped = " scoped" if self.scoped else ""
        return f"{{% block {self.name}{scoped} %}}{_join(self.body)}{{% endblock %}}"


# ---- Unresolved-only ----

@dataclass(frozen=True)
class Include(TemplateNode):
    """Reference to another file spliced in place: {% include "path" %}"""
    path: str

    def _to_source(self) -> str:
        return f"{{% include {_quote(self.path)} %}}"


@dataclass(frozen=True)
class Extends(TemplateNode):
    """Marks the file as a child of the template at path: {% extends "path" %}"""
    path: str

    def _to_source(self) -> str:
        return f"{{% extends {_quote(self.path)} %}}"


# ---- Resolved-only ----

@dataclass(frozen=True)
class Base(TemplateNode):
    """Fully resolved parent template content that replaced an Extends node."""
    body: Tuple["ResolvedNode", ...]

    def _to_source(self) -> str:
        return _join(self.body)


UnresolvedNode = Union[
    Literal, Eval, "Condition[UnresolvedNode]", "Foreach[UnresolvedNode]",
    Include, Raw, Extends, "Block[UnresolvedNode]", Super, Comment,
]

ResolvedNode = Union[
    Literal, Eval, "Condition[ResolvedNode]", "Foreach[ResolvedNode]",
    Raw, Base, "Block[ResolvedNode]", Super, Comment,
]

UnresolvedAST = Tuple[UnresolvedNode, ...]
ResolvedAST = Tuple[ResolvedNode, ...]


def children(node: TemplateNode) -> List[Tuple[str, Tuple[TemplateNode, ...]]]:
    """Named child sequences of a node (empty for leaves)."""
    if isinstance(node, Condition):
        out = [("then", node.then)]
        if node.else_body is not None:
            out.append(("else", node.else_body))
        return out
    if isinstance(node, Foreach):
        out = [("body", node.body)]
        if node.else_body is not None:
            out.append(("else", node.else_body))
        return out
    if isinstance(node, (Block, Base)):
        return [("body", node.body)]
    return []


def walk(nodes: Iterable[TemplateNode]) -> Iterator[TemplateNode]:
    """Depth-first pre-order traversal of a node sequence."""
    for node in nodes:
        yield node
        for _, seq in children(node):
            yield from walk(seq)


@dataclass(frozen=True)
class Template:
    """
    Fully resolved template.

    base is the root ancestor's node sequence; child collects the trailing
    top-level nodes of every descendant in the extends chain, root side first.
    """
    base: ResolvedAST
    child: ResolvedAST = ()

    def __post_init__(self):
        for node in walk(tuple(self.base) + tuple(self.child)):
            if isinstance(node, (Include, Extends)):
                raise TypeError(f"Unresolved {type(node).__name__} node in resolved template")


def render_source(nodes: Iterable[TemplateNode]) -> str:
    """Canonical surface syntax of a node sequence."""
    return _join(nodes)


# ---- Debug and serialization helpers ----

def _preview(text: str, limit: int) -> str:
    return repr(text[:limit] + "..." if len(text) > limit else text)


def format_ast_tree(nodes: Sequence[TemplateNode], indent: int = 0) -> str:
    """Formats an AST as an indented tree for debugging."""
    lines = []
    prefix = "  " * indent

    for node in nodes:
        if isinstance(node, Literal):
            lines.append(f"{prefix}Literal({_preview(node.text, 50)})")
        elif isinstance(node, Raw):
            lines.append(f"{prefix}Raw({_preview(node.text, 30)})")
        elif isinstance(node, Comment):
            lines.append(f"{prefix}Comment({_preview(node.text, 30)})")
        elif isinstance(node, Eval):
            lines.append(f"{prefix}Eval({node.expr})")
        elif isinstance(node, Condition):
            lines.append(f"{prefix}Condition({node.cond})")
        elif isinstance(node, Foreach):
            lines.append(f"{prefix}Foreach({node.binder} in {node.iterable})")
        elif isinstance(node, Block):
            origin = "base" if node.defined_in_base else "child"
            lines.append(f"{prefix}Block({node.name}, {origin})")
        elif isinstance(node, (Include, Extends)):
            lines.append(f"{prefix}{type(node).__name__}({node.path!r})")
        else:
            lines.append(f"{prefix}{type(node).__name__}")

        for label, seq in children(node):
            lines.append(f"{prefix}  {label}:")
            if seq:
                lines.append(format_ast_tree(seq, indent + 2))

    return "\n".join(lines)


def node_to_dict(node: TemplateNode) -> Dict[str, Any]:
    """JSON-ready representation of a node."""
    data: Dict[str, Any] = {"type": type(node).__name__}
    if isinstance(node, (Literal, Raw, Comment)):
        data["text"] = node.text
    elif isinstance(node, Eval):
        data["expr"] = expr_to_dict(node.expr)
    elif isinstance(node, Condition):
        data["cond"] = expr_to_dict(node.cond)
    elif isinstance(node, Foreach):
        data["binder"] = node.binder
        data["iterable"] = expr_to_dict(node.iterable)
    elif isinstance(node, Block):
        data["name"] = node.name
        data["defined_in_base"] = node.defined_in_base
        data["scoped"] = node.scoped
    elif isinstance(node, (Include, Extends)):
        data["path"] = node.path

    if isinstance(node, (Condition, Foreach)):
        first, rest = ("then", "else_body") if isinstance(node, Condition) else ("body", "else_body")
        data[first] = dump_nodes(getattr(node, first))
        data[rest] = None if node.else_body is None else dump_nodes(node.else_body)
    elif isinstance(node, (Block, Base)):
        data["body"] = dump_nodes(node.body)
    return data


def dump_nodes(nodes: Iterable[TemplateNode]) -> List[Dict[str, Any]]:
    return [node_to_dict(n) for n in nodes]


def dump_template(template: Template) -> Dict[str, Any]:
    return {"base": dump_nodes(template.base), "child": dump_nodes(template.child)}


__all__ = [
    "TemplateNode",
    "Literal", "Eval", "Condition", "Foreach", "Include", "Raw", "Extends",
    "Base", "Block", "Super", "Comment",
    "UnresolvedNode", "ResolvedNode", "UnresolvedAST", "ResolvedAST",
    "Template",
    "children", "walk", "render_source",
    "format_ast_tree", "node_to_dict", "dump_nodes", "dump_template",
]
