"""
Cross-file resolution for templates.

Turns an unresolved node sequence into a resolved one by loading the files
named in include/extends directives (recursively), then flattens an
inheritance chain into a single Template(base, child).

Resolution stack:
- every file being resolved is pushed on a stack keyed by its absolute path;
- re-entering a file already on the stack is a reference cycle and raises
  TemplateCycleError (unless cycle detection is disabled);
- the same file used twice side by side is not a cycle.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .loader import TemplateLoader
from .nodes import (
    Base, Block, Condition, Extends, Foreach, Include, ResolvedAST, ResolvedNode,
    Template, UnresolvedAST, UnresolvedNode,
)
from .parser import parse_template
from ..errors import TemplateCycleError

logger = logging.getLogger(__name__)


def to_template(nodes: ResolvedAST) -> Template:
    """
    Flattens a resolved top-level sequence into Template(base, child).

    Only a leading Base node is peeled: its body is flattened recursively and
    the siblings after it are appended to the resulting child sequence, so
    child lists the trailing nodes of each layer from the root outward.

    A Base holds the parent's whole resolved sequence, not just the base of
    its flattened form, so in chains of three or more files the overrides of
    intermediate layers stay in child. For two files both forms agree.
    """
    nodes = tuple(nodes)
    if nodes and isinstance(nodes[0], Base):
        parent = to_template(nodes[0].body)
        return Template(base=parent.base, child=parent.child + nodes[1:])
    return Template(base=nodes, child=())


class TemplateResolver:
    """
    Resolver for include/extends references.

    Holds no state between files apart from the resolution stack used for
    cycle detection; nothing is cached, so the result always reflects the
    files on disk at call time.
    """

    def __init__(self, loader: TemplateLoader, detect_cycles: bool = True):
        """
        Args:
            loader: Reads template files
            detect_cycles: Raise TemplateCycleError on circular references
                instead of recursing without bound
        """
        self.loader = loader
        self.detect_cycles = detect_cycles
        self._resolution_stack: List[Tuple[str, str]] = []

    # ---- Entry points ----

    def load(self, name: str) -> Template:
        """Loads a root template: read, parse, resolve, flatten."""
        return to_template(self._resolve_file(name, "template"))

    def load_include(self, name: str) -> ResolvedAST:
        """
        Loads an include target.

        The file is resolved like any template, but only the base portion of
        its flattened form is spliced into the including file.
        """
        return to_template(self._resolve_file(name, "include")).base

    def resolve_nodes(self, nodes: Iterable[UnresolvedNode]) -> ResolvedAST:
        resolved: List[ResolvedNode] = []
        for node in nodes:
            resolved.extend(self._resolve_node(node))
        return tuple(resolved)

    # ---- Internals ----

    def _resolve_file(self, name: str, kind: str) -> ResolvedAST:
        key = self.loader.key(name)

        if self.detect_cycles and any(k == key for k, _ in self._resolution_stack):
            start = next(i for i, (k, _) in enumerate(self._resolution_stack) if k == key)
            cycle = [n for _, n in self._resolution_stack[start:]] + [name]
            raise TemplateCycleError(cycle=cycle)

        if kind == "include":
            text = self.loader.load_include(name)
        else:
            text = self.loader.load_root(name, kind)

        self._resolution_stack.append((key, name))
        try:
            ast = parse_template(text, path=name)
            logger.debug("Parsed %s '%s': %d top-level nodes", kind, name, len(ast))
            return self.resolve_nodes(ast)
        finally:
            self._resolution_stack.pop()

    def _resolve_node(self, node: UnresolvedNode) -> List[ResolvedNode]:
        if isinstance(node, Include):
            logger.debug("Resolving include '%s'", node.path)
            return list(self.load_include(node.path))

        if isinstance(node, Extends):
            logger.debug("Resolving extends '%s'", node.path)
            # Unflattened parent sequence; to_template peels nested Base wrappers
            return [Base(self._resolve_file(node.path, "extends"))]

        if isinstance(node, Condition):
            else_body = None if node.else_body is None else self.resolve_nodes(node.else_body)
            return [Condition(node.cond, self.resolve_nodes(node.then), else_body)]

        if isinstance(node, Foreach):
            else_body = None if node.else_body is None else self.resolve_nodes(node.else_body)
            return [Foreach(node.binder, node.iterable, self.resolve_nodes(node.body), else_body)]

        if isinstance(node, Block):
            return [Block(node.defined_in_base, node.name, node.scoped, self.resolve_nodes(node.body))]

        # Literal, Eval, Raw, Super, Comment carry no file references
        return [node]


def parse_file(
    name: str,
    root: Union[str, Path, None] = None,
    encoding: str = "utf-8",
    detect_cycles: bool = True,
) -> Template:
    """
    Parses a template file with everything it includes or extends.

    Args:
        name: Template path, relative to root
        root: Directory against which all template paths are resolved
            (current directory by default)
        encoding: Encoding of template files
        detect_cycles: Fail on circular include/extends chains

    Raises:
        TemplateSyntaxError, TemplateReferenceError, TemplateCycleError
    """
    resolver = TemplateResolver(TemplateLoader(root, encoding), detect_cycles)
    return resolver.load(name)


def parse_string(text: str, loader: Optional[TemplateLoader] = None, detect_cycles: bool = True) -> Template:
    """
    Parses in-memory template text; referenced files are read through loader.

    The text itself is not normalized.
    """
    resolver = TemplateResolver(loader or TemplateLoader(), detect_cycles)
    ast: UnresolvedAST = parse_template(text)
    return to_template(resolver.resolve_nodes(ast))


__all__ = ["TemplateResolver", "to_template", "parse_file", "parse_string"]
